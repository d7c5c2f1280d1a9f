"""Shared test fixtures for omnisearch.

Provides zero-latency settings, small catalogs and a result builder so
individual test modules stay focused on behaviour instead of setup.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

import pytest

from omnisearch.config.settings import HealthSettings, Settings, SimulationSettings
from omnisearch.connectors.base import ConnectorConfig
from omnisearch.models import SearchResult, Tool, utcnow

# ---------------------------------------------------------------------------
# Settings fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sim_settings() -> SimulationSettings:
    """Simulation with no latency, no random failures and a fixed seed."""
    return SimulationSettings(
        connect_delay_min_ms=0,
        connect_delay_max_ms=0,
        search_delay_min_ms=0,
        search_delay_max_ms=0,
        sync_delay_min_ms=0,
        sync_delay_max_ms=0,
        disconnect_delay_ms=0,
        failure_rate=0.0,
        seed=1234,
    )


@pytest.fixture()
def fast_settings(sim_settings: SimulationSettings) -> Settings:
    """Engine settings with short timeouts suitable for unit tests."""
    return Settings(
        simulation=sim_settings,
        health=HealthSettings(
            interval_seconds=30.0,
            probe_timeout_seconds=0.2,
            slow_probe_threshold_ms=5000.0,
        ),
        connect_timeout_seconds=0.2,
        search_timeout_seconds=0.2,
        sync_timeout_seconds=0.2,
    )


# ---------------------------------------------------------------------------
# Catalog fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def alpha_tool() -> Tool:
    return Tool("alpha", "Alpha", "productivity", True, "Generic simulated tool")


@pytest.fixture()
def small_catalog(alpha_tool: Tool) -> tuple[Tool, ...]:
    """Three simulated tools: one generic, two with dedicated connectors."""
    return (
        alpha_tool,
        Tool("slack", "Slack", "communication"),
        Tool("jira", "Jira", "project-management"),
    )


@pytest.fixture()
def alpha_config(alpha_tool: Tool) -> ConnectorConfig:
    return ConnectorConfig(tool=alpha_tool, seed=7)


# ---------------------------------------------------------------------------
# Result builder
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_result() -> Callable[..., SearchResult]:
    """Build a :class:`SearchResult` with sensible defaults."""

    def _make(
        id: str,
        tool: Tool | None = None,
        *,
        score: float = 50.0,
        title: str = "Result",
        body: str = "",
        author: str | None = None,
        content_type: Any = "document",
        age_days: float = 0.0,
        timestamp: datetime | None = None,
    ) -> SearchResult:
        tool = tool or Tool("fixed", "Fixed", "productivity")
        return SearchResult(
            id=id,
            title=title,
            body=body,
            tool=tool,
            content_type=content_type,
            url=f"https://example.com/{id}",
            timestamp=timestamp or utcnow() - timedelta(days=age_days),
            author=author,
            relevance_score=score,
        )

    return _make
