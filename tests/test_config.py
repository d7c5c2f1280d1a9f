"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from omnisearch.config.settings import (
    GoogleSettings,
    HealthSettings,
    Settings,
    SimulationSettings,
    get_settings,
)


class TestDefaults:
    def test_simulation_defaults(self) -> None:
        sim = SimulationSettings()
        assert (sim.connect_delay_min_ms, sim.connect_delay_max_ms) == (1500, 3000)
        assert (sim.search_delay_min_ms, sim.search_delay_max_ms) == (300, 800)
        assert (sim.sync_delay_min_ms, sim.sync_delay_max_ms) == (1000, 3000)
        assert sim.disconnect_delay_ms == 500
        assert sim.failure_rate == pytest.approx(0.05)

    def test_health_defaults(self) -> None:
        health = HealthSettings()
        assert health.interval_seconds == 30.0
        assert health.probe_timeout_seconds == 10.0

    def test_engine_defaults(self) -> None:
        s = Settings()
        assert s.deduplicate_results is True
        assert s.search_timeout_seconds == 10.0
        assert s.google.gmail_api.startswith("https://")


class TestEnvironment:
    def test_simulation_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OMNISEARCH_SIM_FAILURE_RATE", "0.5")
        monkeypatch.setenv("OMNISEARCH_SIM_SEED", "99")
        sim = SimulationSettings()
        assert sim.failure_rate == 0.5
        assert sim.seed == 99

    def test_health_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OMNISEARCH_HEALTH_INTERVAL_SECONDS", "5")
        assert HealthSettings().interval_seconds == 5.0

    def test_engine_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OMNISEARCH_DEDUPLICATE_RESULTS", "false")
        assert Settings().deduplicate_results is False

    def test_google_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OMNISEARCH_GOOGLE_DRIVE_API", "http://localhost/drive")
        assert GoogleSettings().drive_api == "http://localhost/drive"


class TestValidation:
    def test_failure_rate_bounds(self) -> None:
        with pytest.raises(ValidationError):
            SimulationSettings(failure_rate=1.5)

    def test_min_above_max_rejected(self) -> None:
        with pytest.raises(ValidationError, match="search_delay_min_ms"):
            SimulationSettings(search_delay_min_ms=900, search_delay_max_ms=100)

    def test_interval_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            HealthSettings(interval_seconds=0)


def test_get_settings_is_singleton() -> None:
    assert get_settings() is get_settings()
