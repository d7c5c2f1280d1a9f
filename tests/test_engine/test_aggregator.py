"""Tests for ``omnisearch.engine.aggregator``."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from omnisearch.config.settings import Settings
from omnisearch.connectors.base import BaseConnector, ConnectorConfig
from omnisearch.engine.aggregator import SearchAggregator, deduplicate, rank
from omnisearch.engine.registry import ConnectorRegistry
from omnisearch.engine.store import ConnectionStore
from omnisearch.errors import NotConnectedError, UnknownToolError
from omnisearch.models import SearchOptions, SearchResult, Tool

TOOL_A = Tool("a", "A", "productivity")
TOOL_B = Tool("b", "B", "productivity")
TOOL_C = Tool("c", "C", "productivity")
CATALOG = (TOOL_A, TOOL_B, TOOL_C)


class FixedConnector(BaseConnector):
    def __init__(self, config: ConnectorConfig, results: list[SearchResult]) -> None:
        super().__init__(config)
        self.results = results

    async def _fetch(self, options: SearchOptions) -> list[SearchResult]:
        return list(self.results)


class FailingSearchConnector(BaseConnector):
    async def _fetch(self, options: SearchOptions) -> list[SearchResult]:
        raise RuntimeError("upstream 500")


class SlowSearchConnector(BaseConnector):
    async def _fetch(self, options: SearchOptions) -> list[SearchResult]:
        await asyncio.sleep(10)
        return []


def _fixed(results: list[SearchResult]) -> Any:
    return lambda config: FixedConnector(config, results)


async def _aggregator(
    settings: Settings, factories: dict[str, Any], connect: tuple[str, ...] = ("a", "b", "c")
) -> tuple[SearchAggregator, ConnectorRegistry]:
    store = ConnectionStore(t.id for t in CATALOG)
    registry = ConnectorRegistry(CATALOG, store, settings, factories=factories)
    for tool_id in connect:
        await registry.connect(tool_id)
    return SearchAggregator(registry, settings), registry


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_rank_descending(self, make_result) -> None:
        results = [make_result("x", score=10), make_result("y", score=90), make_result("z", score=50)]
        assert [r.id for r in rank(results)] == ["y", "z", "x"]

    def test_rank_is_stable(self, make_result) -> None:
        results = [make_result("first", score=50), make_result("second", score=50)]
        assert [r.id for r in rank(results)] == ["first", "second"]

    def test_deduplicate_keeps_first(self, make_result) -> None:
        results = [
            make_result("dup", TOOL_A, score=10),
            make_result("other", TOOL_A),
            make_result("dup", TOOL_B, score=99),
        ]
        out = deduplicate(results)
        assert [r.id for r in out] == ["dup", "other"]
        assert out[0].tool is TOOL_A


# ---------------------------------------------------------------------------
# search_all
# ---------------------------------------------------------------------------


class TestSearchAll:
    @pytest.mark.asyncio
    async def test_nothing_connected(self, fast_settings: Settings) -> None:
        aggregator, _ = await _aggregator(fast_settings, {}, connect=())
        assert await aggregator.search_all(SearchOptions(query="x")) == []

    @pytest.mark.asyncio
    async def test_partial_failure_returns_survivors(self, fast_settings: Settings, make_result) -> None:
        a_results = [make_result(f"a{i}", TOOL_A, score=10.0 * i) for i in range(3)]
        aggregator, _ = await _aggregator(
            fast_settings,
            {"a": _fixed(a_results), "b": FailingSearchConnector, "c": _fixed([])},
        )
        results = await aggregator.search_all()
        assert len(results) == 3
        assert {r.id for r in results} == {"a0", "a1", "a2"}

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self, fast_settings: Settings, make_result) -> None:
        aggregator, _ = await _aggregator(
            fast_settings,
            {"a": _fixed([make_result("a1", TOOL_A)]), "b": SlowSearchConnector, "c": _fixed([])},
        )
        results = await aggregator.search_all()
        assert [r.id for r in results] == ["a1"]

    @pytest.mark.asyncio
    async def test_ranked_with_catalog_order_for_ties(self, fast_settings: Settings, make_result) -> None:
        aggregator, _ = await _aggregator(
            fast_settings,
            {
                "a": _fixed([make_result("a-tie", TOOL_A, score=50), make_result("a-low", TOOL_A, score=5)]),
                "b": _fixed([make_result("b-top", TOOL_B, score=95), make_result("b-tie", TOOL_B, score=50)]),
                "c": _fixed([make_result("c-tie", TOOL_C, score=50)]),
            },
        )
        results = await aggregator.search_all()
        assert [r.id for r in results] == ["b-top", "a-tie", "b-tie", "c-tie", "a-low"]
        scores = [r.relevance_score for r in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_repeated_search_is_stable(self, fast_settings: Settings, make_result) -> None:
        aggregator, _ = await _aggregator(
            fast_settings,
            {
                "a": _fixed([make_result(f"a{i}", TOOL_A, score=i % 3) for i in range(6)]),
                "b": _fixed([make_result(f"b{i}", TOOL_B, score=i % 3) for i in range(6)]),
            },
            connect=("a", "b"),
        )
        first = await aggregator.search_all()
        second = await aggregator.search_all()
        assert [r.id for r in first] == [r.id for r in second]

    @pytest.mark.asyncio
    async def test_duplicates_dropped(self, fast_settings: Settings, make_result) -> None:
        aggregator, _ = await _aggregator(
            fast_settings,
            {
                "a": _fixed([make_result("shared", TOOL_A, score=20)]),
                "b": _fixed([make_result("shared", TOOL_B, score=80)]),
            },
            connect=("a", "b"),
        )
        results = await aggregator.search_all()
        assert len(results) == 1
        assert results[0].tool is TOOL_A

    @pytest.mark.asyncio
    async def test_duplicates_kept_when_disabled(self, fast_settings: Settings, make_result) -> None:
        settings = fast_settings.model_copy(update={"deduplicate_results": False})
        aggregator, _ = await _aggregator(
            settings,
            {
                "a": _fixed([make_result("shared", TOOL_A, score=20)]),
                "b": _fixed([make_result("shared", TOOL_B, score=80)]),
            },
            connect=("a", "b"),
        )
        assert len(await aggregator.search_all()) == 2

    @pytest.mark.asyncio
    async def test_tools_option_narrows_fan_out(self, fast_settings: Settings, make_result) -> None:
        aggregator, _ = await _aggregator(
            fast_settings,
            {
                "a": _fixed([make_result("a1", TOOL_A)]),
                "b": _fixed([make_result("b1", TOOL_B)]),
                "c": _fixed([make_result("c1", TOOL_C)]),
            },
        )
        results = await aggregator.search_all(SearchOptions(tools=("b", "zzz")))
        assert [r.id for r in results] == ["b1"]

    @pytest.mark.asyncio
    async def test_disconnected_tool_contributes_nothing(self, fast_settings: Settings, make_result) -> None:
        aggregator, registry = await _aggregator(
            fast_settings,
            {"a": _fixed([make_result("a1", TOOL_A)]), "b": _fixed([make_result("b1", TOOL_B)])},
            connect=("a", "b"),
        )
        await registry.disconnect("b")
        assert [r.id for r in await aggregator.search_all()] == ["a1"]


# ---------------------------------------------------------------------------
# search_tool
# ---------------------------------------------------------------------------


class TestSearchTool:
    @pytest.mark.asyncio
    async def test_single_tool(self, fast_settings: Settings, make_result) -> None:
        aggregator, _ = await _aggregator(
            fast_settings, {"a": _fixed([make_result("a1", TOOL_A, title="budget")])}, connect=("a",)
        )
        results = await aggregator.search_tool("a", SearchOptions(query="budget"))
        assert [r.id for r in results] == ["a1"]

    @pytest.mark.asyncio
    async def test_errors_propagate(self, fast_settings: Settings) -> None:
        aggregator, _ = await _aggregator(fast_settings, {}, connect=())
        with pytest.raises(NotConnectedError):
            await aggregator.search_tool("a")
        with pytest.raises(UnknownToolError):
            await aggregator.search_tool("zzz")

    @pytest.mark.asyncio
    async def test_timeout_propagates(self, fast_settings: Settings) -> None:
        aggregator, _ = await _aggregator(fast_settings, {"a": SlowSearchConnector}, connect=("a",))
        with pytest.raises(asyncio.TimeoutError):
            await aggregator.search_tool("a")
