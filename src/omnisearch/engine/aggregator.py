"""SearchAggregator — fan a query out to every connected tool.

Each per-tool search runs concurrently and is bounded by
``search_timeout_seconds``.  A tool that fails or times out contributes
no results; it never aborts the aggregation.  Partial results are
concatenated in catalog order, deduplicated by result id (first
occurrence wins), then stable-sorted by relevance, highest first.
"""

from __future__ import annotations

import asyncio
import logging
import time

from omnisearch.config.settings import Settings
from omnisearch.engine.registry import ConnectorRegistry
from omnisearch.models import SearchOptions, SearchResult

logger = logging.getLogger(__name__)


def deduplicate(results: list[SearchResult]) -> list[SearchResult]:
    """Drop results whose id was already seen, keeping the first."""
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for result in results:
        if result.id in seen:
            continue
        seen.add(result.id)
        unique.append(result)
    return unique


def rank(results: list[SearchResult]) -> list[SearchResult]:
    """Relevance descending; ties keep their incoming order."""
    return sorted(results, key=lambda r: r.relevance_score, reverse=True)


class SearchAggregator:
    """Merges results from every connected connector."""

    def __init__(self, registry: ConnectorRegistry, settings: Settings) -> None:
        self._registry = registry
        self._settings = settings

    async def search_all(self, options: SearchOptions | None = None) -> list[SearchResult]:
        """Ranked results from all connected tools; ``[]`` if none answered."""
        options = options or SearchOptions()
        connected = self._registry.connected_tool_ids()
        if options.tools is not None:
            connected = connected & frozenset(options.tools)

        # Catalog order keeps the merge deterministic for equal scores.
        tool_ids = [tool_id for tool_id in self._registry.tool_ids() if tool_id in connected]
        if not tool_ids:
            return []

        started = time.perf_counter()
        partials = await asyncio.gather(*(self._search_one(t, options) for t in tool_ids))
        merged = [result for partial in partials for result in partial]

        if self._settings.deduplicate_results:
            before = len(merged)
            merged = deduplicate(merged)
            if len(merged) != before:
                logger.debug("Dropped %d duplicate results.", before - len(merged))

        ranked = rank(merged)
        logger.info(
            "Search across %d tools returned %d results in %.0f ms.",
            len(tool_ids),
            len(ranked),
            (time.perf_counter() - started) * 1000,
        )
        return ranked

    async def search_tool(self, tool_id: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """Search a single tool.  Errors propagate to the caller."""
        connector = self._registry.get(tool_id)
        return await asyncio.wait_for(
            connector.search(options or SearchOptions()),
            timeout=self._settings.search_timeout_seconds,
        )

    async def _search_one(self, tool_id: str, options: SearchOptions) -> list[SearchResult]:
        try:
            return await self.search_tool(tool_id, options)
        except asyncio.TimeoutError:
            logger.warning(
                "Search timed out for %s after %gs.", tool_id, self._settings.search_timeout_seconds
            )
        except Exception as exc:
            logger.warning("Search failed for %s: %s", tool_id, exc)
        return []
