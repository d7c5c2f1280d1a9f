"""SearchEngine — explicitly constructed facade over the connector engine.

Lifecycle
---------
``SearchEngine(catalog, settings)`` builds the connection store, the
registry (one connector per tool), the health monitor and the search
aggregator.  Nothing runs in the background until :meth:`start`, which
must be called from a running event loop; :meth:`shutdown` stops the
health timer and leaves listeners subscribed, so :meth:`start` can
resume; :meth:`aclose` is the final teardown that also drops listeners
and releases HTTP clients.  The engine is an async context manager
calling :meth:`start` and :meth:`aclose`.

Each engine owns all of its state, so independent instances can coexist
(tests run many in parallel).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import httpx

from omnisearch.auth import CredentialProvider
from omnisearch.catalog import DEFAULT_CATALOG
from omnisearch.config.settings import Settings
from omnisearch.connectors.base import FailureModel
from omnisearch.engine.aggregator import SearchAggregator
from omnisearch.engine.health import HealthMonitor
from omnisearch.engine.registry import ConnectorFactory, ConnectorRegistry
from omnisearch.engine.store import ConnectionListener, ConnectionStore
from omnisearch.errors import OmnisearchError
from omnisearch.models import (
    Connection,
    ConnectionStats,
    ConnectorStatus,
    HealthStatus,
    SearchOptions,
    SearchResult,
    Tool,
)

logger = logging.getLogger(__name__)


class SearchEngine:
    """Connector lifecycle, health monitoring and search fan-out."""

    def __init__(
        self,
        catalog: Sequence[Tool] = DEFAULT_CATALOG,
        settings: Settings | None = None,
        *,
        credentials: CredentialProvider | None = None,
        factories: Mapping[str, ConnectorFactory] | None = None,
        failure_model: FailureModel | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._store = ConnectionStore(tool.id for tool in catalog)
        self.registry = ConnectorRegistry(
            catalog,
            self._store,
            self.settings,
            factories=factories,
            credentials=credentials,
            http_client=http_client,
            failure_model=failure_model,
        )
        self.monitor = HealthMonitor(self.registry, self._store, self.settings.health)
        self.aggregator = SearchAggregator(self.registry, self.settings)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the health timer (one immediate check, then periodic)."""
        self.monitor.start()

    def shutdown(self) -> None:
        """Stop the health timer.  Connection listeners stay subscribed."""
        self.monitor.shutdown()

    async def aclose(self) -> None:
        """Stop the timer, drop all listeners and release HTTP clients."""
        self.shutdown()
        self._store.clear_listeners()
        await self.registry.aclose()

    async def __aenter__(self) -> SearchEngine:
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    async def connect(self, tool_id: str) -> Connection:
        return await self.registry.connect(tool_id)

    async def disconnect(self, tool_id: str) -> Connection:
        connection = await self.registry.disconnect(tool_id)
        self.monitor.mark_disconnected(tool_id)
        return connection

    async def sync_tool(self, tool_id: str) -> Connection:
        return await self.registry.sync(tool_id)

    async def sync_all_connected_tools(self) -> dict[str, bool]:
        """Sync every connected tool concurrently; failures are logged."""
        tool_ids = [t for t in self.registry.tool_ids() if t in self.registry.connected_tool_ids()]

        async def _sync(tool_id: str) -> bool:
            try:
                await self.sync_tool(tool_id)
            except OmnisearchError as exc:
                logger.warning("Sync failed for %s: %s", tool_id, exc)
                return False
            return True

        outcomes = await asyncio.gather(*(_sync(t) for t in tool_ids))
        return dict(zip(tool_ids, outcomes))

    def get_connection(self, tool_id: str) -> Connection:
        return self._store.get(tool_id)

    def get_all_connections(self) -> list[Connection]:
        return self._store.snapshot()

    def connection_status(self, tool_id: str) -> ConnectorStatus:
        """Store-authoritative ``is_connected`` with the connector's own last sync."""
        connector = self.registry.get(tool_id)
        is_connected = self._store.get(tool_id).status == "connected"
        return ConnectorStatus(
            is_connected=is_connected,
            last_sync=connector.connection_status().last_sync,
        )

    def connected_tools(self) -> list[str]:
        connected = self.registry.connected_tool_ids()
        return [t for t in self.registry.tool_ids() if t in connected]

    def available_tools(self) -> list[str]:
        return self.registry.tool_ids()

    def add_connection_listener(self, listener: ConnectionListener) -> None:
        self._store.add_listener(listener)

    def remove_connection_listener(self, listener: ConnectionListener) -> None:
        self._store.remove_listener(listener)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def get_health_status(self, tool_id: str) -> HealthStatus:
        return self.monitor.get(tool_id)

    def get_all_health_statuses(self) -> list[HealthStatus]:
        return self.monitor.snapshot()

    async def run_health_checks(self) -> list[HealthStatus]:
        """Run one health tick now, outside the schedule."""
        return await self.monitor.check_all()

    def get_connection_stats(self) -> ConnectionStats:
        connections = self._store.snapshot()
        health = self.monitor.snapshot()

        response_times = [h.response_time_ms for h in health if h.response_time_ms is not None]
        uptimes = [h.uptime_ms for h in health if h.uptime_ms is not None]

        return ConnectionStats(
            total_tools=len(connections),
            connected_tools=sum(1 for c in connections if c.status == "connected"),
            healthy_connections=sum(1 for h in health if h.status == "healthy"),
            warning_connections=sum(1 for h in health if h.status == "warning"),
            error_connections=sum(1 for h in health if h.status == "error"),
            average_response_time_ms=sum(response_times) / len(response_times) if response_times else 0.0,
            total_uptime_ms=sum(uptimes),
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search_all(self, options: SearchOptions | None = None) -> list[SearchResult]:
        return await self.aggregator.search_all(options)

    async def search_tool(self, tool_id: str, options: SearchOptions | None = None) -> list[SearchResult]:
        return await self.aggregator.search_tool(tool_id, options)
