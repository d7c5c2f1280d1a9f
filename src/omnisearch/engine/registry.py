"""ConnectorRegistry — one connector per catalog entry, plus lifecycle.

Connectors are built once at construction from a factory table mapping
tool id to a constructor.  Tools without an entry fall back to the
credential factory (non-simulated tools) or the default factory
(simulated tools).

Connect, disconnect and sync are serialised per tool with an
``asyncio.Lock``; different tools proceed in parallel.  Every outcome is
written into the :class:`~omnisearch.engine.store.ConnectionStore`, which
notifies listeners before the call returns.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace

import httpx

from omnisearch.auth import CredentialProvider, SignedOutProvider
from omnisearch.catalog import data_size_for, validate_catalog
from omnisearch.config.settings import Settings
from omnisearch.connectors.base import BaseConnector, ConnectorConfig, FailureModel
from omnisearch.connectors.github import GitHubConnector
from omnisearch.connectors.google import GoogleConnector
from omnisearch.connectors.jira import JiraConnector
from omnisearch.connectors.simulated import GenericConnector
from omnisearch.connectors.slack import SlackConnector
from omnisearch.engine.store import ConnectionStore
from omnisearch.errors import (
    ConnectionFailedError,
    NotConnectedError,
    OmnisearchError,
    UnknownToolError,
)
from omnisearch.models import Connection, Tool, utcnow

logger = logging.getLogger(__name__)

ConnectorFactory = Callable[[ConnectorConfig], BaseConnector]

DEFAULT_FACTORIES: Mapping[str, ConnectorFactory] = {
    "slack": SlackConnector,
    "jira": JiraConnector,
    "github": GitHubConnector,
}

_INTERRUPTED = "Connection attempt was interrupted"


class ConnectorRegistry:
    """Owns the tool id → connector mapping and applies outcomes to the store."""

    def __init__(
        self,
        catalog: Sequence[Tool],
        store: ConnectionStore,
        settings: Settings,
        *,
        factories: Mapping[str, ConnectorFactory] | None = None,
        default_factory: ConnectorFactory = GenericConnector,
        credentials: CredentialProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
        failure_model: FailureModel | None = None,
    ) -> None:
        self._catalog = validate_catalog(catalog)
        self._store = store
        self._settings = settings
        self._factories: dict[str, ConnectorFactory] = {**DEFAULT_FACTORIES, **(factories or {})}
        self._default_factory = default_factory
        self._credentials = credentials or SignedOutProvider()
        self._http_client = http_client
        self._failure_model = failure_model

        self._connectors: dict[str, BaseConnector] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        for tool in self._catalog:
            self._connectors[tool.id] = self._build(tool)
            self._locks[tool.id] = asyncio.Lock()
        logger.debug("Registry built %d connectors.", len(self._connectors))

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _build(self, tool: Tool) -> BaseConnector:
        if tool.is_simulated:
            config = ConnectorConfig.from_settings(
                tool, self._settings.simulation, data_size=data_size_for(tool.id)
            )
            if self._failure_model is not None:
                config = replace(config, failure_model=self._failure_model)
        else:
            config = ConnectorConfig(tool=tool, data_size=data_size_for(tool.id))

        factory = self._factories.get(tool.id)
        if factory is None:
            factory = self._default_factory if tool.is_simulated else self._credential_factory
        return factory(config)

    def _credential_factory(self, config: ConnectorConfig) -> BaseConnector:
        return GoogleConnector(
            config,
            self._credentials,
            self._settings.google,
            client=self._http_client,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> tuple[Tool, ...]:
        return self._catalog

    def get(self, tool_id: str) -> BaseConnector:
        try:
            return self._connectors[tool_id]
        except KeyError:
            raise UnknownToolError(tool_id) from None

    def tool(self, tool_id: str) -> Tool:
        return self.get(tool_id).tool

    def tool_ids(self) -> list[str]:
        return [tool.id for tool in self._catalog]

    def connected_tool_ids(self) -> frozenset[str]:
        """Snapshot from the store; never cached."""
        return self._store.tool_ids_with_status("connected")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self, tool_id: str) -> Connection:
        """Connect *tool_id* and record the outcome.

        A tool that is already connected is left as is.  On failure the
        tool ends in ``error`` with a message and the error is re-raised.
        """
        connector = self.get(tool_id)
        timeout = self._settings.connect_timeout_seconds

        async with self._locks[tool_id]:
            current = self._store.get(tool_id)
            if current.status == "connected":
                if connector.is_connected:
                    logger.debug("Connect %s skipped: already connected.", tool_id)
                    return current
                # The connector dropped its session behind the store's back.
                logger.warning("Connector %s lost its session; reconnecting.", tool_id)
                self._store.transition(tool_id, "disconnected")

            self._store.transition(tool_id, "connecting")
            error_message = _INTERRUPTED
            try:
                await asyncio.wait_for(connector.connect(), timeout=timeout)
            except asyncio.TimeoutError as exc:
                error_message = f"Timed out connecting to {connector.tool.name} after {timeout:g}s"
                raise ConnectionFailedError(error_message, tool_id=tool_id) from exc
            except OmnisearchError as exc:
                error_message = str(exc)
                raise
            except Exception as exc:
                error_message = str(exc) or "Connection failed"
                raise ConnectionFailedError(error_message, tool_id=tool_id) from exc
            else:
                status = connector.connection_status()
                return self._store.transition(
                    tool_id, "connected", last_sync=status.last_sync or utcnow()
                )
            finally:
                # ``connecting`` must never outlive this call, even on cancellation.
                if self._store.get(tool_id).status == "connecting":
                    logger.warning("Connect %s failed: %s", tool_id, error_message)
                    self._store.transition(tool_id, "error", error=error_message)

    async def disconnect(self, tool_id: str) -> Connection:
        """Disconnect *tool_id*.  Idempotent; cleanup errors are logged only."""
        connector = self.get(tool_id)

        async with self._locks[tool_id]:
            try:
                await asyncio.wait_for(
                    connector.disconnect(), timeout=self._settings.connect_timeout_seconds
                )
            except Exception as exc:
                logger.warning("Disconnect cleanup for %s failed: %s", tool_id, exc)
            return self._store.transition(tool_id, "disconnected")

    async def sync(self, tool_id: str) -> Connection:
        """Refresh a connected tool; failures move it to ``error``."""
        connector = self.get(tool_id)
        timeout = self._settings.sync_timeout_seconds

        async with self._locks[tool_id]:
            if self._store.get(tool_id).status != "connected":
                raise NotConnectedError(f"Tool {tool_id} is not connected", tool_id=tool_id)
            try:
                await asyncio.wait_for(connector.sync(), timeout=timeout)
            except asyncio.TimeoutError as exc:
                message = f"Timed out syncing {connector.tool.name} after {timeout:g}s"
                self._store.transition(tool_id, "error", error=message)
                raise ConnectionFailedError(message, tool_id=tool_id) from exc
            except OmnisearchError as exc:
                self._store.transition(tool_id, "error", error=str(exc))
                raise
            except Exception as exc:
                message = str(exc) or "Sync failed"
                self._store.transition(tool_id, "error", error=message)
                raise ConnectionFailedError(message, tool_id=tool_id) from exc
            status = connector.connection_status()
            return self._store.transition(
                tool_id, "connected", last_sync=status.last_sync or utcnow()
            )

    async def aclose(self) -> None:
        """Release connector-held resources (HTTP clients)."""
        for connector in self._connectors.values():
            closer = getattr(connector, "aclose", None)
            if closer is None:
                continue
            try:
                await closer()
            except Exception as exc:
                logger.debug("Closing %s failed: %s", connector.tool_id, exc)
