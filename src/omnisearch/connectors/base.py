"""BaseConnector — abstract base class for every per-tool connector.

A connector owns its own handshake, search and sync behaviour, including
any simulated latency.  It never touches the engine's state stores: it
returns results or raises, and the registry records the outcome.

Simulation is expressed through two injectable pieces of
:class:`ConnectorConfig`: latency ranges and a :class:`FailureModel`.
Credential-backed connectors pass zero delays and :data:`NEVER_FAIL` so
only genuine failures surface.
"""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from omnisearch.config.settings import SimulationSettings
from omnisearch.errors import ConnectionFailedError, NotConnectedError
from omnisearch.models import (
    ConnectorStatus,
    DataSize,
    SearchOptions,
    SearchResult,
    Tool,
    utcnow,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Simulation policy
# ---------------------------------------------------------------------------


class FailureModel(Protocol):
    """Decides whether a connect attempt should fail."""

    def should_fail(self) -> bool: ...


class SimulatedFailureModel:
    """Fail with a fixed probability ``rate`` in ``[0, 1]``."""

    def __init__(self, rate: float, rng: random.Random | None = None) -> None:
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f"failure rate must be within [0, 1], got {rate}")
        self.rate = rate
        self._rng = rng or random.Random()

    def should_fail(self) -> bool:
        if self.rate <= 0.0:
            return False
        if self.rate >= 1.0:
            return True
        return self._rng.random() < self.rate


class _NeverFail:
    rate = 0.0

    def should_fail(self) -> bool:
        return False


NEVER_FAIL: FailureModel = _NeverFail()


@dataclass(frozen=True)
class DelayRange:
    """Latency range in milliseconds, sampled uniformly."""

    min_ms: int = 0
    max_ms: int = 0

    def sample_seconds(self, rng: random.Random) -> float:
        if self.max_ms <= 0:
            return 0.0
        return rng.uniform(self.min_ms, self.max_ms) / 1000.0


NO_DELAY = DelayRange()


@dataclass(frozen=True)
class ConnectorConfig:
    """Everything a connector needs at construction."""

    tool: Tool
    connect_delay: DelayRange = NO_DELAY
    search_delay: DelayRange = NO_DELAY
    sync_delay: DelayRange = NO_DELAY
    disconnect_delay: DelayRange = NO_DELAY
    failure_model: FailureModel = field(default=NEVER_FAIL)
    data_size: DataSize = "small"
    seed: int | None = None

    @classmethod
    def from_settings(
        cls,
        tool: Tool,
        sim: SimulationSettings,
        *,
        data_size: DataSize = "small",
    ) -> ConnectorConfig:
        """Build a simulated-connector config from :class:`SimulationSettings`."""
        failure_rng = random.Random(f"{sim.seed}:{tool.id}:failure") if sim.seed is not None else None
        return cls(
            tool=tool,
            connect_delay=DelayRange(sim.connect_delay_min_ms, sim.connect_delay_max_ms),
            search_delay=DelayRange(sim.search_delay_min_ms, sim.search_delay_max_ms),
            sync_delay=DelayRange(sim.sync_delay_min_ms, sim.sync_delay_max_ms),
            disconnect_delay=DelayRange(sim.disconnect_delay_ms, sim.disconnect_delay_ms),
            failure_model=SimulatedFailureModel(sim.failure_rate, failure_rng),
            data_size=data_size,
            seed=sim.seed,
        )


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def filter_results(
    results: Iterable[SearchResult],
    options: SearchOptions,
    *,
    match_query: bool = True,
) -> list[SearchResult]:
    """Apply the AND-combined filters of *options*, then truncate.

    ``options.tools`` is ignored here; it only narrows the fan-out.  Pass
    ``match_query=False`` when the upstream already matched the query.
    """
    filtered = list(results)

    if options.query and match_query:
        filtered = [r for r in filtered if r.matches_text(options.query)]

    if options.content_types:
        wanted = set(options.content_types)
        filtered = [r for r in filtered if r.content_type in wanted]

    if options.date_range is not None:
        filtered = [r for r in filtered if r.timestamp in options.date_range]

    if options.author:
        author = options.author.lower()
        filtered = [r for r in filtered if r.author and author in r.author.lower()]

    if options.max_results is not None:
        filtered = filtered[: max(options.max_results, 0)]

    return filtered


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


class BaseConnector(ABC):
    """Abstract base for per-tool connectors.

    Subclasses implement :meth:`_fetch` (return the candidate results for a
    query) and may override :meth:`_handshake` to perform a real
    credential or network check during :meth:`connect`.
    """

    matches_query_locally: bool = True
    """False when the upstream service already applied the text query."""

    def __init__(self, config: ConnectorConfig) -> None:
        self.config = config
        self._rng = random.Random(f"{config.seed}:{config.tool.id}") if config.seed is not None else random.Random()
        self._connected = False
        self._last_sync: datetime | None = None

    @property
    def tool(self) -> Tool:
        return self.config.tool

    @property
    def tool_id(self) -> str:
        return self.config.tool.id

    @property
    def is_connected(self) -> bool:
        return self._connected

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Perform the handshake.

        Raises
        ------
        ConnectionFailedError
            When the failure model fires or the handshake itself fails.
        """
        # A new attempt invalidates whatever the previous session left behind.
        self._connected = False
        self._last_sync = None
        await asyncio.sleep(self.config.connect_delay.sample_seconds(self._rng))

        if self.config.failure_model.should_fail():
            raise ConnectionFailedError(f"Failed to connect to {self.tool.name}", tool_id=self.tool_id)

        await self._handshake()

        self._connected = True
        self._last_sync = utcnow()
        logger.debug("Connector %s connected.", self.tool_id)

    async def disconnect(self) -> None:
        """Drop the connection.  Safe to call when already disconnected."""
        if self._connected:
            await asyncio.sleep(self.config.disconnect_delay.sample_seconds(self._rng))
        self._connected = False
        self._last_sync = None

    async def sync(self) -> None:
        """Refresh upstream data without a full reconnect."""
        self._require_connected()
        await asyncio.sleep(self.config.sync_delay.sample_seconds(self._rng))
        self._last_sync = utcnow()

    def connection_status(self) -> ConnectorStatus:
        return ConnectorStatus(is_connected=self._connected, last_sync=self._last_sync)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def search(self, options: SearchOptions | None = None) -> list[SearchResult]:
        """Return results matching *options*.  Ordering is unspecified."""
        options = options or SearchOptions()
        self._require_connected()
        await asyncio.sleep(self.config.search_delay.sample_seconds(self._rng))
        return filter_results(await self._fetch(options), options, match_query=self.matches_query_locally)

    async def probe(self) -> None:
        """Cheapest read that proves the connector still answers."""
        await self.search(SearchOptions(max_results=1))

    async def recent_items(self, limit: int = 10) -> list[SearchResult]:
        """Newest items first."""
        items = await self.search()
        return sorted(items, key=lambda r: r.timestamp, reverse=True)[:limit]

    async def popular_items(self, limit: int = 10) -> list[SearchResult]:
        """Highest relevance first."""
        items = await self.search()
        return sorted(items, key=lambda r: r.relevance_score, reverse=True)[:limit]

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    async def _handshake(self) -> None:
        """Extra connect-time check.  Simulated connectors need none."""

    @abstractmethod
    async def _fetch(self, options: SearchOptions) -> list[SearchResult]:
        """Return candidate results; filtering is applied by the caller."""

    def _require_connected(self) -> None:
        if not self._connected:
            raise NotConnectedError(f"Not connected to {self.tool.name}", tool_id=self.tool_id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tool_id={self.tool_id!r}, connected={self._connected})"
