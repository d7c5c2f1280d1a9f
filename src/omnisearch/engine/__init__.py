"""The connector engine: state store, registry, health monitor, aggregator.

Import :class:`SearchEngine` for the composed facade; the parts are
importable individually for callers that wire their own.
"""

from __future__ import annotations

from omnisearch.engine.aggregator import SearchAggregator
from omnisearch.engine.engine import SearchEngine
from omnisearch.engine.health import HealthMonitor
from omnisearch.engine.registry import DEFAULT_FACTORIES, ConnectorRegistry
from omnisearch.engine.retry import ConnectionRetryHandler
from omnisearch.engine.store import ConnectionStore

__all__ = [
    "DEFAULT_FACTORIES",
    "ConnectionRetryHandler",
    "ConnectionStore",
    "ConnectorRegistry",
    "HealthMonitor",
    "SearchAggregator",
    "SearchEngine",
]
