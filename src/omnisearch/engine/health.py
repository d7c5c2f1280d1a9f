"""HealthMonitor — periodic probing of connected tools.

Uses APScheduler's ``AsyncIOScheduler`` to run :meth:`HealthMonitor.check_all`
every ``interval_seconds`` plus once immediately on start.  Each tick
snapshots the connected tools and probes them concurrently, each probe
bounded by ``probe_timeout_seconds``.

The monitor only *reports*: it writes :class:`HealthStatus` records and
never changes a tool's connection status.  Deciding whether to reconnect
is left to a retry policy (see :mod:`omnisearch.engine.retry`).

Failure classification
----------------------
* ``timeout``       — probe exceeded its timeout
* ``auth_expired``  — credential rejected; needs re-authentication
* ``transient``     — network or unclassified error; retryable
* ``misconfigured`` — tool id missing from the registry (logged once)
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler  # type: ignore[import-untyped]
from apscheduler.triggers.interval import IntervalTrigger  # type: ignore[import-untyped]

from omnisearch.config.settings import HealthSettings
from omnisearch.engine.registry import ConnectorRegistry
from omnisearch.engine.store import ConnectionStore
from omnisearch.errors import (
    AuthExpiredError,
    ProbeFailureError,
    ProbeTimeoutError,
    TransientNetworkError,
    UnknownToolError,
)
from omnisearch.models import FailureKind, HealthStatus, utcnow

logger = logging.getLogger(__name__)

_JOB_ID = "health_check"


class HealthMonitor:
    """Owns one :class:`HealthStatus` per tool and the polling schedule."""

    def __init__(
        self,
        registry: ConnectorRegistry,
        store: ConnectionStore,
        settings: HealthSettings,
    ) -> None:
        self._registry = registry
        self._store = store
        self._settings = settings
        self._statuses: dict[str, HealthStatus] = {
            tool_id: HealthStatus(tool_id=tool_id) for tool_id in registry.tool_ids()
        }
        self._misconfigured: set[str] = set()
        self._scheduler: AsyncIOScheduler | None = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, tool_id: str) -> HealthStatus:
        try:
            return self._statuses[tool_id].copy()
        except KeyError:
            raise UnknownToolError(tool_id) from None

    def snapshot(self) -> list[HealthStatus]:
        return [status.copy() for status in self._statuses.values()]

    # ------------------------------------------------------------------
    # Probing
    # ------------------------------------------------------------------

    async def check_all(self) -> list[HealthStatus]:
        """Run one tick.  Never raises; tools not connected are untouched."""
        connected = self._store.tool_ids_with_status("connected")
        tool_ids = [tool_id for tool_id in self._statuses if tool_id in connected]
        if not tool_ids:
            return []

        results = await asyncio.gather(*(self.check_tool(t) for t in tool_ids))
        healthy = sum(1 for r in results if r.status == "healthy")
        logger.info("Health check: %d/%d tools healthy.", healthy, len(results))
        return list(results)

    async def check_tool(self, tool_id: str) -> HealthStatus:
        """Probe a single tool and record the result."""
        timeout = self._settings.probe_timeout_seconds
        started = time.perf_counter()
        try:
            connector = self._registry.get(tool_id)
            await asyncio.wait_for(connector.probe(), timeout=timeout)
        except asyncio.TimeoutError:
            error = ProbeTimeoutError(f"Health check timed out after {timeout:g}s", tool_id=tool_id)
            return self._record_failure(tool_id, str(error), "timeout")
        except AuthExpiredError as exc:
            return self._record_failure(tool_id, str(exc), "auth_expired")
        except TransientNetworkError as exc:
            return self._record_failure(tool_id, str(exc), "transient")
        except UnknownToolError as exc:
            if tool_id not in self._misconfigured:
                self._misconfigured.add(tool_id)
                logger.error("Health check for %s misconfigured: %s", tool_id, exc)
            return self._record_failure(tool_id, str(exc), "misconfigured")
        except Exception as exc:
            error = ProbeFailureError(str(exc) or type(exc).__name__, tool_id=tool_id)
            return self._record_failure(tool_id, str(error), "transient")

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug("Probe %s answered in %.1f ms.", tool_id, elapsed_ms)
        return self._record_success(tool_id, elapsed_ms)

    def mark_disconnected(self, tool_id: str) -> None:
        """Reset the health track after an explicit disconnect."""
        if tool_id in self._statuses:
            self._statuses[tool_id] = HealthStatus(tool_id=tool_id, status="disconnected")

    def _still_connected(self, tool_id: str) -> bool:
        """False once the tool left ``connected`` while its probe was in flight."""
        return tool_id in self._store and self._store.get(tool_id).status == "connected"

    def _record_success(self, tool_id: str, elapsed_ms: float) -> HealthStatus:
        now = utcnow()
        last_sync = self._store.get(tool_id).last_sync
        uptime_ms = (now - last_sync).total_seconds() * 1000 if last_sync else 0.0
        slow = elapsed_ms > self._settings.slow_probe_threshold_ms
        status = HealthStatus(
            tool_id=tool_id,
            status="warning" if slow else "healthy",
            last_check=now,
            response_time_ms=elapsed_ms,
            uptime_ms=uptime_ms,
            error_message=f"Slow response ({elapsed_ms:.0f} ms)" if slow else None,
        )
        if self._still_connected(tool_id):
            self._statuses[tool_id] = status
        else:
            logger.debug("Dropping stale probe result for %s.", tool_id)
        return status.copy()

    def _record_failure(self, tool_id: str, message: str, kind: FailureKind) -> HealthStatus:
        logger.warning("Health check for %s failed (%s): %s", tool_id, kind, message)
        previous = self._statuses.get(tool_id)
        status = HealthStatus(
            tool_id=tool_id,
            status="error",
            last_check=utcnow(),
            response_time_ms=None,
            uptime_ms=previous.uptime_ms if previous else None,
            error_message=message,
            failure_kind=kind,
        )
        if self._still_connected(tool_id):
            self._statuses[tool_id] = status
        return status.copy()

    # ------------------------------------------------------------------
    # Scheduler lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self) -> None:
        """Start periodic checks.  Must be called from a running event loop.

        Safe to call multiple times — only one scheduler runs.
        """
        if self._scheduler is not None:
            logger.debug("Health monitor already running.")
            return

        scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop(), timezone="UTC")
        scheduler.add_job(
            self.check_all,
            IntervalTrigger(seconds=self._settings.interval_seconds),
            id=_JOB_ID,
            replace_existing=True,
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("Health monitor started (interval=%gs).", self._settings.interval_seconds)

    def shutdown(self) -> None:
        """Stop periodic checks."""
        if self._scheduler is None:
            return
        try:
            self._scheduler.shutdown(wait=False)
        except Exception as exc:
            logger.debug("Scheduler shutdown failed: %s", exc)
        self._scheduler = None
        logger.info("Health monitor stopped.")
