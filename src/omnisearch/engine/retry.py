"""ConnectionRetryHandler — the retry policy that sits above the engine.

Subscribes to connection changes, keeps the list of tools currently in
``error`` (minus the ones the user dismissed), and reconnects them on
demand.  The health monitor never reconnects anything itself; this is
the component that decides to.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from omnisearch.errors import OmnisearchError
from omnisearch.models import Connection

if TYPE_CHECKING:
    from omnisearch.engine.engine import SearchEngine

logger = logging.getLogger(__name__)


class ConnectionRetryHandler:
    """Track failed connections and retry them."""

    def __init__(
        self,
        engine: SearchEngine,
        on_retry_success: Callable[[str], None] | None = None,
    ) -> None:
        self._engine = engine
        self._on_retry_success = on_retry_success
        self._failed: dict[str, Connection] = {}
        self._dismissed: set[str] = set()
        self._retrying: set[str] = set()
        self._attached = False

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def attach(self) -> None:
        if self._attached:
            return
        self._update(self._engine.get_all_connections())
        self._engine.add_connection_listener(self._update)
        self._attached = True

    def detach(self) -> None:
        self._engine.remove_connection_listener(self._update)
        self._attached = False

    def _update(self, connections: list[Connection]) -> None:
        self._failed = {
            conn.tool_id: conn
            for conn in connections
            if conn.status == "error" and conn.tool_id not in self._dismissed
        }

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def failed_connections(self) -> list[Connection]:
        return list(self._failed.values())

    def is_retrying(self, tool_id: str) -> bool:
        return tool_id in self._retrying

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def retry(self, tool_id: str) -> bool:
        """Reconnect *tool_id*.  Returns True on success."""
        if tool_id in self._retrying:
            return False
        self._retrying.add(tool_id)
        try:
            await self._engine.connect(tool_id)
        except OmnisearchError as exc:
            logger.warning("Retry failed for %s: %s", tool_id, exc)
            return False
        finally:
            self._retrying.discard(tool_id)

        self._failed.pop(tool_id, None)
        if self._on_retry_success is not None:
            self._on_retry_success(tool_id)
        return True

    async def retry_all(self) -> dict[str, bool]:
        """Retry every failed tool concurrently."""
        tool_ids = list(self._failed)
        outcomes = await asyncio.gather(*(self.retry(t) for t in tool_ids))
        return dict(zip(tool_ids, outcomes))

    def dismiss(self, tool_id: str) -> None:
        self._dismissed.add(tool_id)
        self._failed.pop(tool_id, None)

    def dismiss_all(self) -> None:
        self._dismissed.update(self._failed)
        self._failed.clear()
