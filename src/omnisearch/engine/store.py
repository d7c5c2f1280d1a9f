"""ConnectionStore — single source of truth for per-tool connection status.

Every mutation replaces the tool's record and then synchronously calls
every registered listener with the full snapshot (never a diff).  A
listener that raises is logged and skipped; the remaining listeners are
still called and the store is left consistent.

State machine
-------------
::

    disconnected -> connecting -> connected | error
    connected    -> disconnected | error | connected (sync refresh)
    error        -> connecting | disconnected
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from omnisearch.errors import InvalidTransitionError, UnknownToolError
from omnisearch.models import Connection, ConnectionState

logger = logging.getLogger(__name__)

ConnectionListener = Callable[[list[Connection]], None]

_ALLOWED: dict[ConnectionState, frozenset[ConnectionState]] = {
    "disconnected": frozenset({"connecting", "disconnected"}),
    "connecting": frozenset({"connected", "error"}),
    "connected": frozenset({"connected", "disconnected", "error"}),
    "error": frozenset({"connecting", "disconnected", "error"}),
}


class ConnectionStore:
    """One :class:`Connection` per tool id, created eagerly, never deleted."""

    def __init__(self, tool_ids: Iterable[str]) -> None:
        self._connections: dict[str, Connection] = {
            tool_id: Connection(tool_id=tool_id) for tool_id in tool_ids
        }
        self._listeners: list[ConnectionListener] = []

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, tool_id: str) -> Connection:
        """Return a copy of the tool's connection record."""
        return self._record(tool_id).copy()

    def snapshot(self) -> list[Connection]:
        """Copies of every record, in catalog order."""
        return [conn.copy() for conn in self._connections.values()]

    def tool_ids_with_status(self, status: ConnectionState) -> frozenset[str]:
        return frozenset(
            tool_id for tool_id, conn in self._connections.items() if conn.status == status
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def transition(
        self,
        tool_id: str,
        status: ConnectionState,
        *,
        last_sync: datetime | None = None,
        error: str | None = None,
    ) -> Connection:
        """Move *tool_id* to *status*, then notify listeners.

        ``last_sync`` and ``error`` replace the previous values; pass them
        explicitly when they should survive the transition.
        """
        current = self._record(tool_id)
        if status not in _ALLOWED[current.status]:
            raise InvalidTransitionError(
                f"Illegal transition for {tool_id}: {current.status} -> {status}", tool_id=tool_id
            )

        updated = Connection(tool_id=tool_id, status=status, last_sync=last_sync, error=error)
        self._connections[tool_id] = updated
        if current.status != status:
            logger.info("Connection %s: %s -> %s", tool_id, current.status, status)
        self._notify()
        return updated.copy()

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: ConnectionListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ConnectionListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def _notify(self) -> None:
        # Iterate over a copy so listeners may (un)register during notification.
        for listener in list(self._listeners):
            try:
                listener(self.snapshot())
            except Exception:
                logger.exception("Connection listener %r failed.", listener)

    def _record(self, tool_id: str) -> Connection:
        try:
            return self._connections[tool_id]
        except KeyError:
            raise UnknownToolError(tool_id) from None
