"""Error taxonomy for the connector engine.

Every error carries a ``retryable`` flag so callers (the retry handler,
the health monitor) can decide what to do without string matching.

Hierarchy
---------
* ``OmnisearchError``
    * ``ConnectionFailedError``   — connect handshake failed (retryable)
        * ``AuthExpiredError``    — credentials no longer valid
        * ``TransientNetworkError``
    * ``NotConnectedError``       — operation on a disconnected tool
    * ``UnknownToolError``        — tool id missing from the catalog
    * ``ProbeTimeoutError`` / ``ProbeFailureError`` — health checks only
    * ``InvalidTransitionError``  — illegal connection state change
"""

from __future__ import annotations


class OmnisearchError(Exception):
    """Base class for all engine errors."""

    retryable: bool = False

    def __init__(self, message: str, *, tool_id: str = "") -> None:
        super().__init__(message)
        self.tool_id = tool_id


class ConnectionFailedError(OmnisearchError):
    """A connector could not complete its connect handshake."""

    retryable = True


class AuthExpiredError(ConnectionFailedError):
    """The credential backing a connector is missing or expired.

    Retrying is pointless until the user re-authenticates.
    """

    retryable = False


class TransientNetworkError(ConnectionFailedError):
    """A network-level failure that is expected to clear on its own."""

    retryable = True


class NotConnectedError(OmnisearchError):
    """Search or sync was attempted on a tool that is not connected."""


class UnknownToolError(OmnisearchError, LookupError):
    """The tool id is not part of the catalog."""

    def __init__(self, tool_id: str) -> None:
        super().__init__(f"Unknown tool: {tool_id}", tool_id=tool_id)


class ProbeTimeoutError(OmnisearchError):
    """A health probe did not finish within its timeout."""

    retryable = True


class ProbeFailureError(OmnisearchError):
    """A health probe raised an unclassified error."""

    retryable = True


class InvalidTransitionError(OmnisearchError):
    """A connection status change that the state machine does not allow."""
