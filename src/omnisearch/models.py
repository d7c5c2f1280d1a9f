"""Data contracts shared by connectors, the state stores, and callers.

Catalog entries and search results are frozen dataclasses.  ``Connection``
and ``HealthStatus`` are mutable records owned by the engine; callers only
ever receive copies of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Literal

ToolCategory = Literal[
    "communication",
    "project-management",
    "development",
    "documentation",
    "file-storage",
    "productivity",
    "crm",
    "analytics",
]

ContentType = Literal[
    "email",
    "document",
    "message",
    "task",
    "issue",
    "file",
    "calendar-event",
    "contact",
    "note",
    "code",
]

ConnectionState = Literal["disconnected", "connecting", "connected", "error"]
HealthState = Literal["healthy", "warning", "error", "disconnected"]
FailureKind = Literal["auth_expired", "transient", "timeout", "misconfigured"]
DataSize = Literal["small", "medium", "large"]


def utcnow() -> datetime:
    """Timezone-aware current time; every timestamp in the engine uses this."""
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tool:
    """A static catalog entry for one external tool."""

    id: str
    name: str
    category: ToolCategory
    is_simulated: bool = True
    description: str = ""


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DateRange:
    """Inclusive timestamp window."""

    start: datetime
    end: datetime

    def __contains__(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class SearchOptions:
    """Query shape passed unmodified from the caller to every connector.

    All filters are AND-combined.  ``tools`` only narrows the aggregator's
    fan-out; individual connectors ignore it.
    """

    query: str | None = None
    max_results: int | None = None
    content_types: tuple[ContentType, ...] | None = None
    date_range: DateRange | None = None
    author: str | None = None
    tools: tuple[str, ...] | None = None


@dataclass(frozen=True)
class SearchResult:
    """A single hit returned by a connector."""

    id: str
    title: str
    body: str
    tool: Tool
    content_type: ContentType
    url: str
    timestamp: datetime
    author: str | None = None
    relevance_score: float = 0.0
    """0-100, higher is better."""
    metadata: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def matches_text(self, needle: str) -> bool:
        """Case-insensitive substring match on title, body and author."""
        needle = needle.lower()
        return (
            needle in self.title.lower()
            or needle in self.body.lower()
            or (self.author is not None and needle in self.author.lower())
        )


# ---------------------------------------------------------------------------
# Engine state
# ---------------------------------------------------------------------------


@dataclass
class Connection:
    """Outcome of the last explicit operation on a tool."""

    tool_id: str
    status: ConnectionState = "disconnected"
    last_sync: datetime | None = None
    error: str | None = None

    def copy(self) -> Connection:
        return replace(self)


@dataclass
class HealthStatus:
    """Outcome of the last health probe on a tool."""

    tool_id: str
    status: HealthState = "disconnected"
    last_check: datetime = field(default_factory=utcnow)
    response_time_ms: float | None = None
    uptime_ms: float | None = None
    error_message: str | None = None
    failure_kind: FailureKind | None = None

    def copy(self) -> HealthStatus:
        return replace(self)


@dataclass(frozen=True)
class ConnectorStatus:
    """What a connector reports about itself (secondary to the store)."""

    is_connected: bool
    last_sync: datetime | None = None


@dataclass(frozen=True)
class ConnectionStats:
    """Aggregate view derived on demand from both state tracks."""

    total_tools: int = 0
    connected_tools: int = 0
    healthy_connections: int = 0
    warning_connections: int = 0
    error_connections: int = 0
    average_response_time_ms: float = 0.0
    total_uptime_ms: float = 0.0
