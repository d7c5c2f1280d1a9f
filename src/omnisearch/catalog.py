"""Static tool catalog.

The catalog is plain config data: an ordered tuple of :class:`Tool`
records consumed once when an engine is constructed.  Google tools are
credential-backed; everything else is simulated.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from omnisearch.models import DataSize, Tool

GOOGLE_TOOLS: tuple[Tool, ...] = (
    Tool("gmail", "Gmail", "communication", False, "Email management and search"),
    Tool("google-calendar", "Google Calendar", "productivity", False, "Calendar events and scheduling"),
    Tool("google-drive", "Google Drive", "file-storage", False, "File storage and document management"),
    Tool("google-sheets", "Google Sheets", "productivity", False, "Spreadsheet management and data analysis"),
    Tool("google-meet", "Google Meet", "communication", False, "Video conferencing and meetings"),
)

SIMULATED_TOOLS: tuple[Tool, ...] = (
    Tool("slack", "Slack", "communication", True, "Team communication and collaboration"),
    Tool("microsoft-teams", "Microsoft Teams", "communication", True, "Team collaboration and video meetings"),
    Tool("discord", "Discord", "communication", True, "Community and team communication"),
    Tool("jira", "Jira", "project-management", True, "Issue tracking and project management"),
    Tool("asana", "Asana", "project-management", True, "Team project and task management"),
    Tool("monday", "Monday.com", "project-management", True, "Work operating system"),
    Tool("trello", "Trello", "project-management", True, "Kanban boards and cards"),
    Tool("github", "GitHub", "development", True, "Code hosting and collaboration"),
    Tool("gitlab", "GitLab", "development", True, "DevOps platform"),
    Tool("bitbucket", "Bitbucket", "development", True, "Git repository hosting"),
)

DEFAULT_CATALOG: tuple[Tool, ...] = GOOGLE_TOOLS + SIMULATED_TOOLS

_LARGE_TOOLS = frozenset({"slack", "gmail", "github", "jira"})
_MEDIUM_TOOLS = frozenset({"microsoft-teams", "asana", "notion", "confluence"})


def data_size_for(tool_id: str) -> DataSize:
    """Volume tier used only to size a simulated dataset."""
    if tool_id in _LARGE_TOOLS:
        return "large"
    if tool_id in _MEDIUM_TOOLS:
        return "medium"
    return "small"


def validate_catalog(tools: Iterable[Tool]) -> tuple[Tool, ...]:
    """Freeze *tools* into a tuple, rejecting duplicate ids."""
    frozen = tuple(tools)
    seen: set[str] = set()
    for tool in frozen:
        if tool.id in seen:
            raise ValueError(f"Duplicate tool id in catalog: {tool.id}")
        seen.add(tool.id)
    return frozen


def find_tool(catalog: Sequence[Tool], tool_id: str) -> Tool | None:
    for tool in catalog:
        if tool.id == tool_id:
            return tool
    return None
