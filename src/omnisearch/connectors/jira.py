"""JiraConnector — simulated issue tracker."""

from __future__ import annotations

import asyncio

from omnisearch.connectors.simulated import SimulatedConnector
from omnisearch.models import SearchResult

_PROJECTS = ("PROJ", "ALPHA", "BETA", "GAMMA", "DELTA", "WEB", "API", "MOBILE")
_ISSUE_TYPES = ("Bug", "Feature", "Task", "Story", "Epic", "Improvement")
_STATUSES = ("To Do", "In Progress", "Code Review", "Testing", "Done", "Closed")

_TITLES = (
    "Fix login authentication issue",
    "Implement new dashboard design",
    "Add search functionality to user list",
    "Optimize database queries for performance",
    "Create API documentation",
    "Fix responsive layout on mobile",
    "Add unit tests for payment module",
    "Implement user role management",
    "Fix memory leak in background service",
    "Add export functionality to budget reports",
    "Implement real-time notifications",
    "Implement caching mechanism",
)

_DESCRIPTIONS = (
    "As a user, I want to log in to the system so that I can access my dashboard.",
    "The current implementation has slow response times. We need to optimize the queries.",
    "Bug reported by QA. Steps to reproduce are attached to the ticket.",
    "Technical debt item. The module needs to be refactored before the next release.",
    "Performance improvement needed. Current response time is above target.",
    "Security finding in the auth component. Needs immediate attention.",
)


class JiraConnector(SimulatedConnector):
    """Yields ``issue`` results with project and assignee metadata."""

    def build_item(self, index: int) -> SearchResult:
        rng = self.rng
        project = rng.choice(_PROJECTS)
        issue_key = f"{project}-{rng.randint(1, 1000)}"
        assignee = self.random_author()
        return self.make_result(
            title=f"{issue_key}: {rng.choice(_TITLES)}",
            body=rng.choice(_DESCRIPTIONS),
            content_type="issue",
            author=assignee,
            url=f"https://jira.com/browse/{issue_key}",
            metadata={
                "issue_key": issue_key,
                "project": project,
                "issue_type": rng.choice(_ISSUE_TYPES),
                "status": rng.choice(_STATUSES),
                "priority": self.random_priority(),
                "assignee": assignee,
                "reporter": self.random_author(),
                "story_points": rng.choice((1, 2, 3, 5, 8, 13)),
                "labels": self.random_tags(),
            },
        )

    async def list_projects(self) -> list[str]:
        self._require_connected()
        await asyncio.sleep(self.config.search_delay.sample_seconds(self.rng))
        return list(_PROJECTS)
