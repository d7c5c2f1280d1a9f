"""GitHubConnector — simulated repositories, issues and commits."""

from __future__ import annotations

import asyncio

from omnisearch.connectors.simulated import SimulatedConnector
from omnisearch.models import SearchResult

_REPOSITORIES = (
    "frontend-app", "backend-api", "mobile-app", "data-pipeline",
    "auth-service", "payment-gateway", "notification-service", "admin-dashboard",
)

_LANGUAGES = {
    "JavaScript": ".js",
    "TypeScript": ".ts",
    "Python": ".py",
    "Java": ".java",
    "Go": ".go",
    "Rust": ".rs",
}

_BASENAMES = ("index", "main", "app", "server", "client", "utils", "config", "auth", "api")

_ISSUE_TITLES = (
    "Bug: Application crashes when submitting form",
    "Feature Request: Add export functionality to user dashboard",
    "Enhancement: Improve database query performance",
    "Security: Fix vulnerability in session handling",
    "Refactor: Clean up authentication code structure",
    "Test: Add unit tests for payment processing",
)

_COMMITS = (
    "Fix authentication bug in login flow",
    "Add new user dashboard component",
    "Refactor database connection logic",
    "Optimize search query performance",
    "Add error handling for API calls",
    "Update security headers configuration",
)

_DOCS = ("README.md", "CONTRIBUTING.md", "API.md", "CHANGELOG.md")


class GitHubConnector(SimulatedConnector):
    """Yields ``issue``, ``code`` and ``document`` results keyed by repository."""

    def build_item(self, index: int) -> SearchResult:
        rng = self.rng
        repository = rng.choice(_REPOSITORIES)
        author = self.random_author()
        kind = rng.choice(("issue", "code", "document"))

        if kind == "issue":
            number = rng.randint(1, 1000)
            return self.make_result(
                title=f"#{number}: {rng.choice(_ISSUE_TITLES)}",
                body=f"Issue in {repository} repository.",
                content_type="issue",
                author=author,
                url=f"https://github.com/acme/{repository}/issues/{number}",
                metadata={
                    "repository": repository,
                    "issue_number": number,
                    "state": "open" if rng.random() > 0.3 else "closed",
                    "comments": rng.randint(0, 20),
                    "labels": self.random_tags(),
                },
            )

        if kind == "code":
            language = rng.choice(sorted(_LANGUAGES))
            file_name = rng.choice(_BASENAMES) + _LANGUAGES[language]
            message = rng.choice(_COMMITS)
            commit = f"{rng.getrandbits(160):040x}"
            return self.make_result(
                title=f"{file_name} - {message}",
                body=f"Code changes in {repository}/{file_name}.",
                content_type="code",
                author=author,
                url=f"https://github.com/acme/{repository}/commit/{commit}",
                metadata={
                    "repository": repository,
                    "file_name": file_name,
                    "language": language,
                    "commit_hash": commit,
                    "lines_added": rng.randint(1, 100),
                    "lines_deleted": rng.randint(0, 50),
                },
            )

        doc = rng.choice(_DOCS)
        return self.make_result(
            title=f"{doc} - Documentation Update",
            body=f"Documentation update in {repository}.",
            content_type="document",
            author=author,
            url=f"https://github.com/acme/{repository}/blob/main/{doc}",
            metadata={"repository": repository, "file_name": doc},
        )

    async def list_repositories(self) -> list[str]:
        self._require_connected()
        await asyncio.sleep(self.config.search_delay.sample_seconds(self.rng))
        return list(_REPOSITORIES)
