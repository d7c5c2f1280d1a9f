"""Simulated connectors — an in-memory dataset per tool.

A dataset is generated once per connector instance from the connector's
own seeded RNG and reused for every search, so repeated queries on an
unchanged connector return identical results.  Subclasses only decide
what an item looks like.
"""

from __future__ import annotations

import logging
import random
from abc import abstractmethod
from datetime import datetime, timedelta
from typing import Any

from omnisearch.connectors.base import BaseConnector, ConnectorConfig
from omnisearch.models import ContentType, SearchOptions, SearchResult, utcnow

logger = logging.getLogger(__name__)

_AUTHORS = (
    "John Smith", "Sarah Johnson", "Mike Chen", "Emily Davis",
    "David Wilson", "Lisa Anderson", "Chris Brown", "Amanda Taylor",
    "Ryan Martinez", "Jessica Garcia", "Kevin Lee", "Michelle White",
)
_TAGS = (
    "urgent", "important", "review", "planning", "meeting", "project",
    "client", "team", "bug", "feature", "documentation", "security",
)
_DEPARTMENTS = (
    "Engineering", "Marketing", "Sales", "HR", "Finance",
    "Operations", "Design", "Product", "Legal", "Support",
)

# (min, max) item counts per data-volume tier.
_TIER_BOUNDS = {"small": (10, 30), "medium": (30, 100), "large": (100, 500)}


class SimulatedConnector(BaseConnector):
    """Base for connectors backed by a generated dataset."""

    max_items: int | None = None
    """Optional cap on the generated dataset size."""

    def __init__(self, config: ConnectorConfig) -> None:
        super().__init__(config)
        self._dataset: list[SearchResult] | None = None

    async def _fetch(self, options: SearchOptions) -> list[SearchResult]:
        if self._dataset is None:
            self._dataset = self._generate()
            logger.debug("Generated %d items for %s.", len(self._dataset), self.tool_id)
        return list(self._dataset)

    def _generate(self) -> list[SearchResult]:
        count = self.dataset_size()
        return [self.build_item(i) for i in range(count)]

    def dataset_size(self) -> int:
        low, high = _TIER_BOUNDS.get(self.config.data_size, (50, 50))
        count = self._rng.randint(low, high)
        if self.max_items is not None:
            count = min(count, self.max_items)
        return count

    @abstractmethod
    def build_item(self, index: int) -> SearchResult:
        """Return the *index*-th generated item."""

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    @property
    def rng(self) -> random.Random:
        return self._rng

    def make_result(
        self,
        *,
        title: str,
        body: str,
        content_type: ContentType,
        author: str | None = None,
        timestamp: datetime | None = None,
        url: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SearchResult:
        item_id = f"{self.tool_id}-{self._rng.getrandbits(48):012x}"
        slug = self.tool.name.lower().replace(" ", "")
        return SearchResult(
            id=item_id,
            title=title,
            body=body,
            tool=self.tool,
            content_type=content_type,
            url=url or f"https://{slug}.com/item/{item_id}",
            timestamp=timestamp or self.random_timestamp(),
            author=author,
            relevance_score=round(self._rng.uniform(0.0, 100.0), 2),
            metadata=metadata or {},
        )

    def random_author(self) -> str:
        return self._rng.choice(_AUTHORS)

    def random_timestamp(self, days: int = 30) -> datetime:
        return utcnow() - timedelta(seconds=self._rng.uniform(0, days * 86400))

    def random_tags(self) -> list[str]:
        return sorted(set(self._rng.choices(_TAGS, k=self._rng.randint(0, 3))))

    def random_department(self) -> str:
        return self._rng.choice(_DEPARTMENTS)

    def random_priority(self) -> str:
        return self._rng.choice(("low", "medium", "high"))


class GenericConnector(SimulatedConnector):
    """Fallback for tools without a dedicated connector.

    Titles cycle through a fixed list so every template is present in any
    dataset of at least ``len(_GENERIC_ITEMS)`` items.
    """

    max_items = 20

    _GENERIC_ITEMS: tuple[tuple[str, str, ContentType], ...] = (
        ("Project Update Document", "Status of ongoing projects and initiatives.", "document"),
        ("Team Meeting Notes", "Key decisions and action items for the team.", "message"),
        ("Client Feedback Summary", "Feedback from client interactions and recommendations.", "document"),
        ("Weekly Status Report", "Progress across major activities and milestones.", "task"),
        ("Process Documentation", "Current processes and procedures.", "document"),
        ("Training Materials", "Onboarding and skill development material.", "file"),
        ("Policy Guidelines", "Company policies for employee reference.", "document"),
        ("Performance Metrics", "KPI analysis for the current quarter.", "file"),
        ("Budget Analysis", "Financial analysis and budget allocation for upcoming projects.", "file"),
        ("Strategic Planning", "Long-term business objectives.", "task"),
    )

    def dataset_size(self) -> int:
        return max(super().dataset_size(), len(self._GENERIC_ITEMS))

    def build_item(self, index: int) -> SearchResult:
        title, body, content_type = self._GENERIC_ITEMS[index % len(self._GENERIC_ITEMS)]
        return self.make_result(
            title=title,
            body=body,
            content_type=content_type,
            author=self.random_author(),
            metadata={
                "priority": self.random_priority(),
                "tags": self.random_tags(),
                "department": self.random_department(),
            },
        )
