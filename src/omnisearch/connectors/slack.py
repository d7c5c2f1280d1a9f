"""SlackConnector — simulated workspace messages."""

from __future__ import annotations

import asyncio

from omnisearch.connectors.simulated import SimulatedConnector
from omnisearch.models import SearchResult

_CHANNELS = (
    "#general", "#development", "#marketing", "#design", "#random",
    "#announcements", "#help", "#project-alpha", "#client-updates", "#standup",
)

_MESSAGES = (
    "Just pushed the latest changes to the repo. Please review when you get a chance!",
    "Great job on the presentation today! The client was really impressed.",
    "Can someone help me with the deployment process? Having some issues.",
    "Lunch meeting moved to 1 PM in the main conference room.",
    "New design mockups are ready for review.",
    "Server maintenance scheduled for this weekend. Plan accordingly.",
    "Quick reminder: all-hands meeting tomorrow at 10 AM.",
    "Sprint planning meeting starts in 15 minutes in Conference Room A.",
    "Client feedback on the latest prototype is very positive.",
    "Quarterly budget goals have been updated. Please review and provide feedback.",
    "Security training is mandatory for all team members this month.",
    "Please remember to submit your timesheets by end of day.",
)

_REACTIONS = ("+1", "heart", "smile", "tada", "clap", "fire", "100", "white_check_mark")


class SlackConnector(SimulatedConnector):
    """Yields ``message`` results with channel and reaction metadata."""

    def build_item(self, index: int) -> SearchResult:
        rng = self.rng
        channel = rng.choice(_CHANNELS)
        author = self.random_author()
        reactions = [
            {"emoji": emoji, "count": rng.randint(1, 5)}
            for emoji in rng.sample(_REACTIONS, k=rng.randint(0, 3))
        ]
        return self.make_result(
            title=f"Message in {channel}",
            body=rng.choice(_MESSAGES),
            content_type="message",
            author=author,
            metadata={
                "channel": channel,
                "reactions": reactions,
                "replies": rng.randint(0, 4),
                "is_thread": rng.random() > 0.7,
                "tags": self.random_tags(),
                "department": self.random_department(),
            },
        )

    async def list_channels(self) -> list[str]:
        self._require_connected()
        await asyncio.sleep(self.config.search_delay.sample_seconds(self.rng))
        return list(_CHANNELS)
