"""GoogleConnector — credential-backed Gmail, Calendar and Drive access.

Uses httpx against the Google REST APIs.  The connector never signs the
user in: it asks the injected :class:`~omnisearch.auth.CredentialProvider`
for a bearer token and classifies failures as

* ``AuthExpiredError``       — signed out, token expired, HTTP 401/403
* ``TransientNetworkError``  — transport errors, timeouts, HTTP 5xx/429
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx

from omnisearch.auth import CredentialProvider
from omnisearch.config.settings import GoogleSettings
from omnisearch.connectors.base import BaseConnector, ConnectorConfig
from omnisearch.errors import AuthExpiredError, TransientNetworkError
from omnisearch.models import SearchOptions, SearchResult, utcnow

logger = logging.getLogger(__name__)

_DEFAULT_PAGE_SIZE = 25


def _parse_timestamp(value: str | None) -> datetime:
    if not value:
        return utcnow()
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return utcnow()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _rank_score(position: int, total: int) -> float:
    """API results arrive best-first; turn position into a 0-100 score."""
    if total <= 0:
        return 0.0
    return round(100.0 * (total - position) / total, 2)


class GoogleConnector(BaseConnector):
    """One Google service, selected by the tool id."""

    matches_query_locally = False

    def __init__(
        self,
        config: ConnectorConfig,
        credentials: CredentialProvider,
        google: GoogleSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self._credentials = credentials
        self._google = google or GoogleSettings()
        self._client = client
        self._owns_client = client is None

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    def _status_url(self) -> str | None:
        return {
            "gmail": f"{self._google.gmail_api}/users/me/profile",
            "google-calendar": f"{self._google.calendar_api}/users/me/calendarList",
            "google-drive": f"{self._google.drive_api}/about",
        }.get(self.tool_id)

    def _search_endpoint(self) -> tuple[str, Callable[[SearchOptions, int], dict[str, Any]], str] | None:
        """(url, params builder, items key) for tools that support search."""
        if self.tool_id == "gmail":
            return (
                f"{self._google.gmail_api}/users/me/threads",
                lambda o, n: {"q": o.query or "", "maxResults": n},
                "threads",
            )
        if self.tool_id == "google-calendar":
            return (
                f"{self._google.calendar_api}/calendars/primary/events",
                lambda o, n: {"q": o.query or "", "maxResults": n, "singleEvents": "true"},
                "items",
            )
        if self.tool_id == "google-drive":
            return (
                f"{self._google.drive_api}/files",
                lambda o, n: {
                    "q": f"fullText contains '{(o.query or '').replace(chr(39), '')}'" if o.query else "",
                    "pageSize": n,
                    "fields": "files(id,name,mimeType,webViewLink,modifiedTime,owners(displayName))",
                },
                "files",
            )
        return None

    # ------------------------------------------------------------------
    # Connector hooks
    # ------------------------------------------------------------------

    async def _handshake(self) -> None:
        self._token()

    async def probe(self) -> None:
        self._require_connected()
        url = self._status_url()
        if url is None:
            # No cheap endpoint; a valid credential is the whole check.
            self._token()
            return
        await self._get(url, {"fields": "user"} if self.tool_id == "google-drive" else None)

    async def _fetch(self, options: SearchOptions) -> list[SearchResult]:
        endpoint = self._search_endpoint()
        if endpoint is None:
            return []
        url, build_params, key = endpoint
        page = options.max_results or _DEFAULT_PAGE_SIZE
        params = {k: v for k, v in build_params(options, page).items() if v != ""}
        payload = await self._get(url, params)
        items = payload.get(key, []) or []
        return [self._to_result(item, i, len(items)) for i, item in enumerate(items)]

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _token(self) -> str:
        if not self._credentials.is_signed_in():
            raise AuthExpiredError("Google authentication expired", tool_id=self.tool_id)
        creds = self._credentials.get_credentials()
        if creds is None or creds.is_expired():
            raise AuthExpiredError("Google credentials expired", tool_id=self.tool_id)
        return creds.token

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._google.request_timeout_seconds)
        headers = {"Authorization": f"Bearer {self._token()}", "Accept": "application/json"}
        try:
            resp = await self._client.get(url, params=params, headers=headers)
        except httpx.TransportError as exc:
            raise TransientNetworkError(
                f"{self.tool.name} request failed: {exc}", tool_id=self.tool_id
            ) from exc

        if resp.status_code in (401, 403):
            raise AuthExpiredError(
                f"{self.tool.name} rejected credentials (HTTP {resp.status_code})", tool_id=self.tool_id
            )
        if resp.status_code == 429 or resp.status_code >= 500:
            raise TransientNetworkError(
                f"{self.tool.name} unavailable (HTTP {resp.status_code})", tool_id=self.tool_id
            )
        resp.raise_for_status()
        return resp.json()

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def _to_result(self, item: dict[str, Any], position: int, total: int) -> SearchResult:
        score = _rank_score(position, total)

        if self.tool_id == "gmail":
            snippet = item.get("snippet", "")
            thread_id = item.get("id", "")
            return SearchResult(
                id=f"gmail-{thread_id}",
                title=snippet[:80] or "(no subject)",
                body=snippet,
                tool=self.tool,
                content_type="email",
                url=f"https://mail.google.com/mail/u/0/#inbox/{thread_id}",
                timestamp=utcnow(),
                relevance_score=score,
                metadata={"thread_id": thread_id},
            )

        if self.tool_id == "google-calendar":
            start = item.get("start", {})
            return SearchResult(
                id=f"google-calendar-{item.get('id', '')}",
                title=item.get("summary", "(untitled event)"),
                body=item.get("description", ""),
                tool=self.tool,
                content_type="calendar-event",
                url=item.get("htmlLink", ""),
                timestamp=_parse_timestamp(start.get("dateTime") or start.get("date")),
                author=item.get("creator", {}).get("email"),
                relevance_score=score,
                metadata={"location": item.get("location", ""), "status": item.get("status", "")},
            )

        owners = item.get("owners") or [{}]
        return SearchResult(
            id=f"google-drive-{item.get('id', '')}",
            title=item.get("name", ""),
            body=item.get("mimeType", ""),
            tool=self.tool,
            content_type="file",
            url=item.get("webViewLink", ""),
            timestamp=_parse_timestamp(item.get("modifiedTime")),
            author=owners[0].get("displayName"),
            relevance_score=score,
            metadata={"mime_type": item.get("mimeType", "")},
        )
