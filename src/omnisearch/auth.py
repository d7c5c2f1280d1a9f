"""Credential capability injected into credential-backed connectors.

The engine never runs an OAuth flow.  A connector only asks two
questions: *is the user signed in?* and *what is the current token?*
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from omnisearch.models import utcnow


@dataclass(frozen=True)
class Credentials:
    """An opaque bearer token with an optional expiry."""

    token: str
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or utcnow())


@runtime_checkable
class CredentialProvider(Protocol):
    """Anything that can answer the two credential questions."""

    def is_signed_in(self) -> bool: ...

    def get_credentials(self) -> Credentials | None: ...


class StaticCredentialProvider:
    """Holds a fixed credential; ``sign_out()`` drops it.

    Useful for scripts and tests where the token comes from the
    environment instead of an interactive sign-in.
    """

    def __init__(self, credentials: Credentials | None = None) -> None:
        self._credentials = credentials

    def is_signed_in(self) -> bool:
        return self._credentials is not None

    def get_credentials(self) -> Credentials | None:
        return self._credentials

    def sign_in(self, credentials: Credentials) -> None:
        self._credentials = credentials

    def sign_out(self) -> None:
        self._credentials = None


class SignedOutProvider:
    """Default provider: never signed in."""

    def is_signed_in(self) -> bool:
        return False

    def get_credentials(self) -> Credentials | None:
        return None
