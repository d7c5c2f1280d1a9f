"""Tests for the credential capability."""

from __future__ import annotations

from datetime import timedelta

from omnisearch.auth import (
    CredentialProvider,
    Credentials,
    SignedOutProvider,
    StaticCredentialProvider,
)
from omnisearch.models import utcnow


class TestCredentials:
    def test_no_expiry_never_expires(self) -> None:
        assert not Credentials("tok").is_expired()

    def test_past_expiry(self) -> None:
        creds = Credentials("tok", expires_at=utcnow() - timedelta(minutes=1))
        assert creds.is_expired()

    def test_future_expiry(self) -> None:
        creds = Credentials("tok", expires_at=utcnow() + timedelta(hours=1))
        assert not creds.is_expired()


class TestProviders:
    def test_static_provider_sign_in_out(self) -> None:
        provider = StaticCredentialProvider()
        assert not provider.is_signed_in()
        provider.sign_in(Credentials("tok"))
        assert provider.is_signed_in()
        assert provider.get_credentials() == Credentials("tok")
        provider.sign_out()
        assert provider.get_credentials() is None

    def test_signed_out_provider(self) -> None:
        provider = SignedOutProvider()
        assert not provider.is_signed_in()
        assert provider.get_credentials() is None

    def test_protocol_conformance(self) -> None:
        assert isinstance(StaticCredentialProvider(), CredentialProvider)
        assert isinstance(SignedOutProvider(), CredentialProvider)
