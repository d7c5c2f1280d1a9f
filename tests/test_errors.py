"""Tests for the error taxonomy."""

from __future__ import annotations

import pytest

from omnisearch.errors import (
    AuthExpiredError,
    ConnectionFailedError,
    InvalidTransitionError,
    NotConnectedError,
    OmnisearchError,
    ProbeFailureError,
    ProbeTimeoutError,
    TransientNetworkError,
    UnknownToolError,
)


class TestRetryable:
    @pytest.mark.parametrize(
        "cls, expected",
        [
            (ConnectionFailedError, True),
            (AuthExpiredError, False),
            (TransientNetworkError, True),
            (NotConnectedError, False),
            (ProbeTimeoutError, True),
            (ProbeFailureError, True),
            (InvalidTransitionError, False),
        ],
    )
    def test_flags(self, cls: type[OmnisearchError], expected: bool) -> None:
        assert cls("boom").retryable is expected

    def test_auth_expired_is_a_connection_failure(self) -> None:
        assert issubclass(AuthExpiredError, ConnectionFailedError)
        assert issubclass(TransientNetworkError, ConnectionFailedError)


class TestUnknownTool:
    def test_is_lookup_error(self) -> None:
        err = UnknownToolError("nope")
        assert isinstance(err, LookupError)
        assert isinstance(err, OmnisearchError)
        assert err.tool_id == "nope"
        assert "nope" in str(err)


def test_tool_id_is_carried() -> None:
    err = ConnectionFailedError("failed", tool_id="slack")
    assert err.tool_id == "slack"
    assert str(err) == "failed"
