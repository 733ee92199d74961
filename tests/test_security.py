"""
Tests for credential helpers and the error taxonomy.
"""
from datetime import datetime, timedelta, timezone

from chat.core import errors
from chat.core.security import (
    hash_password,
    new_token,
    strip_bearer,
    tokens_match,
    verify_password,
)
from chat.core.timeutil import as_utc, format_timestamp


class TestPasswordHashing:

    def test_verify_round_trip(self):
        encoded = hash_password("hunter2", iterations=1_000)
        assert encoded.startswith("pbkdf2_sha256$1000$")
        assert verify_password("hunter2", encoded)
        assert not verify_password("hunter3", encoded)

    def test_salts_differ(self):
        assert hash_password("hunter2", iterations=1_000) != hash_password("hunter2", iterations=1_000)

    def test_malformed_hash_never_verifies(self):
        assert not verify_password("hunter2", "")
        assert not verify_password("hunter2", "md5$1$abc$def")
        assert not verify_password("hunter2", "pbkdf2_sha256$many$abc$def")


class TestTokens:

    def test_new_tokens_are_unique(self):
        assert new_token() != new_token()

    def test_strip_bearer(self):
        assert strip_bearer("Bearer abc") == "abc"
        assert strip_bearer("bearer abc") == "abc"
        assert strip_bearer("BEARER abc") == "abc"
        assert strip_bearer("abc") == "abc"

    def test_tokens_match(self):
        assert tokens_match("abc", "abc")
        assert not tokens_match("abc", "abd")
        assert not tokens_match(None, "abc")
        assert not tokens_match("", "")


class TestTimestamps:

    def test_naive_values_are_utc(self):
        assert as_utc(datetime(2024, 1, 2, 3, 4, 5)).tzinfo == timezone.utc

    def test_rfc3339_format(self):
        value = datetime(2024, 1, 2, 5, 4, 5, 999, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2024-01-02T03:04:05Z"
        assert format_timestamp(None) is None


def test_error_hierarchy():
    assert issubclass(errors.UnsupportedContentType, errors.ValidationError)
    assert issubclass(errors.UnknownVideoSource, errors.ValidationError)
    assert issubclass(errors.Forbidden, errors.AuthError)
    assert issubclass(errors.Unauthorized, errors.AuthError)
    assert issubclass(errors.TransactionFailed, errors.StoreError)
    assert all(
        issubclass(cls, errors.ChatError)
        for cls in (errors.ValidationError, errors.AuthError, errors.StoreError, errors.ConflictError)
    )


def test_error_status_codes():
    assert errors.UnsupportedContentType("sticker").status_code == 400
    assert errors.UnknownVideoSource("vimeo").status_code == 400
    assert errors.Forbidden().status_code == 403
    assert errors.Unauthorized().status_code == 401
    assert errors.UsernameTaken("alice").status_code == 409
    assert errors.TransactionFailed().status_code == 500


def test_error_attributes():
    err = errors.UnsupportedContentType("sticker")
    assert str(err) == "Unrecognized message type: sticker"
    assert err.details == {"type": "sticker"}
    assert errors.StoreError().message == "store error"
