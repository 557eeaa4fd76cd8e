"""Unit tests for the token codec."""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from app.core.config import Settings
from app.core.errors import ConfigurationError, TokenExpired, TokenInvalid, VerificationFailed
from app.core.tokens import TokenCodec

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestIssue:
    def test_round_trip_access(self, codec):
        pair = codec.issue("user-1", "a@x.com", now=NOW)

        payload = codec.verify_access(pair.access_token, now=NOW)

        assert payload.user_id == "user-1"
        assert payload.email == "a@x.com"
        assert payload.expires_at == NOW + timedelta(minutes=15)

    def test_round_trip_refresh(self, codec):
        pair = codec.issue("user-1", "a@x.com", now=NOW)

        payload = codec.verify_refresh(pair.refresh_token, now=NOW)

        assert payload.user_id == "user-1"
        assert payload.expires_at == NOW + timedelta(days=7)

    def test_refresh_token_carries_only_the_user_id(self, codec):
        pair = codec.issue("user-1", "a@x.com", now=NOW)

        claims = codec.decode_unverified(pair.refresh_token)

        assert claims["sub"] == "user-1"
        assert "email" not in claims

    def test_issue_access_matches_pair_access(self, codec):
        token = codec.issue_access("user-1", "a@x.com", now=NOW)

        assert codec.verify_access(token, now=NOW).user_id == "user-1"


class TestSigningDomains:
    def test_refresh_token_is_not_an_access_token(self, codec):
        pair = codec.issue("user-1", "a@x.com", now=NOW)

        with pytest.raises(TokenInvalid):
            codec.verify_access(pair.refresh_token, now=NOW)

    def test_access_token_is_not_a_refresh_token(self, codec):
        pair = codec.issue("user-1", "a@x.com", now=NOW)

        with pytest.raises(TokenInvalid):
            codec.verify_refresh(pair.access_token, now=NOW)

    def test_foreign_secret_is_rejected(self, codec):
        other = TokenCodec("another-access", "another-refresh")
        token = other.issue_access("user-1", "a@x.com", now=NOW)

        with pytest.raises(TokenInvalid):
            codec.verify_access(token, now=NOW)

    def test_garbage_is_invalid(self, codec):
        with pytest.raises(TokenInvalid):
            codec.verify_access("not.a.token")


class TestExpiry:
    def test_one_second_before_expiry_verifies(self, codec):
        pair = codec.issue("user-1", "a@x.com", now=NOW)

        before = NOW + timedelta(minutes=15) - timedelta(seconds=1)

        assert codec.verify_access(pair.access_token, now=before).user_id == "user-1"

    def test_after_expiry_fails(self, codec):
        pair = codec.issue("user-1", "a@x.com", now=NOW)

        after = NOW + timedelta(minutes=15) + timedelta(seconds=1)

        with pytest.raises(TokenExpired):
            codec.verify_access(pair.access_token, now=after)

    def test_refresh_expires_after_seven_days(self, codec):
        pair = codec.issue("user-1", "a@x.com", now=NOW)

        with pytest.raises(TokenExpired):
            codec.verify_refresh(pair.refresh_token, now=NOW + timedelta(days=7, seconds=1))

    def test_expired_by_wall_clock(self, codec):
        pair = codec.issue("user-1", "a@x.com", now=datetime.now(tz=timezone.utc) - timedelta(hours=1))

        with pytest.raises(TokenExpired):
            codec.verify_access(pair.access_token)


class TestVerificationFailed:
    def test_empty_token(self, codec):
        with pytest.raises(VerificationFailed):
            codec.verify_access("")

    def test_non_string_token(self, codec):
        with pytest.raises(VerificationFailed):
            codec.verify_access(None)  # type: ignore[arg-type]

    def test_access_claims_without_email(self, codec):
        token = jwt.encode(
            {"sub": "user-1", "exp": NOW + timedelta(minutes=5)}, "unit-access-secret", algorithm="HS256"
        )

        with pytest.raises(VerificationFailed):
            codec.verify_access(token, now=NOW)

    def test_claims_without_exp(self, codec):
        token = jwt.encode({"sub": "user-1"}, "unit-refresh-secret", algorithm="HS256")

        with pytest.raises(VerificationFailed):
            codec.verify_refresh(token, now=NOW)


class TestConfiguration:
    def test_equal_secrets_fail_fast(self):
        with pytest.raises(ConfigurationError):
            TokenCodec("same", "same")

    @pytest.mark.parametrize("access, refresh", [(None, "r"), ("a", None), ("", "r")])
    def test_missing_secret_fails_fast(self, access, refresh):
        with pytest.raises(ConfigurationError):
            TokenCodec(access, refresh)

    def test_settings_reject_shared_secret(self):
        with pytest.raises(ConfigurationError):
            Settings(ACCESS_TOKEN_SECRET="shared", REFRESH_TOKEN_SECRET="shared", _env_file=None)

    def test_settings_build_codec(self):
        s = Settings(
            ACCESS_TOKEN_SECRET="a-secret",
            REFRESH_TOKEN_SECRET="r-secret",
            ACCESS_TOKEN_EXPIRE_MINUTES=5,
            _env_file=None,
        )

        codec = TokenCodec.from_settings(s)

        assert codec.access_ttl == timedelta(minutes=5)
        assert codec.refresh_ttl == timedelta(days=7)


def test_decode_unverified_returns_none_for_garbage(codec):
    assert codec.decode_unverified("garbage") is None
