"""
Notes Backend - Session Token Tests
====================================

What we test:
    - Issue/verify round trip returns the same user id
    - Lifetime: 7 days by default, 30 days with remember_me
    - Tampered, expired, foreign-secret and malformed tokens are rejected
    - Tokens without a usable subject raise MissingClaimError
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from notesapp.exceptions import InvalidTokenError, MissingClaimError, UnauthorizedError
from notesapp.services.token_service import TokenService


def _flip_char(s: str, index: int) -> str:
    replacement = "A" if s[index] != "A" else "B"
    return s[:index] + replacement + s[index + 1:]


class TestTokenRoundTrip:

    def test_verify_returns_issued_user_id(self, test_settings):
        service = TokenService(test_settings)
        token = service.issue(42)
        assert service.verify(token) == 42

    def test_subject_is_string_claim(self, test_settings):
        token = TokenService(test_settings).issue(7)
        payload = jwt.decode(token, test_settings.jwt_secret, algorithms=["HS256"])
        assert payload["sub"] == "7"
        assert "iat" in payload and "exp" in payload

    @pytest.mark.parametrize(
        "remember_me, days",
        [(False, 7), (True, 30)],
    )
    def test_lifetime_selected_by_remember_me(self, test_settings, remember_me, days):
        token = TokenService(test_settings).issue(1, remember_me=remember_me)
        payload = jwt.decode(token, test_settings.jwt_secret, algorithms=["HS256"])
        assert payload["exp"] - payload["iat"] == int(timedelta(days=days).total_seconds())


class TestTokenRejection:

    def test_tampered_signature(self, test_settings):
        service = TokenService(test_settings)
        header, payload, signature = service.issue(1).split(".")
        tampered = ".".join([header, payload, _flip_char(signature, len(signature) // 2)])

        with pytest.raises(InvalidTokenError):
            service.verify(tampered)

    def test_tampered_payload(self, test_settings):
        service = TokenService(test_settings)
        header, payload, signature = service.issue(1).split(".")
        tampered = ".".join([header, _flip_char(payload, 0), signature])

        with pytest.raises(InvalidTokenError):
            service.verify(tampered)

    def test_signed_with_other_secret(self, test_settings):
        other = jwt.encode(
            {"sub": "1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            TokenService(test_settings).verify(other)

    def test_expired(self, test_settings):
        expired = jwt.encode(
            {"sub": "1", "exp": datetime.now(timezone.utc) - timedelta(seconds=5)},
            test_settings.jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            TokenService(test_settings).verify(expired)

    def test_missing_exp_rejected(self, test_settings):
        no_exp = jwt.encode({"sub": "1"}, test_settings.jwt_secret, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            TokenService(test_settings).verify(no_exp)

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c"])
    def test_malformed(self, test_settings, garbage):
        with pytest.raises(InvalidTokenError):
            TokenService(test_settings).verify(garbage)

    def test_missing_subject(self, test_settings):
        token = jwt.encode(
            {"exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            test_settings.jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(MissingClaimError):
            TokenService(test_settings).verify(token)

    def test_non_numeric_subject(self, test_settings):
        token = jwt.encode(
            {"sub": "alice", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            test_settings.jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(MissingClaimError):
            TokenService(test_settings).verify(token)

    def test_rejections_are_unauthorized(self):
        assert issubclass(InvalidTokenError, UnauthorizedError)
        assert issubclass(MissingClaimError, UnauthorizedError)
        assert InvalidTokenError().status_code == 401
