"""
Notes Backend - Google Identity Verifier Tests
===============================================

What:  Tests for GoogleIdentityVerifier and claim extraction.
How:   google-auth's verify_oauth2_token is patched; no network calls.

What we test:
    - Verified claims become an ExternalIdentity (name falls back to email local part)
    - Every verification failure collapses to None
    - Missing client id short-circuits without calling Google
"""

import threading
from unittest.mock import patch

import pytest
from google.auth import exceptions as google_exceptions

from notesapp.config import Settings
from notesapp.services.google_service import (
    ExternalIdentity,
    GoogleIdentityVerifier,
    identity_from_claims,
)

VERIFY_PATH = "notesapp.services.google_service.google_id_token.verify_oauth2_token"

CLAIMS = {
    "iss": "https://accounts.google.com",
    "sub": "1098765432",
    "email": "Carol@Example.com",
    "email_verified": True,
    "name": "Carol Danvers",
    "picture": "https://lh3.googleusercontent.com/a/photo.jpg",
}


class TestIdentityFromClaims:

    def test_full_claims(self):
        identity = identity_from_claims(CLAIMS)
        assert identity == ExternalIdentity(
            external_id="1098765432",
            email="carol@example.com",
            name="Carol Danvers",
            picture="https://lh3.googleusercontent.com/a/photo.jpg",
        )

    def test_name_falls_back_to_email_local_part(self):
        claims = {k: v for k, v in CLAIMS.items() if k != "name"}
        assert identity_from_claims(claims).name == "carol"

    def test_blank_name_falls_back(self):
        assert identity_from_claims({**CLAIMS, "name": "   "}).name == "carol"

    def test_missing_email(self):
        claims = {k: v for k, v in CLAIMS.items() if k != "email"}
        assert identity_from_claims(claims) is None

    def test_missing_subject(self):
        claims = {k: v for k, v in CLAIMS.items() if k != "sub"}
        assert identity_from_claims(claims) is None

    def test_unverified_email(self):
        assert identity_from_claims({**CLAIMS, "email_verified": False}) is None

    def test_long_display_name_cut_to_column_size(self):
        identity = identity_from_claims({**CLAIMS, "name": "Carol " + "x" * 200})
        assert len(identity.name) == 100
        assert identity.name.startswith("Carol x")


class TestGoogleIdentityVerifier:

    def setup_method(self):
        self.settings = Settings(google_client_id="client-123.apps.googleusercontent.com")

    @pytest.mark.asyncio
    async def test_valid_token(self):
        verifier = GoogleIdentityVerifier(self.settings)
        with patch(VERIFY_PATH, return_value=CLAIMS) as mock_verify:
            identity = await verifier.verify("raw-id-token")

        assert identity.email == "carol@example.com"
        assert identity.external_id == "1098765432"
        args = mock_verify.call_args.args
        assert args[0] == "raw-id-token"
        assert args[2] == "client-123.apps.googleusercontent.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            ValueError("Token has wrong audience"),
            ValueError("Token expired"),
            google_exceptions.TransportError("certificate fetch failed"),
            google_exceptions.GoogleAuthError("bad signature"),
        ],
    )
    async def test_failures_collapse_to_none(self, error):
        verifier = GoogleIdentityVerifier(self.settings)
        with patch(VERIFY_PATH, side_effect=error):
            assert await verifier.verify("raw-id-token") is None

    @pytest.mark.asyncio
    async def test_verified_token_without_email(self):
        verifier = GoogleIdentityVerifier(self.settings)
        claims = {k: v for k, v in CLAIMS.items() if k != "email"}
        with patch(VERIFY_PATH, return_value=claims):
            assert await verifier.verify("raw-id-token") is None

    def test_transport_is_per_thread(self):
        verifier = GoogleIdentityVerifier(self.settings)
        seen = []
        worker = threading.Thread(target=lambda: seen.append(verifier._transport()))
        worker.start()
        worker.join()

        assert verifier._transport() is verifier._transport()
        assert seen[0] is not verifier._transport()

    @pytest.mark.asyncio
    async def test_unconfigured_client_id(self):
        verifier = GoogleIdentityVerifier(Settings(google_client_id=""))
        with patch(VERIFY_PATH) as mock_verify:
            assert await verifier.verify("raw-id-token") is None
        mock_verify.assert_not_called()
