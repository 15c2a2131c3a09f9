"""
Notes Backend - Google Identity Verifier
=========================================

What:  Verifies Google Sign-In ID tokens and extracts the identity claims.
How:   google-auth's verify_oauth2_token checks signature (Google's published
       certificates), issuer, audience (our OAuth client id) and expiry. The
       call does blocking HTTP for the certificates, so it runs on the
       threadpool, each worker thread with its own HTTP session.
Who:   AuthService.google_auth.

Failure Policy:
    Every failure (malformed token, wrong audience, expired, certificate
    fetch failed, no email claim) collapses to None. Callers report one
    generic "invalid token" error and never learn which check failed.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import google.auth.transport.requests
from google.auth import exceptions as google_exceptions
from google.oauth2 import id_token as google_id_token
from starlette.concurrency import run_in_threadpool

from notesapp.config import Settings
from notesapp.models.user import NAME_MAX_LENGTH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExternalIdentity:
    """Identity asserted by a verified Google ID token."""
    external_id: str
    email: str
    name: str
    picture: Optional[str] = None


def identity_from_claims(claims: Mapping[str, Any]) -> Optional[ExternalIdentity]:
    """
    Build an ExternalIdentity from verified token claims.

    Returns None when sub or email is missing, or when Google marks the
    email as unverified. The display name falls back to the local part of
    the email address and is cut to what users.name holds.
    """
    subject = claims.get("sub")
    email = (claims.get("email") or "").strip().lower()
    if not subject or not email:
        return None
    if claims.get("email_verified") is False:
        return None
    name = (claims.get("name") or "").strip() or email.split("@", 1)[0]
    name = name[:NAME_MAX_LENGTH].rstrip()
    return ExternalIdentity(
        external_id=str(subject),
        email=email,
        name=name,
        picture=claims.get("picture"),
    )


class GoogleIdentityVerifier:
    """Verifies ID tokens issued for the configured Google OAuth client."""

    def __init__(self, settings: Settings):
        self.client_id = settings.google_client_id
        self._local = threading.local()

    def _transport(self) -> google.auth.transport.requests.Request:
        """One transport (and requests.Session) per threadpool worker."""
        request = getattr(self._local, "request", None)
        if request is None:
            request = google.auth.transport.requests.Request()
            self._local.request = request
        return request

    def _verify_sync(self, raw_token: str) -> Mapping[str, Any]:
        return google_id_token.verify_oauth2_token(raw_token, self._transport(), self.client_id)

    async def verify(self, raw_token: str) -> Optional[ExternalIdentity]:
        if not self.client_id:
            logger.error("Google sign-in attempted but GOOGLE_CLIENT_ID is not configured")
            return None

        try:
            claims = await run_in_threadpool(self._verify_sync, raw_token)
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.warning("Google ID token rejected: %s", type(e).__name__)
            return None

        identity = identity_from_claims(claims)
        if identity is None:
            logger.warning("Google ID token verified but lacks sub or email claim")
        return identity
