"""
Notes Backend - Session Token Service
======================================

What:  Issues and verifies signed bearer tokens (HS256 JWT).
How:   PyJWT. Claims: sub (user id as string), iat, exp.
Who:   AuthService after a successful verification; the bearer dependency.

Tokens are stateless: there is no revocation list, and a token stays valid
until its exp claim passes.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt

from notesapp.config import Settings
from notesapp.exceptions import InvalidTokenError, MissingClaimError

logger = logging.getLogger(__name__)


class TokenService:
    """Signs and checks session tokens with the configured secret."""

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self.default_lifetime = timedelta(days=settings.jwt_expire_days)
        self.remember_me_lifetime = timedelta(days=settings.jwt_remember_me_days)

    def issue(self, user_id: int, remember_me: bool = False) -> str:
        now = datetime.now(timezone.utc)
        lifetime = self.remember_me_lifetime if remember_me else self.default_lifetime
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> int:
        """
        Return the user id carried by `token`.

        Raises:
            InvalidTokenError: bad signature, malformed or expired token
            MissingClaimError: token is valid but carries no usable `sub`
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError(message="Token expired")
        except jwt.PyJWTError as e:
            logger.debug("Rejected session token: %s", type(e).__name__)
            raise InvalidTokenError()

        subject = payload.get("sub")
        if subject is None:
            raise MissingClaimError()
        try:
            return int(subject)
        except (TypeError, ValueError):
            raise MissingClaimError(context={"sub_type": type(subject).__name__})
