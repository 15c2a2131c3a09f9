"""
Notes Backend - One-Time Passcode Service
==========================================

What:  Issues, verifies and purges six-digit email passcodes.
Who:   AuthService (issue/verify) and the maintenance script (purge_expired).

Guarantees:
    - issue() leaves exactly one passcode row for the email.
    - verify() matches and consumes in a single conditional UPDATE, so a code
      verifies at most once even when two requests race.
    - verify() reports only True/False; wrong, expired, used and missing codes
      are indistinguishable.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notesapp.config import Settings
from notesapp.models.otp import OneTimePasscode

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


def generate_code() -> str:
    """Uniformly random code in 100000-999999 from the OS CSPRNG."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class OtpService:
    """Passcode lifecycle backed by the `otps` table."""

    def __init__(self, settings: Settings):
        self.default_validity_minutes = settings.otp_expire_minutes

    async def _replace(
        self, db: AsyncSession, email: str, code: str, expires_at: datetime
    ) -> None:
        await db.execute(
            delete(OneTimePasscode)
            .where(OneTimePasscode.email == email)
            .execution_options(synchronize_session=False)
        )
        db.add(OneTimePasscode(email=email, otp_code=code, expires_at=expires_at, is_used=False))
        await db.flush()

    async def issue(
        self, db: AsyncSession, email: str, validity_minutes: Optional[int] = None
    ) -> str:
        """
        Supersede any passcode for `email` with a fresh one and return it.

        A concurrent issue for the same email trips the unique index on
        otps.email. The transaction is rolled back and the replace runs once
        more, so the most recent issue wins.
        """
        minutes = validity_minutes or self.default_validity_minutes
        code = generate_code()
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=minutes)

        try:
            await self._replace(db, email, code, expires_at)
        except IntegrityError:
            logger.info("Concurrent OTP issue detected; replacing once more")
            await db.rollback()
            await self._replace(db, email, code, expires_at)

        logger.debug("OTP issued, valid for %d minutes", minutes)
        return code

    async def verify(self, db: AsyncSession, email: str, code: str) -> bool:
        """Consume the matching unused, unexpired passcode. True if one was consumed."""
        result = await db.execute(
            update(OneTimePasscode)
            .where(
                OneTimePasscode.email == email,
                OneTimePasscode.otp_code == code,
                OneTimePasscode.is_used.is_(False),
                OneTimePasscode.expires_at > datetime.now(timezone.utc),
            )
            .values(is_used=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def purge_expired(self, db: AsyncSession) -> int:
        """Delete expired or consumed passcodes. Returns the number removed."""
        result = await db.execute(
            delete(OneTimePasscode)
            .where(
                or_(
                    OneTimePasscode.expires_at <= datetime.now(timezone.utc),
                    OneTimePasscode.is_used.is_(True),
                )
            )
            .execution_options(synchronize_session=False)
        )
        removed = result.rowcount or 0
        logger.info("Purged %d expired or used OTP rows", removed)
        return removed
