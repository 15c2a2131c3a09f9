"""
Notes Backend - Maintenance Command Tests
=========================================

What:  The OTP sweep run outside the request path.
How:   Seeds a SQLite database through a session factory, then runs the
       sweep with its own engine against the same file.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select, update

from notesapp.maintenance import purge_expired_otps
from notesapp.models.otp import OneTimePasscode
from notesapp.services.otp_service import OtpService


@pytest.mark.asyncio
async def test_purge_commits_and_reports_count(session_factory, test_settings):
    service = OtpService(test_settings)
    async with session_factory() as session:
        await service.issue(session, "stale@example.com")
        await service.issue(session, "fresh@example.com")
        await session.execute(
            update(OneTimePasscode)
            .where(OneTimePasscode.email == "stale@example.com")
            .values(expires_at=datetime.now(timezone.utc) - timedelta(minutes=5))
        )
        await session.commit()

    removed = await purge_expired_otps(test_settings)

    assert removed == 1
    async with session_factory() as session:
        remaining = (
            await session.execute(select(func.count(OneTimePasscode.id)))
        ).scalar_one()
    assert remaining == 1
