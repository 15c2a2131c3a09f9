"""
Notes Backend - Maintenance Commands
=====================================

What:  Sweeps expired and consumed one-time passcodes.
When:  Run explicitly (cron, deploy hook, by hand). Never on the request path.

Usage:
    notesapp-purge-otps
    python -m notesapp.maintenance
"""

import asyncio
import logging
from typing import Optional

from notesapp.config import Settings, get_settings
from notesapp.database import build_engine, build_session_factory, dispose_engine
from notesapp.logging_setup import setup_logging
from notesapp.services.otp_service import OtpService

logger = logging.getLogger(__name__)


async def purge_expired_otps(settings: Settings) -> int:
    """Run one purge in its own transaction and return the number of rows removed."""
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    try:
        async with session_factory() as session:
            async with session.begin():
                return await OtpService(settings).purge_expired(session)
    finally:
        await dispose_engine(engine)


def main(settings: Optional[Settings] = None) -> int:
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    removed = asyncio.run(purge_expired_otps(settings))
    logger.info("OTP purge complete: %d rows removed", removed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
