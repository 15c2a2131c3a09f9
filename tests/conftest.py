"""
Notes Backend - Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session (no database needed)
    ├── test_settings: Settings pointing at a per-test SQLite file
    ├── session_factory: real async sessions on that SQLite file, tables created
    ├── mailer / identity_verifier: in-memory doubles for SMTP and Google
    ├── app: create_app(...) wired to the doubles, tables created
    └── test_client: HTTPX AsyncClient talking to `app` in-process
"""

import os
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any notesapp import: notesapp.main builds an app at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ["SMTP_HOST"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from notesapp.config import Settings  # noqa: E402
from notesapp.database import Base, build_engine, build_session_factory  # noqa: E402
from notesapp.models import note, otp, user  # noqa: E402,F401
from notesapp.services.google_service import ExternalIdentity  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class RecordingMailer:
    """Stands in for EmailService; remembers every code it was asked to send."""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []

    async def send_signup_otp(self, email: str, name: str, code: str) -> None:
        self.sent.append(("signup", email, code))

    async def send_login_otp(self, email: str, code: str) -> None:
        self.sent.append(("login", email, code))

    def last_code(self, email: str) -> str:
        for _, to, code in reversed(self.sent):
            if to == email:
                return code
        raise AssertionError(f"no code sent to {email}")


class FakeIdentityVerifier:
    """Maps raw token strings to identities; anything unknown is rejected."""

    def __init__(self):
        self.identities: Dict[str, ExternalIdentity] = {}

    def register(self, token: str, identity: ExternalIdentity) -> None:
        self.identities[token] = identity

    async def verify(self, raw_token: str) -> Optional[ExternalIdentity]:
        return self.identities.get(raw_token)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_note(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = note
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'notes_test.db'}",
        jwt_secret="test-secret-not-real",
        jwt_expire_days=7,
        jwt_remember_me_days=30,
        otp_expire_minutes=10,
        google_client_id="test-client-id.apps.googleusercontent.com",
        smtp_host="",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def session_factory(test_settings):
    """Real AsyncSession factory on a fresh SQLite database."""
    engine = build_engine(test_settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def identity_verifier() -> FakeIdentityVerifier:
    return FakeIdentityVerifier()


@pytest_asyncio.fixture
async def app(test_settings, mailer, identity_verifier):
    from notesapp.main import create_app

    application = create_app(
        settings=test_settings,
        identity_verifier=identity_verifier,
        email_service=mailer,
    )
    async with application.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
