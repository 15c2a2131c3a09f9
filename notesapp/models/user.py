"""
Notes Backend - User SQLAlchemy Model
======================================

What:  ORM model for the `users` table (the credential store).
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   UserService (lookups, inserts, Google linking) and the bearer dependency.

Table Design Rationale:
    - email: unique, stored trimmed and lower-cased. The unique index is the
      backstop for two concurrent signups racing past the existence check.
    - dob: optional; Google-created accounts have no date of birth.
    - password_hash: reserved column, never written by the OTP flow.
    - google_id / is_google_user: set once a Google identity is linked;
      is_google_user is never reset to false.
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Integer, String, false, text
from sqlalchemy.orm import Mapped, mapped_column

from notesapp.database import Base

# Longest display name the users.name column holds
NAME_MAX_LENGTH = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered account, created by OTP signup or by first Google sign-in."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Lower-cased, trimmed address; identifies at most one user",
    )

    dob: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    google_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Google subject identifier once the account is linked",
    )

    is_google_user: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, is_google_user={self.is_google_user})>"
