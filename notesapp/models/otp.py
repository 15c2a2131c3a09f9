"""
Notes Backend - One-Time Passcode Model
========================================

What:  ORM model for the `otps` table.
Who:   OtpService only. Codes are never exposed through the API.

Lifecycle:
    Issued ──verify──▶ Consumed (is_used = true)
       │
       ├── expires_at passes ──▶ Expired (left in place until purge_expired)
       └── reissued ──▶ Superseded (row deleted by the next issue)

    At most one row exists per email. Issuing deletes earlier rows first and
    the unique index on `email` rejects a second concurrent insert.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, String, false, text
from sqlalchemy.orm import Mapped, mapped_column

from notesapp.database import Base


class OneTimePasscode(Base):
    """A six-digit email verification code with an absolute expiry."""

    __tablename__ = "otps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    otp_code: Mapped[str] = mapped_column(String(6), nullable=False)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    is_used: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_otps_email", "email", unique=True),
        Index("idx_otps_expires_at", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<OneTimePasscode(id={self.id}, is_used={self.is_used}, expires_at='{self.expires_at}')>"
