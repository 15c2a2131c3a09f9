"""
Notes Backend - Note SQLAlchemy Model
======================================

What:  ORM model representing the `notes` table.
Why:   Maps note rows to Python objects for type-safe, owner-scoped queries.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by NoteService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - user_id: owner, FK to users.id with ON DELETE CASCADE. A note is never
      moved to another user, so no code path ever writes this column twice.
    - title / content: stored trimmed; length rules live in the request schemas.
    - created_at / updated_at: UTC with timezone; updated_at is refreshed on
      every update.

    Index on (user_id, created_at DESC):
        Serves the only list query: "this user's notes, newest first".
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from notesapp.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A titled text note owned by exactly one user.

    Query Patterns:
        - List: SELECT ... WHERE user_id = :uid ORDER BY created_at DESC
          → idx_notes_user_created
        - Single: SELECT ... WHERE id = :id AND user_id = :uid
          → primary key, owner filter applied on the matched row
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # TEXT: no artificial length limit on note bodies
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="When this note was created (UTC)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Last modification (UTC)",
    )

    __table_args__ = (
        Index("idx_notes_user_created", user_id, created_at.desc()),
    )

    def __repr__(self) -> str:
        """Developer-friendly string representation for debugging."""
        return f"<Note(id={self.id}, user_id={self.user_id}, created_at='{self.created_at}')>"
