"""
Notes Backend - Note Service (owner-scoped CRUD)
=================================================

What:  Create, read, update and delete notes for one user at a time.
Why:   Encapsulates the ownership rule in one place, independent of HTTP.
How:   Every query filters on BOTH the note id and the owner id. A note that
       exists but belongs to someone else is indistinguishable from a note
       that does not exist (NotFoundError → 404).
Who:   Called by the /api/notes route handlers.

Design Decision:
    NoteService is stateless; it receives the db session for each call.
    This enables:
    1. Easy testing: mock the session independently
    2. Transaction safety: each request's work commits or rolls back together
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notesapp.exceptions import DatabaseError, NotFoundError
from notesapp.models.note import Note

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for note operations.

    Error Handling Strategy:
        NotFoundError propagates as-is. Any SQLAlchemyError is logged and
        wrapped in DatabaseError so the client only sees a generic message.
    """

    async def list_notes(self, db: AsyncSession, user_id: int) -> List[Note]:
        """
        All notes owned by `user_id`, newest first.

        Query plan:
            SELECT ... WHERE user_id = :uid ORDER BY created_at DESC, id DESC
            → idx_notes_user_created; id breaks ties between same-instant rows
        """
        try:
            result = await db.execute(
                select(Note)
                .where(Note.user_id == user_id)
                .order_by(desc(Note.created_at), desc(Note.id))
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes for user %d: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch notes.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

    async def get_note(self, db: AsyncSession, note_id: int, user_id: int) -> Note:
        """
        Retrieve a single owned note.

        Raises:
            NotFoundError: no note with this id for this owner (→ 404)
            DatabaseError: query execution failed (→ 500)
        """
        try:
            result = await db.execute(
                select(Note).where(Note.id == note_id, Note.user_id == user_id)
            )
            note = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id},
            )

        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def create_note(self, db: AsyncSession, user_id: int, title: str, content: str) -> Note:
        note = Note(user_id=user_id, title=title.strip(), content=content.strip())
        db.add(note)
        try:
            await db.flush()
            # Loads server-side defaults so the row serializes without lazy IO
            await db.refresh(note)
        except SQLAlchemyError as e:
            logger.error("Database error creating note for user %d: %s", user_id, str(e))
            raise DatabaseError(
                message="Failed to create note.",
                context={"user_id": user_id},
            )

        logger.info("Note %d created for user %d", note.id, user_id)
        return note

    async def update_note(
        self,
        db: AsyncSession,
        note_id: int,
        user_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Note:
        """
        Apply the provided fields to an owned note; omitted fields are untouched.

        updated_at is always refreshed, even when the new values equal the
        old ones.
        """
        note = await self.get_note(db, note_id, user_id)

        if title is not None:
            note.title = title.strip()
        if content is not None:
            note.content = content.strip()
        note.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
            await db.refresh(note)
        except SQLAlchemyError as e:
            logger.error("Database error updating note %d: %s", note_id, str(e))
            raise DatabaseError(
                message="Failed to update note.",
                context={"note_id": note_id},
            )

        logger.info("Note %d updated", note_id)
        return note

    async def delete_note(self, db: AsyncSession, note_id: int, user_id: int) -> None:
        note = await self.get_note(db, note_id, user_id)
        try:
            await db.delete(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %d: %s", note_id, str(e))
            raise DatabaseError(
                message="Failed to delete note.",
                context={"note_id": note_id},
            )

        logger.info("Note %d deleted", note_id)
