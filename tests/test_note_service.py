"""
Notes Backend - Note Service Unit Tests
========================================

What:  Tests for NoteService business logic (list, get, create, update, delete).
Why:   The ownership rule lives here and must hold regardless of the HTTP layer.
How:   Mock DB sessions for the error paths; a real SQLite session for ordering
       and owner isolation.

What we test:
    ✅ Owned note is returned; missing or foreign note raises NotFoundError
    ✅ Create trims input and flushes
    ✅ Update applies only provided fields and bumps updated_at
    ✅ Delete removes only owned notes
    ✅ SQLAlchemy failures surface as DatabaseError
    ✅ Listing is newest first and scoped to the owner
"""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from notesapp.exceptions import DatabaseError, NotFoundError
from notesapp.models.note import Note
from notesapp.models.user import User
from notesapp.services.note_service import NoteService


def _result_with(note):
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = note
    return mock_result


def _make_note(note_id=1, user_id=10):
    note = MagicMock()
    note.id = note_id
    note.user_id = user_id
    note.title = "Groceries"
    note.content = "Milk, eggs and bread"
    note.created_at = datetime(2026, 1, 15, tzinfo=timezone.utc)
    note.updated_at = datetime(2026, 1, 15, tzinfo=timezone.utc)
    return note


class TestNoteServiceGet:
    """Tests for get_note retrieval."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_get_note_found(self, mock_db_session):
        """Owned note should be returned as-is."""
        mock_note = _make_note()
        mock_db_session.execute.return_value = _result_with(mock_note)

        result = await self.service.get_note(mock_db_session, 1, 10)

        assert result is mock_note
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_note_not_found(self, mock_db_session):
        """Missing (or foreign) note should raise NotFoundError."""
        mock_db_session.execute.return_value = _result_with(None)

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_note(mock_db_session, 999, 10)

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Note with ID '999' was not found"

    @pytest.mark.asyncio
    async def test_get_note_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )

        with pytest.raises(DatabaseError):
            await self.service.get_note(mock_db_session, 1, 10)


class TestNoteServiceCreate:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_create_trims_and_flushes(self, mock_db_session):
        note = await self.service.create_note(
            mock_db_session, user_id=10, title="  Groceries  ", content="  Milk, eggs and bread  "
        )

        assert note.user_id == 10
        assert note.title == "Groceries"
        assert note.content == "Milk, eggs and bread"
        mock_db_session.add.assert_called_once_with(note)
        mock_db_session.flush.assert_awaited_once()
        mock_db_session.refresh.assert_awaited_once_with(note)

    @pytest.mark.asyncio
    async def test_create_database_error(self, mock_db_session):
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("disk full"))
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_note(mock_db_session, 10, "Groceries", "Milk, eggs and bread")

        assert exc_info.value.message == "Failed to create note."


class TestNoteServiceUpdate:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_update_title_only(self, mock_db_session):
        mock_note = _make_note()
        before = mock_note.updated_at
        mock_db_session.execute.return_value = _result_with(mock_note)

        result = await self.service.update_note(mock_db_session, 1, 10, title=" Shopping ")

        assert result.title == "Shopping"
        assert result.content == "Milk, eggs and bread"
        assert result.updated_at > before
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_content_only(self, mock_db_session):
        mock_note = _make_note()
        mock_db_session.execute.return_value = _result_with(mock_note)

        result = await self.service.update_note(
            mock_db_session, 1, 10, content="Apples and oranges"
        )

        assert result.title == "Groceries"
        assert result.content == "Apples and oranges"

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = _result_with(None)

        with pytest.raises(NotFoundError):
            await self.service.update_note(mock_db_session, 1, 10, title="Shopping")
        mock_db_session.flush.assert_not_awaited()


class TestNoteServiceDelete:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_delete_owned_note(self, mock_db_session):
        mock_note = _make_note()
        mock_db_session.execute.return_value = _result_with(mock_note)

        await self.service.delete_note(mock_db_session, 1, 10)

        mock_db_session.delete.assert_awaited_once_with(mock_note)
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = _result_with(None)

        with pytest.raises(NotFoundError):
            await self.service.delete_note(mock_db_session, 1, 10)
        mock_db_session.delete.assert_not_awaited()


class TestNoteServiceList:
    """Tests for list_notes against a real database."""

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_list_notes_empty(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = mock_result

        assert await self.service.list_notes(mock_db_session, 10) == []

    @pytest.mark.asyncio
    async def test_list_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection lost"))
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.list_notes(mock_db_session, 10)

        assert exc_info.value.message == "Failed to fetch notes."

    @pytest.mark.asyncio
    async def test_newest_first_and_owner_scoped(self, session_factory):
        async with session_factory() as session:
            alice = User(name="Alice", email="alice@example.com")
            bob = User(name="Bob", email="bob@example.com")
            session.add_all([alice, bob])
            await session.flush()

            base = datetime(2026, 1, 1, tzinfo=timezone.utc)
            session.add_all([
                Note(user_id=alice.id, title="Oldest", content="first note body",
                     created_at=base, updated_at=base),
                Note(user_id=alice.id, title="Newest", content="third note body",
                     created_at=base + timedelta(days=2), updated_at=base),
                Note(user_id=alice.id, title="Middle", content="second note body",
                     created_at=base + timedelta(days=1), updated_at=base),
                Note(user_id=bob.id, title="Bobs", content="someone else's note",
                     created_at=base + timedelta(days=3), updated_at=base),
            ])
            await session.flush()

            notes = await self.service.list_notes(session, alice.id)

        assert [n.title for n in notes] == ["Newest", "Middle", "Oldest"]

    @pytest.mark.asyncio
    async def test_foreign_note_is_not_found(self, session_factory):
        async with session_factory() as session:
            alice = User(name="Alice", email="alice@example.com")
            bob = User(name="Bob", email="bob@example.com")
            session.add_all([alice, bob])
            await session.flush()
            note = await self.service.create_note(session, alice.id, "Private", "alice only content")

            with pytest.raises(NotFoundError):
                await self.service.get_note(session, note.id, bob.id)
            with pytest.raises(NotFoundError):
                await self.service.delete_note(session, note.id, bob.id)

            # Still there for its owner
            assert (await self.service.get_note(session, note.id, alice.id)).title == "Private"
