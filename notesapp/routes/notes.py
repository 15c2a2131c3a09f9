"""
Notes Backend - Notes Route Handlers
=====================================

What:  CRUD endpoints for the authenticated user's notes.
How:   Every handler depends on get_current_user and passes the caller's id
       to NoteService, which scopes every query to that owner. Writes are
       committed before the response is built.
Who:   Called by the frontend dashboard.

Note ids are integers; a non-integer id fails request validation (400).
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from notesapp.database import commit_session, get_db_session
from notesapp.dependencies import get_current_user, get_note_service
from notesapp.models.user import User
from notesapp.schemas.common import ErrorResponse, MessageResponse
from notesapp.schemas.note import (
    NoteCreate,
    NoteData,
    NoteEnvelope,
    NoteListData,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
)
from notesapp.services.note_service import NoteService

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/notes", tags=["Notes"])

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_NOT_FOUND = {404: {"description": "Note not found or unauthorized", "model": ErrorResponse}}


@router.get(
    "",
    response_model=NoteListResponse,
    responses=_AUTH_ERRORS,
    summary="List the caller's notes, newest first",
)
async def list_notes(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    note_service: NoteService = Depends(get_note_service),
) -> NoteListResponse:
    notes = await note_service.list_notes(db, user_id=user.id)
    return NoteListResponse(
        data=NoteListData(notes=[NoteResponse.model_validate(n) for n in notes])
    )


@router.post(
    "",
    response_model=NoteEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={**_AUTH_ERRORS, 400: {"description": "Invalid note", "model": ErrorResponse}},
    summary="Create a note",
)
async def create_note(
    body: NoteCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    note_service: NoteService = Depends(get_note_service),
) -> NoteEnvelope:
    note = await note_service.create_note(db, user_id=user.id, title=body.title, content=body.content)
    await commit_session(db)
    return NoteEnvelope(
        message="Note created successfully!",
        data=NoteData(note=NoteResponse.model_validate(note)),
    )


@router.get(
    "/{note_id}",
    response_model=NoteEnvelope,
    responses={**_AUTH_ERRORS, **_NOT_FOUND},
    summary="Get a single note",
)
async def get_note(
    note_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    note_service: NoteService = Depends(get_note_service),
) -> NoteEnvelope:
    note = await note_service.get_note(db, note_id=note_id, user_id=user.id)
    return NoteEnvelope(data=NoteData(note=NoteResponse.model_validate(note)))


@router.put(
    "/{note_id}",
    response_model=NoteEnvelope,
    responses={**_AUTH_ERRORS, **_NOT_FOUND, 400: {"description": "Invalid update", "model": ErrorResponse}},
    summary="Update a note's title and/or content",
)
async def update_note(
    note_id: int,
    body: NoteUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    note_service: NoteService = Depends(get_note_service),
) -> NoteEnvelope:
    note = await note_service.update_note(
        db, note_id=note_id, user_id=user.id, title=body.title, content=body.content
    )
    await commit_session(db)
    return NoteEnvelope(
        message="Note updated successfully!",
        data=NoteData(note=NoteResponse.model_validate(note)),
    )


@router.delete(
    "/{note_id}",
    response_model=MessageResponse,
    responses={**_AUTH_ERRORS, **_NOT_FOUND},
    summary="Delete a note",
)
async def delete_note(
    note_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    note_service: NoteService = Depends(get_note_service),
) -> MessageResponse:
    await note_service.delete_note(db, note_id=note_id, user_id=user.id)
    await commit_session(db)
    return MessageResponse(message="Note deleted successfully!")
