"""
Notes Backend - FastAPI Dependencies
=====================================

What:  Accessors for the services built by create_app(), plus the bearer
       authentication dependency.
How:   Services live on app.state; handlers receive them via Depends() so no
       module holds a global instance.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from notesapp.database import get_db_session
from notesapp.exceptions import UnauthorizedError
from notesapp.models.user import User
from notesapp.services.auth_service import AuthService
from notesapp.services.note_service import NoteService

# auto_error=False: a missing header is reported through our own 401 envelope
bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_note_service(request: Request) -> NoteService:
    return request.app.state.note_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Resolve `Authorization: Bearer <token>` to a User or fail with 401.

    Usage:
        @router.get("/me")
        async def me(user: User = Depends(get_current_user)):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    return await auth_service.current_user(db, credentials.credentials)
