"""
Notes Backend - User Service (credential store access)
=======================================================

What:  Lookups and writes against the `users` table.
Who:   AuthService and the bearer-token dependency.

Emails are expected already normalised (trimmed, lower-cased); normalize_email
is applied again here so that no lookup depends on the caller remembering.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notesapp.exceptions import DatabaseError, UserExistsError
from notesapp.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Stateless accessor; every call receives the request's session."""

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == normalize_email(email)))
        except SQLAlchemyError as e:
            logger.error("Database error looking up user by email: %s", type(e).__name__)
            raise DatabaseError(context={"operation": "get_user_by_email"})
        return result.scalar_one_or_none()

    async def get_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.id == user_id))
        except SQLAlchemyError as e:
            logger.error("Database error looking up user %s: %s", user_id, type(e).__name__)
            raise DatabaseError(context={"operation": "get_user_by_id"})
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        dob: Optional[date] = None,
        google_id: Optional[str] = None,
        is_google_user: bool = False,
    ) -> User:
        """
        Insert a user and flush so the id is assigned.

        A unique-email violation means another request created the account
        between our existence check and this insert. The request transaction
        is rolled back and the conflict surfaces as UserExistsError.
        """
        user = User(
            name=name.strip(),
            email=normalize_email(email),
            dob=dob,
            google_id=google_id,
            is_google_user=is_google_user,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise UserExistsError()
        except SQLAlchemyError as e:
            logger.error("Database error creating user: %s", type(e).__name__)
            raise DatabaseError(context={"operation": "create_user"})

        logger.info("User %d created (google=%s)", user.id, is_google_user)
        return user

    async def link_google_identity(self, db: AsyncSession, user: User, google_id: str) -> User:
        """Attach a Google subject id. is_google_user is only ever set, never cleared."""
        user.google_id = google_id
        user.is_google_user = True
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error linking Google identity to user %d: %s", user.id, type(e).__name__)
            raise DatabaseError(context={"operation": "link_google_identity"})

        logger.info("Linked Google identity to user %d", user.id)
        return user
