"""
Notes Backend - Auth Service (flow orchestrator)
=================================================

What:  Signup, login and Google sign-in flows, plus bearer-token resolution.
Why:   Keeps every authentication decision out of the route handlers.
How:   Composes OtpService, TokenService, UserService, EmailService and the
       Google identity verifier, all handed in at construction.
Who:   /api/auth routes and the get_current_user dependency.

Flow Shape (all flows):
    AwaitingChallenge ──send──▶ ChallengeIssued ──verify──▶ Verified ──▶ SessionIssued
                                      │
                                      └──▶ Rejected (InvalidOTP / InvalidExternalToken)

    No flow retries. A rejected caller requests a new code.

Transactions:
    Each call runs inside the request's single transaction. A domain error
    rolls the whole request back, so a signup rejected as a duplicate does
    not consume its passcode.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from notesapp.exceptions import (
    InvalidExternalTokenError,
    InvalidOTPError,
    UnauthorizedError,
    UserExistsError,
    UserNotFoundError,
)
from notesapp.models.user import User
from notesapp.services.email_service import EmailService, mask_email
from notesapp.services.google_service import GoogleIdentityVerifier
from notesapp.services.otp_service import OtpService
from notesapp.services.token_service import TokenService
from notesapp.services.user_service import UserService, normalize_email

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """Outcome of a successful flow: the user, a fresh session token and
    whether the account was created by this call."""
    user: User
    token: str
    created: bool = False


class AuthService:
    def __init__(
        self,
        otp_service: OtpService,
        token_service: TokenService,
        user_service: UserService,
        email_service: EmailService,
        identity_verifier: GoogleIdentityVerifier,
    ):
        self.otps = otp_service
        self.tokens = token_service
        self.users = user_service
        self.mailer = email_service
        self.identity_verifier = identity_verifier

    # ── Email OTP signup ──────────────────────────────────────────────────
    async def send_signup_otp(self, db: AsyncSession, email: str, name: str) -> None:
        email = normalize_email(email)
        if await self.users.get_by_email(db, email) is not None:
            raise UserExistsError()

        code = await self.otps.issue(db, email)
        await self.mailer.send_signup_otp(email, name, code)
        logger.info("Signup OTP issued for %s", mask_email(email))

    async def signup(
        self, db: AsyncSession, name: str, email: str, dob: date, otp: str
    ) -> AuthResult:
        email = normalize_email(email)
        if not await self.otps.verify(db, email, otp):
            logger.info("Signup rejected for %s: passcode did not verify", mask_email(email))
            raise InvalidOTPError()

        if await self.users.get_by_email(db, email) is not None:
            raise UserExistsError(message="User with this email already exists.")

        user = await self.users.create(db, name=name, email=email, dob=dob, is_google_user=False)
        return AuthResult(user=user, token=self.tokens.issue(user.id), created=True)

    # ── Email OTP login ───────────────────────────────────────────────────
    async def send_login_otp(self, db: AsyncSession, email: str) -> None:
        email = normalize_email(email)
        if await self.users.get_by_email(db, email) is None:
            raise UserNotFoundError()

        code = await self.otps.issue(db, email)
        await self.mailer.send_login_otp(email, code)
        logger.info("Login OTP issued for %s", mask_email(email))

    async def login(
        self, db: AsyncSession, email: str, otp: str, remember_me: bool = False
    ) -> AuthResult:
        email = normalize_email(email)
        # Unknown account is reported before any passcode is touched
        user = await self.users.get_by_email(db, email)
        if user is None:
            raise UserNotFoundError(message="No account found with this email.")

        if not await self.otps.verify(db, email, otp):
            logger.info("Login rejected for user %d: passcode did not verify", user.id)
            raise InvalidOTPError()

        return AuthResult(user=user, token=self.tokens.issue(user.id, remember_me=remember_me))

    # ── Google sign-in ────────────────────────────────────────────────────
    async def google_auth(self, db: AsyncSession, id_token: str) -> AuthResult:
        """
        Sign in with a Google ID token, creating or linking the account.

        Never consumes a passcode. An existing account with the same email is
        linked (google_id set, is_google_user true) unless already linked.
        """
        identity = await self.identity_verifier.verify(id_token)
        if identity is None:
            raise InvalidExternalTokenError()

        user = await self.users.get_by_email(db, identity.email)
        created = False
        if user is None:
            try:
                user = await self.users.create(
                    db,
                    name=identity.name,
                    email=identity.email,
                    google_id=identity.external_id,
                    is_google_user=True,
                )
                created = True
            except UserExistsError:
                # Lost a creation race; the transaction was rolled back
                user = await self.users.get_by_email(db, identity.email)
                if user is None:
                    raise
        if not user.google_id:
            user = await self.users.link_google_identity(db, user, identity.external_id)

        return AuthResult(user=user, token=self.tokens.issue(user.id), created=created)

    # ── Bearer resolution ─────────────────────────────────────────────────
    async def current_user(self, db: AsyncSession, token: str) -> User:
        """
        Resolve a bearer token to its user.

        InvalidTokenError and MissingClaimError propagate as-is (both are
        UnauthorizedError); a token whose user no longer exists is also 401.
        """
        user_id = self.tokens.verify(token)
        user = await self.users.get_by_id(db, user_id)
        if user is None:
            raise UnauthorizedError(message="Invalid token - user not found")
        return user
