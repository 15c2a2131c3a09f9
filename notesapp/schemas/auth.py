"""
Notes Backend - Auth Request/Response Schemas
==============================================

What:  Pydantic models for the /api/auth endpoints.
How:   FastAPI validates request bodies against these models; failures become
       400 validation_error responses with a field-level error list.

Validation rules:
    - email:   valid address, trimmed and lower-cased before validation
    - name:    2 to 100 characters after trimming
    - dob:     YYYY-MM-DD, user at least 13 years old
    - otp:     exactly 6 digits
    - idToken: non-empty
"""

import re
from datetime import date
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)

from notesapp.models.user import NAME_MAX_LENGTH

MIN_NAME_LENGTH = 2
MINIMUM_AGE_YEARS = 13

_OTP_PATTERN = re.compile(r"^\d{6}$")
_DOB_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _normalize_email(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip().lower()
    return v


def _validate_name(v: str) -> str:
    v = v.strip()
    if len(v) < MIN_NAME_LENGTH:
        raise ValueError(f"Name must be at least {MIN_NAME_LENGTH} characters long")
    if len(v) > NAME_MAX_LENGTH:
        raise ValueError(f"Name must be at most {NAME_MAX_LENGTH} characters long")
    return v


def _validate_otp(v: str) -> str:
    v = v.strip()
    if not _OTP_PATTERN.match(v):
        raise ValueError("OTP must be exactly 6 digits")
    return v


def age_on(dob: date, today: date) -> int:
    """Whole years between dob and today."""
    years = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        years -= 1
    return years


# ── Reusable field types ──────────────────────────────────────────────────
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]
PersonName = Annotated[str, AfterValidator(_validate_name)]
OtpCode = Annotated[str, AfterValidator(_validate_otp)]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SendSignupOTPRequest(BaseModel):
    """POST /api/auth/send-signup-otp"""
    email: NormalizedEmail
    name: PersonName


class SignupRequest(BaseModel):
    """POST /api/auth/signup"""
    name: PersonName
    email: NormalizedEmail
    dob: date = Field(description="Date of birth, YYYY-MM-DD")
    otp: OtpCode

    @field_validator("dob", mode="before")
    @classmethod
    def dob_format(cls, v: Any) -> Any:
        """Only the calendar-date string form is accepted."""
        if isinstance(v, date):
            return v
        if not isinstance(v, str) or not _DOB_PATTERN.match(v.strip()):
            raise ValueError("Date of birth must be in YYYY-MM-DD format")
        return v.strip()

    @field_validator("dob")
    @classmethod
    def dob_minimum_age(cls, v: date) -> date:
        if age_on(v, date.today()) < MINIMUM_AGE_YEARS:
            raise ValueError(f"You must be at least {MINIMUM_AGE_YEARS} years old")
        return v


class SendLoginOTPRequest(BaseModel):
    """POST /api/auth/send-login-otp"""
    email: NormalizedEmail


class LoginRequest(BaseModel):
    """
    POST /api/auth/login

    rememberMe selects the longer session lifetime.
    """
    model_config = ConfigDict(populate_by_name=True)

    email: NormalizedEmail
    otp: OtpCode
    remember_me: bool = Field(default=False, alias="rememberMe")


class GoogleAuthRequest(BaseModel):
    """POST /api/auth/google"""
    model_config = ConfigDict(populate_by_name=True)

    id_token: str = Field(alias="idToken")

    @field_validator("id_token")
    @classmethod
    def id_token_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Google ID token is required")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """
    What:  Public view of a user. Never includes google_id or password_hash.
    """
    id: int
    name: str
    email: str
    dob: Optional[date] = None
    is_google_user: bool

    model_config = ConfigDict(from_attributes=True)


class AuthData(BaseModel):
    user: UserResponse
    token: str


class AuthResponse(BaseModel):
    """Returned by signup, login and Google sign-in."""
    success: bool = True
    message: str
    data: AuthData


class CurrentUserData(BaseModel):
    user: UserResponse


class CurrentUserResponse(BaseModel):
    """Returned by GET /api/auth/me."""
    success: bool = True
    data: CurrentUserData
