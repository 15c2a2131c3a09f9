"""
Notes Backend - Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a user-safe message, an optional context dict
       (logged, never returned), an HTTP status code and a machine-readable
       error code. Global handlers registered in main.py turn them into the
       {"success": false, ...} envelope.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    NotesAppError (base)                 → 500
    ├── ValidationError                  → 400 Bad Request
    ├── UserExistsError                  → 400 Bad Request
    ├── InvalidOTPError                  → 400 Bad Request
    ├── InvalidExternalTokenError        → 400 Bad Request
    ├── UnauthorizedError                → 401 Unauthorized
    │   ├── InvalidTokenError
    │   └── MissingClaimError
    ├── UserNotFoundError                → 404 Not Found
    ├── NotFoundError                    → 404 Not Found
    ├── EmailDeliveryError               → 500 Internal Server Error
    └── DatabaseError                    → 500 Internal Server Error

InvalidOTPError and InvalidExternalTokenError never say WHY verification
failed (wrong code, expired, already used, bad audience ...).
"""

from typing import Any, Dict, List, Optional


class NotesAppError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:     User-facing error description (safe to return)
        context:     Additional debug info (logged but NOT returned to client)
        status_code: HTTP status the global handler responds with
        error_code:  Machine-readable code placed in the envelope's "error"
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotesAppError):
    """
    Raised when client input fails validation.

    HTTP:    400 Bad Request
    Details: `errors` is a list of {"field": ..., "message": ...} entries,
             returned to the client so a form can highlight each field.
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors or ([{"field": field, "message": message}] if field else [])


class UserExistsError(NotesAppError):
    """An account already owns this email (signup flows)."""

    status_code = 400
    error_code = "user_exists"

    def __init__(
        self,
        message: str = "User with this email already exists. Please login instead.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UserNotFoundError(NotesAppError):
    """No account owns this email (login flows)."""

    status_code = 404
    error_code = "user_not_found"

    def __init__(
        self,
        message: str = "No account found with this email. Please sign up first.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidOTPError(NotesAppError):
    """
    The passcode did not verify.

    Wrong code, expired code, consumed code and "no code issued" all raise
    this same error with the same message.
    """

    status_code = 400
    error_code = "invalid_otp"

    def __init__(
        self,
        message: str = "Invalid or expired OTP. Please request a new one.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidExternalTokenError(NotesAppError):
    """The Google ID token could not be verified, for whatever reason."""

    status_code = 400
    error_code = "invalid_external_token"

    def __init__(
        self,
        message: str = "Invalid Google token.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthorizedError(NotesAppError):
    """
    Missing, invalid or expired bearer token, or a token whose user is gone.

    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Access token required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(UnauthorizedError):
    """Session token signature invalid, malformed or expired."""

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MissingClaimError(UnauthorizedError):
    """Session token decoded but carries no user-identifier claim."""

    def __init__(
        self,
        message: str = "Invalid token payload",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NotesAppError):
    """
    Raised when a requested resource does not exist for the caller.

    For notes this covers both "no such note" and "note owned by someone
    else"; the two are reported identically.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class EmailDeliveryError(NotesAppError):
    """The SMTP relay refused or could not be reached. Not retried."""

    status_code = 500
    error_code = "email_delivery_failed"

    def __init__(
        self,
        message: str = "Failed to send verification email. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(NotesAppError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. SQL, constraint
        names and driver errors are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
