"""
Notes Backend - Shared Response Schemas
========================================

What:  Envelope models used by every route: plain messages, errors, health.
Why:   Clients parse one shape for success ({"success": true, ...}) and one
       for failure ({"success": false, "error": ..., ...}).
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """
    What:  Success envelope without a payload.
    Who:   send-signup-otp, send-login-otp, logout and note deletion.
    """
    success: bool = Field(default=True)
    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.
    Why:   Clients need a consistent structure to parse errors programmatically.

    Fields:
        success: Always false
        error: Machine-readable error code (e.g., "invalid_otp", "not_found")
        message: Human-readable description for display to users
        details: Field-level errors for validation failures, otherwise null
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "success": false,
            "error": "validation_error",
            "message": "Validation failed",
            "details": {"errors": [{"field": "otp", "message": "OTP must be 6 digits"}]},
            "request_id": "a1b2c3d4"
        }
    """
    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and database status.
    Who:   Returned by GET /health for monitoring and load balancer health checks.
    """
    success: bool = Field(description="True when the service can handle requests")
    status: str = Field(description="Overall service status: healthy, unhealthy")
    message: str = Field(description="Human-readable status")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
    timestamp: str = Field(description="Server time (UTC ISO 8601)")
