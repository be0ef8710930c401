# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a machine-readable code and, where useful, a
# suggestion telling the caller how to fix the request.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class HQException(Exception):
    """
    Base exception for the HQ API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "HQ_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Authentication Exceptions
# =============================================================================

class AccessDeniedError(HQException):
    """
    Raised when an email is not allowed to sign in.

    The message is deliberately generic: it never says whether the domain
    or the individual whitelist check failed.
    """

    def __init__(self):
        super().__init__(
            message="Access denied",
            code="ACCESS_DENIED",
            status_code=403,
            suggestion="Ask an administrator to grant your email access",
        )


class NotAuthenticatedError(HQException):
    """Raised when a request has no valid session token."""

    def __init__(self, reason: str = "Not authenticated"):
        super().__init__(
            message=reason,
            code="NOT_AUTHENTICATED",
            status_code=401,
            suggestion="Sign in again to get a new session token",
        )


class AdminRequiredError(HQException):
    """Raised when a non-admin calls an admin endpoint."""

    def __init__(self):
        super().__init__(
            message="Admin access required",
            code="ADMIN_REQUIRED",
            status_code=403,
        )


class InvalidMagicLinkError(HQException):
    """Raised when a sign-in link is unknown, already used or expired."""

    def __init__(self, reason: str = "Sign-in link is invalid or has expired"):
        super().__init__(
            message=reason,
            code="INVALID_MAGIC_LINK",
            status_code=400,
            suggestion="Request a new sign-in link",
        )


# =============================================================================
# User Exceptions
# =============================================================================

class UserNotFoundError(HQException):
    """Raised when a user ID doesn't exist."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            status_code=404,
            details={"user_id": user_id}
        )


class SelfDemotionError(HQException):
    """Raised when an admin tries to remove their own admin flag."""

    def __init__(self):
        super().__init__(
            message="You cannot remove your own admin privileges",
            code="SELF_DEMOTION",
            status_code=400,
            suggestion="Ask another admin to change your status",
        )


# =============================================================================
# Whitelist Exceptions
# =============================================================================

class WhitelistEntryNotFoundError(HQException):
    """Raised when a whitelist entry ID doesn't exist."""

    def __init__(self, entry_id: str):
        super().__init__(
            message="Email not found",
            code="WHITELIST_ENTRY_NOT_FOUND",
            status_code=404,
            details={"id": entry_id}
        )


class WhitelistEmailExistsError(HQException):
    """Raised when an email is already on the whitelist (unique violation)."""

    def __init__(self, email: str):
        super().__init__(
            message="Email is already whitelisted",
            code="WHITELIST_EMAIL_EXISTS",
            status_code=409,
            details={"email": email}
        )


class InvalidEmailError(HQException):
    """Raised when an email address is missing or malformed."""

    def __init__(self, email: str | None):
        super().__init__(
            message="Email is required" if not email else "Invalid email format",
            code="INVALID_EMAIL",
            status_code=400,
            suggestion="Use an address like name@example.com",
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(HQException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, content_type: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {content_type}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"content_type": content_type, "allowed_types": allowed}
        )


class FileTooLargeError(HQException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File size exceeds {max_mb}MB limit",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": round(size_mb, 1), "max_mb": max_mb}
        )


class StorageUploadError(HQException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Provider Exceptions
# =============================================================================

class EmailDeliveryError(HQException):
    """Raised when the email provider rejects or fails a send."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to send email: {error}",
            code="EMAIL_DELIVERY_ERROR",
            status_code=502,
            suggestion="Check POSTMARK_API_KEY and the sender signature",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def hq_exception_handler(
    request: Request,
    exc: HQException
) -> JSONResponse:
    """
    Convert HQException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
