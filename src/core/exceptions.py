"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    BILL_NOT_FOUND = "BILL_NOT_FOUND"
    BILL_INSTANCE_NOT_FOUND = "BILL_INSTANCE_NOT_FOUND"

    # Validation errors (400/422)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Conflict errors (409)
    DUPLICATE_BILL_INSTANCE = "DUPLICATE_BILL_INSTANCE"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed or no caller identity was supplied."""

    def __init__(
        self,
        message: str = "User not authenticated",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Caller does not own the requested entity."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class ProfileNotFoundError(AppException):
    """Profile not found."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {profile_id}",
            status_code=404,
            details={"profile_id": profile_id},
        )


class BillNotFoundError(AppException):
    """Bill not found."""

    def __init__(self, bill_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.BILL_NOT_FOUND,
            message=f"Bill not found: {bill_id}",
            status_code=404,
            details={"bill_id": bill_id},
        )


class BillInstanceNotFoundError(AppException):
    """Bill instance not found."""

    def __init__(self, instance_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.BILL_INSTANCE_NOT_FOUND,
            message=f"Bill instance not found: {instance_id}",
            status_code=404,
            details={"instance_id": instance_id},
        )


class DuplicateBillInstanceError(AppException):
    """A bill instance already exists for this bill and billing period."""

    def __init__(self, bill_id: str, period: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_BILL_INSTANCE,
            message=f"Bill already has an instance for {period}",
            status_code=409,
            details={"bill_id": bill_id, "period": period},
        )
