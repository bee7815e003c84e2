"""Centralized message codes and default messages for API responses."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"
    CREATED = "CREATED"

    # Authentication & Authorization
    AUTH_REQUIRED = "AUTH_REQUIRED"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_API_KEY = "INVALID_API_KEY"
    ADMIN_KEY_NOT_CONFIGURED = "ADMIN_KEY_NOT_CONFIGURED"

    # API Key management
    API_KEY_CREATED = "API_KEY_CREATED"
    API_KEY_REVOKED = "API_KEY_REVOKED"
    API_KEY_NOT_FOUND = "API_KEY_NOT_FOUND"

    # Credit management
    CREDITS_CHARGED = "CREDITS_CHARGED"
    CREDITS_CONSUMED = "CREDITS_CONSUMED"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"

    # Storage
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    TRANSACTION_CONFLICT = "TRANSACTION_CONFLICT"

    # Rate limiting
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Orion Loop
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    ORION_STEP_COMPLETED = "ORION_STEP_COMPLETED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    # Service Errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"


DEFAULT_MESSAGES = {
    # Success messages
    MessageCode.SUCCESS: "Operation completed successfully",
    MessageCode.CREATED: "Resource created successfully",
    # Authentication & Authorization
    MessageCode.AUTH_REQUIRED: "Authentication required",
    MessageCode.UNAUTHORIZED: "Admin key invalid or missing",
    MessageCode.INVALID_API_KEY: "Invalid or revoked API key",
    MessageCode.ADMIN_KEY_NOT_CONFIGURED: "MERSE_ADMIN_KEY is not configured",
    # API Key management
    MessageCode.API_KEY_CREATED: "API key created successfully",
    MessageCode.API_KEY_REVOKED: "API key revoked successfully",
    MessageCode.API_KEY_NOT_FOUND: "API key not found",
    # Credit management
    MessageCode.CREDITS_CHARGED: "Credits charged successfully",
    MessageCode.CREDITS_CONSUMED: "Credits consumed successfully",
    MessageCode.INSUFFICIENT_CREDITS: "Insufficient credits. Upgrade your plan or wait for the monthly reset.",
    MessageCode.INSUFFICIENT_BALANCE: "Insufficient balance to generate this resource.",
    # Storage
    MessageCode.STORE_UNAVAILABLE: "Credit store unavailable",
    MessageCode.TRANSACTION_CONFLICT: "Too much contention on this account, try again",
    # Rate limiting
    MessageCode.RATE_LIMIT_EXCEEDED: "Rate limit exceeded. Wait a moment and try again.",
    # Orion Loop
    MessageCode.PROJECT_NOT_FOUND: "Project not found",
    MessageCode.ORION_STEP_COMPLETED: "Orion Loop step completed",
    # Validation errors
    MessageCode.VALIDATION_ERROR: "Validation failed",
    MessageCode.INVALID_INPUT: "Invalid input provided",
    # Service Errors
    MessageCode.EXTERNAL_SERVICE_ERROR: "External service error",
    # Generic errors
    MessageCode.INTERNAL_ERROR: "Internal server error",
    MessageCode.INTERNAL_SERVER_ERROR: "Internal server error",
    MessageCode.BAD_REQUEST: "Bad request",
    MessageCode.NOT_FOUND: "Resource not found",
}

T = TypeVar("T")


class PaginationInfo(BaseModel):
    """Common pagination information."""

    total: int
    limit: int
    offset: int
    has_more: bool


class Paginated(BaseModel, Generic[T]):
    """Generic paginated response wrapper."""

    items: list[T]
    pagination: PaginationInfo


class APIResponse(BaseModel, Generic[T]):
    """Base API response model with consistent structure and proper typing."""

    message_code: MessageCode
    message: str
    data: T | None = None

    @classmethod
    def success(
        cls,
        message_code: MessageCode = MessageCode.SUCCESS,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Success"),
            data=data,
        )

    @classmethod
    def error(
        cls,
        message_code: MessageCode,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create an error response."""
        return cls(
            message_code=message_code,
            message=message or DEFAULT_MESSAGES.get(message_code, "Error occurred"),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
