"""
Custom Exception Classes for Consent Log

This module defines custom exceptions for better error handling and
consistent error responses across the application.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in error responses"""

    # Generic
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # Validation
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_INVALID_STATUS = "VALIDATION_INVALID_STATUS"

    # Resources
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONSENT_NOT_FOUND = "CONSENT_NOT_FOUND"
    CONSENT_ALREADY_EXISTS = "CONSENT_ALREADY_EXISTS"

    # Storage
    DATABASE_ERROR = "DATABASE_ERROR"


class ConsentLogError(Exception):
    """Base exception class for all Consent Log exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Consent Exceptions
# ============================================================================


class ConsentNotFoundError(ConsentLogError):
    """Raised when no consent record exists for a (user_id, consent_id) pair"""

    def __init__(self, user_id: str, consent_id: str):
        super().__init__(
            message=f"Consent '{consent_id}' for user '{user_id}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"user_id": user_id, "consent_id": consent_id},
            error_code=ErrorCode.CONSENT_NOT_FOUND,
        )


class ConsentAlreadyExistsError(ConsentLogError):
    """Raised when adding a consent for a pair that already has one"""

    def __init__(self, user_id: str, consent_id: str):
        super().__init__(
            message=f"Consent '{consent_id}' for user '{user_id}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"user_id": user_id, "consent_id": consent_id},
            error_code=ErrorCode.CONSENT_ALREADY_EXISTS,
        )


class InvalidConsentStatusError(ConsentLogError):
    """Raised when a status value is neither accepted nor declined"""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid consent status '{value}'",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"value": str(value), "allowed": ["accepted", "declined", 1, 0]},
            error_code=ErrorCode.VALIDATION_INVALID_STATUS,
        )


# ============================================================================
# Storage Exceptions
# ============================================================================


class DatabaseError(ConsentLogError):
    """Raised when a database operation fails"""

    def __init__(self, message: str = "A database error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code=ErrorCode.DATABASE_ERROR,
        )
