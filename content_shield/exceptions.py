"""
Custom Exception Classes for Content Shield

This module defines the exceptions raised by the service layer. Every
exception carries an HTTP status code and a machine-readable error code so
the API layer can map it to a consistent error response, but none of them
depend on a request being in flight.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to API clients."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    AUTH_FAILED = "AUTH_FAILED"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"

    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_USER_NOT_FOUND = "RESOURCE_USER_NOT_FOUND"
    RESOURCE_CONTENT_NOT_FOUND = "RESOURCE_CONTENT_NOT_FOUND"
    RESOURCE_LICENSE_REQUEST_NOT_FOUND = "RESOURCE_LICENSE_REQUEST_NOT_FOUND"
    RESOURCE_DELETE_REQUEST_NOT_FOUND = "RESOURCE_DELETE_REQUEST_NOT_FOUND"
    RESOURCE_FILE_NOT_FOUND = "RESOURCE_FILE_NOT_FOUND"

    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"

    CONTENT_DUPLICATE = "CONTENT_DUPLICATE"
    REQUEST_INVALID_TRANSITION = "REQUEST_INVALID_TRANSITION"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"


class ContentShieldError(Exception):
    """Base exception class for all Content Shield exceptions"""

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
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(ContentShieldError):
    """Raised when authentication fails"""

    def __init__(self, message: str = "Authentication failed", error_code: ErrorCode = ErrorCode.AUTH_FAILED):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED, error_code=error_code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid"""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_INVALID_CREDENTIALS)


class InvalidTokenError(AuthenticationError):
    """Raised when an access token cannot be decoded or has expired"""

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message=message, error_code=ErrorCode.AUTH_TOKEN_INVALID)


class PermissionDeniedError(ContentShieldError, PermissionError):
    """Raised when the actor lacks rights to perform a mutation"""

    def __init__(self, message: str = "You do not have permission to perform this action", action: str | None = None):
        details = {"action": action} if action else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
            error_code=ErrorCode.AUTH_PERMISSION_DENIED,
        )


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(ContentShieldError):
    """Base class for resource not found errors"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Any | None = None,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
    ):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
            error_code=error_code,
        )


class UserNotFoundError(ResourceNotFoundError):
    """Raised when a user is not found"""

    def __init__(self, user_id: Any | None = None):
        super().__init__(resource_type="User", resource_id=user_id, error_code=ErrorCode.RESOURCE_USER_NOT_FOUND)


class ContentNotFoundError(ResourceNotFoundError):
    """Raised when a content item is not found"""

    def __init__(self, content_id: Any | None = None):
        super().__init__(
            resource_type="Content", resource_id=content_id, error_code=ErrorCode.RESOURCE_CONTENT_NOT_FOUND
        )


class LicenseRequestNotFoundError(ResourceNotFoundError):
    """Raised when a license request is not found"""

    def __init__(self, request_id: Any | None = None):
        super().__init__(
            resource_type="License request",
            resource_id=request_id,
            error_code=ErrorCode.RESOURCE_LICENSE_REQUEST_NOT_FOUND,
        )


class DeleteRequestNotFoundError(ResourceNotFoundError):
    """Raised when a delete request is not found"""

    def __init__(self, request_id: Any | None = None):
        super().__init__(
            resource_type="Delete request",
            resource_id=request_id,
            error_code=ErrorCode.RESOURCE_DELETE_REQUEST_NOT_FOUND,
        )


class BlobNotFoundError(ResourceNotFoundError):
    """Raised when a stored file is missing from the blob store"""

    def __init__(self, key: str):
        super().__init__(resource_type="File", resource_id=key, error_code=ErrorCode.RESOURCE_FILE_NOT_FOUND)


# ============================================================================
# Validation & Business Logic Exceptions
# ============================================================================


class ValidationError(ContentShieldError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=error_details,
            error_code=ErrorCode.VALIDATION_FAILED,
        )


class DuplicateResourceError(ContentShieldError):
    """Raised when attempting to create a duplicate resource"""

    def __init__(self, resource_type: str, field: str, value: Any, message: str | None = None):
        super().__init__(
            message=message or f"{resource_type} with {field} '{value}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource_type": resource_type, "field": field, "value": value},
            error_code=ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
        )


class DuplicateContentError(ContentShieldError):
    """Raised when byte-identical content has already been registered"""

    def __init__(self, content_hash: str):
        self.content_hash = content_hash
        super().__init__(
            message="This content already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"content_hash": content_hash},
            error_code=ErrorCode.CONTENT_DUPLICATE,
        )


class PendingRequestExistsError(DuplicateResourceError):
    """Raised when a requester already has a pending license request for an item"""

    def __init__(self, content_id: int):
        super().__init__(
            resource_type="License request",
            field="content_id",
            value=content_id,
            message="You already have a pending request for this content",
        )


class InvalidStateTransitionError(ContentShieldError):
    """Raised when a request that is no longer pending is resolved again"""

    def __init__(self, current_status: str, target_status: str, resource_type: str = "Request"):
        super().__init__(
            message=f"Cannot transition {resource_type} from '{current_status}' to '{target_status}'",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"resource_type": resource_type, "current_status": current_status, "target_status": target_status},
            error_code=ErrorCode.REQUEST_INVALID_TRANSITION,
        )


class InvalidOperationError(ContentShieldError):
    """Raised when an operation is invalid in the current context"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details or {},
            error_code=ErrorCode.VALIDATION_FAILED,
        )


# ============================================================================
# File & Upload Exceptions
# ============================================================================


class FileTooLargeError(ContentShieldError):
    """Raised when an upload exceeds the configured size limit"""

    def __init__(self, max_size: int):
        super().__init__(
            message=f"File size exceeds maximum allowed size of {max_size // (1024 * 1024)}MB",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            details={"max_size": max_size},
            error_code=ErrorCode.FILE_TOO_LARGE,
        )
