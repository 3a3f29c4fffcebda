"""Exception hierarchy for the device registry.

Every error raised by the domain, the storage adapters and the use cases
inherits from RegistryError, so the HTTP layer can translate them with a
single exception handler.

Exception Hierarchy:
    RegistryError (base)
    ├── ConfigurationError (unrecoverable - fix environment)
    ├── NotFoundError (404)
    │   ├── UserNotFoundError
    │   ├── DeviceNotFoundError
    │   ├── DeviceNotInUserListError
    │   └── PhotoNotFoundError
    ├── ConflictError (400)
    │   ├── DeviceAlreadyAssignedError
    │   └── DuplicateLoginError
    ├── InvalidRequestError (400)
    │   ├── EmptyUploadError
    │   └── UploadTooLargeError (413)
    └── StorageError (500)
"""
from datetime import datetime, timezone
from typing import Any, Optional

# ============================================
# Base Exception
# ============================================

class RegistryError(Exception):
    """Base exception for all registry errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "USER_NOT_FOUND")
        details: Additional context as a dictionary
        timestamp: When the error occurred
        cause: The original exception that caused this error
        recoverable: Whether retrying the same request could succeed
        status_code: HTTP status the API layer answers with
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)
        self.cause = cause
        self.recoverable = recoverable

        if cause:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.code:
            parts.insert(0, f"[{self.code}]")
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
            "cause": str(self.cause) if self.cause else None,
        }


# ============================================
# Configuration Errors
# ============================================

class ConfigurationError(RegistryError):
    """Raised when an environment setting is missing or malformed."""

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if setting:
            details["setting"] = setting
        super().__init__(message, code="CONFIGURATION_ERROR", details=details, **kwargs)


# ============================================
# Not Found Errors
# ============================================

class NotFoundError(RegistryError):
    """Base class for lookups that matched nothing."""

    status_code = 404

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "NOT_FOUND")
        super().__init__(message, **kwargs)


class UserNotFoundError(NotFoundError):
    """Raised when no user has the requested name."""

    def __init__(self, username: Optional[str], message: str = "User not found"):
        super().__init__(message, code="USER_NOT_FOUND", details={"username": username})
        self.username = username


class DeviceNotFoundError(NotFoundError):
    """Raised when no catalog device has the requested identifier."""

    def __init__(self, identifier: Optional[str], message: str = "Device not found"):
        super().__init__(message, code="DEVICE_NOT_FOUND", details={"identifier": identifier})
        self.identifier = identifier


class DeviceNotInUserListError(NotFoundError):
    """Raised when releasing a device the user does not hold."""

    def __init__(self, identifier: str, username: str):
        super().__init__(
            "Device not found in the user's devices",
            code="DEVICE_NOT_IN_USER_LIST",
            details={"identifier": identifier, "username": username},
        )
        self.identifier = identifier
        self.username = username


class PhotoNotFoundError(NotFoundError):
    """Raised when a device has no photo file in the photo store."""

    def __init__(self, filename: Optional[str]):
        super().__init__(
            "Photo not found",
            code="PHOTO_NOT_FOUND",
            details={"filename": filename},
        )
        self.filename = filename


# ============================================
# Conflict Errors
# ============================================

class ConflictError(RegistryError):
    """Base class for requests that clash with the current state.

    Answered with 400 to stay compatible with existing clients.
    """

    status_code = 400

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "CONFLICT")
        super().__init__(message, **kwargs)


class DeviceAlreadyAssignedError(ConflictError):
    """Raised when assigning a device whose usage is already "is use"."""

    def __init__(self, identifier: str, holder: Optional[str] = None):
        super().__init__(
            "Device is already in use",
            code="DEVICE_ALREADY_ASSIGNED",
            details={"identifier": identifier, "holder": holder},
        )
        self.identifier = identifier
        self.holder = holder


class DuplicateLoginError(ConflictError):
    """Raised when creating a user whose login is taken."""

    def __init__(self, login: str):
        super().__init__(
            "User with the login already exists",
            code="DUPLICATE_LOGIN",
            details={"login": login},
        )
        self.login = login


# ============================================
# Bad Input Errors
# ============================================

class InvalidRequestError(RegistryError):
    """Raised when a request is missing required input."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        kwargs.setdefault("code", "VALIDATION_ERROR")
        super().__init__(message, details=details, **kwargs)
        self.field = field


class EmptyUploadError(InvalidRequestError):
    """Raised when an uploaded photo has no content."""

    def __init__(self, filename: Optional[str] = None):
        super().__init__(
            "Photo file is empty",
            field="photo",
            details={"filename": filename},
        )


class UploadTooLargeError(InvalidRequestError):
    """Raised when an uploaded photo exceeds the configured size limit."""

    status_code = 413

    def __init__(self, size_bytes: int, limit_bytes: int):
        limit_mb = limit_bytes // (1024 * 1024)
        super().__init__(
            f"File too large. Maximum size is {limit_mb} MB",
            field="photo",
            code="UPLOAD_TOO_LARGE",
            details={"size_bytes": size_bytes, "limit_bytes": limit_bytes},
        )


# ============================================
# Storage Errors
# ============================================

class StorageError(RegistryError):
    """Raised when the registry document or a photo cannot be read or written."""

    status_code = 500

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", {})
        if path:
            details["path"] = path
        super().__init__(
            message,
            code="STORAGE_ERROR",
            details=details,
            recoverable=True,
            **kwargs,
        )
