"""
Standardized error model for filecast.

Every failure the upload/list/download flow can surface is a ServiceError
subclass. The class carries a machine-readable code and marks whether the
caller may retry. The HTTP layer maps each class to a status code.
"""

from __future__ import annotations

import uuid
from typing import Any


class ServiceError(Exception):
    """Standardized service error with retry classification.

    Attributes:
        code: Error code for programmatic handling.
        message_safe: Safe message for logging and user display.
        message_debug: Optional detailed message for debugging.
        retryable: Whether the caller can retry the operation.
        cause: Optional underlying exception.
        debug_id: Unique identifier for support correlation.
    """

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        retryable: bool = False,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(message_safe)
        self.code = code
        self.message_safe = message_safe
        self.message_debug = message_debug
        self.retryable = retryable
        self.cause = cause
        self.debug_id = debug_id or str(uuid.uuid4())[:8]

    def __str__(self) -> str:
        return f"[{self.code}] {self.message_safe}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message_safe={self.message_safe!r}, "
            f"retryable={self.retryable}, "
            f"debug_id={self.debug_id!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses.

        Returns:
            Dictionary with error details (excludes debug info).
        """
        return {
            "code": self.code,
            "message": self.message_safe,
            "debug_id": self.debug_id,
        }


class RetryableError(ServiceError):
    """Transient failure; the caller may try again later."""

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(
            code=code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=True,
            cause=cause,
            debug_id=debug_id,
        )


class TerminalError(ServiceError):
    """Permanent failure; repeating the same request gives the same result."""

    def __init__(
        self,
        code: str,
        message_safe: str,
        message_debug: str | None = None,
        cause: Exception | None = None,
        debug_id: str | None = None,
    ):
        super().__init__(
            code=code,
            message_safe=message_safe,
            message_debug=message_debug,
            retryable=False,
            cause=cause,
            debug_id=debug_id,
        )


class ErrorCode:
    """Standard error codes."""

    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    NOT_FOUND = "NOT_FOUND"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INVALID_INPUT = "INVALID_INPUT"
    CLIENT_DISCONNECTED = "CLIENT_DISCONNECTED"


class StorageUnavailableError(RetryableError):
    """The object store is unreachable or rejected the operation."""

    def __init__(self, operation: str, name: str | None = None, cause: Exception | None = None):
        target = f" '{name}'" if name else ""
        super().__init__(
            code=ErrorCode.STORAGE_UNAVAILABLE,
            message_safe=f"Storage unavailable during {operation}{target}",
            message_debug=repr(cause) if cause else None,
            cause=cause,
        )
        self.operation = operation
        self.name = name


class FileNotFoundInStoreError(TerminalError):
    """No object with the requested name exists in the bucket."""

    def __init__(self, name: str, cause: Exception | None = None):
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message_safe=f"File not found: {name}",
            cause=cause,
        )
        self.name = name


class PayloadTooLargeError(TerminalError):
    """Upload body exceeded the configured size bound."""

    def __init__(self, limit: int):
        super().__init__(
            code=ErrorCode.PAYLOAD_TOO_LARGE,
            message_safe=f"File exceeds the maximum upload size of {limit} bytes",
        )
        self.limit = limit


class InvalidFileNameError(TerminalError):
    """The uploaded file name cannot be used as an object name."""

    def __init__(self, raw_name: str | None):
        super().__init__(
            code=ErrorCode.INVALID_INPUT,
            message_safe=f"Invalid file name: {raw_name!r}",
        )
        self.raw_name = raw_name


class UploadCancelledError(TerminalError):
    """The uploading client went away before the store write started."""

    def __init__(self, name: str):
        super().__init__(
            code=ErrorCode.CLIENT_DISCONNECTED,
            message_safe=f"Upload of '{name}' cancelled by client",
        )
        self.name = name
