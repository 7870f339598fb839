"""
Service runtime layer for filecast.

- ServiceError: Standardized errors with retry semantics
- Concrete errors for the upload/list/download flow
"""

from .errors import (
    ErrorCode,
    FileNotFoundInStoreError,
    InvalidFileNameError,
    PayloadTooLargeError,
    RetryableError,
    ServiceError,
    StorageUnavailableError,
    TerminalError,
    UploadCancelledError,
)

__all__ = [
    "ErrorCode",
    "ServiceError",
    "RetryableError",
    "TerminalError",
    "StorageUnavailableError",
    "FileNotFoundInStoreError",
    "PayloadTooLargeError",
    "InvalidFileNameError",
    "UploadCancelledError",
]
