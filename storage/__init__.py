"""Storage adapter package."""

from storage.base import (
    DeleteFileRequest,
    FileDescriptor,
    FileService,
    ReadResult,
    ReadStatus,
    RemoteEntry,
    StoredFileResult,
)
from storage.exceptions import (
    StorageError,
    StorageUnavailableError,
    StorageAuthError,
    StorageRateLimitError,
    StorageConflictError,
    StorageNotFoundError,
    StorageValidationError,
    StorageUploadError,
    StorageDeleteError,
    StorageUnsupportedError,
)

__all__ = [
    "FileService",
    "FileDescriptor",
    "StoredFileResult",
    "DeleteFileRequest",
    "RemoteEntry",
    "ReadResult",
    "ReadStatus",
    "StorageError",
    "StorageUnavailableError",
    "StorageAuthError",
    "StorageRateLimitError",
    "StorageConflictError",
    "StorageNotFoundError",
    "StorageValidationError",
    "StorageUploadError",
    "StorageDeleteError",
    "StorageUnsupportedError",
]
