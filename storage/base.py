"""File service interface and the values that cross it."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Protocol, runtime_checkable

from storage.exceptions import StorageError


@dataclass
class FileDescriptor:
    """A file staged on local disk, waiting to be transferred."""

    original_name: str
    path: str


@dataclass
class StoredFileResult:
    """Where an uploaded file can be fetched and which version it is."""

    url: str
    key: str


@dataclass
class DeleteFileRequest:
    original_name: str
    file_key: str | None = None


@dataclass
class RemoteEntry:
    """One object in the remote repository.

    ``content`` is None when the remote did not inline the body (files
    over 1 MB); ``download_url`` still serves it.
    """

    path: str
    name: str
    sha: str
    content: bytes | None
    size: int
    download_url: str | None = None


class ReadStatus(str, Enum):
    FOUND = "found"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass
class ReadResult:
    """Outcome of a remote read.

    Absence is an expected outcome and carries neither entry nor error;
    any other failure carries the classified error.
    """

    status: ReadStatus
    entry: RemoteEntry | None = None
    error: StorageError | None = None

    @classmethod
    def found(cls, entry: RemoteEntry) -> "ReadResult":
        return cls(ReadStatus.FOUND, entry=entry)

    @classmethod
    def absent(cls) -> "ReadResult":
        return cls(ReadStatus.ABSENT)

    @classmethod
    def failed(cls, error: StorageError) -> "ReadResult":
        return cls(ReadStatus.FAILED, error=error)


@runtime_checkable
class FileService(Protocol):
    """Capability a host application consumes to store files.

    Backends implement these methods; they are not required to share a
    base class. Operations a backend cannot offer raise
    ``StorageUnsupportedError``.
    """

    async def get(self, file_key: str) -> RemoteEntry | None:
        """Fetch a stored file, or None when it is not available."""
        ...

    async def upload(self, file: FileDescriptor) -> StoredFileResult:
        """Transfer a staged file to the store."""
        ...

    async def delete(self, file: DeleteFileRequest) -> None:
        """Remove a stored file."""
        ...

    async def get_upload_stream_descriptor(self, file_data: Any) -> dict[str, Any]:
        ...

    async def get_download_stream(self, file_key: str) -> AsyncIterator[bytes]:
        ...

    async def get_presigned_download_url(self, file_key: str) -> str:
        ...

    async def upload_protected(self, file: FileDescriptor) -> StoredFileResult:
        ...
