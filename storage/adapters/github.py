"""GitHub storage adapter backed by the repository contents API."""

import asyncio
import base64
import inspect
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Callable

import aiofiles
import aiofiles.os
import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from core.config import Settings, settings
from storage.base import (
    DeleteFileRequest,
    FileDescriptor,
    ReadResult,
    ReadStatus,
    RemoteEntry,
    StoredFileResult,
)
from storage.exceptions import (
    StorageConflictError,
    StorageDeleteError,
    StorageNotFoundError,
    StorageUnavailableError,
    StorageUnsupportedError,
    StorageUploadError,
    StorageValidationError,
)
from storage.github_client import GitHubAPIError, GitHubContentsClient, classify_error

REMOTE_ERRORS = (GitHubAPIError, httpx.HTTPError)


class AdapterConfig(BaseModel):
    """Options the host passes when it builds the adapter."""

    model_config = ConfigDict(extra="ignore")

    owner: str
    repo: str
    path: str
    cdn_url: str = Field(default_factory=lambda: settings.DEFAULT_CDN_URL)
    github_token: SecretStr | None = None
    api_url: str | None = None
    timeout: float | None = None
    cleanup_local_files: bool = Field(default_factory=lambda: settings.CLEANUP_LOCAL_FILES)

    @field_validator("cdn_url", mode="before")
    @classmethod
    def _default_blank_cdn_url(cls, value: Any) -> Any:
        return value or settings.DEFAULT_CDN_URL


class ClientState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


@dataclass
class _PathLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class GitHubStorageAdapter:
    """Stores files in a GitHub repository and serves them through a CDN mirror.

    Files are identified by name: uploading a name that already exists
    returns the stored version and writes nothing, even when the local
    bytes differ. Uploads and deletes of the same name are serialized
    within one adapter instance.
    """

    BACKEND_NAME = "github"
    UPLOAD_MESSAGE = "Upload file"
    DELETE_MESSAGE = "Delete file"

    def __init__(
        self,
        config: dict[str, Any],
        logger: logging.Logger | None = None,
        client_factory: Callable[..., Any] | None = None,
    ):
        """
        Initialize GitHub adapter.

        Args:
            config: Host options:
                - owner: Repository owner
                - repo: Repository name
                - path: Folder inside the repository holding the files
                - cdn_url: Optional public mirror base URL
                - github_token: Optional token, GITHUB_TOKEN is used otherwise
            logger: Optional host logger for diagnostics
            client_factory: Builds the contents client, sync or async
        """
        try:
            self.config = AdapterConfig.model_validate(config)
        except ValidationError as e:
            raise StorageValidationError(f"Invalid GitHub storage config: {e}", cause=e) from e

        self._logger = logger or logging.getLogger(__name__)
        self._client_factory = client_factory or GitHubContentsClient
        self._client: Any = None
        self._state = ClientState.UNINITIALIZED
        self._init_task: asyncio.Future | None = None
        self._path_locks: dict[str, _PathLock] = {}

    @property
    def state(self) -> ClientState:
        return self._state

    # --- Client lifecycle ---

    def _resolve_token(self) -> str | None:
        """Explicit token, else GITHUB_TOKEN as the environment has it now."""
        token = self.config.github_token
        if token is not None and token.get_secret_value():
            return token.get_secret_value()
        # Fresh read so a token exported after import is still picked up
        return Settings().GITHUB_TOKEN

    async def _initialize_client(self) -> Any:
        try:
            client = self._client_factory(
                owner=self.config.owner,
                repo=self.config.repo,
                token=self._resolve_token(),
                api_url=self.config.api_url,
                timeout=self.config.timeout,
            )
            if inspect.isawaitable(client):
                client = await client
        except Exception:
            self._state = ClientState.FAILED
            self._logger.exception("Failed to initialize GitHub client")
            raise

        self._client = client
        self._state = ClientState.READY
        return client

    async def ensure_client(self) -> Any:
        """Return the contents client, building it on first use.

        Every caller awaits the same initialization. A failed
        initialization is final and re-raised to all callers.
        """
        if self._state is ClientState.READY:
            return self._client
        if self._init_task is None:
            self._state = ClientState.INITIALIZING
            self._init_task = asyncio.ensure_future(self._initialize_client())
        return await asyncio.shield(self._init_task)

    async def aclose(self) -> None:
        """Close the HTTP client if one was built."""
        if self._client is not None and hasattr(self._client, "aclose"):
            await self._client.aclose()

    # --- Paths and URLs ---

    def build_url(self, original_name: str) -> str:
        """Public URL of a file on the CDN mirror."""
        return f"{self.config.cdn_url}/{self.config.owner}/{self.config.repo}/{self.config.path}/{original_name}"

    def _remote_path(self, name: str) -> str:
        return f"{self.config.path}/{name}"

    @asynccontextmanager
    async def _exclusive(self, path: str):
        """Serialize operations on one remote path."""
        entry = self._path_locks.setdefault(path, _PathLock())
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._path_locks[path]

    # --- Reads ---

    def _to_entry(self, path: str, data: dict[str, Any]) -> RemoteEntry:
        """Build an entry from a contents API answer.

        Files over 1 MB come back with ``encoding: "none"`` and no inline
        body; their ``content`` is None and ``download_url`` serves the bytes.
        """
        sha = data.get("sha")
        if not sha:
            raise ValueError("response has no sha")

        if data.get("encoding") == "none":
            content = None
        else:
            content = base64.b64decode(data.get("content") or "")

        return RemoteEntry(
            path=data.get("path", path),
            name=data.get("name", path.rsplit("/", 1)[-1]),
            sha=sha,
            content=content,
            size=data.get("size", len(content or b"")),
            download_url=data.get("download_url"),
        )

    async def fetch(self, file_key: str) -> ReadResult:
        """Read a file and report whether it was found, absent or failed."""
        client = await self.ensure_client()
        path = self._remote_path(file_key)

        try:
            data = await client.read(path)
        except REMOTE_ERRORS as e:
            error = classify_error(e)
            if isinstance(error, StorageNotFoundError):
                self._logger.debug(f"File not found: {path}")
                return ReadResult.absent()
            self._logger.warning(f"Error fetching file {path}: {error}")
            return ReadResult.failed(error)

        if not data:
            return ReadResult.absent()
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            error = StorageConflictError(f"Not a file: {path}")
            self._logger.warning(f"Error fetching file {path}: {error}")
            return ReadResult.failed(error)

        try:
            entry = self._to_entry(path, data)
        except (KeyError, TypeError, ValueError) as e:
            error = StorageUnavailableError(f"Malformed response for {path}: {e}", cause=e)
            self._logger.warning(f"Error fetching file {path}: {error}")
            return ReadResult.failed(error)

        return ReadResult.found(entry)

    async def get(self, file_key: str) -> RemoteEntry | None:
        """Fetch a stored file.

        Returns None when the file does not exist and also when the remote
        call failed; the failure is logged. Use ``fetch`` to tell them apart.
        """
        result = await self.fetch(file_key)
        return result.entry

    # --- Writes ---

    async def _read_local_file(self, path: str) -> str:
        """Read a staged file as a base64 string."""
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            self._logger.warning(f"Error reading staged file {path}: {e}")
            raise StorageUploadError(cause=e) from e
        return base64.b64encode(data).decode("ascii")

    async def _remove_local_file(self, path: str) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            self._logger.warning(f"Failed to remove staged file {path}: {e}")

    async def upload(self, file: FileDescriptor) -> StoredFileResult:
        """Upload a staged file unless a file with the same name is stored.

        The staged file is removed afterwards whatever the outcome, unless
        ``cleanup_local_files`` is disabled.
        """
        path = self._remote_path(file.original_name)

        try:
            client = await self.ensure_client()
            payload = await self._read_local_file(file.path)

            async with self._exclusive(path):
                existing = await self.fetch(file.original_name)

                if existing.status is ReadStatus.FOUND:
                    self._logger.debug(f"File already stored, skipping write: {path}")
                    return StoredFileResult(
                        url=self.build_url(file.original_name),
                        key=existing.entry.sha,
                    )

                if existing.status is ReadStatus.FAILED:
                    error = existing.error
                    self._logger.warning(f"Error uploading file {path}: existence check failed: {error}")
                    raise StorageUploadError(status_code=error.status_code, cause=error) from error

                try:
                    data = await client.write(path, payload, self.UPLOAD_MESSAGE)
                except REMOTE_ERRORS as e:
                    error = classify_error(e)
                    self._logger.warning(f"Error uploading file {path}: {error}")
                    raise StorageUploadError(status_code=error.status_code, cause=error) from e

                content = data.get("content") if isinstance(data, dict) else None
                sha = content.get("sha") if isinstance(content, dict) else None
                if not sha:
                    error = StorageUnavailableError(f"Upload response has no content sha: {path}")
                    self._logger.warning(f"Error uploading file {path}: {error}")
                    raise StorageUploadError(cause=error)

                self._logger.info(f"Uploaded {path} ({sha})")
                return StoredFileResult(url=self.build_url(file.original_name), key=sha)
        finally:
            if self.config.cleanup_local_files:
                await self._remove_local_file(file.path)

    async def delete(self, file: DeleteFileRequest) -> None:
        """Delete the stored version identified by ``file.file_key``."""
        if not file.file_key or not file.file_key.strip():
            raise StorageValidationError(
                f"A file key (sha) is required to delete {file.original_name}"
            )

        client = await self.ensure_client()
        path = self._remote_path(file.original_name)

        async with self._exclusive(path):
            try:
                await client.delete(path, file.file_key, self.DELETE_MESSAGE)
            except REMOTE_ERRORS as e:
                error = classify_error(e)
                self._logger.warning(f"Error deleting file {path}: {error}")
                raise StorageDeleteError(status_code=error.status_code, cause=error) from e

        self._logger.info(f"Deleted {path} ({file.file_key})")

    # --- Not offered by this backend ---

    def _unsupported(self, operation: str) -> StorageUnsupportedError:
        return StorageUnsupportedError(operation, self.BACKEND_NAME)

    async def get_upload_stream_descriptor(self, file_data: Any) -> dict[str, Any]:
        raise self._unsupported("get_upload_stream_descriptor")

    async def get_download_stream(self, file_key: str) -> AsyncIterator[bytes]:
        raise self._unsupported("get_download_stream")

    async def get_presigned_download_url(self, file_key: str) -> str:
        raise self._unsupported("get_presigned_download_url")

    async def upload_protected(self, file: FileDescriptor) -> StoredFileResult:
        raise self._unsupported("upload_protected")
