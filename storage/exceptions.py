"""Storage adapter exceptions."""


class StorageError(Exception):
    """Base storage error.

    Remote failures keep the HTTP status and the original exception so
    callers can tell an auth failure from a network failure without
    parsing the message.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.cause = cause


class StorageUnavailableError(StorageError):
    """Storage location is unreachable or answered with a server error."""
    pass


class StorageAuthError(StorageError):
    """Authentication failed or the token lacks access."""
    pass


class StorageRateLimitError(StorageError):
    """The remote API rate limit is exhausted."""
    pass


class StorageConflictError(StorageError):
    """The remote rejected the change (stale sha, existing path)."""
    pass


class StorageNotFoundError(StorageError):
    """File or directory not found."""
    pass


class StorageValidationError(StorageError):
    """Request rejected before reaching the remote."""
    pass


class StorageUploadError(StorageError):
    """Upload failed. The underlying failure is kept in ``cause``."""

    def __init__(self, status_code: int | None = None, cause: BaseException | None = None):
        super().__init__("Unable to upload file", status_code=status_code, cause=cause)


class StorageDeleteError(StorageError):
    """Delete failed. The underlying failure is kept in ``cause``."""

    def __init__(self, status_code: int | None = None, cause: BaseException | None = None):
        super().__init__("Unable to delete file", status_code=status_code, cause=cause)


class StorageUnsupportedError(StorageError, NotImplementedError):
    """Operation is part of the file service interface but not offered by this backend."""

    def __init__(self, operation: str, backend: str):
        super().__init__(f"{operation} is not supported by the {backend} storage backend")
        self.operation = operation
        self.backend = backend
