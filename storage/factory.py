"""Storage adapter factory."""

import logging
from typing import Any

from storage.adapters.github import GitHubStorageAdapter
from storage.base import FileService


# Registry of adapter classes by backend name
ADAPTER_REGISTRY: dict[str, type] = {
    GitHubStorageAdapter.BACKEND_NAME: GitHubStorageAdapter,
}


def get_file_service(
    backend: str,
    options: dict[str, Any],
    logger: logging.Logger | None = None,
) -> FileService:
    """Build the file service the host asked for.

    Args:
        backend: Registered backend name, e.g. "github".
        options: Backend options as configured by the host.
        logger: Optional host logger handed to the adapter.

    Returns:
        Configured FileService instance.

    Raises:
        ValueError: If the backend is not registered.
    """
    adapter_class = ADAPTER_REGISTRY.get(backend)

    if adapter_class is None:
        raise ValueError(f"Unknown storage backend: {backend}")

    return adapter_class(options, logger=logger)


def register_adapter(backend: str, adapter_class: type) -> None:
    """Register an adapter class under a backend name."""
    ADAPTER_REGISTRY[backend] = adapter_class
