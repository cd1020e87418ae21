"""Tests for storage adapter factory."""

import logging
from unittest.mock import MagicMock

import pytest

from conftest import ADAPTER_CONFIG
from storage import factory
from storage.adapters.github import GitHubStorageAdapter
from storage.factory import get_file_service, register_adapter


@pytest.fixture(autouse=True)
def reset_registry():
    """Restore the adapter registry between tests."""
    saved = dict(factory.ADAPTER_REGISTRY)
    yield factory.ADAPTER_REGISTRY
    factory.ADAPTER_REGISTRY.clear()
    factory.ADAPTER_REGISTRY.update(saved)


def test_get_github_adapter():
    """Factory returns GitHubStorageAdapter for the github backend."""
    adapter = get_file_service("github", dict(ADAPTER_CONFIG))

    assert isinstance(adapter, GitHubStorageAdapter)
    assert adapter.config.owner == "acme"


def test_host_logger_passed_through():
    host_logger = logging.getLogger("host")

    adapter = get_file_service("github", dict(ADAPTER_CONFIG), logger=host_logger)

    assert adapter._logger is host_logger


def test_get_adapter_unknown_backend():
    """Factory raises for unknown backend."""
    with pytest.raises(ValueError, match="Unknown storage backend"):
        get_file_service("s3", {})


def test_registered_adapter_used():
    adapter_class = MagicMock()

    register_adapter("custom", adapter_class)
    result = get_file_service("custom", {"bucket": "b"})

    adapter_class.assert_called_once_with({"bucket": "b"}, logger=None)
    assert result is adapter_class.return_value
