"""Pytest configuration and fixtures."""

import base64
import hashlib
import itertools
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from storage.adapters.github import GitHubStorageAdapter
from storage.base import FileDescriptor
from storage.github_client import GitHubAPIError


ADAPTER_CONFIG = {
    "owner": "acme",
    "repo": "assets",
    "path": "uploads",
    "cdn_url": "https://cdn.example/gh",
}


class FakeContentsClient:
    """In-memory stand-in for GitHubContentsClient.

    Behaves like the contents API: writing an existing path without a sha
    is rejected with 422, deleting with a stale sha with 409.
    """

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.files: dict[str, dict] = {}
        self.read = AsyncMock(side_effect=self._read)
        self.write = AsyncMock(side_effect=self._write)
        self.delete = AsyncMock(side_effect=self._delete)
        self.aclose = AsyncMock()

    async def _read(self, path: str) -> dict:
        if path not in self.files:
            raise GitHubAPIError(404, "Not Found")
        return self.files[path]

    async def _write(self, path: str, content: str, message: str) -> dict:
        if path in self.files:
            raise GitHubAPIError(422, "Invalid request.\n\n\"sha\" wasn't supplied.")
        raw = base64.b64decode(content)
        entry = {
            "type": "file",
            "path": path,
            "name": path.rsplit("/", 1)[-1],
            "sha": hashlib.sha1(raw).hexdigest(),
            "size": len(raw),
            "content": content,
            "download_url": f"https://raw.example/{path}",
        }
        self.files[path] = entry
        return {
            "content": {k: v for k, v in entry.items() if k != "content"},
            "commit": {"sha": "c0mm17", "message": message},
        }

    async def _delete(self, path: str, sha: str, message: str) -> dict:
        entry = self.files.get(path)
        if entry is None:
            raise GitHubAPIError(404, "Not Found")
        if entry["sha"] != sha:
            raise GitHubAPIError(409, f"{path} does not match {sha}")
        del self.files[path]
        return {"content": None, "commit": {"sha": "d3l373", "message": message}}


@pytest.fixture
def fake_client() -> FakeContentsClient:
    return FakeContentsClient()


@pytest.fixture
def adapter(fake_client) -> GitHubStorageAdapter:
    """Adapter wired to the in-memory client."""
    return GitHubStorageAdapter(dict(ADAPTER_CONFIG), client_factory=lambda **kwargs: fake_client)


@pytest.fixture
def stage_file(tmp_path: Path) -> Callable[[str, bytes], FileDescriptor]:
    """Write bytes to a fresh temporary file, as an upload handler would."""
    counter = itertools.count()

    def _stage(name: str, data: bytes) -> FileDescriptor:
        staged = tmp_path / f"upload-{next(counter)}"
        staged.write_bytes(data)
        return FileDescriptor(original_name=name, path=str(staged))

    return _stage
