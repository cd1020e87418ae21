"""Thin async client for the GitHub repository contents API."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from core.config import settings
from storage.exceptions import (
    StorageAuthError,
    StorageConflictError,
    StorageError,
    StorageNotFoundError,
    StorageRateLimitError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """Non-success answer from the GitHub API."""

    def __init__(self, status_code: int, message: str, rate_limited: bool = False):
        super().__init__(f"{status_code} {message}")
        self.status_code = status_code
        self.message = message
        self.rate_limited = rate_limited


def classify_error(error: BaseException) -> StorageError:
    """Map a client or transport failure onto the storage error taxonomy."""
    if isinstance(error, StorageError):
        return error

    if isinstance(error, GitHubAPIError):
        status = error.status_code
        if status == 404:
            cls = StorageNotFoundError
        elif error.rate_limited or status == 429:
            cls = StorageRateLimitError
        elif status in (401, 403):
            cls = StorageAuthError
        elif status in (409, 422):
            cls = StorageConflictError
        else:
            cls = StorageUnavailableError
        return cls(error.message, status_code=status, cause=error)

    if isinstance(error, httpx.HTTPError):
        return StorageUnavailableError(f"Connection failed: {error}", cause=error)

    return StorageError(str(error), cause=error)


class GitHubContentsClient:
    """Read, write and delete files of one repository.

    Every call is a single HTTP request. Failures raise ``GitHubAPIError``
    (HTTP status >= 400) or ``httpx.HTTPError`` (transport).
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.owner = owner
        self.repo = repo

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": settings.GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=(api_url or settings.GITHUB_API_URL).rstrip("/"),
            headers=headers,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT,
            transport=transport,
        )

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self.owner}/{self.repo}/contents/{quote(path.strip('/'), safe='/')}"

    def _parse_github_error(self, response: httpx.Response) -> str:
        """Parse error message from GitHub response."""
        try:
            data = response.json()
            if isinstance(data, dict) and "message" in data:
                return data["message"]
            return response.text
        except ValueError:
            return response.text

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, self._contents_url(path), **kwargs)

        if response.status_code >= 400:
            message = self._parse_github_error(response)
            rate_limited = (
                response.status_code == 429
                or response.headers.get("x-ratelimit-remaining") == "0"
            )
            logger.debug(f"GitHub {method} {path} failed: status={response.status_code}, error={message}")
            raise GitHubAPIError(response.status_code, message, rate_limited=rate_limited)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # Proxies and captive portals answer 200 with HTML
            logger.debug(f"GitHub {method} {path} returned a non-JSON body")
            raise GitHubAPIError(response.status_code, "Invalid JSON response")

    async def read(self, path: str) -> Any:
        """Get a file's metadata and base64 content."""
        return await self._request("GET", path)

    async def write(self, path: str, content: str, message: str) -> Any:
        """Create a file from base64 ``content`` with a commit ``message``."""
        return await self._request("PUT", path, json={"message": message, "content": content})

    async def delete(self, path: str, sha: str, message: str) -> Any:
        """Delete the file version identified by ``sha``."""
        return await self._request("DELETE", path, json={"message": message, "sha": sha})

    async def aclose(self) -> None:
        await self._client.aclose()
