"""Storage adapter implementations."""

from storage.adapters.github import AdapterConfig, ClientState, GitHubStorageAdapter

__all__ = ["AdapterConfig", "ClientState", "GitHubStorageAdapter"]
