"""Application configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process-wide settings shared by every storage adapter instance."""

    # GitHub REST API
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_API_VERSION: str = "2022-11-28"

    # Process-wide credential, used when an adapter is built without a token.
    # Read from the plain GITHUB_TOKEN variable, not the prefixed one.
    GITHUB_TOKEN: str | None = Field(default=None, validation_alias="GITHUB_TOKEN")

    # Public mirror used to build file URLs
    DEFAULT_CDN_URL: str = "https://cdn.jsdelivr.net/gh"

    # HTTP client
    REQUEST_TIMEOUT: float = 30.0  # seconds

    # Remove staged upload files once the transfer finished (or failed)
    CLEANUP_LOCAL_FILES: bool = True

    model_config = {"env_prefix": "CONTENTSTORE_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
