"""Client configuration: env-driven, read once per build session.

Centralized config using pydantic-settings for environment variable
support. Reads from a .env file and PERCY_* environment variables, the same
variables the Percy tooling uses, so CI setups carry over unchanged.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

# Percy rejects resources above this size.
MAX_FILE_SIZE_BYTES = 15 * 1024 * 1024


class ClientConfig(BaseSettings):
    """Build client configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export PERCY_TOKEN=abcxyz
        export PERCY_PROJECT=acme/storefront
        export PERCY_BRANCH=feature/new-header

    Or via .env file::

        PERCY_TOKEN=abcxyz
        PERCY_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PERCY_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credentials and build identity
    token: str = ""
    project: str = ""
    branch: str | None = None
    target_branch: str | None = None
    commit: str | None = None
    pull_request: str | None = None

    # Remote service
    api_url: str = "https://percy.io/api/v1"
    request_timeout_seconds: float = 30.0

    # Runtime
    log_level: str = "INFO"
    debug: bool = False

    # Upload and polling behaviour
    upload_concurrency: int = 2
    max_file_size_bytes: int = MAX_FILE_SIZE_BYTES
    poll_interval_seconds: float = 1.0
    max_poll_retries: int = 1000

    @property
    def has_credentials(self) -> bool:
        """Whether both a token and a project are configured."""
        return bool(self.token and self.project)
