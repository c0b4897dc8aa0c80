"""Credential guard: refuses to start a build without a token and project.

Runs once when a build session is set up. Missing settings are collected
and reported together so a CI log names everything that needs fixing.
"""

from __future__ import annotations

import logging

from snapforge.config import ClientConfig

logger = logging.getLogger(__name__)

# ClientConfig field names that must be non-empty to talk to the service.
REQUIRED_SETTINGS: list[str] = ["token", "project"]


class MissingCredentialsError(RuntimeError):
    """Raised when the service credentials are not configured."""


def enforce_credentials(config: ClientConfig) -> None:
    """Validate that every required setting is configured.

    Raises
    ------
    MissingCredentialsError
        Listing each missing setting and the variable that provides it.
    """
    if config.has_credentials:
        logger.debug("Credential guard passed for project %s.", config.project)
        return

    violations: list[str] = []
    for name in REQUIRED_SETTINGS:
        if not getattr(config, name, ""):
            violations.append(f"'{name}' is not configured. Set PERCY_{name.upper()}.")

    msg = "Credential guard failed.\n" + "\n".join(f"  - {v}" for v in violations)
    logger.critical(msg)
    raise MissingCredentialsError(msg)
