"""Tests for the credential guard."""

from __future__ import annotations

import pytest

from snapforge.config import ClientConfig
from snapforge.core.guard import MissingCredentialsError, enforce_credentials


class TestCredentialGuard:
    def test_configured_credentials_pass(self, client_config: ClientConfig):
        enforce_credentials(client_config)  # should not raise

    def test_missing_token_raises(self):
        config = ClientConfig(_env_file=None, token="", project="foo/bar")
        with pytest.raises(MissingCredentialsError, match="PERCY_TOKEN"):
            enforce_credentials(config)

    def test_all_violations_reported_together(self):
        config = ClientConfig(_env_file=None, token="", project="")
        with pytest.raises(MissingCredentialsError) as exc_info:
            enforce_credentials(config)
        assert "PERCY_TOKEN" in str(exc_info.value)
        assert "PERCY_PROJECT" in str(exc_info.value)
