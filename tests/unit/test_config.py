"""Tests for client config: env-driven settings."""

from __future__ import annotations

from snapforge.config import MAX_FILE_SIZE_BYTES, ClientConfig


class TestClientConfig:
    def test_defaults(self, monkeypatch):
        for name in ("PERCY_TOKEN", "PERCY_PROJECT", "PERCY_BRANCH"):
            monkeypatch.delenv(name, raising=False)
        config = ClientConfig(_env_file=None)

        assert config.api_url == "https://percy.io/api/v1"
        assert config.upload_concurrency == 2
        assert config.poll_interval_seconds == 1.0
        assert config.max_poll_retries == 1000
        assert config.branch is None
        assert config.has_credentials is False

    def test_max_file_size_is_15_mib(self):
        assert MAX_FILE_SIZE_BYTES == 15728640
        assert ClientConfig(_env_file=None).max_file_size_bytes == MAX_FILE_SIZE_BYTES

    def test_reads_percy_environment(self, monkeypatch):
        monkeypatch.setenv("PERCY_TOKEN", "abcxyz")
        monkeypatch.setenv("PERCY_PROJECT", "foo/bar")
        monkeypatch.setenv("PERCY_BRANCH", "feature/header")
        monkeypatch.setenv("PERCY_MAX_POLL_RETRIES", "5")

        config = ClientConfig(_env_file=None)

        assert config.token == "abcxyz"
        assert config.project == "foo/bar"
        assert config.branch == "feature/header"
        assert config.max_poll_retries == 5
        assert config.has_credentials is True

    def test_reads_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PERCY_PROJECT", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("PERCY_PROJECT=acme/storefront\nPERCY_LOG_LEVEL=DEBUG\n")

        config = ClientConfig(_env_file=env_file)

        assert config.project == "acme/storefront"
        assert config.log_level == "DEBUG"
