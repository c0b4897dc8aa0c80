"""Shared test fixtures for snapforge."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from snapforge.bridge.gateway import GatewayError
from snapforge.config import ClientConfig
from snapforge.core.hasher import sha256_hex
from snapforge.core.session import BuildSession
from snapforge.models.build import BuildStatus, CreatedBuild, CreatedSnapshot
from snapforge.models.resources import ResourceDescriptor

STYLES_CSS = b"body { color: #333; }\n"
APP_JS = b"console.log('hello');\n"
LOGO_PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# ---------------------------------------------------------------------------
# In-memory gateway
# ---------------------------------------------------------------------------


class FakeGateway:
    """In-memory RemoteBuildGateway that records every call.

    Parameters
    ----------
    missing_resources:
        Shas reported missing by ``create_build``.
    root_missing:
        Whether ``create_snapshot`` reports the root resource missing.
    statuses:
        Sequence returned by ``get_build_status``; the last one repeats.
    """

    def __init__(
        self,
        *,
        build_id: str = "123",
        web_url: str = "https://percy.io/foo/bar/builds/123",
        missing_resources: list[str] | None = None,
        root_missing: bool = False,
        statuses: list[BuildStatus] | None = None,
    ) -> None:
        self.build_id = build_id
        self.web_url = web_url
        self.missing_resources = missing_resources or []
        self.root_missing = root_missing
        self.statuses = list(statuses or [BuildStatus(state="finished", total_diffs=0)])

        self.calls: list[tuple[str, Any]] = []
        self.declared: list[ResourceDescriptor] = []
        self.uploaded: list[str] = []
        self.snapshot_requests: list[dict[str, Any]] = []
        self.root_shas: set[str] = set()

        # Failure injection
        self.create_build_error: Exception | None = None
        self.upload_error: Exception | None = None
        self.root_upload_error: Exception | None = None
        self.snapshot_errors: dict[str, Exception] = {}
        self.finalize_snapshot_error: Exception | None = None
        self.finalize_build_error: Exception | None = None

        # Uploads block on this event when set (cleared = held).
        self.upload_gate: asyncio.Event | None = None
        self.in_flight = 0
        self.peak_in_flight = 0
        self.closed = False

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def create_build(
        self, project: str, resources: list[ResourceDescriptor]
    ) -> CreatedBuild:
        self.calls.append(("create_build", project))
        self.declared = list(resources)
        await asyncio.sleep(0)
        if self.create_build_error is not None:
            raise self.create_build_error
        return CreatedBuild(
            build_id=self.build_id,
            web_url=self.web_url,
            missing_resources=self.missing_resources,
        )

    async def upload_resource(self, build_id: str, content: bytes) -> None:
        sha = sha256_hex(content)
        self.calls.append(("upload_resource", sha))
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.upload_gate is not None:
                await self.upload_gate.wait()
            else:
                await asyncio.sleep(0)
            if self.upload_error is not None:
                raise self.upload_error
            if self.root_upload_error is not None and sha in self.root_shas:
                raise self.root_upload_error
        finally:
            self.in_flight -= 1
        self.uploaded.append(sha)

    async def create_snapshot(
        self,
        build_id: str,
        resources: list[ResourceDescriptor],
        *,
        name: str,
        widths: list[int],
        enable_javascript: bool = False,
    ) -> CreatedSnapshot:
        self.calls.append(("create_snapshot", name))
        self.snapshot_requests.append({
            "build_id": build_id,
            "resources": resources,
            "name": name,
            "widths": widths,
            "enable_javascript": enable_javascript,
        })
        self.root_shas.update(r.sha for r in resources if r.is_root)
        await asyncio.sleep(0)
        if name in self.snapshot_errors:
            raise self.snapshot_errors[name]
        missing = [resources[0].sha] if self.root_missing else []
        return CreatedSnapshot(snapshot_id=f"snap-{name}", missing_resources=missing)

    async def finalize_snapshot(self, snapshot_id: str) -> None:
        self.calls.append(("finalize_snapshot", snapshot_id))
        await asyncio.sleep(0)
        if self.finalize_snapshot_error is not None:
            raise self.finalize_snapshot_error

    async def finalize_build(self, build_id: str) -> None:
        self.calls.append(("finalize_build", build_id))
        await asyncio.sleep(0)
        if self.finalize_build_error is not None:
            raise self.finalize_build_error

    async def get_build_status(self, build_id: str) -> BuildStatus:
        self.calls.append(("get_build_status", build_id))
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]

    async def aclose(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_project(tmp_path: Path) -> Path:
    """A project directory with a few static assets under ``assets/``."""
    root = tmp_path / "mock-project"
    (root / "assets" / "images").mkdir(parents=True)
    (root / "assets" / "styles.css").write_bytes(STYLES_CSS)
    (root / "assets" / "app.js").write_bytes(APP_JS)
    (root / "assets" / "images" / "logo.png").write_bytes(LOGO_PNG)
    return root


@pytest.fixture
def asset_globs(mock_project: Path) -> list[str]:
    return [str(mock_project / "assets" / "**")]


@pytest.fixture
def root_dirs(mock_project: Path) -> list[str]:
    return [str(mock_project)]


@pytest.fixture
def breakpoints() -> dict[str, int]:
    return {"small": 600, "large": 1440}


@pytest.fixture
def client_config() -> ClientConfig:
    """Config with credentials, isolated from any local .env file."""
    return ClientConfig(_env_file=None, token="abcxyz", project="foo/bar")


@pytest.fixture
def fatal_errors() -> list[BaseException]:
    """Errors passed to the session's fatal handler."""
    return []


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested by the poller."""
    return []


@pytest.fixture
def make_session(
    client_config: ClientConfig,
    fatal_errors: list[BaseException],
    sleeps: list[float],
) -> Callable[..., BuildSession]:
    """Factory fixture: a BuildSession on a FakeGateway that never exits or sleeps."""

    async def _fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    def _factory(gateway: FakeGateway, **config_overrides: Any) -> BuildSession:
        config = client_config.model_copy(update=config_overrides)
        return BuildSession(
            config,
            gateway,
            on_fatal=fatal_errors.append,
            sleep=_fake_sleep,
        )

    return _factory


@pytest.fixture
def bad_request() -> GatewayError:
    return GatewayError("snapshot rejected", status_code=400)


@pytest.fixture
def server_error() -> GatewayError:
    return GatewayError("internal error", status_code=500)


@pytest.fixture
def gateway() -> FakeGateway:
    """A FakeGateway with nothing missing; tests adjust its attributes."""
    return FakeGateway()


@pytest.fixture
def missing_gateway(mock_project: Path) -> FakeGateway:
    """A FakeGateway reporting every asset in ``mock_project`` missing."""
    shas = [sha256_hex(data) for data in (STYLES_CSS, APP_JS, LOGO_PNG)]
    return FakeGateway(missing_resources=shas)
