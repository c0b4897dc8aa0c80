"""Build session: owns the single build of a visual-regression run.

The BuildSession wires together the manifest builder, the remote gateway,
the bounded upload pool, the snapshot coordinator and the finalizer. All
mutable run state (the build, the manifest, both pending-upload sets and
the enabled flag) lives here and is handed by reference to the
coordinator and finalizer, so one session is exactly one build.

Typical use inside an event loop::

    session = BuildSession(ClientConfig())
    session.setup(["dist/assets/**"], ["/srv/app/dist"], {"small": 320})
    session.snapshot("home", html)
    result = await session.finalize_build(report_results=True)

``snapshot`` and ``finalize_build`` may be issued before the setup task
settles; they wait for it internally.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Mapping

from snapforge.bridge.gateway import RemoteBuildGateway
from snapforge.config import ClientConfig
from snapforge.core.breakpoints import BreakpointRegistry
from snapforge.core.failure import (
    FatalHandler,
    SessionAlreadyStartedError,
    SessionNotStartedError,
    exit_process,
)
from snapforge.core.finalizer import BuildFinalizer
from snapforge.core.guard import enforce_credentials
from snapforge.core.manifest import gather_build_resources
from snapforge.core.poller import Sleep
from snapforge.core.signals import ReadySignal
from snapforge.core.snapshots import SnapshotCoordinator
from snapforge.core.upload_pool import BoundedPool
from snapforge.models.build import Build, PollResult, Snapshot
from snapforge.models.resources import ResourceDescriptor, ResourceManifest

logger = logging.getLogger(__name__)


class BuildSession:
    """One build against the remote diffing service.

    Parameters
    ----------
    config:
        Client configuration. Read from the environment if not provided.
    gateway:
        Remote gateway. A ``PercyHttpGateway`` is created from ``config``
        on first use if not provided.
    on_fatal:
        Called with the error after a fatal remote failure has disabled the
        session. The default exits the process with status 2.
    sleep:
        Coroutine function used between status polls.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        gateway: RemoteBuildGateway | None = None,
        *,
        on_fatal: FatalHandler = exit_process,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config or ClientConfig()
        self._gateway = gateway
        self._on_fatal = on_fatal
        self.sleep = sleep

        self.breakpoints = BreakpointRegistry()
        self.manifest = ResourceManifest()
        self.build: Build | None = None
        self.snapshots: dict[str, Snapshot] = {}

        # Cleared once the build is finalized or a fatal error occurs.
        self.enabled = True
        self.failed = False

        # Pending upload sets, append only.
        self.build_uploads: list[asyncio.Task[None]] = []
        self.snapshot_ready: list[ReadySignal] = []
        self.snapshot_tasks: list[asyncio.Task[None]] = []

        self._setup_task: asyncio.Task[None] | None = None
        self._previous_log_level: int | None = None
        self._build_created: ReadySignal | None = None

        self._coordinator = SnapshotCoordinator(self)
        self._finalizer = BuildFinalizer(self)

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def gateway(self) -> RemoteBuildGateway:
        if self._gateway is None:
            from snapforge.bridge.http_gateway import PercyHttpGateway

            self._gateway = PercyHttpGateway(self.config)
        return self._gateway

    @property
    def started(self) -> bool:
        return self._setup_task is not None

    @property
    def setup_task(self) -> asyncio.Task[None]:
        if self._setup_task is None:
            raise SessionNotStartedError("setup() has not been called on this session")
        return self._setup_task

    async def aclose(self) -> None:
        """Close the gateway's connections and undo the debug log level."""
        if self._previous_log_level is not None:
            logging.getLogger("snapforge").setLevel(self._previous_log_level)
            self._previous_log_level = None
        if self._gateway is not None:
            await self._gateway.aclose()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def setup(
        self,
        build_dirs: list[str],
        root_dirs: list[str],
        breakpoints: Mapping[str, int],
        debug: bool = False,
    ) -> asyncio.Task[None]:
        """Create the build and start uploading the resources it is missing.

        Must be called from a running event loop, once per session. The
        manifest is built synchronously, so local I/O errors and missing
        credentials raise here. Remote failures go through the fatal path.
        With ``debug`` the ``snapforge`` logger is set to DEBUG until
        ``aclose()``.

        Returns the setup task; it settles once the build exists and every
        missing build resource has been uploaded, or once setup failed.
        """
        if self._setup_task is not None:
            raise SessionAlreadyStartedError("setup() may only be called once per build session")

        if debug or self.config.debug:
            package_logger = logging.getLogger("snapforge")
            self._previous_log_level = package_logger.level
            package_logger.setLevel(logging.DEBUG)

        enforce_credentials(self.config)
        self.breakpoints = BreakpointRegistry(breakpoints)

        logger.info('Setting up project "%s"', self.config.project)
        self.manifest = gather_build_resources(
            build_dirs, root_dirs, max_file_size=self.config.max_file_size_bytes
        )

        loop = asyncio.get_running_loop()
        self._build_created = ReadySignal("build-created")
        self._setup_task = loop.create_task(self._create_build())
        return self._setup_task

    async def _create_build(self) -> None:
        try:
            created = await self.gateway.create_build(
                self.config.project, self.manifest.resources()
            )
            self.build = Build(id=created.build_id, web_url=created.web_url)
            logger.info("Build created: %s", created.web_url)
            self._build_created.settle()

            logger.debug("Missing resources: %s", created.missing_resources)
            if created.missing_resources:
                await self._upload_missing_resources(self.build.id, created.missing_resources)
        except Exception as exc:
            self.fail(exc)
        finally:
            # Unblock snapshot tasks even when the build was never created.
            if not self._build_created.is_set:
                self._build_created.settle()

    async def _upload_missing_resources(self, build_id: str, missing: list[str]) -> None:
        pool = BoundedPool(self.config.upload_concurrency)
        await pool.run(self._build_upload_tasks(build_id, missing))

    def _build_upload_tasks(self, build_id: str, missing: list[str]) -> Iterator[asyncio.Task[None]]:
        loop = asyncio.get_running_loop()
        for sha in missing:
            if self.failed:
                return
            resource = self.manifest.get(sha)
            if resource is None:
                logger.warning("Service reported unknown resource %s missing; skipping", sha)
                continue
            task = loop.create_task(self._upload_build_resource(build_id, resource))
            self.build_uploads.append(task)
            yield task

    async def _upload_build_resource(self, build_id: str, resource: ResourceDescriptor) -> None:
        try:
            content = resource.read_content()
            await self.gateway.upload_resource(build_id, content)
        except Exception as exc:
            self.fail(exc)
            return
        logger.info("Uploaded new build resource: %s", resource.url)

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    async def wait_for_build(self) -> Build | None:
        """Wait until the build has been created; ``None`` if creation failed."""
        if self._build_created is None:
            raise SessionNotStartedError("setup() has not been called on this session")
        await self._build_created
        return self.build

    async def wait_for_build_uploads(self) -> None:
        """Wait for the whole build-resource upload phase to settle."""
        await self.setup_task
        await asyncio.gather(*list(self.build_uploads), return_exceptions=True)

    # ------------------------------------------------------------------
    # Snapshots and finalize
    # ------------------------------------------------------------------

    def snapshot(
        self,
        name: str,
        content: str,
        breakpoints: list[str] | None = None,
        enable_javascript: bool = False,
    ) -> None:
        """Queue an HTML snapshot. Fire-and-forget; tracked by the session."""
        self._coordinator.request(name, content, breakpoints, enable_javascript)

    async def finalize_build(self, report_results: bool = False) -> PollResult | None:
        """Finalize the build once every queued snapshot is ready.

        Returns the poll result when ``report_results`` is set, else ``None``.
        """
        return await self._finalizer.finalize(report_results)

    # ------------------------------------------------------------------
    # Failure
    # ------------------------------------------------------------------

    def fail(self, error: BaseException) -> None:
        """Disable the session and hand the error to the fatal handler."""
        if self.failed:
            logger.debug("Additional failure after session was disabled: %r", error)
            return
        self.enabled = False
        self.failed = True
        logger.error("API call failed, Percy has been disabled for this build. %s", error)
        self._on_fatal(error)
