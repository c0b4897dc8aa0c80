"""Snapshot coordinator: registers HTML snapshots against the session's build.

For each requested snapshot the coordinator:

1. resolves breakpoint names to widths,
2. registers a ready signal with the session *synchronously*, so a
   finalize that is already draining the pending set cannot miss it,
3. once the build exists, creates the snapshot with its root HTML resource,
4. uploads the root resource if the service reports it missing, then
   settles the ready signal,
5. finalizes the snapshot after the build-resource uploads have settled,
   since the service diffs a snapshot only against resources it holds.

A snapshot the service rejects with HTTP 400 is skipped with a warning;
every other failure is fatal for the session.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from snapforge.bridge.gateway import GatewayError
from snapforge.core.failure import SessionNotStartedError
from snapforge.core.hasher import sha256_hex
from snapforge.core.signals import ReadySignal
from snapforge.models.build import Snapshot
from snapforge.models.resources import ResourceDescriptor

if TYPE_CHECKING:
    from snapforge.core.session import BuildSession

logger = logging.getLogger(__name__)


def make_root_resource(content: str) -> ResourceDescriptor:
    """Build the root HTML resource of a snapshot."""
    data = content.encode("utf-8")
    return ResourceDescriptor(
        url="/",
        sha=sha256_hex(data),
        content=data,
        is_root=True,
        mimetype="text/html",
    )


class SnapshotCoordinator:
    """Turns snapshot requests into create/upload/finalize calls.

    Parameters
    ----------
    session:
        The owning build session; supplies the gateway, the breakpoint
        registry and both pending-upload sets.
    """

    def __init__(self, session: BuildSession) -> None:
        self._session = session

    def request(
        self,
        name: str,
        content: str,
        breakpoints: list[str] | None = None,
        enable_javascript: bool = False,
    ) -> None:
        """Queue a snapshot. Must be called from a running event loop."""
        session = self._session
        if not session.started:
            raise SessionNotStartedError("setup() must be called before snapshot()")
        if not session.enabled:
            logger.warning("Build is no longer active; ignoring snapshot: %s", name)
            return

        widths = session.breakpoints.widths_for(breakpoints)

        # Registered before any await so finalize always sees it.
        ready = ReadySignal(name)
        session.snapshot_ready.append(ready)

        task = asyncio.get_running_loop().create_task(
            self._create_snapshot(name, content, widths, enable_javascript, ready)
        )
        session.snapshot_tasks.append(task)

    async def _create_snapshot(
        self,
        name: str,
        content: str,
        widths: list[int],
        enable_javascript: bool,
        ready: ReadySignal,
    ) -> None:
        session = self._session
        try:
            build = await session.wait_for_build()
            if build is None or session.failed:
                return

            root = make_root_resource(content)
            try:
                created = await session.gateway.create_snapshot(
                    build.id,
                    [root],
                    name=name,
                    widths=widths,
                    enable_javascript=enable_javascript,
                )
            except GatewayError as exc:
                if not exc.is_bad_request:
                    raise
                logger.warning("Bad request error, skipping snapshot: %s", name)
                logger.warning("%s", exc)
                return

            snapshot = Snapshot(id=created.snapshot_id, name=name, widths=widths, root_resource=root)
            session.snapshots[snapshot.id] = snapshot
            logger.debug("Missing snapshot resources: %s", created.missing_resources)

            # Only the root resource can be missing here; everything else
            # is a build resource.
            if created.missing_resources:
                await session.gateway.upload_resource(build.id, root.read_content())
            ready.settle()

            await session.wait_for_build_uploads()
            if session.failed:
                return
            logger.debug("Snapshot id %s", snapshot.id)
            await session.gateway.finalize_snapshot(snapshot.id)
        except Exception as exc:
            session.fail(exc)
        finally:
            if not ready.is_set:
                ready.settle()
