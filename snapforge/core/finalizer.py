"""Build finalizer.

Drains the session's pending work, finalizes the build exactly once, and
optionally hands over to the ``BuildStatusPoller`` to report the result.
``finalize`` must not run concurrently with new ``snapshot()`` calls; only
snapshots queued before it was called are waited on.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from snapforge.core.failure import SessionNotStartedError
from snapforge.core.poller import BuildStatusPoller
from snapforge.models.build import BuildState, PollResult

if TYPE_CHECKING:
    from snapforge.core.session import BuildSession

logger = logging.getLogger(__name__)


class BuildFinalizer:
    """Finalizes the session's build and optionally polls for the result."""

    def __init__(self, session: BuildSession) -> None:
        self._session = session
        self._requested = False

    def make_poller(self) -> BuildStatusPoller:
        session = self._session
        return BuildStatusPoller(
            session.gateway.get_build_status,
            sleep=session.sleep,
            interval=session.config.poll_interval_seconds,
            max_retries=session.config.max_poll_retries,
        )

    async def finalize(self, report_results: bool = False) -> PollResult | None:
        session = self._session
        if not session.started:
            raise SessionNotStartedError("setup() must be called before finalize_build()")
        if self._requested:
            logger.warning("Build finalize was already requested; ignoring.")
            return None
        self._requested = True

        logger.info("Finalizing build...")
        await session.setup_task

        # Snapshot resources must be uploaded; snapshots queued later are not
        # waited on.
        ready = list(session.snapshot_ready)
        tasks = list(session.snapshot_tasks)
        await asyncio.gather(*(signal.wait() for signal in ready))
        await asyncio.gather(*tasks, return_exceptions=True)

        if session.failed or session.build is None:
            return None

        try:
            session.build = session.build.transition(BuildState.FINALIZING)
            await session.gateway.finalize_build(session.build.id)
            session.build = session.build.transition(BuildState.FINALIZED)
            # Late snapshots (e.g. a browser refresh after the run) are ignored.
            session.enabled = False

            url = session.build.web_url
            asyncio.get_running_loop().call_soon(
                logger.info, "Visual diffs are now processing: %s", url
            )

            if report_results:
                return await self.make_poller().run(session.build.id)
        except Exception as exc:
            session.fail(exc)
        return None
