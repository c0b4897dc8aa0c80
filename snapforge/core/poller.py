"""Build status poll state machine.

Waits for the remote service to finish processing a finalized build:

- ``pending`` / ``processing``: sleep ``interval`` and poll again (self-loop)
- ``finished`` with zero diffs: terminal, ``NO_DIFFS``
- ``finished`` with diffs: terminal, ``DIFFS_FOUND``
- ``failed``: terminal, ``FAILED``
- retry budget exhausted: raises ``RetriesExceededError``

The status check and the sleep are injected so tests can run hundreds of
polls without real delay.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from snapforge.core.failure import RetriesExceededError, UnexpectedBuildStateError
from snapforge.models.build import BuildStatus, PollOutcome, PollResult, RemoteBuildState

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
MAX_RETRIES_WHEN_PROCESSING = 1000

StatusCheck = Callable[[str], Awaitable[BuildStatus]]
Sleep = Callable[[float], Awaitable[None]]

_IN_PROGRESS_STATES = {RemoteBuildState.PENDING.value, RemoteBuildState.PROCESSING.value}


class BuildStatusPoller:
    """Poll a build until it reaches a terminal state.

    Parameters
    ----------
    check_status:
        Coroutine function returning the current ``BuildStatus`` of a build.
    sleep:
        Coroutine function used between polls. Defaults to ``asyncio.sleep``.
    interval:
        Seconds to wait between polls.
    max_retries:
        Number of re-polls allowed while the build is still in progress.
    """

    def __init__(
        self,
        check_status: StatusCheck,
        *,
        sleep: Sleep = asyncio.sleep,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_retries: int = MAX_RETRIES_WHEN_PROCESSING,
    ) -> None:
        self._check_status = check_status
        self._sleep = sleep
        self.interval = interval
        self.max_retries = max_retries

    async def run(self, build_id: str) -> PollResult:
        """Poll ``build_id`` and return the terminal result.

        Raises
        ------
        RetriesExceededError
            If the build is still in progress after ``max_retries`` re-polls.
        UnexpectedBuildStateError
            If the service reports an unknown state.
        """
        retries = 0
        polls = 0
        while True:
            status = await self._check_status(build_id)
            polls += 1

            if status.state in _IN_PROGRESS_STATES:
                if retries >= self.max_retries:
                    raise RetriesExceededError(
                        f"Retries exceeded after {polls} polls of build {build_id}."
                    )
                logger.debug("Build %s is %s; poll %d", build_id, status.state, polls)
                await self._sleep(self.interval)
                retries += 1
                continue

            if status.state == RemoteBuildState.FINISHED.value:
                return self._finished(status, polls)

            if status.state == RemoteBuildState.FAILED.value:
                logger.error("build failed: %s", status.failure_reason)
                return PollResult(outcome=PollOutcome.FAILED, polls=polls, status=status)

            raise UnexpectedBuildStateError(
                f"Build {build_id} reported unknown state {status.state!r}"
            )

    @staticmethod
    def _finished(status: BuildStatus, polls: int) -> PollResult:
        if status.total_diffs:
            logger.error("diffs found: %d. Check %s", status.total_diffs, status.web_url)
            return PollResult(outcome=PollOutcome.DIFFS_FOUND, polls=polls, status=status)
        logger.info("Hooray! The build is successful with no diffs. \\o/")
        return PollResult(outcome=PollOutcome.NO_DIFFS, polls=polls, status=status)
