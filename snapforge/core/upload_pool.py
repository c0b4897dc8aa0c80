"""Bounded-concurrency pool for lazily created awaitables.

Workers pull from a single shared iterator, so an awaitable is only created
when a slot frees up. For uploads this keeps at most ``concurrency`` file
bodies in memory, and each request's timeout starts when that request
starts rather than when the whole batch was queued.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable, Iterator
from typing import Any

logger = logging.getLogger(__name__)


class BoundedPool:
    """Run awaitables from a pull-based source, at most ``concurrency`` at a time.

    Parameters
    ----------
    concurrency:
        Maximum number of awaitables in flight. Must be positive.

    A failing awaitable does not stop the pool; its exception is kept in
    ``errors``. Callers that need to escalate a failure do so inside the
    awaitable itself.
    """

    def __init__(self, concurrency: int) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, got {concurrency}")
        self.concurrency = concurrency
        self.errors: list[BaseException] = []
        self.settled = 0
        self._in_flight = 0
        self.peak_in_flight = 0

    async def run(self, task_source: Iterable[Awaitable[Any]]) -> int:
        """Drain ``task_source`` and return the number of awaitables settled.

        Completes once the source is exhausted and every started awaitable
        has settled.
        """
        source = iter(task_source)
        workers = [self._worker(source) for _ in range(self.concurrency)]
        await asyncio.gather(*workers)
        return self.settled

    async def _worker(self, source: Iterator[Awaitable[Any]]) -> None:
        while True:
            # Pulling is synchronous, so two workers never take the same item.
            try:
                job = next(source)
            except StopIteration:
                return
            if job is None:
                return

            self._in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self._in_flight)
            try:
                await job
            except Exception as exc:
                logger.debug("Pool task failed: %r", exc)
                self.errors.append(exc)
            finally:
                self._in_flight -= 1
                self.settled += 1
