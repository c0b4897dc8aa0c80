"""One-shot completion signal.

A ``ReadySignal`` is created synchronously (before any suspension point) so
a waiter that snapshots the pending list never misses it, and is settled
exactly once later from whichever task finishes the work.
"""

from __future__ import annotations

import asyncio


class SignalAlreadySettledError(RuntimeError):
    """Raised when a ReadySignal is settled a second time."""


class ReadySignal:
    """Single-assignment completion flag that can be awaited.

    Parameters
    ----------
    name:
        Label used in reprs and error messages.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._event = asyncio.Event()

    @property
    def is_set(self) -> bool:
        return self._event.is_set()

    def settle(self) -> None:
        """Mark the signal complete, waking every waiter."""
        if self._event.is_set():
            raise SignalAlreadySettledError(f"Signal {self.name!r} was already settled")
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def __await__(self):
        return self.wait().__await__()

    def __repr__(self) -> str:
        state = "settled" if self.is_set else "pending"
        return f"ReadySignal({self.name!r}, {state})"
