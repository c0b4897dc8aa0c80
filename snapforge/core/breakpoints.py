"""Breakpoint registry: named widths a snapshot is rendered at."""

from __future__ import annotations

import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)


class BreakpointRegistry:
    """Read-only mapping of breakpoint name -> pixel width.

    Supplied once at setup, e.g. ``{"small": 320, "medium": 768}``.
    """

    def __init__(self, breakpoints: Mapping[str, int] | None = None) -> None:
        self._breakpoints: dict[str, int] = dict(breakpoints or {})

    @property
    def names(self) -> list[str]:
        return list(self._breakpoints)

    def get(self, name: str) -> int | None:
        return self._breakpoints.get(name)

    def widths_for(self, names: list[str] | None = None) -> list[int]:
        """Resolve breakpoint names to unique widths in first-seen order.

        ``None`` means every registered breakpoint. Unknown names are logged
        as errors and dropped.
        """
        if names is None:
            names = self.names

        widths: list[int] = []
        for name in names:
            width = self.get(name)
            if not width:
                logger.error('Breakpoint name "%s" is not defined in the breakpoint config.', name)
                continue
            if width not in widths:
                widths.append(width)
        return widths
