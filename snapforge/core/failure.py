"""Error taxonomy and the fatal-failure exit.

Remote failures are fatal by default: the session disables itself and the
process exits with status 2 so CI marks the job failed. The one exception
is a snapshot the service rejects as malformed, which is skipped.
"""

from __future__ import annotations

from collections.abc import Callable

# Exit status used for every fatal failure, matching a failed CI step.
FATAL_EXIT_CODE = 2

FatalHandler = Callable[[BaseException], None]


class SessionAlreadyStartedError(RuntimeError):
    """Raised when setup is called twice on the same build session."""


class SessionNotStartedError(RuntimeError):
    """Raised when a snapshot or finalize is requested before setup."""


class RetriesExceededError(RuntimeError):
    """Raised when the build is still processing after the retry budget."""


class UnexpectedBuildStateError(RuntimeError):
    """Raised when the service reports a build state the poller does not know."""


def exit_process(error: BaseException) -> None:
    """Default fatal handler: terminate with a non-zero status."""
    raise SystemExit(FATAL_EXIT_CODE) from error
