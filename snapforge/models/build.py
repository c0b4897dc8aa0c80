"""Build, snapshot and remote status models.

Build state transitions are validated against ``VALID_BUILD_TRANSITIONS``;
models are frozen, so a transition yields a new ``Build``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from snapforge.models.resources import ResourceDescriptor


class BuildState(str, Enum):
    """Local lifecycle of the single build owned by a session."""

    CREATED = "created"
    FINALIZING = "finalizing"
    FINALIZED = "finalized"


# Finalized is terminal; a build is finalized at most once.
VALID_BUILD_TRANSITIONS: dict[BuildState, set[BuildState]] = {
    BuildState.CREATED: {BuildState.FINALIZING},
    BuildState.FINALIZING: {BuildState.FINALIZED},
    BuildState.FINALIZED: set(),
}


class InvalidBuildTransitionError(RuntimeError):
    """Raised when a requested build state transition is not valid."""


class Build(BaseModel):
    """A remote build created for this session."""

    model_config = ConfigDict(frozen=True)

    id: str
    web_url: str = ""
    state: BuildState = BuildState.CREATED

    def transition(self, target: BuildState) -> Build:
        """Return a copy of this build in ``target`` state."""
        allowed = VALID_BUILD_TRANSITIONS[self.state]
        if target not in allowed:
            raise InvalidBuildTransitionError(
                f"Cannot transition build {self.id} from {self.state.value} to {target.value}"
            )
        return self.model_copy(update={"state": target})


class Snapshot(BaseModel):
    """An HTML snapshot registered under the session's build."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    widths: list[int]
    root_resource: ResourceDescriptor


class RemoteBuildState(str, Enum):
    """Processing state reported by the remote service."""

    PENDING = "pending"
    PROCESSING = "processing"
    FINISHED = "finished"
    FAILED = "failed"


class CreatedBuild(BaseModel):
    """Response to a create-build request."""

    model_config = ConfigDict(frozen=True)

    build_id: str
    web_url: str = ""
    missing_resources: list[str] = []


class CreatedSnapshot(BaseModel):
    """Response to a create-snapshot request."""

    model_config = ConfigDict(frozen=True)

    snapshot_id: str
    missing_resources: list[str] = []


class BuildStatus(BaseModel):
    """Remote processing status of a build.

    ``state`` is kept as a plain string so an unknown value from the service
    reaches the poller instead of failing validation here.
    """

    model_config = ConfigDict(frozen=True)

    state: str
    total_diffs: int | None = None
    failure_reason: str | None = None
    web_url: str | None = None


class PollOutcome(str, Enum):
    """Terminal result of waiting for remote processing."""

    NO_DIFFS = "no_diffs"
    DIFFS_FOUND = "diffs_found"
    FAILED = "failed"


class PollResult(BaseModel):
    """What the poller observed when the build reached a terminal state."""

    model_config = ConfigDict(frozen=True)

    outcome: PollOutcome
    polls: int
    status: BuildStatus

    @property
    def passed(self) -> bool:
        return self.outcome == PollOutcome.NO_DIFFS
