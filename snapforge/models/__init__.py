"""snapforge data models: all Pydantic v2, all frozen (immutable)."""

from snapforge.models.build import (
    VALID_BUILD_TRANSITIONS,
    Build,
    BuildState,
    BuildStatus,
    CreatedBuild,
    CreatedSnapshot,
    InvalidBuildTransitionError,
    PollOutcome,
    PollResult,
    RemoteBuildState,
    Snapshot,
)
from snapforge.models.resources import ResourceDescriptor, ResourceManifest

__all__ = [
    # resources
    "ResourceDescriptor",
    "ResourceManifest",
    # build lifecycle
    "Build",
    "BuildState",
    "InvalidBuildTransitionError",
    "Snapshot",
    "VALID_BUILD_TRANSITIONS",
    # remote responses
    "BuildStatus",
    "CreatedBuild",
    "CreatedSnapshot",
    "RemoteBuildState",
    # polling
    "PollOutcome",
    "PollResult",
]
