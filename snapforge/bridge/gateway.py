"""Remote build gateway protocol.

Defines the ``RemoteBuildGateway`` Protocol the build session depends on.
The session never touches HTTP directly; ``PercyHttpGateway`` is the
production implementation and tests substitute an in-memory fake.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from snapforge.models.build import BuildStatus, CreatedBuild, CreatedSnapshot
from snapforge.models.resources import ResourceDescriptor


class GatewayError(RuntimeError):
    """Raised when a remote call fails.

    ``status_code`` is the HTTP status for rejected requests and ``None``
    for transport failures (timeouts, refused connections).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_bad_request(self) -> bool:
        """Whether the service rejected the request as malformed."""
        return self.status_code == 400

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is None:
            return base
        return f"{base} (HTTP {self.status_code})"


@runtime_checkable
class RemoteBuildGateway(Protocol):
    """Protocol for the remote diffing service.

    Every method is a coroutine and raises ``GatewayError`` on failure.
    """

    async def create_build(
        self, project: str, resources: list[ResourceDescriptor]
    ) -> CreatedBuild:
        """Open a build and declare every resource in the manifest."""
        ...

    async def create_snapshot(
        self,
        build_id: str,
        resources: list[ResourceDescriptor],
        *,
        name: str,
        widths: list[int],
        enable_javascript: bool = False,
    ) -> CreatedSnapshot:
        """Register a snapshot whose root resource is among ``resources``."""
        ...

    async def upload_resource(self, build_id: str, content: bytes) -> None:
        """Upload the bytes of one resource."""
        ...

    async def finalize_snapshot(self, snapshot_id: str) -> None:
        ...

    async def finalize_build(self, build_id: str) -> None:
        ...

    async def get_build_status(self, build_id: str) -> BuildStatus:
        ...

    async def aclose(self) -> None:
        """Release any connections held by the gateway."""
        ...
