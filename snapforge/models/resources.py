"""Content-addressed resource models (immutable once created)."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ResourceDescriptor(BaseModel):
    """A byte blob the remote service knows by its SHA-256 digest.

    Build resources carry a ``local_path`` and are read lazily at upload
    time; the snapshot root resource carries its ``content`` inline.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    sha: str
    local_path: Path | None = None
    content: bytes | None = None
    is_root: bool = False
    mimetype: str | None = None

    def read_content(self) -> bytes:
        """Return the resource bytes, reading from disk if not held inline."""
        if self.content is not None:
            return self.content
        if self.local_path is None:
            raise ValueError(f"Resource {self.url} has neither content nor a local path")
        return self.local_path.read_bytes()


class ResourceManifest(Mapping[str, ResourceDescriptor]):
    """Read-only mapping of content hash -> resource descriptor.

    Every key equals the ``sha`` of its descriptor. Built once per build
    setup and never mutated afterward.
    """

    def __init__(self, resources: Mapping[str, ResourceDescriptor] | None = None) -> None:
        self._resources: dict[str, ResourceDescriptor] = dict(resources or {})
        for sha, resource in self._resources.items():
            if sha != resource.sha:
                raise ValueError(f"Manifest key {sha} does not match resource hash {resource.sha}")

    def __getitem__(self, sha: str) -> ResourceDescriptor:
        return self._resources[sha]

    def __iter__(self) -> Iterator[str]:
        return iter(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    def resources(self) -> list[ResourceDescriptor]:
        """Return the descriptors in insertion order."""
        return list(self._resources.values())

    def __repr__(self) -> str:
        return f"ResourceManifest({len(self)} resources)"
