"""Resource manifest builder.

Walks the configured asset globs, hashes each file, and maps the SHA-256
digest to a ``ResourceDescriptor``. Pure and synchronous; no network.
"""

from __future__ import annotations

import glob
import logging
import os
from pathlib import Path

from snapforge.config import MAX_FILE_SIZE_BYTES
from snapforge.core.hasher import encode_resource_url, sha256_hex, to_resource_url
from snapforge.models.resources import ResourceDescriptor, ResourceManifest

logger = logging.getLogger(__name__)


def expand_build_dirs(build_dirs: list[str]) -> list[Path]:
    """Expand glob patterns into a sorted, de-duplicated list of absolute file paths."""
    found: set[Path] = set()
    for pattern in build_dirs:
        for match in glob.glob(os.path.expanduser(pattern), recursive=True):
            path = Path(match).absolute()
            if path.is_file():
                found.add(path)
    return sorted(found)


def gather_build_resources(
    build_dirs: list[str],
    root_dirs: list[str],
    *,
    max_file_size: int = MAX_FILE_SIZE_BYTES,
) -> ResourceManifest:
    """Build the resource manifest for the given asset globs.

    Parameters
    ----------
    build_dirs:
        Glob patterns for the assets, e.g. ``["dist/assets/**"]``.
    root_dirs:
        Path prefixes stripped from each absolute path to form its URL.
    max_file_size:
        Files at or above this many bytes are skipped with a warning.

    Raises
    ------
    OSError
        If a matched file cannot be read. No partial manifest is returned.
    """
    hash_to_resource: dict[str, ResourceDescriptor] = {}

    for path in expand_build_dirs(build_dirs):
        resource_url = to_resource_url(path.as_posix(), root_dirs)

        if path.stat().st_size >= max_file_size:
            logger.warning("Skipping large build resource: %s", resource_url)
            continue

        sha = sha256_hex(path.read_bytes())
        hash_to_resource[sha] = ResourceDescriptor(
            url=encode_resource_url(resource_url),
            sha=sha,
            local_path=path,
        )

    logger.debug("Resource manifest: %s", [r.url for r in hash_to_resource.values()])
    return ResourceManifest(hash_to_resource)
