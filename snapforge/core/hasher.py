"""Content hashing and URL helpers for resource addressing.

Resources are identified by the SHA-256 of their raw bytes; the remote
service deduplicates on exactly this digest.
"""

from __future__ import annotations

import hashlib
from urllib.parse import quote

# Characters encodeURI() leaves untouched, besides alphanumerics and "-_.~".
_URI_SAFE = ";,/?:@&=+$!*'()#"


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def encode_resource_url(url: str) -> str:
    """Percent-encode a resource URL, keeping URI delimiters intact."""
    return quote(url, safe=_URI_SAFE)


def to_resource_url(absolute_path: str, root_dirs: list[str]) -> str:
    """Convert a local absolute path into the public URL path of a resource.

    Each configured root has its first occurrence removed, in order, and the
    result always starts with exactly one ``/``. The URL is not encoded here.

    >>> to_resource_url("/srv/site/assets/a.css", ["/srv/site"])
    '/assets/a.css'
    """
    url = absolute_path
    for root in root_dirs:
        if root:
            url = url.replace(root, "", 1)
    return "/" + url.lstrip("/")
