"""HTTP gateway for the Percy API v1 (JSON:API documents over httpx).

Bridge boundary
---------------
``PercyHttpGateway`` satisfies ``RemoteBuildGateway`` with an
``httpx.AsyncClient``. Request bodies and response parsing follow the
JSON:API shapes of the Percy service; everything above this module works
with the pydantic response models instead of raw documents.

Every HTTP status error and transport error is converted into a
``GatewayError`` so the session has a single exception type to route.
"""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from snapforge import __version__
from snapforge.bridge.gateway import GatewayError
from snapforge.config import ClientConfig
from snapforge.core.hasher import sha256_hex
from snapforge.models.build import BuildStatus, CreatedBuild, CreatedSnapshot
from snapforge.models.resources import ResourceDescriptor

logger = logging.getLogger(__name__)


def serialize_resource(resource: ResourceDescriptor) -> dict[str, Any]:
    """JSON:API resource object used in build and snapshot relationships."""
    return {
        "type": "resources",
        "id": resource.sha,
        "attributes": {
            "resource-url": resource.url,
            "mimetype": resource.mimetype,
            "is-root": resource.is_root,
        },
    }


def parse_missing_resources(document: dict[str, Any]) -> list[str]:
    """Extract the shas the service reports as missing; empty when absent."""
    data = document.get("data") or {}
    relationships = data.get("relationships") or {}
    missing = relationships.get("missing-resources") or {}
    return [item["id"] for item in (missing.get("data") or [])]


class PercyHttpGateway:
    """Async HTTP client for the Percy build API.

    Parameters
    ----------
    config:
        Client configuration; supplies token, API URL, timeouts and the
        branch/commit attributes sent with the build.
    transport:
        Optional httpx transport, used by tests to serve canned responses.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_url.rstrip("/"),
            timeout=httpx.Timeout(config.request_timeout_seconds, connect=10.0),
            headers={
                "Authorization": f"Token token={config.token}",
                "Content-Type": "application/vnd.api+json",
                "User-Agent": f"snapforge/{__version__}",
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    async def _request(
        self, method: str, path: str, payload: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise GatewayError(
                f"{method} {path} rejected: {e.response.text[:500]}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise GatewayError(f"{method} {path} failed: {e!r}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
            ) from e

    # ------------------------------------------------------------------
    # Gateway operations
    # ------------------------------------------------------------------

    async def create_build(
        self, project: str, resources: list[ResourceDescriptor]
    ) -> CreatedBuild:
        attributes = {
            "branch": self._config.branch,
            "target-branch": self._config.target_branch,
            "commit-sha": self._config.commit,
            "pull-request-number": self._config.pull_request,
        }
        payload = {
            "data": {
                "type": "builds",
                "attributes": attributes,
                "relationships": {
                    "resources": {"data": [serialize_resource(r) for r in resources]},
                },
            }
        }
        document = await self._request("POST", f"/projects/{project}/builds/", payload)
        data = document.get("data") or {}
        return CreatedBuild(
            build_id=str(data.get("id", "")),
            web_url=(data.get("attributes") or {}).get("web-url") or "",
            missing_resources=parse_missing_resources(document),
        )

    async def create_snapshot(
        self,
        build_id: str,
        resources: list[ResourceDescriptor],
        *,
        name: str,
        widths: list[int],
        enable_javascript: bool = False,
    ) -> CreatedSnapshot:
        payload = {
            "data": {
                "type": "snapshots",
                "attributes": {
                    "name": name,
                    "widths": widths,
                    "enable-javascript": enable_javascript,
                },
                "relationships": {
                    "resources": {"data": [serialize_resource(r) for r in resources]},
                },
            }
        }
        document = await self._request("POST", f"/builds/{build_id}/snapshots/", payload)
        return CreatedSnapshot(
            snapshot_id=str((document.get("data") or {}).get("id", "")),
            missing_resources=parse_missing_resources(document),
        )

    async def upload_resource(self, build_id: str, content: bytes) -> None:
        payload = {
            "data": {
                "type": "resources",
                "id": sha256_hex(content),
                "attributes": {
                    "base64-content": base64.b64encode(content).decode("ascii"),
                },
            }
        }
        await self._request("POST", f"/builds/{build_id}/resources/", payload)

    async def finalize_snapshot(self, snapshot_id: str) -> None:
        await self._request("POST", f"/snapshots/{snapshot_id}/finalize", {})

    async def finalize_build(self, build_id: str) -> None:
        await self._request("POST", f"/builds/{build_id}/finalize", {})

    async def get_build_status(self, build_id: str) -> BuildStatus:
        document = await self._request("GET", f"/builds/{build_id}")
        attributes = (document.get("data") or {}).get("attributes") or {}
        return BuildStatus(
            state=attributes.get("state") or "",
            total_diffs=attributes.get("total-comparisons-diff"),
            failure_reason=attributes.get("failure-reason"),
            web_url=attributes.get("web-url"),
        )
