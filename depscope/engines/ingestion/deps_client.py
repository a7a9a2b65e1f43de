"""Async deps.dev API client — four sequential, non-retrying calls."""

from __future__ import annotations

import os
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import structlog

from depscope.engines.ingestion.models import VersionKey
from depscope.engines.ingestion.schema import (
    DependencyGraphResponse,
    DependencyNode,
    DepsBaseModel,
    PackageVersionsResponse,
    ProjectBatchResponse,
    ProjectScore,
    VersionBatchResponse,
    VersionRelations,
)
from depscope.services import InternalError, NotFoundError

log = structlog.get_logger("depscope.engine")

DEFAULT_DEPS_ADDRESS = "https://api.deps.dev"

PayloadT = TypeVar("PayloadT", bound=DepsBaseModel)


class PackageNotFoundError(NotFoundError):
    """The metadata service has no such package, version, or project."""


class DepsClientError(InternalError):
    """Transport failure, unexpected status, or undecodable payload."""


def _escape(segment: str) -> str:
    # Scoped npm names ("@angular/core") must stay one path segment.
    return quote(segment, safe="")


class DepsClient:
    """Thin async wrapper around the deps.dev REST API."""

    def __init__(
        self,
        address: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base_url = address or os.environ.get("DEPSCOPE_DEPS_ADDRESS", DEFAULT_DEPS_ADDRESS)
        if timeout is None:
            timeout = float(os.environ.get("DEPSCOPE_HTTP_TIMEOUT", "30"))
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> DepsClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get_versions(self, project: str, system: str = "NPM") -> list[str]:
        """Return every published version of *project*."""
        data = await self._request(
            "GET",
            f"/v3/systems/{system}/packages/{_escape(project)}",
            PackageVersionsResponse,
        )
        return [v.version_key.version for v in data.versions]

    async def get_dependency_graph(
        self,
        system: str,
        project: str,
        version: str,
    ) -> list[DependencyNode]:
        """Return the resolved direct + transitive dependency nodes of project@version."""
        data = await self._request(
            "GET",
            f"/v3/systems/{system}/packages/{_escape(project)}"
            f"/versions/{_escape(version)}:dependencies",
            DependencyGraphResponse,
        )
        return data.nodes

    async def resolve_source_repos(self, keys: list[VersionKey]) -> list[VersionRelations]:
        """Batch-fetch related projects for each (system, name, version) key."""
        body = {
            "requests": [
                {"versionKey": {"system": k.system, "name": k.name, "version": k.version}}
                for k in keys
            ]
        }
        data = await self._request("POST", "/v3alpha/versionbatch", VersionBatchResponse, body)
        return [entry.version for entry in data.responses]

    async def resolve_scores(self, repo_ids: list[str]) -> list[ProjectScore]:
        """Batch-fetch scorecards for source repository ids (e.g. ``github.com/org/repo``)."""
        body = {"requests": [{"projectKey": {"id": repo_id}} for repo_id in repo_ids]}
        data = await self._request("POST", "/v3alpha/projectbatch", ProjectBatchResponse, body)
        return [entry.project for entry in data.responses]

    # ── internal ───────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        payload_model: type[PayloadT],
        body: dict[str, Any] | None = None,
    ) -> PayloadT:
        """Issue one request and decode the JSON body into *payload_model*.

        404 raises :class:`PackageNotFoundError`; every other failure raises
        :class:`DepsClientError` chained to its cause.
        """
        try:
            resp = await self._client.request(method, path, json=body)
        except httpx.HTTPError as exc:
            log.warning("deps.transport_error", method=method, path=path, error=str(exc))
            raise DepsClientError(f"{method} {path}: {exc}") from exc

        if resp.status_code == 404:
            raise PackageNotFoundError(f"{method} {path}: not found")
        if resp.status_code != 200:
            log.warning("deps.bad_status", method=method, path=path, status=resp.status_code)
            raise DepsClientError(f"{method} {path}: bad response: {resp.status_code}")

        try:
            return payload_model.model_validate(resp.json())
        except ValueError as exc:  # JSONDecodeError, pydantic.ValidationError
            raise DepsClientError(f"{method} {path}: cannot decode response: {exc}") from exc
