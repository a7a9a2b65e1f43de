"""IngestionRunner — drives the deps.dev pipeline and hands the result to the store."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

import structlog

from depscope.engines.ingestion.models import (
    IngestResult,
    ProjectDependencyRecord,
    ProjectSnapshot,
    ScoredDependency,
    VersionKey,
)
from depscope.engines.ingestion.resolver import (
    build_dependencies,
    collect_dependency_keys,
    map_source_repos,
)
from depscope.engines.ingestion.schema import DependencyNode, ProjectScore, VersionRelations

log = structlog.get_logger("depscope.engine")

SYSTEM_NPM = "npm"


class MetadataClient(Protocol):
    async def get_versions(self, project: str) -> list[str]: ...

    async def get_dependency_graph(
        self, system: str, project: str, version: str
    ) -> list[DependencyNode]: ...

    async def resolve_source_repos(self, keys: list[VersionKey]) -> list[VersionRelations]: ...

    async def resolve_scores(self, repo_ids: list[str]) -> list[ProjectScore]: ...


class ReconcileOutcome(Protocol):
    created: bool
    added: int
    removed: int


class DependencyStore(Protocol):
    async def reconcile(self, record: ProjectDependencyRecord) -> ReconcileOutcome: ...


class IngestionRunner:
    """Orchestration layer: remote pipeline -> one reconcile call.

    Remote calls are issued strictly one after another. Any client error
    aborts the run before the store is touched.
    """

    def __init__(
        self,
        client: MetadataClient,
        store: DependencyStore,
        now: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._store = store
        self._now = now

    async def run(self, name: str, version: str) -> IngestResult:
        """Fetch, score, and store the dependencies of name@version.

        1. Dependency graph -> deduplicated version keys (SELF dropped)
        2. Version batch -> source repository per dependency
        3. Project batch -> scorecard per repository
        4. Reconcile with the stored snapshot

        An empty graph, or a graph where nothing resolves to a source
        repository, stores the project with no dependencies.
        """
        bound = log.bind(project=name, version=version)
        bound.info("ingest.start")
        try:
            result = await self._run(name, version, bound)
        except Exception:
            bound.exception("ingest.failed")
            raise
        bound.info(
            "ingest.done",
            dependencies=len(result.dependencies),
            created=result.created,
            added=result.added,
            removed=result.removed,
        )
        return result

    async def list_versions(self, name: str) -> list[str]:
        """Published versions of *name*, as reported by the metadata service."""
        return await self._client.get_versions(name)

    # ── internal ───────────────────────────────────────────────────────

    async def _run(self, name: str, version: str, bound) -> IngestResult:
        nodes = await self._client.get_dependency_graph(SYSTEM_NPM, name, version)
        keys = collect_dependency_keys(nodes)
        bound.debug("ingest.graph_fetched", nodes=len(nodes), unique=len(keys))
        if not keys:
            return await self._store_dependencies(name, version, [], graph_nodes=len(nodes))

        relations = await self._client.resolve_source_repos(keys)
        repos = map_source_repos(relations)
        bound.debug("ingest.repos_resolved", repos=len(repos))
        if not repos:
            return await self._store_dependencies(name, version, [], graph_nodes=len(nodes))

        scores = await self._client.resolve_scores(list(repos))
        deps = build_dependencies(scores, repos)
        bound.debug("ingest.scores_resolved", scored=len(scores), dependencies=len(deps))
        return await self._store_dependencies(
            name, version, deps, graph_nodes=len(nodes), resolved_repos=len(repos)
        )

    async def _store_dependencies(
        self,
        name: str,
        version: str,
        deps: list[ScoredDependency],
        *,
        graph_nodes: int = 0,
        resolved_repos: int = 0,
    ) -> IngestResult:
        project = ProjectSnapshot(name=name, version=version, updated_at=int(self._now()))
        outcome = await self._store.reconcile(
            ProjectDependencyRecord(project=project, dependencies=deps)
        )
        return IngestResult(
            project=project,
            dependencies=deps,
            graph_nodes=graph_nodes,
            resolved_repos=resolved_repos,
            created=outcome.created,
            added=outcome.added,
            removed=outcome.removed,
        )
