"""Pure pipeline stages — re-key remote payloads between ingestion calls."""

from __future__ import annotations

from depscope.engines.ingestion.models import (
    SELF_RELATION,
    SOURCE_REPO_RELATION,
    ScoredDependency,
    VersionKey,
)
from depscope.engines.ingestion.schema import DependencyNode, ProjectScore, VersionRelations


def collect_dependency_keys(nodes: list[DependencyNode]) -> list[VersionKey]:
    """Drop the project's own node and dedupe the rest by (system, name).

    A package reachable through several graph paths is kept once, with the
    version of its first occurrence.
    """
    seen: set[tuple[str, str]] = set()
    keys: list[VersionKey] = []
    for node in nodes:
        if node.relation == SELF_RELATION:
            continue
        key = node.version_key.to_key()
        if (key.system, key.name) in seen:
            continue
        seen.add((key.system, key.name))
        keys.append(key)
    return keys


def map_source_repos(responses: list[VersionRelations]) -> dict[str, list[str]]:
    """Map source repository id -> names of the dependencies it backs.

    Only the first ``SOURCE_REPO`` relation of each response counts.
    Responses without one are dropped.
    """
    repos: dict[str, list[str]] = {}
    for response in responses:
        for related in response.related_projects:
            if related.relation_type == SOURCE_REPO_RELATION:
                repos.setdefault(related.project_key.id, []).append(response.version_key.name)
                break
    return repos


def build_dependencies(
    scores: list[ProjectScore],
    repos: dict[str, list[str]],
) -> list[ScoredDependency]:
    """Emit one :class:`ScoredDependency` per dependency name backed by a scored repo.

    A repository echoed twice by the service is scored once.
    """
    deps: list[ScoredDependency] = []
    emitted: set[str] = set()
    for project in scores:
        repo_id = project.project_key.id
        names = repos.get(repo_id)
        if not names or repo_id in emitted:
            continue
        emitted.add(repo_id)
        updated_at = project.scorecard.unix_date()
        for name in names:
            deps.append(
                ScoredDependency(
                    name=name,
                    score=project.scorecard.overall_score,
                    updated_at=updated_at,
                )
            )
    return deps
