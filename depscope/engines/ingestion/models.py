"""Data models for the ingestion engine."""

from __future__ import annotations

from dataclasses import dataclass, field

SELF_RELATION = "SELF"
SOURCE_REPO_RELATION = "SOURCE_REPO"


@dataclass(frozen=True)
class VersionKey:
    """(system, name, version) key of a published package version."""

    system: str
    name: str
    version: str


@dataclass
class ScoredDependency:
    """A dependency of a project together with its trust score.

    This is a pure data structure — no DB dependencies.
    """

    name: str
    score: float
    updated_at: int = 0  # scorecard date, Unix seconds; 0 = unknown


@dataclass
class ProjectSnapshot:
    name: str
    version: str
    updated_at: int = 0  # Unix seconds


@dataclass
class ProjectDependencyRecord:
    """One project plus its full candidate dependency list (never persisted as-is)."""

    project: ProjectSnapshot
    dependencies: list[ScoredDependency] = field(default_factory=list)


@dataclass
class IngestResult:
    """Summary of a single ingestion run."""

    project: ProjectSnapshot
    dependencies: list[ScoredDependency] = field(default_factory=list)
    graph_nodes: int = 0
    resolved_repos: int = 0
    created: bool = False
    added: int = 0
    removed: int = 0
