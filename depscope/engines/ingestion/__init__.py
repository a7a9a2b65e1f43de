"""Ingestion engine — deps.dev dependency graph + scorecards, reconciled into the store."""

from depscope.engines.ingestion.deps_client import DepsClient, DepsClientError, PackageNotFoundError
from depscope.engines.ingestion.diff import dependencies_equal, diff_dependencies
from depscope.engines.ingestion.models import (
    IngestResult,
    ProjectDependencyRecord,
    ProjectSnapshot,
    ScoredDependency,
    VersionKey,
)
from depscope.engines.ingestion.runner import IngestionRunner

__all__ = [
    "DepsClient",
    "DepsClientError",
    "IngestResult",
    "IngestionRunner",
    "PackageNotFoundError",
    "ProjectDependencyRecord",
    "ProjectSnapshot",
    "ScoredDependency",
    "VersionKey",
    "dependencies_equal",
    "diff_dependencies",
]
