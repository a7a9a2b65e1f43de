"""Dependency injection — engine, metadata client, and service singletons."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from depscope.core.database import create_all, create_engine, create_session_factory
from depscope.dao.project_dao import ProjectDAO
from depscope.dao.project_dependency_dao import ProjectDependencyDAO
from depscope.engines.ingestion.deps_client import DepsClient
from depscope.engines.ingestion.runner import IngestionRunner
from depscope.services.project_service import ProjectService

# ---------------------------------------------------------------------------
# DAO singletons
# ---------------------------------------------------------------------------
_project_dao = ProjectDAO()
_project_dependency_dao = ProjectDependencyDAO()

# ---------------------------------------------------------------------------
# Engine / client / services (initialised by app lifespan)
# ---------------------------------------------------------------------------
_engine: AsyncEngine | None = None
_deps_client: DepsClient | None = None
_project_service: ProjectService | None = None
_ingestion_runner: IngestionRunner | None = None


async def init_services(database_url: str | None = None) -> None:
    """Create the engine, schema, metadata client, and services. Called once at startup."""
    global _engine, _deps_client, _project_service, _ingestion_runner  # noqa: PLW0603
    _engine = create_engine(database_url)
    await create_all(_engine)
    _deps_client = DepsClient()
    _project_service = ProjectService(
        create_session_factory(_engine), _project_dao, _project_dependency_dao
    )
    _ingestion_runner = IngestionRunner(_deps_client, _project_service)


async def shutdown_services() -> None:
    """Close the metadata client and dispose the engine's pooled connections."""
    global _engine, _deps_client, _project_service, _ingestion_runner  # noqa: PLW0603
    if _deps_client is not None:
        await _deps_client.close()
    if _engine is not None:
        await _engine.dispose()
    _engine = _deps_client = _project_service = _ingestion_runner = None


# ---------------------------------------------------------------------------
# Service getters (for Depends())
# ---------------------------------------------------------------------------


def get_project_service() -> ProjectService:
    if _project_service is None:
        raise RuntimeError("call init_services() before handling requests")
    return _project_service


def get_ingestion_runner() -> IngestionRunner:
    if _ingestion_runner is None:
        raise RuntimeError("call init_services() before handling requests")
    return _ingestion_runner
