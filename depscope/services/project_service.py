"""ProjectService — transactional store for projects and their dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from depscope.dao.project_dao import ProjectDAO
from depscope.dao.project_dependency_dao import ProjectDependencyDAO
from depscope.engines.ingestion.diff import SCORE_TOLERANCE, diff_dependencies
from depscope.engines.ingestion.models import (
    ProjectDependencyRecord,
    ProjectSnapshot,
    ScoredDependency,
)
from depscope.services import (
    DependencyExistsError,
    DependencyNotFoundError,
    NoDependentProjectsError,
    ProjectNotFoundError,
)

log = structlog.get_logger(__name__)


@dataclass
class ReconcileResult:
    """What a :meth:`ProjectService.reconcile` call changed."""

    project_id: int
    created: bool
    added: int = 0
    removed: int = 0


class ProjectService:
    """Persistence layer: every public method is one transaction.

    The transaction is rolled back on any exception, cancellation
    included, so a failed call leaves prior state untouched.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        project_dao: ProjectDAO,
        dependency_dao: ProjectDependencyDAO,
    ) -> None:
        self._session_factory = session_factory
        self._project_dao = project_dao
        self._dep_dao = dependency_dao

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            async with session.begin():
                yield session

    # ── ingestion ─────────────────────────────────────────────────────

    async def reconcile(self, record: ProjectDependencyRecord) -> ReconcileResult:
        """Store *record*, inserting a new project or diffing against the stored one.

        New (name, version): the project row and every dependency are
        inserted. Existing: the stored dependency set is diffed against
        the incoming one, the project timestamp is bumped, and only the
        delta is deleted / inserted. A changed score is a delete plus an
        insert, never an in-place update.
        """
        project = record.project
        async with self._transaction() as session:
            project_id = await self._project_dao.insert_if_absent(
                session, project.name, project.version, project.updated_at
            )
            if project_id is not None:
                added = await self._dep_dao.insert_many(session, project_id, record.dependencies)
                log.info(
                    "store.project_created",
                    project=project.name,
                    version=project.version,
                    dependencies=added,
                )
                return ReconcileResult(project_id=project_id, created=True, added=added)

            project_id = await self._require_project_id(session, project.name, project.version)
            current = await self._dep_dao.list_by_project(session, project_id)
            to_delete, to_add = diff_dependencies(current, record.dependencies)

            await self._project_dao.touch(session, project_id, project.updated_at)
            if not to_delete and not to_add:
                log.info("store.project_unchanged", project=project.name, version=project.version)
                return ReconcileResult(project_id=project_id, created=False)

            removed = await self._dep_dao.delete_by_names(
                session, project_id, [dep.name for dep in to_delete]
            )
            added = await self._dep_dao.insert_many(session, project_id, to_add)
            log.info(
                "store.project_reconciled",
                project=project.name,
                version=project.version,
                added=added,
                removed=removed,
            )
            return ReconcileResult(project_id=project_id, created=False, added=added, removed=removed)

    # ── projects ──────────────────────────────────────────────────────

    async def delete_project(self, name: str, version: str) -> None:
        """Delete a project and, via the FK cascade, all its dependencies."""
        async with self._transaction() as session:
            project_id = await self._require_project_id(session, name, version)
            await self._project_dao.delete_by_id(session, project_id)
        log.info("store.project_deleted", project=name, version=version)

    async def list_projects(self) -> list[ProjectSnapshot]:
        async with self._transaction() as session:
            rows = await self._project_dao.list_all(session)
            return [_snapshot(p) for p in rows]

    async def find_projects_by_dependency(self, dependency_name: str) -> list[ProjectSnapshot]:
        """Projects depending on *dependency_name*.

        Raises :class:`NoDependentProjectsError` when no project uses it.
        """
        async with self._transaction() as session:
            rows = await self._project_dao.list_by_dependency_name(session, dependency_name)
        if not rows:
            raise NoDependentProjectsError(dependency_name)
        return [_snapshot(p) for p in rows]

    # ── dependencies ──────────────────────────────────────────────────

    async def list_dependencies(self, name: str, version: str) -> list[ScoredDependency]:
        async with self._transaction() as session:
            project_id = await self._require_project_id(session, name, version)
            return await self._dep_dao.list_by_project(session, project_id)

    async def find_dependency_names_by_score(self, score: float) -> list[str]:
        """Dependency names whose score is within ``SCORE_TOLERANCE`` of *score*."""
        async with self._transaction() as session:
            return await self._dep_dao.names_by_score_range(
                session, score - SCORE_TOLERANCE, score + SCORE_TOLERANCE
            )

    async def add_dependency(self, name: str, version: str, dep: ScoredDependency) -> None:
        async with self._transaction() as session:
            project_id = await self._require_project_id(session, name, version)
            if not await self._dep_dao.insert_if_absent(session, project_id, dep):
                raise DependencyExistsError(dep.name)

    async def update_dependency(self, name: str, version: str, dep: ScoredDependency) -> None:
        async with self._transaction() as session:
            project_id = await self._require_project_id(session, name, version)
            if not await self._dep_dao.update_by_name(session, project_id, dep):
                raise DependencyNotFoundError(dep.name)

    async def remove_dependency(self, name: str, version: str, dependency_name: str) -> None:
        async with self._transaction() as session:
            project_id = await self._require_project_id(session, name, version)
            if not await self._dep_dao.delete_by_names(session, project_id, [dependency_name]):
                raise DependencyNotFoundError(dependency_name)

    # ── private helpers ───────────────────────────────────────────────

    async def _require_project_id(self, session: AsyncSession, name: str, version: str) -> int:
        project_id = await self._project_dao.get_id(session, name, version)
        if project_id is None:
            raise ProjectNotFoundError(name, version)
        return project_id


def _snapshot(row) -> ProjectSnapshot:
    return ProjectSnapshot(name=row.name, version=row.version, updated_at=row.updated_at)
