"""ProjectDependencyDAO — dependency table operations."""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from depscope.dao.base import BaseDAO, dialect_insert
from depscope.engines.ingestion.models import ScoredDependency
from depscope.models.project_dependency import ProjectDependency


class ProjectDependencyDAO(BaseDAO[ProjectDependency]):
    model = ProjectDependency

    # ── read ──────────────────────────────────────────────────────────────

    async def list_by_project(
        self,
        session: AsyncSession,
        project_id: int,
    ) -> list[ScoredDependency]:
        """All dependencies of a project, ordered by name."""
        stmt = (
            select(
                ProjectDependency.dependency_name,
                ProjectDependency.score,
                ProjectDependency.updated_at,
            )
            .where(ProjectDependency.project_id == project_id)
            .order_by(ProjectDependency.dependency_name)
        )
        result = await session.execute(stmt)
        return [
            ScoredDependency(name=row.dependency_name, score=row.score, updated_at=row.updated_at)
            for row in result
        ]

    async def names_by_score_range(
        self,
        session: AsyncSession,
        low: float,
        high: float,
    ) -> list[str]:
        """Distinct dependency names with ``low <= score <= high`` across all projects."""
        stmt = (
            select(ProjectDependency.dependency_name)
            .where(ProjectDependency.score.between(low, high))
            .distinct()
            .order_by(ProjectDependency.dependency_name)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    # ── write ─────────────────────────────────────────────────────────────

    async def insert_many(
        self,
        session: AsyncSession,
        project_id: int,
        deps: list[ScoredDependency],
    ) -> int:
        """Insert *deps* for a project. Returns the number of inserted rows."""
        return await self.bulk_insert(
            session,
            [
                {
                    "project_id": project_id,
                    "dependency_name": dep.name,
                    "score": dep.score,
                    "updated_at": dep.updated_at,
                }
                for dep in deps
            ],
        )

    async def insert_if_absent(
        self,
        session: AsyncSession,
        project_id: int,
        dep: ScoredDependency,
    ) -> bool:
        """Insert one dependency; False if (project_id, name) already exists."""
        ins = dialect_insert(session, ProjectDependency).values(
            project_id=project_id,
            dependency_name=dep.name,
            score=dep.score,
            updated_at=dep.updated_at,
        )
        stmt = ins.on_conflict_do_nothing(
            index_elements=[ProjectDependency.project_id, ProjectDependency.dependency_name]
        ).returning(ProjectDependency.id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def update_by_name(
        self,
        session: AsyncSession,
        project_id: int,
        dep: ScoredDependency,
    ) -> int:
        """Overwrite score and updated_at of a named dependency. Returns rowcount."""
        stmt = (
            update(ProjectDependency)
            .where(
                ProjectDependency.project_id == project_id,
                ProjectDependency.dependency_name == dep.name,
            )
            .values(score=dep.score, updated_at=dep.updated_at)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def delete_by_names(
        self,
        session: AsyncSession,
        project_id: int,
        names: list[str],
    ) -> int:
        """Delete the named dependencies of a project. Returns the number of deleted rows."""
        if not names:
            return 0
        stmt = delete(ProjectDependency).where(
            ProjectDependency.project_id == project_id,
            ProjectDependency.dependency_name.in_(names),
        )
        result = await session.execute(stmt)
        return result.rowcount
