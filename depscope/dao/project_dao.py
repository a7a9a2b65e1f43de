"""ProjectDAO — projects table operations."""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from depscope.dao.base import BaseDAO, dialect_insert
from depscope.models.project import Project
from depscope.models.project_dependency import ProjectDependency


class ProjectDAO(BaseDAO[Project]):
    model = Project

    # ── read ──────────────────────────────────────────────────────────────

    async def get_id(self, session: AsyncSession, name: str, version: str) -> int | None:
        stmt = select(Project.id).where(Project.name == name, Project.version == version)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_all(self, session: AsyncSession) -> list[Project]:
        stmt = select(Project).order_by(Project.name, Project.version)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_dependency_name(
        self,
        session: AsyncSession,
        dependency_name: str,
    ) -> list[Project]:
        """Projects that have a dependency called *dependency_name*."""
        stmt = (
            select(Project)
            .join(ProjectDependency, ProjectDependency.project_id == Project.id)
            .where(ProjectDependency.dependency_name == dependency_name)
            .distinct()
            .order_by(Project.name, Project.version)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    # ── write ─────────────────────────────────────────────────────────────

    async def insert_if_absent(
        self,
        session: AsyncSession,
        name: str,
        version: str,
        updated_at: int,
    ) -> int | None:
        """Insert a project row; return its id, or None if (name, version) exists.

        ON CONFLICT DO NOTHING leaves the transaction usable, so the caller
        can carry on with the existing row.
        """
        ins = dialect_insert(session, Project).values(
            name=name, version=version, updated_at=updated_at
        )
        stmt = ins.on_conflict_do_nothing(
            index_elements=[Project.name, Project.version]
        ).returning(Project.id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def touch(self, session: AsyncSession, project_id: int, updated_at: int) -> None:
        stmt = update(Project).where(Project.id == project_id).values(updated_at=updated_at)
        await session.execute(stmt)

    async def delete_by_id(self, session: AsyncSession, project_id: int) -> int:
        """Delete a project; the FK cascade removes its dependencies.

        Returns the number of deleted project rows.
        """
        stmt = delete(Project).where(Project.id == project_id)
        result = await session.execute(stmt)
        return result.rowcount
