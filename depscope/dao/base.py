"""Generic base DAO — helpers shared by the table DAOs."""

from typing import Any, Generic, TypeVar

from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from depscope.core.database import Base

ModelT = TypeVar("ModelT", bound=Base)


def dialect_insert(session: AsyncSession, model: type[Base]):
    """Return an ``INSERT`` construct that supports ``ON CONFLICT`` for the bound dialect."""
    dialect = session.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"ON CONFLICT inserts are not supported on {dialect!r}")


class BaseDAO(Generic[ModelT]):
    """Base data-access object. Subclasses set ``model`` class attribute.

    DAOs never commit: they execute inside whatever transaction the caller
    opened, so a service method can group several DAO calls atomically.
    """

    model: type[ModelT]

    async def bulk_insert(self, session: AsyncSession, items: list[dict[str, Any]]) -> int:
        """Insert multiple rows with one executemany. Returns the row count.

        Goes through Core rather than the ORM unit of work so that rows
        deleted earlier in the same transaction never clash with new ones
        in the identity map. A unique-constraint violation surfaces as
        ``IntegrityError``.
        """
        if not items:
            return 0
        await session.execute(insert(self.model), items)
        return len(items)
