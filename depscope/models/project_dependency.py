"""dependency table."""

from sqlalchemy import BigInteger, Float, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from depscope.core.database import Base


class ProjectDependency(Base):
    __tablename__ = "dependency"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    dependency_name: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    # Scorecard date in Unix seconds; 0 when the scorecard has no date.
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "project_id", "dependency_name",
            name="uq_dependency_project_name",
        ),
        Index("idx_dependency_project", "project_id"),
        Index("idx_dependency_project_name", "project_id", "dependency_name"),
        Index("idx_dependency_score", "score"),
    )
