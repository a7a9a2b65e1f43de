"""SQLAlchemy ORM models — one file per table."""

from depscope.models.project import Project
from depscope.models.project_dependency import ProjectDependency

__all__ = [
    "Project",
    "ProjectDependency",
]
