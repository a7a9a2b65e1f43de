"""Project and dependency request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Stripped(BaseModel):
    @field_validator("project_name", "version", "dependency_name", mode="before", check_fields=False)
    @classmethod
    def _strip_whitespace(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class ProjectRequest(_Stripped):
    project_name: str = Field(min_length=1)
    version: str = Field(min_length=1)


class DependencyNameRequest(_Stripped):
    dependency_name: str = Field(min_length=1)


class ScoreRequest(BaseModel):
    score: float


class DependencyRequest(_Stripped):
    project_name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    dependency_name: str = Field(min_length=1)
    score: float


class RemoveDependencyRequest(_Stripped):
    project_name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    dependency_name: str = Field(min_length=1)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    version: str
    updated_at: int


class DependencyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    score: float
    updated_at: int


class ListDependenciesResponse(BaseModel):
    project_name: str
    version: str
    dependencies: list[DependencyResponse]


class IngestResponse(BaseModel):
    project: ProjectResponse
    dependencies: int
    created: bool
    added: int
    removed: int
