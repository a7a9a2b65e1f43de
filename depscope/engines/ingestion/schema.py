"""Pydantic models describing the deps.dev API payloads."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from depscope.engines.ingestion.models import VersionKey


class DepsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class VersionKeyPayload(DepsBaseModel):
    system: str = ""
    name: str = ""
    version: str = ""

    def to_key(self) -> VersionKey:
        return VersionKey(system=self.system, name=self.name, version=self.version)


class ProjectKeyPayload(DepsBaseModel):
    id: str = ""


# ── GET /v3/systems/{system}/packages/{name} ──────────────────────────────


class PackageVersion(DepsBaseModel):
    version_key: VersionKeyPayload = Field(alias="versionKey")


class PackageVersionsResponse(DepsBaseModel):
    versions: list[PackageVersion] = Field(default_factory=list)


# ── GET .../versions/{version}:dependencies ───────────────────────────────


class DependencyNode(DepsBaseModel):
    version_key: VersionKeyPayload = Field(alias="versionKey")
    relation: str = ""


class DependencyGraphResponse(DepsBaseModel):
    nodes: list[DependencyNode] = Field(default_factory=list)


# ── POST /v3alpha/versionbatch ────────────────────────────────────────────


class RelatedProject(DepsBaseModel):
    project_key: ProjectKeyPayload = Field(alias="projectKey")
    relation_type: str = Field("", alias="relationType")


class VersionRelations(DepsBaseModel):
    version_key: VersionKeyPayload = Field(default_factory=VersionKeyPayload, alias="versionKey")
    related_projects: list[RelatedProject] = Field(default_factory=list, alias="relatedProjects")


class VersionBatchEntry(DepsBaseModel):
    version: VersionRelations = Field(default_factory=VersionRelations)


class VersionBatchResponse(DepsBaseModel):
    responses: list[VersionBatchEntry] = Field(default_factory=list)


# ── POST /v3alpha/projectbatch ────────────────────────────────────────────


class Scorecard(DepsBaseModel):
    date: datetime | None = None
    overall_score: float = Field(0.0, alias="overallScore")

    @field_validator("date", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        # The service reports "0001-01-01T00:00:00Z" for a missing date.
        if value.replace(tzinfo=None) == datetime.min:
            return None
        # Dates without an offset are UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def unix_date(self) -> int:
        """Scorecard date as Unix seconds, 0 when the service has none."""
        if self.date is None:
            return 0
        return int(self.date.timestamp())


class ProjectScore(DepsBaseModel):
    project_key: ProjectKeyPayload = Field(default_factory=ProjectKeyPayload, alias="projectKey")
    scorecard: Scorecard = Field(default_factory=Scorecard)


class ProjectBatchEntry(DepsBaseModel):
    project: ProjectScore = Field(default_factory=ProjectScore)


class ProjectBatchResponse(DepsBaseModel):
    responses: list[ProjectBatchEntry] = Field(default_factory=list)
