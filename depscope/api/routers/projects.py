"""Projects router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from depscope.api.deps import get_ingestion_runner, get_project_service
from depscope.api.schemas.project import IngestResponse, ProjectRequest, ProjectResponse
from depscope.engines.ingestion.runner import IngestionRunner
from depscope.services.project_service import ProjectService

router = APIRouter()


@router.post("/", response_model=IngestResponse, status_code=201)
async def ingest_project(
    body: ProjectRequest,
    runner: IngestionRunner = Depends(get_ingestion_runner),
) -> IngestResponse:
    """Fetch dependencies from deps.dev and store them; re-ingestion reconciles."""
    result = await runner.run(body.project_name, body.version)
    return IngestResponse(
        project=ProjectResponse.model_validate(result.project),
        dependencies=len(result.dependencies),
        created=result.created,
        added=result.added,
        removed=result.removed,
    )


@router.delete("/", status_code=204)
async def delete_project(
    body: ProjectRequest,
    svc: ProjectService = Depends(get_project_service),
) -> Response:
    await svc.delete_project(body.project_name, body.version)
    return Response(status_code=204)


@router.get("/", response_model=list[ProjectResponse])
async def list_projects(
    svc: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    projects = await svc.list_projects()
    return [ProjectResponse.model_validate(p) for p in projects]


@router.get("/versions", response_model=list[str])
async def list_project_versions(
    project_name: str = Query(..., min_length=1),
    runner: IngestionRunner = Depends(get_ingestion_runner),
) -> list[str]:
    """Published versions of a package, straight from deps.dev."""
    return await runner.list_versions(project_name.strip())
