"""Dependencies router — listing, search, and manual edits."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from depscope.api.deps import get_project_service
from depscope.api.schemas.project import (
    DependencyNameRequest,
    DependencyRequest,
    DependencyResponse,
    ListDependenciesResponse,
    ProjectRequest,
    ProjectResponse,
    RemoveDependencyRequest,
    ScoreRequest,
)
from depscope.engines.ingestion.models import ScoredDependency
from depscope.services.project_service import ProjectService

router = APIRouter()


@router.post("/", response_model=ListDependenciesResponse)
async def list_dependencies(
    body: ProjectRequest,
    svc: ProjectService = Depends(get_project_service),
) -> ListDependenciesResponse:
    deps = await svc.list_dependencies(body.project_name, body.version)
    return ListDependenciesResponse(
        project_name=body.project_name,
        version=body.version,
        dependencies=[DependencyResponse.model_validate(d) for d in deps],
    )


@router.post("/byprojectname", response_model=list[ProjectResponse])
async def projects_by_dependency(
    body: DependencyNameRequest,
    svc: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    projects = await svc.find_projects_by_dependency(body.dependency_name)
    return [ProjectResponse.model_validate(p) for p in projects]


@router.post("/byscore", response_model=list[str])
async def dependencies_by_score(
    body: ScoreRequest,
    svc: ProjectService = Depends(get_project_service),
) -> list[str]:
    return await svc.find_dependency_names_by_score(body.score)


# Manual edits carry no scorecard date, so updated_at is stored as 0.


@router.post("/new", status_code=201)
async def add_dependency(
    body: DependencyRequest,
    svc: ProjectService = Depends(get_project_service),
) -> Response:
    await svc.add_dependency(
        body.project_name,
        body.version,
        ScoredDependency(name=body.dependency_name, score=body.score),
    )
    return Response(status_code=201)


@router.patch("/modify")
async def modify_dependency(
    body: DependencyRequest,
    svc: ProjectService = Depends(get_project_service),
) -> Response:
    await svc.update_dependency(
        body.project_name,
        body.version,
        ScoredDependency(name=body.dependency_name, score=body.score),
    )
    return Response(status_code=200)


@router.delete("/delete", status_code=204)
async def delete_dependency(
    body: RemoveDependencyRequest,
    svc: ProjectService = Depends(get_project_service),
) -> Response:
    await svc.remove_dependency(body.project_name, body.version, body.dependency_name)
    return Response(status_code=204)
