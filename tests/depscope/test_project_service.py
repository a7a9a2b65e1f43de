"""Tests for ProjectService (requires a database, SQLite by default)."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from depscope.engines.ingestion.models import (
    ProjectDependencyRecord,
    ProjectSnapshot,
    ScoredDependency,
)
from depscope.services import (
    AlreadyExistsError,
    DependencyExistsError,
    DependencyNotFoundError,
    NotFoundError,
    NoDependentProjectsError,
    ProjectNotFoundError,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _record(name: str, version: str, deps: list[ScoredDependency], updated_at: int = 1000):
    return ProjectDependencyRecord(
        project=ProjectSnapshot(name=name, version=version, updated_at=updated_at),
        dependencies=deps,
    )


def _pairs(deps: list[ScoredDependency]) -> list[tuple[str, float]]:
    return [(d.name, d.score) for d in deps]


ANGULAR_DEPS = [
    ScoredDependency("rxjs", 6.8, 1_741_564_800),
    ScoredDependency("zone.js", 7.5, 1_741_564_800),
]


# ── reconcile ────────────────────────────────────────────────────────────


class TestReconcile:
    async def test_new_project_inserted(self, project_service):
        result = await project_service.reconcile(_record("@angular/core", "17.0.0", ANGULAR_DEPS))

        assert result.created is True
        assert result.added == 2
        assert result.removed == 0
        assert await project_service.list_dependencies("@angular/core", "17.0.0") == ANGULAR_DEPS

    async def test_new_project_without_dependencies(self, project_service):
        result = await project_service.reconcile(_record("left-pad", "1.3.0", []))

        assert result.created is True
        assert result.added == 0
        projects = await project_service.list_projects()
        assert [(p.name, p.version) for p in projects] == [("left-pad", "1.3.0")]

    async def test_identical_reingest_only_bumps_timestamp(self, project_service):
        await project_service.reconcile(_record("@angular/core", "17.0.0", ANGULAR_DEPS, 1000))
        result = await project_service.reconcile(
            _record("@angular/core", "17.0.0", list(ANGULAR_DEPS), 2000)
        )

        assert result.created is False
        assert (result.added, result.removed) == (0, 0)
        projects = await project_service.list_projects()
        assert projects[0].updated_at == 2000
        assert await project_service.list_dependencies("@angular/core", "17.0.0") == ANGULAR_DEPS

    async def test_changed_set_replaces_only_the_delta(self, project_service):
        await project_service.reconcile(_record("@angular/core", "17.0.0", ANGULAR_DEPS))
        result = await project_service.reconcile(
            _record(
                "@angular/core",
                "17.0.0",
                [ScoredDependency("rxjs", 6.8, 1_741_564_800), ScoredDependency("tslib", 5.9)],
            )
        )

        assert (result.added, result.removed) == (1, 1)
        deps = await project_service.list_dependencies("@angular/core", "17.0.0")
        assert _pairs(deps) == [("rxjs", 6.8), ("tslib", 5.9)]

    async def test_changed_score_is_replaced(self, project_service):
        await project_service.reconcile(_record("app", "1.0.0", [ScoredDependency("a", 4.0)]))
        result = await project_service.reconcile(
            _record("app", "1.0.0", [ScoredDependency("a", 4.5)])
        )

        assert (result.added, result.removed) == (1, 1)
        deps = await project_service.list_dependencies("app", "1.0.0")
        assert _pairs(deps) == [("a", 4.5)]

    async def test_all_dependencies_dropped(self, project_service):
        await project_service.reconcile(_record("app", "1.0.0", ANGULAR_DEPS))
        result = await project_service.reconcile(_record("app", "1.0.0", []))

        assert (result.added, result.removed) == (0, 2)
        assert await project_service.list_dependencies("app", "1.0.0") == []

    async def test_versions_are_independent(self, project_service):
        await project_service.reconcile(_record("svelte", "5.0.0", [ScoredDependency("a", 1.0)]))
        await project_service.reconcile(_record("svelte", "5.1.0", [ScoredDependency("b", 2.0)]))

        assert _pairs(await project_service.list_dependencies("svelte", "5.0.0")) == [("a", 1.0)]
        assert _pairs(await project_service.list_dependencies("svelte", "5.1.0")) == [("b", 2.0)]

    async def test_failure_rolls_back(self, project_service, dep_dao, monkeypatch):
        await project_service.reconcile(_record("app", "1.0.0", ANGULAR_DEPS, 1000))
        monkeypatch.setattr(dep_dao, "insert_many", AsyncMock(side_effect=RuntimeError("boom")))

        with pytest.raises(RuntimeError, match="boom"):
            await project_service.reconcile(
                _record("app", "1.0.0", [ScoredDependency("tslib", 5.9)], 2000)
            )

        assert await project_service.list_dependencies("app", "1.0.0") == ANGULAR_DEPS
        projects = await project_service.list_projects()
        assert projects[0].updated_at == 1000

    async def test_cancellation_rolls_back(self, project_service, dep_dao, monkeypatch):
        await project_service.reconcile(_record("app", "1.0.0", [ScoredDependency("x", 1.0)], 1))
        writing = asyncio.Event()

        async def _stalled_insert(*args, **kwargs):
            writing.set()
            await asyncio.sleep(3600)

        monkeypatch.setattr(dep_dao, "insert_many", _stalled_insert)
        task = asyncio.create_task(
            project_service.reconcile(_record("app", "1.0.0", [ScoredDependency("y", 2.0)], 2))
        )
        await writing.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        deps = await project_service.list_dependencies("app", "1.0.0")
        assert [d.name for d in deps] == ["x"]
        projects = await project_service.list_projects()
        assert projects[0].updated_at == 1


# ── projects ─────────────────────────────────────────────────────────────


class TestProjects:
    async def test_list_projects_empty(self, project_service):
        assert await project_service.list_projects() == []

    async def test_delete_project_keeps_other_versions(self, project_service):
        await project_service.reconcile(_record("svelte", "5.0.0", [ScoredDependency("a", 1.0)]))
        await project_service.reconcile(_record("svelte", "5.1.0", [ScoredDependency("a", 1.0)]))

        await project_service.delete_project("svelte", "5.0.0")

        projects = await project_service.list_projects()
        assert [(p.name, p.version) for p in projects] == [("svelte", "5.1.0")]
        assert _pairs(await project_service.list_dependencies("svelte", "5.1.0")) == [("a", 1.0)]
        with pytest.raises(ProjectNotFoundError):
            await project_service.list_dependencies("svelte", "5.0.0")

    async def test_delete_missing_project(self, project_service):
        with pytest.raises(ProjectNotFoundError, match="nope@1.0.0"):
            await project_service.delete_project("nope", "1.0.0")

    async def test_find_projects_by_dependency(self, project_service):
        await project_service.reconcile(
            _record("rxjs", "7.8.1", [ScoredDependency("tslib", 5.9)], 10)
        )
        await project_service.reconcile(
            _record("zone.js", "0.14.0", [ScoredDependency("tslib", 5.9)], 20)
        )
        await project_service.reconcile(_record("chalk", "5.3.0", [], 30))

        projects = await project_service.find_projects_by_dependency("tslib")

        assert projects == [
            ProjectSnapshot("rxjs", "7.8.1", 10),
            ProjectSnapshot("zone.js", "0.14.0", 20),
        ]

    async def test_find_projects_by_unknown_dependency(self, project_service):
        await project_service.reconcile(_record("chalk", "5.3.0", []))
        with pytest.raises(NoDependentProjectsError) as exc_info:
            await project_service.find_projects_by_dependency("tslib")
        assert exc_info.value.dependency_name == "tslib"
        assert isinstance(exc_info.value, NotFoundError)
        assert str(exc_info.value) == "no project depends on: tslib"


# ── dependencies ─────────────────────────────────────────────────────────


class TestDependencies:
    async def test_list_dependencies_missing_project(self, project_service):
        with pytest.raises(ProjectNotFoundError):
            await project_service.list_dependencies("nope", "1.0.0")

    async def test_find_by_score_within_tolerance(self, project_service):
        await project_service.reconcile(
            _record(
                "app",
                "1.0.0",
                [
                    ScoredDependency("exact", 81.5),
                    ScoredDependency("drift", 81.5 + 1e-10),
                    ScoredDependency("far", 81.6),
                ],
            )
        )
        await project_service.reconcile(
            _record("other", "1.0.0", [ScoredDependency("exact", 81.5)])
        )

        assert await project_service.find_dependency_names_by_score(81.5) == ["drift", "exact"]

    async def test_find_by_score_no_match(self, project_service):
        assert await project_service.find_dependency_names_by_score(3.3) == []

    async def test_add_dependency(self, project_service):
        await project_service.reconcile(_record("app", "1.0.0", []))
        await project_service.add_dependency("app", "1.0.0", ScoredDependency("lodash", 4.4))
        deps = await project_service.list_dependencies("app", "1.0.0")
        assert deps == [ScoredDependency("lodash", 4.4, 0)]

    async def test_add_existing_dependency(self, project_service):
        await project_service.reconcile(_record("app", "1.0.0", [ScoredDependency("lodash", 4.4)]))
        with pytest.raises(DependencyExistsError) as exc_info:
            await project_service.add_dependency("app", "1.0.0", ScoredDependency("lodash", 1.0))
        assert isinstance(exc_info.value, AlreadyExistsError)
        assert _pairs(await project_service.list_dependencies("app", "1.0.0")) == [
            ("lodash", 4.4)
        ]

    async def test_add_to_missing_project(self, project_service):
        with pytest.raises(ProjectNotFoundError):
            await project_service.add_dependency("nope", "1.0.0", ScoredDependency("x", 1.0))

    async def test_update_dependency(self, project_service):
        await project_service.reconcile(
            _record("app", "1.0.0", [ScoredDependency("lodash", 4.4, 99)])
        )
        await project_service.update_dependency("app", "1.0.0", ScoredDependency("lodash", 8.0))
        deps = await project_service.list_dependencies("app", "1.0.0")
        assert deps == [ScoredDependency("lodash", 8.0, 0)]

    async def test_update_missing_dependency(self, project_service):
        await project_service.reconcile(_record("app", "1.0.0", []))
        with pytest.raises(DependencyNotFoundError):
            await project_service.update_dependency("app", "1.0.0", ScoredDependency("x", 1.0))

    async def test_remove_dependency(self, project_service):
        await project_service.reconcile(_record("app", "1.0.0", ANGULAR_DEPS))
        await project_service.remove_dependency("app", "1.0.0", "rxjs")
        deps = await project_service.list_dependencies("app", "1.0.0")
        assert [d.name for d in deps] == ["zone.js"]

    async def test_remove_missing_dependency(self, project_service):
        await project_service.reconcile(_record("app", "1.0.0", []))
        with pytest.raises(DependencyNotFoundError, match="dependency not found: x"):
            await project_service.remove_dependency("app", "1.0.0", "x")

    async def test_remove_from_missing_project(self, project_service):
        with pytest.raises(ProjectNotFoundError):
            await project_service.remove_dependency("nope", "1.0.0", "x")
