"""CLI entry point for standalone usage: depscope.

Subcommands:
    depscope ingest rxjs 7.8.1          # Fetch, score and store dependencies
    depscope versions svelte            # Published versions from deps.dev
    depscope projects                   # Stored projects
    depscope deps rxjs 7.8.1            # Stored dependencies of one project
    depscope delete rxjs 7.8.1          # Delete a project and its dependencies
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import click

from depscope.core.database import create_all, create_engine, create_session_factory
from depscope.core.logging import setup_logging
from depscope.dao.project_dao import ProjectDAO
from depscope.dao.project_dependency_dao import ProjectDependencyDAO
from depscope.engines.ingestion.deps_client import DepsClient
from depscope.engines.ingestion.runner import IngestionRunner
from depscope.services import ServiceError
from depscope.services.project_service import ProjectService

_database_option = click.option(
    "--database-url",
    envvar="DEPSCOPE_DATABASE_URL",
    default=None,
    help="SQLAlchemy async URL (default: sqlite+aiosqlite:///./deps.db)",
)


@asynccontextmanager
async def _open_store(database_url: str | None) -> AsyncIterator[ProjectService]:
    engine = create_engine(database_url)
    try:
        await create_all(engine)
        yield ProjectService(create_session_factory(engine), ProjectDAO(), ProjectDependencyDAO())
    finally:
        await engine.dispose()


def _run(coro) -> None:
    """Run *coro*; a ServiceError becomes a one-line message and exit status 1."""
    try:
        asyncio.run(coro)
    except ServiceError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """depscope: npm dependency trust scores from deps.dev."""
    setup_logging("DEBUG" if verbose else None, stream="ext://sys.stderr")


@main.command("ingest")
@click.argument("name")
@click.argument("version")
@_database_option
def ingest(name: str, version: str, database_url: str | None) -> None:
    """Fetch NAME@VERSION from deps.dev and reconcile it into the store."""

    async def _ingest() -> None:
        async with _open_store(database_url) as store, DepsClient() as client:
            result = await IngestionRunner(client, store).run(name, version)
        click.echo(f"{'Created' if result.created else 'Updated'} {name}@{version}:")
        click.echo(f"  Graph nodes: {result.graph_nodes}")
        click.echo(f"  Source repos: {result.resolved_repos}")
        click.echo(f"  Dependencies: {len(result.dependencies)}")
        if not result.created:
            click.echo(f"  Added: {result.added}, removed: {result.removed}")

    _run(_ingest())


@main.command("versions")
@click.argument("name")
def versions(name: str) -> None:
    """List the published versions of NAME."""

    async def _versions() -> None:
        async with DepsClient() as client:
            for v in await client.get_versions(name):
                click.echo(v)

    _run(_versions())


@main.command("projects")
@_database_option
def projects(database_url: str | None) -> None:
    """List stored projects."""

    async def _projects() -> None:
        async with _open_store(database_url) as store:
            rows = await store.list_projects()
        if not rows:
            click.echo("No projects stored.")
        for p in rows:
            click.echo(f"{p.name}@{p.version}  (updated {p.updated_at})")

    _run(_projects())


@main.command("deps")
@click.argument("name")
@click.argument("version")
@_database_option
def deps(name: str, version: str, database_url: str | None) -> None:
    """List stored dependencies of NAME@VERSION with their scores."""

    async def _deps() -> None:
        async with _open_store(database_url) as store:
            rows = await store.list_dependencies(name, version)
        for d in rows:
            click.echo(f"{d.name}\t{d.score:.1f}")

    _run(_deps())


@main.command("delete")
@click.argument("name")
@click.argument("version")
@_database_option
def delete(name: str, version: str, database_url: str | None) -> None:
    """Delete NAME@VERSION and all of its dependencies."""

    async def _delete() -> None:
        async with _open_store(database_url) as store:
            await store.delete_project(name, version)
        click.echo(f"Deleted {name}@{version}")

    _run(_delete())
