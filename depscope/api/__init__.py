"""depscope REST API — FastAPI application factory."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from depscope import __version__
from depscope.api.deps import init_services, shutdown_services
from depscope.api.errors import register_error_handlers
from depscope.api.middleware.request_id import RequestIDMiddleware
from depscope.api.routers import dependencies, projects
from depscope.core.logging import setup_logging

API_PREFIX = "/api/v1"

_ROUTERS: tuple[tuple[str, APIRouter], ...] = (
    ("projects", projects.router),
    ("dependencies", dependencies.router),
)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: engine, schema, deps.dev client. Shutdown: close them."""
    await init_services()
    try:
        yield
    finally:
        await shutdown_services()


def _cors_origins() -> list[str]:
    raw = os.environ.get("DEPSCOPE_CORS_ORIGINS", "http://localhost:4200")
    return [o.strip() for o in raw.split(",") if o.strip()]


def create_app() -> FastAPI:
    """Build and return the FastAPI application.

    Run with ``uvicorn depscope.api:create_app --factory``.
    """
    setup_logging()

    app = FastAPI(
        title="depscope",
        version=__version__,
        docs_url=f"{API_PREFIX}/docs",
        openapi_url=f"{API_PREFIX}/openapi.json",
        lifespan=_lifespan,
    )
    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health", tags=["ops"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    for name, router in _ROUTERS:
        app.include_router(router, prefix=f"{API_PREFIX}/{name}", tags=[name])

    return app
