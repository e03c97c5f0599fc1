"""packages-check-bot webhook API — FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from pkgcheck import __version__
from pkgcheck.api.deps import dispose_components, init_components, start_components
from pkgcheck.api.errors import register_error_handlers
from pkgcheck.api.routers import webhooks
from pkgcheck.config import Settings
from pkgcheck.core.logging import setup_logging


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build components, start the worker and outcome reporter. Shutdown: stop them."""
    init_components(app.state.settings)
    await start_components()
    yield
    await dispose_components()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    *settings* (default: read from the environment) drives logging and every
    component built at startup.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings)

    app = FastAPI(
        title="packages-check-bot",
        version=__version__,
        lifespan=_lifespan,
    )
    app.state.settings = settings

    register_error_handlers(app)

    @app.get("/health", tags=["ops"])
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])

    return app
