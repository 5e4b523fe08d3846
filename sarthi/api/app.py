"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from sarthi.api.routes.completion import router as completion_router
from sarthi.api.routes.health import router as health_router
from sarthi.autocomplete.engine import CompletionEngine
from sarthi.config.settings import Settings, get_settings


@asynccontextmanager
async def _lifespan(app: FastAPI):
    engine: CompletionEngine = app.state.engine
    engine.start()
    try:
        yield
    finally:
        engine.close()


def create_app(
    settings: Settings | None = None,
    engine: Optional[CompletionEngine] = None,
) -> FastAPI:
    """
    Build and return a fully wired FastAPI application.

    The engine is created up front but only started inside the lifespan,
    where an event loop is running for its timers and websocket.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Sarthi API",
        version="0.1.0",
        description="Incremental code completion from local, static and remote sources",
        lifespan=_lifespan,
    )

    # Shared state — accessible via request.app.state in routes
    app.state.settings = settings
    app.state.engine = engine or CompletionEngine(settings)

    app.include_router(health_router)
    app.include_router(completion_router)

    return app
