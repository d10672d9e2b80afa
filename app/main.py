"""
FastAPI application factory.

Creates and configures the FastAPI application instance.  The lifespan
builds the engine registry: one remote store, one selected-routine
cache and one clock shared by every user's engine.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.init_db import init_db
from app.engine.cache import JsonFileKeyValueStore, KeyValueStore, SelectedRoutineCache
from app.engine.clock import Clock, SystemClock
from app.engine.config import EngineConfig
from app.engine.registry import EngineRegistry
from app.engine.store import RemoteStore, SqlModelRemoteStore
from app.engine.workout import WorkoutEngine


def create_app(store: Optional[RemoteStore] = None, key_values: Optional[KeyValueStore] = None,
               clock: Optional[Clock] = None, config: Optional[EngineConfig] = None,
               db_engine: Optional[Engine] = None, ) -> FastAPI:
    """
    Build the application.

    Args:
        store: Remote store (defaults to SQLModel over ``db_engine``)
        key_values: Backing store of the selected-routine cache
        clock: Time source for every engine
        config: Engine configuration (defaults to the settings)
        db_engine: Database engine (defaults to the configured one)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)

        bind = db_engine
        if bind is None:
            from app.db.session import engine as bind
        if settings.AUTO_CREATE_TABLES:
            init_db(bind)

        remote = store or SqlModelRemoteStore(bind)
        cache = SelectedRoutineCache(key_values or JsonFileKeyValueStore(settings.SELECTED_ROUTINE_CACHE_PATH))
        engine_clock = clock or SystemClock()
        engine_config = config or EngineConfig.from_settings()

        def build(user_id: int) -> WorkoutEngine:
            return WorkoutEngine(user_id, remote, cache, engine_clock, engine_config)

        app.state.engines = EngineRegistry(build)
        yield
        app.state.engines.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan)

    # Include API router
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """Root endpoint - health check."""
        return {
            "message": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "status": "healthy"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring."""
        return {
            "status": "healthy",
            "service": "workout-engine",
            "version": settings.VERSION
        }

    return app


app = create_app()
