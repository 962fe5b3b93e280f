"""
Main application entry point for the TalentFlow assessments API.

Usage:
    - Script: python scripts/run_server.py
    - ASGI server: uvicorn talentflow.api.app:app
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from talentflow import __version__
from talentflow.api.routes import router
from talentflow.assessments.service import AssessmentService
from talentflow.common.exceptions import (
    AssessmentStateError,
    ConfigurationError,
    NotFoundError,
    PersistenceError,
)
from talentflow.common.logger import app_logger
from talentflow.config import Settings, get_settings
from talentflow.store import DocumentStore, build_store
from talentflow.store.seed import ensure_seeded

logger = app_logger.getChild("api")


def _backing_store(store: DocumentStore) -> DocumentStore:
    """The store under a SimulatedBackend, or the store itself."""
    return getattr(store, "delegate", store)


def create_app(store: Optional[DocumentStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        store: Document store to serve; built from settings when omitted
        settings: Settings to use instead of the process-wide ones

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    store = store if store is not None else build_store(settings)
    service = AssessmentService(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application startup sequence initiated")
        backing = _backing_store(store)
        if hasattr(backing, "init_schema"):
            await backing.init_schema()

        # Seeding is not a client call, so it bypasses the simulated faults
        if settings.SEED_ON_STARTUP:
            await ensure_seeded(backing)

        logger.info("Application startup complete")
        yield

        await store.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Assessment definition, validation and runtime API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": exc.message})

    @app.exception_handler(AssessmentStateError)
    async def state_error_handler(request: Request, exc: AssessmentStateError):
        return JSONResponse(status_code=409, content={"error": exc.message, "state": exc.state})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=500, content={"error": "Server error"})

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.error(f"Configuration problem on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=500, content={"error": "Server error"})

    app.include_router(router, prefix=settings.API_PREFIX, tags=["assessments"])

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {settings.PROJECT_NAME} API"}

    logger.info(f"Application initialized with {len(app.routes)} routes")
    return app


app = create_app()
