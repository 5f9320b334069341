"""Dispatch — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dispatch.adapters.persistence.database import engine
from dispatch.config import settings
from dispatch.infrastructure.api.dependencies import get_task_service
from dispatch.infrastructure.api.errors import register_exception_handlers
from dispatch.infrastructure.api.routes_health import router as health_router
from dispatch.infrastructure.api.routes_tasks import router as tasks_router
from dispatch.infrastructure.api.routes_technicians import router as technicians_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)
    yield
    await get_task_service().wait_for_notifications()
    await engine.dispose()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Dispatch — Task Assignment & Lifecycle Engine",
        description="Service task creation, technician assignment and lifecycle tracking",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(tasks_router, prefix="/api")
    app.include_router(technicians_router, prefix="/api")

    return app


app = create_app()
