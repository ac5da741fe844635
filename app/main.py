"""
Compliance evaluation FastAPI application entry point.

Pipeline: evidence links → requirement → control → obligation → readiness score → risk items
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app import __version__
from app.config import get_settings
from app.db.session import SessionLocal, check_db_connection, engine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    settings = get_settings()
    logger.info("%s starting", settings.app_name)
    runner = None
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        # Bad cron/timezone config fails startup rather than silently never running
        if settings.scheduler_enabled:
            from app.services.evaluation.scheduler import build_evaluation_runner

            try:
                runner = build_evaluation_runner(SessionLocal, settings=settings)
            except Exception as e:
                logger.critical("Scheduler configuration invalid: %s", e)
                raise
            runner.start()
        else:
            logger.info("In-process scheduler disabled (SCHEDULER_ENABLED=false)")
        app.state.job_runner = runner

        yield
    finally:
        if runner is not None:
            runner.stop()
        logger.info("%s shutting down", settings.app_name)
        engine.dispose()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    from app.api.evaluation import router as evaluation_router

    app.include_router(evaluation_router, prefix="/api/evaluation", tags=["evaluation"])

    # Internal job endpoints (cron/scripts, token-authenticated)
    from app.api.internal import router as internal_router

    app.include_router(internal_router, tags=["internal"])

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint. Confirms DB connectivity."""
        from sqlalchemy import text

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {
                "status": "ok",
                "version": __version__,
                "database": "connected",
            }
        except Exception:
            from fastapi.responses import JSONResponse

            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                },
            )

    return app


app = create_app()
