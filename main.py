import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from consent_log.config import settings
from consent_log.database import engine, init_models
from consent_log.exception_handlers import register_exception_handlers
from consent_log.middleware.logging import StructuredLoggingMiddleware, setup_logging
from consent_log.routes import consents

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Tasks to run at application startup and shutdown."""
    logger.info("Starting up the application...")
    if settings.create_tables_on_startup:
        await init_models()

    yield

    logger.info("Shutting down the application...")
    await engine.dispose()


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    setup_logging(log_level=settings.log_level, json_format=settings.log_format == "json")

    app = FastAPI(
        title=settings.app_name,
        description="Per-user consent decisions with an admin API",
        debug=settings.debug,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(consents.router, prefix="/api/v1/consents")

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)  # Logs SQL statements

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
