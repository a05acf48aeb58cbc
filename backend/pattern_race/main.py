"""
Pattern Race FastAPI Application.

The lifespan handler is the composition root: it builds the pattern monitor
and race pipeline from settings, starts them, exposes them on ``app.state``
and tears both down on shutdown.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pythonjsonlogger import jsonlogger

from pattern_race.config import settings
from pattern_race.services.pattern_monitor import PatternMonitor
from pattern_race.services.race_pipeline import RaceStreamPipeline

# Configure structured logging
logger = logging.getLogger()
logHandler = logging.StreamHandler()
formatter = jsonlogger.JsonFormatter(
    fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logHandler.setFormatter(formatter)
logger.addHandler(logHandler)
logger.setLevel(getattr(logging, settings.log_level))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler for startup and shutdown."""
    logger.info("Starting Pattern Race API", extra={"version": settings.app_version})

    monitor = PatternMonitor.from_settings(settings)
    pipeline = RaceStreamPipeline.from_settings(monitor, settings)
    app.state.pattern_monitor = monitor
    app.state.race_pipeline = pipeline

    pipeline.start()
    monitor.start()
    logger.info(f"Race pipeline ready: {pipeline.get_streamlined_status()}")

    yield

    logger.info("Shutting down Pattern Race API...")
    pipeline.stop()
    monitor.destroy()
    logger.info("Pattern Race API shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Pattern telemetry and live race metrics",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
    max_age=3600,
)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint for monitoring and load balancers."""
    return JSONResponse(
        content={
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        }
    )


@app.get("/", tags=["System"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs" if settings.debug else "Documentation disabled in production",
        "health": "/health",
    }


from pattern_race.api.v1 import patterns, race  # noqa: E402

app.include_router(
    patterns.router,
    prefix=f"{settings.api_v1_prefix}/patterns",
    tags=["Patterns"],
)

app.include_router(
    race.router,
    prefix=f"{settings.api_v1_prefix}/race",
    tags=["Race"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled exceptions."""
    logger.error(
        "Unhandled exception",
        extra={
            "path": str(request.url),
            "method": request.method,
            "error": str(exc),
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pattern_race.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
