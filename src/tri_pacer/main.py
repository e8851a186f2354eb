"""FastAPI application for the triathlon pace planner."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.exception_handlers import register_exception_handlers
from .api.routes import export, pacing, strava, training
from .config import get_settings
from .utils.log_sanitizer import install_log_sanitizer

# Must run before any Strava token can reach a log record
install_log_sanitizer()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logging.getLogger("tri_pacer").setLevel(settings.log_level.upper())
    logger.info(f"Starting tri-pacer v{__version__}")

    if settings.strava_configured:
        logger.info("Strava OAuth: configured")
    else:
        logger.warning("Strava OAuth not configured. Strava integration will be unavailable.")

    yield

    logger.info("Shutting down tri-pacer")


app = FastAPI(
    title="tri-pacer API",
    description="Triathlon race-pace planning with Strava-backed goal comparison",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(pacing.router, prefix="/api/v1/pacing", tags=["pacing"])
app.include_router(strava.router, prefix="/api/v1/strava", tags=["strava"])
app.include_router(training.router, prefix="/api/v1/training", tags=["training"])
app.include_router(export.router, prefix="/api/v1/export", tags=["export"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "tri-pacer API",
        "version": __version__,
        "status": "healthy",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
