"""
InterviewReady - Adaptive AI Mock Interview Service

Main application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interviewready import __version__
from interviewready.config.settings import get_settings
from interviewready.api.router import api_router
from interviewready.api.dependencies import cleanup

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    if settings.debug:
        logging.getLogger("interviewready").setLevel(logging.DEBUG)

    logger.info(f"Starting {settings.app_name} {__version__}...")
    logger.info(f"AI backend: {settings.ai_backend}, storage: {settings.storage_backend}")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await cleanup()


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Adaptive AI mock interview sessions",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Service information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "ai_backend": settings.ai_backend,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
