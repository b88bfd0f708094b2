"""
ScamShield API Application

Main FastAPI application entry point.
"""

# Load environment variables before settings are read
from dotenv import load_dotenv

load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scamshield import __version__
from scamshield.api.routes import get_api_router
from scamshield.config import get_settings
from scamshield.services import create_engine
from scamshield.utils.constants import APP_DESCRIPTION, APP_NAME

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting ScamShield API...")

    engine = create_engine(settings)
    app.state.engine = engine

    logger.info("=== Engine Configuration ===")
    logger.info(f"  External judge: {'✓' if engine.judge.available else '✗'}")
    logger.info(f"  Feedback learning: {'✓' if settings.enable_feedback_learning else '✗'}")
    logger.info(f"  IOCs loaded: {len(engine.list_iocs())}")
    logger.info(f"  Timezone: {settings.timezone}")
    logger.info("ScamShield API started successfully")

    yield

    logger.info("Shutting down ScamShield API...")
    await engine.close()
    logger.info("ScamShield API shutdown complete")


app = FastAPI(
    title=f"{APP_NAME} API",
    description=APP_DESCRIPTION,
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(get_api_router())


@app.get("/")
async def root():
    """Root endpoint - API info."""
    return {
        "name": f"{APP_NAME} API",
        "description": APP_DESCRIPTION,
        "version": __version__,
        "docs": "/docs",
    }


# Root-level health check (for Docker/K8s)
@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "service": "scamshield-api",
        "version": __version__,
    }


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.debug else "An error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "scamshield.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
