"""
ScamShield API Routes

All API route modules.
"""

from fastapi import APIRouter

from .analyze import router as analyze_router
from .feedback import router as feedback_router
from .learning import router as learning_router
from .threat_intel import router as threat_intel_router
from .health import router as health_router


def get_api_router() -> APIRouter:
    """Create and return the main API router."""
    api_router = APIRouter(prefix="/api/v1")

    api_router.include_router(analyze_router)
    api_router.include_router(feedback_router)
    api_router.include_router(learning_router)
    api_router.include_router(threat_intel_router)
    api_router.include_router(health_router)

    return api_router


__all__ = [
    'get_api_router',
    'analyze_router',
    'feedback_router',
    'learning_router',
    'threat_intel_router',
    'health_router',
]
