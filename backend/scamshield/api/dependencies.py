"""
ScamShield API Dependencies

FastAPI dependency injection for the engine and settings.
"""

import logging

from fastapi import HTTPException, Request

from scamshield.config import Settings, get_settings
from scamshield.services import ThreatScoringEngine

logger = logging.getLogger(__name__)


def get_engine(request: Request) -> ThreatScoringEngine:
    """Engine created during application startup."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        logger.error("Threat scoring engine requested before startup completed")
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


def get_app_settings() -> Settings:
    return get_settings()


__all__ = ['get_engine', 'get_app_settings']
