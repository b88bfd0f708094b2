"""
ScamShield Health API Routes

Readiness details beyond the root-level liveness check.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from scamshield.api.dependencies import get_app_settings, get_engine
from scamshield.config import Settings
from scamshield.services import ThreatScoringEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/ready")
async def readiness_check(
    engine: ThreatScoringEngine = Depends(get_engine),
    settings: Settings = Depends(get_app_settings),
):
    """
    Readiness check.

    The engine is always usable; the external judge only adds a signal
    when configured.
    """
    metrics = engine.get_learning_metrics()
    provider = engine.judge.provider
    return {
        "status": "ready",
        "service": settings.app_name,
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "external_judge": "configured" if engine.judge.available else "unavailable",
            "judge_provider": provider.get_provider_info() if provider is not None else None,
            "ioc_count": len(engine.list_iocs()),
            "pattern_count": metrics.pattern_count,
            "pending_feedback": metrics.pending_feedback,
            "model_version": metrics.model_version,
        },
    }
