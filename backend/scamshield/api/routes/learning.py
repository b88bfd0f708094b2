"""
ScamShield Learning API Routes

Introspection and durability for the feedback learning system.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query

from scamshield.api.dependencies import get_engine
from scamshield.models import LearningMetrics, PatternStat, ProcessingSummary
from scamshield.services import ThreatScoringEngine
from scamshield.utils.exceptions import LearningDataError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/learning", tags=["learning"])


@router.get("/metrics", response_model=LearningMetrics)
async def learning_metrics(engine: ThreatScoringEngine = Depends(get_engine)):
    return engine.get_learning_metrics()


@router.get("/recommendations")
async def improvement_recommendations(engine: ThreatScoringEngine = Depends(get_engine)):
    """Human-readable suggestions derived from feedback metrics."""
    return {"recommendations": engine.get_improvement_recommendations()}


@router.get("/patterns/review", response_model=List[PatternStat])
async def patterns_needing_review(engine: ThreatScoringEngine = Depends(get_engine)):
    return engine.get_patterns_needing_review()


@router.get("/patterns/learned", response_model=List[PatternStat])
async def learned_patterns(
    limit: int = Query(20, ge=1, le=200),
    engine: ThreatScoringEngine = Depends(get_engine),
):
    return engine.get_learned_patterns(limit)


@router.post("/process", response_model=ProcessingSummary)
async def process_pending(engine: ThreatScoringEngine = Depends(get_engine)):
    """Apply every queued feedback record now instead of waiting for a full batch."""
    return await engine.process_pending()


@router.get("/export")
async def export_learning_data(engine: ThreatScoringEngine = Depends(get_engine)):
    return engine.export_learning_data()


@router.post("/import")
async def import_learning_data(
    snapshot: Dict[str, Any],
    engine: ThreatScoringEngine = Depends(get_engine),
):
    """Merge a snapshot produced by /learning/export."""
    try:
        imported = engine.import_learning_data(snapshot)
    except LearningDataError as e:
        raise HTTPException(status_code=400, detail=f"Import failed: {e.message}")

    logger.info(f"Learning snapshot imported: {imported}")
    return {"success": True, "imported": imported}
