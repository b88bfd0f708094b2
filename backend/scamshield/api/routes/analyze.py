"""
ScamShield Analysis API Routes

Score a single SMS/chat message.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from scamshield.api.dependencies import get_engine
from scamshield.models import AnalysisContext, Assessment, ClassificationResult
from scamshield.services import ThreatScoringEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyze", tags=["analysis"])


class AnalyzeRequest(BaseModel):
    """Request model for message analysis."""
    text: str = Field(..., min_length=1, max_length=5000, description="Message text to analyze")
    user_id: Optional[str] = Field(None, description="Recipient user id")
    message_id: Optional[str] = Field(None, description="Caller-supplied correlation id")
    context: Optional[AnalysisContext] = Field(None, description="Trust flags and pre-extracted entities")


class ClassifyRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


@router.post("", response_model=Assessment)
async def analyze_message(
    request: AnalyzeRequest,
    engine: ThreatScoringEngine = Depends(get_engine),
):
    """
    Analyze a message and return its risk assessment.

    The returned ``message_id`` must be echoed back when submitting feedback.
    """
    assessment = await engine.analyze(
        request.text,
        user_id=request.user_id,
        context=request.context,
        message_id=request.message_id,
    )
    logger.info(f"Analyzed {assessment.message_id}: {assessment.risk_level.value} ({assessment.risk_score:.2f})")
    return assessment


@router.post("/classify", response_model=ClassificationResult)
async def classify_message(
    request: ClassifyRequest,
    engine: ThreatScoringEngine = Depends(get_engine),
):
    """Threat category and IOC matches only."""
    return engine.classify(request.text)
