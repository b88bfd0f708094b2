"""
ScamShield Feedback API Routes

Users report whether an assessment was right.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from scamshield.api.dependencies import get_engine
from scamshield.services import ThreatScoringEngine
from scamshield.utils.exceptions import InvalidFeedbackError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feedback", tags=["feedback"])


class FeedbackRequest(BaseModel):
    """
    Feedback submission.

    ``original_assessment`` and ``feedback`` are validated by the learning
    system so that malformed feedback is reported with field-level details.
    """
    message_id: str = Field("", description="message_id from the analysis response")
    original_message: str = Field("", description="Text that was analyzed")
    original_assessment: Dict[str, Any] = Field(default_factory=dict)
    feedback: Dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = None


class FeedbackResponse(BaseModel):
    feedback_id: str
    status: str = "recorded"


@router.post("", response_model=FeedbackResponse)
async def submit_feedback(
    request: FeedbackRequest,
    engine: ThreatScoringEngine = Depends(get_engine),
):
    """Record user feedback on an earlier assessment."""
    try:
        feedback_id = await engine.record_feedback(
            request.message_id,
            request.original_message,
            request.original_assessment,
            request.feedback,
            user_id=request.user_id,
        )
    except InvalidFeedbackError as e:
        logger.warning(f"Rejected feedback for {request.message_id or '<missing>'}: {e.message}")
        raise HTTPException(status_code=422, detail={"message": e.message, **e.details})

    return FeedbackResponse(feedback_id=feedback_id)
