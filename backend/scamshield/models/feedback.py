"""
ScamShield Feedback Data Models

Pydantic models for user feedback, pattern statistics and learning metrics.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from .assessment import Assessment, RiskLevel


class FeedbackType(str, Enum):
    """User verdict on a past assessment."""
    CORRECT = "correct"
    FALSE_POSITIVE = "false_positive"
    FALSE_NEGATIVE = "false_negative"
    PARTIALLY_CORRECT = "partially_correct"

    @property
    def is_negative(self) -> bool:
        return self in (FeedbackType.FALSE_POSITIVE, FeedbackType.FALSE_NEGATIVE)


class FeedbackInput(BaseModel):
    """Feedback payload supplied by the front end."""
    feedback_type: FeedbackType
    confidence: float = Field(..., ge=0, le=1, description="How sure the user is")
    user_comment: Optional[str] = Field(None, max_length=2000)
    corrected_category: Optional[str] = None
    corrected_risk_level: Optional[RiskLevel] = None


class FeedbackRecord(BaseModel):
    """Stored feedback against a previous assessment."""
    id: str
    message_id: str = Field(..., min_length=1)
    original_message: str = Field(..., min_length=1)
    original_assessment: Assessment
    feedback_type: FeedbackType
    confidence: float = Field(..., ge=0, le=1)
    user_comment: Optional[str] = None
    corrected_category: Optional[str] = None
    corrected_risk_level: Optional[RiskLevel] = None
    user_id: Optional[str] = None
    created_at: datetime
    processed: bool = False
    processed_at: Optional[datetime] = None

    @field_validator("original_message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("original_message must not be blank")
        return v


class PatternStat(BaseModel):
    """Running accuracy tally for a lexical pattern."""
    pattern: str
    frequency: int = Field(0, ge=0)
    accuracy: float = Field(0.5, ge=0, le=1)
    contexts: Set[str] = Field(default_factory=set)
    last_seen: datetime
    needs_review: bool = False
    user_confidence: float = Field(0.5, ge=0, le=1)


class LearningMetrics(BaseModel):
    """Aggregate feedback learning metrics."""
    total_feedback: int = 0
    correct_predictions: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    partially_correct: int = 0
    pending_feedback: int = 0
    processed_feedback: int = 0
    accuracy_improvement: float = 0.0
    pattern_count: int = 0
    model_version: str = "v1.0.0"
    last_learning_update: Optional[datetime] = None


class ProcessingSummary(BaseModel):
    """Outcome of a batch learning pass."""
    processed: int = 0
    failed: int = 0
    weights_updated: bool = False
    failed_ids: List[str] = Field(default_factory=list)
