"""
ScamShield Assessment Data Models

Pydantic models for analysis context, signal results and final assessments.
"""

from datetime import datetime
from enum import Enum
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .threat import ThreatCategory


class RiskLevel(str, Enum):
    """Discretized risk bucket."""
    SAFE = "SAFE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ThreatClass(str, Enum):
    """Class predicted by the linear scoring model."""
    SAFE = "safe"
    SPAM = "spam"
    SCAM = "scam"
    PHISHING = "phishing"
    FRAUD = "fraud"


class SignalSource(str, Enum):
    """Signal sources feeding the ensemble."""
    EXTERNAL_JUDGMENT = "external_judgment"
    KEYWORD = "keyword"
    CATEGORY = "category"
    LINEAR_MODEL = "linear_model"


class AnalysisContext(BaseModel):
    """Trust flags and entities supplied by the messaging front end."""
    has_trusted_domains: bool = Field(False, description="A referenced domain is known-good")
    has_trusted_phones: bool = Field(False, description="A referenced phone number is known-good")
    is_official_account: bool = Field(False, description="Sender is a verified official account")
    message_source: str = Field("unknown", description="Source channel")
    user_history: List[float] = Field(default_factory=list, description="Risk scores of the user's previous messages")
    urls: Optional[List[str]] = Field(None, description="URLs extracted by the caller")
    phone_numbers: Optional[List[str]] = Field(None, description="Phone numbers extracted by the caller")
    emails: Optional[List[str]] = Field(None, description="Email addresses extracted by the caller")
    received_at: Optional[datetime] = Field(None, description="Message timestamp")

    @property
    def has_any_trust(self) -> bool:
        return self.has_trusted_domains or self.has_trusted_phones or self.is_official_account


class SignalResult(BaseModel):
    """Score produced by a single signal source."""
    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Signal source name")
    score: float = Field(..., ge=0, le=1)
    confidence: float = Field(..., ge=0, le=1)
    weight: float = Field(..., gt=0)
    labels: FrozenSet[str] = Field(default_factory=frozenset)


class Assessment(BaseModel):
    """Final risk assessment for one message."""
    model_config = ConfigDict(frozen=True)

    message_id: str = Field(..., description="Correlation id used by feedback")
    risk_score: float = Field(..., ge=0, le=1)
    risk_level: RiskLevel
    threat_class: ThreatClass = ThreatClass.SPAM
    category: Optional[ThreatCategory] = None
    confidence: float = Field(..., ge=0, le=1)
    labels: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    explanations: List[str] = Field(default_factory=list)
    allow_feedback: bool = True
    degraded: bool = False
    signals_used: List[str] = Field(default_factory=list)
    analyzed_at: Optional[datetime] = None
