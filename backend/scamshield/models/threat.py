"""
ScamShield Threat Intelligence Models

Threat category taxonomy entries, IOC records and classification results.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity of a threat category or IOC."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class ThreatCategoryKey(str, Enum):
    """Threat taxonomy keys."""
    FINANCIAL_FRAUD = "financial_fraud"
    ROMANCE_SCAM = "romance_scam"
    INVESTMENT_SCAM = "investment_scam"
    GAMBLING = "gambling"
    ECOMMERCE_FRAUD = "ecommerce_fraud"
    FAKE_DELIVERY = "fake_delivery"
    GOVERNMENT_IMPERSONATION = "government_impersonation"
    CRYPTO_SCAM = "crypto_scam"
    SOCIAL_ENGINEERING = "social_engineering"
    MALWARE = "malware"


class IOCType(str, Enum):
    """Indicator of compromise type."""
    DOMAIN = "domain"
    URL = "url"
    PHONE = "phone"
    EMAIL = "email"


class ThreatCategory(BaseModel):
    """Taxonomy entry for a threat category."""
    model_config = ConfigDict(frozen=True)

    key: ThreatCategoryKey = Field(..., description="Category key")
    id: int = Field(..., ge=1, description="Stable numeric id")
    name: str = Field(..., description="English name")
    name_th: str = Field(..., description="Thai name")
    description: str = Field("", description="Short description")
    severity: Severity = Field(..., description="Category severity")
    recommendation: str = Field("", description="Category-specific guidance")
    educational_tips: List[str] = Field(default_factory=list, description="Prevention tips")


class IOC(BaseModel):
    """Known-bad indicator."""
    model_config = ConfigDict(frozen=True)

    type: IOCType
    value: str = Field(..., min_length=1)
    category: ThreatCategoryKey
    severity: Severity
    source: str = "LOCAL"
    description: Optional[str] = None
    added_at: Optional[datetime] = None


class ClassificationResult(BaseModel):
    """Output of the category classifier."""
    category: Optional[ThreatCategory] = None
    ioc_matches: List[IOC] = Field(default_factory=list)
    matched_keywords: List[str] = Field(default_factory=list)
    risk_score: float = Field(0.0, ge=0, le=1)
