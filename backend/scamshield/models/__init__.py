"""
ScamShield Data Models
"""

from .threat import (
    Severity,
    ThreatCategoryKey,
    IOCType,
    ThreatCategory,
    IOC,
    ClassificationResult,
)
from .assessment import (
    RiskLevel,
    ThreatClass,
    SignalSource,
    AnalysisContext,
    SignalResult,
    Assessment,
)
from .feedback import (
    FeedbackType,
    FeedbackInput,
    FeedbackRecord,
    PatternStat,
    LearningMetrics,
    ProcessingSummary,
)

__all__ = [
    'Severity',
    'ThreatCategoryKey',
    'IOCType',
    'ThreatCategory',
    'IOC',
    'ClassificationResult',
    'RiskLevel',
    'ThreatClass',
    'SignalSource',
    'AnalysisContext',
    'SignalResult',
    'Assessment',
    'FeedbackType',
    'FeedbackInput',
    'FeedbackRecord',
    'PatternStat',
    'LearningMetrics',
    'ProcessingSummary',
]
