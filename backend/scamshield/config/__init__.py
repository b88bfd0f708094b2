"""
ScamShield Configuration

Environment-driven settings plus the scoring/learning policy tables.
"""

from .settings import Settings, get_settings
from .scoring import (
    RiskThresholds,
    ContextMultipliers,
    SafeConversationPolicy,
    SeverityBonus,
    SignalWeights,
    SignalConfidences,
    DegradedPolicy,
    LearningPolicy,
    ScoringConfig,
)

__all__ = [
    'Settings',
    'get_settings',
    'RiskThresholds',
    'ContextMultipliers',
    'SafeConversationPolicy',
    'SeverityBonus',
    'SignalWeights',
    'SignalConfidences',
    'DegradedPolicy',
    'LearningPolicy',
    'ScoringConfig',
]
