"""
ScamShield Scoring Configuration

All scoring thresholds, signal weights and learning constants are
centralized here. They are policy, not fixed constraints, so tests and
offline tuning can override any of them.

Usage:
    from scamshield.config.scoring import ScoringConfig
    config = ScoringConfig.from_settings(get_settings())

    level = config.thresholds.level_for(0.72)
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

from scamshield.config.settings import Settings
from scamshield.models.assessment import RiskLevel

logger = logging.getLogger(__name__)


# =============================================================================
# RISK LEVEL THRESHOLDS
# =============================================================================

@dataclass
class RiskThresholds:
    """Lower bounds of each risk bucket on the 0-1 scale."""

    # Raised relative to a 0.2/0.4/0.6/0.8 split to cut false positives
    low: float = 0.3        # >= this = LOW
    medium: float = 0.5     # >= this = MEDIUM
    high: float = 0.7       # >= this = HIGH
    critical: float = 0.85  # >= this = CRITICAL
    # Below low = SAFE

    def level_for(self, score: float) -> RiskLevel:
        if score >= self.critical:
            return RiskLevel.CRITICAL
        elif score >= self.high:
            return RiskLevel.HIGH
        elif score >= self.medium:
            return RiskLevel.MEDIUM
        elif score >= self.low:
            return RiskLevel.LOW
        return RiskLevel.SAFE


# =============================================================================
# CONTEXT ADJUSTMENT
# =============================================================================

@dataclass
class ContextMultipliers:
    """Multiplicative adjustments applied after the weighted average."""

    trusted_domain: float = 0.7
    trusted_phone: float = 0.8
    official_account: float = 0.6
    multiple_risk_factors: float = 1.2
    outside_business_hours: float = 1.1

    risk_factor_threshold: int = 2    # >= this many regex flags = surcharge

    min_score: float = 0.05
    max_score: float = 0.95


@dataclass
class SafeConversationPolicy:
    """False-positive guards for short benign messages."""

    max_length: int = 30
    score_cap: float = 0.2

    # Very short messages without any hard risk signal
    short_length: int = 20
    short_score_cap: float = 0.3

    # Trusted sender sending routine business traffic
    business_override_cap: float = 0.1


@dataclass
class SeverityBonus:
    """Floors applied when the category classifier found a severe category."""

    critical_trigger: float = 0.7
    critical_floor: float = 0.8
    high_trigger: float = 0.5
    high_floor: float = 0.7


# =============================================================================
# SIGNAL WEIGHTING
# =============================================================================

@dataclass
class SignalWeights:
    """Fixed importance weight for each signal source."""

    external_judgment: float = 0.4
    keyword: float = 0.2
    category: float = 0.2
    linear_model: float = 0.5
    # Used when the model is confident the message is a specific threat
    linear_model_boosted: float = 1.2
    linear_model_boost_probability: float = 0.8


@dataclass
class SignalConfidences:
    """Fixed per-source confidence values."""

    external_judgment: float = 0.9
    external_judgment_trusted: float = 0.7
    external_judgment_unparsed: float = 0.3
    keyword: float = 0.8
    category: float = 0.85


@dataclass
class DegradedPolicy:
    """Assessment returned when no signal could be computed."""

    score: float = 0.5
    confidence: float = 0.2
    label: str = "degraded_mode"


# =============================================================================
# LEARNING
# =============================================================================

@dataclass
class LearningPolicy:
    """Online learning constants."""

    weight_clip: float = 5.0
    batch_size: int = 50
    learning_rate: float = 0.01
    immediate_learning_rate: float = 0.05
    immediate_confidence_threshold: float = 0.7
    training_buffer_size: int = 1000
    training_window: int = 50
    max_feedback_storage: int = 10000
    max_patterns: int = 5000
    pattern_blend_rate: float = 0.2

    # Patterns below this accuracy are surfaced for review
    review_accuracy: float = 0.6
    review_limit: int = 10
    learned_accuracy: float = 0.7

    # Feature contribution magnitude that counts as significant
    significance_threshold: float = 0.1


# =============================================================================
# MASTER CONFIGURATION
# =============================================================================

@dataclass
class ScoringConfig:
    """Master scoring configuration."""

    thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    context: ContextMultipliers = field(default_factory=ContextMultipliers)
    safe_conversation: SafeConversationPolicy = field(default_factory=SafeConversationPolicy)
    severity_bonus: SeverityBonus = field(default_factory=SeverityBonus)
    signal_weights: SignalWeights = field(default_factory=SignalWeights)
    signal_confidences: SignalConfidences = field(default_factory=SignalConfidences)
    degraded: DegradedPolicy = field(default_factory=DegradedPolicy)
    learning: LearningPolicy = field(default_factory=LearningPolicy)
    external_judge_timeout: float = 8.0
    timezone: str = "Asia/Bangkok"
    allow_feedback: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = dict(value.__dict__) if hasattr(value, "__dict__") else value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScoringConfig":
        """Create config from dictionary, ignoring unknown keys."""
        config = cls()
        for key, value in data.items():
            if not hasattr(config, key):
                continue
            section = getattr(config, key)
            if isinstance(value, dict) and hasattr(section, "__dict__"):
                for k, v in value.items():
                    if hasattr(section, k):
                        setattr(section, k, v)
            else:
                setattr(config, key, value)
        return config

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ScoringConfig":
        """Create config from application settings."""
        settings = settings or Settings()
        config = cls(
            external_judge_timeout=settings.external_judge_timeout,
            timezone=settings.timezone,
            allow_feedback=settings.enable_feedback_learning,
        )
        learning = config.learning
        learning.weight_clip = settings.weight_clip
        learning.batch_size = settings.batch_size
        learning.learning_rate = settings.learning_rate
        learning.immediate_learning_rate = settings.immediate_learning_rate
        learning.immediate_confidence_threshold = settings.immediate_confidence_threshold
        learning.training_buffer_size = settings.training_buffer_size
        learning.training_window = settings.training_window
        learning.max_feedback_storage = settings.max_feedback_storage
        learning.max_patterns = settings.max_patterns
        learning.pattern_blend_rate = settings.pattern_blend_rate
        logger.info("Scoring configuration loaded")
        return config
