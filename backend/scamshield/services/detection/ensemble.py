"""
ScamShield Ensemble Combiner

Merges every available SignalResult into the final Assessment:

1. Confidence-weighted average of signal scores
2. Context multipliers (trust discounts, risk-factor surcharges), clamped
3. Safe-conversation override for short casual messages
4. Category severity bonus
5. Discretization into a risk level
6. Recommendation / explanation assembly

Sums use math.fsum, which is exactly rounded, so the result does not depend
on the order in which signals arrived.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from scamshield.config.scoring import ScoringConfig
from scamshield.models import (
    AnalysisContext,
    Assessment,
    ClassificationResult,
    RiskLevel,
    Severity,
    SignalResult,
    ThreatClass,
)
from scamshield.utils.constants import RISK_FACTOR_PATTERNS
from scamshield.utils.helpers import clamp, dedupe

from .category_classifier import CategoryClassifier
from .features import FeatureVector
from .keyword_signal import BUSINESS_LABEL, ORGANIZATION_LABEL
from .linear_model import Prediction

logger = logging.getLogger(__name__)


LEVEL_ACTIONS = {
    RiskLevel.SAFE: "ข้อความนี้ดูปลอดภัย แต่ควรระมัดระวังหากมีการขอข้อมูลส่วนตัว",
    RiskLevel.LOW: "มีความเสี่ยงต่ำ ตรวจสอบผู้ส่งก่อนตอบกลับ",
    RiskLevel.MEDIUM: "มีสัญญาณน่าสงสัย อย่าคลิกลิงก์หรือให้ข้อมูลส่วนตัว",
    RiskLevel.HIGH: "มีความเสี่ยงสูง อย่าโอนเงิน อย่าคลิกลิงก์ และบล็อกผู้ส่ง",
    RiskLevel.CRITICAL: "อันตรายมาก ลบข้อความ บล็อกผู้ส่ง และแจ้งสายด่วน 1441",
}

TRUSTED_SOURCE_NOTE = "ข้อความนี้มาจากแหล่งที่เชื่อถือได้ แต่ควรระมัดระวังเนื้อหาที่ขอข้อมูลส่วนตัว"
OFFICIAL_ACCOUNT_NOTE = "ตรวจสอบความถูกต้องโดยติดต่อหน่วยงานโดยตรงเพิ่มเติม"
BUSINESS_NOTE = "ข้อความนี้ดูเหมือนจะเป็นการติดต่อทางธุรกิจปกติ"
DEGRADED_NOTE = "ไม่สามารถวิเคราะห์ข้อความได้ครบถ้วน โปรดใช้ความระมัดระวัง"


@dataclass
class CombineContext:
    """Everything the combiner needs besides the signals themselves."""
    message_id: str
    text: str = ""
    context: AnalysisContext = field(default_factory=AnalysisContext)
    features: Optional[FeatureVector] = None
    prediction: Optional[Prediction] = None
    classification: Optional[ClassificationResult] = None
    outside_business_hours: bool = False
    analyzed_at: Optional[datetime] = None


class EnsembleCombiner:
    """Confidence-weighted ensemble with context-based threshold policy."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    # =========================================================================
    # PUBLIC
    # =========================================================================

    def combine(self, signals: Sequence[SignalResult], ctx: CombineContext) -> Assessment:
        signals = list(signals)
        denominator = math.fsum(s.confidence * s.weight for s in signals)
        if not signals or denominator <= 0:
            logger.warning(f"No usable signals for message {ctx.message_id}, returning degraded assessment")
            return self.degraded(ctx)

        explanations: List[str] = []
        flags: List[str] = []

        # Step 1: weighted average
        raw = math.fsum(s.score * s.confidence * s.weight for s in signals) / denominator

        # Step 2: context adjustment
        score = raw
        for reason, multiplier in self.context_adjustments(ctx):
            score *= multiplier
            explanations.append(f"{reason} (x{multiplier:.2f})")
        bounds = self.config.context
        score = clamp(score, bounds.min_score, bounds.max_score)

        labels = set()
        for s in signals:
            labels.update(s.labels)

        if self._is_trusted_business(labels, ctx.context):
            score = min(score, self.config.safe_conversation.business_override_cap)
            flags.append("trusted_business_override")
            explanations.append("routine communication from a trusted sender")

        # Step 3: safe-conversation override
        if self.is_safe_conversation(ctx):
            score = min(score, self.config.safe_conversation.score_cap)
            flags.append("safe_conversation")
            explanations.append("short casual message with no risk signals")
        elif self.is_short_benign(ctx):
            score = min(score, self.config.safe_conversation.short_score_cap)
            flags.append("short_message")

        # Step 4: category severity bonus
        bonused = self.apply_severity_bonus(score, ctx.classification)
        if bonused > score:
            flags.append("severity_bonus")
            explanations.append(f"severe threat category raised score to {bonused:.2f}")
        score = clamp(bonused)

        # Step 5: discretize
        level = self.config.thresholds.level_for(score)

        # Step 6: assemble
        labels.update(flags)
        assessment = Assessment(
            message_id=ctx.message_id,
            risk_score=score,
            risk_level=level,
            threat_class=self._threat_class(level, ctx.prediction, labels),
            category=ctx.classification.category if ctx.classification else None,
            confidence=self.combined_confidence(signals),
            labels=sorted(labels),
            recommendations=self._recommendations(level, ctx, flags),
            explanations=self._explanations(ctx, explanations),
            allow_feedback=self.config.allow_feedback,
            degraded=False,
            signals_used=sorted(s.source for s in signals),
            analyzed_at=ctx.analyzed_at,
        )
        logger.info(
            f"Assessment {ctx.message_id}: raw={raw:.3f} final={score:.3f} "
            f"level={level.value} signals={assessment.signals_used}"
        )
        return assessment

    def degraded(self, ctx: CombineContext) -> Assessment:
        """Neutral assessment used when no signal is available."""
        policy = self.config.degraded
        return Assessment(
            message_id=ctx.message_id,
            risk_score=policy.score,
            risk_level=self.config.thresholds.level_for(policy.score),
            threat_class=ThreatClass.SPAM,
            category=None,
            confidence=policy.confidence,
            labels=[policy.label],
            recommendations=[DEGRADED_NOTE],
            explanations=["no signal source produced a result"],
            allow_feedback=False,
            degraded=True,
            signals_used=[],
            analyzed_at=ctx.analyzed_at,
        )

    # =========================================================================
    # POLICY STEPS
    # =========================================================================

    def context_adjustments(self, ctx: CombineContext) -> List[Tuple[str, float]]:
        """Multipliers in application order."""
        m = self.config.context
        context = ctx.context
        adjustments = []
        if context.has_trusted_domains:
            adjustments.append(("trusted domain discount", m.trusted_domain))
        if context.has_trusted_phones:
            adjustments.append(("trusted phone discount", m.trusted_phone))
        if context.is_official_account:
            adjustments.append(("verified official sender discount", m.official_account))
        if count_risk_factors(ctx.text) >= m.risk_factor_threshold:
            adjustments.append(("multiple co-occurring risk factors", m.multiple_risk_factors))
        if ctx.outside_business_hours:
            adjustments.append(("sent outside business hours", m.outside_business_hours))
        return adjustments

    def is_safe_conversation(self, ctx: CombineContext) -> bool:
        f, prediction = ctx.features, ctx.prediction
        if f is None or prediction is None:
            return False
        return (
            len(ctx.text.strip()) < self.config.safe_conversation.max_length
            and f.urgency_word_count == 0
            and f.financial_word_count == 0
            and f.reward_word_count == 0
            and f.url_count == 0
            and f.phone_number_count == 0
            and f.sentiment_score >= 0
            and prediction.predicted_class == ThreatClass.SAFE
        )

    def is_short_benign(self, ctx: CombineContext) -> bool:
        f = ctx.features
        if f is None:
            return False
        return (
            len(ctx.text.strip()) < self.config.safe_conversation.short_length
            and f.urgency_word_count == 0
            and f.financial_word_count == 0
            and f.url_count == 0
            and f.phone_number_count == 0
        )

    def apply_severity_bonus(self, score: float, classification: Optional[ClassificationResult]) -> float:
        if classification is None or classification.category is None:
            return score
        bonus = self.config.severity_bonus
        severity = classification.category.severity
        if severity == Severity.CRITICAL and score >= bonus.critical_trigger:
            return max(score, bonus.critical_floor)
        if severity == Severity.HIGH and score >= bonus.high_trigger:
            return max(score, bonus.high_floor)
        return score

    @staticmethod
    def combined_confidence(signals: Sequence[SignalResult]) -> float:
        """Weighted mean confidence, discounted when signals disagree."""
        total_weight = math.fsum(s.weight for s in signals)
        base = math.fsum(s.confidence * s.weight for s in signals) / total_weight
        mean = math.fsum(s.score for s in signals) / len(signals)
        variance = math.fsum((s.score - mean) ** 2 for s in signals) / len(signals)
        consensus = max(0.5, 1.0 - variance)
        return clamp(base * consensus)

    # =========================================================================
    # ASSEMBLY
    # =========================================================================

    @staticmethod
    def _is_trusted_business(labels: set, context: AnalysisContext) -> bool:
        trusted = context.has_trusted_domains or context.has_trusted_phones
        return (trusted and BUSINESS_LABEL in labels) or (
            context.is_official_account and ORGANIZATION_LABEL in labels
        )

    @staticmethod
    def _threat_class(level: RiskLevel, prediction: Optional[Prediction], labels: set) -> ThreatClass:
        if level == RiskLevel.SAFE:
            return ThreatClass.SAFE
        if prediction is not None and prediction.predicted_class != ThreatClass.SAFE:
            return prediction.predicted_class
        if "financial_threat" in labels:
            return ThreatClass.PHISHING
        if "lottery_scam" in labels or "payment_request" in labels:
            return ThreatClass.SCAM
        return ThreatClass.SPAM

    def _recommendations(self, level: RiskLevel, ctx: CombineContext, flags: List[str]) -> List[str]:
        recs: List[str] = []
        category = ctx.classification.category if ctx.classification else None
        if category is not None and level != RiskLevel.SAFE:
            recs.append(category.recommendation)
            recs.extend(CategoryClassifier.educational_tips(category))

        if ctx.context.has_trusted_domains or ctx.context.has_trusted_phones:
            recs.append(TRUSTED_SOURCE_NOTE)
        if ctx.context.is_official_account:
            recs.append(OFFICIAL_ACCOUNT_NOTE)
        if "trusted_business_override" in flags:
            recs.append(BUSINESS_NOTE)

        recs.append(LEVEL_ACTIONS[level])
        if ctx.prediction is not None and level != RiskLevel.SAFE:
            recs.extend(ctx.prediction.recommendations)
        return dedupe(recs)

    @staticmethod
    def _explanations(ctx: CombineContext, policy_notes: List[str]) -> List[str]:
        lines: List[str] = []
        if ctx.prediction is not None:
            lines.extend(ctx.prediction.explanations)
        if ctx.classification is not None:
            for ioc in ctx.classification.ioc_matches:
                lines.append(f"matched known {ioc.type.value} indicator {ioc.value} ({ioc.severity.value})")
            if ctx.classification.category is not None and not ctx.classification.ioc_matches:
                keywords = ", ".join(ctx.classification.matched_keywords)
                lines.append(f"category {ctx.classification.category.name} inferred from: {keywords}")
        lines.extend(policy_notes)
        return dedupe(lines)


def count_risk_factors(text: str) -> int:
    """Number of independent risk-factor regexes that fire on the text."""
    return sum(1 for pattern in RISK_FACTOR_PATTERNS.values() if pattern.search(text or ""))
