"""
ScamShield Linear Scoring Model

Hand-weighted logistic scorer over the FeatureVector. Produces a
probability, a predicted threat class, and the per-feature contribution
breakdown used both for explanations and for online learning.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from scamshield.models import SignalResult, SignalSource, ThreatClass
from scamshield.utils.helpers import clamp, sigmoid

from .features import FEATURE_NAMES, FeatureVector

logger = logging.getLogger(__name__)


# =============================================================================
# WEIGHTS
# =============================================================================

DEFAULT_WEIGHT: float = 0.1

DEFAULT_WEIGHTS: Dict[str, float] = {
    "message_length": 0.05,
    "urgency_word_count": 1.2,
    "financial_word_count": 1.5,
    "reward_word_count": 0.4,
    "phone_number_count": 0.3,
    "url_count": 0.3,
    "has_multiple_exclamation": 0.2,
    "has_all_caps": 0.3,
    "has_numbers": 0.1,
    "has_time_limit": 0.5,
    "has_money_amount": 0.4,
    "has_trusted_domain": -1.0,
    "has_trusted_phone": -0.9,
    "is_business_hours": -0.3,
    "is_weekend": 0.05,
    "readability_score": -0.4,
    "sentiment_score": 0.1,
    "formality_level": -0.5,
    "user_history_risk": 0.3,
    "source_credibility": -0.8,
    "message_frequency": 0.2,
    "bias": -1.0,
}

# Features excluded from the significance count (constant intercept)
NON_EVIDENCE_FEATURES = frozenset({"bias"})


class ModelWeights:
    """
    Feature-name -> weight table, clipped to [-clip, clip].

    Reads are lock-free. Writers must go through the learning subsystem,
    which serializes calls to ``nudge``/``load``.
    """

    def __init__(self, weights: Optional[Dict[str, float]] = None, clip: float = 5.0):
        self.clip = clip
        self._weights: Dict[str, float] = dict(DEFAULT_WEIGHTS)
        if weights:
            self.load(weights)

    def get(self, name: str) -> float:
        return self._weights.get(name, DEFAULT_WEIGHT)

    def snapshot(self) -> Dict[str, float]:
        return dict(self._weights)

    def nudge(self, name: str, delta: float) -> float:
        """Add delta to one weight and clip. Returns the new weight."""
        updated = clamp(self.get(name) + delta, -self.clip, self.clip)
        self._weights[name] = updated
        return updated

    def load(self, weights: Dict[str, float]) -> None:
        """Replace known weights; missing features keep their current values."""
        merged = dict(self._weights)
        for name, value in weights.items():
            merged[name] = clamp(float(value), -self.clip, self.clip)
        self._weights = merged


# =============================================================================
# PREDICTION
# =============================================================================

FEATURE_DESCRIPTIONS: Dict[str, str] = {
    "message_length": "message length",
    "urgency_word_count": "urgency language",
    "financial_word_count": "financial/account terms",
    "reward_word_count": "prize or reward bait",
    "phone_number_count": "phone numbers in message",
    "url_count": "links in message",
    "has_multiple_exclamation": "repeated exclamation marks",
    "has_all_caps": "ALL-CAPS text",
    "has_numbers": "numeric content",
    "has_time_limit": "explicit deadline",
    "has_money_amount": "money amount",
    "has_trusted_domain": "trusted domain",
    "has_trusted_phone": "trusted phone number",
    "is_business_hours": "sent during business hours",
    "is_weekend": "sent on a weekend",
    "readability_score": "sentence structure",
    "sentiment_score": "message sentiment",
    "formality_level": "formal register",
    "user_history_risk": "sender history risk",
    "source_credibility": "source credibility",
    "message_frequency": "message frequency",
}


@dataclass
class Prediction:
    """Linear model output."""
    probability: float
    predicted_class: ThreatClass
    confidence: float
    raw_score: float
    contributions: Dict[str, float] = field(default_factory=dict)
    explanations: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


class LinearScoringModel:
    """sigmoid(sum(weight * value)) with a small class decision tree."""

    def __init__(self, weights: Optional[ModelWeights] = None, significance_threshold: float = 0.1):
        self.weights = weights if weights is not None else ModelWeights()
        self.significance_threshold = significance_threshold

    def predict(self, features: FeatureVector) -> Prediction:
        contributions = {name: self.weights.get(name) * getattr(features, name) for name in FEATURE_NAMES}
        raw_score = sum(contributions.values())
        probability = sigmoid(raw_score)

        predicted_class = classify_threat(probability, features)
        significant = {
            name: c for name, c in contributions.items()
            if name not in NON_EVIDENCE_FEATURES and abs(c) > self.significance_threshold
        }
        confidence = contribution_confidence(list(significant.values()))

        prediction = Prediction(
            probability=probability,
            predicted_class=predicted_class,
            confidence=confidence,
            raw_score=raw_score,
            contributions=contributions,
            explanations=explain(significant),
            recommendations=model_recommendations(probability, confidence, features),
        )
        logger.debug(
            f"Linear model: score={raw_score:.3f} p={probability:.3f} "
            f"class={predicted_class.value} conf={confidence:.2f}"
        )
        return prediction

    def to_signal(
        self,
        prediction: Prediction,
        weight: float = 0.5,
        boosted_weight: float = 1.2,
        boost_probability: float = 0.8,
    ) -> SignalResult:
        """Wrap the prediction as an ensemble signal."""
        boosted = (
            prediction.probability > boost_probability
            and prediction.predicted_class != ThreatClass.SAFE
        )
        return SignalResult(
            source=SignalSource.LINEAR_MODEL.value,
            score=clamp(prediction.probability),
            confidence=prediction.confidence,
            weight=boosted_weight if boosted else weight,
            labels=frozenset({f"model:{prediction.predicted_class.value}"}),
        )


# =============================================================================
# HELPERS
# =============================================================================

def classify_threat(probability: float, features: FeatureVector) -> ThreatClass:
    if probability < 0.3:
        return ThreatClass.SAFE
    if features.financial_word_count > 2 and features.urgency_word_count > 1:
        return ThreatClass.PHISHING
    if features.reward_word_count > 1 and features.has_money_amount:
        return ThreatClass.SCAM
    if features.has_money_amount and features.phone_number_count > 0:
        return ThreatClass.FRAUD
    if probability > 0.7:
        return ThreatClass.SCAM
    return ThreatClass.SPAM


def contribution_confidence(significant: List[float]) -> float:
    """
    Confidence from the significant contributions.

    Combines total magnitude, how many features agree, and how evenly the
    evidence is spread. A single dominant feature scores a diversity of 0,
    so it always rates below several independent contributions.
    """
    if not significant:
        return 0.3

    magnitudes = [abs(c) for c in significant]
    total = sum(magnitudes)
    strength = min(total / 4.0, 1.0)
    breadth = min(len(magnitudes) / 5.0, 1.0)
    diversity = 1.0 - max(magnitudes) / total

    return clamp(0.3 + 0.25 * strength + 0.2 * breadth + 0.2 * diversity, 0.3, 0.95)


def explain(significant: Dict[str, float], limit: int = 5) -> List[str]:
    ranked = sorted(significant.items(), key=lambda item: (-abs(item[1]), item[0]))[:limit]
    lines = []
    for name, contribution in ranked:
        description = FEATURE_DESCRIPTIONS.get(name, name)
        direction = "raised" if contribution > 0 else "lowered"
        lines.append(f"{description} {direction} the model score ({contribution:+.2f})")
    return lines


def model_recommendations(probability: float, confidence: float, features: FeatureVector) -> List[str]:
    recs = []
    if probability > 0.8:
        recs.append("ข้อความนี้มีความเสี่ยงสูง ไม่ควรทำตามคำขอใดๆ ในข้อความ")
    if features.urgency_word_count > 2:
        recs.append("ข้อความเร่งให้รีบดำเนินการผิดปกติ ควรหยุดตรวจสอบก่อน")
    if features.has_money_amount and features.phone_number_count > 0:
        recs.append("อย่าโทรกลับหรือโอนเงินตามเบอร์โทรศัพท์ในข้อความ")
    if confidence < 0.5:
        recs.append("ผลการวิเคราะห์ยังไม่ชัดเจน ควรตรวจสอบกับแหล่งที่เชื่อถือได้เพิ่มเติม")
    return recs
