"""
ScamShield - Ensemble Combiner Tests
"""

import pytest

from conftest import SAFE_MESSAGE, fixed_clock


def signal(score, confidence=1.0, weight=1.0, source="keyword", labels=()):
    from scamshield.models import SignalResult
    return SignalResult(source=source, score=score, confidence=confidence,
                        weight=weight, labels=frozenset(labels))


def make_ctx(text="", **kwargs):
    from scamshield.models import AnalysisContext
    from scamshield.services.detection import CombineContext

    context = kwargs.pop("context", None) or AnalysisContext()
    return CombineContext(message_id="msg-1", text=text, context=context, **kwargs)


def analyzed_ctx(text):
    """Context carrying real features and prediction for text."""
    from scamshield.services.detection import FeatureExtractor, LinearScoringModel

    features = FeatureExtractor(clock=fixed_clock).extract(text)
    return make_ctx(text, features=features, prediction=LinearScoringModel().predict(features))


@pytest.fixture
def combiner():
    from scamshield.services.detection import EnsembleCombiner
    return EnsembleCombiner()


class TestRiskThresholds:
    """Tests for score discretization."""

    def test_boundaries(self):
        from scamshield.config import RiskThresholds
        from scamshield.models import RiskLevel

        thresholds = RiskThresholds()
        assert thresholds.level_for(0.0) == RiskLevel.SAFE
        assert thresholds.level_for(0.299) == RiskLevel.SAFE
        assert thresholds.level_for(0.3) == RiskLevel.LOW
        assert thresholds.level_for(0.5) == RiskLevel.MEDIUM
        assert thresholds.level_for(0.7) == RiskLevel.HIGH
        assert thresholds.level_for(0.85) == RiskLevel.CRITICAL
        assert thresholds.level_for(1.0) == RiskLevel.CRITICAL


class TestCombine:
    """Tests for the weighted ensemble."""

    def test_weighted_average(self, combiner):
        from scamshield.models import RiskLevel

        assessment = combiner.combine([signal(0.8), signal(0.2, source="category")], make_ctx())
        assert assessment.risk_score == pytest.approx(0.5)
        assert assessment.risk_level == RiskLevel.MEDIUM
        assert assessment.signals_used == ["category", "keyword"]
        assert assessment.degraded is False

    def test_confidence_weights_scores(self, combiner):
        assessment = combiner.combine(
            [signal(1.0, confidence=0.9, weight=1.0), signal(0.0, confidence=0.1, weight=1.0, source="category")],
            make_ctx(),
        )
        assert assessment.risk_score == pytest.approx(0.9)

    def test_combined_confidence_penalizes_disagreement(self, combiner):
        agree = combiner.combined_confidence([signal(0.5), signal(0.5)])
        disagree = combiner.combined_confidence([signal(0.8), signal(0.2)])
        assert agree == pytest.approx(1.0)
        assert disagree == pytest.approx(0.91)

    def test_order_independent(self, combiner):
        signals = [
            signal(0.83, confidence=0.8, weight=0.2, source="keyword", labels={"urgency"}),
            signal(0.41, confidence=0.85, weight=0.2, source="category"),
            signal(0.97, confidence=0.72, weight=1.2, source="linear_model"),
            signal(0.7, confidence=0.9, weight=0.4, source="external_judgment"),
        ]
        forward = combiner.combine(signals, make_ctx("ด่วน"))
        backward = combiner.combine(list(reversed(signals)), make_ctx("ด่วน"))
        assert forward == backward

    def test_monotone_in_each_signal(self, combiner):
        base = [signal(0.3, source="keyword"), signal(0.3, source="category"), signal(0.3, source="linear_model")]
        baseline = combiner.combine(base, make_ctx("โอนเงินด่วน")).risk_score
        for i in range(len(base)):
            raised = list(base)
            raised[i] = signal(0.6, source=base[i].source)
            assert combiner.combine(raised, make_ctx("โอนเงินด่วน")).risk_score >= baseline

    def test_score_bounds(self, combiner):
        from scamshield.models import RiskLevel

        high = combiner.combine([signal(1.0)], make_ctx())
        low = combiner.combine([signal(0.0)], make_ctx())
        assert high.risk_score == pytest.approx(0.95)
        assert high.risk_level == RiskLevel.CRITICAL
        assert low.risk_score == pytest.approx(0.05)
        assert low.risk_level == RiskLevel.SAFE

    def test_no_signals_is_degraded(self, combiner):
        from scamshield.models import RiskLevel

        assessment = combiner.combine([], make_ctx())
        assert assessment.degraded is True
        assert assessment.allow_feedback is False
        assert assessment.risk_score == 0.5
        assert assessment.risk_level == RiskLevel.MEDIUM
        assert assessment.confidence == 0.2
        assert assessment.labels == ["degraded_mode"]


class TestContextAdjustments:
    """Tests for trust discounts and risk surcharges."""

    def test_trusted_domain_discount(self, combiner):
        from scamshield.models import AnalysisContext, RiskLevel

        ctx = make_ctx(context=AnalysisContext(has_trusted_domains=True))
        assessment = combiner.combine([signal(0.5)], ctx)
        assert assessment.risk_score == pytest.approx(0.35)
        assert assessment.risk_level == RiskLevel.LOW

    def test_discounts_compound(self, combiner):
        from scamshield.models import AnalysisContext

        ctx = make_ctx(context=AnalysisContext(
            has_trusted_domains=True, has_trusted_phones=True, is_official_account=True,
        ))
        assessment = combiner.combine([signal(0.8)], ctx)
        assert assessment.risk_score == pytest.approx(0.8 * 0.7 * 0.8 * 0.6)

    def test_multiple_risk_factors(self, combiner):
        assessment = combiner.combine([signal(0.5)], make_ctx("ด่วน! โอนเงินตอนนี้"))
        assert assessment.risk_score == pytest.approx(0.6)

    def test_outside_business_hours(self, combiner):
        assessment = combiner.combine([signal(0.5)], make_ctx(outside_business_hours=True))
        assert assessment.risk_score == pytest.approx(0.55)

    def test_trusted_business_override(self, combiner):
        from scamshield.models import AnalysisContext, RiskLevel
        from scamshield.services.detection.ensemble import BUSINESS_NOTE
        from scamshield.services.detection.keyword_signal import BUSINESS_LABEL

        ctx = make_ctx(context=AnalysisContext(has_trusted_phones=True))
        assessment = combiner.combine([signal(0.9, labels={BUSINESS_LABEL})], ctx)
        assert assessment.risk_score == pytest.approx(0.1)
        assert assessment.risk_level == RiskLevel.SAFE
        assert "trusted_business_override" in assessment.labels
        assert BUSINESS_NOTE in assessment.recommendations

    def test_business_label_without_trust_is_ignored(self, combiner):
        from scamshield.services.detection.keyword_signal import BUSINESS_LABEL

        assessment = combiner.combine([signal(0.9, labels={BUSINESS_LABEL})], make_ctx())
        assert assessment.risk_score == pytest.approx(0.9)


class TestFalsePositiveGuards:
    """Tests for the safe-conversation and short-message caps."""

    def test_safe_conversation_cap(self, combiner):
        from scamshield.models import RiskLevel

        assessment = combiner.combine([signal(0.9)], analyzed_ctx(SAFE_MESSAGE))
        assert assessment.risk_score == pytest.approx(0.2)
        assert assessment.risk_level == RiskLevel.SAFE
        assert "safe_conversation" in assessment.labels

    def test_short_message_cap(self, combiner):
        from scamshield.models import RiskLevel

        # negative sentiment blocks the safe-conversation guard
        assessment = combiner.combine([signal(0.9)], analyzed_ctx("เสียใจด้วย"))
        assert assessment.risk_score == pytest.approx(0.3)
        assert assessment.risk_level == RiskLevel.LOW
        assert "short_message" in assessment.labels

    def test_risky_short_message_not_capped(self, combiner):
        assessment = combiner.combine([signal(0.9)], analyzed_ctx("โอนเงินด่วน"))
        assert "safe_conversation" not in assessment.labels
        assert "short_message" not in assessment.labels


class TestSeverityBonus:
    """Tests for the category severity floor."""

    def classification(self, key):
        from scamshield.models import ClassificationResult
        from scamshield.services.detection import THREAT_CATEGORIES

        return ClassificationResult(category=THREAT_CATEGORIES[key])

    def test_critical_category_floor(self, combiner):
        from scamshield.models import RiskLevel, ThreatCategoryKey

        ctx = make_ctx(classification=self.classification(ThreatCategoryKey.FINANCIAL_FRAUD))
        assessment = combiner.combine([signal(0.72)], ctx)
        assert assessment.risk_score == pytest.approx(0.8)
        assert assessment.risk_level == RiskLevel.HIGH
        assert "severity_bonus" in assessment.labels

    def test_high_category_floor(self, combiner):
        from scamshield.models import ThreatCategoryKey

        ctx = make_ctx(classification=self.classification(ThreatCategoryKey.ROMANCE_SCAM))
        assert combiner.combine([signal(0.55)], ctx).risk_score == pytest.approx(0.7)
        assert combiner.combine([signal(0.4)], ctx).risk_score == pytest.approx(0.4)

    def test_recommendations_include_category_guidance(self, combiner):
        from scamshield.models import ThreatCategoryKey
        from scamshield.services.detection import THREAT_CATEGORIES

        category = THREAT_CATEGORIES[ThreatCategoryKey.FINANCIAL_FRAUD]
        ctx = make_ctx(classification=self.classification(ThreatCategoryKey.FINANCIAL_FRAUD))
        assessment = combiner.combine([signal(0.72)], ctx)
        assert category.recommendation in assessment.recommendations
        assert assessment.category.key == ThreatCategoryKey.FINANCIAL_FRAUD
