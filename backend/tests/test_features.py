"""
ScamShield - Feature Extraction Tests
"""

import math
from datetime import datetime, timezone

import pytest

from conftest import PHISHING_MESSAGE, SAFE_MESSAGE, fixed_clock


def make_extractor():
    from scamshield.services.detection import FeatureExtractor
    return FeatureExtractor(clock=fixed_clock)


class TestFeatureVector:
    """Tests for the FeatureVector container."""

    def test_defaults(self):
        from scamshield.services.detection import FeatureVector, FEATURE_NAMES

        vector = FeatureVector()
        assert vector.user_history_risk == 0.5
        assert vector.source_credibility == 0.5
        assert vector.bias == 1.0
        assert set(vector.to_dict()) == set(FEATURE_NAMES)

    def test_booleans_become_floats(self):
        from scamshield.services.detection import FeatureVector

        vector = FeatureVector(has_all_caps=True, has_numbers=False)
        assert vector.has_all_caps == 1.0
        assert vector.has_numbers == 0.0

    def test_non_finite_values_fall_back_to_default(self):
        from scamshield.services.detection import FeatureVector

        vector = FeatureVector(message_length=math.nan, user_history_risk=math.inf)
        assert vector.message_length == 0.0
        assert vector.user_history_risk == 0.5

    def test_from_dict_ignores_unknown_keys(self):
        from scamshield.services.detection import FeatureVector

        vector = FeatureVector.from_dict({"url_count": 2, "not_a_feature": 9})
        assert vector.url_count == 2.0
        assert vector.phone_number_count == 0.0


class TestFeatureExtractor:
    """Tests for FeatureExtractor.extract."""

    def test_empty_text_returns_defaults(self):
        from scamshield.services.detection import FeatureVector

        extractor = make_extractor()
        assert extractor.extract("") == FeatureVector()
        assert extractor.extract("   ") == FeatureVector()

    def test_casual_message(self):
        features = make_extractor().extract(SAFE_MESSAGE)

        assert features.message_length == len(SAFE_MESSAGE) / 160
        assert features.urgency_word_count == 0
        assert features.financial_word_count == 0
        assert features.reward_word_count == 0
        assert features.sentiment_score > 0
        assert features.is_business_hours == 1.0
        assert features.is_weekend == 0.0

    def test_phishing_message(self):
        features = make_extractor().extract(PHISHING_MESSAGE)

        # ด่วน + ทันที
        assert features.urgency_word_count == pytest.approx(2.4)
        # บัญชี + ระงับบัญชี
        assert features.financial_word_count == pytest.approx(2.8)
        assert features.phone_number_count == 1
        assert features.has_numbers == 1.0
        assert features.formality_level > 0
        assert features.sentiment_score < 0

    def test_entity_and_flag_features(self):
        features = make_extractor().extract(
            "URGENT!! โอน 5,000 บาท ภายใน 24 ชั่วโมง https://example.com โทร 089-123-4567"
        )
        assert features.has_all_caps == 1.0
        assert features.has_multiple_exclamation == 1.0
        assert features.has_money_amount == 1.0
        assert features.has_time_limit == 1.0
        assert features.url_count == 1
        assert features.phone_number_count == 1

    def test_message_length_is_capped(self):
        features = make_extractor().extract("ก" * 500)
        assert features.message_length == 1.0

    def test_context_flags(self):
        from scamshield.models import AnalysisContext

        context = AnalysisContext(
            has_trusted_domains=True,
            is_official_account=True,
            user_history=[0.9, 0.1, 0.2, 0.4, 0.6, 0.8],
        )
        features = make_extractor().extract("แจ้งยอดคงเหลือ", context)

        assert features.has_trusted_domain == 1.0
        assert features.has_trusted_phone == 0.0
        assert features.source_credibility == 1.0
        # mean of the last five entries
        assert features.user_history_risk == pytest.approx(0.42)
        assert features.message_frequency == 0.6

    def test_caller_entities_take_precedence(self):
        from scamshield.models import AnalysisContext

        context = AnalysisContext(urls=[], phone_numbers=["0891234567", "0899999999"])
        features = make_extractor().extract("ดูที่ https://example.com", context)

        assert features.url_count == 0
        assert features.phone_number_count == 2

    def test_weekend_night_from_received_at(self):
        from scamshield.models import AnalysisContext

        # Saturday 22:00 Bangkok
        received = datetime(2026, 10, 17, 15, 0, tzinfo=timezone.utc)
        context = AnalysisContext(received_at=received)
        extractor = make_extractor()
        features = extractor.extract("สวัสดี", context)

        assert features.is_weekend == 1.0
        assert features.is_business_hours == 0.0
        assert extractor.is_outside_business_hours(context) is True
        assert extractor.is_outside_business_hours() is False

    def test_extraction_is_deterministic(self):
        extractor = make_extractor()
        assert extractor.extract(PHISHING_MESSAGE) == extractor.extract(PHISHING_MESSAGE)

    def test_unknown_timezone(self):
        from scamshield.services.detection import FeatureExtractor
        from scamshield.utils.exceptions import ConfigurationError

        with pytest.raises(ConfigurationError):
            FeatureExtractor(timezone="Mars/Olympus_Mons")
