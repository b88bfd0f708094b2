"""
ScamShield Feature Extractor

Converts raw message text plus caller context into the fixed-shape numeric
feature vector consumed by the linear scoring model.

Everything here is a pure function of (text, context) except the
business-hours/weekend flags, which read the injected clock unless the
caller supplied the message timestamp.
"""

import logging
import math
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from scamshield.models import AnalysisContext
from scamshield.utils.constants import (
    ALL_CAPS_PATTERN,
    BUSINESS_HOURS,
    CASUAL_BONUS,
    CASUAL_MAX_LENGTH,
    CASUAL_WORDS,
    FINANCIAL_TERMS,
    FORMAL_MARKERS,
    FORMALITY_STEP,
    HISTORY_FREQUENCY_SCALE,
    HISTORY_WINDOW,
    MONEY_PATTERN,
    NEGATIVE_WORDS,
    NUMBER_PATTERN,
    POLITE_PARTICLES,
    POSITIVE_WORDS,
    READABILITY_WORDS_PER_SENTENCE,
    REWARD_TERMS,
    SENTENCE_SPLIT_PATTERN,
    SENTIMENT_STEP,
    SMS_SEGMENT_LENGTH,
    TIME_LIMIT_PATTERN,
    URGENCY_TERMS,
)
from scamshield.utils.exceptions import ConfigurationError
from scamshield.utils.helpers import (
    Clock,
    clamp,
    ensure_aware,
    extract_emails,
    extract_phone_numbers,
    extract_urls,
    utc_now,
)

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class FeatureVector:
    """Named numeric features. Booleans are stored as 0.0/1.0."""
    message_length: float = 0.0
    urgency_word_count: float = 0.0
    financial_word_count: float = 0.0
    reward_word_count: float = 0.0
    phone_number_count: float = 0.0
    url_count: float = 0.0
    has_multiple_exclamation: float = 0.0
    has_all_caps: float = 0.0
    has_numbers: float = 0.0
    has_time_limit: float = 0.0
    has_money_amount: float = 0.0
    has_trusted_domain: float = 0.0
    has_trusted_phone: float = 0.0
    is_business_hours: float = 0.0
    is_weekend: float = 0.0
    readability_score: float = 0.0
    sentiment_score: float = 0.0
    formality_level: float = 0.0
    user_history_risk: float = 0.5
    source_credibility: float = 0.5
    message_frequency: float = 0.0
    bias: float = 1.0

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool):
                value = 1.0 if value else 0.0
            value = float(value)
            if not math.isfinite(value):
                value = f.default
            setattr(self, f.name, value)

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in FEATURE_NAMES}

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "FeatureVector":
        """Build from a possibly partial mapping; missing fields keep defaults."""
        return cls(**{k: v for k, v in data.items() if k in FEATURE_NAMES})


FEATURE_NAMES = tuple(f.name for f in fields(FeatureVector))


@dataclass
class MessageEntities:
    """URLs, phone numbers and emails referenced by a message."""
    urls: List[str] = field(default_factory=list)
    phone_numbers: List[str] = field(default_factory=list)
    emails: List[str] = field(default_factory=list)

    @classmethod
    def resolve(cls, text: str, context: Optional[AnalysisContext] = None) -> "MessageEntities":
        """Prefer caller-extracted entities, fall back to regex extraction."""
        context = context or AnalysisContext()
        return cls(
            urls=list(context.urls) if context.urls is not None else extract_urls(text),
            phone_numbers=(
                list(context.phone_numbers) if context.phone_numbers is not None
                else extract_phone_numbers(text)
            ),
            emails=list(context.emails) if context.emails is not None else extract_emails(text),
        )


# =============================================================================
# EXTRACTOR
# =============================================================================

class FeatureExtractor:
    """Turns text + context into a FeatureVector."""

    def __init__(self, clock: Optional[Clock] = None, timezone: str = "Asia/Bangkok"):
        self.clock = clock or utc_now
        try:
            self.tz = ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone: {timezone}") from e

    def extract(self, text: str, context: Optional[AnalysisContext] = None) -> FeatureVector:
        """
        Extract the feature vector.

        Never raises: a failure is logged and the default vector returned.
        """
        context = context or AnalysisContext()
        if not text or not text.strip():
            return FeatureVector()

        try:
            return self._extract(text, context)
        except Exception as e:
            logger.warning(f"Feature extraction failed, using defaults: {e}", exc_info=True)
            return FeatureVector()

    def _extract(self, text: str, context: AnalysisContext) -> FeatureVector:
        lowered = text.lower()
        entities = MessageEntities.resolve(text, context)
        local_time = self._local_time(context.received_at)

        return FeatureVector(
            message_length=min(len(text) / SMS_SEGMENT_LENGTH, 1.0),
            urgency_word_count=weighted_hits(lowered, URGENCY_TERMS),
            financial_word_count=weighted_hits(lowered, FINANCIAL_TERMS),
            reward_word_count=weighted_hits(lowered, REWARD_TERMS),
            phone_number_count=len(entities.phone_numbers),
            url_count=len(entities.urls),
            has_multiple_exclamation=text.count("!") >= 2,
            has_all_caps=bool(ALL_CAPS_PATTERN.search(text)),
            has_numbers=bool(NUMBER_PATTERN.search(text)),
            has_time_limit=bool(TIME_LIMIT_PATTERN.search(text)),
            has_money_amount=bool(MONEY_PATTERN.search(text)),
            has_trusted_domain=context.has_trusted_domains,
            has_trusted_phone=context.has_trusted_phones,
            is_business_hours=BUSINESS_HOURS[0] <= local_time.hour <= BUSINESS_HOURS[1],
            is_weekend=local_time.weekday() >= 5,
            readability_score=readability(text),
            sentiment_score=sentiment(text),
            formality_level=formality(text),
            user_history_risk=history_risk(context.user_history),
            source_credibility=source_credibility(context),
            message_frequency=min(len(context.user_history) / HISTORY_FREQUENCY_SCALE, 1.0),
        )

    def _local_time(self, received_at: Optional[datetime]) -> datetime:
        moment = ensure_aware(received_at or self.clock())
        return moment.astimezone(self.tz)

    def is_outside_business_hours(self, context: Optional[AnalysisContext] = None) -> bool:
        """Night-time or weekend in the configured timezone."""
        local_time = self._local_time(context.received_at if context else None)
        in_hours = BUSINESS_HOURS[0] <= local_time.hour <= BUSINESS_HOURS[1]
        return local_time.weekday() >= 5 or not in_hours


# =============================================================================
# HEURISTICS
# =============================================================================

def weighted_hits(lowered_text: str, lexicon: Dict[str, float]) -> float:
    """Sum of weights of lexicon terms present in the text."""
    return sum(weight for term, weight in lexicon.items() if term in lowered_text)


def readability(text: str) -> float:
    """Words per sentence relative to a 15-word sentence, capped at 1."""
    words = text.split()
    if not words:
        return 0.0
    sentences = [s for s in SENTENCE_SPLIT_PATTERN.split(text) if s.strip()] or [text]
    return min((len(words) / len(sentences)) / READABILITY_WORDS_PER_SENTENCE, 1.0)


def sentiment(text: str) -> float:
    """Lexicon sentiment in [-1, 1]; casual small talk leans positive."""
    score = 0.0
    for word in POSITIVE_WORDS:
        if word in text:
            score += SENTIMENT_STEP
    for word in NEGATIVE_WORDS:
        if word in text:
            score -= SENTIMENT_STEP
    if len(text) < CASUAL_MAX_LENGTH and any(word in text for word in CASUAL_WORDS):
        score += CASUAL_BONUS
    return clamp(score, -1.0, 1.0)


def formality(text: str) -> float:
    level = sum(FORMALITY_STEP for marker in FORMAL_MARKERS if marker in text)
    if any(p in text for p in POLITE_PARTICLES):
        level += FORMALITY_STEP
    return min(level, 1.0)


def history_risk(history: List[float]) -> float:
    """Mean risk of the most recent messages; 0.5 without history."""
    recent = [clamp(v) for v in history[-HISTORY_WINDOW:]]
    if not recent:
        return 0.5
    return sum(recent) / len(recent)


def source_credibility(context: AnalysisContext) -> float:
    credibility = 0.5
    if context.has_trusted_domains:
        credibility += 0.3
    if context.has_trusted_phones:
        credibility += 0.3
    if context.is_official_account:
        credibility += 0.4
    return min(credibility, 1.0)
