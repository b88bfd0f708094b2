"""
ScamShield Category Classifier

Matches message entities against the IOC table and, failing that, infers a
threat category from ordered keyword sets. The category severity later
feeds the ensemble combiner as a severity bonus.
"""

import logging
from typing import Iterable, List, Optional

from scamshield.models import (
    ClassificationResult,
    IOC,
    IOCType,
    SignalResult,
    SignalSource,
    ThreatCategory,
    ThreatCategoryKey,
)
from scamshield.utils.exceptions import InvalidIOCError
from scamshield.utils.helpers import Clock, domain_matches, extract_domain, normalize_phone, utc_now

from .features import MessageEntities
from .taxonomy import (
    CATEGORY_KEYWORDS,
    CATEGORY_SEVERITY_RISK,
    DEFAULT_IOCS,
    GENERIC_TIPS,
    IOC_SEVERITY_RISK,
    THREAT_CATEGORIES,
    URGENCY_MARKERS,
    URGENCY_RISK,
)

logger = logging.getLogger(__name__)


# =============================================================================
# IOC STORE
# =============================================================================

class IOCStore:
    """In-memory IOC table. Only ``add`` writes to it."""

    def __init__(self, iocs: Optional[Iterable[IOC]] = None):
        self._iocs: List[IOC] = []
        for ioc in (DEFAULT_IOCS if iocs is None else iocs):
            self.add(ioc)

    def __len__(self) -> int:
        return len(self._iocs)

    def all(self) -> List[IOC]:
        return list(self._iocs)

    def add(self, ioc: IOC) -> IOC:
        """Add an IOC, normalizing its value. Re-adding the same value replaces it."""
        value = _normalize_value(ioc.type, ioc.value)
        if not value:
            raise InvalidIOCError(f"Empty IOC value for type {ioc.type.value}")

        normalized = ioc.model_copy(update={"value": value})
        self._iocs = [
            existing for existing in self._iocs
            if not (existing.type == normalized.type and existing.value == value)
        ]
        self._iocs.append(normalized)
        logger.info(f"IOC added: {normalized.type.value}={value} ({normalized.severity.value})")
        return normalized

    def match(self, entities: MessageEntities) -> List[IOC]:
        """Return IOCs referenced by the entities, in table order."""
        hosts = [h for h in (extract_domain(u) for u in entities.urls) if h]
        hosts.extend(h for h in (extract_domain(e) for e in entities.emails) if h)
        urls = [u.lower().rstrip("/") for u in entities.urls]
        phones = {normalize_phone(p) for p in entities.phone_numbers}
        emails = {e.lower() for e in entities.emails}

        matches = []
        for ioc in self._iocs:
            if ioc.type == IOCType.DOMAIN:
                hit = any(domain_matches(h, ioc.value) for h in hosts)
            elif ioc.type == IOCType.URL:
                hit = any(u.startswith(ioc.value) for u in urls)
            elif ioc.type == IOCType.PHONE:
                hit = ioc.value in phones
            else:
                hit = ioc.value in emails
            if hit:
                matches.append(ioc)
        return matches


def _normalize_value(ioc_type: IOCType, value: str) -> str:
    value = (value or "").strip()
    if ioc_type == IOCType.PHONE:
        return normalize_phone(value)
    if ioc_type == IOCType.DOMAIN:
        return extract_domain(value) or ""
    if ioc_type == IOCType.URL:
        return value.lower().rstrip("/")
    return value.lower()


# =============================================================================
# CLASSIFIER
# =============================================================================

class CategoryClassifier:
    """IOC-first, keyword-fallback threat category classifier."""

    def __init__(
        self,
        iocs: Optional[IOCStore] = None,
        weight: float = 0.2,
        confidence: float = 0.85,
        clock: Optional[Clock] = None,
    ):
        self.iocs = iocs if iocs is not None else IOCStore()
        self.weight = weight
        self.confidence = confidence
        self.clock = clock or utc_now

    def classify(self, text: str, entities: Optional[MessageEntities] = None) -> ClassificationResult:
        text = text or ""
        entities = entities or MessageEntities.resolve(text)
        lowered = text.lower()

        ioc_matches = self.iocs.match(entities)
        matched_keywords: List[str] = []
        category: Optional[ThreatCategory] = None

        if ioc_matches:
            # max() keeps the first of equally severe matches
            worst = max(ioc_matches, key=lambda i: i.severity.rank)
            category = THREAT_CATEGORIES[worst.category]
            logger.info(f"IOC match: {len(ioc_matches)} indicators, category={category.key.value}")
        else:
            key, matched_keywords = infer_category(lowered)
            if key is not None:
                category = THREAT_CATEGORIES[key]

        return ClassificationResult(
            category=category,
            ioc_matches=ioc_matches,
            matched_keywords=matched_keywords,
            risk_score=self._risk_score(lowered, category, ioc_matches),
        )

    def _risk_score(self, lowered: str, category: Optional[ThreatCategory], ioc_matches: List[IOC]) -> float:
        score = sum(IOC_SEVERITY_RISK[ioc.severity] for ioc in ioc_matches)
        if category is not None:
            score += CATEGORY_SEVERITY_RISK[category.severity]
        if any(marker in lowered for marker in URGENCY_MARKERS):
            score += URGENCY_RISK
        return min(score, 1.0)

    def to_signal(self, result: ClassificationResult) -> SignalResult:
        labels = set()
        if result.category is not None:
            labels.add(f"category:{result.category.key.value}")
        if result.ioc_matches:
            labels.add("ioc_match")
        return SignalResult(
            source=SignalSource.CATEGORY.value,
            score=result.risk_score,
            confidence=self.confidence,
            weight=self.weight,
            labels=frozenset(labels),
        )

    def add_ioc(self, ioc: IOC) -> IOC:
        """Administrative write to the IOC table."""
        if ioc.added_at is None:
            ioc = ioc.model_copy(update={"added_at": self.clock()})
        return self.iocs.add(ioc)

    @staticmethod
    def get_category(key: ThreatCategoryKey) -> ThreatCategory:
        return THREAT_CATEGORIES[ThreatCategoryKey(key)]

    @staticmethod
    def list_categories() -> List[ThreatCategory]:
        return sorted(THREAT_CATEGORIES.values(), key=lambda c: c.id)

    @staticmethod
    def educational_tips(category: Optional[ThreatCategory]) -> List[str]:
        tips = list(category.educational_tips) if category else []
        return tips + GENERIC_TIPS


def infer_category(lowered_text: str):
    """First keyword set with a hit wins. Returns (key or None, matched keywords)."""
    for key, keywords in CATEGORY_KEYWORDS:
        matched = [kw for kw in keywords if kw in lowered_text]
        if matched:
            return key, matched
    return None, []
