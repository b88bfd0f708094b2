"""
ScamShield Pattern/Keyword Signal

Scans the suspicious-term lexicon. The score is the strongest matched term,
not the sum, so repeating a term cannot push the score up.
"""

import logging
from typing import List, Optional, Tuple

from scamshield.models import SignalResult, SignalSource
from scamshield.utils.constants import (
    BUSINESS_COMMUNICATION_TERMS,
    KNOWN_ORGANIZATION_TERMS,
    SUSPICIOUS_TERMS,
)

logger = logging.getLogger(__name__)

BUSINESS_LABEL = "legitimate_business_communication"
ORGANIZATION_LABEL = "known_organization"


class KeywordSignal:
    """Lexicon scan producing a max-weight sub-score."""

    def __init__(
        self,
        lexicon: Optional[List[Tuple[str, float, str]]] = None,
        weight: float = 0.2,
        confidence: float = 0.8,
    ):
        self.lexicon = [(term.lower(), w, tag) for term, w, tag in (lexicon or SUSPICIOUS_TERMS)]
        self.weight = weight
        self.confidence = confidence

    def matches(self, text: str) -> List[Tuple[str, float, str]]:
        """All lexicon entries present in the text, in lexicon order."""
        lowered = (text or "").lower()
        return [entry for entry in self.lexicon if entry[0] in lowered]

    def score(self, text: str) -> SignalResult:
        matched = self.matches(text)
        score = min(max((w for _, w, _ in matched), default=0.0), 1.0)

        labels = set()
        for term, _, tag in matched:
            labels.add(tag)
            labels.add(f"keyword:{term}")

        if any(term in text for term in BUSINESS_COMMUNICATION_TERMS):
            labels.add(BUSINESS_LABEL)
        if any(term in text for term in KNOWN_ORGANIZATION_TERMS):
            labels.add(ORGANIZATION_LABEL)

        if matched:
            logger.debug(f"Keyword signal matched {len(matched)} terms, score={score:.2f}")

        return SignalResult(
            source=SignalSource.KEYWORD.value,
            score=score,
            confidence=self.confidence,
            weight=self.weight,
            labels=frozenset(labels),
        )
