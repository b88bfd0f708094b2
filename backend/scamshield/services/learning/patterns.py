"""
ScamShield Pattern Database

Running accuracy tally for lexical scam patterns seen in feedback.
Bounded: when full, the least frequent (then least recently seen)
patterns are evicted.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from scamshield.models import FeedbackType, PatternStat
from scamshield.services.detection.features import MessageEntities
from scamshield.utils.constants import (
    DEFAULT_MESSAGE_CONTEXT,
    LEARNING_PATTERNS,
    MESSAGE_CONTEXT_RULES,
    SEED_PATTERNS,
)
from scamshield.utils.helpers import Clock, utc_now

logger = logging.getLogger(__name__)


def extract_patterns(text: str, entities: Optional[MessageEntities] = None) -> List[str]:
    """Lexical patterns plus coarse phone/url count tokens."""
    text = text or ""
    entities = entities or MessageEntities.resolve(text)

    patterns: List[str] = []
    for regex in LEARNING_PATTERNS:
        for match in regex.finditer(text):
            if match.group(0) not in patterns:
                patterns.append(match.group(0))

    if entities.phone_numbers:
        patterns.append(f"phone_pattern_{len(entities.phone_numbers)}")
    if entities.urls:
        patterns.append(f"url_pattern_{len(entities.urls)}")
    return patterns


def message_context(text: str) -> str:
    for name, regex in MESSAGE_CONTEXT_RULES:
        if regex.search(text or ""):
            return name
    return DEFAULT_MESSAGE_CONTEXT


class PatternDatabase:
    """pattern -> PatternStat store."""

    def __init__(
        self,
        max_patterns: int = 5000,
        blend_rate: float = 0.2,
        clock: Optional[Clock] = None,
        seed: bool = True,
    ):
        self.max_patterns = max_patterns
        self.blend_rate = blend_rate
        self.clock = clock or utc_now
        self._stats: Dict[str, PatternStat] = {}
        if seed:
            self._seed()

    def _seed(self) -> None:
        now = self.clock()
        for pattern, (accuracy, context) in SEED_PATTERNS.items():
            self._stats[pattern] = PatternStat(
                pattern=pattern,
                frequency=1,
                accuracy=accuracy,
                contexts={context},
                last_seen=now,
            )

    def __len__(self) -> int:
        return len(self._stats)

    def __contains__(self, pattern: str) -> bool:
        return pattern in self._stats

    def get(self, pattern: str) -> Optional[PatternStat]:
        return self._stats.get(pattern)

    def all(self) -> List[PatternStat]:
        return list(self._stats.values())

    def record(
        self,
        pattern: str,
        feedback_type: FeedbackType,
        context: str,
        confidence: float,
        seen_at: Optional[datetime] = None,
    ) -> PatternStat:
        """Merge one feedback observation into the pattern's stats."""
        seen_at = seen_at or self.clock()
        stat = self._stats.get(pattern)
        if stat is None:
            stat = PatternStat(pattern=pattern, frequency=0, accuracy=0.5, last_seen=seen_at)
            self._stats[pattern] = stat

        stat.frequency += 1
        if feedback_type == FeedbackType.CORRECT:
            stat.accuracy = self._blend(stat.accuracy, 1.0)
        elif feedback_type.is_negative:
            stat.accuracy = self._blend(stat.accuracy, 0.0)
            stat.needs_review = True
        stat.contexts.add(context)
        stat.last_seen = max(stat.last_seen, seen_at)
        stat.user_confidence += (confidence - stat.user_confidence) / stat.frequency

        if len(self._stats) > self.max_patterns:
            self._evict()
        return stat

    def _blend(self, current: float, target: float) -> float:
        return (1 - self.blend_rate) * current + self.blend_rate * target

    def _evict(self) -> None:
        overflow = len(self._stats) - self.max_patterns
        victims = sorted(self._stats.values(), key=lambda s: (s.frequency, s.last_seen))[:overflow]
        for stat in victims:
            del self._stats[stat.pattern]
        logger.info(f"Evicted {len(victims)} patterns (capacity {self.max_patterns})")

    def needing_review(self, accuracy_below: float = 0.6, limit: int = 10) -> List[PatternStat]:
        flagged = [s for s in self._stats.values() if s.needs_review or s.accuracy < accuracy_below]
        flagged.sort(key=lambda s: (-s.frequency, s.pattern))
        return flagged[:limit]

    def learned(self, accuracy_above: float = 0.7, limit: int = 20) -> List[PatternStat]:
        good = [s for s in self._stats.values() if s.accuracy > accuracy_above]
        good.sort(key=lambda s: (-s.user_confidence, s.pattern))
        return good[:limit]

    def merge(self, stats: Iterable[PatternStat]) -> int:
        """
        Merge imported stats. Idempotent: merging the same snapshot twice
        leaves the store unchanged. Returns the number of new patterns.
        """
        added = 0
        for incoming in stats:
            existing = self._stats.get(incoming.pattern)
            if existing is None:
                self._stats[incoming.pattern] = incoming.model_copy(deep=True)
                added += 1
                continue
            if incoming.last_seen >= existing.last_seen:
                existing.accuracy = incoming.accuracy
                existing.user_confidence = incoming.user_confidence
            existing.frequency = max(existing.frequency, incoming.frequency)
            existing.contexts |= incoming.contexts
            existing.needs_review = existing.needs_review or incoming.needs_review
            existing.last_seen = max(existing.last_seen, incoming.last_seen)

        if len(self._stats) > self.max_patterns:
            self._evict()
        return added
