"""
ScamShield Training Buffer

Fixed-size FIFO of training examples keyed by message id. Backs both the
immediate and the batch weight updates.
"""

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Dict, List, Optional

from scamshield.models import FeedbackType
from scamshield.services.detection.features import FeatureVector


@dataclass
class TrainingExample:
    """Feature vector with its current label (1.0 = threat, 0.0 = benign)."""
    message_id: str
    features: FeatureVector
    label: float
    created_at: datetime
    feedback_type: Optional[FeedbackType] = None


class TrainingBuffer:
    """Ring buffer of the last ``maxlen`` examples; oldest dropped first."""

    def __init__(self, maxlen: int = 1000):
        self.maxlen = maxlen
        self._items: Deque[TrainingExample] = deque()
        self._index: Dict[str, TrainingExample] = {}

    def __len__(self) -> int:
        return len(self._items)

    def add(self, example: TrainingExample) -> None:
        previous = self._index.get(example.message_id)
        if previous is not None:
            self._items.remove(previous)

        while len(self._items) >= self.maxlen:
            evicted = self._items.popleft()
            if self._index.get(evicted.message_id) is evicted:
                del self._index[evicted.message_id]

        self._items.append(example)
        self._index[example.message_id] = example

    def get(self, message_id: str) -> Optional[TrainingExample]:
        return self._index.get(message_id)

    def recent(self, n: int) -> List[TrainingExample]:
        """The newest ``n`` examples, oldest first."""
        if n <= 0:
            return []
        return list(self._items)[-n:]
