"""
ScamShield Feedback Learning System

Accepts user corrections against prior assessments and closes the loop:

- high-confidence feedback triggers an immediate single-example gradient
  nudge on the linear model weights
- everything else is queued and applied in a batch gradient step once the
  queue reaches the configured batch size
- every feedback record updates the pattern-accuracy database and the
  aggregate learning metrics

All writes to weights and patterns go through ``self._lock``.
"""

import logging
import math
import threading
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from scamshield.config.scoring import LearningPolicy
from scamshield.models import (
    Assessment,
    FeedbackInput,
    FeedbackRecord,
    FeedbackType,
    LearningMetrics,
    PatternStat,
    ProcessingSummary,
    RiskLevel,
)
from scamshield.services.detection.features import FEATURE_NAMES, FeatureExtractor, FeatureVector
from scamshield.services.detection.linear_model import ModelWeights
from scamshield.utils.constants import ACCURACY_WINDOW_DAYS
from scamshield.utils.exceptions import InvalidFeedbackError, LearningDataError, LearningUpdateError
from scamshield.utils.helpers import Clock, ensure_aware, generate_id, sigmoid, utc_now

from .patterns import PatternDatabase, extract_patterns, message_context
from .training import TrainingBuffer, TrainingExample

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class FeedbackLearningSystem:
    """Online learning over ModelWeights plus pattern/metric bookkeeping."""

    def __init__(
        self,
        weights: ModelWeights,
        patterns: PatternDatabase,
        training: TrainingBuffer,
        extractor: FeatureExtractor,
        policy: Optional[LearningPolicy] = None,
        feedback_store: Optional["OrderedDict[str, FeedbackRecord]"] = None,
        clock: Optional[Clock] = None,
    ):
        self.weights = weights
        self.patterns = patterns
        self.training = training
        self.extractor = extractor
        self.policy = policy or LearningPolicy()
        self.feedback: "OrderedDict[str, FeedbackRecord]" = (
            feedback_store if feedback_store is not None else OrderedDict()
        )
        self.clock = clock or utc_now
        self.last_learning_update: Optional[datetime] = None
        self._lock = threading.RLock()

    # =========================================================================
    # SUBMISSION
    # =========================================================================

    def record_feedback(
        self,
        message_id: str,
        original_message: str,
        original_assessment: Union[Assessment, Dict[str, Any]],
        feedback: Union[FeedbackInput, Dict[str, Any]],
        user_id: Optional[str] = None,
    ) -> str:
        """
        Validate and store feedback, then route it to the immediate or batch path.

        Raises:
            InvalidFeedbackError: required fields missing or out of range.
                Nothing is recorded in that case.
        """
        record = self._build_record(message_id, original_message, original_assessment, feedback, user_id)

        with self._lock:
            self._store(record)
            self._update_patterns(record)

            if record.confidence > self.policy.immediate_confidence_threshold:
                try:
                    self._apply_immediate(record)
                except Exception as e:
                    logger.error(f"Immediate update failed for feedback {record.id}, queued for retry: {e}", exc_info=True)

            if self.pending_count() >= self.policy.batch_size:
                self._process_batch()

        logger.info(
            f"Feedback {record.id} recorded: type={record.feedback_type.value} "
            f"confidence={record.confidence:.2f} processed={record.processed}"
        )
        return record.id

    def _build_record(self, message_id, original_message, original_assessment, feedback, user_id) -> FeedbackRecord:
        try:
            if not isinstance(feedback, FeedbackInput):
                feedback = FeedbackInput.model_validate(feedback or {})
            return FeedbackRecord(
                id=generate_id(),
                message_id=message_id or "",
                original_message=original_message or "",
                original_assessment=original_assessment,
                feedback_type=feedback.feedback_type,
                confidence=feedback.confidence,
                user_comment=feedback.user_comment,
                corrected_category=feedback.corrected_category,
                corrected_risk_level=feedback.corrected_risk_level,
                user_id=user_id,
                created_at=self.clock(),
            )
        except PydanticValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            raise InvalidFeedbackError(
                f"Invalid feedback: {', '.join(fields)}",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    def remember(self, message_id: str, features: FeatureVector, assessment: Assessment) -> None:
        """Keep an analyzed message as a training example for later feedback."""
        example = TrainingExample(
            message_id=message_id,
            features=features,
            label=verdict_label(assessment.risk_level),
            created_at=assessment.analyzed_at or self.clock(),
        )
        with self._lock:
            self.training.add(example)

    def _store(self, record: FeedbackRecord) -> None:
        """Store a record, evicting the oldest processed records first when full."""
        self.feedback[record.id] = record
        while len(self.feedback) > self.policy.max_feedback_storage:
            victim = next((key for key, r in self.feedback.items() if r.processed), None)
            if victim is None:
                victim = next(iter(self.feedback))
                logger.warning(f"Feedback store full of pending records, dropping {victim}")
            del self.feedback[victim]

    # =========================================================================
    # LEARNING PATHS
    # =========================================================================

    def _update_patterns(self, record: FeedbackRecord) -> None:
        try:
            context = message_context(record.original_message)
            for pattern in extract_patterns(record.original_message):
                self.patterns.record(
                    pattern,
                    record.feedback_type,
                    context,
                    record.confidence,
                    seen_at=record.created_at,
                )
        except Exception as e:
            logger.error(f"Pattern update failed for feedback {record.id}: {e}", exc_info=True)

    def _apply_immediate(self, record: FeedbackRecord) -> None:
        example = self._label_example(record)
        error = example.label - self._predict(example.features, self.weights.snapshot())
        rate = self.policy.immediate_learning_rate
        for name in FEATURE_NAMES:
            value = getattr(example.features, name)
            if value:
                self.weights.nudge(name, rate * error * value)
        self._mark_processed(record)
        self.last_learning_update = self.clock()
        logger.debug(f"Immediate update for feedback {record.id}: error={error:+.3f}")

    def _process_batch(self) -> ProcessingSummary:
        summary = ProcessingSummary()
        ready: List[FeedbackRecord] = []

        for record in [r for r in self.feedback.values() if not r.processed]:
            try:
                self._label_example(record)
                ready.append(record)
            except Exception as e:
                summary.failed += 1
                summary.failed_ids.append(record.id)
                logger.error(f"Batch update failed for feedback {record.id}, left for retry: {e}", exc_info=True)

        if not ready:
            return summary

        try:
            summary.weights_updated = self._batch_gradient_step()
        except Exception as e:
            logger.error(f"Batch gradient step failed, {len(ready)} records left for retry: {e}", exc_info=True)
            summary.failed += len(ready)
            summary.failed_ids.extend(r.id for r in ready)
            return summary

        for record in ready:
            self._mark_processed(record)
        summary.processed = len(ready)
        self.last_learning_update = self.clock()
        logger.info(f"Batch learning processed {summary.processed} feedback records ({summary.failed} failed)")
        return summary

    def _batch_gradient_step(self) -> bool:
        window = self.training.recent(self.policy.training_window)
        if not window:
            return False

        current = self.weights.snapshot()
        errors = [example.label - self._predict(example.features, current) for example in window]
        for name in FEATURE_NAMES:
            gradient = math.fsum(
                error * getattr(example.features, name) for error, example in zip(errors, window)
            ) / len(window)
            if not math.isfinite(gradient):
                raise LearningUpdateError(f"Non-finite gradient for feature {name}")
            if gradient:
                self.weights.nudge(name, self.policy.learning_rate * gradient)
        return True

    def process_pending(self) -> ProcessingSummary:
        """Force a batch pass over every unprocessed record."""
        with self._lock:
            return self._process_batch()

    def _label_example(self, record: FeedbackRecord) -> TrainingExample:
        example = self.training.get(record.message_id)
        if example is None:
            features = self.extractor.extract(record.original_message)
            example = TrainingExample(
                message_id=record.message_id,
                features=features,
                label=verdict_label(record.original_assessment.risk_level),
                created_at=record.created_at,
            )
            self.training.add(example)

        example.label = feedback_label(record)
        example.feedback_type = record.feedback_type
        return example

    @staticmethod
    def _predict(features: FeatureVector, weights: Dict[str, float]) -> float:
        return sigmoid(math.fsum(weights.get(name, 0.1) * getattr(features, name) for name in FEATURE_NAMES))

    def _mark_processed(self, record: FeedbackRecord) -> None:
        record.processed = True
        record.processed_at = self.clock()

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def pending_count(self) -> int:
        return sum(1 for r in self.feedback.values() if not r.processed)

    def get_learning_metrics(self) -> LearningMetrics:
        records = list(self.feedback.values())
        counts = {t: 0 for t in FeedbackType}
        for r in records:
            counts[r.feedback_type] += 1
        processed = sum(1 for r in records if r.processed)

        return LearningMetrics(
            total_feedback=len(records),
            correct_predictions=counts[FeedbackType.CORRECT],
            false_positives=counts[FeedbackType.FALSE_POSITIVE],
            false_negatives=counts[FeedbackType.FALSE_NEGATIVE],
            partially_correct=counts[FeedbackType.PARTIALLY_CORRECT],
            pending_feedback=len(records) - processed,
            processed_feedback=processed,
            accuracy_improvement=self._accuracy_improvement(records),
            pattern_count=len(self.patterns),
            model_version=f"v1.0.{processed}",
            last_learning_update=self.last_learning_update,
        )

    def _accuracy_improvement(self, records: List[FeedbackRecord]) -> float:
        """Correct-rate over the last 7 days minus the prior 7 days."""
        now = self.clock()
        window = timedelta(days=ACCURACY_WINDOW_DAYS)
        recent = [r for r in records if now - window < r.created_at <= now]
        prior = [r for r in records if now - 2 * window < r.created_at <= now - window]
        if not recent or not prior:
            return 0.0
        return correct_rate(recent) - correct_rate(prior)

    def get_improvement_recommendations(self) -> List[str]:
        metrics = self.get_learning_metrics()
        total = metrics.total_feedback
        recs: List[str] = []

        if total and metrics.false_positives / total > 0.15:
            recs.append("High false-positive rate: relax scoring for messages from trusted sources")
        if total and metrics.false_negatives / total > 0.10:
            recs.append("Threats are slipping through: add detection patterns for newly reported scams")
        review = self.get_patterns_needing_review()
        if len(review) > 5:
            recs.append(f"{len(review)} patterns need review")
        if total < 100:
            recs.append("More feedback is needed for reliable learning")
        if metrics.accuracy_improvement < 0:
            recs.append("Accuracy dropped over the last week: review recent weight changes")
        elif metrics.accuracy_improvement > 0.1:
            recs.append("Accuracy is improving steadily")
        return recs

    def get_patterns_needing_review(self) -> List[PatternStat]:
        return self.patterns.needing_review(self.policy.review_accuracy, self.policy.review_limit)

    def get_learned_patterns(self, limit: int = 20) -> List[PatternStat]:
        return self.patterns.learned(self.policy.learned_accuracy, limit)

    # =========================================================================
    # DURABILITY
    # =========================================================================

    def export_learning_data(self) -> Dict[str, Any]:
        """JSON-serializable snapshot of feedback, patterns and weights."""
        with self._lock:
            return {
                "version": SNAPSHOT_VERSION,
                "exported_at": self.clock().isoformat(),
                "feedback": [r.model_dump(mode="json") for r in self.feedback.values()],
                "patterns": [p.model_dump(mode="json") for p in self.patterns.all()],
                "weights": self.weights.snapshot(),
                "metrics": self.get_learning_metrics().model_dump(mode="json"),
                "last_learning_update": (
                    self.last_learning_update.isoformat() if self.last_learning_update else None
                ),
            }

    def import_learning_data(self, data: Dict[str, Any]) -> Dict[str, int]:
        """
        Merge a snapshot produced by ``export_learning_data``.

        Feedback is merged by id, patterns by max-merge, weights replaced.
        Importing the same snapshot twice is a no-op the second time.
        Timestamps without an offset are read as UTC.
        """
        if not isinstance(data, dict):
            raise LearningDataError("Learning snapshot must be an object")
        try:
            records = [aware_record(FeedbackRecord.model_validate(r)) for r in data.get("feedback", [])]
            stats = [PatternStat.model_validate(p) for p in data.get("patterns", [])]
            for stat in stats:
                stat.last_seen = ensure_aware(stat.last_seen)
            weights = {str(k): float(v) for k, v in (data.get("weights") or {}).items()}
            last_update = data.get("last_learning_update")
            last_update = ensure_aware(datetime.fromisoformat(last_update)) if last_update else None
        except (PydanticValidationError, TypeError, ValueError) as e:
            raise LearningDataError(f"Malformed learning snapshot: {e}") from e

        with self._lock:
            try:
                new_patterns = self.patterns.merge(stats)
                new_feedback = 0
                for record in records:
                    if record.id not in self.feedback:
                        new_feedback += 1
                        self._store(record)
                if weights:
                    self.weights.load(weights)
                if last_update and (self.last_learning_update is None or last_update > self.last_learning_update):
                    self.last_learning_update = last_update
            except Exception as e:
                logger.error(f"Learning snapshot merge failed: {e}", exc_info=True)
                raise LearningDataError(f"Learning snapshot could not be merged: {e}") from e

        logger.info(f"Imported learning data: {new_feedback} new feedback, {new_patterns} new patterns")
        return {"feedback": new_feedback, "patterns": new_patterns, "weights": len(weights)}


# =============================================================================
# HELPERS
# =============================================================================

def verdict_label(level: RiskLevel) -> float:
    """Engine verdict as a training label."""
    return 0.0 if level == RiskLevel.SAFE else 1.0


def feedback_label(record: FeedbackRecord) -> float:
    if record.feedback_type == FeedbackType.FALSE_POSITIVE:
        return 0.0
    if record.feedback_type == FeedbackType.FALSE_NEGATIVE:
        return 1.0
    if record.feedback_type == FeedbackType.PARTIALLY_CORRECT and record.corrected_risk_level is not None:
        return verdict_label(record.corrected_risk_level)
    return verdict_label(record.original_assessment.risk_level)


def correct_rate(records: List[FeedbackRecord]) -> float:
    return sum(1 for r in records if r.feedback_type == FeedbackType.CORRECT) / len(records)


def aware_record(record: FeedbackRecord) -> FeedbackRecord:
    """Normalize an imported record's timestamps to timezone-aware UTC."""
    record.created_at = ensure_aware(record.created_at)
    if record.processed_at is not None:
        record.processed_at = ensure_aware(record.processed_at)
    analyzed_at = record.original_assessment.analyzed_at
    if analyzed_at is not None:
        record.original_assessment = record.original_assessment.model_copy(
            update={"analyzed_at": ensure_aware(analyzed_at)}
        )
    return record
