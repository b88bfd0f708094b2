"""
ScamShield - Feedback Learning Tests
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from conftest import FIXED_NOW, PHISHING_MESSAGE, SAFE_MESSAGE


class MutableClock:
    """Clock the test can move."""

    def __init__(self, now=FIXED_NOW):
        self.now = now

    def __call__(self):
        return self.now


def analyze(engine, text, message_id):
    return asyncio.run(engine.analyze(text, message_id=message_id))


def feedback(engine, message_id, text, assessment, feedback_type, confidence, **extra):
    payload = {"feedback_type": feedback_type, "confidence": confidence, **extra}
    return asyncio.run(engine.record_feedback(message_id, text, assessment, payload, user_id="user-1"))


class TestFeedbackValidation:
    """Malformed feedback is rejected and nothing is stored."""

    @pytest.mark.parametrize("message_id,text,payload", [
        ("m-1", PHISHING_MESSAGE, {}),
        ("m-1", PHISHING_MESSAGE, {"feedback_type": "false_positive"}),
        ("m-1", PHISHING_MESSAGE, {"feedback_type": "false_positive", "confidence": 1.5}),
        ("m-1", PHISHING_MESSAGE, {"feedback_type": "maybe", "confidence": 0.5}),
        ("", PHISHING_MESSAGE, {"feedback_type": "correct", "confidence": 0.5}),
        ("m-1", "   ", {"feedback_type": "correct", "confidence": 0.5}),
    ])
    def test_invalid_feedback(self, engine, message_id, text, payload):
        from scamshield.utils.exceptions import InvalidFeedbackError

        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")
        with pytest.raises(InvalidFeedbackError):
            asyncio.run(engine.record_feedback(message_id, text, assessment, payload))
        assert engine.get_learning_metrics().total_feedback == 0

    def test_missing_assessment(self, engine):
        from scamshield.utils.exceptions import InvalidFeedbackError

        with pytest.raises(InvalidFeedbackError) as exc:
            asyncio.run(engine.record_feedback(
                "m-1", PHISHING_MESSAGE, {}, {"feedback_type": "correct", "confidence": 0.5},
            ))
        assert "original_assessment" in exc.value.message

    def test_assessment_as_dict(self, engine):
        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")
        feedback_id = feedback(engine, "m-1", PHISHING_MESSAGE, assessment.model_dump(mode="json"),
                               "correct", 0.5)
        assert feedback_id
        assert engine.get_learning_metrics().total_feedback == 1


class TestImmediateLearning:
    """High-confidence feedback updates the weights right away."""

    def test_analysis_does_not_change_weights(self, engine):
        before = engine.state.weights.snapshot()
        analyze(engine, PHISHING_MESSAGE, "m-1")
        assert engine.state.weights.snapshot() == before

    def test_false_positive_lowers_threat_weights(self, engine):
        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")
        feedback_id = feedback(engine, "m-1", PHISHING_MESSAGE, assessment, "false_positive", 0.9)

        weights = engine.state.weights
        assert 1.3 < weights.get("financial_word_count") < 1.5
        assert weights.get("urgency_word_count") < 1.2
        assert weights.get("has_trusted_domain") == -1.0
        assert engine.state.feedback[feedback_id].processed is True

        metrics = engine.get_learning_metrics()
        assert metrics.pending_feedback == 0
        assert metrics.processed_feedback == 1
        assert metrics.model_version == "v1.0.1"
        assert metrics.last_learning_update == FIXED_NOW

    def test_false_negative_raises_weights(self, engine):
        assessment = analyze(engine, SAFE_MESSAGE, "m-2")
        feedback(engine, "m-2", SAFE_MESSAGE, assessment, "false_negative", 0.95)

        weights = engine.state.weights
        assert weights.get("sentiment_score") > 0.1
        assert weights.get("bias") > -1.0

    def test_partial_feedback_uses_corrected_level(self, engine):
        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")
        feedback(engine, "m-1", PHISHING_MESSAGE, assessment, "partially_correct", 0.9,
                 corrected_risk_level="SAFE")

        assert engine.state.weights.get("financial_word_count") < 1.5
        stat = engine.state.patterns.get("ระงับบัญชี")
        assert stat.accuracy == 0.9
        assert stat.frequency == 2

    def test_unknown_message_recomputes_features(self, engine):
        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")
        feedback(engine, "never-analyzed", PHISHING_MESSAGE, assessment, "false_positive", 0.9)

        example = engine.state.training.get("never-analyzed")
        assert example is not None
        assert example.label == 0.0
        assert example.features.financial_word_count > 0

    def test_immediate_failure_queues_record(self, engine, monkeypatch):
        from scamshield.utils.exceptions import LearningUpdateError

        def boom(record):
            raise LearningUpdateError("boom")

        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")
        monkeypatch.setattr(engine.learner, "_apply_immediate", boom)
        feedback_id = feedback(engine, "m-1", PHISHING_MESSAGE, assessment, "false_positive", 0.9)

        assert engine.state.feedback[feedback_id].processed is False
        monkeypatch.undo()
        summary = asyncio.run(engine.process_pending())
        assert summary.processed == 1
        assert engine.state.feedback[feedback_id].processed is True


class TestBatchLearning:
    """Low-confidence feedback is applied in batches."""

    def test_fifty_false_positives_trigger_batch(self, engine):
        before = engine.state.weights.snapshot()
        assert engine.state.patterns.get("ระงับบัญชี").accuracy == 0.9

        for i in range(49):
            mid = f"m-{i}"
            assessment = analyze(engine, PHISHING_MESSAGE, mid)
            feedback(engine, mid, PHISHING_MESSAGE, assessment, "false_positive", 0.6)

        assert engine.state.weights.snapshot() == before
        assert engine.get_learning_metrics().pending_feedback == 49

        assessment = analyze(engine, PHISHING_MESSAGE, "m-49")
        feedback(engine, "m-49", PHISHING_MESSAGE, assessment, "false_positive", 0.6)

        metrics = engine.get_learning_metrics()
        assert metrics.pending_feedback == 0
        assert metrics.processed_feedback == 50
        assert metrics.false_positives == 50
        assert engine.state.weights.get("financial_word_count") < before["financial_word_count"]

        stat = engine.state.patterns.get("ระงับบัญชี")
        assert stat.accuracy < 0.9
        assert stat.needs_review is True
        assert "ระงับบัญชี" in [p.pattern for p in engine.get_patterns_needing_review()]

    def test_failed_batch_leaves_records_pending(self, engine, monkeypatch):
        from scamshield.utils.exceptions import LearningUpdateError

        def boom():
            raise LearningUpdateError("non-finite gradient")

        for i in range(3):
            assessment = analyze(engine, PHISHING_MESSAGE, f"m-{i}")
            feedback(engine, f"m-{i}", PHISHING_MESSAGE, assessment, "false_positive", 0.5)

        before = engine.state.weights.snapshot()
        monkeypatch.setattr(engine.learner, "_batch_gradient_step", boom)
        summary = asyncio.run(engine.process_pending())

        assert summary.processed == 0
        assert summary.failed == 3
        assert len(summary.failed_ids) == 3
        assert engine.state.weights.snapshot() == before
        assert engine.get_learning_metrics().pending_feedback == 3

        monkeypatch.undo()
        summary = asyncio.run(engine.process_pending())
        assert summary.processed == 3
        assert summary.weights_updated is True
        assert engine.get_learning_metrics().pending_feedback == 0

    def test_failed_immediate_updates_fill_a_batch(self, config, monkeypatch):
        from scamshield.services import ThreatScoringEngine
        from scamshield.utils.exceptions import LearningUpdateError

        def boom(record):
            raise LearningUpdateError("boom")

        config.learning.batch_size = 2
        engine = ThreatScoringEngine(config=config, clock=lambda: FIXED_NOW)
        monkeypatch.setattr(engine.learner, "_apply_immediate", boom)

        assessment = analyze(engine, PHISHING_MESSAGE, "m-0")
        feedback(engine, "m-0", PHISHING_MESSAGE, assessment, "false_positive", 0.9)
        assert engine.get_learning_metrics().pending_feedback == 1

        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")
        feedback(engine, "m-1", PHISHING_MESSAGE, assessment, "false_positive", 0.9)
        metrics = engine.get_learning_metrics()
        assert metrics.pending_feedback == 0
        assert metrics.processed_feedback == 2

    def test_full_store_evicts_processed_records_first(self, config):
        from scamshield.services import ThreatScoringEngine

        config.learning.max_feedback_storage = 2
        engine = ThreatScoringEngine(config=config, clock=lambda: FIXED_NOW)

        assessment = analyze(engine, PHISHING_MESSAGE, "m-0")
        pending_id = feedback(engine, "m-0", PHISHING_MESSAGE, assessment, "false_positive", 0.5)
        processed_id = feedback(engine, "m-0", PHISHING_MESSAGE, assessment, "false_positive", 0.9)
        newest_id = feedback(engine, "m-0", PHISHING_MESSAGE, assessment, "correct", 0.5)

        assert list(engine.state.feedback) == [pending_id, newest_id]
        assert engine.state.feedback[pending_id].processed is False

    def test_process_pending_with_nothing_queued(self, engine):
        summary = asyncio.run(engine.process_pending())
        assert summary.processed == 0
        assert summary.failed == 0

    def test_concurrent_submissions(self, engine):
        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")

        def submit(i):
            return engine.learner.record_feedback(
                f"m-{i}", PHISHING_MESSAGE, assessment,
                {"feedback_type": "correct", "confidence": 0.5},
            )

        with ThreadPoolExecutor(max_workers=8) as pool:
            ids = list(pool.map(submit, range(40)))

        assert len(set(ids)) == 40
        assert engine.get_learning_metrics().total_feedback == 40
        assert engine.state.patterns.get("ระงับบัญชี").frequency == 41


class TestLearningMetrics:
    """Metrics, recommendations and pattern views."""

    def test_accuracy_improvement(self, config):
        from scamshield.services import ThreatScoringEngine

        clock = MutableClock()
        engine = ThreatScoringEngine(config=config, clock=clock)
        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")

        clock.now = FIXED_NOW - timedelta(days=10)
        for kind in ("correct", "correct", "false_positive", "false_positive"):
            feedback(engine, "m-1", PHISHING_MESSAGE, assessment, kind, 0.5)
        clock.now = FIXED_NOW - timedelta(days=1)
        for kind in ("correct", "correct"):
            feedback(engine, "m-1", PHISHING_MESSAGE, assessment, kind, 0.5)

        clock.now = FIXED_NOW
        metrics = engine.get_learning_metrics()
        assert metrics.accuracy_improvement == pytest.approx(0.5)
        assert metrics.correct_predictions == 4
        assert "Accuracy is improving steadily" in engine.get_improvement_recommendations()

    def test_improvement_is_zero_without_history(self, engine):
        assert engine.get_learning_metrics().accuracy_improvement == 0.0

    def test_recommendations(self, engine):
        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")
        feedback(engine, "m-1", PHISHING_MESSAGE, assessment, "false_positive", 0.5)

        recs = engine.get_improvement_recommendations()
        assert any("false-positive" in r for r in recs)
        assert "More feedback is needed for reliable learning" in recs

    def test_learned_patterns(self, engine):
        assessment = analyze(engine, PHISHING_MESSAGE, "m-1")
        feedback(engine, "m-1", PHISHING_MESSAGE, assessment, "correct", 0.9)

        learned = [p.pattern for p in engine.get_learned_patterns()]
        assert "ระงับบัญชี" in learned
        assert all(p.accuracy > 0.7 for p in engine.get_learned_patterns())
        assert len(engine.get_learned_patterns(limit=1)) == 1


class TestLearningDurability:
    """Export/import round trips and idempotence."""

    def seeded_engine(self, engine):
        for i, kind in enumerate(("false_positive", "correct", "false_negative")):
            mid = f"m-{i}"
            assessment = analyze(engine, PHISHING_MESSAGE, mid)
            feedback(engine, mid, PHISHING_MESSAGE, assessment, kind, 0.9)
        return engine

    def test_export_is_json_serializable(self, engine):
        import json

        snapshot = self.seeded_engine(engine).export_learning_data()
        restored = json.loads(json.dumps(snapshot))
        assert restored["version"] == 1
        assert len(restored["feedback"]) == 3

    def test_import_into_fresh_engine(self, engine, config, clock):
        import json

        from scamshield.services import ThreatScoringEngine

        source = self.seeded_engine(engine)
        snapshot = json.loads(json.dumps(source.export_learning_data()))

        target = ThreatScoringEngine(config=config, clock=clock)
        result = target.import_learning_data(snapshot)

        assert result["feedback"] == 3
        assert target.state.weights.snapshot() == pytest.approx(source.state.weights.snapshot())
        assert target.get_learning_metrics().total_feedback == 3
        assert target.get_learning_metrics().last_learning_update == FIXED_NOW

    def test_import_is_idempotent(self, engine, config, clock):
        import json

        from scamshield.services import ThreatScoringEngine

        snapshot = json.loads(json.dumps(self.seeded_engine(engine).export_learning_data()))
        target = ThreatScoringEngine(config=config, clock=clock)

        target.import_learning_data(snapshot)
        first = target.export_learning_data()
        again = target.import_learning_data(snapshot)
        second = target.export_learning_data()

        assert again["feedback"] == 0
        assert again["patterns"] == 0
        assert first["weights"] == second["weights"]
        assert first["patterns"] == second["patterns"]
        assert first["feedback"] == second["feedback"]

    def test_malformed_snapshot(self, engine):
        from scamshield.utils.exceptions import LearningDataError

        with pytest.raises(LearningDataError):
            engine.import_learning_data({"feedback": [{"id": "x"}]})
        with pytest.raises(LearningDataError):
            engine.import_learning_data({"weights": {"url_count": "high"}})
        with pytest.raises(LearningDataError):
            engine.import_learning_data(["not", "a", "dict"])

    def test_import_reads_naive_timestamps_as_utc(self, engine, config, clock):
        import json

        from scamshield.services import ThreatScoringEngine

        snapshot = json.loads(json.dumps(self.seeded_engine(engine).export_learning_data()))
        naive = FIXED_NOW.replace(tzinfo=None).isoformat()
        for record in snapshot["feedback"]:
            record["created_at"] = naive
            record["processed_at"] = naive
            record["original_assessment"]["analyzed_at"] = naive
        for stat in snapshot["patterns"]:
            stat["last_seen"] = naive
        snapshot["last_learning_update"] = naive

        target = ThreatScoringEngine(config=config, clock=clock)
        result = target.import_learning_data(snapshot)

        assert result["feedback"] == 3
        record = next(iter(target.state.feedback.values()))
        assert record.created_at == FIXED_NOW
        assert record.original_assessment.analyzed_at == FIXED_NOW
        assert target.state.patterns.get("ระงับบัญชี").last_seen == FIXED_NOW

        metrics = target.get_learning_metrics()
        assert metrics.total_feedback == 3
        assert metrics.last_learning_update == FIXED_NOW
        assert target.get_improvement_recommendations()

    def test_failed_merge_is_a_learning_data_error(self, engine, monkeypatch):
        from scamshield.utils.exceptions import LearningDataError

        snapshot = self.seeded_engine(engine).export_learning_data()

        def boom(stats):
            raise TypeError("incomparable")

        monkeypatch.setattr(engine.state.patterns, "merge", boom)
        with pytest.raises(LearningDataError):
            engine.import_learning_data(snapshot)
