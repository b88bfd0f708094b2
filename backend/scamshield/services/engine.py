"""
ScamShield Threat Scoring Engine

Orchestrates a single analysis:

1. Resolve entities and extract features
2. Run every signal source concurrently (keyword, category, linear model,
   external judge); a failing or timed-out source is simply absent
3. Combine the available signals into an Assessment
4. Remember the analyzed features so later feedback can train on them

Learning state (weights, patterns, training buffer, IOC store, feedback)
lives in an explicit EngineState object instead of module globals, so
tests can build isolated engines.
"""

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from scamshield.config import ScoringConfig, Settings, get_settings
from scamshield.models import (
    IOC,
    AnalysisContext,
    Assessment,
    ClassificationResult,
    FeedbackInput,
    FeedbackRecord,
    LearningMetrics,
    PatternStat,
    ProcessingSummary,
    SignalResult,
    ThreatCategory,
    ThreatCategoryKey,
)
from scamshield.services.ai import ExternalJudgmentSignal, OpenRouterProvider
from scamshield.services.detection import (
    CategoryClassifier,
    CombineContext,
    EnsembleCombiner,
    FeatureExtractor,
    FeatureVector,
    IOCStore,
    KeywordSignal,
    LinearScoringModel,
    MessageEntities,
    ModelWeights,
    Prediction,
)
from scamshield.services.learning import FeedbackLearningSystem, PatternDatabase, TrainingBuffer
from scamshield.utils.exceptions import AllSignalsUnavailableError, InvalidIOCError
from scamshield.utils.helpers import Clock, derive_message_id, utc_now

logger = logging.getLogger(__name__)


@dataclass
class EngineState:
    """Mutable learning state shared by analysis and feedback."""
    weights: ModelWeights = field(default_factory=ModelWeights)
    patterns: PatternDatabase = field(default_factory=PatternDatabase)
    training: TrainingBuffer = field(default_factory=TrainingBuffer)
    iocs: IOCStore = field(default_factory=IOCStore)
    feedback: "OrderedDict[str, FeedbackRecord]" = field(default_factory=OrderedDict)

    @classmethod
    def create(cls, config: Optional[ScoringConfig] = None, clock: Optional[Clock] = None) -> "EngineState":
        """Fresh state sized by the learning policy."""
        policy = (config or ScoringConfig()).learning
        return cls(
            weights=ModelWeights(clip=policy.weight_clip),
            patterns=PatternDatabase(
                max_patterns=policy.max_patterns,
                blend_rate=policy.pattern_blend_rate,
                clock=clock,
            ),
            training=TrainingBuffer(maxlen=policy.training_buffer_size),
            iocs=IOCStore(),
            feedback=OrderedDict(),
        )


class ThreatScoringEngine:
    """
    Facade over the signal sources, the ensemble and the learning system.

    Usage:
        engine = ThreatScoringEngine()
        assessment = await engine.analyze("ด่วน! บัญชีของคุณถูกระงับ")
        await engine.record_feedback(assessment.message_id, text, assessment,
                                     {"feedback_type": "false_positive", "confidence": 0.9})
    """

    def __init__(
        self,
        state: Optional[EngineState] = None,
        config: Optional[ScoringConfig] = None,
        judge: Optional[ExternalJudgmentSignal] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config or ScoringConfig()
        self.clock = clock or utc_now
        self.state = state or EngineState.create(self.config, self.clock)

        weights = self.config.signal_weights
        confidences = self.config.signal_confidences

        self.extractor = FeatureExtractor(clock=self.clock, timezone=self.config.timezone)
        self.keyword = KeywordSignal(weight=weights.keyword, confidence=confidences.keyword)
        self.classifier = CategoryClassifier(
            iocs=self.state.iocs,
            weight=weights.category,
            confidence=confidences.category,
            clock=self.clock,
        )
        self.model = LinearScoringModel(
            self.state.weights,
            significance_threshold=self.config.learning.significance_threshold,
        )
        self.judge = judge or ExternalJudgmentSignal(
            weight=weights.external_judgment,
            confidence=confidences.external_judgment,
            trusted_confidence=confidences.external_judgment_trusted,
            unstructured_confidence=confidences.external_judgment_unparsed,
        )
        self.combiner = EnsembleCombiner(self.config)
        self.learner = FeedbackLearningSystem(
            weights=self.state.weights,
            patterns=self.state.patterns,
            training=self.state.training,
            extractor=self.extractor,
            policy=self.config.learning,
            feedback_store=self.state.feedback,
            clock=self.clock,
        )

    # =========================================================================
    # ANALYSIS
    # =========================================================================

    async def analyze(
        self,
        text: str,
        user_id: Optional[str] = None,
        context: Optional[AnalysisContext] = None,
        message_id: Optional[str] = None,
    ) -> Assessment:
        """
        Score a message. Never raises: any unexpected failure yields the
        degraded assessment instead.
        """
        text = text or ""
        context = context or AnalysisContext()
        now = self.clock()
        message_id = message_id or derive_message_id(text, user_id, context.received_at or now)
        ctx = CombineContext(message_id=message_id, text=text, context=context, analyzed_at=now)

        try:
            return await self._analyze(ctx)
        except AllSignalsUnavailableError as e:
            logger.warning(f"{e.message} for {message_id}, returning degraded assessment")
            return self.combiner.degraded(ctx)
        except Exception as e:
            logger.error(f"Analysis of {message_id} failed, returning degraded assessment: {e}", exc_info=True)
            return self.combiner.degraded(ctx)

    async def _analyze(self, ctx: CombineContext) -> Assessment:
        entities = MessageEntities.resolve(ctx.text, ctx.context)

        results = await asyncio.gather(
            self._run_local(self._model_step, ctx.text, ctx.context),
            self._run_local(self.keyword.score, ctx.text),
            self._run_local(self.classifier.classify, ctx.text, entities),
            self.judge.judge(ctx.text, ctx.context, timeout=self.config.external_judge_timeout),
            return_exceptions=True,
        )
        model_step, keyword, classification, judged = [
            self._unwrap(name, result)
            for name, result in zip(("linear_model", "keyword", "category", "external_judgment"), results)
        ]

        signals: List[SignalResult] = []
        if model_step is not None:
            ctx.features, ctx.prediction = model_step
            signals.append(self._model_signal(ctx.prediction))
        if keyword is not None:
            signals.append(keyword)
        if classification is not None:
            ctx.classification = classification
            signals.append(self.classifier.to_signal(classification))
        if judged is not None:
            signals.append(judged)
        if not signals:
            raise AllSignalsUnavailableError("All signal sources unavailable")

        ctx.outside_business_hours = self.extractor.is_outside_business_hours(ctx.context)
        assessment = self.combiner.combine(signals, ctx)

        if ctx.features is not None and not assessment.degraded:
            self.learner.remember(ctx.message_id, ctx.features, assessment)
        return assessment

    @staticmethod
    async def _run_local(fn: Callable, *args):
        return fn(*args)

    @staticmethod
    def _unwrap(name: str, result: Any) -> Any:
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning(f"Signal source {name} failed, treating as unavailable: {result}")
            return None
        return result

    def _model_step(self, text: str, context: AnalysisContext) -> Tuple[FeatureVector, Prediction]:
        features = self.extractor.extract(text, context)
        return features, self.model.predict(features)

    def _model_signal(self, prediction: Prediction) -> SignalResult:
        weights = self.config.signal_weights
        return self.model.to_signal(
            prediction,
            weight=weights.linear_model,
            boosted_weight=weights.linear_model_boosted,
            boost_probability=weights.linear_model_boost_probability,
        )

    def classify(self, text: str) -> ClassificationResult:
        """Category classification alone, without scoring."""
        return self.classifier.classify(text)

    # =========================================================================
    # FEEDBACK & LEARNING
    # =========================================================================

    async def record_feedback(
        self,
        message_id: str,
        original_message: str,
        original_assessment: Union[Assessment, Dict[str, Any]],
        feedback: Union[FeedbackInput, Dict[str, Any]],
        user_id: Optional[str] = None,
    ) -> str:
        """
        Record user feedback on a prior assessment and return its id.

        Raises:
            InvalidFeedbackError: malformed feedback, nothing recorded.
        """
        return self.learner.record_feedback(message_id, original_message, original_assessment, feedback, user_id)

    async def process_pending(self) -> ProcessingSummary:
        return self.learner.process_pending()

    def get_learning_metrics(self) -> LearningMetrics:
        return self.learner.get_learning_metrics()

    def get_improvement_recommendations(self) -> List[str]:
        return self.learner.get_improvement_recommendations()

    def get_patterns_needing_review(self) -> List[PatternStat]:
        return self.learner.get_patterns_needing_review()

    def get_learned_patterns(self, limit: int = 20) -> List[PatternStat]:
        return self.learner.get_learned_patterns(limit)

    def export_learning_data(self) -> Dict[str, Any]:
        return self.learner.export_learning_data()

    def import_learning_data(self, data: Dict[str, Any]) -> Dict[str, int]:
        return self.learner.import_learning_data(data)

    # =========================================================================
    # THREAT INTEL
    # =========================================================================

    def add_ioc(self, ioc: Union[IOC, Dict[str, Any]]) -> IOC:
        """Register a known-bad indicator. Raises InvalidIOCError when malformed."""
        if not isinstance(ioc, IOC):
            try:
                ioc = IOC.model_validate(ioc)
            except PydanticValidationError as e:
                raise InvalidIOCError(f"Invalid IOC: {e.error_count()} error(s)") from e
        return self.classifier.add_ioc(ioc)

    def list_iocs(self) -> List[IOC]:
        return self.state.iocs.all()

    def list_categories(self) -> List[ThreatCategory]:
        return self.classifier.list_categories()

    def get_category(self, key: Union[ThreatCategoryKey, str]) -> ThreatCategory:
        """Taxonomy entry by key. Raises ValueError for an unknown key."""
        return self.classifier.get_category(key)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def close(self) -> None:
        await self.judge.close()


def build_external_judge(settings: Settings, config: Optional[ScoringConfig] = None) -> ExternalJudgmentSignal:
    """External judge backed by OpenRouter when AI is enabled and a key is set."""
    config = config or ScoringConfig()
    provider = None
    if settings.ai_enabled and settings.openrouter_api_key:
        provider = OpenRouterProvider(
            api_key=settings.openrouter_api_key,
            model=settings.ai_model,
            timeout=settings.external_judge_timeout,
            base_url=settings.openrouter_base_url,
            app_name=settings.app_name,
        )
        logger.info(f"External judge enabled: openrouter/{provider.model}")
    else:
        logger.info("External judge disabled: no OpenRouter key configured")

    return ExternalJudgmentSignal(
        provider=provider,
        weight=config.signal_weights.external_judgment,
        confidence=config.signal_confidences.external_judgment,
        trusted_confidence=config.signal_confidences.external_judgment_trusted,
        unstructured_confidence=config.signal_confidences.external_judgment_unparsed,
    )


def create_engine(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> ThreatScoringEngine:
    """Engine wired from application settings."""
    settings = settings or get_settings()
    config = ScoringConfig.from_settings(settings)
    return ThreatScoringEngine(
        config=config,
        judge=build_external_judge(settings, config),
        clock=clock,
    )
