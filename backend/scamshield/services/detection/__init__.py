"""
ScamShield Detection Services

Signal sources, the linear scoring model and the ensemble combiner.
"""

from .features import FeatureExtractor, FeatureVector, MessageEntities, FEATURE_NAMES
from .keyword_signal import KeywordSignal
from .taxonomy import THREAT_CATEGORIES, CATEGORY_KEYWORDS, DEFAULT_IOCS
from .category_classifier import CategoryClassifier, IOCStore, infer_category
from .linear_model import (
    LinearScoringModel,
    ModelWeights,
    Prediction,
    DEFAULT_WEIGHTS,
    classify_threat,
    contribution_confidence,
)
from .ensemble import EnsembleCombiner, CombineContext, count_risk_factors

__all__ = [
    'FeatureExtractor',
    'FeatureVector',
    'MessageEntities',
    'FEATURE_NAMES',
    'KeywordSignal',
    'THREAT_CATEGORIES',
    'CATEGORY_KEYWORDS',
    'DEFAULT_IOCS',
    'CategoryClassifier',
    'IOCStore',
    'infer_category',
    'LinearScoringModel',
    'ModelWeights',
    'Prediction',
    'DEFAULT_WEIGHTS',
    'classify_threat',
    'contribution_confidence',
    'EnsembleCombiner',
    'CombineContext',
    'count_risk_factors',
]
