"""
ScamShield Learning Services

Feedback-driven online learning: training buffer, pattern-accuracy database
and the feedback learning system.
"""

from .training import TrainingBuffer, TrainingExample
from .patterns import PatternDatabase, extract_patterns, message_context
from .feedback import FeedbackLearningSystem, feedback_label, verdict_label

__all__ = [
    'TrainingBuffer',
    'TrainingExample',
    'PatternDatabase',
    'extract_patterns',
    'message_context',
    'FeedbackLearningSystem',
    'feedback_label',
    'verdict_label',
]
