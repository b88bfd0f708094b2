"""
ScamShield Utilities
"""

from .exceptions import (
    ScamShieldBaseException,
    ValidationError,
    InvalidFeedbackError,
    InvalidIOCError,
    SignalError,
    SignalUnavailableError,
    AllSignalsUnavailableError,
    LearningError,
    LearningUpdateError,
    LearningDataError,
    ConfigurationError,
)

__all__ = [
    'ScamShieldBaseException',
    'ValidationError',
    'InvalidFeedbackError',
    'InvalidIOCError',
    'SignalError',
    'SignalUnavailableError',
    'AllSignalsUnavailableError',
    'LearningError',
    'LearningUpdateError',
    'LearningDataError',
    'ConfigurationError',
]
