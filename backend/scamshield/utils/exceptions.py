"""
ScamShield Custom Exceptions

Centralized exception classes for error handling.
"""

from typing import Any, Dict, Optional


class ScamShieldBaseException(Exception):
    """Base exception for all ScamShield errors."""
    def __init__(self, message: str = "An error occurred", details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Validation Exceptions
# ============================================================================

class ValidationError(ScamShieldBaseException):
    """Input validation failed."""
    pass


class InvalidFeedbackError(ValidationError):
    """Feedback record is missing required fields or has invalid values."""
    pass


class InvalidIOCError(ValidationError):
    """IOC entry is malformed."""
    pass


# ============================================================================
# Signal Exceptions
# ============================================================================

class SignalError(ScamShieldBaseException):
    """Error from a signal source."""
    pass


class SignalUnavailableError(SignalError):
    """A signal source timed out or failed and is excluded from the ensemble."""
    pass


class AllSignalsUnavailableError(SignalError):
    """No signal source produced a usable result."""
    pass


# ============================================================================
# Learning Exceptions
# ============================================================================

class LearningError(ScamShieldBaseException):
    """Error in the feedback learning subsystem."""
    pass


class LearningUpdateError(LearningError):
    """Weight or pattern update failed for a feedback record."""
    pass


class LearningDataError(LearningError):
    """Imported learning snapshot is malformed."""
    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================

class ConfigurationError(ScamShieldBaseException):
    """Configuration error."""
    pass
