"""
ScamShield AI Services

LLM provider integration used as the external judgment signal.
"""

from .base import (
    BaseAIProvider,
    AIResponse,
    AIProviderError,
    AIConfigurationError,
    AIRateLimitError,
    AITimeoutError,
    AIResponseParseError,
)
from .openrouter_provider import OpenRouterProvider
from .judge import ExternalJudgmentSignal, Judgment, parse_judgment
from .prompts import SYSTEM_PROMPT, build_judgment_prompt

__all__ = [
    'BaseAIProvider',
    'AIResponse',
    'AIProviderError',
    'AIConfigurationError',
    'AIRateLimitError',
    'AITimeoutError',
    'AIResponseParseError',
    'OpenRouterProvider',
    'ExternalJudgmentSignal',
    'Judgment',
    'parse_judgment',
    'SYSTEM_PROMPT',
    'build_judgment_prompt',
]
