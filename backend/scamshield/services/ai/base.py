"""
ScamShield AI Provider Base Class

Abstract base class for LLM providers used as an external judge.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from scamshield.utils.exceptions import ScamShieldBaseException

logger = logging.getLogger(__name__)


@dataclass
class AIResponse:
    """Response from AI provider."""
    content: str
    model: str
    tokens_used: int
    finish_reason: str
    raw_response: Optional[Dict[str, Any]] = None


class AIProviderError(ScamShieldBaseException):
    """Base exception for AI provider errors."""
    pass


class AIConfigurationError(AIProviderError):
    """API key or configuration missing."""
    pass


class AIRateLimitError(AIProviderError):
    """Rate limit exceeded."""
    pass


class AITimeoutError(AIProviderError):
    """Request timed out."""
    pass


class AIResponseParseError(AIProviderError):
    """Failed to parse AI response."""
    pass


class BaseAIProvider(ABC):
    """
    Abstract base class for AI providers.

    Defines the interface that all AI providers must implement.
    """

    provider_name: str = "base"
    default_model: str = ""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30,
        max_retries: int = 2,
    ):
        """
        Initialize provider.

        Args:
            api_key: API key for provider
            model: Model to use (defaults to provider default)
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts
        """
        self.api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout
        self.max_retries = max_retries
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def is_configured(self) -> bool:
        """Check if API key is configured."""
        return bool(self.api_key)

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 500,
    ) -> AIResponse:
        """
        Generate text from prompt.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens in response

        Returns:
            AIResponse with generated content
        """
        pass

    async def close(self) -> None:
        """Release network resources, if any."""
        return None

    @staticmethod
    def parse_json_response(content: str) -> Dict[str, Any]:
        """
        Parse the first JSON object out of an AI response.

        Handles responses wrapped in markdown code blocks or prose.
        """
        content = (content or "").strip()

        if "```" in content:
            start = content.find("```")
            start = content.find("\n", start) + 1 if "\n" in content[start:] else start + 3
            end = content.find("```", start)
            if end > start:
                content = content[start:end].strip()

        start = content.find("{")
        end = content.rfind("}")
        if start < 0 or end <= start:
            raise AIResponseParseError("No JSON object in response")

        try:
            parsed = json.loads(content[start:end + 1])
        except json.JSONDecodeError as e:
            raise AIResponseParseError(f"Invalid JSON: {e}")
        if not isinstance(parsed, dict):
            raise AIResponseParseError("Response JSON is not an object")
        return parsed

    def get_provider_info(self) -> Dict[str, Any]:
        """Get provider information."""
        return {
            "name": self.provider_name,
            "model": self.model,
            "configured": self.is_configured(),
        }
