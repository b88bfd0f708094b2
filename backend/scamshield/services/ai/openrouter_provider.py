"""
ScamShield OpenRouter Provider

OpenAI-compatible chat completions through OpenRouter.
"""

import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from scamshield.utils.constants import OPENROUTER_API_URL

from .base import (
    AIConfigurationError,
    AIProviderError,
    AIRateLimitError,
    AIResponse,
    AITimeoutError,
    BaseAIProvider,
)

logger = logging.getLogger(__name__)


class OpenRouterProvider(BaseAIProvider):
    """
    OpenRouter chat completions provider.

    Any model routed by OpenRouter can be used; the default is a small,
    cheap instruction model since the judge only returns a short JSON verdict.
    """

    provider_name = "openrouter"
    default_model = "meta-llama/llama-3.1-8b-instruct"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 30,
        max_retries: int = 2,
        base_url: str = OPENROUTER_API_URL,
        app_name: str = "ScamShield",
    ):
        super().__init__(api_key, model, timeout, max_retries)
        self.base_url = base_url.rstrip("/")
        self.app_name = app_name
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_headers(self) -> Dict[str, str]:
        """Get API request headers."""
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "X-Title": self.app_name,
        }

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 500,
    ) -> AIResponse:
        """
        Generate a completion.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens in response

        Returns:
            AIResponse with generated content
        """
        if not self.is_configured():
            raise AIConfigurationError("OpenRouter API key not configured")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }

        last_error: Optional[AIProviderError] = None
        session = await self._get_session()

        for attempt in range(self.max_retries):
            try:
                async with session.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._get_headers(),
                    json=payload,
                ) as response:
                    data = await response.json(content_type=None)

                    if response.status == 200:
                        choice = (data.get("choices") or [{}])[0]
                        usage = data.get("usage") or {}
                        return AIResponse(
                            content=(choice.get("message") or {}).get("content", "") or "",
                            model=data.get("model", self.model),
                            tokens_used=usage.get("total_tokens", 0),
                            finish_reason=choice.get("finish_reason", "unknown"),
                            raw_response=data,
                        )

                    elif response.status == 429:
                        wait_time = 2 ** attempt
                        self.logger.warning(f"Rate limited, waiting {wait_time}s")
                        last_error = AIRateLimitError("Rate limit exceeded")
                        await asyncio.sleep(wait_time)
                        continue

                    elif response.status == 401:
                        raise AIConfigurationError("Invalid API key")

                    else:
                        error = data.get("error") if isinstance(data, dict) else None
                        message = error.get("message") if isinstance(error, dict) else str(data)
                        raise AIProviderError(f"API error ({response.status}): {message}")

            except asyncio.TimeoutError:
                last_error = AITimeoutError(f"Request timed out after {self.timeout}s")
                continue

            except aiohttp.ClientError as e:
                last_error = AIProviderError(f"Connection error: {e}")
                await asyncio.sleep(2 ** attempt)
                continue

        raise last_error or AIProviderError("Max retries exceeded")
