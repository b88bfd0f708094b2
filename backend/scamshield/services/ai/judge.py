"""
ScamShield External Judgment Signal

Wraps an LLM provider behind a timeout/fallback contract. Any timeout or
provider failure yields ``None`` (unavailable) so the ensemble simply
proceeds without this signal.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from scamshield.models import AnalysisContext, SignalResult, SignalSource
from scamshield.utils.exceptions import SignalUnavailableError
from scamshield.utils.helpers import clamp

from .base import AIResponseParseError, BaseAIProvider
from .prompts import SYSTEM_PROMPT, build_judgment_prompt

logger = logging.getLogger(__name__)


LEVEL_SCORES = {
    "CRITICAL": 0.9,
    "HIGH": 0.7,
    "MEDIUM": 0.5,
    "LOW": 0.3,
    "SAFE": 0.1,
}


@dataclass
class Judgment:
    """Parsed verdict from the external judge."""
    score: float
    level: str
    threat_type: str = "UNKNOWN"
    confidence: float = 0.5
    reasoning: str = ""
    patterns: List[str] = field(default_factory=list)
    structured: bool = True


def parse_judgment(content: str) -> Judgment:
    """
    Parse the judge's reply.

    Structured JSON is preferred; otherwise the first risk-level word in the
    text is used and the verdict is marked unstructured.
    """
    try:
        data = BaseAIProvider.parse_json_response(content)
    except AIResponseParseError:
        upper = (content or "").upper()
        for level, score in LEVEL_SCORES.items():
            if level in upper:
                return Judgment(score=score, level=level, confidence=0.3, structured=False)
        raise

    level = str(data.get("riskLevel", "")).upper()
    try:
        score = float(data.get("riskScore", LEVEL_SCORES.get(level, 0.5)))
    except (TypeError, ValueError):
        score = LEVEL_SCORES.get(level, 0.5)
    try:
        confidence = float(data.get("confidence", 0.5))
    except (TypeError, ValueError):
        confidence = 0.5

    patterns = data.get("detectedPatterns") or []
    if not isinstance(patterns, list):
        patterns = [str(patterns)]

    return Judgment(
        score=clamp(score),
        level=level if level in LEVEL_SCORES else "MEDIUM",
        threat_type=str(data.get("threatType", "UNKNOWN")).upper(),
        confidence=clamp(confidence),
        reasoning=str(data.get("reasoning", ""))[:500],
        patterns=[str(p)[:100] for p in patterns[:5]],
    )


class ExternalJudgmentSignal:
    """LLM-backed judge treated as a pluggable, possibly-absent signal."""

    def __init__(
        self,
        provider: Optional[BaseAIProvider] = None,
        weight: float = 0.4,
        confidence: float = 0.9,
        trusted_confidence: float = 0.7,
        unstructured_confidence: float = 0.3,
    ):
        self.provider = provider
        self.weight = weight
        self.confidence = confidence
        self.trusted_confidence = trusted_confidence
        self.unstructured_confidence = unstructured_confidence

    @property
    def available(self) -> bool:
        return self.provider is not None and self.provider.is_configured()

    async def judge(
        self,
        text: str,
        context: Optional[AnalysisContext] = None,
        timeout: float = 8.0,
    ) -> Optional[SignalResult]:
        """Return a SignalResult, or None when the judge is unavailable."""
        if not self.available:
            logger.debug("External judge not configured, skipping")
            return None

        try:
            return await self.request(text, context, timeout=timeout)
        except SignalUnavailableError as e:
            logger.warning(f"External judge unavailable: {e.message}")
            return None

    async def request(
        self,
        text: str,
        context: Optional[AnalysisContext] = None,
        timeout: float = 8.0,
    ) -> SignalResult:
        """
        Ask the provider for a judgment.

        Raises:
            SignalUnavailableError: not configured, timed out, or the
                provider failed or replied with nothing usable.
        """
        context = context or AnalysisContext()
        if not self.available:
            raise SignalUnavailableError("External judge not configured", {"source": SignalSource.EXTERNAL_JUDGMENT.value})

        try:
            response = await asyncio.wait_for(
                self.provider.generate(
                    prompt=build_judgment_prompt(text, context),
                    system_prompt=SYSTEM_PROMPT,
                    temperature=0.1,
                    max_tokens=500,
                ),
                timeout=timeout,
            )
            judgment = parse_judgment(response.content)
        except asyncio.TimeoutError as e:
            raise SignalUnavailableError(f"Timed out after {timeout}s", {"timeout": timeout}) from e
        except Exception as e:
            raise SignalUnavailableError(f"Provider failed: {e}") from e

        return self.to_signal(judgment, context)

    def to_signal(self, judgment: Judgment, context: AnalysisContext) -> SignalResult:
        confidence = self.trusted_confidence if context.has_any_trust else self.confidence
        if not judgment.structured:
            confidence = min(confidence, self.unstructured_confidence)

        labels = {f"judge:{judgment.threat_type.lower()}"}
        labels.update(f"judge_pattern:{p}" for p in judgment.patterns)

        return SignalResult(
            source=SignalSource.EXTERNAL_JUDGMENT.value,
            score=judgment.score,
            confidence=confidence,
            weight=self.weight,
            labels=frozenset(labels),
        )

    async def close(self) -> None:
        if self.provider is not None:
            await self.provider.close()
