"""
ScamShield Judge Prompts

System and user prompts for the LLM external judge.
"""

from scamshield.models import AnalysisContext


SYSTEM_PROMPT = (
    "You are a cybersecurity analyst specializing in Thai-language SMS and chat scams. "
    "Judge whether a message is a scam, phishing attempt, spam or safe. "
    "Respond only with a single valid JSON object."
)

RESPONSE_SCHEMA = """{
  "riskScore": 0.0-1.0,
  "riskLevel": "SAFE|LOW|MEDIUM|HIGH|CRITICAL",
  "threatType": "SAFE|PHISHING|SCAM|SPAM|ROMANCE_SCAM|INVESTMENT_FRAUD",
  "confidence": 0.0-1.0,
  "reasoning": "short reason",
  "detectedPatterns": ["pattern", "..."]
}"""

SCORING_GUIDE = """Scoring guide:
- SAFE (0.0-0.2): ordinary conversation, no warning signs
- LOW (0.2-0.4): a mildly suspicious word, nothing conclusive
- MEDIUM (0.4-0.6): several warning signs
- HIGH (0.6-0.8): clear scam characteristics
- CRITICAL (0.8-1.0): certainly a scam"""


def build_judgment_prompt(text: str, context: AnalysisContext) -> str:
    """User prompt with trust hints so the judge does not over-flag known senders."""
    lines = ["Analyze the following message for cyber threats."]

    if context.has_trusted_domains:
        lines.append("IMPORTANT: the message links to verified trusted websites; weigh this toward lower risk.")
    if context.has_trusted_phones:
        lines.append("IMPORTANT: the phone numbers in the message belong to verified organizations.")
    if context.is_official_account:
        lines.append("IMPORTANT: the sender is a verified official account.")
    if context.message_source and context.message_source != "unknown":
        lines.append(f"Channel: {context.message_source}")

    lines.append("")
    lines.append(f'Message: "{text}"')
    lines.append("")
    lines.append("Reply with JSON only, in exactly this shape:")
    lines.append(RESPONSE_SCHEMA)
    lines.append("")
    lines.append(SCORING_GUIDE)
    return "\n".join(lines)
