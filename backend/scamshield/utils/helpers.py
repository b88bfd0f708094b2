"""
ScamShield Helper Functions

Utility functions used throughout the application.
"""

import hashlib
import math
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional
from urllib.parse import urlparse

from .constants import EMAIL_PATTERN, PHONE_PATTERN, PHONE_SEPARATOR_PATTERN, URL_PATTERN

Clock = Callable[[], datetime]


# ============================================================================
# ID and Timestamp Generation
# ============================================================================

def generate_id() -> str:
    """Generate a unique record ID."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def derive_message_id(text: str, user_id: Optional[str], timestamp: datetime) -> str:
    """Deterministic message id for callers that do not supply one."""
    seed = f"{user_id or ''}|{timestamp.isoformat()}|{text}"
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:24]


# ============================================================================
# Numeric helpers
# ============================================================================

def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp value into [low, high]; NaN collapses to low."""
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def sigmoid(x: float) -> float:
    """Numerically stable logistic function."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def dedupe(items: Iterable[str]) -> List[str]:
    """Remove duplicates while keeping first-seen order."""
    seen = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result


# ============================================================================
# Entity Extraction
# ============================================================================

def extract_urls(text: str) -> List[str]:
    """Extract http(s)/www URLs from free text."""
    return dedupe(m.rstrip(".,;:!?)\"'") for m in URL_PATTERN.findall(text or ""))


def extract_phone_numbers(text: str) -> List[str]:
    """Extract Thai phone numbers, tolerating dash/space separators."""
    compact = PHONE_SEPARATOR_PATTERN.sub("", text or "")
    return dedupe(PHONE_PATTERN.findall(compact))


def extract_emails(text: str) -> List[str]:
    """Extract email addresses."""
    return dedupe(EMAIL_PATTERN.findall(text or ""))


def normalize_phone(phone: str) -> str:
    """
    Normalize a phone number to local digits.

    "+66 81-234-5678" and "0812345678" both become "0812345678".
    """
    digits = "".join(c for c in phone if c.isdigit())
    if digits.startswith("66") and len(digits) in (10, 11):
        digits = "0" + digits[2:]
    return digits


def extract_domain(url_or_email: str) -> Optional[str]:
    """Extract lowercase host from a URL, bare domain or email address."""
    value = (url_or_email or "").strip().lower()
    if not value:
        return None
    if "@" in value and "://" not in value:
        return value.rsplit("@", 1)[1] or None
    if "://" not in value:
        value = "http://" + value
    try:
        host = urlparse(value).hostname
    except ValueError:
        return None
    if host and host.startswith("www."):
        host = host[4:]
    return host or None


def domain_matches(host: str, ioc_domain: str) -> bool:
    """Exact or subdomain-suffix match."""
    host = host.lower().rstrip(".")
    ioc_domain = ioc_domain.lower().rstrip(".")
    return host == ioc_domain or host.endswith("." + ioc_domain)
