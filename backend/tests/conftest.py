"""
ScamShield Test Configuration

Pytest fixtures and configuration.
"""

from datetime import datetime, timezone

import pytest

# Wednesday 14:00 in Bangkok (inside business hours)
FIXED_NOW = datetime(2026, 10, 14, 7, 0, tzinfo=timezone.utc)

SAFE_MESSAGE = "กินข้าวยัง"
PHISHING_MESSAGE = "ด่วน! บัญชีของคุณถูกระงับบัญชี กรุณาติดต่อ 0891234567 ทันที"


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def config():
    from scamshield.config import ScoringConfig
    return ScoringConfig()


@pytest.fixture
def engine(config):
    """Isolated engine without an external judge."""
    from scamshield.services import ThreatScoringEngine
    return ThreatScoringEngine(config=config, clock=fixed_clock)
