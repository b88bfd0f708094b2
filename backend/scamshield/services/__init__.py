"""
ScamShield Services

Signal sources, external judgment, feedback learning and the engine facade.
"""

from .engine import EngineState, ThreatScoringEngine, build_external_judge, create_engine

__all__ = [
    'EngineState',
    'ThreatScoringEngine',
    'build_external_judge',
    'create_engine',
]
