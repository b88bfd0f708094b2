"""
ScamShield API

HTTP surface over the threat scoring engine.
"""
