"""
ScamShield

Threat scoring and feedback-learning engine for SMS/chat scam messages.
"""

__version__ = "1.0.0"
