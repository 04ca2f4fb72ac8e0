"""
Escalation Domain Layer
=======================

Contains:
- Entities: Escalation
- Lifecycle rules: ALLOWED_TRANSITIONS
"""

from src.escalation.domain.entities import Escalation, ALLOWED_TRANSITIONS

__all__ = [
    "Escalation",
    "ALLOWED_TRANSITIONS",
]
