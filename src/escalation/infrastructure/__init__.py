"""
Escalation Infrastructure Layer
===============================

Contains:
- Models: SQLAlchemy ORM models
- Repositories: Data access implementations
"""

from src.escalation.infrastructure.models import EscalationModel
from src.escalation.infrastructure.repositories import SQLAlchemyEscalationRepository

__all__ = [
    "EscalationModel",
    "SQLAlchemyEscalationRepository",
]
