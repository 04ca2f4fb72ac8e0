"""
FAQ Infrastructure Layer
========================

Infrastructure implementations for the FAQ module.

Contains:
- Models: SQLAlchemy ORM models
- Repositories: Corpus, feedback and settings implementations
- External: Adapters to other bounded contexts
"""

from src.faq.infrastructure.models import FAQModel, SystemSettingModel
from src.faq.infrastructure.repositories import (
    SQLAlchemyFAQRepository,
    SQLAlchemySettingsRepository,
)
from src.faq.infrastructure.external import EscalationSinkAdapter

__all__ = [
    "FAQModel",
    "SystemSettingModel",
    "SQLAlchemyFAQRepository",
    "SQLAlchemySettingsRepository",
    "EscalationSinkAdapter",
]
