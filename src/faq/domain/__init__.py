"""
FAQ Domain Layer
================

Domain layer for the FAQ matching module.

Contains:
- Entities: FAQEntry, Query, ScoredCandidate, MatchResult, ChatResolution
- Value Objects: TrigramSimilarityScorer, ConfidencePolicy, FAQRanker
- Domain Services: FAQMatcher

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from src.faq.domain.entities import (
    FAQEntry,
    Query,
    ScoredCandidate,
    MatchResult,
    ChatResolution,
    normalize_models,
)
from src.faq.domain.value_objects import (
    TrigramSimilarityScorer,
    ConfidencePolicy,
    FAQRanker,
    extract_trigrams,
)
from src.faq.domain.matcher import FAQMatcher

__all__ = [
    # Entities
    "FAQEntry",
    "Query",
    "ScoredCandidate",
    "MatchResult",
    "ChatResolution",
    "normalize_models",
    # Value Objects & Services
    "TrigramSimilarityScorer",
    "ConfidencePolicy",
    "FAQRanker",
    "extract_trigrams",
    "FAQMatcher",
]
