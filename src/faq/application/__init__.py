"""
FAQ Application Layer
=====================

Application layer for the FAQ matching module.

Contains:
- Services: Matching, feedback and chat resolution orchestration
- Ports: Corpus, settings, feedback and escalation interfaces
- DTOs: Data transfer objects for API serialization
"""

from src.faq.application.dto import (
    MatchRequest,
    ResolveRequest,
    RatingRequest,
    FAQEntryInfo,
    MatchedFAQ,
    MatchResponse,
    BrowseResponse,
    FeedbackResponse,
    ResolveResponse,
)
from src.faq.application.services import (
    FAQMatchingService,
    FeedbackService,
    ChatResolutionService,
    ICorpusSource,
    ISettingsSource,
    IFeedbackSink,
    IEscalationSink,
    ESCALATION_MESSAGE,
    SERVICE_UNAVAILABLE_MESSAGE,
)

__all__ = [
    # DTOs
    "MatchRequest",
    "ResolveRequest",
    "RatingRequest",
    "FAQEntryInfo",
    "MatchedFAQ",
    "MatchResponse",
    "BrowseResponse",
    "FeedbackResponse",
    "ResolveResponse",
    # Services
    "FAQMatchingService",
    "FeedbackService",
    "ChatResolutionService",
    # Port Interfaces
    "ICorpusSource",
    "ISettingsSource",
    "IFeedbackSink",
    "IEscalationSink",
    # Messages
    "ESCALATION_MESSAGE",
    "SERVICE_UNAVAILABLE_MESSAGE",
]
