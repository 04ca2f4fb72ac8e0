"""
FAQ Application DTOs
====================

Data Transfer Objects for the FAQ API layer.

Pydantic models for request/response validation.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from src.config import FAQ_CATEGORIES, SCOOTER_MODELS
from src.faq.domain import ChatResolution, FAQEntry, MatchResult, ScoredCandidate


# ========== Type Aliases for Literals ==========
FAQCategoryStr = Literal[tuple(FAQ_CATEGORIES)]
ScooterModelStr = Literal[tuple(SCOOTER_MODELS)]

MAX_QUERY_LENGTH = 2000


# ========== Request DTOs ==========

class MatchRequest(BaseModel):
    """Request model for ranked FAQ matching."""
    query: str = Field(..., description="Customer query (blank text matches nothing)")
    scooter_models: List[ScooterModelStr] = Field(
        default_factory=list,
        description="Scooter models the customer owns"
    )
    category: Optional[FAQCategoryStr] = Field(None, description="Restrict to one category")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum results")

    @field_validator("query")
    @classmethod
    def validate_query_length(cls, v: str) -> str:
        """Ensure query is not too long."""
        if len(v) > MAX_QUERY_LENGTH:
            raise ValueError(f"Query too long (max {MAX_QUERY_LENGTH} characters)")
        return v


class ResolveRequest(BaseModel):
    """Request model for answering a chat message."""
    query: str = Field(..., min_length=1, description="Chat message text")
    scooter_models: List[ScooterModelStr] = Field(default_factory=list)
    user_id: Optional[str] = Field(None, description="Customer ID")
    conversation_id: Optional[str] = Field(None, description="Chat conversation ID")

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Reject whitespace-only and oversized messages."""
        if not v.strip():
            raise ValueError("Query cannot be blank")
        if len(v) > MAX_QUERY_LENGTH:
            raise ValueError(f"Query too long (max {MAX_QUERY_LENGTH} characters)")
        return v


class RatingRequest(BaseModel):
    """Request model for a helpful/not-helpful vote."""
    is_helpful: bool = Field(..., description="True for helpful, False for not helpful")


# ========== Response DTOs ==========

class FAQEntryInfo(BaseModel):
    """FAQ entry as shown to customers."""
    id: str
    question: str
    answer: str
    category: FAQCategoryStr
    scooter_models: List[str]
    tags: List[str]
    view_count: int
    helpful_count: int
    not_helpful_count: int
    helpfulness_ratio: Optional[float] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, entry: FAQEntry) -> "FAQEntryInfo":
        """Create from domain entity."""
        return cls(
            id=entry.id,
            question=entry.question,
            answer=entry.answer,
            category=entry.category.value,
            scooter_models=sorted(entry.applicable_models),
            tags=sorted(entry.tags),
            view_count=entry.view_count,
            helpful_count=entry.helpful_count,
            not_helpful_count=entry.not_helpful_count,
            helpfulness_ratio=entry.helpfulness_ratio,
            updated_at=entry.updated_at,
        )


class MatchedFAQ(BaseModel):
    """One ranked match."""
    rank: int
    similarity_score: float
    faq: FAQEntryInfo

    @classmethod
    def from_domain(cls, rank: int, candidate: ScoredCandidate) -> "MatchedFAQ":
        return cls(
            rank=rank,
            similarity_score=round(candidate.similarity_score, 6),
            faq=FAQEntryInfo.from_domain(candidate.entry),
        )


class MatchResponse(BaseModel):
    """Response model for matching and search."""
    query: str
    threshold: float
    escalate: bool
    timed_out: bool = False
    matches: List[MatchedFAQ]
    processing_time_ms: int

    @classmethod
    def from_domain(cls, query: str, result: MatchResult, processing_time_ms: int) -> "MatchResponse":
        return cls(
            query=query,
            threshold=result.threshold,
            escalate=result.should_escalate,
            timed_out=result.timed_out,
            matches=[
                MatchedFAQ.from_domain(rank, candidate)
                for rank, candidate in enumerate(result, 1)
            ],
            processing_time_ms=processing_time_ms,
        )


class BrowseResponse(BaseModel):
    faqs: List[FAQEntryInfo]
    total_count: int


class FeedbackResponse(BaseModel):
    """Acknowledgement of a recorded view or vote."""
    faq_id: str
    counter: Literal["view_count", "helpful_count", "not_helpful_count"]
    status: str = "recorded"


class ResolveResponse(BaseModel):
    """Response model for chat resolution."""
    response: str
    escalated: bool
    confidence_score: float
    faq_matched_id: Optional[str] = None
    escalation_id: Optional[str] = None
    processing_time_ms: int

    @classmethod
    def from_domain(cls, resolution: ChatResolution, processing_time_ms: int) -> "ResolveResponse":
        return cls(
            response=resolution.response,
            escalated=resolution.escalated,
            confidence_score=round(resolution.confidence_score, 6),
            faq_matched_id=resolution.faq_matched_id,
            escalation_id=resolution.escalation_id,
            processing_time_ms=processing_time_ms,
        )
