"""
FAQ Domain Entities
===================

Typed records for the FAQ matching engine.

FAQ rows are read into immutable entries; a match call never mutates them.
Counters change only through the feedback loop at the storage layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Iterable, Iterator, Optional, Tuple

from src.config import FAQCategory


def normalize_models(models: Optional[Iterable]) -> FrozenSet[str]:
    """
    Reduce scooter model tags to a frozenset of plain strings.

    Enum members and their raw values must compare and hash alike when
    intersecting an entry's models with a user's models.
    """
    if not models:
        return frozenset()
    return frozenset(
        m.value if isinstance(m, Enum) else str(m)
        for m in models
    )


@dataclass(frozen=True)
class FAQEntry:
    """
    One question/answer record in the knowledge base.

    An empty `applicable_models` set means the entry applies to every
    scooter model.
    """
    id: str
    question: str
    answer: str
    category: FAQCategory
    applicable_models: FrozenSet[str] = frozenset()
    tags: FrozenSet[str] = frozenset()
    is_active: bool = True
    view_count: int = 0
    helpful_count: int = 0
    not_helpful_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Normalize collections and validate counters."""
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "category", FAQCategory(self.category))
        object.__setattr__(self, "applicable_models", normalize_models(self.applicable_models))
        object.__setattr__(self, "tags", frozenset(self.tags or ()))

        for counter in ("view_count", "helpful_count", "not_helpful_count"):
            if getattr(self, counter) < 0:
                raise ValueError(f"{counter} cannot be negative")

    def matches_models(self, user_models: Optional[Iterable]) -> bool:
        """Check whether any of the user's models is one this entry targets."""
        return bool(self.applicable_models & normalize_models(user_models))

    @property
    def helpfulness_ratio(self) -> Optional[float]:
        """Share of helpful votes, or None before the first vote."""
        total = self.helpful_count + self.not_helpful_count
        if total == 0:
            return None
        return self.helpful_count / total


@dataclass(frozen=True)
class Query:
    """A customer's free-text question plus the scooter models they own."""
    text: str
    user_models: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "text", self.text or "")
        object.__setattr__(self, "user_models", normalize_models(self.user_models))

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class ScoredCandidate:
    """
    An FAQ entry with its similarity to one query.

    Scores are only comparable within the match call that produced them.
    """
    entry: FAQEntry
    similarity_score: float

    @property
    def faq_id(self) -> str:
        return self.entry.id


@dataclass(frozen=True)
class MatchResult:
    """
    Ranked candidates that cleared the confidence threshold.

    An empty result tells the caller to escalate to human support.
    """
    candidates: Tuple[ScoredCandidate, ...] = ()
    threshold: float = 0.0
    timed_out: bool = False
    scored_count: int = 0
    failed_count: int = 0

    @classmethod
    def escalate(cls, threshold: float, timed_out: bool = False) -> "MatchResult":
        """Build an empty result."""
        return cls(candidates=(), threshold=threshold, timed_out=timed_out)

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self) -> Iterator[ScoredCandidate]:
        return iter(self.candidates)

    @property
    def should_escalate(self) -> bool:
        return not self.candidates

    @property
    def best(self) -> Optional[ScoredCandidate]:
        return self.candidates[0] if self.candidates else None

    @property
    def faq_ids(self) -> list[str]:
        return [c.faq_id for c in self.candidates]


@dataclass
class ChatResolution:
    """
    Outcome of answering one chat message from the FAQ corpus.

    Either carries the matched answer or the escalation that was opened.
    """
    query: str
    response: str
    confidence_score: float
    escalated: bool
    faq_matched_id: Optional[str] = None
    escalation_id: Optional[str] = None
    view_recorded: bool = False
    notes: list[str] = field(default_factory=list)
