"""
FAQ Application Services
========================

Application services for FAQ matching, feedback and chat resolution.

Orchestrates the domain matcher against the corpus, settings, feedback and
escalation ports.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from functools import partial
from typing import Iterable, List, Optional

from src.config import EscalationPriority, FAQCategory
from src.core import (
    ApplicationException,
    CorpusUnavailableException,
    FeedbackWriteException,
)
from src.faq.domain import (
    ChatResolution,
    FAQEntry,
    FAQMatcher,
    FAQRanker,
    MatchResult,
    Query,
    ScoredCandidate,
    normalize_models,
)
from src.shared.infrastructure.logging import get_logger, log_latency

logger = get_logger(__name__)


ESCALATION_MESSAGE = (
    "I'm sorry, I couldn't find a specific answer to your question. "
    "Our team will review this and get back to you."
)
SERVICE_UNAVAILABLE_MESSAGE = (
    "The FAQ service is temporarily unavailable. Please try again shortly."
)


# ========== Port Interfaces ==========

class ICorpusSource(ABC):
    """Interface for reading the FAQ corpus."""

    @abstractmethod
    async def get_active_faqs(self, category: Optional[FAQCategory] = None) -> List[FAQEntry]:
        """Get active FAQ entries, optionally limited to one category."""


class ISettingsSource(ABC):
    """Interface for runtime settings owned by admins."""

    @abstractmethod
    async def get_confidence_threshold(self) -> float:
        """Get the current confidence threshold."""


class IFeedbackSink(ABC):
    """Interface for atomic FAQ counter updates."""

    @abstractmethod
    async def increment_view(self, faq_id: str) -> None:
        """Add one to view_count."""

    @abstractmethod
    async def increment_rating(self, faq_id: str, is_helpful: bool) -> None:
        """Add one to helpful_count or not_helpful_count."""


class IEscalationSink(ABC):
    """Interface for opening escalations when no FAQ answers a query."""

    @abstractmethod
    async def create_escalation(
        self,
        query_text: str,
        priority: EscalationPriority,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None
    ) -> str:
        """Create a pending escalation and return its id."""


# ========== Application Services ==========

class FAQMatchingService:
    """
    Service for matching customer queries against the FAQ corpus.

    Loads the corpus and threshold once per call, then runs the matcher off
    the event loop under a timeout. A timeout fails open to an empty
    (escalating) result; a corpus failure is raised to the caller.
    """

    def __init__(
        self,
        corpus_source: ICorpusSource,
        settings_source: ISettingsSource,
        matcher: FAQMatcher,
        timeout_seconds: float = 2.0
    ):
        self._corpus = corpus_source
        self._settings = settings_source
        self._matcher = matcher
        self._timeout_seconds = timeout_seconds

    async def match(
        self,
        query: Query,
        category: Optional[FAQCategory] = None,
        limit: Optional[int] = None
    ) -> MatchResult:
        """
        Match a query against the active corpus.

        Args:
            query: Query text and the customer's scooter models
            category: Restrict the corpus to one category
            limit: Maximum results, None for all

        Returns:
            MatchResult, empty when the query should be escalated

        Raises:
            CorpusUnavailableException: If the corpus cannot be loaded
        """
        corpus = await self._load_corpus(category)
        threshold = await self._settings.get_confidence_threshold()

        if query.is_blank or not corpus:
            return MatchResult.escalate(threshold)

        loop = asyncio.get_running_loop()
        run_match = partial(
            self._matcher.match,
            query.text,
            query.user_models,
            threshold,
            corpus,
            limit,
        )

        try:
            with log_latency(logger, "faq_match", corpus_size=len(corpus)):
                result = await asyncio.wait_for(
                    loop.run_in_executor(None, run_match),
                    timeout=self._timeout_seconds,
                )
        except asyncio.TimeoutError:
            logger.warning(
                "FAQ match timed out, escalating",
                extra={"corpus_size": len(corpus), "timeout_seconds": self._timeout_seconds}
            )
            return MatchResult.escalate(threshold, timed_out=True)

        if result.failed_count:
            logger.warning(
                "FAQ match completed with scoring failures",
                extra={"failed": result.failed_count, "scored": result.scored_count}
            )
        return result

    async def best_match(
        self,
        query: Query,
        category: Optional[FAQCategory] = None
    ) -> Optional[ScoredCandidate]:
        """Top candidate for answering a chat message, or None."""
        result = await self.match(query, category=category, limit=FAQRanker.ANSWER_LIMIT)
        return result.best

    async def browse(
        self,
        category: Optional[FAQCategory] = None,
        scooter_models: Optional[Iterable] = None,
        limit: Optional[int] = None
    ) -> List[FAQEntry]:
        """
        List active entries for the category browser.

        Entries are filtered to those targeting one of `scooter_models` when
        given, and ordered by helpful votes (most helpful first).
        """
        corpus = await self._load_corpus(category)
        models = normalize_models(scooter_models)

        if models:
            corpus = [entry for entry in corpus if entry.matches_models(models)]

        ordered = sorted(corpus, key=lambda e: (-e.helpful_count, e.id))
        return ordered[:limit] if limit is not None else ordered

    async def _load_corpus(self, category: Optional[FAQCategory]) -> List[FAQEntry]:
        try:
            corpus = await self._corpus.get_active_faqs(category)
        except CorpusUnavailableException:
            logger.error("FAQ corpus unavailable", extra={"category": category})
            raise
        except ApplicationException:
            raise
        except Exception as e:
            logger.error("FAQ corpus load failed", extra={"error": str(e)})
            raise CorpusUnavailableException(str(e))
        # The source filters already; drop anything inactive that slipped through
        return [entry for entry in corpus if entry.is_active]


class FeedbackService:
    """
    Service for the FAQ feedback loop.

    Increments are delegated to the sink as single atomic updates. Failures
    are logged and raised; nothing is retried here.
    """

    def __init__(self, feedback_sink: IFeedbackSink):
        self._sink = feedback_sink

    async def record_view(self, faq_id: str) -> None:
        """Add one view to an FAQ."""
        try:
            await self._sink.increment_view(faq_id)
        except FeedbackWriteException as e:
            logger.error(e.message, extra=e.details)
            raise

    async def record_rating(self, faq_id: str, is_helpful: bool) -> None:
        """Add one helpful or not-helpful vote to an FAQ."""
        try:
            await self._sink.increment_rating(faq_id, is_helpful)
        except FeedbackWriteException as e:
            logger.error(e.message, extra=e.details)
            raise


class ChatResolutionService:
    """
    Answers a chat message from the FAQ corpus or escalates it.

    - Best match found: respond with its answer and record a view. A failed
      view write is logged and does not change the answer.
    - No match: open a pending escalation and respond with the fallback
      message.
    - Corpus unavailable: the exception propagates so the caller can show
      a degraded-service message instead of escalating.
    """

    def __init__(
        self,
        matching_service: FAQMatchingService,
        feedback_service: FeedbackService,
        escalation_sink: IEscalationSink,
        default_priority: EscalationPriority = EscalationPriority.MEDIUM
    ):
        self._matching = matching_service
        self._feedback = feedback_service
        self._escalations = escalation_sink
        self._default_priority = EscalationPriority(default_priority)

    async def resolve(
        self,
        query: Query,
        user_id: Optional[str] = None,
        conversation_id: Optional[str] = None
    ) -> ChatResolution:
        start_time = time.perf_counter()
        best = await self._matching.best_match(query)

        if best is not None:
            resolution = ChatResolution(
                query=query.text,
                response=best.entry.answer,
                confidence_score=best.similarity_score,
                escalated=False,
                faq_matched_id=best.faq_id,
            )
            try:
                await self._feedback.record_view(best.faq_id)
                resolution.view_recorded = True
            except ApplicationException as e:
                logger.warning(
                    "View not recorded for answered query",
                    extra={"faq_id": best.faq_id, "error": e.message}
                )
                resolution.notes.append(f"view not recorded: {e.message}")
        else:
            escalation_id = await self._escalations.create_escalation(
                query.text,
                self._default_priority,
                user_id=user_id,
                conversation_id=conversation_id,
            )
            resolution = ChatResolution(
                query=query.text,
                response=ESCALATION_MESSAGE,
                confidence_score=0.0,
                escalated=True,
                escalation_id=escalation_id,
            )

        logger.info(
            "Chat query resolved",
            extra={
                "escalated": resolution.escalated,
                "faq_matched_id": resolution.faq_matched_id,
                "confidence_score": round(resolution.confidence_score, 4),
                "latency_ms": int((time.perf_counter() - start_time) * 1000),
            }
        )
        return resolution
