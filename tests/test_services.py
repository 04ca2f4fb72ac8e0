"""Tests for the FAQ application services, using in-memory fakes for the ports."""

import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config import EscalationPriority, FAQCategory
from src.core import (
    CorpusUnavailableException,
    FeedbackWriteException,
    ResourceNotFoundException,
)
from src.faq.application import (
    ChatResolutionService,
    ESCALATION_MESSAGE,
    FAQMatchingService,
    FeedbackService,
    ICorpusSource,
    IEscalationSink,
    IFeedbackSink,
    ISettingsSource,
)
from src.faq.domain import FAQMatcher, MatchResult, Query


# ── Fakes ────────────────────────────────────────────────────────────────────


class FakeCorpus(ICorpusSource):

    def __init__(self, entries=None, error=None):
        self.entries = list(entries or [])
        self.error = error
        self.calls = []

    async def get_active_faqs(self, category=None):
        self.calls.append(category)
        if self.error:
            raise self.error
        return [e for e in self.entries if category is None or e.category == category]


class FakeSettings(ISettingsSource):

    def __init__(self, threshold=0.15):
        self.threshold = threshold

    async def get_confidence_threshold(self):
        return self.threshold


class FakeFeedback(IFeedbackSink):

    def __init__(self, error=None):
        self.error = error
        self.views = []
        self.ratings = []

    async def increment_view(self, faq_id):
        if self.error:
            raise self.error
        self.views.append(faq_id)

    async def increment_rating(self, faq_id, is_helpful):
        if self.error:
            raise self.error
        self.ratings.append((faq_id, is_helpful))


class FakeEscalations(IEscalationSink):

    def __init__(self):
        self.created = []

    async def create_escalation(self, query_text, priority, user_id=None, conversation_id=None):
        self.created.append((query_text, priority, user_id, conversation_id))
        return f"esc-{len(self.created)}"


def make_matching_service(corpus, threshold=0.15, matcher=None, timeout=2.0):
    return FAQMatchingService(
        corpus,
        FakeSettings(threshold),
        matcher or FAQMatcher(max_workers=2),
        timeout_seconds=timeout,
    )


# ── FAQMatchingService ───────────────────────────────────────────────────────


class TestFAQMatchingService:

    @pytest.mark.asyncio
    async def test_match_uses_current_threshold(self, charging_corpus):
        service = make_matching_service(FakeCorpus(charging_corpus), threshold=0.0)

        result = await service.match(Query("charge"))

        assert result.threshold == 0.0
        assert len(result) == len(charging_corpus)

    @pytest.mark.asyncio
    async def test_category_restricts_corpus(self, charging_corpus):
        corpus = FakeCorpus(charging_corpus)
        service = make_matching_service(corpus, threshold=0.0)

        result = await service.match(Query("scooter"), category=FAQCategory.RANGE)

        assert result.faq_ids == ["faq-range"]
        assert corpus.calls == [FAQCategory.RANGE]

    @pytest.mark.asyncio
    async def test_blank_query_skips_matcher(self, charging_corpus):
        matcher = MagicMock()
        service = make_matching_service(FakeCorpus(charging_corpus), matcher=matcher)

        result = await service.match(Query("   "))

        assert result.should_escalate
        matcher.match.assert_not_called()

    @pytest.mark.asyncio
    async def test_timeout_fails_open(self, charging_corpus):
        def slow_match(*args, **kwargs):
            time.sleep(0.3)
            return MatchResult()

        matcher = MagicMock()
        matcher.match.side_effect = slow_match
        service = make_matching_service(FakeCorpus(charging_corpus), matcher=matcher, timeout=0.05)

        result = await service.match(Query("How do I charge my scooter?"))

        assert result.should_escalate
        assert result.timed_out

    @pytest.mark.asyncio
    async def test_corpus_failure_is_raised_not_escalated(self):
        corpus = FakeCorpus(error=CorpusUnavailableException("connection refused"))
        service = make_matching_service(corpus)

        with pytest.raises(CorpusUnavailableException):
            await service.match(Query("How do I charge?"))

    @pytest.mark.asyncio
    async def test_unexpected_corpus_error_wrapped(self):
        service = make_matching_service(FakeCorpus(error=OSError("socket closed")))

        with pytest.raises(CorpusUnavailableException) as exc_info:
            await service.match(Query("How do I charge?"))

        assert "socket closed" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_inactive_entries_from_source_dropped(self, make_faq):
        corpus = FakeCorpus([
            make_faq("faq-on", "How do I charge?"),
            make_faq("faq-off", "How do I charge?", is_active=False),
        ])
        service = make_matching_service(corpus, threshold=0.0)

        result = await service.match(Query("How do I charge?"))

        assert result.faq_ids == ["faq-on"]

    @pytest.mark.asyncio
    async def test_browse_orders_by_helpful_votes(self, make_faq):
        corpus = FakeCorpus([
            make_faq("a", "Q1", helpful_count=2),
            make_faq("b", "Q2", helpful_count=9),
            make_faq("c", "Q3", helpful_count=2, models=["450S"]),
        ])
        service = make_matching_service(corpus)

        entries = await service.browse()

        assert [e.id for e in entries] == ["b", "a", "c"]

    @pytest.mark.asyncio
    async def test_browse_filters_by_model_and_limit(self, make_faq):
        corpus = FakeCorpus([
            make_faq("a", "Q1", models=["450X"], helpful_count=1),
            make_faq("b", "Q2", models=["Rizta"], helpful_count=5),
            make_faq("c", "Q3", models=["450X", "Rizta"], helpful_count=3),
        ])
        service = make_matching_service(corpus)

        entries = await service.browse(scooter_models=["450X"], limit=1)

        assert [e.id for e in entries] == ["c"]


# ── FeedbackService ──────────────────────────────────────────────────────────


class TestFeedbackService:

    @pytest.mark.asyncio
    async def test_record_view_and_rating(self):
        sink = FakeFeedback()
        service = FeedbackService(sink)

        await service.record_view("faq-1")
        await service.record_rating("faq-1", True)
        await service.record_rating("faq-1", False)

        assert sink.views == ["faq-1"]
        assert sink.ratings == [("faq-1", True), ("faq-1", False)]

    @pytest.mark.asyncio
    async def test_write_failure_raised(self):
        service = FeedbackService(FakeFeedback(FeedbackWriteException("faq-1", "view_count", "disk full")))

        with pytest.raises(FeedbackWriteException):
            await service.record_view("faq-1")

    @pytest.mark.asyncio
    async def test_unknown_faq_raised(self):
        service = FeedbackService(FakeFeedback(ResourceNotFoundException("FAQ", "missing")))

        with pytest.raises(ResourceNotFoundException):
            await service.record_rating("missing", True)

    @pytest.mark.asyncio
    async def test_failed_write_not_retried(self):
        sink = MagicMock(spec=IFeedbackSink)
        sink.increment_view = AsyncMock(side_effect=FeedbackWriteException("faq-1", "view_count", "timeout"))

        with pytest.raises(FeedbackWriteException):
            await FeedbackService(sink).record_view("faq-1")

        assert sink.increment_view.await_count == 1


# ── ChatResolutionService ────────────────────────────────────────────────────


class TestChatResolutionService:

    def build(self, corpus, feedback=None, priority=EscalationPriority.MEDIUM):
        feedback = feedback or FakeFeedback()
        escalations = FakeEscalations()
        service = ChatResolutionService(
            make_matching_service(FakeCorpus(corpus)),
            FeedbackService(feedback),
            escalations,
            priority,
        )
        return service, feedback, escalations

    @pytest.mark.asyncio
    async def test_match_answers_and_records_view(self, charging_corpus):
        service, feedback, escalations = self.build(charging_corpus)

        resolution = await service.resolve(Query("How do I charge my scooter?"))

        assert not resolution.escalated
        assert resolution.response == "Use the portable charger."
        assert resolution.faq_matched_id == "faq-charge"
        assert resolution.view_recorded
        assert feedback.views == ["faq-charge"]
        assert escalations.created == []

    @pytest.mark.asyncio
    async def test_no_match_creates_pending_escalation(self, charging_corpus):
        service, feedback, escalations = self.build(charging_corpus, priority=EscalationPriority.HIGH)

        resolution = await service.resolve(
            Query("Bluetooth pairing keeps failing"), user_id="user-1", conversation_id="conv-1"
        )

        assert resolution.escalated
        assert resolution.response == ESCALATION_MESSAGE
        assert resolution.escalation_id == "esc-1"
        assert resolution.confidence_score == 0.0
        assert escalations.created == [
            ("Bluetooth pairing keeps failing", EscalationPriority.HIGH, "user-1", "conv-1")
        ]
        assert feedback.views == []

    @pytest.mark.asyncio
    async def test_view_failure_does_not_block_answer(self, charging_corpus):
        feedback = FakeFeedback(FeedbackWriteException("faq-charge", "view_count", "disk full"))
        service, _, escalations = self.build(charging_corpus, feedback=feedback)

        resolution = await service.resolve(Query("How do I charge my scooter?"))

        assert not resolution.escalated
        assert resolution.faq_matched_id == "faq-charge"
        assert not resolution.view_recorded
        assert resolution.notes
        assert escalations.created == []

    @pytest.mark.asyncio
    async def test_corpus_failure_does_not_escalate(self):
        escalations = FakeEscalations()
        service = ChatResolutionService(
            make_matching_service(FakeCorpus(error=CorpusUnavailableException("down"))),
            FeedbackService(FakeFeedback()),
            escalations,
        )

        with pytest.raises(CorpusUnavailableException):
            await service.resolve(Query("How do I charge?"))

        assert escalations.created == []
