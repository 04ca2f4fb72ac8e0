"""Tests for the SQLAlchemy FAQ and settings repositories on a temporary SQLite file."""

import asyncio
from uuid import uuid4

import pytest
from sqlalchemy import select

from src.config import CONFIDENCE_THRESHOLD_SETTING_KEY, FAQCategory
from src.core import ResourceNotFoundException, ValidationException
from src.faq.infrastructure import (
    FAQModel,
    SQLAlchemyFAQRepository,
    SQLAlchemySettingsRepository,
    SystemSettingModel,
)
from src.infrastructure.database import get_session_context


async def create_faq(**overrides):
    values = {
        "question": "How do I charge my scooter?",
        "answer": "Use the portable charger.",
        "category": FAQCategory.CHARGING,
        "scooter_models": [],
        "tags": ["charging"],
    }
    values.update(overrides)
    async with get_session_context() as session:
        return await SQLAlchemyFAQRepository(session).create(**values)


async def load_faq(faq_id):
    async with get_session_context() as session:
        return await SQLAlchemyFAQRepository(session).get_by_id(faq_id)


# ── Corpus ───────────────────────────────────────────────────────────────────


class TestCorpusQueries:

    @pytest.mark.asyncio
    async def test_create_round_trips_fields(self, database):
        created = await create_faq(scooter_models=["450X", "Rizta"], tags=["time", "charging"])

        loaded = await load_faq(created.id)

        assert loaded.question == "How do I charge my scooter?"
        assert loaded.category == FAQCategory.CHARGING
        assert loaded.applicable_models == {"450X", "Rizta"}
        assert loaded.tags == {"time", "charging"}
        assert loaded.view_count == 0

    @pytest.mark.asyncio
    async def test_active_faqs_exclude_inactive(self, database):
        active = await create_faq()
        await create_faq(question="Old pricing question", is_active=False)

        async with get_session_context() as session:
            entries = await SQLAlchemyFAQRepository(session).get_active_faqs()

        assert [e.id for e in entries] == [active.id]

    @pytest.mark.asyncio
    async def test_active_faqs_by_category(self, database):
        await create_faq()
        warranty = await create_faq(
            question="What does the warranty cover?",
            category=FAQCategory.WARRANTY,
        )

        async with get_session_context() as session:
            entries = await SQLAlchemyFAQRepository(session).get_active_faqs(FAQCategory.WARRANTY)

        assert [e.id for e in entries] == [warranty.id]

    @pytest.mark.asyncio
    async def test_unknown_category_row_skipped(self, database):
        valid = await create_faq()
        async with get_session_context() as session:
            session.add(FAQModel(question="How long does the battery last?", answer="A", category="battery"))

        async with get_session_context() as session:
            entries = await SQLAlchemyFAQRepository(session).get_active_faqs()

        assert [e.id for e in entries] == [valid.id]

    @pytest.mark.asyncio
    async def test_get_by_id_unknown_or_malformed(self, session):
        repo = SQLAlchemyFAQRepository(session)

        assert await repo.get_by_id(str(uuid4())) is None
        assert await repo.get_by_id("not-a-uuid") is None


# ── Feedback counters ────────────────────────────────────────────────────────


class TestFeedbackCounters:

    @pytest.mark.asyncio
    async def test_increment_view(self, database):
        faq = await create_faq()

        async with get_session_context() as session:
            await SQLAlchemyFAQRepository(session).increment_view(faq.id)

        assert (await load_faq(faq.id)).view_count == 1

    @pytest.mark.asyncio
    async def test_rating_touches_one_counter(self, database):
        faq = await create_faq()

        async with get_session_context() as session:
            repo = SQLAlchemyFAQRepository(session)
            await repo.increment_rating(faq.id, True)
            await repo.increment_rating(faq.id, True)
            await repo.increment_rating(faq.id, False)

        loaded = await load_faq(faq.id)
        assert loaded.helpful_count == 2
        assert loaded.not_helpful_count == 1
        assert loaded.view_count == 0

    @pytest.mark.asyncio
    async def test_concurrent_views_are_not_lost(self, database):
        faq = await create_faq()
        writers = 20

        async def view_once():
            async with get_session_context() as session:
                await SQLAlchemyFAQRepository(session).increment_view(faq.id)

        await asyncio.gather(*(view_once() for _ in range(writers)))

        assert (await load_faq(faq.id)).view_count == writers

    @pytest.mark.asyncio
    async def test_concurrent_mixed_votes(self, database):
        faq = await create_faq()

        async def vote(is_helpful):
            async with get_session_context() as session:
                await SQLAlchemyFAQRepository(session).increment_rating(faq.id, is_helpful)

        await asyncio.gather(*(vote(i % 3 != 0) for i in range(12)))

        loaded = await load_faq(faq.id)
        assert loaded.helpful_count == 8
        assert loaded.not_helpful_count == 4

    @pytest.mark.asyncio
    async def test_unknown_faq_not_found(self, session):
        repo = SQLAlchemyFAQRepository(session)

        with pytest.raises(ResourceNotFoundException):
            await repo.increment_view(str(uuid4()))

        with pytest.raises(ResourceNotFoundException):
            await repo.increment_rating("not-a-uuid", True)

    @pytest.mark.asyncio
    async def test_failed_increment_leaves_session_usable(self, database):
        faq = await create_faq()

        async with get_session_context() as session:
            repo = SQLAlchemyFAQRepository(session)
            with pytest.raises(ResourceNotFoundException):
                await repo.increment_view(str(uuid4()))
            await repo.increment_view(faq.id)

        assert (await load_faq(faq.id)).view_count == 1


# ── Settings ─────────────────────────────────────────────────────────────────


class TestSettingsRepository:

    @pytest.mark.asyncio
    async def test_missing_setting_uses_default(self, session):
        repo = SQLAlchemySettingsRepository(session, default_threshold=0.15)

        assert await repo.get_confidence_threshold() == 0.15

    @pytest.mark.asyncio
    async def test_stored_threshold_wins(self, database):
        async with get_session_context() as session:
            await SQLAlchemySettingsRepository(session).set_confidence_threshold(0.4)

        async with get_session_context() as session:
            assert await SQLAlchemySettingsRepository(session).get_confidence_threshold() == 0.4

    @pytest.mark.asyncio
    async def test_threshold_update_replaces_value(self, database):
        async with get_session_context() as session:
            repo = SQLAlchemySettingsRepository(session)
            await repo.set_confidence_threshold(0.4)
            await repo.set_confidence_threshold(0.25)

        async with get_session_context() as session:
            rows = (await session.execute(select(SystemSettingModel))).scalars().all()

        assert [(r.setting_key, r.setting_value) for r in rows] == [
            (CONFIDENCE_THRESHOLD_SETTING_KEY, "0.25")
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw_value", ["high", "nan", "inf", "-inf", "-1", "1.5"])
    async def test_malformed_threshold_uses_default(self, database, raw_value):
        async with get_session_context() as session:
            session.add(SystemSettingModel(
                setting_key=CONFIDENCE_THRESHOLD_SETTING_KEY,
                setting_value=raw_value,
            ))

        async with get_session_context() as session:
            repo = SQLAlchemySettingsRepository(session, default_threshold=0.15)
            assert await repo.get_confidence_threshold() == 0.15

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [-0.1, 1.5])
    async def test_out_of_range_threshold_rejected(self, session, value):
        with pytest.raises(ValidationException):
            await SQLAlchemySettingsRepository(session).set_confidence_threshold(value)


# ── Schema ───────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_counters_default_to_zero(database):
    async with get_session_context() as session:
        session.add(FAQModel(question="Q", answer="A", category="cost"))

    async with get_session_context() as session:
        model = (await session.execute(select(FAQModel))).scalar_one()

    assert (model.view_count, model.helpful_count, model.not_helpful_count) == (0, 0, 0)
    assert model.is_active is True
