"""
FAQ Infrastructure Repositories
===============================

SQLAlchemy implementations of the FAQ corpus, feedback and settings ports.
"""

import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import CONFIDENCE_THRESHOLD_SETTING_KEY, FAQCategory, settings
from src.core import (
    CorpusUnavailableException,
    FeedbackWriteException,
    ResourceNotFoundException,
    ValidationException,
)
from src.faq.application import ICorpusSource, IFeedbackSink, ISettingsSource
from src.faq.domain import FAQEntry, normalize_models
from src.faq.infrastructure.models import FAQModel, SystemSettingModel
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


def _parse_uuid(value: Optional[str]) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class SQLAlchemyFAQRepository(ICorpusSource, IFeedbackSink):
    """
    SQLAlchemy implementation for FAQ entries.

    Serves the active corpus to the matcher and applies feedback counters
    as single UPDATE statements, so concurrent votes never overwrite each
    other.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_active_faqs(self, category: Optional[FAQCategory] = None) -> List[FAQEntry]:
        """Get active entries, oldest first."""
        stmt = select(FAQModel).where(FAQModel.is_active.is_(True))
        if category is not None:
            stmt = stmt.where(FAQModel.category == FAQCategory(category).value)
        stmt = stmt.order_by(FAQModel.created_at, FAQModel.id)

        try:
            result = await self._session.execute(stmt)
            models = result.scalars().all()
        except SQLAlchemyError as e:
            raise CorpusUnavailableException(str(e))

        entries = []
        for model in models:
            try:
                entries.append(self._to_domain(model))
            except (TypeError, ValueError) as e:
                # Unknown category or negative counters; skip the row only
                logger.warning(
                    "Skipping unreadable FAQ row",
                    extra={"faq_id": str(model.id), "error": str(e)}
                )
        return entries

    async def get_by_id(self, faq_id: str) -> Optional[FAQEntry]:
        """Get an entry by id, active or not."""
        faq_uuid = _parse_uuid(faq_id)
        if faq_uuid is None:
            return None

        stmt = select(FAQModel).where(FAQModel.id == faq_uuid)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def create(
        self,
        question: str,
        answer: str,
        category: FAQCategory,
        scooter_models: Iterable = (),
        tags: Iterable[str] = (),
        is_active: bool = True
    ) -> FAQEntry:
        """Insert a new entry with zeroed counters."""
        model = FAQModel(
            id=uuid4(),
            question=question,
            answer=answer,
            category=FAQCategory(category).value,
            scooter_models=sorted(normalize_models(scooter_models)),
            tags=sorted(set(tags)),
            is_active=is_active,
            view_count=0,
            helpful_count=0,
            not_helpful_count=0,
            created_at=datetime.now(timezone.utc),
        )

        self._session.add(model)
        await self._session.flush()

        return self._to_domain(model)

    async def increment_view(self, faq_id: str) -> None:
        """Add one to view_count."""
        await self._increment(faq_id, "view_count")

    async def increment_rating(self, faq_id: str, is_helpful: bool) -> None:
        """Add one to helpful_count or not_helpful_count."""
        await self._increment(faq_id, "helpful_count" if is_helpful else "not_helpful_count")

    async def _increment(self, faq_id: str, counter: str) -> None:
        """
        Run `UPDATE faqs SET <counter> = <counter> + 1 WHERE id = :id`.

        Wrapped in a savepoint so a failed write leaves the surrounding
        request transaction usable.
        """
        faq_uuid = _parse_uuid(faq_id)
        if faq_uuid is None:
            raise ResourceNotFoundException("FAQ", faq_id)

        column = getattr(FAQModel, counter)
        stmt = (
            update(FAQModel)
            .where(FAQModel.id == faq_uuid)
            .values({counter: column + 1})
            .execution_options(synchronize_session=False)
        )

        try:
            async with self._session.begin_nested():
                result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            raise FeedbackWriteException(faq_id, counter, str(e))

        if result.rowcount == 0:
            raise ResourceNotFoundException("FAQ", faq_id)

    @staticmethod
    def _to_domain(model: FAQModel) -> FAQEntry:
        return FAQEntry(
            id=str(model.id),
            question=model.question,
            answer=model.answer,
            category=model.category,
            applicable_models=frozenset(model.scooter_models or ()),
            tags=frozenset(model.tags or ()),
            is_active=bool(model.is_active),
            view_count=model.view_count or 0,
            helpful_count=model.helpful_count or 0,
            not_helpful_count=model.not_helpful_count or 0,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


class SQLAlchemySettingsRepository(ISettingsSource):
    """
    Runtime settings stored in the system_settings table.

    A missing, unreadable or malformed threshold falls back to the
    configured default.
    """

    def __init__(self, session: AsyncSession, default_threshold: Optional[float] = None):
        self._session = session
        self._default_threshold = (
            settings.faq_confidence_threshold if default_threshold is None else default_threshold
        )

    async def get_confidence_threshold(self) -> float:
        """Get the threshold, read once per match call."""
        stmt = select(SystemSettingModel.setting_value).where(
            SystemSettingModel.setting_key == CONFIDENCE_THRESHOLD_SETTING_KEY
        )

        try:
            result = await self._session.execute(stmt)
            raw_value = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.warning(
                "Confidence threshold unreadable, using default",
                extra={"error": str(e), "default": self._default_threshold}
            )
            return self._default_threshold

        if raw_value is None:
            return self._default_threshold

        try:
            value = float(raw_value)
        except ValueError:
            value = None

        if value is None or not math.isfinite(value) or not 0.0 <= value <= 1.0:
            logger.warning(
                "Malformed confidence threshold, using default",
                extra={"value": raw_value, "default": self._default_threshold}
            )
            return self._default_threshold
        return value

    async def set_confidence_threshold(self, value: float) -> None:
        """Store a new threshold (0.0 to 1.0)."""
        if not 0.0 <= value <= 1.0:
            raise ValidationException("Confidence threshold must be between 0 and 1")

        model = await self._session.get(SystemSettingModel, CONFIDENCE_THRESHOLD_SETTING_KEY)
        now = datetime.now(timezone.utc)

        if model is None:
            model = SystemSettingModel(
                setting_key=CONFIDENCE_THRESHOLD_SETTING_KEY,
                setting_value=str(value),
                description="Minimum similarity score for answering from the FAQ corpus",
                updated_at=now,
            )
            self._session.add(model)
        else:
            model.setting_value = str(value)
            model.updated_at = now

        await self._session.flush()
