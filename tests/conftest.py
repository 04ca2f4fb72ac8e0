"""Shared fixtures: FAQ entry factory and a throwaway SQLite database per test."""

import pytest
import pytest_asyncio

from src.faq.domain import FAQEntry
from src.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)


# ── Domain fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def make_faq():
    """Build FAQEntry values with sensible defaults."""

    def _make(
        faq_id: str,
        question: str,
        answer: str = "",
        category: str = "charging",
        models=(),
        is_active: bool = True,
        helpful_count: int = 0,
    ) -> FAQEntry:
        return FAQEntry(
            id=faq_id,
            question=question,
            answer=answer,
            category=category,
            applicable_models=frozenset(models),
            is_active=is_active,
            helpful_count=helpful_count,
        )

    return _make


@pytest.fixture
def charging_corpus(make_faq):
    return [
        make_faq("faq-charge", "How do I charge my scooter?", "Use the portable charger."),
        make_faq(
            "faq-range",
            "What is the range of my scooter?",
            "Around 105 km in Eco mode.",
            category="range",
        ),
        make_faq(
            "faq-service",
            "When is my first service due?",
            "At 1,000 km or 3 months.",
            category="service",
        ),
        make_faq(
            "faq-warranty",
            "What does the battery warranty cover?",
            "Manufacturing defects for 3 years.",
            category="warranty",
        ),
    ]


# ── Database fixtures ────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh SQLite file database with all tables created."""
    init_database(f"sqlite+aiosqlite:///{tmp_path / 'faq_test.db'}")
    await create_tables()
    yield
    await close_database()


@pytest_asyncio.fixture
async def session(database):
    async with get_session_context() as session:
        yield session
