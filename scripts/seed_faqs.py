#!/usr/bin/env python3
"""
Seed FAQ Corpus
===============

Loads FAQ entries from a YAML file into the `faqs` table.

Entries whose question already exists are skipped, so the script can be
re-run after adding new entries to the file.

Usage:
    python scripts/seed_faqs.py [data/faqs.yaml] [--threshold 0.15]
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import settings  # noqa: E402
from src.faq.application.dto import FAQCategoryStr, ScooterModelStr  # noqa: E402
from src.infrastructure.database import (  # noqa: E402
    close_database, create_tables, get_session_context, init_database
)
from src.faq.infrastructure import (  # noqa: E402
    SQLAlchemyFAQRepository, SQLAlchemySettingsRepository
)
from src.shared.infrastructure.logging import get_logger, setup_logging  # noqa: E402

logger = get_logger("seed_faqs")

DEFAULT_FAQ_FILE = Path(__file__).parent.parent / "data" / "faqs.yaml"


class FAQSeed(BaseModel):
    """One entry of the seed file."""
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    category: FAQCategoryStr
    scooter_models: List[ScooterModelStr] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    is_active: bool = True


def load_seed_file(path: Path) -> List[FAQSeed]:
    """Load and validate the YAML seed file."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    return [FAQSeed(**item) for item in data.get("faqs", [])]


async def seed(path: Path, threshold: Optional[float] = None) -> int:
    """Insert entries not yet in the corpus. Returns the number inserted."""
    entries = load_seed_file(path)
    logger.info(f"Loaded {len(entries)} FAQ entries from {path}")

    init_database()
    await create_tables()

    created = 0
    try:
        async with get_session_context() as session:
            repo = SQLAlchemyFAQRepository(session)
            existing = {entry.question for entry in await repo.get_active_faqs()}

            for item in entries:
                if item.question in existing:
                    continue
                await repo.create(
                    question=item.question,
                    answer=item.answer,
                    category=item.category,
                    scooter_models=item.scooter_models,
                    tags=item.tags,
                    is_active=item.is_active,
                )
                existing.add(item.question)
                created += 1

            if threshold is not None:
                await SQLAlchemySettingsRepository(session).set_confidence_threshold(threshold)
                logger.info(f"Confidence threshold set to {threshold}")
    finally:
        await close_database()

    logger.info(f"Seeded {created} new FAQ entries ({len(entries) - created} already present)")
    return created


def main():
    parser = argparse.ArgumentParser(description="Load FAQ entries from YAML")
    parser.add_argument("path", nargs="?", type=Path, default=DEFAULT_FAQ_FILE)
    parser.add_argument("--threshold", type=float, default=None,
                        help="Also store this confidence threshold in system_settings")
    args = parser.parse_args()

    setup_logging(settings.log_level, settings.environment)
    asyncio.run(seed(args.path, args.threshold))


if __name__ == "__main__":
    main()
