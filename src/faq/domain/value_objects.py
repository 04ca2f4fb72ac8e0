"""
FAQ Matching Primitives
=======================

Stateless building blocks of the matching engine:

- TrigramSimilarityScorer: lexical closeness of a query to an FAQ
- ConfidencePolicy: accept/reject a score against a threshold
- FAQRanker: model affinity, score and id ordering with truncation

All three are pure; the same inputs always give the same output.
"""

import re
from functools import lru_cache
from typing import FrozenSet, Iterable, List, Optional, Sequence

from src.faq.domain.entities import ScoredCandidate, normalize_models


# pg_trgm treats runs of letters and digits as words
_WORD_PATTERN = re.compile(r"[^\W_]+")


@lru_cache(maxsize=4096)
def extract_trigrams(text: str) -> FrozenSet[str]:
    """
    Return the set of trigrams of a text.

    Each lower-cased word is padded with two leading blanks and one
    trailing blank, then cut into 3-character windows, so "on" yields
    "  o", " on" and "on ".
    """
    trigrams = set()
    for word in _WORD_PATTERN.findall(text.lower()):
        padded = f"  {word} "
        for i in range(len(padded) - 2):
            trigrams.add(padded[i:i + 3])
    return frozenset(trigrams)


class TrigramSimilarityScorer:
    """
    Trigram-set similarity between a query and an FAQ.

    similarity(a, b) = |T(a) & T(b)| / |T(a) | T(b)|, the measure used by
    PostgreSQL's pg_trgm. The FAQ score is the better of the query against
    the question alone and against question plus answer, so a query equal
    to a question always scores 1.0.
    """

    @staticmethod
    def similarity(left: Optional[str], right: Optional[str]) -> float:
        """Jaccard similarity of the two texts' trigram sets (0.0 to 1.0)."""
        if not left or not right:
            return 0.0

        left_trigrams = extract_trigrams(left)
        right_trigrams = extract_trigrams(right)
        if not left_trigrams or not right_trigrams:
            return 0.0

        shared = len(left_trigrams & right_trigrams)
        if shared == 0:
            return 0.0
        return shared / len(left_trigrams | right_trigrams)

    def score(
        self,
        query_text: Optional[str],
        faq_question: Optional[str],
        faq_answer: Optional[str]
    ) -> float:
        """
        Score an FAQ against a query.

        Empty or missing text contributes no overlap; this never raises for
        None or "" and returns 0.0 instead.
        """
        if not query_text:
            return 0.0

        question = faq_question or ""
        combined = f"{question} {faq_answer or ''}".strip()

        return max(
            self.similarity(query_text, question),
            self.similarity(query_text, combined),
        )


class ConfidencePolicy:
    """
    Threshold check for candidate scores.

    Holds no state; the threshold is passed in on every call because the
    settings source may change it between calls.
    """

    @staticmethod
    def accepts(score: float, threshold: float) -> bool:
        return score >= threshold

    @classmethod
    def filter(
        cls,
        candidates: Iterable[ScoredCandidate],
        threshold: float
    ) -> List[ScoredCandidate]:
        """Keep candidates whose score clears the threshold, in input order."""
        return [c for c in candidates if cls.accepts(c.similarity_score, threshold)]


class FAQRanker:
    """
    Orders scored candidates for presentation.

    Sort key, in priority order:
    1. entries targeting one of the user's models come first
    2. similarity score, descending
    3. FAQ id, ascending
    """

    SEARCH_LIMIT = 10
    ANSWER_LIMIT = 1

    @staticmethod
    def rank(
        candidates: Sequence[ScoredCandidate],
        user_models: Optional[Iterable] = None,
        limit: Optional[int] = None
    ) -> List[ScoredCandidate]:
        """
        Rank candidates and truncate to `limit` (None keeps everything).

        Raises:
            ValueError: If limit is negative
        """
        if limit is not None and limit < 0:
            raise ValueError("limit cannot be negative")

        models = normalize_models(user_models)

        def sort_key(candidate: ScoredCandidate):
            has_affinity = bool(models) and candidate.entry.matches_models(models)
            return (not has_affinity, -candidate.similarity_score, candidate.faq_id)

        ranked = sorted(candidates, key=sort_key)

        if limit is not None:
            ranked = ranked[:limit]
        return ranked
