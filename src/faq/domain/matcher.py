"""
FAQ Matcher
===========

Coordinates scorer, policy and ranker over one corpus snapshot.

Scoring is fanned out over a bounded thread pool. Each candidate is scored
independently, and a failure for one candidate scores it 0.0 instead of
failing the whole match.
"""

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

from src.core import ScoringException
from src.faq.domain.entities import FAQEntry, MatchResult, ScoredCandidate
from src.faq.domain.value_objects import (
    ConfidencePolicy, FAQRanker, TrigramSimilarityScorer
)
from src.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class FAQMatcher:
    """
    Stateless match orchestrator.

    Safe to share between concurrent requests. The optional executor is
    only used for the scoring fan-out and is owned by the caller.
    """

    def __init__(
        self,
        scorer: Optional[TrigramSimilarityScorer] = None,
        policy: Optional[ConfidencePolicy] = None,
        ranker: Optional[FAQRanker] = None,
        executor: Optional[Executor] = None,
        max_workers: int = 4
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._scorer = scorer or TrigramSimilarityScorer()
        self._policy = policy or ConfidencePolicy()
        self._ranker = ranker or FAQRanker()
        self._executor = executor
        self._max_workers = max_workers

    def match(
        self,
        query_text: Optional[str],
        user_models: Optional[Iterable],
        threshold: float,
        corpus: Sequence[FAQEntry],
        limit: Optional[int] = None
    ) -> MatchResult:
        """
        Rank the active entries of `corpus` that clear `threshold`.

        Args:
            query_text: Customer's question; blank text matches nothing
            user_models: Scooter models the customer owns
            threshold: Minimum similarity score to accept
            corpus: FAQ entries to consider (inactive ones are skipped)
            limit: Maximum results, None for all

        Returns:
            MatchResult, empty when the caller should escalate
        """
        active = [entry for entry in corpus if entry.is_active]
        if not active or not (query_text or "").strip():
            return MatchResult.escalate(threshold)

        scored = self._score_all(query_text, active)
        failed = sum(1 for _, ok in scored if not ok)
        candidates = [candidate for candidate, _ in scored]

        accepted = self._policy.filter(candidates, threshold)
        ranked = self._ranker.rank(accepted, user_models, limit)

        logger.debug(
            "FAQ match evaluated",
            extra={
                "corpus_size": len(active),
                "accepted": len(accepted),
                "returned": len(ranked),
                "scoring_failures": failed,
                "threshold": threshold,
            }
        )

        return MatchResult(
            candidates=tuple(ranked),
            threshold=threshold,
            scored_count=len(active),
            failed_count=failed,
        )

    def best_match(
        self,
        query_text: Optional[str],
        user_models: Optional[Iterable],
        threshold: float,
        corpus: Sequence[FAQEntry]
    ) -> Optional[ScoredCandidate]:
        """Top-ranked candidate, or None when nothing clears the threshold."""
        return self.match(
            query_text, user_models, threshold, corpus, limit=FAQRanker.ANSWER_LIMIT
        ).best

    def _score_all(self, query_text: str, entries: List[FAQEntry]) -> List[tuple]:
        """Score every entry, preserving corpus order."""
        def score_one(entry: FAQEntry):
            return self._score_candidate(query_text, entry)

        if self._executor is not None:
            return list(self._executor.map(score_one, entries))

        workers = min(self._max_workers, len(entries))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="faq-score") as pool:
            return list(pool.map(score_one, entries))

    def _score_candidate(self, query_text: str, entry: FAQEntry) -> tuple:
        """Return (ScoredCandidate, succeeded)."""
        try:
            score = float(self._scorer.score(query_text, entry.question, entry.answer))
        except Exception as e:
            error = ScoringException(entry.id, str(e))
            logger.warning(error.message, extra=error.details)
            return ScoredCandidate(entry=entry, similarity_score=0.0), False
        return ScoredCandidate(entry=entry, similarity_score=score), True
