"""Tests for the FAQ matcher: end-to-end matching over an in-memory corpus."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from src.faq.domain import FAQMatcher, TrigramSimilarityScorer


@pytest.fixture
def matcher():
    return FAQMatcher(max_workers=2)


class FlakyScorer(TrigramSimilarityScorer):
    """Fails for one FAQ question, scores everything else normally."""

    def __init__(self, failing_question: str):
        self.failing_question = failing_question

    def score(self, query_text, faq_question, faq_answer):
        if faq_question == self.failing_question:
            raise RuntimeError("similarity backend error")
        return super().score(query_text, faq_question, faq_answer)


# ── Scenarios ────────────────────────────────────────────────────────────────


class TestMatchScenarios:

    def test_charge_query_matches_charge_faq(self, matcher, make_faq):
        faq = make_faq("faq-1", "How do I charge my scooter?", "Use the portable charger.")

        result = matcher.match("How do I charge my scooter", [], 0.15, [faq])

        assert result.faq_ids == ["faq-1"]
        assert not result.should_escalate

    def test_unrelated_query_escalates(self, matcher, make_faq):
        faq = make_faq("faq-1", "How do I charge my scooter?", "Use the portable charger.")

        result = matcher.match("What is the weather today", [], 0.15, [faq])

        assert len(result) == 0
        assert result.should_escalate

    def test_model_tagged_entry_ranked_first_on_equal_score(self, matcher, make_faq):
        generic = make_faq("faq-a", "How do I charge my scooter?", "Use the charger.")
        tagged = make_faq("faq-b", "How do I charge my scooter?", "Use the charger.", models=["450X"])

        result = matcher.match("How do I charge my scooter?", ["450X"], 0.15, [generic, tagged])

        assert result.faq_ids == ["faq-b", "faq-a"]
        assert result.candidates[0].similarity_score == result.candidates[1].similarity_score

    def test_zero_threshold_returns_every_active_entry(self, matcher, charging_corpus):
        result = matcher.match("zzz qqq", [], 0.0, charging_corpus)

        assert sorted(result.faq_ids) == sorted(e.id for e in charging_corpus)

    def test_empty_corpus_escalates_without_error(self, matcher):
        result = matcher.match("How do I charge my scooter?", [], 0.15, [])

        assert result.should_escalate
        assert result.scored_count == 0


# ── Properties ───────────────────────────────────────────────────────────────


class TestMatchProperties:

    @pytest.mark.parametrize("query", [
        "charge my scooter",
        "range of scooter",
        "battery warranty",
        "service",
    ])
    def test_higher_threshold_returns_subset(self, matcher, charging_corpus, query):
        thresholds = [0.0, 0.05, 0.1, 0.15, 0.3, 0.5, 0.9]
        results = [set(matcher.match(query, [], t, charging_corpus).faq_ids) for t in thresholds]

        for looser, stricter in zip(results, results[1:]):
            assert stricter <= looser

    def test_inactive_entries_never_returned(self, matcher, make_faq):
        corpus = [
            make_faq("faq-on", "How do I charge my scooter?"),
            make_faq("faq-off", "How do I charge my scooter?", is_active=False),
        ]

        result = matcher.match("How do I charge my scooter?", [], 0.0, corpus)

        assert result.faq_ids == ["faq-on"]
        assert result.scored_count == 1

    def test_only_inactive_entries_escalates(self, matcher, make_faq):
        corpus = [make_faq("faq-off", "How do I charge?", is_active=False)]

        assert matcher.match("How do I charge?", [], 0.0, corpus).should_escalate

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_blank_query_escalates(self, matcher, charging_corpus, query):
        result = matcher.match(query, [], 0.0, charging_corpus)

        assert result.should_escalate

    def test_limit_applied_after_ranking(self, matcher, charging_corpus):
        full = matcher.match("my scooter", [], 0.0, charging_corpus)
        limited = matcher.match("my scooter", [], 0.0, charging_corpus, limit=2)

        assert limited.faq_ids == full.faq_ids[:2]

    def test_best_match_returns_top_candidate(self, matcher, charging_corpus):
        best = matcher.best_match("When is my first service due", [], 0.15, charging_corpus)

        assert best is not None
        assert best.faq_id == "faq-service"

    def test_best_match_none_when_nothing_clears(self, matcher, charging_corpus):
        assert matcher.best_match("zzz qqq", [], 0.15, charging_corpus) is None


# ── Failure handling ─────────────────────────────────────────────────────────


class TestScoringFailures:

    def test_failed_candidate_scores_zero(self, charging_corpus):
        failing = charging_corpus[0]
        matcher = FAQMatcher(scorer=FlakyScorer(failing.question))

        result = matcher.match(failing.question, [], 0.0, charging_corpus)

        scores = {c.faq_id: c.similarity_score for c in result}
        assert scores[failing.id] == 0.0
        assert result.failed_count == 1
        assert result.scored_count == len(charging_corpus)

    def test_failed_candidate_dropped_above_zero_threshold(self, charging_corpus):
        failing = charging_corpus[0]
        matcher = FAQMatcher(scorer=FlakyScorer(failing.question))

        result = matcher.match(failing.question, [], 0.15, charging_corpus)

        assert failing.id not in result.faq_ids

    def test_shared_executor_gives_same_result(self, charging_corpus):
        with ThreadPoolExecutor(max_workers=3) as pool:
            pooled = FAQMatcher(executor=pool).match("charge scooter", [], 0.0, charging_corpus)
        own = FAQMatcher().match("charge scooter", [], 0.0, charging_corpus)

        assert pooled.faq_ids == own.faq_ids

    def test_invalid_worker_count_rejected(self):
        with pytest.raises(ValueError):
            FAQMatcher(max_workers=0)
