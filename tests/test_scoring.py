"""Tests for the trigram scorer, confidence policy and ranker."""

import pytest

from src.faq.domain import (
    ConfidencePolicy,
    FAQRanker,
    ScoredCandidate,
    TrigramSimilarityScorer,
    extract_trigrams,
)


# ── Trigrams ─────────────────────────────────────────────────────────────────


class TestExtractTrigrams:

    def test_short_word_is_padded(self):
        assert extract_trigrams("on") == {"  o", " on", "on "}

    def test_case_and_punctuation_ignored(self):
        assert extract_trigrams("Charge!") == extract_trigrams("charge")

    def test_empty_text_has_no_trigrams(self):
        assert extract_trigrams("") == frozenset()
        assert extract_trigrams("?!  ") == frozenset()


# ── Scorer ───────────────────────────────────────────────────────────────────


class TestTrigramSimilarityScorer:

    def setup_method(self):
        self.scorer = TrigramSimilarityScorer()

    def test_identical_text_scores_one(self):
        assert self.scorer.similarity("charge my scooter", "charge my scooter") == 1.0

    def test_no_shared_trigrams_scores_zero(self):
        assert self.scorer.similarity("abc", "xyz") == 0.0

    def test_similarity_is_symmetric(self):
        a, b = "battery warranty", "warranty for the battery pack"
        assert self.scorer.similarity(a, b) == self.scorer.similarity(b, a)

    @pytest.mark.parametrize("query,question,answer", [
        ("", "How do I charge?", "Plug it in."),
        (None, "How do I charge?", "Plug it in."),
        ("charge", None, None),
        ("charge", "", ""),
    ])
    def test_missing_text_scores_zero(self, query, question, answer):
        assert self.scorer.score(query, question, answer) == 0.0

    def test_question_match_beats_diluted_combined_text(self):
        question = "How do I charge my scooter?"
        answer = "Plug the portable charger into any 5A socket and wait about six hours."
        assert self.scorer.score(question, question, answer) == 1.0

    def test_answer_text_can_carry_the_match(self):
        score = self.scorer.score("portable charger", "Charging at home", "Use the portable charger.")
        assert score > self.scorer.similarity("portable charger", "Charging at home")

    def test_verbatim_question_dominates_corpus(self, charging_corpus):
        target = charging_corpus[1]
        scores = {
            entry.id: self.scorer.score(target.question, entry.question, entry.answer)
            for entry in charging_corpus
        }
        assert scores[target.id] == max(scores.values())


# ── Policy ───────────────────────────────────────────────────────────────────


class TestConfidencePolicy:

    def test_threshold_is_inclusive(self):
        assert ConfidencePolicy.accepts(0.15, 0.15)
        assert not ConfidencePolicy.accepts(0.1499, 0.15)

    def test_zero_threshold_accepts_zero_score(self):
        assert ConfidencePolicy.accepts(0.0, 0.0)

    def test_filter_keeps_input_order(self, charging_corpus):
        candidates = [
            ScoredCandidate(charging_corpus[0], 0.2),
            ScoredCandidate(charging_corpus[1], 0.05),
            ScoredCandidate(charging_corpus[2], 0.9),
        ]
        kept = ConfidencePolicy.filter(candidates, 0.15)
        assert [c.faq_id for c in kept] == ["faq-charge", "faq-service"]


# ── Ranker ───────────────────────────────────────────────────────────────────


class TestFAQRanker:

    def test_affinity_beats_higher_score(self, make_faq):
        generic = ScoredCandidate(make_faq("a", "Charging"), 0.9)
        tagged = ScoredCandidate(make_faq("b", "Charging", models=["450X"]), 0.3)

        ranked = FAQRanker.rank([generic, tagged], user_models={"450X"})

        assert [c.faq_id for c in ranked] == ["b", "a"]

    def test_equal_scores_affinity_first(self, make_faq):
        generic = ScoredCandidate(make_faq("a", "Charging"), 0.5)
        tagged = ScoredCandidate(make_faq("z", "Charging", models=["Rizta"]), 0.5)

        ranked = FAQRanker.rank([generic, tagged], user_models=["Rizta"])

        assert ranked[0].faq_id == "z"

    def test_without_user_models_score_decides(self, make_faq):
        low = ScoredCandidate(make_faq("a", "Charging", models=["450X"]), 0.2)
        high = ScoredCandidate(make_faq("b", "Charging"), 0.8)

        ranked = FAQRanker.rank([low, high])

        assert [c.faq_id for c in ranked] == ["b", "a"]

    def test_full_tie_broken_by_id(self, make_faq):
        candidates = [
            ScoredCandidate(make_faq(faq_id, "Same question"), 0.5)
            for faq_id in ("c", "a", "b")
        ]

        ranked = FAQRanker.rank(candidates)

        assert [c.faq_id for c in ranked] == ["a", "b", "c"]

    def test_limit_truncates_after_ranking(self, make_faq):
        candidates = [
            ScoredCandidate(make_faq(str(i), "Question"), i / 10)
            for i in range(5)
        ]

        ranked = FAQRanker.rank(candidates, limit=2)

        assert [c.faq_id for c in ranked] == ["4", "3"]

    def test_zero_limit_returns_nothing(self, make_faq):
        assert FAQRanker.rank([ScoredCandidate(make_faq("a", "Q"), 1.0)], limit=0) == []

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            FAQRanker.rank([], limit=-1)
