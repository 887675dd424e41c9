"""
Unit tests for wizard.scoring.ConfidenceScorer.
"""

import pytest

from wizard.history import TurnHistory
from wizard.models import Answer, QuestionKind
from wizard.scoring import ConfidenceScorer


@pytest.fixture
def scorer():
    return ConfidenceScorer()


def _turns(question_factory, *answers):
    """Build a history from (kind, section, raw) triples."""
    history = TurnHistory()
    for idx, (kind, section, raw) in enumerate(answers, start=1):
        question = question_factory(kind, section=section, qid=f"q{idx}")
        history.append(question, Answer.for_question(question, raw))
    return list(history.turns)


class TestScore:
    def test_no_contributing_turns_then_zero(self, scorer, question_factory):
        turns = _turns(question_factory, (QuestionKind.FREE_TEXT, "use_cases", "Tutoring"))

        assert scorer.score("dataset_needs", turns) == 0.0
        assert scorer.score("dataset_needs", [], inline=0.9) == 0.0

    def test_long_free_text_beats_one_word(self, scorer, question_factory):
        long_answer = "x" * scorer.reference_length
        long_turns = _turns(question_factory, (QuestionKind.FREE_TEXT, "use_cases", long_answer))
        short_turns = _turns(question_factory, (QuestionKind.FREE_TEXT, "use_cases", "Spanish"))

        assert scorer.score("use_cases", long_turns) > scorer.score("use_cases", short_turns)

    def test_more_turns_raise_confidence(self, scorer, question_factory):
        one = _turns(question_factory, (QuestionKind.YES_NO, "ethics", "yes"))
        three = _turns(
            question_factory,
            (QuestionKind.YES_NO, "ethics", "yes"),
            (QuestionKind.RATING, "ethics", 3),
            (QuestionKind.MULTIPLE_CHOICE, "ethics", 0),
        )

        assert 0.0 < scorer.score("ethics", one) < scorer.score("ethics", three) <= 1.0

    def test_structured_answers_use_baseline(self, scorer, question_factory):
        turns = _turns(question_factory, (QuestionKind.RATING, "deployment", 5))

        assert scorer.specificity(turns[0]) == scorer.baseline

    def test_synthesis_sections_use_every_turn(self, scorer, question_factory):
        turns = _turns(
            question_factory,
            (QuestionKind.FREE_TEXT, "use_cases", "Tutoring"),
            (QuestionKind.YES_NO, "ethics", "no"),
        )

        assert len(scorer.contributing_turns("summary", turns)) == 2
        assert len(scorer.contributing_turns("ethics", turns)) == 1
        assert scorer.score("summary", turns) > 0.0

    def test_alias_hint_counts_for_section(self, scorer, question_factory):
        turns = _turns(question_factory, (QuestionKind.FREE_TEXT, "goals", "Help learners"))

        assert scorer.score("use_cases", turns) > 0.0


class TestInline:
    def test_valid_inline_value_wins(self, scorer, question_factory):
        turns = _turns(question_factory, (QuestionKind.FREE_TEXT, "use_cases", "Tutoring"))

        assert scorer.score("use_cases", turns, inline="0.85") == 0.85

    @pytest.mark.parametrize("raw", ["high", 1.5, -0.1, True, "nan"])
    def test_unusable_inline_value_falls_back_to_heuristic(self, scorer, question_factory, raw):
        turns = _turns(question_factory, (QuestionKind.FREE_TEXT, "use_cases", "Tutoring"))

        assert scorer.score("use_cases", turns, inline=raw) == scorer.heuristic(turns)

    def test_turn_confidence_hint_replaces_specificity(self, scorer, question_factory):
        question = question_factory(QuestionKind.FREE_TEXT, section="use_cases")
        history = TurnHistory()
        history.append(question, Answer.for_question(question, "ok"), confidence_hint=1.0)

        assert scorer.specificity(history.turns[0]) == 1.0
