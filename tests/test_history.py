"""
Unit tests for wizard.history.TurnHistory.
"""

import pytest

from wizard.history import InvalidState, TurnHistory
from wizard.models import Answer, QuestionKind


def _append_free_text(history, question_factory, count, start=1):
    for i in range(count):
        question = question_factory(QuestionKind.FREE_TEXT, qid=f"q{start + i}")
        history.append(question, Answer.for_question(question, f"answer {start + i}"))


class TestAppend:
    def test_append_keeps_cursor_at_end_and_numbers_contiguous(self, question_factory):
        history = TurnHistory()

        _append_free_text(history, question_factory, 4)

        assert len(history) == 4
        assert history.cursor == len(history)
        assert [t.sequence_number for t in history.turns] == [1, 2, 3, 4]

    def test_append_while_reviewing_then_invalid_state(self, question_factory):
        history = TurnHistory()
        _append_free_text(history, question_factory, 2)
        history.step_back()
        question = question_factory(QuestionKind.FREE_TEXT, qid="q3")

        with pytest.raises(InvalidState):
            history.append(question, Answer.for_question(question, "late"))

        assert len(history) == 2

    def test_append_rejects_mismatched_answer_kind(self, question_factory):
        history = TurnHistory()
        free_text = question_factory(QuestionKind.FREE_TEXT)
        yes_no = question_factory(QuestionKind.YES_NO)

        with pytest.raises(InvalidState):
            history.append(free_text, Answer.for_question(yes_no, "yes"))
        assert len(history) == 0


class TestRewind:
    def test_rewind_then_append_renumbers_from_one(self, question_factory):
        # Arrange
        history = TurnHistory()
        _append_free_text(history, question_factory, 5)

        # Act
        discarded = history.rewind(3)
        _append_free_text(history, question_factory, 4, start=10)

        # Assert
        assert [t.sequence_number for t in discarded] == [3, 4, 5]
        assert len(history) == 3 - 1 + 4
        assert [t.sequence_number for t in history.turns] == [1, 2, 3, 4, 5, 6]
        assert history.cursor == len(history)

    def test_rewind_to_first_clears_history(self, question_factory):
        history = TurnHistory()
        _append_free_text(history, question_factory, 2)

        history.rewind(1)

        assert len(history) == 0
        assert history.cursor == 0

    @pytest.mark.parametrize("target", [0, 4, -1])
    def test_rewind_out_of_range_then_invalid_state(self, question_factory, target):
        history = TurnHistory()
        _append_free_text(history, question_factory, 3)

        with pytest.raises(InvalidState):
            history.rewind(target)
        assert len(history) == 3


class TestReview:
    def test_context_only_includes_turns_before_cursor(self, question_factory):
        history = TurnHistory()
        _append_free_text(history, question_factory, 3)

        reviewed = history.step_back()

        assert reviewed.sequence_number == 3
        assert [t.sequence_number for t in history.context_for_next_question()] == [1, 2]
        assert history.is_reviewing

    def test_step_forward_returns_to_end(self, question_factory):
        history = TurnHistory()
        _append_free_text(history, question_factory, 2)
        history.step_back()
        history.step_back()

        assert history.step_forward().sequence_number == 2
        assert history.step_forward() is None
        assert not history.is_reviewing
        with pytest.raises(InvalidState):
            history.step_forward()

    def test_step_back_on_empty_history_then_invalid_state(self):
        with pytest.raises(InvalidState):
            TurnHistory().step_back()


class TestInvariants:
    def test_non_contiguous_turns_rejected(self, question_factory):
        history = TurnHistory()
        _append_free_text(history, question_factory, 2)
        turns = list(history.turns)
        turns[1].sequence_number = 5

        with pytest.raises(InvalidState):
            TurnHistory(turns)

    def test_cursor_out_of_range_rejected(self):
        with pytest.raises(InvalidState):
            TurnHistory([], cursor=1)
