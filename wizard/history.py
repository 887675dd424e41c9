from __future__ import annotations

import logging

from .models import Answer, QuestionSpec, Turn, utc_now_iso

logger = logging.getLogger(__name__)


class InvalidState(RuntimeError):
    pass


class TurnHistory:
    """Ordered record of answered questions with a cursor marking the next append point.

    Sequence numbers are contiguous from 1. While the cursor sits before the end
    (after ``step_back``) the history is under review and cannot be appended to;
    ``rewind`` is the only way to change an earlier answer.
    """

    def __init__(self, turns: list[Turn] | None = None, cursor: int | None = None) -> None:
        self._turns: list[Turn] = list(turns or [])
        self._cursor = len(self._turns) if cursor is None else cursor
        self._check_invariants()

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(self._turns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TurnHistory):
            return NotImplemented
        return self._turns == other._turns and self._cursor == other._cursor

    @property
    def turns(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def is_reviewing(self) -> bool:
        return self._cursor < len(self._turns)

    def _check_invariants(self) -> None:
        for idx, turn in enumerate(self._turns, start=1):
            if turn.sequence_number != idx:
                raise InvalidState(
                    f"Turn sequence numbers must run 1..n, found {turn.sequence_number} at position {idx}"
                )
        if not 0 <= self._cursor <= len(self._turns):
            raise InvalidState(f"Cursor {self._cursor} outside [0, {len(self._turns)}]")

    def append(
        self,
        question: QuestionSpec,
        answer: Answer,
        confidence_hint: float | None = None,
    ) -> Turn:
        if self._cursor != len(self._turns):
            raise InvalidState(
                f"Cannot append while reviewing turn {self._cursor + 1}; rewind to revise it"
            )
        if answer.kind is not question.kind:
            raise InvalidState("Answer kind does not match its question")
        if confidence_hint is not None and not 0.0 <= confidence_hint <= 1.0:
            raise InvalidState(f"Confidence hint {confidence_hint} outside [0, 1]")

        turn = Turn(
            sequence_number=len(self._turns) + 1,
            question=question,
            answer=answer,
            confidence_hint=confidence_hint,
            created_at=utc_now_iso(),
        )
        self._turns.append(turn)
        self._cursor = len(self._turns)
        return turn

    def rewind(self, to_sequence_number: int) -> list[Turn]:
        """Drop every turn numbered ``to_sequence_number`` or later and return them."""
        if not 1 <= to_sequence_number <= len(self._turns):
            raise InvalidState(
                f"Cannot rewind to question {to_sequence_number}; history has {len(self._turns)} turns"
            )

        discarded = self._turns[to_sequence_number - 1 :]
        del self._turns[to_sequence_number - 1 :]
        self._cursor = len(self._turns)
        logger.debug("Rewound history to question %s, discarded %s turns", to_sequence_number, len(discarded))
        return discarded

    def step_back(self) -> Turn:
        if self._cursor == 0:
            raise InvalidState("Cannot go back further")
        self._cursor -= 1
        return self._turns[self._cursor]

    def step_forward(self) -> Turn | None:
        """Move the review cursor forward; returns None once back at the end."""
        if self._cursor >= len(self._turns):
            raise InvalidState("Cannot go forward further")
        self._cursor += 1
        if self._cursor == len(self._turns):
            return None
        return self._turns[self._cursor]

    def context_for_next_question(self) -> tuple[Turn, ...]:
        return tuple(self._turns[: self._cursor])
