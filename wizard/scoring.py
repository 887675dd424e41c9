from __future__ import annotations

import logging
from typing import Any, Iterable

from .constants import SYNTHESIS_SECTIONS
from .models import QuestionKind, Turn

logger = logging.getLogger(__name__)


class ConfidenceScorer:
    """Per-section confidence in [0, 1].

    An inline value from the model wins when it parses as a number in range.
    Otherwise the score grows with the number of contributing turns and with
    how specific their answers are: free text is measured against
    ``reference_length`` characters, structured answers count as ``baseline``.
    """

    def __init__(
        self,
        reference_length: int = 120,
        baseline: float = 0.5,
        volume_weight: float = 0.4,
    ) -> None:
        self.reference_length = reference_length
        self.baseline = baseline
        self.volume_weight = volume_weight

    @staticmethod
    def contributing_turns(section: str, turns: Iterable[Turn]) -> list[Turn]:
        turns = list(turns)
        if section in SYNTHESIS_SECTIONS:
            return turns
        return [turn for turn in turns if turn.question.section == section]

    @staticmethod
    def parse_inline(raw: Any) -> float | None:
        if raw is None or isinstance(raw, bool):
            return None
        try:
            value = float(str(raw).strip())
        except (TypeError, ValueError):
            return None
        if value != value or not 0.0 <= value <= 1.0:
            return None
        return value

    def specificity(self, turn: Turn) -> float:
        if turn.confidence_hint is not None:
            return min(max(float(turn.confidence_hint), 0.0), 1.0)
        if turn.answer.kind is QuestionKind.FREE_TEXT:
            length = len(str(turn.answer.value).strip())
            return min(length / float(self.reference_length), 1.0)
        return self.baseline

    def heuristic(self, turns: list[Turn]) -> float:
        if not turns:
            return 0.0

        count = len(turns)
        volume = count / (count + 2.0)
        detail = sum(self.specificity(turn) for turn in turns) / count

        confidence = (self.volume_weight * volume) + ((1.0 - self.volume_weight) * detail)
        return round(min(max(confidence, 0.0), 1.0), 3)

    def score(self, section: str, turns: Iterable[Turn], inline: Any = None) -> float:
        contributing = self.contributing_turns(section, turns)
        if not contributing:
            return 0.0

        inline_value = self.parse_inline(inline)
        if inline_value is not None:
            return round(inline_value, 3)
        if inline is not None:
            logger.debug("Ignoring unusable inline confidence %r for section '%s'", inline, section)

        return self.heuristic(contributing)
