from __future__ import annotations

import logging
import uuid
from typing import Any

from .assembler import DocumentAssembler
from .constants import SECTIONS, SYNTHESIS_SECTIONS
from .history import InvalidState, TurnHistory
from .models import (
    Answer,
    Persona,
    ProjectDefinition,
    QuestionSpec,
    SessionStatus,
    Turn,
    utc_now_iso,
)
from .openai_service import GenerationTerminal
from .scoring import ConfidenceScorer

logger = logging.getLogger(__name__)


class Session:
    """A wizard run: metadata, the turn history and the question/answer state machine.

    ``generator`` is the question/section collaborator (``OpenAIService`` in
    production). It may be None for a session loaded only for inspection.
    """

    def __init__(
        self,
        generator: Any = None,
        *,
        hints: str | None = None,
        domain: str | None = None,
        persona: Persona | None = None,
        template: str | None = None,
        max_questions: int = 10,
        metadata: dict[str, str] | None = None,
        session_id: str | None = None,
        status: SessionStatus = SessionStatus.IN_PROGRESS,
        history: TurnHistory | None = None,
        pending_question: QuestionSpec | None = None,
        created_at: str | None = None,
        scorer: ConfidenceScorer | None = None,
    ) -> None:
        if isinstance(max_questions, bool) or not isinstance(max_questions, int) or max_questions < 1:
            raise ValueError(f"max_questions must be an integer >= 1, got {max_questions!r}")

        self.generator = generator
        self.id = session_id or uuid.uuid4().hex
        self.hints = hints
        self.domain = domain
        self.persona = persona
        self.template = template
        self.max_questions = max_questions
        self.metadata: dict[str, str] = dict(metadata or {})
        self.created_at = created_at or utc_now_iso()
        self.scorer = scorer or ConfidenceScorer()

        self._status = SessionStatus(status)
        self._history = history if history is not None else TurnHistory()
        self._pending_question = pending_question
        self._definition: ProjectDefinition | None = None
        self._in_flight = False

    @classmethod
    def from_template(cls, template: Any, generator: Any = None, **kwargs: Any) -> Session:
        return cls(
            generator,
            hints=kwargs.pop("hints", None) or template.starting_hints,
            domain=kwargs.pop("domain", None) or template.domain,
            template=template.name,
            metadata=template.session_metadata(),
            **kwargs,
        )

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def history(self) -> TurnHistory:
        return self._history

    @property
    def turns(self) -> tuple[Turn, ...]:
        return self._history.turns

    @property
    def cursor(self) -> int:
        return self._history.cursor

    @property
    def pending_question(self) -> QuestionSpec | None:
        return self._pending_question

    @property
    def effective_persona(self) -> Persona:
        return self.persona or Persona.DEFAULT

    @property
    def is_finished(self) -> bool:
        return self._status is not SessionStatus.IN_PROGRESS

    def _require(self, *allowed: SessionStatus) -> None:
        if self._status not in allowed:
            names = ", ".join(s.value for s in allowed)
            raise InvalidState(f"Session is {self._status.value}; expected {names}")

    def _require_idle(self) -> None:
        if self._in_flight:
            raise InvalidState("A generation request is already in flight for this session")

    def _set_status(self, status: SessionStatus) -> None:
        if status is not self._status:
            logger.info("Session %s: %s -> %s", self.id, self._status.value, status.value)
        self._status = status

    def should_stop(self) -> bool:
        return len(self._history) >= self.max_questions

    def focus_sections(self) -> list[str]:
        raw = self.metadata.get("focus_sections", "")
        return [s.strip() for s in raw.split(",") if s.strip() in SECTIONS]

    def suggest_section(self) -> str:
        """Pick the section the next question should target."""
        answered: dict[str, int] = {}
        for turn in self._history.context_for_next_question():
            section = turn.question.section
            if section:
                answered[section] = answered.get(section, 0) + 1

        for section in self.focus_sections():
            if answered.get(section, 0) == 0:
                return section

        candidates = [s for s in SECTIONS if s not in SYNTHESIS_SECTIONS]
        ranked = sorted(candidates, key=lambda s: (answered.get(s, 0), candidates.index(s)))
        return ranked[0]

    async def request_next_question(self) -> QuestionSpec | None:
        """Return the question to ask next, or None once the session has completed.

        A pending, unanswered question is returned again without a new request.
        """
        self._require(SessionStatus.IN_PROGRESS)
        self._require_idle()

        if self._pending_question is not None:
            return self._pending_question

        if self.should_stop():
            self._set_status(SessionStatus.COMPLETED)
            return None

        if self.generator is None:
            raise InvalidState("Session has no generation service attached")
        if self._history.is_reviewing:
            raise InvalidState("Finish reviewing earlier answers before asking a new question")

        self._in_flight = True
        try:
            question = await self.generator.generate_next_question(
                persona=self.effective_persona,
                hints=self.hints,
                domain=self.domain,
                template=self.template,
                metadata=self.metadata,
                turns=self._history.context_for_next_question(),
                target_section=self.suggest_section(),
                question_number=len(self._history) + 1,
                max_questions=self.max_questions,
            )
        except GenerationTerminal:
            self._set_status(SessionStatus.ABORTED)
            raise
        finally:
            self._in_flight = False

        if question is None:
            logger.info("Session %s: generator reported enough information", self.id)
            self._set_status(SessionStatus.COMPLETED)
            return None

        self._pending_question = question
        return question

    def submit_answer(self, raw: Any, confidence_hint: float | None = None) -> Turn:
        self._require(SessionStatus.IN_PROGRESS)
        self._require_idle()
        if self._pending_question is None:
            raise InvalidState("No question is waiting for an answer")

        answer = Answer.for_question(self._pending_question, raw)
        turn = self._history.append(self._pending_question, answer, confidence_hint=confidence_hint)
        self._pending_question = None
        self._definition = None
        logger.debug("Session %s: recorded turn %s", self.id, turn.sequence_number)
        return turn

    def back(self, to_sequence_number: int | None = None) -> list[Turn]:
        """Discard the answer to question ``to_sequence_number`` and everything after it.

        Defaults to the most recent answer. The session returns to in_progress.
        """
        self._require(SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED)
        self._require_idle()
        if to_sequence_number is None:
            to_sequence_number = len(self._history)

        discarded = self._history.rewind(to_sequence_number)
        self._pending_question = None
        self._definition = None
        self._set_status(SessionStatus.IN_PROGRESS)
        return discarded

    def step_back(self) -> Turn:
        self._require(SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED)
        self._require_idle()
        return self._history.step_back()

    def step_forward(self) -> Turn | None:
        self._require(SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED)
        self._require_idle()
        return self._history.step_forward()

    def resume(self) -> None:
        self._require(SessionStatus.ABORTED)
        self._set_status(SessionStatus.IN_PROGRESS)

    async def finalize(self) -> ProjectDefinition:
        self._require(SessionStatus.COMPLETED)
        self._require_idle()
        if self._definition is not None:
            return self._definition
        if self.generator is None:
            raise InvalidState("Session has no generation service attached")

        assembler = DocumentAssembler(self.generator, scorer=self.scorer)
        self._in_flight = True
        try:
            self._definition = await assembler.assemble(
                self._history.turns,
                hints=self.hints,
                domain=self.domain,
                persona=self.effective_persona,
                template=self.template,
                metadata=self.metadata,
            )
        except GenerationTerminal:
            self._set_status(SessionStatus.ABORTED)
            raise
        finally:
            self._in_flight = False
        return self._definition

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "created_at": self.created_at,
            "hints": self.hints,
            "domain": self.domain,
            "persona": self.persona.value if self.persona else None,
            "template": self.template,
            "metadata": dict(self.metadata),
            "max_questions": self.max_questions,
            "status": self._status.value,
            "cursor": self._history.cursor,
            "turns": [turn.to_dict() for turn in self._history.turns],
            "pending_question": self._pending_question.to_dict() if self._pending_question else None,
        }
