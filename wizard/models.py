from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from .constants import PERSONA_ALIASES, SECTION_ALIASES, SECTIONS


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InvalidAnswer(ValueError):
    pass


class QuestionKind(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    YES_NO = "yes_no"
    RATING = "rating"
    FREE_TEXT = "free_text"


class Persona(str, Enum):
    DEFAULT = "default"
    PRODUCT_MANAGER = "product_manager"
    LLM_ARCHITECT = "llm_architect"
    UX_DESIGNER = "ux_designer"
    COMPLIANCE_OFFICER = "compliance_officer"

    @classmethod
    def parse(cls, name: str | None) -> Persona:
        """Map a user supplied persona name onto a Persona; unknown names give DEFAULT."""
        normalized = (name or "").strip().lower().replace("-", "_").replace(" ", "_")
        return cls(PERSONA_ALIASES.get(normalized, "default"))


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABORTED = "aborted"


def normalize_section(hint: str | None) -> str | None:
    if not hint:
        return None
    normalized = hint.strip().lower().replace("-", "_").replace(" ", "_")
    if normalized in SECTIONS:
        return normalized
    return SECTION_ALIASES.get(normalized)


@dataclass(slots=True)
class QuestionSpec:
    id: str
    text: str
    kind: QuestionKind
    persona_tag: str | None = None
    section_hint: str | None = None
    options: list[str] | None = None
    scale: tuple[int, int] | None = None
    help_text: str | None = None

    def __post_init__(self) -> None:
        self.kind = QuestionKind(self.kind)
        if not self.text or not self.text.strip():
            raise ValueError("Question text must not be empty")

        if self.kind is QuestionKind.MULTIPLE_CHOICE:
            options = [str(o).strip() for o in (self.options or []) if str(o).strip()]
            if len(options) < 2:
                raise ValueError("Multiple choice questions need at least two options")
            self.options = options
            self.scale = None
        elif self.kind is QuestionKind.RATING:
            if self.scale is None or len(self.scale) != 2:
                raise ValueError("Rating questions need a (min, max) scale")
            low, high = self.scale
            if isinstance(low, bool) or isinstance(high, bool):
                raise ValueError("Rating scale bounds must be integers")
            low, high = int(low), int(high)
            if low >= high:
                raise ValueError(f"Rating scale min must be below max, got {low}..{high}")
            self.scale = (low, high)
            self.options = None
        elif self.kind is QuestionKind.YES_NO:
            self.options = ["Yes", "No"]
            self.scale = None
        elif self.kind is QuestionKind.FREE_TEXT:
            self.options = None
            self.scale = None
        else:
            raise ValueError(f"Unsupported question kind: {self.kind}")

    @property
    def section(self) -> str | None:
        return normalize_section(self.section_hint)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "kind": self.kind.value,
            "persona_tag": self.persona_tag,
            "section_hint": self.section_hint,
            "options": list(self.options) if self.options is not None else None,
            "scale": list(self.scale) if self.scale is not None else None,
            "help_text": self.help_text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestionSpec:
        scale = data.get("scale")
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            kind=QuestionKind(data["kind"]),
            persona_tag=data.get("persona_tag"),
            section_hint=data.get("section_hint"),
            options=data.get("options"),
            scale=tuple(scale) if scale is not None else None,
            help_text=data.get("help_text"),
        )


_YES = {"y", "yes", "true", "1"}
_NO = {"n", "no", "false", "0"}


@dataclass(frozen=True, slots=True)
class Answer:
    kind: QuestionKind
    value: int | bool | str

    @classmethod
    def for_question(cls, question: QuestionSpec, raw: Any) -> Answer:
        """Validate raw input against ``question`` and build the matching Answer.

        Raises InvalidAnswer when the input does not fit the question kind.
        """
        kind = question.kind

        if kind is QuestionKind.MULTIPLE_CHOICE:
            options = question.options or []
            if isinstance(raw, str):
                lowered = raw.strip().lower()
                matches = [i for i, option in enumerate(options) if option.lower() == lowered]
                if not matches:
                    raise InvalidAnswer(f"'{raw}' is not one of the offered options")
                return cls(kind, matches[0])
            if isinstance(raw, bool) or not isinstance(raw, int):
                raise InvalidAnswer("Multiple choice answers must be an option index or label")
            if not 0 <= raw < len(options):
                raise InvalidAnswer(f"Option index {raw} is out of range 0..{len(options) - 1}")
            return cls(kind, raw)

        if kind is QuestionKind.YES_NO:
            if isinstance(raw, bool):
                return cls(kind, raw)
            if isinstance(raw, str):
                lowered = raw.strip().lower()
                if lowered in _YES:
                    return cls(kind, True)
                if lowered in _NO:
                    return cls(kind, False)
            raise InvalidAnswer("Yes/No answers must be yes or no")

        if kind is QuestionKind.RATING:
            low, high = question.scale or (0, 0)
            if isinstance(raw, str):
                try:
                    raw = int(raw.strip())
                except ValueError as exc:
                    raise InvalidAnswer(f"'{raw}' is not a whole number") from exc
            if isinstance(raw, bool) or not isinstance(raw, int):
                raise InvalidAnswer("Rating answers must be whole numbers")
            if not low <= raw <= high:
                raise InvalidAnswer(f"Rating {raw} is outside the scale {low}..{high}")
            return cls(kind, raw)

        if kind is QuestionKind.FREE_TEXT:
            if not isinstance(raw, str):
                raise InvalidAnswer("Free text answers must be text")
            if not raw.strip():
                raise InvalidAnswer("An answer is required")
            return cls(kind, raw)

        raise InvalidAnswer(f"Unsupported question kind: {kind}")

    def display(self, question: QuestionSpec) -> str:
        if self.kind is QuestionKind.MULTIPLE_CHOICE:
            return (question.options or [])[int(self.value)]
        if self.kind is QuestionKind.YES_NO:
            return "Yes" if self.value else "No"
        if self.kind is QuestionKind.RATING:
            _, high = question.scale or (0, 0)
            return f"{self.value}/{high}"
        return str(self.value).strip()

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "value": self.value}


@dataclass(slots=True)
class Turn:
    sequence_number: int
    question: QuestionSpec
    answer: Answer
    confidence_hint: float | None = None
    created_at: str = field(default_factory=utc_now_iso)

    @property
    def answer_text(self) -> str:
        return self.answer.display(self.question)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence_number": self.sequence_number,
            "question": self.question.to_dict(),
            "answer": self.answer.to_dict(),
            "confidence_hint": self.confidence_hint,
            "created_at": self.created_at,
        }


@dataclass(frozen=True, slots=True)
class SectionContent:
    content: str
    confidence: float


@dataclass(frozen=True, slots=True)
class SectionDraft:
    content: str
    confidence: Any = None


@dataclass(frozen=True)
class ProjectDefinition:
    sections: Mapping[str, SectionContent]
    generated_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self) -> None:
        missing = [name for name in SECTIONS if name not in self.sections]
        if missing:
            raise ValueError(f"Project definition missing sections: {', '.join(missing)}")
        ordered = {name: self.sections[name] for name in SECTIONS}
        object.__setattr__(self, "sections", MappingProxyType(ordered))

    def __getitem__(self, name: str) -> SectionContent:
        return self.sections[name]

    @property
    def name(self) -> str:
        section = self.sections["project_name"]
        lines = section.content.strip().splitlines()
        if section.confidence <= 0 or not lines:
            return "LLM Project Definition"
        return lines[0].lstrip("# ").strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "sections": {
                name: {"content": section.content, "confidence": section.confidence}
                for name, section in self.sections.items()
            },
        }
