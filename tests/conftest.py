import sys
from pathlib import Path

import pytest

# Add the project root to sys.path so `wizard` and `main` import without installation
ROOT_PATH = Path(__file__).resolve().parent.parent
if ROOT_PATH.as_posix() not in sys.path:
    sys.path.insert(0, ROOT_PATH.as_posix())

from wizard.models import QuestionKind, QuestionSpec, SectionDraft  # noqa: E402


class ScriptedGenerator:
    """Stand-in for OpenAIService that replays queued questions and records calls.

    Queue items may be a QuestionSpec, None (completion signal) or an exception
    instance to raise.
    """

    def __init__(self, questions=None, section_confidence=None, section_error=None):
        self.questions = list(questions or [])
        self.section_confidence = section_confidence
        self.section_error = section_error
        self.question_calls = []
        self.section_calls = []

    async def generate_next_question(self, **kwargs):
        self.question_calls.append(kwargs)
        if not self.questions:
            return None
        item = self.questions.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def synthesize_section(self, **kwargs):
        self.section_calls.append(kwargs)
        if self.section_error is not None:
            raise self.section_error
        answers = "; ".join(turn.answer_text for turn in kwargs["turns"])
        return SectionDraft(
            content=f"{kwargs['section']}: {answers}",
            confidence=self.section_confidence,
        )


def make_question(kind=QuestionKind.FREE_TEXT, section="use_cases", qid="q1", text=None, **extra):
    if kind is QuestionKind.MULTIPLE_CHOICE:
        extra.setdefault("options", ["Customer support", "Tutoring", "Search"])
    if kind is QuestionKind.RATING:
        extra.setdefault("scale", (1, 5))
    return QuestionSpec(
        id=qid,
        text=text or f"Question about {section}?",
        kind=kind,
        persona_tag="default",
        section_hint=section,
        **extra,
    )


@pytest.fixture
def scripted_generator():
    return ScriptedGenerator


@pytest.fixture
def question_factory():
    return make_question
