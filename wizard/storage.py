from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .history import InvalidState, TurnHistory
from .models import Answer, InvalidAnswer, Persona, QuestionSpec, SessionStatus, Turn
from .session import Session

logger = logging.getLogger(__name__)

SESSION_FORMAT_VERSION = 1


class SerializationError(RuntimeError):
    pass


def _turn_from_dict(data: dict[str, Any]) -> Turn:
    question = QuestionSpec.from_dict(data["question"])
    raw_answer = data["answer"]
    if raw_answer.get("kind") != question.kind.value:
        raise SerializationError(
            f"Turn {data.get('sequence_number')}: answer kind '{raw_answer.get('kind')}' "
            f"does not match question kind '{question.kind.value}'"
        )
    answer = Answer.for_question(question, raw_answer["value"])

    confidence_hint = data.get("confidence_hint")
    if confidence_hint is not None:
        confidence_hint = float(confidence_hint)
        if not 0.0 <= confidence_hint <= 1.0:
            raise SerializationError(f"Confidence hint {confidence_hint} outside [0, 1]")

    return Turn(
        sequence_number=int(data["sequence_number"]),
        question=question,
        answer=answer,
        confidence_hint=confidence_hint,
        created_at=str(data["created_at"]),
    )


def session_from_dict(data: dict[str, Any], generator: Any = None) -> Session:
    """Rebuild a Session, validating every invariant; raises SerializationError."""
    if not isinstance(data, dict):
        raise SerializationError("Session JSON must be an object")

    version = data.get("version", SESSION_FORMAT_VERSION)
    if version != SESSION_FORMAT_VERSION:
        raise SerializationError(f"Unsupported session format version: {version}")

    try:
        turns = [_turn_from_dict(item) for item in data.get("turns", [])]
        history = TurnHistory(turns, cursor=int(data["cursor"]))

        pending = data.get("pending_question")
        persona = data.get("persona")

        session = Session(
            generator,
            session_id=str(data["id"]),
            created_at=data.get("created_at"),
            hints=data.get("hints"),
            domain=data.get("domain"),
            persona=Persona(persona) if persona else None,
            template=data.get("template"),
            metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
            max_questions=data["max_questions"],
            status=SessionStatus(data["status"]),
            history=history,
            pending_question=QuestionSpec.from_dict(pending) if pending else None,
        )
    except SerializationError:
        raise
    except (InvalidAnswer, InvalidState, KeyError, TypeError, ValueError, AttributeError) as exc:
        raise SerializationError(f"Invalid session data: {exc}") from exc

    if len(session.turns) > session.max_questions:
        raise SerializationError(
            f"Session has {len(session.turns)} answers but allows at most {session.max_questions}"
        )
    if session.status is not SessionStatus.IN_PROGRESS and session.pending_question is not None:
        raise SerializationError(f"A {session.status.value} session cannot have a pending question")
    return session


def session_to_dict(session: Session) -> dict[str, Any]:
    payload = {"version": SESSION_FORMAT_VERSION}
    payload.update(session.to_dict())
    return payload


def save_session(session: Session, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(session_to_dict(session), f, indent=2, ensure_ascii=True)

    logger.info("Saved session %s to %s", session.id, path)
    return path


def load_session(path: Path, generator: Any = None) -> Session:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except OSError as exc:
        raise SerializationError(f"Cannot read session file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SerializationError(f"Session file {path} is not valid JSON: {exc}") from exc

    session = session_from_dict(payload, generator=generator)
    logger.info("Loaded session %s (%s, %s turns)", session.id, session.status.value, len(session.turns))
    return session
