"""
Unit tests for wizard.storage: JSON save/load of sessions.
"""

import asyncio
import json

import pytest

from wizard.models import Persona, QuestionKind, SessionStatus
from wizard.session import Session
from wizard.storage import SerializationError, load_session, save_session, session_to_dict


@pytest.fixture
def two_turn_session(scripted_generator, question_factory):
    questions = [
        question_factory(QuestionKind.MULTIPLE_CHOICE, section="use_cases", qid="q1"),
        question_factory(QuestionKind.RATING, section="evaluation_metrics", qid="q2"),
    ]
    session = Session(
        scripted_generator(questions),
        hints="Language tutor",
        domain="E-learning",
        persona=Persona.UX_DESIGNER,
        template="tutor",
        metadata={"focus_sections": "target_users"},
        max_questions=5,
    )
    asyncio.run(session.request_next_question())
    session.submit_answer(1)
    asyncio.run(session.request_next_question())
    session.submit_answer(4, confidence_hint=0.6)
    return session


class TestRoundTrip:
    def test_save_then_load_reproduces_session(self, two_turn_session, tmp_path):
        path = tmp_path / "session.json"

        save_session(two_turn_session, path)
        restored = load_session(path)

        assert restored.cursor == 2
        assert restored.status is SessionStatus.IN_PROGRESS
        assert restored.turns == two_turn_session.turns
        assert restored.history == two_turn_session.history
        assert session_to_dict(restored) == session_to_dict(two_turn_session)

    def test_pending_question_survives(self, two_turn_session, question_factory, tmp_path):
        two_turn_session.generator.questions.append(question_factory(qid="q3"))
        asyncio.run(two_turn_session.request_next_question())
        path = tmp_path / "pending.json"

        save_session(two_turn_session, path)
        restored = load_session(path)

        assert restored.pending_question == two_turn_session.pending_question
        restored.submit_answer("A finished answer")
        assert len(restored.turns) == 3

    def test_loaded_session_uses_attached_generator(self, two_turn_session, scripted_generator, question_factory, tmp_path):
        path = save_session(two_turn_session, tmp_path / "s.json")
        generator = scripted_generator([question_factory(qid="q3")])

        restored = load_session(path, generator=generator)
        question = asyncio.run(restored.request_next_question())

        assert question.id == "q3"
        assert [t.sequence_number for t in generator.question_calls[0]["turns"]] == [1, 2]


class TestCorruptFiles:
    def _payload(self, session):
        return session_to_dict(session)

    def _write(self, tmp_path, payload):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_not_json_then_serialization_error(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(SerializationError):
            load_session(path)

    def test_missing_file_then_serialization_error(self, tmp_path):
        with pytest.raises(SerializationError):
            load_session(tmp_path / "missing.json")

    def test_gap_in_sequence_numbers_rejected(self, two_turn_session, tmp_path):
        payload = self._payload(two_turn_session)
        payload["turns"][1]["sequence_number"] = 3

        with pytest.raises(SerializationError):
            load_session(self._write(tmp_path, payload))

    def test_answer_kind_mismatch_rejected(self, two_turn_session, tmp_path):
        payload = self._payload(two_turn_session)
        payload["turns"][0]["answer"]["kind"] = "free_text"

        with pytest.raises(SerializationError):
            load_session(self._write(tmp_path, payload))

    def test_out_of_range_answer_rejected(self, two_turn_session, tmp_path):
        payload = self._payload(two_turn_session)
        payload["turns"][1]["answer"]["value"] = 9

        with pytest.raises(SerializationError):
            load_session(self._write(tmp_path, payload))

    @pytest.mark.parametrize(
        "field, value",
        [("cursor", 7), ("status", "paused"), ("persona", "wizard"), ("max_questions", 0), ("version", 99)],
    )
    def test_bad_field_rejected(self, two_turn_session, tmp_path, field, value):
        payload = self._payload(two_turn_session)
        payload[field] = value

        with pytest.raises(SerializationError):
            load_session(self._write(tmp_path, payload))

    def test_more_answers_than_max_questions_rejected(self, two_turn_session, tmp_path):
        payload = self._payload(two_turn_session)
        payload["max_questions"] = 1

        with pytest.raises(SerializationError):
            load_session(self._write(tmp_path, payload))

    def test_completed_session_with_pending_question_rejected(self, two_turn_session, question_factory, tmp_path):
        payload = self._payload(two_turn_session)
        payload["status"] = "completed"
        payload["pending_question"] = question_factory(qid="q3").to_dict()

        with pytest.raises(SerializationError):
            load_session(self._write(tmp_path, payload))
