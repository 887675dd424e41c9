from __future__ import annotations

import asyncio
import json
import logging
import re
import uuid
from typing import Any, Callable, Sequence, TypeVar

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)

from .constants import PERSONA_PROMPTS, SECTION_DISPLAY, SECTIONS
from .models import Persona, QuestionKind, QuestionSpec, SectionDraft, Turn

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Request timeout and conflict are retried like 5xx responses.
RETRYABLE_STATUS_CODES = (408, 409)


class GenerationError(RuntimeError):
    pass


class GenerationTransient(GenerationError):
    pass


class GenerationTerminal(GenerationError):
    pass


class MalformedResponse(GenerationTerminal):
    pass


def turns_payload(turns: Sequence[Turn]) -> list[dict[str, Any]]:
    payload: list[dict[str, Any]] = []
    for turn in turns:
        item: dict[str, Any] = {
            "number": turn.sequence_number,
            "question": turn.question.text,
            "kind": turn.question.kind.value,
            "answer": turn.answer_text,
        }
        if turn.question.options and turn.question.kind is QuestionKind.MULTIPLE_CHOICE:
            item["options"] = list(turn.question.options)
        if turn.question.section:
            item["section"] = turn.question.section
        payload.append(item)
    return payload


class OpenAIService:
    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float = 60.0,
        max_retries: int = 5,
        max_malformed_retries: int = 2,
        client: Any | None = None,
    ) -> None:
        # The SDK's own retries are disabled; _responses_create_with_retry owns the policy.
        self.client = client if client is not None else AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.max_malformed_retries = max_malformed_retries

    async def close(self) -> None:
        await self.client.close()

    async def _responses_create_with_retry(self, **kwargs: Any) -> Any:
        delay = 1.0
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                return await asyncio.wait_for(self.client.responses.create(**kwargs), timeout=self.timeout)
            except RateLimitError as exc:
                if getattr(exc, "code", None) == "insufficient_quota":
                    raise GenerationTerminal(f"OpenAI quota exhausted: {exc}") from exc
                last_error = exc
            except (asyncio.TimeoutError, APITimeoutError, APIConnectionError) as exc:
                last_error = exc
            except APIStatusError as exc:
                if exc.status_code < 500 and exc.status_code not in RETRYABLE_STATUS_CODES:
                    raise GenerationTerminal(f"OpenAI rejected the request ({exc.status_code}): {exc}") from exc
                last_error = exc

            logger.warning(
                "OpenAI transient error (%s), retry %s/%s",
                last_error.__class__.__name__,
                attempt + 1,
                self.max_retries,
            )
            if attempt == self.max_retries - 1:
                break
            await asyncio.sleep(delay)
            delay *= 2

        raise GenerationTransient(f"OpenAI request failed after retries: {last_error!r}") from last_error

    @staticmethod
    def _extract_text(response: Any) -> str:
        output_text = getattr(response, "output_text", None)
        if isinstance(output_text, str) and output_text.strip():
            return output_text.strip()

        parts: list[str] = []
        output = getattr(response, "output", None)
        if output:
            for item in output:
                for content in getattr(item, "content", []) or []:
                    text = getattr(content, "text", None)
                    if isinstance(text, str) and text.strip():
                        parts.append(text.strip())
                        continue

                    if isinstance(content, dict):
                        maybe_text = content.get("text")
                        if isinstance(maybe_text, str) and maybe_text.strip():
                            parts.append(maybe_text.strip())

        if parts:
            return "\n".join(parts)

        raise MalformedResponse("Model response carried no text")

    @staticmethod
    def _extract_json(raw_text: str) -> dict[str, Any]:
        raw_text = raw_text.strip()
        try:
            payload = json.loads(raw_text)
        except json.JSONDecodeError:
            match = re.search(r"\{.*\}", raw_text, re.DOTALL)
            if not match:
                raise MalformedResponse("Model output was not valid JSON")
            try:
                payload = json.loads(match.group(0))
            except json.JSONDecodeError as exc:
                raise MalformedResponse(f"Model output JSON parse failed: {exc}") from exc

        if not isinstance(payload, dict):
            raise MalformedResponse("Model output JSON must be an object")
        return payload

    async def _structured_request(
        self,
        parse: Callable[[dict[str, Any]], T],
        system_prompt: str,
        user_prompt: dict[str, Any],
        schema_name: str,
        schema: dict[str, Any],
        temperature: float,
    ) -> T:
        last_error: Exception | None = None

        for attempt in range(self.max_malformed_retries + 1):
            response = await self._responses_create_with_retry(
                model=self.model,
                input=[
                    {
                        "role": "system",
                        "content": [{"type": "input_text", "text": system_prompt}],
                    },
                    {
                        "role": "user",
                        "content": [{"type": "input_text", "text": json.dumps(user_prompt, ensure_ascii=True)}],
                    },
                ],
                text={
                    "format": {
                        "type": "json_schema",
                        "name": schema_name,
                        "schema": schema,
                        "strict": True,
                    }
                },
                temperature=temperature,
            )

            try:
                return parse(self._extract_json(self._extract_text(response)))
            except (MalformedResponse, ValueError, KeyError, TypeError) as exc:
                last_error = exc
                logger.warning(
                    "Unusable '%s' output on attempt %s/%s: %s",
                    schema_name,
                    attempt + 1,
                    self.max_malformed_retries + 1,
                    exc,
                )

        raise MalformedResponse(f"Model output for '{schema_name}' unusable after retries: {last_error}") from last_error

    @staticmethod
    def _question_from_payload(
        payload: dict[str, Any],
        persona: Persona,
        question_number: int,
    ) -> QuestionSpec | None:
        if payload.get("done") is True:
            return None

        kind = QuestionKind(str(payload.get("kind", "")).strip())
        scale = None
        if kind is QuestionKind.RATING:
            scale = (int(payload["scale_min"]), int(payload["scale_max"]))
        help_text = str(payload.get("help_text", "")).strip()

        return QuestionSpec(
            id=f"q{question_number}_{uuid.uuid4().hex[:8]}",
            text=str(payload.get("question_text", "")).strip(),
            kind=kind,
            persona_tag=persona.value,
            section_hint=str(payload.get("section_hint", "")).strip() or None,
            options=payload.get("options") if kind is QuestionKind.MULTIPLE_CHOICE else None,
            scale=scale,
            help_text=help_text or None,
        )

    async def generate_next_question(
        self,
        persona: Persona,
        hints: str | None,
        domain: str | None,
        template: str | None,
        metadata: dict[str, str],
        turns: Sequence[Turn],
        target_section: str | None,
        question_number: int,
        max_questions: int,
    ) -> QuestionSpec | None:
        """Ask the model for the next question; None means it has gathered enough."""
        schema = {
            "type": "object",
            "additionalProperties": False,
            "required": [
                "done",
                "question_text",
                "kind",
                "options",
                "scale_min",
                "scale_max",
                "help_text",
                "section_hint",
            ],
            "properties": {
                "done": {"type": "boolean"},
                "question_text": {"type": "string"},
                "kind": {"type": "string", "enum": [k.value for k in QuestionKind]},
                # Empty unless kind is multiple_choice.
                "options": {"type": "array", "items": {"type": "string"}},
                "scale_min": {"type": "integer"},
                "scale_max": {"type": "integer"},
                "help_text": {"type": "string"},
                "section_hint": {"type": "string", "enum": SECTIONS},
            },
        }

        system_prompt = (
            PERSONA_PROMPTS[persona.value]
            + " Ask exactly one question at a time and prefer structured questions"
            " (multiple choice, yes/no, rating) when the answer space is small."
        )

        user_prompt = {
            "starting_hints": hints or "",
            "domain": domain or "",
            "template": template or "",
            "template_metadata": metadata,
            "previous_turns": turns_payload(turns),
            "target_section": target_section or "",
            "target_section_display": SECTION_DISPLAY.get(target_section or "", ""),
            "document_sections": SECTIONS,
            "question_number": question_number,
            "max_questions": max_questions,
            "constraints": {
                "one_question_only": True,
                "build_on_previous_answers": True,
                "options_only_for_multiple_choice": True,
                "multiple_choice_min_options": 2,
                "scale_only_for_rating": True,
                "set_done_true_when_enough_information": True,
                "language": "en",
            },
        }

        return await self._structured_request(
            lambda payload: self._question_from_payload(payload, persona, question_number),
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            schema_name="next_question_payload",
            schema=schema,
            temperature=0.65,
        )

    @staticmethod
    def _draft_from_payload(payload: dict[str, Any]) -> SectionDraft:
        content = str(payload.get("content", "")).strip()
        if not content:
            raise MalformedResponse("Model returned empty section content")
        return SectionDraft(content=content, confidence=payload.get("confidence"))

    async def synthesize_section(
        self,
        section: str,
        persona: Persona,
        hints: str | None,
        domain: str | None,
        template: str | None,
        metadata: dict[str, str],
        turns: Sequence[Turn],
    ) -> SectionDraft:
        schema = {
            "type": "object",
            "additionalProperties": False,
            "required": ["content", "confidence"],
            "properties": {
                "content": {"type": "string"},
                "confidence": {"type": "number", "minimum": 0, "maximum": 1},
            },
        }

        system_prompt = (
            PERSONA_PROMPTS[persona.value]
            + " Write one section of a project definition document in Markdown, grounded only in the user's answers."
        )

        user_prompt = {
            "section": section,
            "section_title": SECTION_DISPLAY[section],
            "starting_hints": hints or "",
            "domain": domain or "",
            "template": template or "",
            "template_metadata": metadata,
            "answers": turns_payload(turns),
            "instructions": [
                "Do not invent requirements the answers do not support.",
                "Omit the section heading; return only the body.",
                "For project_name return just a short name.",
                "Set confidence between 0 and 1 by how specific and complete the answers are.",
            ],
        }

        return await self._structured_request(
            self._draft_from_payload,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            schema_name="section_payload",
            schema=schema,
            temperature=0.3,
        )
