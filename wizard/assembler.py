from __future__ import annotations

import logging
from typing import Any, Sequence

from .constants import INSUFFICIENT_INFORMATION, SECTIONS
from .models import Persona, ProjectDefinition, SectionContent, Turn
from .openai_service import GenerationTransient, MalformedResponse
from .scoring import ConfidenceScorer

logger = logging.getLogger(__name__)


class DocumentAssembler:
    def __init__(self, generator: Any, scorer: ConfidenceScorer | None = None) -> None:
        self.generator = generator
        self.scorer = scorer or ConfidenceScorer()

    @staticmethod
    def _clip_snippet(text: str, max_chars: int = 180) -> str:
        compact = " ".join(text.strip().split())
        if len(compact) <= max_chars:
            return compact
        return compact[: max_chars - 1].rstrip() + "…"

    def _fallback_content(self, section: str, turns: list[Turn], domain: str | None) -> str:
        if section == "project_name":
            return f"{domain} LLM Project" if domain else "LLM Project Definition"

        lines = [
            f"- {self._clip_snippet(turn.question.text, 120)} {self._clip_snippet(turn.answer_text)}"
            for turn in turns
        ]
        return "\n".join(lines)

    async def _assemble_section(
        self,
        section: str,
        turns: list[Turn],
        hints: str | None,
        domain: str | None,
        persona: Persona,
        template: str | None,
        metadata: dict[str, str],
    ) -> SectionContent:
        contributing = self.scorer.contributing_turns(section, turns)
        if not contributing:
            return SectionContent(content=INSUFFICIENT_INFORMATION, confidence=0.0)

        try:
            draft = await self.generator.synthesize_section(
                section=section,
                persona=persona,
                hints=hints,
                domain=domain,
                template=template,
                metadata=metadata,
                turns=contributing,
            )
        except (GenerationTransient, MalformedResponse) as exc:
            logger.warning("Section '%s' synthesis failed, using answer digest: %s", section, exc)
            return SectionContent(
                content=self._fallback_content(section, contributing, domain),
                confidence=self.scorer.score(section, contributing),
            )

        return SectionContent(
            content=draft.content,
            confidence=self.scorer.score(section, contributing, inline=draft.confidence),
        )

    async def assemble(
        self,
        turns: Sequence[Turn],
        hints: str | None = None,
        domain: str | None = None,
        persona: Persona = Persona.DEFAULT,
        template: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> ProjectDefinition:
        """Build every fixed section from the full history; never returns a partial document."""
        turns = list(turns)
        metadata = dict(metadata or {})

        sections: dict[str, SectionContent] = {}
        for section in SECTIONS:
            sections[section] = await self._assemble_section(
                section,
                turns,
                hints=hints,
                domain=domain,
                persona=persona,
                template=template,
                metadata=metadata,
            )

        logger.info(
            "Assembled project definition: %s/%s sections backed by answers",
            sum(1 for s in sections.values() if s.confidence > 0),
            len(SECTIONS),
        )
        return ProjectDefinition(sections=sections)
