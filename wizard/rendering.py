from __future__ import annotations

import json
import logging
from pathlib import Path

from .constants import PERSONA_DISPLAY, SECTION_DISPLAY
from .models import ProjectDefinition
from .session import Session

logger = logging.getLogger(__name__)


class DocumentRenderer:
    @staticmethod
    def confidence_marker(confidence: float) -> str:
        if confidence >= 0.8:
            return "⭐"
        if confidence >= 0.6:
            return "✅"
        if confidence >= 0.4:
            return "🔶"
        if confidence > 0.0:
            return "🔸"
        return "⚠️"

    def build_markdown(self, definition: ProjectDefinition, session: Session | None = None) -> str:
        lines: list[str] = []
        lines.append(f"# {definition.name}")
        lines.append("")
        lines.append(f"*Generated on: {definition.generated_at}*")

        if session is not None:
            details = []
            if session.domain:
                details.append(f"**Domain:** {session.domain}")
            if session.template:
                details.append(f"**Template:** {session.template}")
            details.append(f"**Persona:** {PERSONA_DISPLAY[session.effective_persona.value]}")
            details.append(f"**Questions answered:** {len(session.turns)}/{session.max_questions}")
            lines.append("")
            lines.extend(details)
        lines.append("")

        for name, section in definition.sections.items():
            marker = self.confidence_marker(section.confidence)
            lines.append(f"## {SECTION_DISPLAY[name]} {marker} (confidence {section.confidence:.2f})")
            lines.append("")
            lines.append(section.content.strip())
            lines.append("")

        return "\n".join(lines).strip() + "\n"

    def build_report_json(self, definition: ProjectDefinition, session: Session | None = None) -> dict:
        report = {"version": "1.0", "project_definition": definition.to_dict()}
        if session is not None:
            report["session"] = {
                "id": session.id,
                "domain": session.domain,
                "template": session.template,
                "persona": session.effective_persona.value,
                "questions_answered": len(session.turns),
            }
        return report

    def export(self, definition: ProjectDefinition, path: Path, session: Session | None = None) -> Path:
        """Write Markdown, or JSON when ``path`` ends in ``.json``."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix.lower() == ".json":
            with path.open("w", encoding="utf-8") as f:
                json.dump(self.build_report_json(definition, session), f, indent=2, ensure_ascii=True)
        else:
            path.write_text(self.build_markdown(definition, session), encoding="utf-8")

        logger.info("Exported project definition to %s", path)
        return path
