from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .constants import DEFAULT_DOMAINS, SECTIONS

logger = logging.getLogger(__name__)


class TemplateError(RuntimeError):
    pass


@dataclass(slots=True)
class Template:
    name: str
    description: str
    domain: str
    starting_hints: str
    focus_sections: list[str] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)

    def session_metadata(self) -> dict[str, str]:
        data = dict(self.metadata)
        data["description"] = self.description
        if self.focus_sections:
            data["focus_sections"] = ",".join(self.focus_sections)
        return data

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Template:
        focus = [str(s) for s in payload.get("focus_sections", [])]
        unknown = [s for s in focus if s not in SECTIONS]
        if unknown:
            raise TemplateError(f"Unknown focus sections: {', '.join(unknown)}")

        return cls(
            name=str(payload["name"]).strip(),
            description=str(payload.get("description", "")).strip(),
            domain=str(payload.get("domain", "")).strip(),
            starting_hints=str(payload.get("starting_hints", "")).strip(),
            focus_sections=focus,
            metadata={str(k): str(v) for k, v in (payload.get("metadata") or {}).items()},
        )


BUILTIN_TEMPLATES = [
    Template(
        name="chatbot",
        description="Conversational assistant answering user questions in a single domain.",
        domain="Customer Relationship Management (CRM)",
        starting_hints="A chat assistant that answers customer questions and escalates to humans when unsure.",
        focus_sections=["use_cases", "target_users", "prompt_strategy", "evaluation_metrics"],
    ),
    Template(
        name="rag-assistant",
        description="Retrieval-augmented assistant grounded in a private document collection.",
        domain="Information Technology",
        starting_hints="An assistant that searches internal documents and answers with citations.",
        focus_sections=["dataset_needs", "components", "evaluation_metrics", "deployment"],
    ),
    Template(
        name="content-generator",
        description="Generates marketing or editorial copy from short briefs.",
        domain="Advertising",
        starting_hints="A tool that drafts on-brand copy from a short creative brief.",
        focus_sections=["inputs_outputs", "prompt_strategy", "ethics"],
    ),
    Template(
        name="code-assistant",
        description="Helps developers write, review and explain code.",
        domain="Software Development",
        starting_hints="An assistant inside the editor that reviews diffs and suggests fixes.",
        focus_sections=["components", "inputs_outputs", "evaluation_metrics", "deployment"],
    ),
    Template(
        name="document-extraction",
        description="Turns unstructured documents into structured records.",
        domain="Financial Services",
        starting_hints="A pipeline that extracts fields from invoices and contracts into a database.",
        focus_sections=["inputs_outputs", "dataset_needs", "evaluation_metrics", "ethics"],
    ),
    Template(
        name="tutor",
        description="Adaptive tutor that explains concepts and quizzes learners.",
        domain="E-learning",
        starting_hints="A tutor that adapts explanations and exercises to the learner's level.",
        focus_sections=["target_users", "use_cases", "ethics", "evaluation_metrics"],
    ),
]


def _load_json(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise TemplateError(f"Cannot read wizard config {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise TemplateError(f"Wizard config JSON must be an object: {path}")
    return payload


class TemplateRepository:
    def __init__(self, templates: list[Template] | None = None, domains: list[str] | None = None) -> None:
        self.templates = list(BUILTIN_TEMPLATES if templates is None else templates)
        self.domains = list(DEFAULT_DOMAINS if domains is None else domains)

    @classmethod
    def load(cls, config_path: Path | None = None) -> TemplateRepository:
        """Built-in templates and domains, extended by an optional JSON file.

        The file may carry ``domains`` (replaces the default list) and
        ``templates`` (added, replacing built-ins of the same name).
        """
        repo = cls()
        if config_path is None:
            return repo
        if not config_path.exists():
            raise TemplateError(f"Wizard config not found: {config_path}")

        payload = _load_json(config_path)

        domains = payload.get("domains")
        if domains is not None:
            if not isinstance(domains, list) or not all(isinstance(d, str) for d in domains):
                raise TemplateError("'domains' must be a list of strings")
            repo.domains = [d.strip() for d in domains if d.strip()]

        for item in payload.get("templates", []) or []:
            try:
                template = Template.from_dict(item)
            except (TemplateError, KeyError, TypeError, AttributeError) as exc:
                logger.warning("Skip invalid template in '%s': %s", config_path, exc)
                continue
            repo.add_template(template)

        return repo

    def add_template(self, template: Template) -> None:
        self.templates = [t for t in self.templates if t.name.lower() != template.name.lower()]
        self.templates.append(template)

    def get_template(self, name: str) -> Template | None:
        normalized = name.strip().lower()
        for template in self.templates:
            if template.name.lower() == normalized:
                return template
        return None

    def get_templates_by_domain(self, domain: str) -> list[Template]:
        normalized = domain.strip().lower()
        return [t for t in self.templates if t.domain.lower() == normalized]

    def get_all_templates(self) -> list[Template]:
        return list(self.templates)

    def get_all_domains(self) -> list[str]:
        return list(self.domains)
