from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Callable

from wizard.config import AppConfig, ConfigError, load_config
from wizard.constants import PERSONA_DISPLAY
from wizard.history import InvalidState
from wizard.models import InvalidAnswer, Persona, QuestionKind, QuestionSpec, SessionStatus
from wizard.openai_service import GenerationTerminal, GenerationTransient, OpenAIService
from wizard.rendering import DocumentRenderer
from wizard.session import Session
from wizard.storage import SerializationError, load_session, save_session
from wizard.templates import TemplateError, TemplateRepository

logger = logging.getLogger(__name__)

DEFAULT_SESSION_PATH = "wizard_session.json"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="project-wizard",
        description="LLM-powered dynamic project definition wizard",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="start a new wizard session")
    new.add_argument("-i", "--hints", help="starting hints for the wizard")
    new.add_argument("-d", "--domain", help="domain for the project")
    new.add_argument("-q", "--questions", type=int, help="maximum number of questions")
    new.add_argument("-t", "--template", help="start from a template")
    new.add_argument("-p", "--persona", help="persona mode (pm, architect, ux, compliance)")
    new.add_argument("-o", "--output", type=Path, help="write the project definition here")
    new.add_argument("-s", "--session", type=Path, help="save the session here when done or on quit")

    cont = sub.add_parser("continue", help="continue a saved wizard session")
    cont.add_argument("-s", "--session", type=Path, required=True, help="path to the session file")
    cont.add_argument("-o", "--output", type=Path, help="write the project definition here")

    sub.add_parser("templates", help="list available templates")
    sub.add_parser("domains", help="list available domains")
    return parser


def parse_input(question: QuestionSpec, text: str) -> tuple[str, Any]:
    """Turn a typed line into ("quit", None), ("back", n | None) or ("answer", raw)."""
    stripped = text.strip()
    lowered = stripped.lower()

    if lowered == "quit":
        return "quit", None
    if lowered == "back":
        return "back", None
    if lowered.startswith("back "):
        target = lowered[5:].strip()
        if target.isdigit():
            return "back", int(target)

    if question.kind is QuestionKind.MULTIPLE_CHOICE and stripped.isdigit():
        # Options are shown numbered from 1.
        return "answer", int(stripped) - 1
    return "answer", stripped


def describe_question(question: QuestionSpec, number: int, max_questions: int) -> str:
    lines = [f"Question {number}/{max_questions}: {question.text}"]
    if question.help_text:
        lines.append(f"Hint: {question.help_text}")

    if question.kind is QuestionKind.MULTIPLE_CHOICE:
        for idx, option in enumerate(question.options or [], start=1):
            lines.append(f"  {idx}. {option}")
    elif question.kind is QuestionKind.YES_NO:
        lines.append("  (yes/no)")
    elif question.kind is QuestionKind.RATING:
        low, high = question.scale or (0, 0)
        lines.append(f"  (rate {low}-{high})")
    return "\n".join(lines)


def _save(session: Session, path: Path | None, read: Callable[[str], str]) -> None:
    if path is None:
        try:
            answer = read("Save this session for later? [y/N] ").strip().lower()
            if answer not in {"y", "yes"}:
                return
            raw_path = read(f"Session path [{DEFAULT_SESSION_PATH}]: ").strip()
        except EOFError:
            return
        path = Path(raw_path or DEFAULT_SESSION_PATH)
    save_session(session, path)
    print(f"Session saved to {path}")


async def _ask_questions(session: Session, read: Callable[[str], str]) -> str:
    """Drive the question loop; returns "done" or "quit"."""
    while not session.is_finished:
        try:
            question = await session.request_next_question()
        except GenerationTransient as exc:
            logger.warning("Question generation failed: %s", exc)
            retry = read("Could not reach the model. Retry? [Y/n] ").strip().lower()
            if retry in {"n", "no"}:
                return "quit"
            continue

        if question is None:
            break

        print()
        print(describe_question(question, len(session.turns) + 1, session.max_questions))

        while True:
            command, value = parse_input(question, read("> "))
            if command == "quit":
                return "quit"
            if command == "back":
                try:
                    discarded = session.back(value)
                except InvalidState as exc:
                    print(f"Cannot go back: {exc}")
                    continue
                print(f"Going back to question {discarded[0].sequence_number}")
                break
            try:
                session.submit_answer(value)
            except InvalidAnswer as exc:
                print(f"Invalid answer: {exc}")
                continue
            break

    return "done"


async def run_wizard(
    session: Session,
    output_path: Path | None,
    session_path: Path | None,
    read: Callable[[str], str] = input,
) -> int:
    renderer = DocumentRenderer()

    print("Type 'back' (or 'back N') to revise an earlier answer, 'quit' to stop and save.")
    try:
        outcome = await _ask_questions(session, read)
    except GenerationTerminal as exc:
        logger.error("Session aborted: %s", exc)
        _save(session, session_path, read)
        return 1
    except EOFError:
        outcome = "quit"

    if outcome == "quit":
        print("Exiting wizard")
        _save(session, session_path, read)
        return 0

    print("\nGenerating project definition...")
    try:
        definition = await session.finalize()
    except GenerationTerminal as exc:
        logger.error("Could not generate the project definition: %s", exc)
        _save(session, session_path, read)
        return 1

    print()
    print(renderer.build_markdown(definition, session))

    if output_path is not None:
        try:
            renderer.export(definition, output_path, session)
        except OSError as exc:
            logger.error("Could not write project definition to %s: %s", output_path, exc)
            _save(session, session_path, read)
            return 1
        print(f"Project definition saved to {output_path}")

    _save(session, session_path, read)
    print("Wizard completed successfully!")
    return 0


def _build_service(config: AppConfig) -> OpenAIService:
    return OpenAIService(
        api_key=config.openai_api_key,
        model=config.openai_model,
        timeout=config.request_timeout,
        max_retries=config.max_retries,
    )


async def _run_new(args: argparse.Namespace, config: AppConfig, repo: TemplateRepository) -> int:
    service = _build_service(config)
    try:
        max_questions = args.questions if args.questions is not None else config.max_questions
        persona = Persona.parse(args.persona) if args.persona else None

        if args.template:
            template = repo.get_template(args.template)
            if template is None:
                logger.error("Template '%s' not found", args.template)
                return 1
            print(f"Using template: {template.name}")
            print(f"Description: {template.description}")
            session = Session.from_template(
                template,
                service,
                hints=args.hints,
                domain=args.domain,
                persona=persona,
                max_questions=max_questions,
            )
        else:
            session = Session(
                service,
                hints=args.hints,
                domain=args.domain,
                persona=persona,
                max_questions=max_questions,
            )

        if persona is not None:
            print(f"Using persona: {PERSONA_DISPLAY[persona.value]}")
        print(f"Starting wizard session with up to {session.max_questions} questions")
        return await run_wizard(session, args.output, args.session)
    finally:
        await service.close()


async def _run_continue(args: argparse.Namespace, config: AppConfig) -> int:
    service = _build_service(config)
    try:
        session = load_session(args.session, generator=service)
        if session.status is SessionStatus.ABORTED:
            session.resume()
        print(f"Continuing session {session.id} at question {len(session.turns) + 1}/{session.max_questions}")
        return await run_wizard(session, args.output, args.session)
    finally:
        await service.close()


def list_templates(repo: TemplateRepository) -> int:
    templates = repo.get_all_templates()
    if not templates:
        print("No templates available")
        return 0
    for idx, template in enumerate(templates, start=1):
        print(f"{idx}. {template.name} ({template.domain})")
        print(f"   {template.description}")
        print()
    return 0


def list_domains(repo: TemplateRepository) -> int:
    for domain in repo.get_all_domains():
        print(domain)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    needs_model = args.command in {"new", "continue"}
    try:
        config = load_config(require_api_key=needs_model)
        repo = TemplateRepository.load(config.wizard_config_path)
        if args.command == "templates":
            return list_templates(repo)
        if args.command == "domains":
            return list_domains(repo)
        if args.command == "new":
            return asyncio.run(_run_new(args, config, repo))
        return asyncio.run(_run_continue(args, config))
    except (ConfigError, TemplateError, SerializationError, ValueError) as exc:
        logging.error("Startup failed: %s", exc)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
