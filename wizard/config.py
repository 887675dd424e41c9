from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_MODEL = "gpt-4.1-mini"


def _resolve_path(raw_path: str | None) -> Path | None:
    if not raw_path:
        return None
    path = Path(raw_path).expanduser()
    if path.is_absolute():
        return path
    return (BASE_DIR / path).resolve()


@dataclass(frozen=True)
class AppConfig:
    openai_api_key: str
    openai_model: str = DEFAULT_MODEL
    max_questions: int = 10
    request_timeout: float = 60.0
    max_retries: int = 5
    wizard_config_path: Path | None = None


class ConfigError(RuntimeError):
    pass


def _int_setting(name: str, default: str, low: int, high: int) -> int:
    raw = os.getenv(name, default).strip()
    try:
        value = int(raw)
        if value < low or value > high:
            raise ValueError
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer in range [{low}, {high}]") from exc
    return value


def load_config(require_api_key: bool = True) -> AppConfig:
    load_dotenv()

    openai_api_key = os.getenv("OPENAI_API_KEY", "").strip()
    openai_model = os.getenv("OPENAI_MODEL", DEFAULT_MODEL).strip() or DEFAULT_MODEL
    timeout_raw = os.getenv("OPENAI_TIMEOUT_SECONDS", "60").strip()

    if require_api_key and not openai_api_key:
        raise ConfigError("Missing OPENAI_API_KEY in environment/.env")

    max_questions = _int_setting("MAX_QUESTIONS", "10", 1, 50)
    max_retries = _int_setting("OPENAI_MAX_RETRIES", "5", 1, 10)

    try:
        request_timeout = float(timeout_raw)
        if request_timeout <= 0:
            raise ValueError
    except ValueError as exc:
        raise ConfigError("OPENAI_TIMEOUT_SECONDS must be a positive number") from exc

    wizard_config_path = _resolve_path(os.getenv("WIZARD_CONFIG_PATH", "").strip())
    if wizard_config_path is not None and not wizard_config_path.exists():
        raise ConfigError(f"WIZARD_CONFIG_PATH points to a missing file: {wizard_config_path}")

    return AppConfig(
        openai_api_key=openai_api_key,
        openai_model=openai_model,
        max_questions=max_questions,
        request_timeout=request_timeout,
        max_retries=max_retries,
        wizard_config_path=wizard_config_path,
    )
