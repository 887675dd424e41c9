"""
Unit tests for wizard.config.load_config.
"""

import pytest

from wizard.config import DEFAULT_MODEL, ConfigError, load_config

ENV_VARS = [
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "MAX_QUESTIONS",
    "OPENAI_TIMEOUT_SECONDS",
    "OPENAI_MAX_RETRIES",
    "WIZARD_CONFIG_PATH",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    config = load_config()

    assert config.openai_api_key == "sk-test"
    assert config.openai_model == DEFAULT_MODEL
    assert config.max_questions == 10
    assert config.request_timeout == 60.0
    assert config.max_retries == 5
    assert config.wizard_config_path is None


def test_missing_api_key_only_fatal_when_required():
    with pytest.raises(ConfigError):
        load_config()

    assert load_config(require_api_key=False).openai_api_key == ""


@pytest.mark.parametrize(
    "name, value",
    [
        ("MAX_QUESTIONS", "0"),
        ("MAX_QUESTIONS", "many"),
        ("OPENAI_MAX_RETRIES", "11"),
        ("OPENAI_TIMEOUT_SECONDS", "-1"),
        ("WIZARD_CONFIG_PATH", "/nonexistent/wizard.json"),
    ],
)
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigError):
        load_config()


def test_wizard_config_path_resolved(monkeypatch, tmp_path):
    path = tmp_path / "wizard.json"
    path.write_text("{}", encoding="utf-8")
    monkeypatch.setenv("WIZARD_CONFIG_PATH", str(path))

    config = load_config(require_api_key=False)

    assert config.wizard_config_path == path
