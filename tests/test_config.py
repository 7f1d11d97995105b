import os

import pytest
from pydantic import ValidationError

from react_harness.config import load_settings

ENV_VARS = [
    "OPENAI_BASE_URL",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "REACT_MAX_STEPS",
    "REACT_TEMPERATURE",
    "REACT_TIMEOUT",
    "REACT_LANGUAGE",
    "REACT_LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # load_dotenv writes into os.environ; give each test a private copy.
    monkeypatch.setattr(os, "environ", os.environ.copy())
    for var in ENV_VARS:
        os.environ.pop(var, None)
    # Keep any developer .env out of the picture.
    monkeypatch.chdir(tmp_path)


def test_defaults(tmp_path):
    settings = load_settings(str(tmp_path / "missing.env"))
    assert settings.model == "qwen-plus"
    assert settings.max_steps == 10
    assert settings.base_url is None
    assert settings.language == "zh"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("REACT_MAX_STEPS", "3")
    monkeypatch.setenv("REACT_LANGUAGE", "en")
    monkeypatch.setenv("OPENAI_BASE_URL", "")

    settings = load_settings(str(tmp_path / "missing.env"))
    assert settings.model == "gpt-4o-mini"
    assert settings.max_steps == 3
    assert settings.language == "en"
    assert settings.base_url is None


def test_dotenv_file_is_read(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OPENAI_API_KEY=sk-test\nREACT_TIMEOUT=5\n", encoding="utf-8")

    settings = load_settings(str(env_file))
    assert settings.api_key == "sk-test"
    assert settings.timeout == 5.0


@pytest.mark.parametrize("var,value", [("REACT_MAX_STEPS", "0"), ("REACT_LANGUAGE", "fr"), ("REACT_TIMEOUT", "soon")])
def test_invalid_values_rejected(monkeypatch, tmp_path, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(ValidationError):
        load_settings(str(tmp_path / "missing.env"))
