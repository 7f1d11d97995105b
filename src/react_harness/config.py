# config.py
# Runtime configuration. Environment variables (optionally from a .env file)
# are read once into a validated Settings object; nothing else in the package
# touches os.environ.

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_ENV = {
    "base_url": "OPENAI_BASE_URL",
    "api_key": "OPENAI_API_KEY",
    "model": "OPENAI_MODEL",
    "max_steps": "REACT_MAX_STEPS",
    "temperature": "REACT_TEMPERATURE",
    "timeout": "REACT_TIMEOUT",
    "language": "REACT_LANGUAGE",
    "log_file": "REACT_LOG_FILE",
}


class Settings(BaseModel):
    """Validated runtime configuration."""

    base_url: str | None = Field(default=None, description="OpenAI-compatible endpoint; SDK default when unset.")
    api_key: str | None = None
    model: str = "qwen-plus"
    max_steps: int = Field(default=10, ge=1, description="Step budget per run.")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    timeout: float = Field(default=60.0, gt=0)
    language: Literal["zh", "en"] = "zh"
    log_file: str | None = None


def load_settings(env_file: str | None = None) -> Settings:
    """
    Load Settings from the process environment.

    Empty variables count as unset. Raises pydantic.ValidationError on
    malformed values.
    """
    load_dotenv(env_file)
    values = {}
    for field, var in _ENV.items():
        raw = os.getenv(var)
        if raw:
            values[field] = raw
    return Settings.model_validate(values)
