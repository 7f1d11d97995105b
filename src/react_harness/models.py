# models.py
# Data contracts for the ReAct harness.
# No business logic lives here, pure schema and validation.

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """A single chat turn."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""


class SegmentKind(str, Enum):
    """Which part of the ReAct cycle a piece of model output belongs to."""

    THINKING = "thinking"
    ACTING = "acting"
    OBSERVING = "observing"
    ANSWERING = "answering"


class Segment(BaseModel):
    """A classified slice of streamed text."""

    model_config = ConfigDict(frozen=True)

    kind: SegmentKind
    text: str


class RunResult(BaseModel):
    """Terminal state of a successful run."""

    messages: list[Message] = Field(..., description="Full conversation, system prompt first.")
    answer: str = Field(..., description="Trimmed text after the final-answer marker.")
    steps: int = Field(..., ge=1, description="Generation rounds consumed.")
