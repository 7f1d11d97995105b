# client.py
# Model transport seam.
#
# The step loop only ever sees the ChatClient protocol: a blocking chat() and
# a lazily streamed chat_stream(). OpenAIChatClient implements it on top of
# any OpenAI-compatible endpoint via the openai SDK.

import logging
from collections.abc import Iterator, Sequence
from typing import Protocol

import httpx
from openai import OpenAI, OpenAIError

from react_harness.config import Settings
from react_harness.models import Message

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TransportError(Exception):
    """Raised when the model backend cannot be reached or fails mid-stream. Fatal."""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class ChatClient(Protocol):
    def chat(self, messages: Sequence[Message], stop: Sequence[str]) -> str:
        """Return the full completion text."""
        ...

    def chat_stream(self, messages: Sequence[Message], stop: Sequence[str]) -> Iterator[str]:
        """
        Return an iterator of completion text fragments.

        Call-setup failures raise immediately; closing the iterator releases
        the underlying connection.
        """
        ...


# ---------------------------------------------------------------------------
# OpenAI-compatible implementation
# ---------------------------------------------------------------------------


class OpenAIChatClient:
    """
    Chat client for any OpenAI-compatible /chat/completions endpoint.

    Example:
        client = OpenAIChatClient("qwen-plus", base_url=..., api_key=...)
        text = client.chat([Message(role="user", content="hi")], stop=[])
    """

    def __init__(
        self,
        model: str,
        base_url: str | None = None,
        api_key: str | None = None,
        temperature: float = 0.0,
        timeout: float = 60.0,
        client: OpenAI | None = None,
    ) -> None:
        self._model = model
        self._temperature = temperature
        self._client = client or OpenAI(base_url=base_url, api_key=api_key, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIChatClient":
        return cls(
            model=settings.model,
            base_url=settings.base_url,
            api_key=settings.api_key,
            temperature=settings.temperature,
            timeout=settings.timeout,
        )

    @property
    def model(self) -> str:
        return self._model

    def _request(self, messages: Sequence[Message], stop: Sequence[str], stream: bool):
        kwargs = {
            "model": self._model,
            "messages": [m.model_dump() for m in messages],
            "temperature": self._temperature,
            "stream": stream,
        }
        if stop:
            kwargs["stop"] = list(stop)
        try:
            return self._client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            raise TransportError(f"LLM request failed: {exc}") from exc

    def chat(self, messages: Sequence[Message], stop: Sequence[str]) -> str:
        response = self._request(messages, stop, stream=False)
        if not response.choices:
            raise TransportError("LLM returned no choices")
        return response.choices[0].message.content or ""

    def chat_stream(self, messages: Sequence[Message], stop: Sequence[str]) -> Iterator[str]:
        # Issue the request now so setup errors surface before iteration.
        stream = self._request(messages, stop, stream=True)
        return self._deltas(stream)

    def _deltas(self, stream) -> Iterator[str]:
        try:
            for chunk in stream:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        except (OpenAIError, httpx.HTTPError) as exc:
            raise TransportError(f"LLM stream interrupted: {exc}") from exc
        finally:
            logger.debug("Closing completion stream")
            stream.close()
