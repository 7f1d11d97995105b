# harness.py
# ReAct step loop.
#
# The Agent is the kernel. The model is a passive text generator; this class
# owns all control flow: conversation growth, stop sequences, action parsing,
# tool dispatch and the step budget.
#
# Control flow per step:
#   generate (stop at the observation marker) → stream fragments to caller
#   → final answer? done : action? observe : corrective message
#
# Only two failures end a run: TransportError from the client and
# StepBudgetExceeded. Everything else is turned into text the model can read.

import logging
import re
from collections.abc import Callable, Iterable, Iterator, Sequence
from concurrent.futures import Future
from contextlib import closing
from typing import Any

from react_harness.client import ChatClient, TransportError
from react_harness.models import Message, RunResult
from react_harness.prompt import CHINESE, PromptBuilder, Protocol
from react_harness.registry import ToolRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class StepBudgetExceeded(Exception):
    """Raised when a run exhausts its step budget without a final answer. Fatal."""

    def __init__(self, max_steps: int) -> None:
        super().__init__(f"no final answer after {max_steps} step(s)")
        self.max_steps = max_steps


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------


class Agent:
    """
    ReAct agent over a plain-text tool protocol.

    Example:
        agent = Agent(client, tools=[(add, "Add two integers.")])
        fragments, done = agent.iter([], "What is 2 + 2?")
        for fragment in fragments:
            print(fragment, end="")
        result = done.result()
    """

    def __init__(
        self,
        client: ChatClient,
        tools: Iterable[tuple[Callable[..., Any], str]] = (),
        prompter: Callable[[str], str] | None = None,
        max_steps: int = 10,
        protocol: Protocol = CHINESE,
        stream: bool = True,
    ) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")

        self.client = client
        self.max_steps = max_steps
        self.protocol = protocol
        self.stream = stream

        self.tools = ToolRegistry()
        for func, description in tools:
            self.tools.add(func, description)
        self.tools.freeze()

        self._prompt = PromptBuilder(self.tools, protocol, prompter)
        p = re.escape
        self._action_re = re.compile(
            rf"{p(protocol.action)}\s*(.+?)\n{p(protocol.action_input)}[ \t]*(.*)"
        )
        self._final_re = re.compile(rf"{p(protocol.final_answer)}\s*(.*)", re.DOTALL)

    # ------------------------------------------------------------------
    # Protocol helpers
    # ------------------------------------------------------------------

    def system_prompt(self) -> str:
        return self._prompt.system_prompt()

    def parse_final_answer(self, response: str) -> str | None:
        match = self._final_re.search(response)
        if match is None:
            return None
        return match.group(1).strip()

    def parse_action(self, response: str) -> tuple[str, str] | None:
        """Return (tool name, raw input) or None if no well-formed action is present."""
        match = self._action_re.search(response)
        if match is None:
            return None
        return match.group(1).strip(), match.group(2).strip()

    def dispatch(self, name: str, args_text: str) -> str:
        tool = self.tools.get(name)
        if tool is None:
            logger.info("Model requested unknown tool [%s]", name)
            return self.protocol.tool_not_found.format(name=name, names=", ".join(self.tools.names()))
        return tool.run(args_text)

    # ------------------------------------------------------------------
    # Step loop
    # ------------------------------------------------------------------

    def _generate(self, messages: Sequence[Message]) -> Iterator[str]:
        stop = [self.protocol.observation]
        if not self.stream:
            yield self.client.chat(messages, stop)
            return
        yield from self.client.chat_stream(messages, stop)

    def _steps(self, messages: list[Message], question: str, done: Future) -> Iterator[str]:
        if not messages:
            messages.append(Message(role="system", content=self.system_prompt()))
        messages.append(Message(role="user", content=question))

        for step in range(self.max_steps):
            logger.debug("Step %d/%d", step + 1, self.max_steps)

            chunks: list[str] = []
            with closing(self._generate(messages)) as fragments:
                for fragment in fragments:
                    chunks.append(fragment)
                    yield fragment
            response = "".join(chunks)
            messages.append(Message(role="assistant", content=response))

            answer = self.parse_final_answer(response)
            if answer is not None:
                done.set_result(RunResult(messages=messages, answer=answer, steps=step + 1))
                return

            action = self.parse_action(response)
            if action is None:
                logger.warning("Step %d: no final answer and no action in response", step + 1)
                messages.append(Message(role="system", content=self.protocol.corrective))
                continue

            observation = self.protocol.observe(self.dispatch(*action))
            # The trailing thought marker returns a classifier to Thinking for the next turn.
            yield ("" if response.endswith("\n") else "\n") + observation + "\n" + self.protocol.thought
            messages.append(Message(role="system", content=observation))

        raise StepBudgetExceeded(self.max_steps)

    def iter(
        self, messages: Sequence[Message] | None, question: str
    ) -> tuple[Iterator[str], "Future[RunResult]"]:
        """
        Start a run.

        Returns the run's fragment iterator and a future. The future resolves
        to a RunResult once the iterator is drained on the success path. On
        StepBudgetExceeded or TransportError the iterator raises and the
        future is left pending. Closing the iterator early aborts the
        in-flight model request.
        """
        done: Future = Future()
        return self._steps(list(messages or []), question, done), done

    def run(
        self,
        question: str,
        messages: Sequence[Message] | None = None,
        on_fragment: Callable[[str], None] | None = None,
    ) -> RunResult:
        """Drain a run synchronously. Raises StepBudgetExceeded / TransportError."""
        fragments, done = self.iter(messages, question)
        for fragment in fragments:
            if on_fragment is not None:
                on_fragment(fragment)
        return done.result()

    def as_tool(self, name: str = "ask_agent") -> Callable[[str], str]:
        """
        Expose this agent as a single-argument tool for another agent.

        Fatal inner failures come back as observation text, so a nested agent
        can never abort the outer run.
        """

        def ask(question: str) -> str:
            try:
                return self.run(question).answer
            except (StepBudgetExceeded, TransportError) as exc:
                logger.warning("Nested agent [%s] failed: %s", name, exc)
                return f"Error: {exc}"

        ask.__name__ = ask.__qualname__ = name
        return ask
