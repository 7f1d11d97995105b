# run.py
# Entry point. Config and wiring only, no logic lives here.
#
# Reads questions from the terminal, streams each run through the classifier
# and keeps the conversation across turns. A nested arithmetic agent is
# registered as a tool of the main agent.

import logging
from contextlib import closing

from rich.console import Console
from rich.logging import RichHandler

from react_harness import display
from react_harness.classifier import ReactClassifier
from react_harness.client import OpenAIChatClient, TransportError
from react_harness.config import Settings, load_settings
from react_harness.harness import Agent, StepBudgetExceeded
from react_harness.models import Message
from react_harness.prompt import PROTOCOLS
from react_harness.tools import add, get_user_info, http_get, multiply, search_internet, square


def configure_logging(settings: Settings) -> None:
    handlers: list[logging.Handler] = [
        RichHandler(console=Console(stderr=True), level=logging.WARNING, show_path=False)
    ]
    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handlers.append(file_handler)
    logging.basicConfig(level=logging.INFO, format="%(message)s", handlers=handlers, force=True)


def build_agent(settings: Settings) -> Agent:
    client = OpenAIChatClient.from_settings(settings)
    protocol = PROTOCOLS[settings.language]

    math_agent = Agent(
        client,
        tools=[
            (add, "Add two integers."),
            (multiply, "Multiply two integers."),
            (square, "Square an integer."),
        ],
        max_steps=settings.max_steps,
        protocol=protocol,
    )

    return Agent(
        client,
        tools=[
            (get_user_info, "Look up a user by ID (1 to 3)."),
            (math_agent.as_tool("math_expert"), "Ask an arithmetic expert; quote the whole question."),
            (search_internet, "Search the web. Only when necessary."),
            (http_get, "Send an HTTP GET request. Only when necessary."),
        ],
        max_steps=settings.max_steps,
        protocol=protocol,
    )


def main() -> None:
    settings = load_settings()
    configure_logging(settings)

    agent = build_agent(settings)
    classifier = ReactClassifier(agent.protocol)
    display.banner(settings.model, agent.tools.names(), agent.max_steps)

    messages: list[Message] = []
    while True:
        try:
            question = display.ask().strip()
        except (EOFError, KeyboardInterrupt):
            display.goodbye()
            return
        if not question:
            continue

        fragments, done = agent.iter(messages, question)
        try:
            with closing(classifier.classify(fragments)) as segments:
                display.segments(segments)
        except (StepBudgetExceeded, TransportError) as exc:
            display.halt(str(exc))
            continue
        except KeyboardInterrupt:
            display.halt("Interrupted.")
            continue

        result = done.result()
        messages = result.messages
        display.final_answer(result.answer, result.steps)


if __name__ == "__main__":
    main()
