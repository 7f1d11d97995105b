# display.py
# All terminal output for the interactive harness.
#
# This module owns presentation entirely. harness.py never formats strings;
# run.py calls named functions here. Swap this file to change the entire UI.
#
# Colour language:
#   cyan: scaffolding (banner, prompts)
#   dim: Thought segments
#   blue: Action / Action Input segments
#   magenta: Observation segments
#   green: final answers
#   red: fatal halts

from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from react_harness.models import Segment, SegmentKind

console = Console()

SEGMENT_STYLES = {
    SegmentKind.THINKING: "dim",
    SegmentKind.ACTING: "blue",
    SegmentKind.OBSERVING: "magenta",
    SegmentKind.ANSWERING: "bold green",
}


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


def banner(model: str, tools: Iterable[str], max_steps: int) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]ReAct Harness[/bold cyan]\n"
            "[dim]Thought / Action / Observation loop over a plain-text protocol[/dim]\n\n"
            f"[dim]Model     :[/dim] [white]{model}[/white]\n"
            f"[dim]Tools     :[/dim] [white]{', '.join(tools)}[/white]\n"
            f"[dim]Step limit:[/dim] [white]{max_steps}[/white]\n\n"
            "[dim]Empty line skips, Ctrl+D or Ctrl+C exits.[/dim]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def ask() -> str:
    return console.input("[bold cyan]> [/bold cyan]")


def goodbye() -> None:
    console.print()
    console.print("[dim]Bye.[/dim]")


# ---------------------------------------------------------------------------
# Run output
# ---------------------------------------------------------------------------


def segment(seg: Segment) -> None:
    """Print one classified segment inline, without a trailing newline."""
    console.print(
        Text(seg.text, style=SEGMENT_STYLES[seg.kind]),
        end="",
        soft_wrap=True,
        highlight=False,
    )


def segments(stream: Iterable[Segment]) -> None:
    for seg in stream:
        segment(seg)
    console.print()


def final_answer(answer: str, steps: int) -> None:
    console.print(
        Panel(
            f"[white]{answer}[/white]",
            title=_label("FINAL ANSWER", "green"),
            subtitle=f"[dim]{steps} step(s)[/dim]",
            border_style="green",
            padding=(0, 2),
        )
    )


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold white]{reason}[/bold white]",
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    console.print()
