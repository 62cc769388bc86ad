from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.text import Text

from specmap.core.diff import diff_texts
from specmap.core.words import highlight_words
from specmap.models import DiffLine, Hunk, LineClassification

console = Console()


class Strategy(str, Enum):
    positional = "positional"
    lcs = "lcs"


_STYLES = {
    LineClassification.ADDED: ("+", "green", "bold green"),
    LineClassification.REMOVED: ("-", "red", "bold red"),
    LineClassification.CONTEXT: (" ", "default", "default"),
}


def _render_line(line: DiffLine) -> Text:
    marker, style, word_style = _STYLES[line.classification]
    old = str(line.line_number.old or "")
    new = str(line.line_number.new or "")
    text = Text(f"{old:>4} {new:>4} {marker} ", style="dim")
    for span in highlight_words(line):
        text.append(span.text, style=word_style if span.changed else style)
    return text


def _render_hunk(hunk: Hunk) -> None:
    if hunk.collapsed:
        console.print(Text(f"  ⋯ {len(hunk.lines)} unchanged lines", style="dim italic"))
        return
    for line in hunk.lines:
        console.print(_render_line(line))


def diff(
    old: Annotated[Path, typer.Argument(help="Original revision.", exists=True, dir_okay=False)],
    new: Annotated[Path, typer.Argument(help="Modified revision.", exists=True, dir_okay=False)],
    strategy: Annotated[Strategy | None, typer.Option(help="Line alignment strategy.")] = None,
    expand: Annotated[bool, typer.Option("--expand", help="Show unchanged runs in full.")] = False,
) -> None:
    """Compare two revisions line by line."""
    result = diff_texts(
        old.read_text(encoding="utf-8"),
        new.read_text(encoding="utf-8"),
        strategy=strategy.value if strategy else None,
        collapse_unchanged=not expand,
    )
    stats = result.stats
    sign = "+" if stats.net >= 0 else ""
    console.print(
        f"[green]{stats.additions} additions[/green], [red]{stats.deletions} deletions[/red], net {sign}{stats.net}"
    )
    for hunk in result.hunks:
        _render_hunk(hunk)
