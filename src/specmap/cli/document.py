import json
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich.console import Console
from rich.table import Table

from specmap.core.builder import parse_document
from specmap.core.formats import resolve_format
from specmap.core.mutator import update
from specmap.core.paths import parse_path, path_key
from specmap.core.positions import build_position_index, path_at_line
from specmap.core.resolver import NOT_FOUND, find
from specmap.core.serializer import serialize
from specmap.errors import SpecMapError
from specmap.models import DocumentNode

console = Console()
err_console = Console(stderr=True)

FileArg = Annotated[Path, typer.Argument(help="YAML or JSON document.", exists=True, dir_okay=False)]
FormatOpt = Annotated[str | None, typer.Option("--format", help="Document format (yaml, json).")]


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]{message}[/red]")
    return typer.Exit(code=1)


def _load(file: Path, format: str | None) -> tuple[DocumentNode, str]:
    text = file.read_text(encoding="utf-8")
    try:
        return parse_document(text, resolve_format(format, file)), text
    except SpecMapError as exc:
        raise _fail(str(exc)) from exc


def _parse_path_arg(path: str) -> tuple[str, ...]:
    try:
        return parse_path(path)
    except ValueError as exc:
        raise _fail(str(exc)) from exc


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def positions(file: FileArg, format: FormatOpt = None) -> None:
    """Show the line and column of every path in a document."""
    doc, text = _load(file, format)
    index = build_position_index(doc, text)

    table = Table(show_lines=False)
    for h in ("path", "line", "column"):
        table.add_column(h)
    for entry in index.values():
        table.add_row(path_key(entry.path), str(entry.line), str(entry.column))
    console.print(table)
    console.print(f"({len(index)} paths)")


def get(
    file: FileArg,
    path: Annotated[str, typer.Argument(help='Dotted path or JSON array, e.g. info.title or ["paths","/a.b"].')],
    format: FormatOpt = None,
) -> None:
    """Print the value at PATH as JSON."""
    doc, _ = _load(file, format)
    value = find(doc, _parse_path_arg(path))
    if value is NOT_FOUND:
        raise _fail(f"Path not found: {path}")
    console.print_json(_dump(value))


def set_value(
    file: FileArg,
    path: Annotated[str, typer.Argument(help="Dotted path or JSON array of the value to replace.")],
    value: Annotated[str, typer.Argument(help="New value as a YAML literal (2, 'text', [a, b], {k: v}).")],
    write: Annotated[bool, typer.Option("--write", help="Write the result back to FILE.")] = False,
    format: FormatOpt = None,
) -> None:
    """Replace the value at PATH and print (or write) the serialized document."""
    doc, _ = _load(file, format)
    try:
        new_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise _fail(f"Invalid value: {exc}") from exc

    try:
        text = serialize(update(doc, _parse_path_arg(path), new_value))
    except SpecMapError as exc:
        raise _fail(str(exc)) from exc

    if write:
        file.write_text(text, encoding="utf-8")
        console.print(f"[green]Updated[/green] {path} in {file}")
    else:
        typer.echo(text, nl=False)


def locate(
    file: FileArg,
    line: Annotated[int, typer.Option("--line", help="1-based line number.", min=1)],
    format: FormatOpt = None,
) -> None:
    """Print the path of the value enclosing LINE."""
    doc, text = _load(file, format)
    found = path_at_line(build_position_index(doc, text), line)
    if found is None:
        raise _fail(f"No path at or above line {line}")
    typer.echo(_dump(list(found)))
