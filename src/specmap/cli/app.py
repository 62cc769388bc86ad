import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from specmap.cli.diff import diff
from specmap.cli.document import get, locate, positions, set_value

app = typer.Typer(
    name="specmap",
    help="specmap: navigate, edit and diff YAML/JSON API specifications.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Print debug messages.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False)],
        force=True,
    )


app.command("positions")(positions)
app.command("get")(get)
app.command("set")(set_value)
app.command("locate")(locate)
app.command("diff")(diff)


def main() -> None:
    app()
