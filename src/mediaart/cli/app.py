"""mediaart CLI entry point."""

from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from mediaart import __version__
from mediaart.cli.normalize import normalize
from mediaart.cli.path import path
from mediaart.cli.process import process
from mediaart.cli.remove import remove
from mediaart.utils.console import setup_logging

app = typer.Typer(
    name="mediaart",
    help="mediaart — cover-art cache for albums and videos.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mediaart {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """mediaart — cover-art cache for albums and videos."""
    # MEDIAART_* settings may come from a .env file; exported variables win
    load_dotenv(override=False)
    setup_logging(verbose)


app.command("path")(path)
app.command("normalize")(normalize)
app.command("process")(process)
app.command("remove")(remove)
