"""mediaart normalize command — show the normalized form of names."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from mediaart.cache.keys import normalize as normalize_text
from mediaart.utils.console import console


def normalize(
    texts: Annotated[
        list[str],
        typer.Argument(help="Artist or title strings to normalize."),
    ],
) -> None:
    """Print the normalized form used for cache keys."""
    table = Table()
    table.add_column("Input", style="bold cyan")
    table.add_column("Normalized")
    for text in texts:
        table.add_row(text, normalize_text(text))
    console.print(table)
