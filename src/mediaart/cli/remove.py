"""mediaart remove command — delete cached art."""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from mediaart.cache.removal import remove as remove_art
from mediaart.core.config import load_config
from mediaart.utils.console import console


def remove(
    artist: Annotated[
        Optional[str],
        typer.Option("--artist", "-a", help="Artist whose entry is removed."),
    ] = None,
    album: Annotated[
        Optional[str],
        typer.Option("--album", "-b", help="Album; also removes the shared album file."),
    ] = None,
    wipe: Annotated[
        bool,
        typer.Option("--all", help="Remove every file in the cache."),
    ] = False,
) -> None:
    """Remove cached art for an artist/album, or everything with --all."""
    if artist is None and album is None and not wipe:
        console.print("[red]Give --artist and/or --album, or --all to wipe the cache.[/red]")
        raise typer.Exit(1)

    config = load_config()
    if not remove_art(artist, album, cache_root=config.cache_root):
        console.print("[red]Some files could not be removed.[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Removed[/green] from {config.cache_root}")
