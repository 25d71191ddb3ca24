"""mediaart path command — print the cache location for an artist/title."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from mediaart.cache.keys import derive_paths
from mediaart.core.config import load_config
from mediaart.core.errors import MediaArtError
from mediaart.utils.console import console


def path(
    artist: Annotated[
        Optional[str],
        typer.Option("--artist", "-a", help="Artist name."),
    ] = None,
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-t", help="Album or video title."),
    ] = None,
    prefix: Annotated[
        str,
        typer.Option("--type", help="File prefix: album, video, or any custom category."),
    ] = "album",
    media: Annotated[
        Optional[Path],
        typer.Option("--media", "-m", help="Media file; also prints its local mirror path."),
    ] = None,
) -> None:
    """Print the cache path (and local mirror path) for an artist/title."""
    config = load_config()
    try:
        paths = derive_paths(
            artist,
            title,
            prefix,
            media_file=media,
            cache_root=config.cache_root,
            dir_name=config.cache.local_dir_name,
        )
    except MediaArtError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(str(paths.cache), soft_wrap=True)
    if paths.local is not None:
        console.print(str(paths.local), soft_wrap=True)
