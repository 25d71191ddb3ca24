"""mediaart process command — fill the cache for media files."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from mediaart.cli.utils import expand_inputs
from mediaart.core.config import load_config
from mediaart.core.errors import MediaArtError
from mediaart.core.models import MediaArtType, ProcessFlags
from mediaart.core.process import MediaArtProcess
from mediaart.storage.volumes import PsutilVolumeIndex
from mediaart.utils.console import console


def process(
    inputs: Annotated[
        list[str],
        typer.Argument(help="Media files, directories, glob patterns or .txt lists."),
    ],
    artist: Annotated[
        Optional[str],
        typer.Option("--artist", "-a", help="Artist name."),
    ] = None,
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-t", help="Album or video title."),
    ] = None,
    media_type: Annotated[
        MediaArtType,
        typer.Option("--type", help="Kind of media."),
    ] = MediaArtType.ALBUM,
    image: Annotated[
        Optional[Path],
        typer.Option("--image", "-i", help="Image to store instead of searching the media directory."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Refresh even if the cache entry is up to date."),
    ] = False,
    max_width: Annotated[
        Optional[int],
        typer.Option("--max-width", help="Downscale wider images to this width."),
    ] = None,
    mirror: Annotated[
        bool,
        typer.Option("--mirror/--no-mirror", help="Copy art next to media on removable volumes."),
    ] = True,
) -> None:
    """Store or find cover art for media files.

    Without --image, each media file's directory is searched for a likely
    cover (cover.jpg, folder.png, <album>.jpg, ...).
    """
    if artist is None and title is None:
        console.print("[red]Give at least one of --artist or --title.[/red]")
        raise typer.Exit(1)

    expanded = expand_inputs(inputs)
    if not expanded:
        console.print("[red]No inputs resolved. Check your paths or patterns.[/red]")
        raise typer.Exit(1)

    buffer = mime = None
    if image is not None:
        if not image.is_file():
            console.print(f"[red]Image not found:[/red] {image}")
            raise typer.Exit(1)
        buffer = image.read_bytes()
        mime, _ = mimetypes.guess_type(image.name)

    config = load_config(**{"codec.max_width": max_width})
    flags = ProcessFlags.FORCE if force else ProcessFlags.NONE
    volumes = PsutilVolumeIndex() if mirror else None

    results: list[tuple[str, str, str]] = []
    with MediaArtProcess(config, volumes=volumes) as ctx:
        for media in expanded:
            try:
                ctx.process_file(media, media_type, artist, title, buffer=buffer, mime=mime, flags=flags)
            except MediaArtError as e:
                console.print(f"[red]Failed:[/red] {media}: {e}")
                results.append((media, "failed", str(e)))
                continue
            results.append((media, "ok", ""))

        cache_path = ctx.get_paths(artist, title, media_type).cache

    if len(results) > 1:
        table = Table(title="Processed")
        table.add_column("Media", style="bold")
        table.add_column("Status")
        table.add_column("Error", style="dim")
        for media, status, error in results:
            style = "green" if status == "ok" else "red"
            table.add_row(media, f"[{style}]{status}[/{style}]", error)
        console.print(table)

    if cache_path.exists():
        console.print(f"[green]Cached:[/green] {cache_path}")
    else:
        console.print(f"[yellow]No art found yet for[/yellow] {cache_path.name}")

    if any(status == "failed" for _, status, _ in results):
        raise typer.Exit(1)
