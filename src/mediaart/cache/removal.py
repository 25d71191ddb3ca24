"""Removal and garbage collection of cache entries."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from mediaart.cache.keys import cache_filename, derive_album_shared_path, derive_cache_path
from mediaart.core.config import default_cache_root

logger = logging.getLogger(__name__)


def _unlink(path: Path) -> bool:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove media-art file '%s': %s", path, e)
        return False
    return True


def _cache_files(root: Path) -> list[Path]:
    return [p for p in root.iterdir() if p.is_file() or p.is_symlink()]


def remove(
    artist: str | None = None,
    album: str | None = None,
    cache_root: Path | None = None,
    prefix: str = "album",
) -> bool:
    """Remove the art for an artist/album.

    Deletes the per-artist entry and, when album is given, the shared album
    file. With neither artist nor album, every file in the cache root is
    deleted. Missing files and a missing cache root count as success.

    Returns:
        False only if a file that exists could not be deleted.
    """
    root = Path(cache_root) if cache_root is not None else default_cache_root()
    if not root.is_dir():
        logger.debug("Nothing to do, media-art cache directory '%s' doesn't exist", root)
        return True

    if artist is None and album is None:
        logger.info("Removing all media art under '%s'", root)
        return all([_unlink(p) for p in _cache_files(root)])

    targets = {derive_cache_path(artist, album, prefix, root)}
    if album is not None:
        targets.add(derive_album_shared_path(album, prefix, root))

    return all([_unlink(p) for p in targets])


def prune(
    keep: Iterable[tuple[str | None, str | None]],
    cache_root: Path | None = None,
    prefix: str = "album",
) -> list[Path]:
    """Delete every cache file not belonging to one of the (artist, album) pairs.

    Both the per-artist entry and the shared album file of each kept pair
    survive. Leftover temp files from interrupted writes are removed too.

    Returns:
        Paths that were deleted.
    """
    root = Path(cache_root) if cache_root is not None else default_cache_root()
    if not root.is_dir():
        return []

    wanted: set[str] = set()
    for artist, album in keep:
        if artist is None and album is None:
            continue
        wanted.add(cache_filename(artist, album, prefix))
        if album is not None:
            wanted.add(cache_filename(None, album, prefix))

    removed = []
    for path in _cache_files(root):
        if path.name in wanted:
            continue
        logger.info("Removing media-art file '%s': no album exists with songs for this media-art cache", path.name)
        if _unlink(path):
            removed.append(path)
    return removed
