"""Cache key derivation: text normalization and cache file naming.

File names follow ``{prefix}-{A}-{B}.jpeg`` where A and B are MD5 digests of
normalized strings. With an artist, A is the artist and B the title. Without
one, A is the title and B is the checksum of a single space, which makes every
artist-less entry for a title land on the same shared album file.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from mediaart.cache.checksum import checksum_of
from mediaart.core.config import default_cache_root
from mediaart.core.errors import InvalidArgumentError
from mediaart.core.models import ArtKey, ArtPaths
from mediaart.utils.paths import to_path

# md5(" "), stands in for an absent artist or title
SPACE_CHECKSUM = "7215ee9c7d9dc229d2921a40e899ec5f"

LOCAL_DIR_NAME = ".mediaartlocal"

_BLOCKS = (("(", ")"), ("{", "}"), ("[", "]"), ("<", ">"))
_INVALID_CHARS = "()[]<>{}_!@#$^&*+=|\\/\"'?~"
_DELETE_INVALID = str.maketrans("", "", _INVALID_CHARS)
_MULTI_SPACE = re.compile(r" {2,}")
_ASCII_WHITESPACE = " \t\n\r\f\v"


def _next_block(text: str) -> tuple[int, int] | None:
    """Earliest bracketed span: first opening char, then first closer after it."""
    found = None
    for open_char, close_char in _BLOCKS:
        start = text.find(open_char)
        if start == -1:
            continue
        end = text.find(close_char, start + 1)
        if end == -1:
            continue
        if found is None or start < found[0]:
            found = (start, end)
    return found


def _strip_blocks(text: str) -> str:
    kept = []
    while True:
        block = _next_block(text)
        if block is None:
            kept.append(text)
            break
        start, end = block
        kept.append(text[:start])
        text = text[end + 1 :]
    return "".join(kept)


def normalize(text: str) -> str:
    """Canonical form of an artist or title used for cache keys.

    Drops bracketed blocks such as "(CD1)", lowercases, deletes punctuation
    from a fixed set, turns tabs into spaces, collapses repeated spaces and
    trims. The exact steps must not change: they decide on-disk file names.

    Raises:
        TypeError: If text is None.
    """
    if text is None:
        raise TypeError("normalize() requires a string, got None")

    result = _strip_blocks(text).lower()
    result = result.translate(_DELETE_INVALID)
    result = result.replace("\t", " ")
    result = _MULTI_SPACE.sub(" ", result)
    return result.strip(_ASCII_WHITESPACE)


def art_key(artist: str | None, title: str | None, prefix: str) -> ArtKey:
    """Build a normalized key. Raises InvalidArgumentError if both fields are None."""
    if artist is None and title is None:
        raise InvalidArgumentError("artist or title required")
    return ArtKey(
        artist=normalize(artist) if artist is not None else None,
        title=normalize(title) if title is not None else None,
        prefix=prefix,
    )


def key_filename(key: ArtKey) -> str:
    if key.artist is not None:
        first = checksum_of(key.artist.encode("utf-8"))
        second = checksum_of(key.title.encode("utf-8")) if key.title is not None else SPACE_CHECKSUM
    else:
        first = checksum_of(key.title.encode("utf-8"))
        second = SPACE_CHECKSUM
    return f"{key.prefix}-{first}-{second}.jpeg"


def cache_filename(artist: str | None, title: str | None, prefix: str) -> str:
    """File name (without directory) of the cache entry for artist/title."""
    return key_filename(art_key(artist, title, prefix))


def derive_cache_path(
    artist: str | None,
    title: str | None,
    prefix: str,
    cache_root: Path | None = None,
) -> Path:
    """Full cache path for artist/title under cache_root (default per-user root)."""
    root = Path(cache_root) if cache_root is not None else default_cache_root()
    return root / cache_filename(artist, title, prefix)


def derive_album_shared_path(title: str | None, prefix: str, cache_root: Path | None = None) -> Path:
    """Path of the artist-less entry that per-artist entries link to."""
    return derive_cache_path(None, title, prefix, cache_root)


def derive_local_mirror_path(
    media_file: str | os.PathLike,
    cache_path: Path,
    dir_name: str = LOCAL_DIR_NAME,
) -> Path:
    """Mirror location next to the media: <media dir>/.mediaartlocal/<cache file name>."""
    return to_path(media_file).parent / dir_name / Path(cache_path).name


def derive_paths(
    artist: str | None,
    title: str | None,
    prefix: str,
    media_file: str | os.PathLike | None = None,
    cache_root: Path | None = None,
    dir_name: str = LOCAL_DIR_NAME,
) -> ArtPaths:
    """Cache path plus, when a media file is given, its local mirror path."""
    cache = derive_cache_path(artist, title, prefix, cache_root)
    local = None
    if media_file is not None:
        local = derive_local_mirror_path(media_file, cache, dir_name)
    return ArtPaths(cache=cache, local=local)
