"""Find cover art next to a media file when nothing is embedded.

Image files in the media file's directory are ranked by name:

- EXACT: the name contains the normalized artist or title; for albums also
  "cover", "front", "folder" or "albumart" + "large"; for videos "folder"
  or "poster".
- EXACT_SMALL: album names with "albumart" + "small".
- SAME_DIRECTORY: any other image. Used only for videos, and only when it is
  the single image in the directory.

Names are visited in sorted order, so ties between several EXACT matches
resolve the same way on every filesystem.
"""

from __future__ import annotations

import enum
import logging
import os
from pathlib import Path

from mediaart.cache.keys import LOCAL_DIR_NAME, derive_cache_path, derive_local_mirror_path, normalize
from mediaart.cache.writer import CacheEntryWriter
from mediaart.core.errors import MediaArtError
from mediaart.core.models import MediaArtType
from mediaart.utils.files import copy_file
from mediaart.utils.paths import to_path

logger = logging.getLogger(__name__)

_IMAGE_SUFFIXES = (".jpeg", ".jpg", ".png")


class ImageMatch(enum.IntEnum):
    EXACT = 0
    EXACT_SMALL = 1
    SAME_DIRECTORY = 2


def classify_image(
    file_name: str,
    media_type: MediaArtType,
    artist: str | None,
    title: str | None,
) -> ImageMatch:
    """Rank one lowercased image file name against normalized artist/title."""
    if (artist and artist in file_name) or (title and title in file_name):
        return ImageMatch.EXACT

    if media_type is MediaArtType.ALBUM:
        # AlbumArt alone is not accepted, it needs a Large or Small marker
        if "cover" in file_name or "front" in file_name or "folder" in file_name:
            return ImageMatch.EXACT
        if "albumart" in file_name:
            if "large" in file_name:
                return ImageMatch.EXACT
            if "small" in file_name:
                return ImageMatch.EXACT_SMALL

    if media_type is MediaArtType.VIDEO:
        if "folder" in file_name or "poster" in file_name:
            return ImageMatch.EXACT

    return ImageMatch.SAME_DIRECTORY


def _list_images(directory: Path) -> list[str]:
    names = []
    for name in sorted(os.listdir(directory)):
        try:
            name.encode("utf-8")
        except UnicodeEncodeError:
            logger.debug("Could not convert filename '%r' to UTF-8", name)
            continue
        if name.lower().endswith(_IMAGE_SUFFIXES):
            names.append(name)
    return names


def find_candidate(
    media_file: str | os.PathLike,
    media_type: MediaArtType,
    artist: str | None,
    title: str | None,
) -> Path | None:
    """Pick the most plausible cover image in the media file's directory.

    Args:
        media_file: Media file path or file:// URI.
        media_type: Album or video; decides which name patterns count.
        artist: Normalized artist, or None.
        title: Normalized title, or None.

    Returns:
        Path of the chosen image, or None if nothing qualifies or the
        directory cannot be read.
    """
    directory = to_path(media_file).parent
    try:
        names = _list_images(directory)
    except OSError as e:
        logger.debug("Media art directory could not be opened: %s", e)
        return None

    ranked: dict[ImageMatch, list[str]] = {match: [] for match in ImageMatch}
    for name in names:
        ranked[classify_image(name.lower(), media_type, artist, title)].append(name)

    if ranked[ImageMatch.EXACT]:
        chosen = ranked[ImageMatch.EXACT][0]
    elif ranked[ImageMatch.EXACT_SMALL]:
        chosen = ranked[ImageMatch.EXACT_SMALL][0]
    elif media_type is MediaArtType.VIDEO and len(ranked[ImageMatch.SAME_DIRECTORY]) == 1:
        chosen = ranked[ImageMatch.SAME_DIRECTORY][0]
    else:
        logger.debug("Art NOT found in same directory as '%s'", media_file)
        return None

    return directory / chosen


class DirectoryHeuristic:
    """Fill a cache entry from images stored beside the media file."""

    def __init__(self, writer: CacheEntryWriter, local_dir_name: str = LOCAL_DIR_NAME) -> None:
        self.writer = writer
        self.local_dir_name = local_dir_name

    def run(
        self,
        media_file: str | os.PathLike,
        media_type: MediaArtType,
        artist: str | None,
        title: str | None,
    ) -> bool:
        """Populate the cache for media_file from its directory.

        A copy already mirrored in ``.mediaartlocal`` wins over scanning.
        Failures while storing a candidate are logged and reported as False,
        so the caller can fall back to a download request.

        Returns:
            True if the cache entry was written.
        """
        if not title:
            logger.debug("Unable to fetch media art, no title specified")
            return False

        target = derive_cache_path(artist, title, media_type.value, self.writer.cache_root)

        local = derive_local_mirror_path(media_file, target, self.local_dir_name)
        if local.is_file():
            logger.debug("Art being copied from local (%s) file: '%s'", self.local_dir_name, local)
            try:
                copy_file(local, target)
            except (OSError, MediaArtError) as e:
                logger.warning("Could not copy local art '%s': %s", local, e)
                return False
            return True

        candidate = find_candidate(
            media_file,
            media_type,
            normalize(artist) if artist is not None else None,
            normalize(title),
        )
        if candidate is None:
            return False

        try:
            self.writer.write_file(candidate, media_type, artist, title)
        except MediaArtError as e:
            logger.warning("Could not use art '%s' for '%s': %s", candidate, media_file, e)
            return False
        return True
