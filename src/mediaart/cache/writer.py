"""Materialize art in the cache with as little duplication as possible.

For albums with a known artist, the art normally lives once in the shared,
artist-less file (``album-<md5 title>-<md5 " ">.jpeg``) and the per-artist
entry is a symlink to it. A per-artist entry only gets its own file when its
art differs from what the shared file already holds.

Decision table for :meth:`CacheEntryWriter.write_buffer`:

1. Not an album, or no usable artist: convert straight into the entry.
2. Shared file missing: convert into the shared file, link the entry to it.
3. Buffer is JPEG: same MD5 as the shared file links, otherwise the buffer
   is converted into the entry.
4. Buffer is not JPEG: convert to a temp file and compare that instead;
   same content links, different content is renamed into the entry.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mediaart.cache.checksum import checksum_of, checksum_of_file, is_jpeg_buffer
from mediaart.cache.keys import derive_album_shared_path, derive_cache_path, normalize
from mediaart.codec.base import ImageCodec
from mediaart.core.errors import NotFoundError
from mediaart.core.models import MediaArtType
from mediaart.utils.files import copy_file, replace_file, symlink, temp_path_for

logger = logging.getLogger(__name__)

_JPEG_SUFFIXES = (".jpeg", ".jpg")


def shares_album_file(media_type: MediaArtType, artist: str | None) -> bool:
    """Whether the entry for this artist should link to the shared album file.

    Artists that normalize to nothing, like " " or "(Live)", count as unknown.
    """
    return media_type is MediaArtType.ALBUM and artist is not None and normalize(artist) != ""


class CacheEntryWriter:
    """Writes cache entries under one cache root through an ImageCodec."""

    def __init__(self, codec: ImageCodec, cache_root: Path, max_width: int = 0) -> None:
        self.codec = codec
        self.cache_root = Path(cache_root)
        self.max_width = max_width

    def entry_paths(self, media_type: MediaArtType, artist: str | None, title: str | None) -> tuple[Path, Path]:
        """(per-artist entry, shared album file) for a request."""
        prefix = media_type.value
        target = derive_cache_path(artist, title, prefix, self.cache_root)
        album_path = derive_album_shared_path(title, prefix, self.cache_root) if title is not None else target
        return target, album_path

    def write_buffer(
        self,
        data: bytes,
        mime: str | None,
        media_type: MediaArtType,
        artist: str | None,
        title: str | None,
    ) -> Path:
        """Store an embedded image buffer and return the per-artist entry path.

        Raises:
            ConversionError: The codec could not produce a JPEG.
            LinkError: The per-artist symlink could not be created.
            RenameError: A converted temp file could not be moved into place.
        """
        target, album_path = self.entry_paths(media_type, artist, title)

        if not shares_album_file(media_type, artist) or title is None:
            logger.debug("Saving buffer to jpeg (%d bytes) --> '%s'", len(data), target)
            self._convert_buffer(data, mime, target)
            return target

        album_checksum = checksum_of_file(album_path).checksum
        if album_checksum is None:
            # No shared file yet (or unreadable): seed it and link to it
            logger.debug("Saving buffer to jpeg (%d bytes) --> '%s'", len(data), album_path)
            self._convert_buffer(data, mime, album_path)
            self._link(album_path, target)
            return target

        if is_jpeg_buffer(data, mime):
            if checksum_of(data) == album_checksum:
                self._link(album_path, target)
            else:
                logger.debug("Art differs from '%s', saving buffer to '%s'", album_path, target)
                self._convert_buffer(data, mime, target)
            return target

        temp = temp_path_for(album_path)
        try:
            self.codec.buffer_to_jpeg(data, mime, temp, self.max_width)
            self._settle(temp, target, album_path, album_checksum)
        finally:
            temp.unlink(missing_ok=True)
        return target

    def write_file(
        self,
        source: Path,
        media_type: MediaArtType,
        artist: str | None,
        title: str | None,
    ) -> Path:
        """Store an image found on disk and return the per-artist entry path.

        JPEG files are copied byte for byte; anything else (PNG, or a .jpg
        without JPEG magic) goes through the codec first. The same link/copy
        decisions as :meth:`write_buffer` apply.

        Raises:
            NotFoundError: The source image cannot be read.
            ConversionError, LinkError, RenameError: As for write_buffer.
        """
        source = Path(source)
        target, album_path = self.entry_paths(media_type, artist, title)
        shared = shares_album_file(media_type, artist) and title is not None

        if source.name.lower().endswith(_JPEG_SUFFIXES):
            if not shared:
                logger.debug("Art (JPEG) found in same directory being used: '%s'", source)
                self._copy(source, target)
                return target

            found = checksum_of_file(source, verify_jpeg=True)
            if found.checksum is None and found.is_jpeg is None:
                raise NotFoundError(f"Cannot read art file {source}")

            if found.is_jpeg:
                logger.debug("Art (JPEG) found in same directory being used: '%s'", source)
                album_checksum = checksum_of_file(album_path).checksum
                if album_checksum is None:
                    self._copy(source, album_path)
                    self._link(album_path, target)
                elif album_checksum == found.checksum:
                    self._link(album_path, target)
                else:
                    self._copy(source, target)
                return target

            logger.debug("Art found in same directory but not a real JPEG file, converting: '%s'", source)

        temp = temp_path_for(target)
        try:
            self.codec.file_to_jpeg(source, temp)
            if not shared:
                replace_file(temp, target)
            else:
                self._settle(temp, target, album_path, checksum_of_file(album_path).checksum)
        finally:
            temp.unlink(missing_ok=True)
        return target

    def _settle(self, temp: Path, target: Path, album_path: Path, album_checksum: str | None) -> None:
        """Place a converted temp file: seed, link to, or diverge from the shared file."""
        if album_checksum is None:
            replace_file(temp, album_path)
            self._link(album_path, target)
        elif checksum_of_file(temp).checksum == album_checksum:
            temp.unlink()
            self._link(album_path, target)
        else:
            logger.debug("Renaming temp file '%s' --> '%s'", temp, target)
            replace_file(temp, target)

    def _convert_buffer(self, data: bytes, mime: str | None, dest: Path) -> None:
        # Convert beside dest and rename, so a symlinked entry is replaced
        # rather than written through into the shared file
        temp = temp_path_for(dest)
        try:
            self.codec.buffer_to_jpeg(data, mime, temp, self.max_width)
            replace_file(temp, dest)
        finally:
            temp.unlink(missing_ok=True)

    def _copy(self, source: Path, dest: Path) -> None:
        try:
            copy_file(source, dest)
        except OSError as e:
            raise NotFoundError(f"Cannot read art file {source}") from e

    def _link(self, album_path: Path, target: Path) -> None:
        if album_path == target:
            return
        logger.debug("Creating symlink '%s' --> '%s'", album_path, target)
        symlink(album_path, target)
