"""Content checksums for cache naming and content-equality checks.

Digests are MD5: existing cache file names depend on it. Not used for security.
"""

from __future__ import annotations

import hashlib
import logging
import os
from typing import NamedTuple

logger = logging.getLogger(__name__)

JPEG_MAGIC = b"\xff\xd8\xff"
JPEG_MIME_TYPES = ("image/jpeg", "JPG")

_CHUNK_SIZE = 1024


class FileChecksum(NamedTuple):
    checksum: str | None  # None when the file is unreadable or failed the JPEG check
    is_jpeg: bool | None  # None when the JPEG check was not run or the file is unreadable


def _md5():
    return hashlib.md5(usedforsecurity=False)


def checksum_of(data: bytes) -> str:
    """Hex MD5 of an in-memory buffer."""
    digest = _md5()
    digest.update(data)
    return digest.hexdigest()


def checksum_of_file(path: str | os.PathLike, verify_jpeg: bool = False) -> FileChecksum:
    """Stream a file through MD5.

    With verify_jpeg, the first three bytes are checked for the JPEG magic
    before being folded into the digest; a file that fails the check yields
    no checksum and is_jpeg=False.

    A missing or unreadable file is not an error: it returns (None, None) so
    callers can treat it as "no prior content".
    """
    digest = _md5()
    is_jpeg = None
    try:
        with open(path, "rb") as f:
            if verify_jpeg:
                head = f.read(3)
                if head != JPEG_MAGIC:
                    return FileChecksum(None, False)
                is_jpeg = True
                digest.update(head)
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as e:
        logger.debug("%s isn't readable while calculating checksum: %s", path, e)
        return FileChecksum(None, None)
    return FileChecksum(digest.hexdigest(), is_jpeg)


def is_jpeg_buffer(data: bytes | None, mime: str | None) -> bool:
    """Whether a buffer should be treated as JPEG, by declared MIME or magic bytes."""
    if not data or len(data) < 3:
        return False
    if mime in JPEG_MIME_TYPES:
        return True
    return data[:3] == JPEG_MAGIC
