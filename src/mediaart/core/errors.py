"""Exception hierarchy for mediaart."""

from __future__ import annotations

from pathlib import Path


class MediaArtError(Exception):
    """Base class for all mediaart errors."""


class InvalidArgumentError(MediaArtError, ValueError):
    """Required artist/title missing, or an unusable resource locator."""


class NotFoundError(MediaArtError, FileNotFoundError):
    """The media resource does not exist or cannot be read."""


class NoCacheDirectoryError(MediaArtError):
    """The cache root could not be created."""


class ConversionError(MediaArtError):
    """The image codec could not produce a JPEG."""


class CancelledError(MediaArtError):
    """The operation was cancelled before it finished."""


class _FileOperationError(MediaArtError):
    """OS-level failure on a cache file. The OSError is chained as __cause__."""

    def __init__(self, message: str, path: Path, errno: int | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.errno = errno


class LinkError(_FileOperationError):
    """Creating the per-artist link to the shared album file failed."""


class RenameError(_FileOperationError):
    """Moving a converted temp file into place failed."""
