"""Shared data models for mediaart."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path


class MediaArtType(str, enum.Enum):
    """Kind of media the art belongs to. The value doubles as the file prefix."""

    ALBUM = "album"
    VIDEO = "video"


class ProcessFlags(enum.Flag):
    NONE = 0
    FORCE = enum.auto()  # Refresh even when the cache entry is newer than the media


@dataclass(frozen=True)
class ArtKey:
    """Normalized lookup key for one cache entry.

    At least one of artist/title is set. Absent fields stay None here and are
    replaced by a fixed checksum when the file name is built.
    """

    artist: str | None
    title: str | None
    prefix: str


@dataclass(frozen=True)
class ArtPaths:
    """Resolved locations for one media resource."""

    cache: Path
    local: Path | None = None  # <media dir>/.mediaartlocal/<name>, when a media file is known
