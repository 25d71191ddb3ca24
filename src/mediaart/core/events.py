"""Completion events for asynchronous processing.

The async wrapper on MediaArtProcess reports each finished resource through an
optional callback, in addition to the returned Future. Consumers (CLI progress,
GUI thumbnails) register a callback to refresh once art is on disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable


@dataclass
class ProcessEvent:
    """Outcome of processing one media resource.

    Attributes:
        media: Media file that was processed.
        cache_path: Cache entry for the media, or None if it could not be derived.
        success: True when no definitive failure happened.
        error: The exception raised by the workflow, if any.
    """

    media: Path
    cache_path: Path | None
    success: bool
    error: BaseException | None = field(default=None)


ProcessCallback = Callable[[ProcessEvent], None]
