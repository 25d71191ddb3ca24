"""Image codec capability: turn arbitrary image data into canonical JPEG files."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ImageCodec(Protocol):
    """Produces JPEG files for the cache.

    Implementations raise :class:`mediaart.core.errors.ConversionError` on
    failure. When the buffer already is JPEG (by MIME and magic bytes) and no
    resize is requested, they may write the bytes verbatim.
    """

    def file_to_jpeg(self, source: Path, target: Path) -> None: ...

    def buffer_to_jpeg(
        self,
        data: bytes,
        mime: str | None,
        target: Path,
        max_width: int = 0,
    ) -> None: ...
