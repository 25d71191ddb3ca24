"""Pillow-backed image codec."""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

from PIL import Image

from mediaart.cache.checksum import JPEG_MAGIC
from mediaart.core.errors import ConversionError

logger = logging.getLogger(__name__)


class PillowCodec:
    """Decode with Pillow, optionally downscale, save as RGB JPEG."""

    def __init__(self, quality: int = 90) -> None:
        self.quality = quality

    def file_to_jpeg(self, source: Path, target: Path) -> None:
        try:
            with Image.open(source) as img:
                self._save(img, target, max_width=0)
        except (OSError, ValueError) as e:
            raise ConversionError(f"Could not convert {source} to JPEG: {e}") from e

    def buffer_to_jpeg(
        self,
        data: bytes,
        mime: str | None,
        target: Path,
        max_width: int = 0,
    ) -> None:
        # JPEG magic and no resize wanted: keep the exact bytes, whatever the mime says
        if max_width <= 0 and data[:3] == JPEG_MAGIC:
            logger.debug("Saving art using raw data as '%s'", target)
            try:
                Path(target).write_bytes(data)
            except OSError as e:
                raise ConversionError(f"Could not write {target}: {e}") from e
            return

        logger.debug("Saving art through Pillow as '%s' (max width: %d)", target, max_width)
        try:
            with Image.open(BytesIO(data)) as img:
                self._save(img, target, max_width)
        except (OSError, ValueError) as e:
            raise ConversionError(f"Could not convert {len(data)} byte buffer ({mime}) to JPEG: {e}") from e

    def _save(self, img: Image.Image, target: Path, max_width: int) -> None:
        if max_width > 0 and img.width > max_width:
            height = max(1, round(img.height * max_width / img.width))
            logger.debug("Resizing art from %dx%d to %dx%d", img.width, img.height, max_width, height)
            img = img.resize((max_width, height), Image.Resampling.LANCZOS)
        if img.mode != "RGB":
            img = img.convert("RGB")
        img.save(target, format="JPEG", quality=self.quality)
