"""Codec that converts nothing, for builds without an imaging library."""

from __future__ import annotations

from pathlib import Path

from mediaart.core.errors import ConversionError


class NullCodec:
    def file_to_jpeg(self, source: Path, target: Path) -> None:
        raise ConversionError(f"No image codec configured, cannot convert {source}")

    def buffer_to_jpeg(
        self,
        data: bytes,
        mime: str | None,
        target: Path,
        max_width: int = 0,
    ) -> None:
        raise ConversionError("No image codec configured, cannot convert buffer")
