"""Image codec backends, selected by configuration."""

from __future__ import annotations

from mediaart.codec.base import ImageCodec
from mediaart.core.config import CodecConfig


def create_codec(config: CodecConfig) -> ImageCodec:
    """Instantiate the backend named in config.backend."""
    if config.backend == "pillow":
        from mediaart.codec.pillow import PillowCodec

        return PillowCodec(quality=config.quality)
    if config.backend == "null":
        from mediaart.codec.null import NullCodec

        return NullCodec()
    raise ValueError(f"Unknown codec backend: {config.backend!r} (expected 'pillow' or 'null')")


__all__ = ["ImageCodec", "create_codec"]
