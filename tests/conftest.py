"""Shared test fixtures."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from mediaart.cache.checksum import JPEG_MAGIC
from mediaart.core.config import CacheConfig, MediaArtConfig


class RecordingCodec:
    """Deterministic stand-in for an image codec.

    JPEG input is written verbatim; anything else is "converted" by prefixing
    the JPEG magic, so equal inputs always give equal outputs.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Path]] = []

    @staticmethod
    def convert(data: bytes) -> bytes:
        return data if data[:3] == JPEG_MAGIC else JPEG_MAGIC + data

    def file_to_jpeg(self, source: Path, target: Path) -> None:
        self.calls.append(("file", Path(target)))
        Path(target).write_bytes(self.convert(Path(source).read_bytes()))

    def buffer_to_jpeg(self, data: bytes, mime: str | None, target: Path, max_width: int = 0) -> None:
        self.calls.append(("buffer", Path(target)))
        Path(target).write_bytes(self.convert(data))


class RecordingFetcher:
    def __init__(self, error: Exception | None = None) -> None:
        self.requests: list[tuple[str | None, str | None]] = []
        self.error = error

    def request_download(self, artist: str | None, album: str | None) -> None:
        self.requests.append((artist, album))
        if self.error is not None:
            raise self.error


def _encode(fmt: str, color: tuple[int, int, int], size: tuple[int, int] = (8, 8)) -> bytes:
    out = io.BytesIO()
    Image.new("RGB", size, color).save(out, format=fmt)
    return out.getvalue()


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    root = tmp_path / "cache" / "media-art"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def config(cache_root: Path) -> MediaArtConfig:
    return MediaArtConfig(cache=CacheConfig(root=cache_root))


@pytest.fixture
def codec() -> RecordingCodec:
    return RecordingCodec()


@pytest.fixture
def fetcher() -> RecordingFetcher:
    return RecordingFetcher()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _encode("JPEG", (200, 30, 30))


@pytest.fixture
def other_jpeg_bytes() -> bytes:
    return _encode("JPEG", (30, 30, 200))


@pytest.fixture
def png_bytes() -> bytes:
    return _encode("PNG", (30, 200, 30))


@pytest.fixture
def album_dir(tmp_path: Path) -> Path:
    """Directory holding one track, without any images."""
    directory = tmp_path / "music" / "Beatles" / "Sgt. Pepper"
    directory.mkdir(parents=True)
    (directory / "01 - Sgt. Pepper.mp3").write_bytes(b"ID3 fake audio")
    return directory


@pytest.fixture
def track(album_dir: Path) -> Path:
    return album_dir / "01 - Sgt. Pepper.mp3"
