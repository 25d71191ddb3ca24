"""Shared CLI utilities."""

from __future__ import annotations

from pathlib import Path

MEDIA_EXTENSIONS = frozenset(
    {".mp3", ".flac", ".ogg", ".oga", ".opus", ".m4a", ".aac", ".wav", ".wma",
     ".mp4", ".mkv", ".webm", ".avi", ".mov", ".m4v", ".wmv"}
)


def _media_in(directory: Path) -> list[str]:
    return [str(p) for p in sorted(directory.rglob("*")) if p.is_file() and p.suffix.lower() in MEDIA_EXTENSIONS]


def expand_inputs(inputs: list[str]) -> list[str]:
    """Expand directories, glob patterns and list files into media paths/URIs.

    Directories contribute every media file below them, .txt files are read
    as one path per line (# starts a comment), anything else is kept as is.
    """
    expanded = []
    for inp in inputs:
        if inp.startswith("file://"):
            expanded.append(inp)
            continue

        path = Path(inp)
        if path.is_dir():
            expanded.extend(_media_in(path))
        elif path.suffix == ".txt" and path.is_file():
            for line in path.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    expanded.append(line)
        elif any(c in inp for c in "*?["):
            expanded.extend(str(m) for m in sorted(Path(".").glob(inp)))
        else:
            expanded.append(inp)

    return expanded
