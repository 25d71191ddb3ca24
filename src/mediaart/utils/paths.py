"""Resolve media locators (file:// URIs or plain paths) to local paths."""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from mediaart.core.errors import InvalidArgumentError


def is_uri(location: str) -> bool:
    """Check if the input looks like a URI rather than a filesystem path."""
    return "://" in location and len(urlparse(location).scheme) > 1


def to_path(location: str | os.PathLike) -> Path:
    """Convert a file:// URI or path to a Path.

    Raises:
        InvalidArgumentError: For URIs with a non-file scheme, which have no
            local parent directory to scan or mirror into.
    """
    if not isinstance(location, str):
        return Path(location)
    if not is_uri(location):
        return Path(location)

    parsed = urlparse(location)
    if parsed.scheme != "file":
        raise InvalidArgumentError(f"Not a local file URI: {location}")
    if parsed.netloc and parsed.netloc != "localhost":
        raise InvalidArgumentError(f"Remote file URIs are not supported: {location}")
    return Path(url2pathname(parsed.path))
