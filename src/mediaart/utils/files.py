"""Filesystem helpers for the art cache.

New content is written to a ``-tmp`` sibling and renamed into place, so a
reader never sees a half-written entry and concurrent writers of the same key
end with one complete file (last writer wins).
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from mediaart.core.errors import LinkError, RenameError

TEMP_SUFFIX = "-tmp"
LINK_SUFFIX = "-lnk"


def temp_path_for(target: Path) -> Path:
    """Sibling temp path used while converting into target."""
    return target.with_name(target.name + TEMP_SUFFIX)


def replace_file(source: Path, dest: Path) -> None:
    """Atomically move source onto dest, replacing a file or symlink at dest."""
    try:
        os.replace(source, dest)
    except OSError as e:
        raise RenameError(f"rename({source}, {dest}) failed: {e.strerror}", dest, e.errno) from e


def copy_file(source: Path, dest: Path) -> None:
    """Copy source to dest through a temp file, preserving timestamps."""
    temp = temp_path_for(dest)
    try:
        shutil.copy2(source, temp)
        replace_file(temp, dest)
    finally:
        temp.unlink(missing_ok=True)


def symlink(source: Path, dest: Path) -> None:
    """Point dest at source, replacing whatever dest was.

    The link is built under a temp name and renamed over dest, so an existing
    entry is swapped in one step.
    """
    temp = dest.with_name(dest.name + LINK_SUFFIX)
    try:
        temp.unlink(missing_ok=True)
        os.symlink(source, temp)
        os.replace(temp, dest)
    except OSError as e:
        temp.unlink(missing_ok=True)
        raise LinkError(f"symlink({source}, {dest}) failed: {e.strerror}", dest, e.errno) from e
