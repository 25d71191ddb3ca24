"""Mirror cache entries onto removable media.

Media on a removable volume gets its own copy of the art in a hidden
``.mediaartlocal`` directory beside it, so the art travels with the volume.
Links are not an option there: the cache root lives on another device.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from mediaart.storage.volumes import VolumeIndex
from mediaart.utils.paths import to_path

logger = logging.getLogger(__name__)


def is_on_removable(path: str | os.PathLike, volumes: VolumeIndex) -> bool:
    """Whether path sits on (or is) one of the removable roots."""
    candidate = Path(os.path.abspath(to_path(path)))
    for root in volumes.removable_roots():
        root = Path(os.path.abspath(root))
        if candidate == root or root in candidate.parents:
            return True
    return False


def copy_to_local(cache_path: Path, local_path: Path) -> bool:
    """Copy a cache entry to its mirror location without overwriting.

    Errors (read-only volume, vanished mount) are logged and reported as
    False; a missing mirror only costs a re-extraction later.
    """
    if local_path.exists():
        return False
    try:
        # The parent may be missing when the media sits at the root of a mount
        local_path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Copying media art from: '%s' to: '%s'", cache_path, local_path)
        shutil.copy2(cache_path, local_path)
    except OSError as e:
        logger.debug("Could not mirror '%s' to '%s': %s", cache_path, local_path, e)
        return False
    return True


def mirror_entry(
    media_file: str | os.PathLike,
    cache_path: Path,
    local_path: Path,
    volumes: VolumeIndex,
) -> bool:
    """Copy cache_path to local_path if media_file lives on removable storage."""
    if not cache_path.exists():
        return False
    try:
        removable = is_on_removable(media_file, volumes)
    except OSError as e:
        logger.debug("Could not enumerate removable volumes: %s", e)
        return False
    if not removable:
        return False
    return copy_to_local(cache_path, local_path)
