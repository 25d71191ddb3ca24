"""Removable volume roots, used to decide whether art is mirrored next to media."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Mount points under these directories are treated as removable on Linux,
# where psutil does not report a "removable" option.
_REMOVABLE_MOUNT_PARENTS = (Path("/media"), Path("/run/media"), Path("/mnt"))


@runtime_checkable
class VolumeIndex(Protocol):
    def removable_roots(self) -> list[Path]: ...


class StaticVolumeIndex:
    """Fixed list of roots, for tests and callers that track mounts themselves."""

    def __init__(self, roots: Iterable[str | Path]) -> None:
        self._roots = [Path(r) for r in roots]

    def removable_roots(self) -> list[Path]:
        return list(self._roots)


class PsutilVolumeIndex:
    """Removable roots from the mounted partitions reported by psutil."""

    def removable_roots(self) -> list[Path]:
        import psutil

        roots = []
        for part in psutil.disk_partitions(all=False):
            mountpoint = Path(part.mountpoint)
            options = part.opts.split(",") if part.opts else []
            if "removable" in options or any(p in mountpoint.parents for p in _REMOVABLE_MOUNT_PARENTS):
                roots.append(mountpoint)
        logger.debug("Removable roots: %s", roots)
        return roots
