"""Removable volume enumeration."""

from mediaart.storage.volumes import PsutilVolumeIndex, StaticVolumeIndex, VolumeIndex

__all__ = ["PsutilVolumeIndex", "StaticVolumeIndex", "VolumeIndex"]
