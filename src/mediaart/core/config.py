"""Configuration system for mediaart.

Layered config loading (lowest to highest priority):
1. config/default.toml (shipped with package)
2. ~/.config/mediaart/config.toml (user-level)
3. ./mediaart.toml (project-level)
4. Environment variables (MEDIAART_CODEC__MAX_WIDTH, etc.)
5. Explicit overrides (CLI flags, library callers)
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_DEFAULT_CONFIG = _PACKAGE_ROOT / "config" / "default.toml"
_USER_CONFIG = Path.home() / ".config" / "mediaart" / "config.toml"
_PROJECT_CONFIG = Path("mediaart.toml")

CACHE_DIR_NAME = "media-art"


def default_cache_root() -> Path:
    """Per-user cache root: $XDG_CACHE_HOME/media-art, else ~/.cache/media-art."""
    base = os.environ.get("XDG_CACHE_HOME")
    cache_home = Path(base) if base else Path.home() / ".cache"
    return cache_home / CACHE_DIR_NAME


class CacheConfig(BaseModel):
    root: Path | None = None  # None means default_cache_root()
    local_dir_name: str = ".mediaartlocal"


class CodecConfig(BaseModel):
    backend: str = "pillow"  # "pillow" or "null"
    max_width: int = 0  # 0 keeps the source width
    quality: int = 90


class FetchConfig(BaseModel):
    enabled: bool = True


class WorkerConfig(BaseModel):
    max_workers: int = 4


class MediaArtConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MEDIAART_",
        env_nested_delimiter="__",
    )

    cache: CacheConfig = CacheConfig()
    codec: CodecConfig = CodecConfig()
    fetch: FetchConfig = FetchConfig()
    workers: WorkerConfig = WorkerConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # TOML files rank below env vars; explicit kwargs stay on top
        return init_settings, env_settings, dotenv_settings, TomlLayersSource(settings_cls), file_secret_settings

    @property
    def cache_root(self) -> Path:
        """Cache directory holding every generated art file."""
        return self.cache.root if self.cache.root is not None else default_cache_root()


def _load_toml(path: Path) -> dict:
    """Load a TOML file if it exists, return empty dict otherwise."""
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class TomlLayersSource(PydanticBaseSettingsSource):
    """Settings source merging the default, user and project TOML files."""

    def __call__(self) -> dict[str, Any]:
        data: dict = {}
        for path in (_DEFAULT_CONFIG, _USER_CONFIG, _PROJECT_CONFIG):
            data = _deep_merge(data, _load_toml(path))
        return data

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self().get(field_name), field_name, False


def load_config(**overrides: object) -> MediaArtConfig:
    """Load configuration from all layers and merge.

    Args:
        **overrides: Direct overrides. Keys can be dot-separated
            (e.g. codec.max_width=300). None values are ignored.
    """
    # Layers 1-4 (TOML files, env vars) come from the settings sources
    config_data: dict = {}
    for key, value in overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = config_data
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value

    return MediaArtConfig(**config_data)
