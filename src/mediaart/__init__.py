"""mediaart — content-addressed cover-art cache for media files."""

__version__ = "0.3.0"

from mediaart.cache.keys import derive_cache_path, derive_paths, normalize  # noqa: E402
from mediaart.cache.removal import prune, remove  # noqa: E402
from mediaart.core.config import MediaArtConfig, load_config  # noqa: E402
from mediaart.core.errors import MediaArtError  # noqa: E402
from mediaart.core.models import MediaArtType, ProcessFlags  # noqa: E402
from mediaart.core.process import MediaArtProcess  # noqa: E402

__all__ = [
    "MediaArtConfig",
    "MediaArtError",
    "MediaArtProcess",
    "MediaArtType",
    "ProcessFlags",
    "__version__",
    "derive_cache_path",
    "derive_paths",
    "load_config",
    "normalize",
    "prune",
    "remove",
]
