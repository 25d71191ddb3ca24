"""Per-resource workflow: freshness check, store or search, fetch, mirror.

:class:`MediaArtProcess` is the explicit context a caller constructs once and
reuses. It owns the collaborators (codec, optional fetcher and volume index),
the per-process memo of directories already scanned, and the flag that stops
download requests once the download service turned out to be missing.

Cache writes are not locked. Two processes filling the same key race, and the
last rename wins; callers needing at-most-once semantics must lock externally.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import IO, Iterable, Protocol, Union

from mediaart.cache.heuristic import DirectoryHeuristic
from mediaart.cache.keys import derive_paths
from mediaart.cache.mirror import mirror_entry
from mediaart.cache.removal import prune, remove
from mediaart.cache.writer import CacheEntryWriter
from mediaart.codec import ImageCodec, create_codec
from mediaart.core.config import MediaArtConfig, load_config
from mediaart.core.errors import CancelledError, InvalidArgumentError, NoCacheDirectoryError, NotFoundError
from mediaart.core.events import ProcessCallback, ProcessEvent
from mediaart.core.models import ArtPaths, MediaArtType, ProcessFlags
from mediaart.fetcher import ArtFetcher, FetchUnavailable
from mediaart.storage.volumes import VolumeIndex
from mediaart.utils.paths import to_path

logger = logging.getLogger(__name__)

MediaLocator = Union[str, os.PathLike, IO[bytes]]


class Cancellable(Protocol):
    """Anything with ``is_set()``, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool: ...


def _check_cancelled(cancellable: Cancellable | None) -> None:
    if cancellable is not None and cancellable.is_set():
        raise CancelledError("Media art processing was cancelled")


def _media_path(media: MediaLocator) -> Path:
    """Local path of a path, file:// URI or opened file object."""
    if hasattr(media, "fileno") and hasattr(media, "name"):
        return Path(media.name)
    return to_path(media)


def _media_mtime_ns(media: MediaLocator, path: Path) -> int:
    try:
        if hasattr(media, "fileno"):
            return os.fstat(media.fileno()).st_mtime_ns
        return os.stat(path).st_mtime_ns
    except OSError as e:
        raise NotFoundError(f"Could not get mtime for '{path}': {e.strerror}") from e


def _cache_mtime_ns(path: Path) -> int | None:
    try:
        return os.stat(path).st_mtime_ns
    except OSError:
        return None


def _set_mtime_ns(path: Path, mtime_ns: int) -> None:
    try:
        os.utime(path, ns=(mtime_ns, mtime_ns))
    except OSError as e:
        logger.debug("Could not set mtime on '%s': %s", path, e)


class MediaArtProcess:
    """Context for storing and looking up media art.

    Args:
        config: Loaded configuration. Defaults to :func:`load_config`.
        codec: Image codec. Defaults to the backend named in the config.
        fetcher: Optional download service used when no art is found locally.
        volumes: Optional removable-volume index enabling local mirrors.

    Raises:
        NoCacheDirectoryError: The cache root cannot be created.
    """

    def __init__(
        self,
        config: MediaArtConfig | None = None,
        codec: ImageCodec | None = None,
        fetcher: ArtFetcher | None = None,
        volumes: VolumeIndex | None = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        self.cache_root = self.config.cache_root
        try:
            self.cache_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise NoCacheDirectoryError(f"Could not create cache directory '{self.cache_root}': {e}") from e

        self.codec = codec if codec is not None else create_codec(self.config.codec)
        self.fetcher = fetcher
        self.volumes = volumes
        self.writer = CacheEntryWriter(self.codec, self.cache_root, self.config.codec.max_width)
        self.heuristic = DirectoryHeuristic(self.writer, self.config.cache.local_dir_name)

        self._scanned: set[tuple[str, str, str, str]] = set()
        self._scanned_lock = threading.Lock()
        self.requests_disabled = not self.config.fetch.enabled
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()

    def __enter__(self) -> MediaArtProcess:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self, wait: bool = True) -> None:
        """Shut down the worker pool used for async calls and download requests."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def drain(self, timeout: float | None = None) -> None:
        """Block until queued download requests have been handed to the fetcher."""
        with self._pending_lock:
            pending = list(self._pending)
        for future in pending:
            future.exception(timeout=timeout)

    def _submit(self, fn, *args, **kwargs) -> Future:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.workers.max_workers,
                    thread_name_prefix="mediaart",
                )
            return self._executor.submit(fn, *args, **kwargs)

    def get_paths(
        self,
        artist: str | None,
        title: str | None,
        media_type: MediaArtType | str = MediaArtType.ALBUM,
        media: MediaLocator | None = None,
    ) -> ArtPaths:
        """Cache path (and mirror path, when media is given) for artist/title."""
        prefix = media_type.value if isinstance(media_type, MediaArtType) else media_type
        return derive_paths(
            artist,
            title,
            prefix,
            media_file=_media_path(media) if media is not None else None,
            cache_root=self.cache_root,
            dir_name=self.config.cache.local_dir_name,
        )

    def process_file(
        self,
        media: MediaLocator,
        media_type: MediaArtType,
        artist: str | None = None,
        title: str | None = None,
        buffer: bytes | None = None,
        mime: str | None = None,
        flags: ProcessFlags = ProcessFlags.NONE,
        cancellable: Cancellable | None = None,
    ) -> bool:
        """Make sure the cache holds art for a media file.

        If buffer holds embedded image data it is converted and stored.
        Otherwise the media file's directory is searched for a likely cover,
        and for albums a download is requested when nothing is found.
        Nothing happens while the cache entry is at least as new as the
        media file, unless ProcessFlags.FORCE is set.

        Args:
            media: Media file path, file:// URI, or an opened file object.
            media_type: Album or video.
            artist: Artist name, or None.
            title: Album or video title, or None.
            buffer: Embedded image data, or None.
            mime: MIME type of buffer, or None to sniff it.
            flags: ProcessFlags.FORCE refreshes regardless of mtimes.
            cancellable: Checked on entry and before searching/fetching.

        Returns:
            True unless the media could not be processed. A failed search that
            fell back to a download request counts as success, since the art
            may still arrive.

        Raises:
            InvalidArgumentError: Both artist and title are None.
            NotFoundError: The media file does not exist.
            CancelledError: cancellable was set.
            ConversionError, LinkError, RenameError: Storing buffer failed.
        """
        _check_cancelled(cancellable)
        if artist is None and title is None:
            raise InvalidArgumentError("artist or title required")

        path = _media_path(media)
        logger.debug(
            "Processing media art: artist:'%s', title:'%s', type:'%s', file:'%s'. Buffer is %d bytes, mime:'%s'",
            artist or "",
            title or "",
            media_type.value,
            path,
            len(buffer) if buffer else 0,
            mime,
        )

        mtime_ns = _media_mtime_ns(media, path)
        paths = self.get_paths(artist, title, media_type, path)
        cache_mtime_ns = _cache_mtime_ns(paths.cache)

        refresh = ProcessFlags.FORCE in flags or cache_mtime_ns is None or mtime_ns > cache_mtime_ns

        if not refresh:
            logger.debug("Art already exists for '%s' as '%s'", path, paths.cache)
        elif buffer:
            self.writer.write_buffer(buffer, mime, media_type, artist, title)
            _set_mtime_ns(paths.cache, mtime_ns)
        else:
            self._search(path, media_type, artist, title, paths, mtime_ns, cancellable)

        if self.volumes is not None and paths.local is not None and not paths.local.exists():
            # The refresh above may have just created the entry
            mirror_entry(path, paths.cache, paths.local, self.volumes)

        return True

    def process_uri(
        self,
        uri: str,
        media_type: MediaArtType,
        artist: str | None = None,
        title: str | None = None,
        buffer: bytes | None = None,
        mime: str | None = None,
        flags: ProcessFlags = ProcessFlags.NONE,
        cancellable: Cancellable | None = None,
    ) -> bool:
        """Same as :meth:`process_file` for a file:// URI or path string. Requires a title."""
        if title is None:
            raise InvalidArgumentError("title required")
        return self.process_file(uri, media_type, artist, title, buffer, mime, flags, cancellable)

    def process_file_async(
        self,
        media: MediaLocator,
        media_type: MediaArtType,
        artist: str | None = None,
        title: str | None = None,
        buffer: bytes | None = None,
        mime: str | None = None,
        flags: ProcessFlags = ProcessFlags.NONE,
        cancellable: Cancellable | None = None,
        callback: ProcessCallback | None = None,
    ) -> Future:
        """Run :meth:`process_file` on the worker pool.

        The returned Future resolves to the same bool, or raises the same
        errors. callback, if given, receives a ProcessEvent when done.
        """
        path = _media_path(media)

        def _report(success: bool, error: BaseException | None = None) -> None:
            if callback:
                cache_path = self._safe_cache_path(artist, title, media_type)
                callback(ProcessEvent(media=path, cache_path=cache_path, success=success, error=error))

        def _job() -> bool:
            try:
                result = self.process_file(media, media_type, artist, title, buffer, mime, flags, cancellable)
            except Exception as e:
                _report(False, e)
                raise
            _report(result)
            return result

        return self._submit(_job)

    def _safe_cache_path(self, artist: str | None, title: str | None, media_type: MediaArtType) -> Path | None:
        if artist is None and title is None:
            return None
        return self.get_paths(artist, title, media_type).cache

    def _search(
        self,
        path: Path,
        media_type: MediaArtType,
        artist: str | None,
        title: str | None,
        paths: ArtPaths,
        mtime_ns: int,
        cancellable: Cancellable | None,
    ) -> None:
        """Directory heuristic with download fallback, once per album directory."""
        _check_cancelled(cancellable)

        key = (str(path.parent), media_type.value, artist or "", title or "")
        with self._scanned_lock:
            if key in self._scanned:
                return
            self._scanned.add(key)

        if not self.heuristic.run(path, media_type, artist, title) and title is not None:
            self.request_download(media_type, artist, title)

        if paths.cache.exists():
            _set_mtime_ns(paths.cache, mtime_ns)

    def request_download(self, media_type: MediaArtType, artist: str | None, album: str | None) -> Future | None:
        """Queue a fire-and-forget download request for album art."""
        if self.fetcher is None or self.requests_disabled:
            return None
        if media_type is not MediaArtType.ALBUM:
            return None
        future = self._submit(self._fetch, artist, album)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _fetch(self, artist: str | None, album: str | None) -> None:
        try:
            self.fetcher.request_download(artist, album)
        except FetchUnavailable as e:
            logger.info("Art download service unavailable, disabling requests: %s", e)
            self.requests_disabled = True
        except Exception as e:
            logger.warning("Art download request failed for '%s' / '%s': %s", artist, album, e)

    def remove(self, artist: str | None = None, album: str | None = None) -> bool:
        """Remove art for artist/album from this context's cache root. See :func:`mediaart.cache.removal.remove`."""
        return remove(artist, album, cache_root=self.cache_root)

    def prune(self, keep: Iterable[tuple[str | None, str | None]]) -> list[Path]:
        """Delete cache files not belonging to the (artist, album) pairs in keep."""
        return prune(keep, cache_root=self.cache_root)
