"""Tests for the MediaArtProcess workflow."""

import os
import threading

import pytest

from mediaart.cache.keys import derive_album_shared_path, derive_cache_path
from mediaart.core.config import CacheConfig, FetchConfig, MediaArtConfig
from mediaart.core.errors import CancelledError, InvalidArgumentError, NoCacheDirectoryError, NotFoundError
from mediaart.core.events import ProcessEvent
from mediaart.core.models import MediaArtType, ProcessFlags
from mediaart.core.process import MediaArtProcess
from mediaart.fetcher import FetchUnavailable
from mediaart.storage.volumes import StaticVolumeIndex

ALBUM = MediaArtType.ALBUM
VIDEO = MediaArtType.VIDEO


@pytest.fixture
def process(config, codec, fetcher):
    with MediaArtProcess(config, codec=codec, fetcher=fetcher) as proc:
        yield proc


def _entry(cache_root, artist="Beatles", title="Sgt. Pepper", prefix="album"):
    return derive_cache_path(artist, title, prefix, cache_root)


class TestConstruction:
    def test_creates_cache_root(self, tmp_path, codec):
        root = tmp_path / "fresh" / "media-art"
        MediaArtProcess(MediaArtConfig(cache=CacheConfig(root=root)), codec=codec).close()
        assert root.is_dir()

    def test_uncreatable_cache_root(self, tmp_path, codec):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")
        config = MediaArtConfig(cache=CacheConfig(root=blocker / "media-art"))
        with pytest.raises(NoCacheDirectoryError):
            MediaArtProcess(config, codec=codec)

    def test_get_paths(self, process, cache_root, track):
        paths = process.get_paths("Beatles", "Sgt. Pepper", ALBUM, track)
        assert paths.cache == _entry(cache_root)
        assert paths.local == track.parent / ".mediaartlocal" / paths.cache.name

    def test_get_paths_with_string_prefix(self, process, cache_root):
        paths = process.get_paths(None, "Some Show", "podcast")
        assert paths.cache.name.startswith("podcast-")
        assert paths.local is None


class TestArguments:
    def test_artist_or_title_required(self, process, track):
        with pytest.raises(InvalidArgumentError):
            process.process_file(track, ALBUM)

    def test_missing_media(self, process, tmp_path):
        with pytest.raises(NotFoundError):
            process.process_file(tmp_path / "missing.mp3", ALBUM, "Beatles", "Sgt. Pepper")

    def test_cancelled_before_start(self, process, track, jpeg_bytes):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(CancelledError):
            process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes, cancellable=cancel)

    def test_unset_cancellable_is_ignored(self, process, track, jpeg_bytes):
        assert process.process_file(
            track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes, cancellable=threading.Event()
        )

    def test_uri_requires_title(self, process, track):
        with pytest.raises(InvalidArgumentError):
            process.process_uri(track.as_uri(), ALBUM, "Beatles", None)


class TestBuffer:
    def test_stores_buffer_and_copies_mtime(self, process, cache_root, track, jpeg_bytes):
        assert process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes, mime="image/jpeg")

        entry = _entry(cache_root)
        assert entry.read_bytes() == jpeg_bytes
        assert os.stat(entry).st_mtime_ns == os.stat(track).st_mtime_ns

    def test_fresh_entry_is_left_alone(self, process, codec, track, jpeg_bytes, other_jpeg_bytes):
        process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)
        calls = len(codec.calls)

        process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=other_jpeg_bytes)

        assert len(codec.calls) == calls

    def test_newer_media_refreshes(self, process, cache_root, track, jpeg_bytes, other_jpeg_bytes):
        process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)
        later = os.stat(track).st_mtime_ns + 10_000_000_000
        os.utime(track, ns=(later, later))

        process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=other_jpeg_bytes)

        entry = _entry(cache_root)
        assert entry.read_bytes() == other_jpeg_bytes
        assert os.stat(entry).st_mtime_ns == later

    def test_force_refreshes(self, process, cache_root, track, jpeg_bytes, other_jpeg_bytes):
        process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)

        process.process_file(
            track, ALBUM, "Beatles", "Sgt. Pepper", buffer=other_jpeg_bytes, flags=ProcessFlags.FORCE
        )

        assert _entry(cache_root).read_bytes() == other_jpeg_bytes

    def test_title_only(self, process, cache_root, track, jpeg_bytes):
        process.process_file(track, ALBUM, title="Sgt. Pepper", buffer=jpeg_bytes)
        assert derive_album_shared_path("Sgt. Pepper", "album", cache_root).read_bytes() == jpeg_bytes

    def test_artist_only(self, process, cache_root, track, jpeg_bytes):
        process.process_file(track, ALBUM, artist="Beatles", buffer=jpeg_bytes)
        assert _entry(cache_root, title=None).read_bytes() == jpeg_bytes

    def test_opened_file_object(self, process, cache_root, track, jpeg_bytes):
        with open(track, "rb") as media:
            assert process.process_file(media, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)
        assert _entry(cache_root).exists()

    def test_file_uri(self, process, cache_root, track, jpeg_bytes):
        assert process.process_uri(track.as_uri(), ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)
        assert _entry(cache_root).exists()


class TestSearch:
    def test_uses_image_in_directory(self, process, cache_root, album_dir, track, jpeg_bytes):
        (album_dir / "cover.jpg").write_bytes(jpeg_bytes)

        assert process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper")

        entry = _entry(cache_root)
        assert entry.read_bytes() == jpeg_bytes
        assert os.stat(entry).st_mtime_ns == os.stat(track).st_mtime_ns

    def test_miss_requests_download(self, process, fetcher, cache_root, track):
        assert process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper")
        process.drain(timeout=5)

        assert fetcher.requests == [("Beatles", "Sgt. Pepper")]
        assert list(cache_root.iterdir()) == []

    def test_directory_scanned_once(self, process, fetcher, album_dir, track):
        second = album_dir / "02 - With a Little Help.mp3"
        second.write_bytes(b"ID3")

        process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper")
        process.process_file(second, ALBUM, "Beatles", "Sgt. Pepper")
        process.drain(timeout=5)

        assert len(fetcher.requests) == 1

    def test_video_never_requests_download(self, process, fetcher, tmp_path):
        movie = tmp_path / "movie.mkv"
        movie.write_bytes(b"")

        assert process.process_file(movie, VIDEO, None, "Film")
        process.drain(timeout=5)

        assert fetcher.requests == []

    def test_no_title_never_requests_download(self, process, fetcher, track):
        assert process.process_file(track, ALBUM, artist="Beatles")
        process.drain(timeout=5)

        assert fetcher.requests == []

    def test_cancelled_before_search(self, process, fetcher, track):
        class CancelOnSecondCheck:
            def __init__(self):
                self.checks = 0

            def is_set(self):
                self.checks += 1
                return self.checks > 1

        with pytest.raises(CancelledError):
            process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", cancellable=CancelOnSecondCheck())
        assert fetcher.requests == []

    def test_cancelled_search_can_be_retried(self, process, cache_root, album_dir, track, jpeg_bytes):
        class CancelOnSecondCheck:
            def __init__(self):
                self.checks = 0

            def is_set(self):
                self.checks += 1
                return self.checks > 1

        with pytest.raises(CancelledError):
            process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", cancellable=CancelOnSecondCheck())

        (album_dir / "cover.jpg").write_bytes(jpeg_bytes)
        assert process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper")

        assert _entry(cache_root).read_bytes() == jpeg_bytes


class TestFetch:
    def test_unavailable_service_disables_requests(self, config, codec, fetcher, album_dir, track):
        fetcher.error = FetchUnavailable("no such service")
        other = album_dir.parent / "Abbey Road" / "01 - Come Together.mp3"
        other.parent.mkdir()
        other.write_bytes(b"ID3")

        with MediaArtProcess(config, codec=codec, fetcher=fetcher) as process:
            process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper")
            process.drain(timeout=5)
            assert process.requests_disabled

            process.process_file(other, ALBUM, "Beatles", "Abbey Road")
            process.drain(timeout=5)

        assert fetcher.requests == [("Beatles", "Sgt. Pepper")]

    def test_other_fetch_errors_keep_requests_enabled(self, config, codec, fetcher, track):
        fetcher.error = RuntimeError("timeout")

        with MediaArtProcess(config, codec=codec, fetcher=fetcher) as process:
            assert process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper")
            process.drain(timeout=5)
            assert not process.requests_disabled

    def test_disabled_in_config(self, cache_root, codec, fetcher, track):
        config = MediaArtConfig(cache=CacheConfig(root=cache_root), fetch=FetchConfig(enabled=False))

        with MediaArtProcess(config, codec=codec, fetcher=fetcher) as process:
            process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper")
            process.drain(timeout=5)

        assert fetcher.requests == []

    def test_request_download_without_fetcher(self, config, codec):
        with MediaArtProcess(config, codec=codec) as process:
            assert process.request_download(ALBUM, "Beatles", "Sgt. Pepper") is None

    def test_drain_waits_for_every_request(self, process, fetcher):
        for album in ("Sgt. Pepper", "Abbey Road", "Revolver"):
            process.request_download(ALBUM, "Beatles", album)
        process.drain(timeout=5)

        assert sorted(album for _, album in fetcher.requests) == ["Abbey Road", "Revolver", "Sgt. Pepper"]


class TestAsync:
    def test_future_and_callback(self, process, cache_root, track, jpeg_bytes):
        events: list[ProcessEvent] = []

        future = process.process_file_async(
            track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes, callback=events.append
        )

        assert future.result(timeout=5) is True
        assert len(events) == 1
        assert events[0].success
        assert events[0].media == track
        assert events[0].cache_path == _entry(cache_root)

    def test_error_reaches_future_and_callback(self, process, tmp_path):
        events: list[ProcessEvent] = []
        missing = tmp_path / "missing.mp3"

        future = process.process_file_async(missing, ALBUM, "Beatles", "Sgt. Pepper", callback=events.append)

        assert isinstance(future.exception(timeout=5), NotFoundError)
        assert not events[0].success
        assert isinstance(events[0].error, NotFoundError)

    def test_invalid_arguments_have_no_cache_path(self, process, track):
        events: list[ProcessEvent] = []

        future = process.process_file_async(track, ALBUM, callback=events.append)

        assert isinstance(future.exception(timeout=5), InvalidArgumentError)
        assert events[0].cache_path is None


class TestMirror:
    def test_copies_to_removable_volume(self, config, codec, album_dir, track, jpeg_bytes):
        volumes = StaticVolumeIndex([album_dir.parent.parent])

        with MediaArtProcess(config, codec=codec, volumes=volumes) as process:
            process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)
            local = process.get_paths("Beatles", "Sgt. Pepper", ALBUM, track).local

        assert local.read_bytes() == jpeg_bytes
        assert not local.is_symlink()

    def test_fixed_disk_not_mirrored(self, config, codec, tmp_path, track, jpeg_bytes):
        volumes = StaticVolumeIndex([tmp_path / "elsewhere"])

        with MediaArtProcess(config, codec=codec, volumes=volumes) as process:
            process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)

        assert not (track.parent / ".mediaartlocal").exists()

    def test_mirror_created_for_fresh_entry(self, config, codec, album_dir, track, jpeg_bytes):
        with MediaArtProcess(config, codec=codec) as process:
            process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)

        volumes = StaticVolumeIndex([album_dir])
        with MediaArtProcess(config, codec=codec, volumes=volumes) as process:
            process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)
            local = process.get_paths("Beatles", "Sgt. Pepper", ALBUM, track).local

        assert local.exists()


class TestRemoval:
    def test_remove_and_prune(self, process, cache_root, track, jpeg_bytes):
        process.process_file(track, ALBUM, "Beatles", "Sgt. Pepper", buffer=jpeg_bytes)
        shared = derive_album_shared_path("Sgt. Pepper", "album", cache_root)

        assert process.prune([("Beatles", "Sgt. Pepper")]) == []
        assert process.remove("Beatles", "Sgt. Pepper")
        assert not _entry(cache_root).is_symlink()
        assert not shared.exists()
