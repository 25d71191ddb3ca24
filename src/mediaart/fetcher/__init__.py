"""Optional download service for art that is neither embedded nor on disk."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from mediaart.core.errors import MediaArtError


class FetchUnavailable(MediaArtError):
    """The download service does not exist. Stops further requests for the process."""


@runtime_checkable
class ArtFetcher(Protocol):
    """Queues a download of album art.

    Called fire-and-forget from a worker thread; the return value is ignored.
    Raise :class:`FetchUnavailable` when the service is not present at all.
    """

    def request_download(self, artist: str | None, album: str | None) -> None: ...


__all__ = ["ArtFetcher", "FetchUnavailable"]
