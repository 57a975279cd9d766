"""Content-hash artwork cache.

Embedded artwork is written once per ``artist-album-md5(bytes)`` key into a
cache directory and referenced by a ``file://`` locator instead of being
returned inline. The key -> locator table lives for the lifetime of the
cache object and is never evicted.
"""

import hashlib
import logging
import os
import re
import tempfile
import threading
from contextlib import suppress
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from ..errors import CacheWriteError

logger = logging.getLogger(__name__)

# Magic number prefixes for the image formats found in tag payloads
_IMAGE_SIGNATURES = (
    (b"\xff\xd8\xff", ".jpg"),
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"GIF87a", ".gif"),
    (b"GIF89a", ".gif"),
    (b"BM", ".bmp"),
)
_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')
_MAX_NAME_PART_BYTES = 80

# (artist, album, md5 of the image bytes)
EntryKey = Tuple[str, str, str]


def image_extension(data: bytes) -> str:
    """Guess a file extension from the leading bytes of an image."""
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    for signature, extension in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return extension
    return ".img"


def _safe_part(text: str) -> str:
    """Make ``text`` usable inside a file name and bound its length."""
    cleaned = _UNSAFE_CHARS.sub("_", text).strip()
    encoded = cleaned.encode("utf-8")[:_MAX_NAME_PART_BYTES]
    return encoded.decode("utf-8", "ignore")


class ArtworkCache:
    """Deduplicating, thread-safe store for embedded artwork."""

    def __init__(self, cache_dir: Union[str, Path]) -> None:
        """Initialize artwork cache.

        Args:
            cache_dir: Directory the images are written to, created on first use
        """
        self.cache_dir = Path(cache_dir).expanduser()
        self._entries: Dict[EntryKey, str] = {}
        self._guard = threading.Lock()
        self._key_locks: Dict[EntryKey, threading.Lock] = {}
        self._hits = 0
        self._writes = 0

    @staticmethod
    def cache_key(image_bytes: bytes, album: str, artist: str) -> str:
        """Key under which ``image_bytes`` for ``artist``/``album`` is stored."""
        digest = hashlib.md5(image_bytes).hexdigest()  # nosec B324
        return f"{artist}-{album}-{digest}"

    @staticmethod
    def entry_key(image_bytes: bytes, album: str, artist: str) -> EntryKey:
        """Table key for an entry; unlike ``cache_key`` it cannot collide."""
        return (artist, album, hashlib.md5(image_bytes).hexdigest())  # nosec B324

    @staticmethod
    def file_name_for(image_bytes: bytes, album: str, artist: str) -> str:
        """File name used for a cache entry.

        The readable prefix is sanitized and truncated; the trailing digest
        covers the untouched artist, album and image digest.
        """
        image_digest = hashlib.md5(image_bytes).hexdigest()  # nosec B324
        key_material = "\x00".join((artist, album, image_digest)).encode("utf-8")
        digest = hashlib.md5(key_material).hexdigest()  # nosec B324
        stem = f"{_safe_part(artist)}-{_safe_part(album)}-{digest}"
        return stem + image_extension(image_bytes)

    @property
    def size(self) -> int:
        """Number of cached entries."""
        with self._guard:
            return len(self._entries)

    @property
    def stats(self) -> Dict[str, int]:
        """Entry, hit and write counters."""
        with self._guard:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "writes": self._writes,
            }

    def lookup(self, image_bytes: bytes, album: str, artist: str) -> Optional[str]:
        """Locator of an already stored image, or None."""
        key = self.entry_key(image_bytes, album, artist)
        with self._guard:
            return self._entries.get(key)

    def store(self, image_bytes: bytes, album: str, artist: str) -> str:
        """Persist ``image_bytes`` once per key and return its locator.

        Args:
            image_bytes: Raw image payload
            album: Album tag of the file the image came from
            artist: Artist tag of the file the image came from

        Returns:
            ``file://`` URI of the cached image

        Raises:
            ValueError: If ``image_bytes`` is empty
            CacheWriteError: If the image cannot be written
        """
        if not image_bytes:
            raise ValueError("Cannot cache empty artwork")

        key = self.entry_key(image_bytes, album, artist)
        with self._lock_for(key):
            with self._guard:
                locator = self._entries.get(key)
                if locator is not None:
                    self._hits += 1
                    return locator

            target = self.cache_dir / self.file_name_for(image_bytes, album, artist)
            self._write_atomic(target, image_bytes)
            locator = target.absolute().as_uri()

            with self._guard:
                self._entries[key] = locator
                self._writes += 1

        logger.debug(
            "Cached artwork %s -> %s",
            self.cache_key(image_bytes, album, artist),
            locator,
        )
        return locator

    def _lock_for(self, key: EntryKey) -> threading.Lock:
        with self._guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def _write_atomic(self, target: Path, data: bytes) -> None:
        """Write ``data`` to ``target`` through a temp file and rename."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.cache_dir, prefix=".artwork-", suffix=".part"
            )
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(data)
                os.replace(tmp_name, target)
            except BaseException:
                with suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.error("Failed to write artwork to %s: %s", target, e)
            raise CacheWriteError(f"Cannot write artwork to {target}: {e}") from e
