"""Tests for the tag backend router."""

import base64
from pathlib import Path
from unittest.mock import Mock

import pytest

from helpers import JPEG_BYTES
from tag_reader.core.errors import CacheWriteError, TagParseError
from tag_reader.core.tags import (
    AudioHeader,
    SourceTags,
    TagBackendRouter,
    uses_fallback,
)
from tag_reader.models import TEXT_FIELDS, TagField

SOURCE_VALUES = {
    TagField.TITLE: "Title",
    TagField.ARTIST: "Artist",
    TagField.ALBUM: "Album",
    TagField.YEAR: "1999",
    TagField.GENRE: "Pop",
    TagField.TRACK: "1",
    TagField.COMMENT: "Comment",
}
HEADER = AudioHeader(sample_rate=44100, channels=2, bitrate=320000, length=10.0)


class FakeSource:
    """Tag source returning fixed values for the requested fields."""

    def __init__(self, name, supported_fields, provides_header, artwork=JPEG_BYTES):
        self.name = name
        self.supported_fields = frozenset(supported_fields)
        self.provides_header = provides_header
        self.artwork = artwork
        self.calls = []

    def read(self, path, fields):
        self.calls.append((path, fields))
        values = {f: v for f, v in SOURCE_VALUES.items() if f in fields}
        return SourceTags(
            values=values,
            artwork=self.artwork if TagField.ALBUM_ART in fields else None,
            header=HEADER if self.provides_header else None,
        )


@pytest.fixture
def primary():
    """Mutagen-like source."""
    return FakeSource(
        "primary", set(TEXT_FIELDS) | {TagField.ALBUM_ART}, provides_header=True
    )


@pytest.fixture
def fallback():
    """ffprobe-like source without comments or header."""
    fields = {f for f in TEXT_FIELDS if f is not TagField.COMMENT}
    return FakeSource("fallback", fields | {TagField.ALBUM_ART}, provides_header=False)


@pytest.fixture
def cache():
    """Artwork cache double."""
    cache = Mock()
    cache.store.return_value = "file:///cache/Artist-Album-x.jpg"
    return cache


@pytest.fixture
def router(primary, fallback, cache):
    """Create a router over the fake sources."""
    return TagBackendRouter(primary=primary, fallback=fallback, artwork_cache=cache)


class TestRouting:
    """Test backend selection."""

    @pytest.mark.parametrize("name", ["a.opus", "a.OPUS"])
    def test_opus_uses_fallback(self, router, fallback, name):
        """Opus goes to the fallback backend."""
        router.read(Path(name))

        assert len(fallback.calls) == 1
        assert uses_fallback(Path(name).suffix)

    @pytest.mark.parametrize(
        "name", ["a.mp3", "a.flac", "a.m4a", "a.ogg", "a.wav", "a.wma", "a.aif"]
    )
    def test_other_extensions_use_primary(self, router, primary, fallback, name):
        """Everything else goes to the primary backend."""
        router.read(Path(name))

        assert len(primary.calls) == 1
        assert fallback.calls == []


class TestExtraction:
    """Test tag map assembly."""

    def test_primary_fills_text_and_inline_art(self, router):
        """Without caching, artwork is inline base64."""
        tags, header = router.read(Path("a.mp3"))

        assert tags.title == "Title"
        assert tags.comment == "Comment"
        assert tags.album_art == base64.b64encode(JPEG_BYTES).decode("ascii")
        assert tags.duration == ""
        assert header == HEADER

    def test_fallback_has_empty_comment_and_no_header(self, router):
        """Opus never carries a comment."""
        tags, header = router.read(Path("a.opus"))

        assert tags.title == "Title"
        assert tags.comment == ""
        assert header is None

    def test_extract_returns_tags_only(self, router):
        """extract() drops the header."""
        assert router.extract(Path("a.mp3")).artist == "Artist"

    def test_cached_artwork_uses_album_and_artist(self, router, cache):
        """Cached artwork is keyed by bytes, album and artist."""
        tags, _ = router.read(Path("a.mp3"), cache_images=True)

        assert tags.album_art == "file:///cache/Artist-Album-x.jpg"
        cache.store.assert_called_once_with(JPEG_BYTES, album="Album", artist="Artist")

    def test_no_artwork(self, primary, fallback, cache):
        """A file without artwork has an empty albumArt and no cache write."""
        primary.artwork = None
        router = TagBackendRouter(primary, fallback, artwork_cache=cache)

        tags, _ = router.read(Path("a.mp3"), cache_images=True)

        assert tags.album_art == ""
        cache.store.assert_not_called()

    def test_caching_without_cache_fails(self, primary, fallback):
        """Caching needs a configured cache."""
        router = TagBackendRouter(primary, fallback)

        with pytest.raises(CacheWriteError):
            router.read(Path("a.mp3"), cache_images=True)

    def test_cache_write_error_propagates(self, router, cache):
        """Cache failures are not turned into base64."""
        cache.store.side_effect = CacheWriteError("disk full")

        with pytest.raises(CacheWriteError):
            router.read(Path("a.mp3"), cache_images=True)

    def test_parse_error_yields_empty_tags(self, router, primary):
        """An unreadable file gives an all-empty tag map."""
        primary.read = Mock(side_effect=TagParseError("bad file"))

        tags, header = router.read(Path("a.mp3"))

        assert set(tags.to_dict().values()) == {""}
        assert header is None


class TestSuppression:
    """Test per-field suppression."""

    def test_disabled_fields_are_empty_and_not_requested(self, router, primary):
        """Disabled fields are neither read nor returned."""
        tags, _ = router.read(Path("a.mp3"), {"title": True, "comment": True})

        _, fields = primary.calls[0]
        assert TagField.TITLE not in fields
        assert TagField.COMMENT not in fields
        assert tags.title == ""
        assert tags.comment == ""
        assert tags.artist == "Artist"

    def test_disabled_art_never_touches_cache(self, router, primary, cache):
        """albumArt disabled means no artwork read and no cache write."""
        tags, _ = router.read(Path("a.mp3"), {"albumArt": True}, cache_images=True)

        _, fields = primary.calls[0]
        assert TagField.ALBUM_ART not in fields
        assert tags.album_art == ""
        cache.store.assert_not_called()

    def test_disabled_fields_on_fallback(self, router, fallback):
        """Suppression applies to the fallback route too."""
        tags, _ = router.read(Path("a.opus"), {"artist": True, "albumArt": True})

        _, fields = fallback.calls[0]
        assert TagField.ARTIST not in fields
        assert tags.artist == ""
        assert tags.album_art == ""
        assert tags.title == "Title"

    def test_everything_disabled_skips_backend(self, router, fallback):
        """With nothing to read, the backend is not opened."""
        disabled = {f.value: True for f in TagField}

        tags, header = router.read(Path("a.opus"), disabled)

        assert fallback.calls == []
        assert set(tags.to_dict().values()) == {""}
        assert header is None
