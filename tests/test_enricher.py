"""Tests for the technical metadata enricher."""

from contextlib import contextmanager
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from tag_reader.core.errors import MetadataSourceError
from tag_reader.core.tags import AudioHeader, TechnicalMetadataEnricher
from tag_reader.models import AudioTags

HEADER = AudioHeader(sample_rate=44100, channels=2, bitrate=128000, length=3.5)


class FakeMetadataSource:
    """Secondary source yielding fixed technical values."""

    def __init__(self, duration_ms=None, bitrate=None, sample_rate=None, error=None):
        self.media = SimpleNamespace(
            duration_ms=duration_ms, bitrate=bitrate, sample_rate=sample_rate
        )
        self.error = error
        self.opened = []

    @contextmanager
    def open(self, path):
        self.opened.append(path)
        if self.error:
            raise self.error
        yield self.media


class TestEnrich:
    """Test merging header and secondary values."""

    def test_header_only(self):
        """Without a secondary source, the header fills every field."""
        enricher = TechnicalMetadataEnricher()

        tags = enricher.enrich(Path("a.mp3"), AudioTags(title="T"), HEADER)

        assert tags.title == "T"
        assert tags.bitrate == "128000"
        assert tags.sample_rate == "44100"
        assert tags.channels == "2"
        assert tags.duration == "3500"

    def test_secondary_overrides_header(self):
        """Duration, bitrate and sample rate come from the secondary source."""
        source = FakeMetadataSource(duration_ms=3490, bitrate=130000, sample_rate=48000)
        enricher = TechnicalMetadataEnricher(source)

        tags = enricher.enrich(Path("a.mp3"), AudioTags(), HEADER)

        assert tags.duration == "3490"
        assert tags.bitrate == "130000"
        assert tags.sample_rate == "48000"
        assert tags.channels == "2"

    def test_missing_secondary_values_keep_header(self):
        """A secondary source without a sample rate leaves the header's."""
        source = FakeMetadataSource(duration_ms=3490)
        enricher = TechnicalMetadataEnricher(source)

        tags = enricher.enrich(Path("a.mp3"), AudioTags(), HEADER)

        assert tags.duration == "3490"
        assert tags.bitrate == "128000"
        assert tags.sample_rate == "44100"

    def test_fallback_route_without_header(self):
        """Opus files get no channel count."""
        source = FakeMetadataSource(duration_ms=1000, bitrate=96000, sample_rate=48000)
        enricher = TechnicalMetadataEnricher(source)

        tags = enricher.enrich(Path("a.opus"), AudioTags(title="O"), None)

        assert tags.title == "O"
        assert tags.duration == "1000"
        assert tags.channels == ""

    def test_secondary_header_is_not_reopened(self):
        """A header from the secondary source itself is used without reopening."""
        source = FakeMetadataSource(duration_ms=1, bitrate=1, sample_rate=1)
        enricher = TechnicalMetadataEnricher(source)
        probed = AudioHeader(
            sample_rate=48000, bitrate=96000, length=2.5, from_metadata_source=True
        )

        tags = enricher.enrich(Path("a.opus"), AudioTags(), probed)

        assert source.opened == []
        assert tags.duration == "2500"
        assert tags.bitrate == "96000"
        assert tags.sample_rate == "48000"
        assert tags.channels == ""

    def test_secondary_failure_keeps_prior_values(self):
        """A failing secondary source is logged and ignored."""
        source = FakeMetadataSource(error=MetadataSourceError("ffprobe missing"))
        enricher = TechnicalMetadataEnricher(source)

        tags = enricher.enrich(Path("a.mp3"), AudioTags(), HEADER)

        assert tags.duration == "3500"
        assert tags.bitrate == "128000"

    def test_nothing_available(self):
        """No header and no secondary source leaves the fields empty."""
        tags = TechnicalMetadataEnricher().enrich(Path("a.mp3"), AudioTags())

        assert tags.duration == ""
        assert tags.bitrate == ""
        assert tags.sample_rate == ""
        assert tags.channels == ""


class TestSuppression:
    """Test disabled technical fields."""

    @pytest.mark.parametrize(
        "field,attribute",
        [
            ("bitrate", "bitrate"),
            ("sampleRate", "sample_rate"),
            ("channels", "channels"),
            ("duration", "duration"),
        ],
    )
    def test_disabled_field_is_empty(self, field, attribute):
        """A disabled technical field stays empty."""
        source = FakeMetadataSource(duration_ms=3490, bitrate=130000, sample_rate=48000)
        enricher = TechnicalMetadataEnricher(source)

        tags = enricher.enrich(Path("a.mp3"), AudioTags(), HEADER, {field: True})

        assert getattr(tags, attribute) == ""

    def test_secondary_not_opened_when_its_fields_are_disabled(self):
        """The secondary source is skipped if it has nothing to add."""
        source = Mock()
        enricher = TechnicalMetadataEnricher(source)

        tags = enricher.enrich(
            Path("a.mp3"),
            AudioTags(),
            HEADER,
            {"duration": True, "bitrate": True, "sampleRate": True},
        )

        source.open.assert_not_called()
        assert tags.channels == "2"
