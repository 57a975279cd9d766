"""Shared types for tag sources."""

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Protocol

from ...models import TagField


@dataclass(frozen=True)
class AudioHeader:
    """Technical values parsed from the audio stream header."""

    sample_rate: Optional[int] = None
    channels: Optional[int] = None
    bitrate: Optional[int] = None
    length: Optional[float] = None  # seconds
    # Values already come from the secondary metadata source
    from_metadata_source: bool = False

    @property
    def duration_ms(self) -> Optional[int]:
        """Length in whole milliseconds."""
        if self.length is None:
            return None
        return int(round(self.length * 1000))


@dataclass
class SourceTags:
    """Partial result of a tag source.

    Attributes:
        values: Text fields that were requested and read
        artwork: Raw embedded image bytes, if requested and present
        header: Audio header, when the source parses one
    """

    values: Dict[TagField, str] = dataclass_field(default_factory=dict)
    artwork: Optional[bytes] = None
    header: Optional[AudioHeader] = None


class TagSource(Protocol):
    """A backend able to read a subset of tag fields from an audio file."""

    name: str
    supported_fields: FrozenSet[TagField]
    provides_header: bool

    def read(self, path: Path, fields: FrozenSet[TagField]) -> SourceTags:
        """Read only ``fields`` from ``path``.

        Raises:
            TagParseError: If the file cannot be opened or parsed
        """
        ...
