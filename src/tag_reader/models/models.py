"""Data models for the tag reader."""

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

CREATION_DATE_FORMAT = "%d-%m-%Y"


class TagField(str, Enum):
    """Closed set of fields carried by every tag map, by wire name."""

    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    YEAR = "year"
    GENRE = "genre"
    TRACK = "track"
    COMMENT = "comment"
    ALBUM_ART = "albumArt"
    BITRATE = "bitrate"
    SAMPLE_RATE = "sampleRate"
    CHANNELS = "channels"
    DURATION = "duration"

    @property
    def attribute(self) -> str:
        """Attribute name of this field on ``AudioTags``."""
        return _ATTRIBUTE_NAMES.get(self, self.value)

    @classmethod
    def parse(cls, name: str) -> Optional["TagField"]:
        """Look up a field by wire name or attribute name."""
        try:
            return cls(name)
        except ValueError:
            return _BY_ATTRIBUTE.get(name)


_ATTRIBUTE_NAMES = {
    TagField.ALBUM_ART: "album_art",
    TagField.SAMPLE_RATE: "sample_rate",
}
_BY_ATTRIBUTE = {attr: field for field, attr in _ATTRIBUTE_NAMES.items()}

TAG_FIELDS = tuple(TagField)
TEXT_FIELDS = (
    TagField.TITLE,
    TagField.ARTIST,
    TagField.ALBUM,
    TagField.YEAR,
    TagField.GENRE,
    TagField.TRACK,
    TagField.COMMENT,
)
TECHNICAL_FIELDS = (
    TagField.BITRATE,
    TagField.SAMPLE_RATE,
    TagField.CHANNELS,
    TagField.DURATION,
)


class DisableFieldSet:
    """Sparse field -> suppress flag mapping.

    Absent keys and ``False`` values mean "include". Keys may be wire names
    (``albumArt``) or attribute names (``album_art``); unknown keys are ignored.
    """

    def __init__(self, disabled: Iterable[TagField] = ()) -> None:
        """Initialize with the fields to suppress."""
        self._disabled: FrozenSet[TagField] = frozenset(disabled)

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, bool]]) -> "DisableFieldSet":
        """Build a field set from a caller supplied mapping."""
        disabled = []
        for name, flag in (mapping or {}).items():
            field = TagField.parse(str(name))
            if field is None:
                logger.debug("Ignoring unknown field in disable set: %s", name)
                continue
            if flag:
                disabled.append(field)
        return cls(disabled)

    @classmethod
    def coerce(
        cls, value: Union["DisableFieldSet", Mapping[str, bool], None]
    ) -> "DisableFieldSet":
        """Accept either an existing field set or a plain mapping."""
        if isinstance(value, DisableFieldSet):
            return value
        return cls.from_mapping(value)

    def is_disabled(self, field: TagField) -> bool:
        """Whether ``field`` must be left empty."""
        return field in self._disabled

    def is_enabled(self, field: TagField) -> bool:
        """Whether ``field`` should be extracted."""
        return field not in self._disabled

    def covers(self, fields: Iterable[TagField]) -> bool:
        """True when every field in ``fields`` is disabled."""
        return all(field in self._disabled for field in fields)

    def enabled(self, fields: Iterable[TagField]) -> FrozenSet[TagField]:
        """Subset of ``fields`` that is not disabled."""
        return frozenset(field for field in fields if field not in self._disabled)

    def to_dict(self) -> Dict[str, bool]:
        """Wire representation, only listing suppressed fields."""
        return {field.value: True for field in TAG_FIELDS if field in self._disabled}

    def __contains__(self, field: object) -> bool:
        return field in self._disabled

    def __bool__(self) -> bool:
        return bool(self._disabled)

    def __repr__(self) -> str:
        names = sorted(field.value for field in self._disabled)
        return f"DisableFieldSet({names})"


class AudioTags(BaseModel):
    """Tag map of one audio file.

    Every field is always present; missing values are the empty string.
    ``album_art`` holds either base64 image data or an artwork cache locator.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    artist: str = ""
    album: str = ""
    year: str = ""
    genre: str = ""
    track: str = ""
    comment: str = ""
    album_art: str = Field(default="", alias="albumArt")
    bitrate: str = ""
    sample_rate: str = Field(default="", alias="sampleRate")
    channels: str = ""
    duration: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def normalize_missing(cls, v: Any) -> str:
        """Normalize absent values to the empty string."""
        if v is None:
            return ""
        return str(v)

    def get(self, field: TagField) -> str:
        """Get the value of ``field``."""
        return str(getattr(self, field.attribute))

    def merged(self, values: Mapping[TagField, str]) -> "AudioTags":
        """Return a copy with ``values`` replacing the current ones."""
        update = {field.attribute: value or "" for field, value in values.items()}
        return self.model_copy(update=update)

    def to_dict(self) -> Dict[str, str]:
        """Ordered wire representation."""
        return self.model_dump(by_alias=True)


class ScannedFile(BaseModel):
    """A candidate audio file found by a directory scan, before tag extraction."""

    path: Path
    last_modified_ms: int
    internal_id: str

    @property
    def extension(self) -> str:
        """Lowercase extension without the leading dot."""
        return self.path.suffix.lower().lstrip(".")

    @property
    def file_name(self) -> str:
        """Base name of the file."""
        return self.path.name

    @property
    def locator(self) -> str:
        """``file://`` URI of the file."""
        return self.path.as_uri()

    @property
    def creation_date(self) -> str:
        """Modification date formatted as DD-MM-YYYY in local time."""
        modified = datetime.fromtimestamp(self.last_modified_ms / 1000)
        return modified.strftime(CREATION_DATE_FORMAT)

    @field_validator("path", mode="before")
    @classmethod
    def validate_path(cls, v: Union[str, Path]) -> Path:
        """Convert input to Path object."""
        return Path(v)

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)


class AudioFileRecord(BaseModel):
    """Per-file result returned by the scan operations."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    extension: str
    locator: str = Field(alias="uri")
    file_name: str = Field(alias="fileName")
    creation_date: str = Field(alias="creationDate")
    tags: AudioTags
    internal_id: str = Field(alias="internalId")

    @classmethod
    def from_scanned(cls, scanned: ScannedFile, tags: AudioTags) -> "AudioFileRecord":
        """Assemble a record from a scan entry and its extracted tags."""
        return cls(
            extension=scanned.extension,
            locator=scanned.locator,
            file_name=scanned.file_name,
            creation_date=scanned.creation_date,
            tags=tags,
            internal_id=scanned.internal_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation with camelCase keys."""
        return self.model_dump(by_alias=True)
