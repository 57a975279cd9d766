"""Models for the tag reader."""

from .models import (
    TAG_FIELDS,
    TECHNICAL_FIELDS,
    TEXT_FIELDS,
    AudioFileRecord,
    AudioTags,
    DisableFieldSet,
    ScannedFile,
    TagField,
)

__all__ = [
    "TagField",
    "TAG_FIELDS",
    "TEXT_FIELDS",
    "TECHNICAL_FIELDS",
    "DisableFieldSet",
    "AudioTags",
    "ScannedFile",
    "AudioFileRecord",
]
