"""Primary tag backend built on mutagen.

mutagen parses every supported container except Opus, which is routed to
the fallback backend. The tag block is dispatched on its flavour (ID3, MP4,
ASF or Vorbis comments) and only the requested fields are looked up.
"""

import base64
import logging
import struct
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

import mutagen
from mutagen import MutagenError
from mutagen.asf import ASFTags
from mutagen.flac import Picture
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Tags

from ...models import TEXT_FIELDS, TagField
from ..errors import TagParseError
from .base import AudioHeader, SourceTags

# Alias for mutagen.File - mutagen doesn't have type stubs
MutagenFile = mutagen.File

logger = logging.getLogger(__name__)

FRONT_COVER = 3

_ID3_FRAMES: Dict[TagField, Tuple[str, ...]] = {
    TagField.TITLE: ("TIT2",),
    TagField.ARTIST: ("TPE1",),
    TagField.ALBUM: ("TALB",),
    TagField.YEAR: ("TDRC", "TYER", "TDOR"),
    TagField.GENRE: ("TCON",),
    TagField.TRACK: ("TRCK",),
}

_MP4_ATOMS: Dict[TagField, Tuple[str, ...]] = {
    TagField.TITLE: ("\xa9nam",),
    TagField.ARTIST: ("\xa9ART", "aART"),
    TagField.ALBUM: ("\xa9alb",),
    TagField.YEAR: ("\xa9day",),
    TagField.GENRE: ("\xa9gen",),
    TagField.COMMENT: ("\xa9cmt",),
}

_VORBIS_KEYS: Dict[TagField, Tuple[str, ...]] = {
    TagField.TITLE: ("title",),
    TagField.ARTIST: ("artist",),
    TagField.ALBUM: ("album",),
    TagField.YEAR: ("date", "year"),
    TagField.GENRE: ("genre",),
    TagField.TRACK: ("tracknumber",),
    TagField.COMMENT: ("comment", "description"),
}

_ASF_KEYS: Dict[TagField, Tuple[str, ...]] = {
    TagField.TITLE: ("Title",),
    TagField.ARTIST: ("Author", "WM/AlbumArtist"),
    TagField.ALBUM: ("WM/AlbumTitle",),
    TagField.YEAR: ("WM/Year",),
    TagField.GENRE: ("WM/Genre",),
    TagField.TRACK: ("WM/TrackNumber",),
    TagField.COMMENT: ("Description",),
}


def normalize_track(value: str) -> str:
    """Reduce ``"3/12"`` style track numbers to the track itself."""
    return value.split("/", 1)[0].strip()


def _first_text(values: Any) -> str:
    """First non-empty entry of a tag value list, as a string."""
    if values is None:
        return ""
    if isinstance(values, (str, bytes)):
        values = [values]
    for value in values:
        text = str(value).strip()
        if text:
            return text
    return ""


# ID3 (mp3, wav, aiff, dsf)


def _id3_text(tags: ID3, field: TagField) -> str:
    if field is TagField.COMMENT:
        comments = tags.getall("COMM")
        # Prefer the plain comment over iTunes' described ones
        comments.sort(key=lambda frame: frame.desc != "")
        for frame in comments:
            text = _first_text(frame.text)
            if text:
                return text
        return ""

    for frame_id in _ID3_FRAMES[field]:
        frame = tags.get(frame_id)
        if frame is None:
            continue
        if frame_id == "TCON" and frame.genres:
            return _first_text(frame.genres)
        text = _first_text(frame.text)
        if text:
            return text
    return ""


def _id3_artwork(audio: Any, tags: ID3) -> Optional[bytes]:
    pictures = tags.getall("APIC")
    if not pictures:
        return None
    pictures.sort(key=lambda frame: frame.type != FRONT_COVER)
    return bytes(pictures[0].data) or None


# MP4 (m4a)


def _mp4_text(tags: MP4Tags, field: TagField) -> str:
    if field is TagField.TRACK:
        for number, _total in tags.get("trkn", []):
            if number:
                return str(number)
        return ""
    for atom in _MP4_ATOMS.get(field, ()):
        text = _first_text(tags.get(atom))
        if text:
            return text
    return ""


def _mp4_artwork(audio: Any, tags: MP4Tags) -> Optional[bytes]:
    covers = tags.get("covr") or []
    if not covers:
        return None
    return bytes(covers[0]) or None


# ASF (wma)


def _asf_text(tags: ASFTags, field: TagField) -> str:
    for key in _ASF_KEYS[field]:
        if key in tags:
            text = _first_text(tags[key])
            if text:
                return text
    return ""


def parse_wm_picture(blob: bytes) -> Optional[bytes]:
    """Extract the image from a ``WM/Picture`` attribute.

    Layout: picture type (1 byte), data size (uint32 LE), MIME type and
    description as NUL terminated UTF-16LE strings, then the image data.
    """
    if len(blob) < 5:
        return None
    (size,) = struct.unpack_from("<I", blob, 1)
    position = 5
    for _ in range(2):
        end = position
        while end + 1 < len(blob) and blob[end : end + 2] != b"\x00\x00":
            end += 2
        if end + 1 >= len(blob):
            return None
        position = end + 2
    data = blob[position : position + size]
    return data or None


def _asf_artwork(audio: Any, tags: ASFTags) -> Optional[bytes]:
    if "WM/Picture" not in tags:
        return None
    for attribute in tags["WM/Picture"]:
        data = parse_wm_picture(bytes(attribute.value))
        if data:
            return data
    return None


# Vorbis comments (flac, ogg)


def _vorbis_text(tags: Any, field: TagField) -> str:
    for key in _VORBIS_KEYS[field]:
        if key in tags:
            text = _first_text(tags[key])
            if text:
                return text
    return ""


def _vorbis_artwork(audio: Any, tags: Any) -> Optional[bytes]:
    # FLAC keeps pictures in metadata blocks rather than in the comments
    pictures: List[Picture] = list(getattr(audio, "pictures", None) or [])
    if pictures:
        pictures.sort(key=lambda picture: picture.type != FRONT_COVER)
        return bytes(pictures[0].data) or None

    if tags is None or "metadata_block_picture" not in tags:
        return None
    for encoded in tags["metadata_block_picture"]:
        try:
            picture = Picture(base64.b64decode(encoded))
        except (ValueError, struct.error, MutagenError) as e:
            logger.debug("Skipping unreadable METADATA_BLOCK_PICTURE: %s", e)
            continue
        if picture.data:
            return bytes(picture.data)
    return None


TextReader = Callable[[Any, TagField], str]
ArtworkReader = Callable[[Any, Any], Optional[bytes]]


def _readers_for(tags: Any) -> Tuple[TextReader, ArtworkReader]:
    if isinstance(tags, ID3):
        return _id3_text, _id3_artwork
    if isinstance(tags, MP4Tags):
        return _mp4_text, _mp4_artwork
    if isinstance(tags, ASFTags):
        return _asf_text, _asf_artwork
    return _vorbis_text, _vorbis_artwork


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def header_from_info(info: Any) -> AudioHeader:
    """Build an ``AudioHeader`` from a mutagen ``StreamInfo``."""
    if info is None:
        return AudioHeader()
    length = getattr(info, "length", None)
    return AudioHeader(
        sample_rate=_positive_int(getattr(info, "sample_rate", None)),
        channels=_positive_int(getattr(info, "channels", None)),
        bitrate=_positive_int(getattr(info, "bitrate", None)),
        length=float(length) if length else None,
    )


class MutagenTagBackend:
    """Primary tag backend for every supported container except Opus."""

    name = "mutagen"
    supported_fields: FrozenSet[TagField] = frozenset(TEXT_FIELDS) | {
        TagField.ALBUM_ART
    }
    provides_header = True

    def open(self, path: Path) -> Any:
        """Open ``path`` with mutagen.

        Raises:
            TagParseError: If mutagen cannot parse or recognise the file
        """
        try:
            audio = MutagenFile(path)
        except (MutagenError, OSError, ValueError) as e:
            raise TagParseError(f"Cannot parse {path}: {e}") from e
        if audio is None:
            raise TagParseError(f"Unrecognised audio format: {path}")
        return audio

    def read(self, path: Path, fields: FrozenSet[TagField]) -> SourceTags:
        """Read ``fields`` and the audio header from ``path``.

        Args:
            path: Audio file to read
            fields: Fields to look up; anything else is left out

        Returns:
            SourceTags with the requested values, artwork and header

        Raises:
            TagParseError: If the file cannot be opened or parsed
        """
        audio = self.open(path)
        tags = audio.tags
        read_text, read_artwork = _readers_for(tags)

        values: Dict[TagField, str] = {}
        for field in TEXT_FIELDS:
            if field not in fields:
                continue
            value = read_text(tags, field) if tags is not None else ""
            if field is TagField.TRACK:
                value = normalize_track(value)
            values[field] = value

        artwork = None
        if TagField.ALBUM_ART in fields:
            artwork = read_artwork(audio, tags) if tags is not None else None
            if artwork is None and tags is None:
                # FLAC files without a comment block can still carry pictures
                artwork = _vorbis_artwork(audio, None)

        return SourceTags(
            values=values,
            artwork=artwork,
            header=header_from_info(getattr(audio, "info", None)),
        )
