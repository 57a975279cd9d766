"""Fallback metadata backend built on the ffprobe and ffmpeg executables.

It is the only tag source for Opus files and the secondary source for
duration, bitrate and sample rate. Every probe is a scoped acquisition::

    with backend.open(path) as media:
        media.duration_ms

The ``RetrievedMedia`` handle is released when the block exits, even on
error, and cannot be used afterwards.
"""

import json
import logging
import re
import subprocess  # nosec B404
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterator, Optional, Tuple, Union

from ...models import TEXT_FIELDS, TagField
from ..errors import MetadataSourceError, TagParseError
from .base import AudioHeader, SourceTags

logger = logging.getLogger(__name__)

_TAG_KEYS: Dict[TagField, Tuple[str, ...]] = {
    TagField.TITLE: ("title",),
    TagField.ARTIST: ("artist", "album_artist"),
    TagField.ALBUM: ("album",),
    TagField.YEAR: ("date", "year"),
    TagField.GENRE: ("genre",),
    TagField.TRACK: ("track", "tracknumber"),
}
_YEAR_PATTERN = re.compile(r"^(\d{4})")


def _safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


class RetrievedMedia:
    """Result of probing one file; valid until released."""

    def __init__(
        self,
        path: Path,
        probe: Dict[str, Any],
        backend: "FfprobeMetadataBackend",
    ) -> None:
        """Initialize from parsed ffprobe JSON output.

        Args:
            path: Probed file
            probe: Parsed ``-show_format -show_streams`` output
            backend: Backend used for follow-up ffmpeg calls
        """
        self.path = path
        self._backend = backend
        self._format: Dict[str, Any] = probe.get("format") or {}
        streams = probe.get("streams") or []
        self._audio: Dict[str, Any] = next(
            (s for s in streams if s.get("codec_type") == "audio"), {}
        )
        self._has_picture = any(
            s.get("codec_type") == "video"
            and (s.get("disposition") or {}).get("attached_pic") == 1
            for s in streams
        )
        # Ogg keeps comments on the stream, other containers on the format
        tags: Dict[str, str] = {}
        for source in (self._format.get("tags"), self._audio.get("tags")):
            for key, value in (source or {}).items():
                tags.setdefault(str(key).lower(), str(value))
        self._tags = tags
        self._released = False

    @property
    def released(self) -> bool:
        """Whether ``release`` has been called."""
        return self._released

    def _require_open(self) -> None:
        if self._released:
            raise MetadataSourceError(f"Metadata for {self.path} was already released")

    def extract(self, key: str) -> Optional[str]:
        """Raw tag value by case-insensitive key, or None."""
        self._require_open()
        value = self._tags.get(key.lower())
        return value.strip() if value is not None else None

    def text(self, field: TagField) -> str:
        """Normalized value of a text field; comment is always empty."""
        self._require_open()
        for key in _TAG_KEYS.get(field, ()):
            value = self.extract(key)
            if not value:
                continue
            if field is TagField.TRACK:
                return value.split("/", 1)[0].strip()
            if field is TagField.YEAR:
                match = _YEAR_PATTERN.match(value)
                return match.group(1) if match else value
            return value
        return ""

    @property
    def duration_ms(self) -> Optional[int]:
        """Container duration in milliseconds."""
        self._require_open()
        duration = self._format.get("duration") or self._audio.get("duration")
        try:
            seconds = float(duration)
        except (TypeError, ValueError):
            return None
        return int(round(seconds * 1000)) if seconds > 0 else None

    @property
    def bitrate(self) -> Optional[int]:
        """Overall bitrate in bits per second."""
        self._require_open()
        return _safe_int(self._format.get("bit_rate")) or _safe_int(
            self._audio.get("bit_rate")
        )

    @property
    def sample_rate(self) -> Optional[int]:
        """Sample rate of the first audio stream, when ffprobe reports one."""
        self._require_open()
        return _safe_int(self._audio.get("sample_rate"))

    @property
    def channels(self) -> Optional[int]:
        """Channel count of the first audio stream."""
        self._require_open()
        return _safe_int(self._audio.get("channels"))

    @property
    def has_embedded_picture(self) -> bool:
        """Whether the file carries an attached picture stream."""
        self._require_open()
        return self._has_picture

    def embedded_picture(self) -> Optional[bytes]:
        """First attached picture re-encoded as PNG, or None."""
        self._require_open()
        if not self._has_picture:
            return None
        return self._backend.extract_picture(self.path)

    def release(self) -> None:
        """Drop the probe data; later access raises ``MetadataSourceError``."""
        self._released = True
        self._format = {}
        self._audio = {}
        self._tags = {}


def stream_header(media: RetrievedMedia) -> AudioHeader:
    """Secondary-source technical values of a probe, marked as such.

    Channels are left out; they only ever come from a primary header.
    """
    duration_ms = media.duration_ms
    return AudioHeader(
        sample_rate=media.sample_rate,
        bitrate=media.bitrate,
        length=duration_ms / 1000 if duration_ms is not None else None,
        from_metadata_source=True,
    )


class FfprobeMetadataBackend:
    """Tag source and secondary metadata source backed by ffprobe."""

    name = "ffprobe"
    supported_fields: FrozenSet[TagField] = frozenset(
        field for field in TEXT_FIELDS if field is not TagField.COMMENT
    ) | {TagField.ALBUM_ART}
    provides_header = False

    def __init__(
        self,
        ffprobe_binary: str = "ffprobe",
        ffmpeg_binary: str = "ffmpeg",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the backend.

        Args:
            ffprobe_binary: ffprobe executable name or path
            ffmpeg_binary: ffmpeg executable name or path
            timeout: Seconds before a probe is abandoned
        """
        self.ffprobe_binary = ffprobe_binary
        self.ffmpeg_binary = ffmpeg_binary
        self.timeout = timeout

    def probe(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Run ffprobe on ``path`` and return its parsed JSON output.

        Raises:
            MetadataSourceError: If ffprobe is missing, fails or times out
        """
        cmd = [
            self.ffprobe_binary,
            "-v",
            "error",
            "-show_format",
            "-show_streams",
            "-of",
            "json",
            str(path),
        ]
        try:
            result = subprocess.run(  # nosec B603
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True,
            )
        except FileNotFoundError as e:
            raise MetadataSourceError(
                f"ffprobe executable not found: {self.ffprobe_binary}"
            ) from e
        except subprocess.CalledProcessError as e:
            message = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise MetadataSourceError(f"ffprobe failed for {path}: {message}") from e
        except subprocess.TimeoutExpired as e:
            raise MetadataSourceError(
                f"ffprobe timed out after {self.timeout}s for {path}"
            ) from e

        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise MetadataSourceError(f"Invalid ffprobe output for {path}: {e}") from e
        if not isinstance(data, dict):
            raise MetadataSourceError(f"Unexpected ffprobe output for {path}")
        return data

    @contextmanager
    def open(self, path: Union[str, Path]) -> Iterator[RetrievedMedia]:
        """Probe ``path`` and yield a handle released on exit.

        Raises:
            MetadataSourceError: If the file cannot be probed
        """
        media = RetrievedMedia(Path(path), self.probe(path), self)
        try:
            yield media
        finally:
            media.release()

    def extract_picture(self, path: Union[str, Path]) -> Optional[bytes]:
        """Decode the first attached picture of ``path`` to PNG bytes.

        Returns:
            PNG data, or None if ffmpeg could not produce an image

        Raises:
            MetadataSourceError: If ffmpeg is missing
        """
        cmd = [
            self.ffmpeg_binary,
            "-nostdin",
            "-v",
            "error",
            "-i",
            str(path),
            "-an",
            "-map",
            "0:v:0",
            "-frames:v",
            "1",
            "-c:v",
            "png",
            "-f",
            "image2pipe",
            "pipe:1",
        ]
        try:
            result = subprocess.run(  # nosec B603
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                timeout=self.timeout,
                check=True,
            )
        except FileNotFoundError as e:
            raise MetadataSourceError(
                f"ffmpeg executable not found: {self.ffmpeg_binary}"
            ) from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", "replace").strip()
            logger.warning("ffmpeg could not extract artwork from %s: %s", path, stderr)
            return None
        except subprocess.TimeoutExpired:
            logger.warning("ffmpeg timed out extracting artwork from %s", path)
            return None
        return result.stdout or None

    def read(self, path: Path, fields: FrozenSet[TagField]) -> SourceTags:
        """Read ``fields`` through ffprobe.

        The same probe supplies a ``from_metadata_source`` header, so the
        enricher need not probe the file a second time.

        Raises:
            TagParseError: If the file cannot be probed
        """
        values: Dict[TagField, str] = {}
        artwork = None
        try:
            with self.open(path) as media:
                for field in TEXT_FIELDS:
                    if field in fields:
                        values[field] = media.text(field)
                if TagField.ALBUM_ART in fields:
                    artwork = media.embedded_picture()
                header = stream_header(media)
        except MetadataSourceError as e:
            raise TagParseError(str(e)) from e
        return SourceTags(values=values, artwork=artwork, header=header)
