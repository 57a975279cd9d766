"""Audio file builders shared by the tests."""

import wave
from pathlib import Path
from typing import Optional

from mutagen.id3 import APIC, COMM, ID3, TALB, TCON, TDRC, TIT2, TPE1, TRCK
from mutagen.wave import WAVE

# Minimal JPEG and PNG payloads; only the magic bytes matter to the cache
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00\x10JFIF\x00" + b"\x01" * 64 + b"\xff\xd9"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

# MPEG-1 Layer III, 128 kbit/s, 44.1 kHz, joint stereo, no padding
MP3_FRAME = b"\xff\xfb\x90\x64" + b"\x00" * 413


def write_mp3_frames(path: Path, frame_count: int = 50) -> Path:
    """Write a tag-less stream of silent MP3 frames."""
    path.write_bytes(MP3_FRAME * frame_count)
    return path


def write_wav(path: Path, seconds: float = 1.0, sample_rate: int = 8000) -> Path:
    """Write a mono 16-bit silent WAV file."""
    with wave.open(str(path), "wb") as handle:
        handle.setnchannels(1)
        handle.setsampwidth(2)
        handle.setframerate(sample_rate)
        handle.writeframes(b"\x00\x00" * int(sample_rate * seconds))
    return path


def id3_frames(
    title: str = "",
    artist: str = "",
    album: str = "",
    year: str = "",
    genre: str = "",
    track: str = "",
    comment: str = "",
    artwork: Optional[bytes] = None,
) -> list:
    """ID3v2.4 frames for the given values; empty values are left out."""
    frames = []
    if title:
        frames.append(TIT2(encoding=3, text=[title]))
    if artist:
        frames.append(TPE1(encoding=3, text=[artist]))
    if album:
        frames.append(TALB(encoding=3, text=[album]))
    if year:
        frames.append(TDRC(encoding=3, text=[year]))
    if genre:
        frames.append(TCON(encoding=3, text=[genre]))
    if track:
        frames.append(TRCK(encoding=3, text=[track]))
    if comment:
        frames.append(COMM(encoding=3, lang="eng", desc="", text=[comment]))
    if artwork:
        frames.append(
            APIC(encoding=3, mime="image/jpeg", type=3, desc="Cover", data=artwork)
        )
    return frames


def write_tagged_mp3(path: Path, **tags) -> Path:
    """Write an MP3 file carrying an ID3 tag with ``tags``."""
    write_mp3_frames(path)
    frames = id3_frames(**tags)
    if frames:
        id3 = ID3()
        for frame in frames:
            id3.add(frame)
        id3.save(str(path))
    return path


def write_tagged_wav(path: Path, **tags) -> Path:
    """Write a WAV file carrying an ID3 chunk with ``tags``."""
    write_wav(path)
    frames = id3_frames(**tags)
    if frames:
        audio = WAVE(str(path))
        audio.add_tags()
        for frame in frames:
            audio.tags.add(frame)
        audio.save()
    return path
