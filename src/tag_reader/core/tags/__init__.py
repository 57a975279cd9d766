"""Tags module.

Tag extraction through the mutagen and ffprobe backends, routing between
them, and technical metadata enrichment.
"""

from .base import AudioHeader, SourceTags, TagSource
from .enricher import TechnicalMetadataEnricher
from .ffprobe_backend import FfprobeMetadataBackend, RetrievedMedia
from .mutagen_backend import MutagenTagBackend
from .router import FALLBACK_EXTENSIONS, TagBackendRouter, encode_artwork, uses_fallback

__all__ = [
    "AudioHeader",
    "SourceTags",
    "TagSource",
    "MutagenTagBackend",
    "FfprobeMetadataBackend",
    "RetrievedMedia",
    "TagBackendRouter",
    "TechnicalMetadataEnricher",
    "FALLBACK_EXTENSIONS",
    "encode_artwork",
    "uses_fallback",
]
