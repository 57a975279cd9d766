"""Tag backend router.

Chooses the tag source from the file extension alone (Opus goes to the
fallback backend, everything else to mutagen), applies per-field
suppression and turns embedded artwork into either inline base64 or an
artwork cache locator.
"""

import base64
import logging
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Optional, Tuple, Union

from ...models import (
    TECHNICAL_FIELDS,
    TEXT_FIELDS,
    AudioTags,
    DisableFieldSet,
    TagField,
)
from ..artwork import ArtworkCache
from ..errors import CacheWriteError, TagParseError
from .base import AudioHeader, TagSource

logger = logging.getLogger(__name__)

FALLBACK_EXTENSIONS: FrozenSet[str] = frozenset({"opus"})

DisableFields = Union[DisableFieldSet, Mapping[str, bool], None]


def uses_fallback(extension: str) -> bool:
    """Whether files with ``extension`` are read by the fallback backend."""
    return extension.lower().lstrip(".") in FALLBACK_EXTENSIONS


def encode_artwork(data: bytes) -> str:
    """Inline base64 form of an image, without line breaks."""
    return base64.b64encode(data).decode("ascii")


class TagBackendRouter:
    """Routes tag extraction to the primary or the fallback backend."""

    def __init__(
        self,
        primary: TagSource,
        fallback: TagSource,
        artwork_cache: Optional[ArtworkCache] = None,
    ) -> None:
        """Initialize the router.

        Args:
            primary: Backend for every extension except Opus
            fallback: Backend for Opus
            artwork_cache: Cache used when callers ask for cached images
        """
        self.primary = primary
        self.fallback = fallback
        self.artwork_cache = artwork_cache

    def source_for(self, extension: str) -> TagSource:
        """Tag source that handles ``extension``."""
        return self.fallback if uses_fallback(extension) else self.primary

    def extract(
        self,
        path: Union[str, Path],
        disable_fields: DisableFields = None,
        cache_images: bool = False,
    ) -> AudioTags:
        """Extract the tag map of ``path`` (technical fields left empty)."""
        tags, _header = self.read(path, disable_fields, cache_images)
        return tags

    def read(
        self,
        path: Union[str, Path],
        disable_fields: DisableFields = None,
        cache_images: bool = False,
    ) -> Tuple[AudioTags, Optional[AudioHeader]]:
        """Extract the tag map of ``path`` and the primary audio header.

        A file the backend cannot parse yields an all-empty tag map.

        Args:
            path: Audio file to read
            disable_fields: Fields to leave empty without reading them
            cache_images: Store artwork in the artwork cache and return its
                locator instead of inline base64

        Returns:
            Tuple of (tags, header); on the fallback route the header holds
            the probe's own technical values, and it is None when the file
            could not be parsed

        Raises:
            CacheWriteError: If artwork caching was requested and failed
        """
        path = Path(path)
        disabled = DisableFieldSet.coerce(disable_fields)
        source = self.source_for(path.suffix)
        wanted = disabled.enabled(source.supported_fields)
        want_header = source.provides_header and not disabled.covers(TECHNICAL_FIELDS)

        if not wanted and not want_header:
            logger.debug("All fields served by %s disabled for %s", source.name, path)
            return AudioTags(), None

        try:
            result = source.read(path, wanted)
        except TagParseError as e:
            logger.warning("Error reading tags from %s: %s", path, e)
            return AudioTags(), None

        values: Dict[str, str] = {}
        for field in TEXT_FIELDS:
            if field in wanted:
                values[field.attribute] = result.values.get(field) or ""

        if TagField.ALBUM_ART in wanted and result.artwork:
            values[TagField.ALBUM_ART.attribute] = self._artwork_value(
                result.artwork,
                album=values.get(TagField.ALBUM.attribute, ""),
                artist=values.get(TagField.ARTIST.attribute, ""),
                cache_images=cache_images,
            )

        return AudioTags(**values), result.header

    def _artwork_value(
        self, data: bytes, album: str, artist: str, cache_images: bool
    ) -> str:
        if not cache_images:
            return encode_artwork(data)
        if self.artwork_cache is None:
            raise CacheWriteError(
                "Artwork caching requested but no cache is configured"
            )
        return self.artwork_cache.store(data, album=album, artist=artist)
