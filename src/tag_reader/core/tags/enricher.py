"""Technical metadata enrichment.

Fills ``bitrate``, ``sampleRate``, ``channels`` and ``duration`` after tag
extraction. Values start from the primary backend's audio header; the
secondary metadata source then overrides duration and bitrate, and the
sample rate when it reports one. Channels only ever come from the header.
A header that the secondary source produced itself (the Opus route) is
used as is, without a second probe.
"""

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from ...models import TECHNICAL_FIELDS, AudioTags, DisableFieldSet, TagField
from ..errors import MetadataSourceError
from .base import AudioHeader
from .ffprobe_backend import FfprobeMetadataBackend

logger = logging.getLogger(__name__)

# Fields the secondary source may override
_SECONDARY_FIELDS = (TagField.BITRATE, TagField.SAMPLE_RATE, TagField.DURATION)


def _as_text(value: Optional[int]) -> str:
    return str(value) if value is not None else ""


class TechnicalMetadataEnricher:
    """Merges header and secondary-source technical fields into a tag map."""

    def __init__(
        self, metadata_source: Optional[FfprobeMetadataBackend] = None
    ) -> None:
        """Initialize the enricher.

        Args:
            metadata_source: Secondary source; None means header values only
        """
        self.metadata_source = metadata_source

    def enrich(
        self,
        path: Union[str, Path],
        tags: AudioTags,
        header: Optional[AudioHeader] = None,
        disable_fields: Union[DisableFieldSet, Mapping[str, bool], None] = None,
    ) -> AudioTags:
        """Return ``tags`` with the technical fields filled in.

        Args:
            path: File the tags were read from
            tags: Tag map produced by the router
            header: Primary backend audio header, if any
            disable_fields: Fields to leave empty

        Returns:
            New AudioTags; secondary source failures keep the prior values
        """
        disabled = DisableFieldSet.coerce(disable_fields)
        values: Dict[TagField, str] = {
            field: tags.get(field) for field in TECHNICAL_FIELDS
        }

        if header is not None:
            for field, value in (
                (TagField.BITRATE, header.bitrate),
                (TagField.SAMPLE_RATE, header.sample_rate),
                (TagField.CHANNELS, header.channels),
                (TagField.DURATION, header.duration_ms),
            ):
                if value is not None:
                    values[field] = str(value)

        already_probed = header is not None and header.from_metadata_source
        if (
            self.metadata_source is not None
            and not already_probed
            and not disabled.covers(_SECONDARY_FIELDS)
        ):
            values.update(
                self._read_secondary(self.metadata_source, Path(path), disabled)
            )

        for field in TECHNICAL_FIELDS:
            if disabled.is_disabled(field):
                values[field] = ""
        return tags.merged(values)

    def _read_secondary(
        self, source: FfprobeMetadataBackend, path: Path, disabled: DisableFieldSet
    ) -> Dict[TagField, str]:
        found: Dict[TagField, str] = {}
        try:
            with source.open(path) as media:
                if disabled.is_enabled(TagField.DURATION) and media.duration_ms:
                    found[TagField.DURATION] = _as_text(media.duration_ms)
                if disabled.is_enabled(TagField.BITRATE) and media.bitrate:
                    found[TagField.BITRATE] = _as_text(media.bitrate)
                if disabled.is_enabled(TagField.SAMPLE_RATE) and media.sample_rate:
                    found[TagField.SAMPLE_RATE] = _as_text(media.sample_rate)
        except MetadataSourceError as e:
            logger.warning("Could not read technical metadata for %s: %s", path, e)
            return {}
        return found
