"""Tag reader service.

Ties the scanner, the tag backends, the enricher, the artwork cache and the
catalog differ together behind the operations a host application calls.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from .config import Config, get_config
from .core.artwork import ArtworkCache
from .core.catalog import CatalogDiff, CatalogDiffer, paginate
from .core.errors import CacheWriteError
from .core.filesystem import (
    DirectoryScanner,
    compute_internal_id,
    last_modified_ms,
    path_from_locator,
)
from .core.tags import (
    FfprobeMetadataBackend,
    MutagenTagBackend,
    TagBackendRouter,
    TechnicalMetadataEnricher,
)
from .models import AudioFileRecord, AudioTags, DisableFieldSet, ScannedFile

logger = logging.getLogger(__name__)

DisableFields = Union[DisableFieldSet, Mapping[str, bool], None]


class TagReaderService:
    """Operation surface for scanning audio files and reading their tags."""

    def __init__(
        self,
        config: Optional[Config] = None,
        *,
        scanner: Optional[DirectoryScanner] = None,
        router: Optional[TagBackendRouter] = None,
        enricher: Optional[TechnicalMetadataEnricher] = None,
        artwork_cache: Optional[ArtworkCache] = None,
        differ: Optional[CatalogDiffer] = None,
    ) -> None:
        """Initialize the service.

        Collaborators not passed in are built from ``config``.

        Args:
            config: Configuration; defaults to ``get_config()``
            scanner: Directory scanner
            router: Tag backend router
            enricher: Technical metadata enricher
            artwork_cache: Artwork cache shared by every call
            differ: Catalog differ
        """
        self.config = config or get_config()
        self.artwork_cache = artwork_cache or ArtworkCache(self.config.cache_directory)

        metadata_source: Optional[FfprobeMetadataBackend] = None
        if router is None or enricher is None:
            metadata_source = FfprobeMetadataBackend(
                ffprobe_binary=self.config.ffprobe_binary,
                ffmpeg_binary=self.config.ffmpeg_binary,
                timeout=self.config.probe_timeout,
            )

        self.router = router or TagBackendRouter(
            primary=MutagenTagBackend(),
            fallback=metadata_source,
            artwork_cache=self.artwork_cache,
        )
        self.enricher = enricher or TechnicalMetadataEnricher(metadata_source)
        self.scanner = scanner or DirectoryScanner(
            default_directories=self.config.default_directories,
            supported_extensions=self.config.supported_extensions,
        )
        self.differ = differ or CatalogDiffer()
        self._custom_directories: List[Path] = []

    @property
    def directories(self) -> List[Path]:
        """Effective scan roots: custom directories followed by the defaults."""
        return self.scanner.resolve_roots(self._custom_directories)

    def set_custom_directories(self, paths: Iterable[Union[str, Path]]) -> None:
        """Replace the extra roots scanned on top of the defaults."""
        self._custom_directories = [Path(p).expanduser() for p in paths]
        logger.info(
            "Custom directories set: %s", [str(p) for p in self._custom_directories]
        )

    def scan(self) -> List[ScannedFile]:
        """Enumerate supported files with their identifiers, without tags.

        Files that disappear between the walk and the stat are skipped.
        """
        entries: List[ScannedFile] = []
        for path in self.scanner.scan(self._custom_directories):
            try:
                modified = last_modified_ms(path)
            except OSError as e:
                logger.warning("Skipping %s: %s", path, e)
                continue
            entries.append(
                ScannedFile(
                    path=path,
                    last_modified_ms=modified,
                    internal_id=compute_internal_id(path, modified),
                )
            )
        return entries

    def read_tags(
        self,
        locator: Union[str, Path],
        disable_fields: DisableFields = None,
        cache_images: bool = False,
    ) -> AudioTags:
        """Read the full tag map of one file.

        Args:
            locator: ``file://`` URI or filesystem path
            disable_fields: Fields to leave empty
            cache_images: Return an artwork cache locator instead of base64

        Returns:
            AudioTags with every field present

        Raises:
            CacheWriteError: If artwork caching was requested and failed
        """
        path = path_from_locator(locator)
        disabled = DisableFieldSet.coerce(disable_fields)
        tags, header = self.router.read(path, disabled, cache_images)
        return self.enricher.enrich(path, tags, header, disabled)

    def read_audio_files(
        self,
        page_size: int,
        page_number: int,
        cache_images: bool = False,
        disable_fields: DisableFields = None,
    ) -> List[AudioFileRecord]:
        """Read one 1-based page of records from a fresh scan."""
        page = paginate(self.scan(), page_size, page_number)
        return self._build_records(page, disable_fields, cache_images)

    def read_new_audio_files(
        self,
        known_ids: Iterable[str],
        page_size: int,
        page_number: int,
        cache_images: bool = False,
        disable_fields: DisableFields = None,
    ) -> List[AudioFileRecord]:
        """Read one page of the files whose identifier is not in ``known_ids``."""
        new_entries = self.differ.new_entries(known_ids, self.scan())
        page = paginate(new_entries, page_size, page_number)
        return self._build_records(page, disable_fields, cache_images)

    def get_removed_audio_files(self, known_ids: Iterable[str]) -> List[str]:
        """Identifiers from ``known_ids`` that a fresh scan no longer finds."""
        return self.differ.removed_ids(known_ids, self.scan())

    def diff(self, known_ids: Iterable[str]) -> CatalogDiff:
        """Full comparison of ``known_ids`` with a fresh scan."""
        return self.differ.diff(known_ids, self.scan())

    def _build_record(
        self, entry: ScannedFile, disabled: DisableFieldSet, cache_images: bool
    ) -> AudioFileRecord:
        tags = self.read_tags(entry.path, disabled, cache_images)
        return AudioFileRecord.from_scanned(entry, tags)

    def _build_records(
        self,
        entries: Sequence[ScannedFile],
        disable_fields: DisableFields,
        cache_images: bool,
    ) -> List[AudioFileRecord]:
        """Materialize records for ``entries`` on a worker pool.

        Record order is completion order. A file that fails unexpectedly is
        logged and kept with empty tags; a cache write failure fails the
        whole call.
        """
        if not entries:
            return []

        disabled = DisableFieldSet.coerce(disable_fields)
        workers = min(self.config.max_workers, len(entries))
        records: List[AudioFileRecord] = []

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(
                    self._build_record, entry, disabled, cache_images
                ): entry
                for entry in entries
            }
            for future in as_completed(futures):
                entry = futures[future]
                try:
                    records.append(future.result())
                except CacheWriteError:
                    for pending in futures:
                        pending.cancel()
                    raise
                except Exception as e:
                    logger.error("Failed to read %s: %s", entry.path, e)
                    records.append(AudioFileRecord.from_scanned(entry, AudioTags()))

        logger.debug("Built %d records", len(records))
        return records
