"""Directory scanner that enumerates candidate audio files.

Walks the configured default roots plus any caller supplied roots and keeps
every regular file whose extension is supported. Roots that are missing or
not directories are skipped with a warning; they are never an error for the
caller.
"""

import logging
import os
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from ..errors import ScanIOError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: Tuple[str, ...] = (
    "mp3",
    "wav",
    "ogg",
    "flac",
    "m4a",
    "opus",
    "aif",
    "dsf",
    "wma",
)


@dataclass
class ScanStatistics:
    """Statistics from the last scan."""

    roots_scanned: int = 0
    roots_skipped: int = 0
    files_found: int = 0
    files_ignored: int = 0
    errors: List[str] = dataclass_field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary format.

        Returns:
            Dictionary with statistics and limited error list
        """
        return {
            "roots_scanned": self.roots_scanned,
            "roots_skipped": self.roots_skipped,
            "files_found": self.files_found,
            "files_ignored": self.files_ignored,
            "error_count": len(self.errors),
            "errors": self.errors[:10],  # Limit to first 10 errors
        }


class DirectoryScanner:
    """Recursively enumerates supported audio files under a set of roots."""

    def __init__(
        self,
        default_directories: Sequence[Union[str, Path]] = (),
        supported_extensions: Iterable[str] = SUPPORTED_EXTENSIONS,
    ) -> None:
        """Initialize directory scanner.

        Args:
            default_directories: Roots that are always scanned
            supported_extensions: Extensions to keep, with or without dot
        """
        self.default_directories = [Path(d).expanduser() for d in default_directories]
        self.supported_extensions = frozenset(
            ext.lower().lstrip(".") for ext in supported_extensions
        )
        self._stats = ScanStatistics()

    @property
    def stats(self) -> ScanStatistics:
        """Statistics of the most recent ``scan`` call."""
        return self._stats

    def is_supported(self, path: Union[str, Path]) -> bool:
        """Whether ``path`` has a supported extension (case-insensitive)."""
        suffix = os.path.splitext(os.fspath(path))[1]
        return suffix[1:].lower() in self.supported_extensions

    def resolve_roots(
        self, extra_directories: Optional[Iterable[Union[str, Path]]] = None
    ) -> List[Path]:
        """Effective roots: caller supplied roots followed by the defaults.

        Duplicates (after making paths absolute) are dropped.
        """
        roots: List[Path] = []
        seen: Set[Path] = set()
        candidates = [Path(d).expanduser() for d in extra_directories or ()]
        candidates.extend(self.default_directories)

        for candidate in candidates:
            absolute = candidate.absolute()
            if absolute in seen:
                continue
            seen.add(absolute)
            roots.append(absolute)
        return roots

    def scan(
        self, extra_directories: Optional[Iterable[Union[str, Path]]] = None
    ) -> List[Path]:
        """Find all supported audio files under the effective roots.

        Args:
            extra_directories: Roots scanned in addition to the defaults

        Returns:
            Sorted, de-duplicated list of absolute file paths
        """
        self._stats = ScanStatistics()
        roots = self.resolve_roots(extra_directories)
        logger.debug("Searching directories: %s", [str(root) for root in roots])

        found: Set[Path] = set()
        for root in roots:
            try:
                found.update(self.scan_root(root, strict=True))
            except ScanIOError as e:
                logger.warning("Skipping scan root: %s", e)
                self._stats.roots_skipped += 1
                self._stats.errors.append(str(e))
                continue
            self._stats.roots_scanned += 1

        self._stats.files_found = len(found)
        logger.info(
            "Total audio files found: %d (%d roots scanned, %d skipped)",
            len(found),
            self._stats.roots_scanned,
            self._stats.roots_skipped,
        )
        return sorted(found)

    def scan_root(self, root: Union[str, Path], strict: bool = False) -> List[Path]:
        """Find supported audio files below a single root.

        Args:
            root: Directory to walk
            strict: Raise ``ScanIOError`` for an invalid root instead of
                returning an empty list

        Returns:
            List of absolute file paths, in walk order

        Raises:
            ScanIOError: If ``strict`` and the root is missing or not a directory
        """
        root = Path(root).expanduser().absolute()
        if not root.is_dir():
            reason = "does not exist" if not root.exists() else "is not a directory"
            if strict:
                raise ScanIOError(f"Invalid directory path {root}: {reason}")
            logger.warning("Invalid directory path: %s (%s)", root, reason)
            return []

        def _on_error(error: OSError) -> None:
            logger.warning("Cannot read directory %s: %s", error.filename, error)
            self._stats.errors.append(f"{error.filename}: {error.strerror}")

        audio_files: List[Path] = []
        for dirpath, _dirnames, filenames in os.walk(root, onerror=_on_error):
            for name in filenames:
                file_path = Path(dirpath) / name
                if not self.is_supported(name):
                    self._stats.files_ignored += 1
                    continue
                if not file_path.is_file():
                    continue
                logger.debug("Found audio file: %s", file_path)
                audio_files.append(file_path)

        return audio_files
