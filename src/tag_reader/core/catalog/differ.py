"""Catalog diffing between known identifiers and a fresh scan.

A caller keeps the identifiers it has already seen. Comparing them with the
identifiers of a new scan tells it:
- Files that are new since the last scan (to read and add, page by page)
- Identifiers that no longer exist (to remove)
- Identifiers present in both (nothing to do)

Nothing is persisted here; every comparison works on a fresh scan.
"""

import logging
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Dict, Iterable, List, Sequence, Set, TypeVar

from ...models import ScannedFile

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CatalogDiff:
    """Results of comparing known identifiers with a scan.

    Attributes:
        added: Scanned files whose identifier is not known, in scan order
        removed: Known identifiers missing from the scan, in caller order
        unchanged: Identifiers present in both
    """

    added: List[ScannedFile] = dataclass_field(default_factory=list)
    removed: List[str] = dataclass_field(default_factory=list)
    unchanged: Set[str] = dataclass_field(default_factory=set)

    def summary(self) -> Dict[str, int]:
        """Counts per category."""
        return {
            "added": len(self.added),
            "removed": len(self.removed),
            "unchanged": len(self.unchanged),
        }

    def __repr__(self) -> str:
        """String representation of diff results."""
        return (
            f"CatalogDiff(added={len(self.added)}, "
            f"removed={len(self.removed)}, "
            f"unchanged={len(self.unchanged)})"
        )


def paginate(items: Sequence[T], page_size: int, page_number: int) -> List[T]:
    """Slice one 1-based page out of ``items``.

    Page ``n`` covers ``[(n - 1) * page_size, min(n * page_size, len(items)))``.
    A page past the end, a non-positive page size or a non-positive page
    number yields an empty list.
    """
    if page_size <= 0 or page_number <= 0:
        return []
    start = (page_number - 1) * page_size
    if start >= len(items):
        return []
    end = min(page_number * page_size, len(items))
    return list(items[start:end])


class CatalogDiffer:
    """Computes additions and removals against a set of known identifiers."""

    def diff(
        self, known_ids: Iterable[str], scanned: Sequence[ScannedFile]
    ) -> CatalogDiff:
        """Compare ``known_ids`` with the identifiers of ``scanned``.

        Args:
            known_ids: Identifiers the caller already has
            scanned: Result of a fresh scan

        Returns:
            CatalogDiff with added files, removed identifiers and unchanged ids
        """
        known_list = _unique(known_ids)
        known = set(known_list)
        scanned_ids = {entry.internal_id for entry in scanned}

        added = [entry for entry in scanned if entry.internal_id not in known]
        removed = [
            internal_id for internal_id in known_list if internal_id not in scanned_ids
        ]
        unchanged = known & scanned_ids

        logger.debug(
            f"Catalog diff: {len(added)} added, "
            f"{len(removed)} removed, {len(unchanged)} unchanged"
        )
        return CatalogDiff(added=added, removed=removed, unchanged=unchanged)

    def new_entries(
        self, known_ids: Iterable[str], scanned: Sequence[ScannedFile]
    ) -> List[ScannedFile]:
        """Scanned files whose identifier is not in ``known_ids``."""
        known = set(known_ids)
        return [entry for entry in scanned if entry.internal_id not in known]

    def removed_ids(
        self, known_ids: Iterable[str], scanned: Sequence[ScannedFile]
    ) -> List[str]:
        """Identifiers from ``known_ids`` that the scan no longer contains."""
        scanned_ids = {entry.internal_id for entry in scanned}
        return [
            internal_id
            for internal_id in _unique(known_ids)
            if internal_id not in scanned_ids
        ]

    paginate = staticmethod(paginate)


def _unique(values: Iterable[str]) -> List[str]:
    """Drop duplicates while keeping first-seen order."""
    return list(dict.fromkeys(values))
