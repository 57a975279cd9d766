"""Tests for the CatalogDiffer."""

from pathlib import Path

import pytest

from tag_reader.core.catalog import CatalogDiffer, paginate
from tag_reader.models import ScannedFile


def scanned(name: str) -> ScannedFile:
    """Scan entry whose identifier is derived from its name."""
    return ScannedFile(
        path=Path("/music") / name, last_modified_ms=0, internal_id=f"id-{name}"
    )


@pytest.fixture
def differ():
    """Create a CatalogDiffer instance."""
    return CatalogDiffer()


@pytest.fixture
def scan():
    """A scan of five files."""
    return [scanned(f"{n}.mp3") for n in "abcde"]


class TestPaginate:
    """Test 1-based pagination."""

    def test_pages_cover_items_without_gaps(self):
        """Concatenated pages equal the input."""
        items = list(range(23))
        pages = [paginate(items, 5, n) for n in range(1, 6)]

        assert [len(p) for p in pages] == [5, 5, 5, 5, 3]
        assert sum(pages, []) == items

    def test_out_of_range_page(self):
        """A page past the end is empty."""
        assert paginate([1, 2, 3], 2, 3) == []
        assert paginate([], 10, 1) == []

    @pytest.mark.parametrize("size,number", [(0, 1), (-1, 1), (2, 0), (2, -1)])
    def test_invalid_arguments(self, size, number):
        """Non-positive sizes and page numbers give an empty page."""
        assert paginate([1, 2, 3], size, number) == []


class TestCatalogDiffer:
    """Test new and removed detection."""

    def test_new_entries(self, differ, scan):
        """Unknown identifiers are new, in scan order."""
        new = differ.new_entries(["id-b.mp3", "id-d.mp3"], scan)

        assert [e.file_name for e in new] == ["a.mp3", "c.mp3", "e.mp3"]

    def test_nothing_known(self, differ, scan):
        """With no known ids, every file is new."""
        assert differ.new_entries([], scan) == scan

    def test_removed_ids(self, differ, scan):
        """Known identifiers missing from the scan are removed."""
        removed = differ.removed_ids(["gone-2", "id-a.mp3", "gone-1", "gone-2"], scan)

        assert removed == ["gone-2", "gone-1"]

    def test_removed_with_empty_scan(self, differ):
        """An empty scan removes every known id."""
        assert differ.removed_ids(["x", "y"], []) == ["x", "y"]

    def test_diff(self, differ, scan):
        """diff() reports all three categories."""
        diff = differ.diff(["id-a.mp3", "id-b.mp3", "gone"], scan)

        assert [e.internal_id for e in diff.added] == [
            "id-c.mp3",
            "id-d.mp3",
            "id-e.mp3",
        ]
        assert diff.removed == ["gone"]
        assert diff.unchanged == {"id-a.mp3", "id-b.mp3"}
        assert diff.summary() == {"added": 3, "removed": 1, "unchanged": 2}
        assert "added=3" in repr(diff)

    def test_paginate_is_exposed(self, differ, scan):
        """The differ pages its results with the module function."""
        assert differ.paginate(scan, 2, 3) == scan[4:]
