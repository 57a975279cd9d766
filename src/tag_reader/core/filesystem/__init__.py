"""Filesystem module.

Handles enumerating local audio files and deriving their identifiers.
"""

from .identity import compute_internal_id, internal_id_for, last_modified_ms
from .locators import locator_for, path_from_locator
from .scanner import SUPPORTED_EXTENSIONS, DirectoryScanner, ScanStatistics

__all__ = [
    "DirectoryScanner",
    "ScanStatistics",
    "SUPPORTED_EXTENSIONS",
    "compute_internal_id",
    "internal_id_for",
    "last_modified_ms",
    "locator_for",
    "path_from_locator",
]
