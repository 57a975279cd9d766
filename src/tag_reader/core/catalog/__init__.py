"""Catalog module.

Detects added and removed files between scans.
"""

from .differ import CatalogDiff, CatalogDiffer, paginate

__all__ = ["CatalogDiff", "CatalogDiffer", "paginate"]
