"""Artwork module.

Deduplicates embedded artwork on disk by content hash.
"""

from .cache import ArtworkCache, image_extension

__all__ = ["ArtworkCache", "image_extension"]
