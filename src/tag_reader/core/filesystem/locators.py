"""Conversion between file locators (``file://`` URIs) and paths."""

from pathlib import Path
from typing import Union
from urllib.parse import urlparse
from urllib.request import url2pathname


def path_from_locator(locator: Union[str, Path]) -> Path:
    """Resolve a ``file://`` URI or a plain filesystem path to a Path.

    Raises:
        ValueError: If the locator uses a scheme other than ``file``
    """
    if isinstance(locator, Path):
        return locator

    parsed = urlparse(locator)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    # Windows drive letters parse as a one letter scheme
    if parsed.scheme and len(parsed.scheme) > 1:
        raise ValueError(f"Unsupported locator scheme: {parsed.scheme}")
    return Path(locator)


def locator_for(path: Union[str, Path]) -> str:
    """``file://`` URI of ``path`` (made absolute first)."""
    return Path(path).absolute().as_uri()
