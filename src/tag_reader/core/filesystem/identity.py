"""Content-addressed identifiers for scanned audio files.

An identifier is the SHA-256 digest of the absolute path and the last
modified time in epoch milliseconds. It is a lexical identity: a file
rewritten in place with the same mtime keeps its identifier.
"""

import hashlib
import os
from pathlib import Path
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]


def compute_internal_id(path: PathLike, last_modified_ms: int) -> str:
    """Derive the stable identifier of ``path`` at ``last_modified_ms``.

    Pure function; the path is used exactly as given, so callers pass the
    absolute path.

    Args:
        path: Absolute path of the file
        last_modified_ms: Last modification time in epoch milliseconds

    Returns:
        64 character lowercase hex digest
    """
    payload = f"{os.fspath(path)}:{int(last_modified_ms)}"
    return hashlib.sha256(payload.encode("utf-8", "surrogateescape")).hexdigest()


def last_modified_ms(path: PathLike) -> int:
    """Last modification time of ``path`` in epoch milliseconds."""
    return os.stat(path).st_mtime_ns // 1_000_000


def internal_id_for(path: PathLike) -> str:
    """Identifier of an existing file, read from its current mtime."""
    absolute = Path(path).absolute()
    return compute_internal_id(absolute, last_modified_ms(absolute))
