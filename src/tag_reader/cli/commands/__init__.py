"""CLI command modules."""

from .catalog import new_command, removed_command
from .read import scan_command, tags_command

__all__ = [
    "new_command",
    "removed_command",
    "scan_command",
    "tags_command",
]
