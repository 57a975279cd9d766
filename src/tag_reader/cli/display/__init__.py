"""CLI display and formatting utilities."""

from .formatters import (
    display_diff_summary,
    display_records,
    display_removed_ids,
    display_tags,
    print_json,
)

__all__ = [
    "display_diff_summary",
    "display_records",
    "display_removed_ids",
    "display_tags",
    "print_json",
]
