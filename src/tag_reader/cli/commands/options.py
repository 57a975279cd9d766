"""Shared option helpers for CLI commands."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List

import click

from ...models import TagField

FIELD_NAMES = [field.value for field in TagField]


def disable_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """``--disable FIELD`` option, repeatable."""
    return click.option(
        "--disable",
        "disabled",
        multiple=True,
        type=click.Choice(FIELD_NAMES),
        help="Leave this field empty (repeatable)",
    )(func)


def cache_images_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """``--cache-images`` flag."""
    return click.option(
        "--cache-images",
        is_flag=True,
        help="Store artwork in the artwork cache and return its file URI",
    )(func)


def json_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """``--json`` flag."""
    return click.option(
        "--json", "as_json", is_flag=True, help="Print JSON instead of tables"
    )(func)


def directory_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """``--dir DIR`` option, repeatable."""
    return click.option(
        "--dir",
        "directories",
        multiple=True,
        type=click.Path(file_okay=False, path_type=Path),
        help="Extra directory to scan on top of the defaults (repeatable)",
    )(func)


def page_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """``--page-size`` and ``--page`` options."""
    func = click.option(
        "--page",
        "page_number",
        type=int,
        default=1,
        show_default=True,
        help="1-based page number",
    )(func)
    return click.option(
        "--page-size",
        type=int,
        default=50,
        show_default=True,
        help="Number of files per page",
    )(func)


def known_ids_option(func: Callable[..., Any]) -> Callable[..., Any]:
    """``--known-ids FILE`` option."""
    return click.option(
        "--known-ids",
        "known_ids_file",
        required=True,
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="File with known identifiers (JSON list or one per line)",
    )(func)


def disable_mapping(disabled: Iterable[str]) -> Dict[str, bool]:
    """Turn repeated ``--disable`` values into a field -> flag mapping."""
    return {name: True for name in disabled}


def load_known_ids(path: Path) -> List[str]:
    """Read known identifiers from a JSON list or a newline separated file.

    Raises:
        click.BadParameter: If the file is not UTF-8 text or holds JSON that
            is not a list of strings
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise click.BadParameter(
            f"{path} is not UTF-8 text: {e}", param_hint="--known-ids"
        )
    stripped = text.strip()
    if stripped.startswith("["):
        try:
            data = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise click.BadParameter(
                f"Invalid JSON in {path}: {e}", param_hint="--known-ids"
            )
        if not all(isinstance(item, str) for item in data):
            raise click.BadParameter(
                f"{path} must contain a list of strings", param_hint="--known-ids"
            )
        return list(data)
    return [line.strip() for line in text.splitlines() if line.strip()]
