"""Catalog commands comparing known identifiers with a fresh scan."""

import logging
from pathlib import Path
from typing import Tuple

import click

from ...core.errors import CacheWriteError
from ...service import TagReaderService
from ..display import (
    display_diff_summary,
    display_records,
    display_removed_ids,
    print_json,
)
from .options import (
    cache_images_option,
    directory_option,
    disable_mapping,
    disable_option,
    json_option,
    known_ids_option,
    load_known_ids,
    page_options,
)

logger = logging.getLogger(__name__)


@click.command("new")
@known_ids_option
@directory_option
@page_options
@cache_images_option
@disable_option
@json_option
@click.pass_obj
def new_command(
    service: TagReaderService,
    known_ids_file: Path,
    directories: Tuple[Path, ...],
    page_size: int,
    page_number: int,
    cache_images: bool,
    disabled: Tuple[str, ...],
    as_json: bool,
) -> None:
    """Read one page of files that are not in the known identifiers.

    Examples:
        tag-reader new --known-ids ids.json --page-size 100
    """
    known_ids = load_known_ids(known_ids_file)
    if directories:
        service.set_custom_directories(directories)

    try:
        records = service.read_new_audio_files(
            known_ids,
            page_size,
            page_number,
            cache_images=cache_images,
            disable_fields=disable_mapping(disabled),
        )
    except CacheWriteError as e:
        logger.error("Reading new files failed: %s", e)
        raise click.ClickException(str(e))

    if as_json:
        print_json([record.to_dict() for record in records])
        return

    display_diff_summary(service.diff(known_ids))
    display_records(records, page_size, page_number)


@click.command("removed")
@known_ids_option
@directory_option
@json_option
@click.pass_obj
def removed_command(
    service: TagReaderService,
    known_ids_file: Path,
    directories: Tuple[Path, ...],
    as_json: bool,
) -> None:
    """List known identifiers whose files no longer exist.

    Examples:
        tag-reader removed --known-ids ids.txt --json
    """
    known_ids = load_known_ids(known_ids_file)
    if directories:
        service.set_custom_directories(directories)

    removed = service.get_removed_audio_files(known_ids)
    logger.debug("%d of %d known ids removed", len(removed), len(known_ids))

    if as_json:
        print_json(removed)
    else:
        display_removed_ids(removed)
