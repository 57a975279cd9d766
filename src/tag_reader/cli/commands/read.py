"""Tag reading commands.

``tags`` reads a single file; ``scan`` reads one page of every supported
file under the scan roots.
"""

import logging
from pathlib import Path
from typing import Tuple

import click

from ...core.errors import CacheWriteError
from ...service import TagReaderService
from ..display import display_records, display_tags, print_json
from .options import (
    cache_images_option,
    directory_option,
    disable_mapping,
    disable_option,
    json_option,
    page_options,
)

logger = logging.getLogger(__name__)


@click.command("tags")
@click.argument("locator")
@cache_images_option
@disable_option
@json_option
@click.pass_obj
def tags_command(
    service: TagReaderService,
    locator: str,
    cache_images: bool,
    disabled: Tuple[str, ...],
    as_json: bool,
) -> None:
    """Read the tags of a single file.

    LOCATOR is a file path or a file:// URI.

    Examples:
        tag-reader tags ~/Music/song.mp3

        tag-reader tags song.flac --disable albumArt --json
    """
    try:
        tags = service.read_tags(
            locator, disable_fields=disable_mapping(disabled), cache_images=cache_images
        )
    except (CacheWriteError, ValueError) as e:
        logger.error("Reading tags failed: %s", e)
        raise click.ClickException(str(e))

    if as_json:
        print_json(tags.to_dict())
    else:
        display_tags(tags, title=Path(locator).name)


@click.command("scan")
@directory_option
@page_options
@cache_images_option
@disable_option
@json_option
@click.pass_obj
def scan_command(
    service: TagReaderService,
    directories: Tuple[Path, ...],
    page_size: int,
    page_number: int,
    cache_images: bool,
    disabled: Tuple[str, ...],
    as_json: bool,
) -> None:
    """Read one page of audio files found under the scan roots.

    Examples:
        tag-reader scan --page-size 20 --page 2

        tag-reader scan --dir /mnt/music --cache-images --json
    """
    if directories:
        service.set_custom_directories(directories)

    try:
        records = service.read_audio_files(
            page_size,
            page_number,
            cache_images=cache_images,
            disable_fields=disable_mapping(disabled),
        )
    except CacheWriteError as e:
        logger.error("Scan failed: %s", e)
        raise click.ClickException(str(e))

    if as_json:
        print_json([record.to_dict() for record in records])
    else:
        display_records(records, page_size, page_number)
