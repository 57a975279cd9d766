"""Configuration management for the tag reader."""

import os
from pathlib import Path
from typing import List, Tuple

from dotenv import load_dotenv

from .core.filesystem.scanner import SUPPORTED_EXTENSIONS

# Load .env file from config directory or project root
_config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if _config_env.exists():
    load_dotenv(_config_env)
else:
    # Fallback to project root .env
    load_dotenv()


def _default_directories() -> List[Path]:
    """Music and Downloads folders of the current user."""
    return [Path.home() / "Music", Path.home() / "Downloads"]


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Scan roots that are always searched
        directories = os.getenv("TAG_READER_DEFAULT_DIRECTORIES")
        if directories is not None:
            self.default_directories = [
                Path(entry).expanduser()
                for entry in directories.split(os.pathsep)
                if entry.strip()
            ]
        else:
            self.default_directories = _default_directories()

        self.supported_extensions: Tuple[str, ...] = SUPPORTED_EXTENSIONS

        # Artwork cache
        self.cache_directory = Path(
            os.getenv(
                "TAG_READER_CACHE_DIRECTORY",
                str(Path.home() / ".cache" / "tag-reader" / "artwork"),
            )
        ).expanduser()

        # Secondary metadata source
        self.ffprobe_binary = os.getenv("TAG_READER_FFPROBE_BINARY", "ffprobe")
        self.ffmpeg_binary = os.getenv("TAG_READER_FFMPEG_BINARY", "ffmpeg")
        self.probe_timeout = float(os.getenv("TAG_READER_PROBE_TIMEOUT", "30"))

        # Worker pool used to materialize a page of records
        self.max_workers = max(
            1, int(os.getenv("TAG_READER_MAX_WORKERS", str(os.cpu_count() or 4)))
        )


def get_config() -> Config:
    """Get application configuration."""
    return Config()
