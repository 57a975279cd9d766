"""Audio Tag Reader.

Scans local directories for audio files and reads their tags, technical
metadata and embedded artwork. Callers can page through the results and ask
which files were added or removed since a previous scan.
"""

__version__ = "1.0.0"
__author__ = "Anton"
__email__ = ""

from .config import Config
from .models import AudioFileRecord, AudioTags, DisableFieldSet, ScannedFile, TagField
from .service import TagReaderService

__all__ = [
    "AudioFileRecord",
    "AudioTags",
    "Config",
    "DisableFieldSet",
    "ScannedFile",
    "TagField",
    "TagReaderService",
]
