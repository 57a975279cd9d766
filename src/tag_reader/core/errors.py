"""Error taxonomy for the tag reader core.

Only ``CacheWriteError`` is meant to reach callers of the service. The other
errors are raised by individual components and recovered one level up so a
single unreadable file never aborts a batch scan.
"""


class TagReaderError(Exception):
    """Base class for tag reader errors."""

    pass


class ScanIOError(TagReaderError):
    """A scan root is missing, not a directory, or cannot be listed."""

    pass


class TagParseError(TagReaderError):
    """A tag backend could not open or parse an audio file."""

    pass


class MetadataSourceError(TagReaderError):
    """The secondary metadata source failed to open or probe a file."""

    pass


class CacheWriteError(TagReaderError):
    """The artwork cache could not persist an image."""

    pass
