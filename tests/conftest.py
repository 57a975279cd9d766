"""Shared fixtures for tag reader tests."""

import tempfile
from pathlib import Path
from typing import Callable

import pytest

from helpers import write_tagged_mp3, write_tagged_wav


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_mp3() -> Callable[..., Path]:
    """Factory writing an ID3 tagged MP3 file."""
    return write_tagged_mp3


@pytest.fixture
def make_wav() -> Callable[..., Path]:
    """Factory writing a WAV file with an ID3 chunk."""
    return write_tagged_wav
