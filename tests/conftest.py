"""Shared pytest fixtures for all tests."""

import random

import pytest
from cli.config import Config


@pytest.fixture(autouse=True)
def no_size_limit_override(monkeypatch):
    """Keep a REDSPLIT_SIZE_LIMIT from the calling shell out of the tests."""
    monkeypatch.delenv('REDSPLIT_SIZE_LIMIT', raising=False)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .redsplit directory
    """
    config_dir = tmp_path / '.redsplit'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a 250-byte file of non-repeating content.

    Returns:
        Path to the sample file
    """
    file_path = tmp_path / 'source' / 'data.bin'
    file_path.parent.mkdir()
    file_path.write_bytes(bytes(range(250)))
    return file_path


@pytest.fixture
def random_file(tmp_path):
    """
    Create a 10000-byte file of pseudo-random content.

    Returns:
        Path to the random file
    """
    file_path = tmp_path / 'source' / 'random.bin'
    file_path.parent.mkdir(exist_ok=True)
    file_path.write_bytes(random.Random(1234).randbytes(10_000))
    return file_path


@pytest.fixture
def compressible_file(tmp_path):
    """
    Create a highly compressible text file.

    Returns:
        Path to the text file
    """
    file_path = tmp_path / 'source' / 'log.txt'
    file_path.parent.mkdir(exist_ok=True)
    file_path.write_bytes(b"2026-10-18 INFO request handled in 12ms\n" * 500)
    return file_path


@pytest.fixture
def empty_file(tmp_path):
    """
    Create an empty file.

    Returns:
        Path to the zero-byte file
    """
    file_path = tmp_path / 'source' / 'empty.dat'
    file_path.parent.mkdir(exist_ok=True)
    file_path.write_bytes(b"")
    return file_path


@pytest.fixture
def multiple_sample_files(tmp_path):
    """
    Create multiple sample files for testing batch operations.

    Returns:
        List of Paths to sample files
    """
    directory = tmp_path / 'batch'
    directory.mkdir()
    files = []
    for i in range(3):
        file_path = directory / f'part{i}.bin'
        file_path.write_bytes(bytes([i]) * (100 * (i + 1) + 7))
        files.append(file_path)
    return files


@pytest.fixture
def output_dir(tmp_path):
    """Directory that receives parts; not created up front."""
    return tmp_path / 'out'


@pytest.fixture
def restore_dir(tmp_path):
    """Directory that receives restored files; not created up front."""
    return tmp_path / 'restored'


class RecordingReporter:
    """Progress reporter that stores every event."""

    def __init__(self):
        self.events = []

    def report(self, bytes_processed, bytes_total):
        self.events.append((bytes_processed, bytes_total))


@pytest.fixture
def recorder():
    return RecordingReporter()
