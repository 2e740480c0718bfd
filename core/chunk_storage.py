"""Manages physical chunk files on disk: naming, read/write and gzip transform."""

import gzip
import os
import tempfile
import threading
import zlib
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Iterator, Set

from common.constants import (
    CHUNK_NUMBER_WIDTH,
    COMPRESSED_CHUNK_SUFFIX,
    GZIP_COMPRESSION_LEVEL,
    MANIFEST_SUFFIX,
    PARTIAL_SUFFIX,
    PARTS_DIR_SUFFIX,
)
from common.exceptions import InvalidConfigError, StorageIOError

_claimed_targets: Set[str] = set()
_claims_lock = threading.Lock()


def parts_dir_name(original_filename: str) -> str:
    """
    Name of the subdirectory holding one file's chunks and manifest.

    Args:
        original_filename: Base name of the source file

    Returns:
        Directory name (e.g., "movie.mkv_parts")
    """
    return f"{original_filename}{PARTS_DIR_SUFFIX}"


def chunk_file_name(original_filename: str, index: int, compressed: bool) -> str:
    """
    Name of the chunk file for a 0-based sequence index.

    Numbering on disk is 1-based and zero-padded (``movie.mkv-001``), with a
    ``.gz`` suffix for compressed chunks.
    """
    name = f"{original_filename}-{index + 1:0{CHUNK_NUMBER_WIDTH}d}"
    if compressed:
        name += COMPRESSED_CHUNK_SUFFIX
    return name


def chunk_relative_path(original_filename: str, index: int, compressed: bool) -> str:
    """Path recorded in the manifest, relative to the chunk root directory."""
    return str(PurePosixPath(parts_dir_name(original_filename), chunk_file_name(original_filename, index, compressed)))


def manifest_file_name(original_filename: str) -> str:
    return f"{original_filename}{MANIFEST_SUFFIX}"


def resolve_chunk_path(chunk_root: Path, relative_path: str) -> Path:
    """
    Join a manifest-recorded relative path onto the chunk root directory.

    Args:
        chunk_root: Directory the manifest paths are relative to
        relative_path: POSIX-style path from the manifest

    Returns:
        Absolute-or-relative filesystem path of the chunk
    """
    return Path(chunk_root).joinpath(*PurePosixPath(relative_path).parts)


def is_safe_relative_path(relative_path: str) -> bool:
    """True if the path stays inside the chunk root once joined."""
    if not relative_path or "\\" in relative_path:
        return False
    pure = PurePosixPath(relative_path)
    if pure.is_absolute():
        return False
    return all(part not in ("..", "") for part in pure.parts)


@contextmanager
def claim_target(target: Path, operation: str) -> Iterator[None]:
    """
    Reserve an output location for one pipeline of this process.

    Split claims its parts directory and restore its final file, so two
    concurrent pipelines never write the same chunk files or output.

    Raises:
        InvalidConfigError: If another pipeline holds the claim
    """
    key = os.path.normcase(os.path.abspath(target))
    with _claims_lock:
        if key in _claimed_targets:
            raise InvalidConfigError(f"{target} is already being written by another {operation}")
        _claimed_targets.add(key)
    try:
        yield
    finally:
        with _claims_lock:
            _claimed_targets.discard(key)


def create_partial(output_dir: Path, original_filename: str) -> Path:
    """
    Create an empty, uniquely named partial output file in ``output_dir``.

    Raises:
        StorageIOError: If the file cannot be created
    """
    try:
        fd, name = tempfile.mkstemp(dir=output_dir, prefix=f".{original_filename}.", suffix=PARTIAL_SUFFIX)
    except OSError as e:
        raise StorageIOError(f"Failed to create output file in {output_dir}: {e}", path=output_dir) from e
    os.close(fd)
    return Path(name)


def ensure_directory(directory: Path) -> None:
    """Create a directory (and parents) if missing."""
    try:
        Path(directory).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageIOError(f"Failed to create directory {directory}: {e}", path=directory) from e


def read_window(source_path: Path, offset: int, size: int) -> bytes:
    """
    Read one window of the source file.

    The file is opened for this read only and closed before returning.

    Raises:
        StorageIOError: If the source cannot be read
    """
    try:
        with open(source_path, 'rb') as f:
            f.seek(offset)
            return f.read(size)
    except OSError as e:
        raise StorageIOError(f"Failed to read {source_path} at offset {offset}: {e}", path=source_path) from e


def write_chunk(chunk_path: Path, data: bytes) -> None:
    """
    Write chunk data to disk.

    Raises:
        StorageIOError: If write operation fails
    """
    try:
        with open(chunk_path, 'wb') as f:
            f.write(data)
    except OSError as e:
        raise StorageIOError(f"Failed to write chunk file {chunk_path}: {e}", path=chunk_path) from e


def read_chunk(chunk_path: Path) -> bytes:
    """
    Read entire chunk from disk.

    Raises:
        FileNotFoundError: If chunk does not exist
        StorageIOError: If read operation fails for another reason
    """
    try:
        with open(chunk_path, 'rb') as f:
            return f.read()
    except FileNotFoundError:
        raise
    except OSError as e:
        raise StorageIOError(f"Failed to read chunk file {chunk_path}: {e}", path=chunk_path) from e


def append_output(output_path: Path, data: bytes) -> None:
    """
    Append restored bytes to the output file.

    Raises:
        StorageIOError: If write operation fails
    """
    try:
        with open(output_path, 'ab') as f:
            f.write(data)
    except OSError as e:
        raise StorageIOError(f"Failed to write output file {output_path}: {e}", path=output_path) from e


def write_bytes_atomic(target: Path, data: bytes) -> None:
    """Write a small file through a uniquely named temporary sibling and rename it in place."""
    tmp_path = None
    try:
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.replace(tmp_path, target)
    except OSError as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise StorageIOError(f"Failed to write {target}: {e}", path=target) from e


def compress_chunk(data: bytes) -> bytes:
    """Deterministic gzip member (fixed mtime, no embedded file name)."""
    return gzip.compress(data, compresslevel=GZIP_COMPRESSION_LEVEL, mtime=0)


def decompress_chunk(data: bytes) -> bytes:
    """
    Inflate a gzip-compressed chunk.

    Raises:
        ValueError: If the data is not a complete, valid gzip stream
    """
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as e:
        raise ValueError(str(e) or type(e).__name__) from e
