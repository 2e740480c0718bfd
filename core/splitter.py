"""Split a source file into bounded-size chunk files plus a manifest."""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from common.checksum import IncrementalChecksumCalculator, compute_checksum
from common.exceptions import InvalidConfigError, StorageIOError
from common.logging_config import job_context
from common.types import ChunkDescriptor, SplitManifest
from core.chunk_storage import (
    chunk_relative_path,
    claim_target,
    compress_chunk,
    ensure_directory,
    manifest_file_name,
    parts_dir_name,
    read_window,
    resolve_chunk_path,
    write_bytes_atomic,
    write_chunk,
)
from core.manifest_codec import encode_manifest
from core.progress import CancellationToken, NullProgressReporter, ProgressReporter

logger = logging.getLogger(__name__)


def manifest_path_for(output_dir, original_filename: str) -> Path:
    """
    Location where split_file writes the manifest of a given source name.

    Args:
        output_dir: Output root passed to split_file
        original_filename: Base name of the source file

    Returns:
        Path of the manifest JSON file
    """
    return Path(output_dir) / parts_dir_name(original_filename) / manifest_file_name(original_filename)


def validate_split_args(source_path: Path, size_limit: int, output_dir: Path) -> int:
    """
    Reject bad arguments before any filesystem side effect.

    Returns:
        Size of the source file in bytes

    Raises:
        InvalidConfigError: If the size limit or a path is unusable
    """
    if isinstance(size_limit, bool) or not isinstance(size_limit, int):
        raise InvalidConfigError(f"Size limit must be an integer number of bytes, got {size_limit!r}")
    if size_limit <= 0:
        raise InvalidConfigError(f"Size limit must be greater than 0, got {size_limit}")
    if not source_path.exists():
        raise InvalidConfigError(f"Source file not found: {source_path}")
    if not source_path.is_file():
        raise InvalidConfigError(f"Source path is not a regular file: {source_path}")
    if output_dir.exists() and not output_dir.is_dir():
        raise InvalidConfigError(f"Output path exists and is not a directory: {output_dir}")

    try:
        return source_path.stat().st_size
    except OSError as e:
        raise StorageIOError(f"Failed to stat {source_path}: {e}", path=source_path) from e


def split_file(
    source_path,
    size_limit: int,
    output_dir,
    compress: bool = False,
    progress: Optional[ProgressReporter] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> SplitManifest:
    """
    Split a file into chunks of at most ``size_limit`` original bytes.

    Chunks are written to ``output_dir/<name>_parts/`` in sequence order and
    the manifest is written last, next to them.

    Args:
        source_path: File to split
        size_limit: Maximum original bytes per chunk (> 0)
        output_dir: Root directory for the parts subdirectory
        compress: Gzip each chunk before writing
        progress: Receives (bytes read so far, file size) after each chunk
        cancel_token: Checked before each chunk

    Returns:
        The SplitManifest that was persisted

    Raises:
        InvalidConfigError: Bad size limit or paths (nothing written)
        StorageIOError: Read/write failure; chunks already written stay on disk
        OperationCancelledError: Cancellation requested between chunks
    """
    source_path = Path(source_path)
    output_dir = Path(output_dir)
    reporter = progress or NullProgressReporter()

    total_size = validate_split_args(source_path, size_limit, output_dir)
    original_filename = source_path.name

    parts_dir = output_dir / parts_dir_name(original_filename)
    with job_context(original_filename), claim_target(parts_dir, "split"):
        logger.info(
            f"Splitting {source_path} ({total_size} bytes) into parts of {size_limit} bytes"
            f"{' with gzip' if compress else ''}"
        )

        ensure_directory(parts_dir)

        whole_file = IncrementalChecksumCalculator()
        chunks: List[ChunkDescriptor] = []
        offset = 0

        while offset < total_size:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            window = read_window(source_path, offset, size_limit)
            if not window:
                break

            whole_file.update(window)
            stored = compress_chunk(window) if compress else window

            index = len(chunks)
            relative_path = chunk_relative_path(original_filename, index, compress)
            write_chunk(resolve_chunk_path(output_dir, relative_path), stored)

            chunks.append(ChunkDescriptor(
                index=index,
                stored_size=len(stored),
                original_size=len(window),
                digest=compute_checksum(stored),
                path=relative_path,
            ))
            offset += len(window)
            logger.debug(f"Wrote chunk {index} ({len(window)} -> {len(stored)} bytes) to {relative_path}")

            reporter.report(offset, total_size)

        _check_size_unchanged(source_path, total_size, whole_file.bytes_seen)

        if total_size == 0:
            reporter.report(0, 0)

        manifest = SplitManifest(
            original_filename=original_filename,
            original_size=total_size,
            size_limit=size_limit,
            compressed=compress,
            digest=whole_file.finalize(),
            chunks=tuple(chunks),
            created_at=datetime.now(timezone.utc),
        )

        manifest_path = manifest_path_for(output_dir, original_filename)
        write_bytes_atomic(manifest_path, encode_manifest(manifest))
        logger.info(f"Split complete: {len(chunks)} chunk(s), manifest saved to {manifest_path}")

    return manifest


def _check_size_unchanged(source_path: Path, expected: int, processed: int) -> None:
    try:
        current = os.stat(source_path).st_size
    except OSError as e:
        raise StorageIOError(f"Failed to stat {source_path}: {e}", path=source_path) from e

    if processed != expected or current != expected:
        raise StorageIOError(
            f"File size mismatch during splitting of {source_path}: "
            f"expected {expected} bytes, read {processed}, now {current}",
            path=source_path,
        )
