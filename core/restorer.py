"""Rebuild an original file from its manifest and chunk files."""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Optional

from common.checksum import IncrementalChecksumCalculator, compute_checksum, verify_checksum
from common.exceptions import (
    ChunkIntegrityError,
    CorruptManifestError,
    DecompressionError,
    IntegrityError,
    InvalidConfigError,
    InvalidManifestError,
    MissingChunkError,
    StorageIOError,
)
from common.logging_config import job_context
from common.types import ChunkDescriptor, SplitManifest
from core.chunk_storage import (
    append_output,
    claim_target,
    create_partial,
    decompress_chunk,
    ensure_directory,
    is_safe_relative_path,
    read_chunk,
    resolve_chunk_path,
)
from core.manifest_codec import decode_manifest
from core.progress import CancellationToken, NullProgressReporter, ProgressReporter

logger = logging.getLogger(__name__)


def load_manifest(manifest_path) -> SplitManifest:
    """
    Read and decode a manifest file.

    Raises:
        InvalidManifestError: If the file is unreadable or malformed
    """
    manifest_path = Path(manifest_path)
    try:
        data = manifest_path.read_bytes()
    except OSError as e:
        raise InvalidManifestError(f"Failed to read manifest {manifest_path}: {e}", path=manifest_path) from e

    try:
        return decode_manifest(data)
    except InvalidManifestError as e:
        raise InvalidManifestError(f"{manifest_path}: {e}", path=manifest_path) from e


def validate_manifest(manifest: SplitManifest) -> None:
    """
    Check the structural invariants of a decoded manifest.

    Raises:
        CorruptManifestError: On the first inconsistency found
    """
    name = manifest.original_filename
    if name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise CorruptManifestError(f"Invalid original file name: {name!r}")

    if manifest.size_limit <= 0:
        raise CorruptManifestError(f"Invalid size limit: {manifest.size_limit}")

    indices = sorted(chunk.index for chunk in manifest.chunks)
    if indices != list(range(len(indices))):
        raise CorruptManifestError(f"Chunk indices are not contiguous from 0: {indices}")

    expected_count = -(-manifest.original_size // manifest.size_limit)
    if len(manifest.chunks) != expected_count:
        raise CorruptManifestError(
            f"Expected {expected_count} chunk(s) for {manifest.original_size} bytes "
            f"with limit {manifest.size_limit}, manifest lists {len(manifest.chunks)}"
        )

    total = sum(chunk.original_size for chunk in manifest.chunks)
    if total != manifest.original_size:
        raise CorruptManifestError(
            f"Chunk sizes add up to {total} bytes, manifest records {manifest.original_size}"
        )

    seen_paths = set()
    last_index = len(manifest.chunks) - 1
    for chunk in manifest.chunks:
        if chunk.index < last_index and chunk.original_size != manifest.size_limit:
            raise CorruptManifestError(
                f"Chunk {chunk.index} holds {chunk.original_size} bytes, expected {manifest.size_limit}"
            )
        if chunk.original_size == 0 or chunk.original_size > manifest.size_limit:
            raise CorruptManifestError(f"Chunk {chunk.index} has invalid size {chunk.original_size}")
        if not manifest.compressed and chunk.stored_size != chunk.original_size:
            raise CorruptManifestError(
                f"Chunk {chunk.index} is uncompressed but stored size {chunk.stored_size} "
                f"differs from original size {chunk.original_size}"
            )
        if not is_safe_relative_path(chunk.path):
            raise CorruptManifestError(f"Chunk {chunk.index} has unsafe path {chunk.path!r}")
        normalized = PurePosixPath(chunk.path)
        if normalized in seen_paths:
            raise CorruptManifestError(f"Chunk {chunk.index} reuses path {chunk.path!r}")
        seen_paths.add(normalized)


def restore_file(
    manifest_path,
    chunk_dir,
    output_dir,
    progress: Optional[ProgressReporter] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> Path:
    """
    Rebuild the original file described by a manifest.

    Bytes are appended to a uniquely named ``.<name>.*.partial`` file in
    ``output_dir``; the partial file is removed if any chunk fails and renamed
    to ``<name>`` once every chunk has been written.

    Args:
        manifest_path: Manifest JSON written by split_file
        chunk_dir: Directory the manifest's chunk paths are relative to, or
            None for the split output root the manifest was written under
        output_dir: Directory receiving the rebuilt file
        progress: Receives (bytes written so far, original size) after each chunk
        cancel_token: Checked before each chunk

    Returns:
        Path of the rebuilt file

    Raises:
        InvalidManifestError: Manifest unreadable or malformed (nothing written)
        CorruptManifestError: Manifest structurally inconsistent (nothing written)
        InvalidConfigError: Output path unusable or already being restored to
        MissingChunkError, ChunkIntegrityError, DecompressionError: Chunk problems
        IntegrityError: Whole-file digest mismatch; the rebuilt file is kept
        StorageIOError: Output could not be written
        OperationCancelledError: Cancellation requested between chunks
    """
    manifest = load_manifest(manifest_path)
    validate_manifest(manifest)

    chunk_dir = Path(chunk_dir) if chunk_dir is not None else default_chunk_dir(manifest_path)
    output_dir = Path(output_dir)
    reporter = progress or NullProgressReporter()

    if output_dir.exists() and not output_dir.is_dir():
        raise InvalidConfigError(f"Output path exists and is not a directory: {output_dir}")

    final_path = output_dir / manifest.original_filename
    with job_context(manifest.original_filename), claim_target(final_path, "restore"):
        logger.info(
            f"Restoring {manifest.original_filename} ({manifest.original_size} bytes, "
            f"{manifest.chunk_count} chunk(s)) from {chunk_dir}"
        )
        ensure_directory(output_dir)
        partial_path = create_partial(output_dir, manifest.original_filename)

        whole_file = IncrementalChecksumCalculator()
        written = 0
        try:
            for chunk in sorted(manifest.chunks, key=lambda c: c.index):
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()

                data = _load_chunk(chunk_dir, chunk, manifest.compressed)
                whole_file.update(data)
                append_output(partial_path, data)
                written += len(data)
                logger.debug(f"Appended chunk {chunk.index} ({len(data)} bytes)")

                reporter.report(written, manifest.original_size)
        except Exception:
            _discard(partial_path)
            raise

        if manifest.original_size == 0:
            reporter.report(0, 0)

        try:
            os.replace(partial_path, final_path)
        except OSError as e:
            _discard(partial_path)
            raise StorageIOError(f"Failed to move {partial_path} to {final_path}: {e}", path=final_path) from e

        actual = whole_file.finalize()
        if actual != manifest.digest:
            logger.error(f"Whole-file digest mismatch for {final_path}: expected {manifest.digest}, got {actual}")
            raise IntegrityError(
                f"Restored file {final_path} does not match the recorded digest",
                path=final_path,
                expected=manifest.digest,
                actual=actual,
            )

        logger.info(f"Restore complete: {final_path}")

    return final_path


def default_chunk_dir(manifest_path) -> Path:
    """
    Split output root for a manifest left where split_file wrote it.

    The manifest sits in ``<root>/<name>_parts/`` and its chunk paths are
    relative to ``<root>``.
    """
    return Path(manifest_path).parent.parent


def _load_chunk(chunk_dir: Path, chunk: ChunkDescriptor, compressed: bool) -> bytes:
    """Read, verify and (if needed) inflate one chunk."""
    chunk_path = resolve_chunk_path(chunk_dir, chunk.path)

    try:
        stored = read_chunk(chunk_path)
    except FileNotFoundError as e:
        raise MissingChunkError(chunk.index, f"file not found: {chunk_path}", path=chunk_path) from e
    except IsADirectoryError as e:
        raise MissingChunkError(chunk.index, f"not a file: {chunk_path}", path=chunk_path) from e

    if len(stored) != chunk.stored_size:
        raise ChunkIntegrityError(
            chunk.index,
            f"size mismatch in {chunk_path}: expected {chunk.stored_size} bytes, found {len(stored)}",
            path=chunk_path,
        )

    if not verify_checksum(stored, chunk.digest):
        raise ChunkIntegrityError(
            chunk.index,
            f"checksum mismatch in {chunk_path}: expected {chunk.digest}, got {compute_checksum(stored)}",
            path=chunk_path,
        )

    if not compressed:
        return stored

    try:
        original = decompress_chunk(stored)
    except ValueError as e:
        raise DecompressionError(chunk.index, f"cannot decompress {chunk_path}: {e}", path=chunk_path) from e

    if len(original) != chunk.original_size:
        raise ChunkIntegrityError(
            chunk.index,
            f"decompressed to {len(original)} bytes, expected {chunk.original_size}",
            path=chunk_path,
        )
    return original


def _discard(partial_path: Path) -> None:
    try:
        partial_path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove incomplete output {partial_path}: {e}")
