"""Split/restore engine."""

from core.batch import BatchResult, restore_files, split_files
from core.manifest_codec import decode_manifest, encode_manifest
from core.progress import (
    CallbackProgressReporter,
    CancellationToken,
    NullProgressReporter,
    ProgressReporter,
    ProgressSink,
)
from core.restorer import load_manifest, restore_file, validate_manifest
from core.splitter import manifest_path_for, split_file

__all__ = [
    "BatchResult",
    "CallbackProgressReporter",
    "CancellationToken",
    "NullProgressReporter",
    "ProgressReporter",
    "ProgressSink",
    "decode_manifest",
    "encode_manifest",
    "load_manifest",
    "manifest_path_for",
    "restore_file",
    "restore_files",
    "split_file",
    "split_files",
    "validate_manifest",
]
