"""Run independent split/restore pipelines for many files on a worker pool."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from common.constants import DEFAULT_MAX_WORKERS
from common.exceptions import InvalidConfigError, InvalidManifestError, RedSplitError
from core.chunk_storage import parts_dir_name
from core.progress import CancellationToken, ProgressSink
from core.restorer import load_manifest, restore_file
from core.splitter import split_file

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """
    Outcome of one file's pipeline.

    Attributes:
        source: Input path (source file for split, manifest for restore)
        value: SplitManifest or restored Path on success
        error: The exception that aborted this file, if any
    """
    source: Path
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def split_files(
    sources: Sequence,
    size_limit: int,
    output_dir,
    compress: bool = False,
    sink: Optional[ProgressSink] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    cancel_token: Optional[CancellationToken] = None,
) -> List[BatchResult]:
    """
    Split several files concurrently, one pipeline per file.

    Sources sharing a base name would write the same parts directory; only
    the first of them is split, the others fail with InvalidConfigError.

    Returns:
        One BatchResult per source, in input order
    """
    def run(source: Path, reporter):
        return split_file(source, size_limit, output_dir, compress, progress=reporter, cancel_token=cancel_token)

    def target_of(source: Path) -> Optional[str]:
        return parts_dir_name(source.name)

    return _run_batch(sources, run, target_of, sink, max_workers, "split")


def restore_files(
    manifests: Sequence,
    chunk_dir,
    output_dir,
    sink: Optional[ProgressSink] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    cancel_token: Optional[CancellationToken] = None,
) -> List[BatchResult]:
    """
    Restore several files concurrently, one pipeline per manifest.

    Manifests naming the same original file would restore to the same
    output; only the first of them is restored, the others fail with
    InvalidConfigError.

    Args:
        chunk_dir: Root the chunk paths are relative to, or None to use each
            manifest's own split output root

    Returns:
        One BatchResult per manifest, in input order
    """
    def run(manifest_path: Path, reporter):
        return restore_file(manifest_path, chunk_dir, output_dir, progress=reporter, cancel_token=cancel_token)

    def target_of(manifest_path: Path) -> Optional[str]:
        try:
            return load_manifest(manifest_path).original_filename
        except InvalidManifestError:
            # the pipeline reports it
            return None

    return _run_batch(manifests, run, target_of, sink, max_workers, "restore")


def _find_conflicts(
    paths: List[Path],
    target_of: Callable[[Path], Optional[str]],
    operation: str,
) -> Dict[int, InvalidConfigError]:
    """Map the index of every input that repeats an earlier input's target to its error."""
    first_by_target: Dict[str, Path] = {}
    conflicts: Dict[int, InvalidConfigError] = {}
    for i, path in enumerate(paths):
        target = target_of(path)
        if target is None:
            continue
        if target in first_by_target:
            conflicts[i] = InvalidConfigError(
                f"{path} would {operation} to the same target ({target}) as {first_by_target[target]}"
            )
        else:
            first_by_target[target] = path
    return conflicts


def _run_batch(
    inputs: Sequence,
    run: Callable[[Path, Any], Any],
    target_of: Callable[[Path], Optional[str]],
    sink: Optional[ProgressSink],
    max_workers: int,
    operation: str,
) -> List[BatchResult]:
    if max_workers < 1:
        raise InvalidConfigError(f"max_workers must be at least 1, got {max_workers}")

    paths = [Path(p) for p in inputs]
    if not paths:
        return []

    sink = sink or ProgressSink()
    conflicts = _find_conflicts(paths, target_of, operation)

    def guarded(item: Tuple[int, Path]) -> BatchResult:
        index, path = item
        if index in conflicts:
            logger.error(f"{operation} skipped for {path}: {conflicts[index]}")
            return BatchResult(source=path, error=conflicts[index])

        reporter = sink.bind(str(path))
        try:
            return BatchResult(source=path, value=run(path, reporter))
        except RedSplitError as e:
            logger.error(f"{operation} failed for {path}: {e}")
            return BatchResult(source=path, error=e)

    workers = min(max_workers, len(paths))
    logger.info(f"Starting {operation} of {len(paths)} file(s) with {workers} worker(s)")
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"redsplit-{operation}") as executor:
        results = list(executor.map(guarded, enumerate(paths)))

    failed = sum(1 for r in results if not r.ok)
    logger.info(f"Finished {operation}: {len(results) - failed} succeeded, {failed} failed")
    return results
