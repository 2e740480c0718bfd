"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.exceptions import ChunkError, IntegrityError
from common.logging_config import get_logger
from cli.config import Config, default_config_path
from cli.models import CommandRequest, CommandResult, RestoreCommand, SplitCommand
from cli.utils import ConsoleProgress, format_file_size
from core.batch import BatchResult, restore_files, split_files
from core.progress import ProgressSink
from core.splitter import manifest_path_for

logger = get_logger(__name__)


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get or create global Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        logger.debug("Loading CLI configuration")
        _config = Config(default_config_path())
    return _config


def handle_split(
    cmd: SplitCommand,
    config: Optional[Config] = None,
    sink: Optional[ProgressSink] = None,
) -> CommandResult:
    """
    Handle 'split' command.

    Args:
        cmd: SplitCommand with files and options
        config: Optional Config for dependency injection (testing)
        sink: Optional ProgressSink; a console progress line is used otherwise

    Returns:
        CommandResult, successful only if every file was split
    """
    if config is None:
        config = get_config()

    size_limit = cmd.size_limit if cmd.size_limit is not None else config.get_size_limit()
    output_dir = cmd.output_dir or config.get_output_dir()
    compress = cmd.compress or config.get_compress()
    jobs = cmd.jobs or config.get_max_workers()

    logger.info(f"Executing split command: {len(cmd.files)} file(s), size_limit={size_limit}, compress={compress}")

    console = None
    if sink is None:
        console = ConsoleProgress("Splitting")
        sink = ProgressSink(console)

    try:
        results = split_files(
            list(cmd.files),
            size_limit,
            output_dir,
            compress=compress,
            sink=sink,
            max_workers=jobs,
        )
    finally:
        if console is not None:
            console.finish()

    lines = []
    for result in results:
        if result.ok:
            manifest = result.value
            manifest_path = manifest_path_for(output_dir, manifest.original_filename)
            lines.append(
                f"Split: {result.source} ({format_file_size(manifest.original_size)}) -> "
                f"{manifest.chunk_count} part(s), {format_file_size(manifest.stored_size)} stored\n"
                f"  Manifest: {manifest_path}"
            )
        else:
            lines.append(_describe_failure(result))

    return _summarize(results, lines, "split")


def handle_restore(
    cmd: RestoreCommand,
    config: Optional[Config] = None,
    sink: Optional[ProgressSink] = None,
) -> CommandResult:
    """
    Handle 'restore' command.

    Args:
        cmd: RestoreCommand with manifests and options
        config: Optional Config for dependency injection (testing)
        sink: Optional ProgressSink; a console progress line is used otherwise

    Returns:
        CommandResult, successful only if every file was restored and verified
    """
    if config is None:
        config = get_config()

    input_dir = cmd.input_dir or config.get_input_dir()
    output_dir = cmd.output_dir or config.get_output_dir()
    jobs = cmd.jobs or config.get_max_workers()

    logger.info(f"Executing restore command: {len(cmd.manifests)} manifest(s), input_dir={input_dir or '<manifest root>'}")

    console = None
    if sink is None:
        console = ConsoleProgress("Restoring")
        sink = ProgressSink(console)

    try:
        results = restore_files(
            list(cmd.manifests),
            input_dir,
            output_dir,
            sink=sink,
            max_workers=jobs,
        )
    finally:
        if console is not None:
            console.finish()

    lines = []
    for result in results:
        if result.ok:
            restored: Path = result.value
            lines.append(f"Restored: {restored} ({format_file_size(restored.stat().st_size)})")
        else:
            lines.append(_describe_failure(result))

    return _summarize(results, lines, "restore")


def dispatch_command(cmd_obj: CommandRequest) -> CommandResult:
    """Dispatch parsed command to appropriate handler."""
    if isinstance(cmd_obj, SplitCommand):
        return handle_split(cmd_obj)
    elif isinstance(cmd_obj, RestoreCommand):
        return handle_restore(cmd_obj)
    else:
        return CommandResult(success=False, message=f"Unknown command type: {type(cmd_obj)}")


def _describe_failure(result: BatchResult) -> str:
    error = result.error
    line = f"Failed: {result.source}: {error}"
    if isinstance(error, IntegrityError) and error.path is not None:
        line += f"\n  Unverified output left at: {error.path}"
    elif isinstance(error, ChunkError) and error.path is not None:
        line += f"\n  Offending part: {error.path}"
    return line


def _summarize(results: list[BatchResult], lines: list[str], operation: str) -> CommandResult:
    failed = sum(1 for r in results if not r.ok)
    if failed:
        lines.append(f"{failed} of {len(results)} file(s) failed to {operation}.")
    else:
        lines.append(f"All {len(results)} file(s) processed successfully.")
    return CommandResult(success=failed == 0, message="\n".join(lines))
