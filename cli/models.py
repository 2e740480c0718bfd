"""Command request and response data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class SplitCommand:
    """Split one or more files into parts."""

    files: tuple[str, ...]
    size_limit: int | None = None
    output_dir: str | None = None
    compress: bool = False
    jobs: int | None = None
    command: Literal["split"] = "split"


@dataclass(frozen=True)
class RestoreCommand:
    """Restore one or more files from their manifests."""

    manifests: tuple[str, ...]
    input_dir: str | None = None
    output_dir: str | None = None
    jobs: int | None = None
    command: Literal["restore"] = "restore"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a handled command, rendered by the caller."""

    success: bool
    message: str


CommandRequest = SplitCommand | RestoreCommand
