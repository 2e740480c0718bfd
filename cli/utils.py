"""Utility functions for CLI operations."""

import re
import sys
import threading
from typing import Dict, TextIO, Tuple

from cli.constants import GREEN, RESET, SIZE_UNITS

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z]*)\s*$")


class ConsoleProgress:
    """
    Progress listener that renders one status line for a batch.

    Plugged into a ProgressSink; the sink serializes calls, the lock here
    covers :meth:`finish` racing a late event.
    """

    def __init__(self, verb: str, stream: TextIO | None = None):
        """
        Initialize the console progress line.

        Args:
            verb: Leading word of the status line (e.g., "Splitting")
            stream: Output stream, stdout by default
        """
        self.verb = verb
        self.stream = stream or sys.stdout
        self._jobs: Dict[str, Tuple[int, int]] = {}
        self._lock = threading.Lock()
        self._written = False

    def __call__(self, job_name: str, bytes_processed: int, bytes_total: int) -> None:
        with self._lock:
            self._jobs[job_name] = (bytes_processed, bytes_total)
            processed = sum(p for p, _ in self._jobs.values())
            total = sum(t for _, t in self._jobs.values())
            self._display(processed, total)

    def _display(self, processed: int, total: int) -> None:
        label = f"{len(self._jobs)} file(s)" if len(self._jobs) > 1 else next(iter(self._jobs))
        if total > 0:
            percent = (processed / total) * 100
            line = f"\r{self.verb} {label}: {format_file_size(processed)} / {format_file_size(total)} ({GREEN}{percent:.1f}%{RESET})"
        else:
            line = f"\r{self.verb} {label}: {format_file_size(processed)}"
        self.stream.write(line)
        self.stream.flush()
        self._written = True

    def finish(self) -> None:
        """Terminate the status line with a newline if anything was shown."""
        with self._lock:
            if self._written:
                self.stream.write('\n')
                self.stream.flush()
                self._written = False


def parse_size(size_str: str) -> int:
    """
    Parse a size string (e.g., '104857600', '100MB', '1.5GiB') to bytes.

    Units are binary (1 KB = 1024 bytes). A bare number is a byte count.

    Raises:
        ValueError: If the string is not a size
    """
    match = _SIZE_PATTERN.match(size_str)
    if not match:
        raise ValueError(f"Invalid size: {size_str!r}")

    number, unit = match.groups()
    multiplier = SIZE_UNITS.get(unit.upper() or "B")
    if multiplier is None:
        raise ValueError(f"Unknown size unit {unit!r} in {size_str!r}")

    if "." in number:
        return int(float(number) * multiplier)
    return int(number) * multiplier


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
