"""Command parser for CLI input."""

import shlex
from typing import Optional

from cli.models import CommandRequest, RestoreCommand, SplitCommand
from cli.utils import parse_size


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse a REPL line into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (SplitCommand or RestoreCommand)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    return parse_args(tokens)


def parse_args(tokens: list[str]) -> CommandRequest:
    """Parse already tokenized arguments (e.g., sys.argv[1:]).

    Raises:
        ParseError: If command syntax is invalid
    """
    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "split":
        return _parse_split(tokens[1:])
    elif command_name == "restore":
        return _parse_restore(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_split(args: list[str]) -> SplitCommand:
    """Parse 'split FILE... [-s SIZE] [-o DIR] [-c] [-j N]' command."""
    files = []
    size_limit: Optional[int] = None
    output_dir: Optional[str] = None
    compress = False
    jobs: Optional[int] = None

    for name, value in _iter_options(args, files, flags=("-c", "--compress")):
        if name in ("-s", "--size-limit"):
            size_limit = _parse_size_value(value)
        elif name in ("-o", "--output-dir"):
            output_dir = value
        elif name in ("-c", "--compress"):
            compress = True
        elif name in ("-j", "--jobs"):
            jobs = _parse_jobs(value)
        else:
            raise ParseError(f"split: unknown option {name}")

    if not files:
        raise ParseError("split requires at least one file")

    return SplitCommand(
        files=tuple(files),
        size_limit=size_limit,
        output_dir=output_dir,
        compress=compress,
        jobs=jobs,
    )


def _parse_restore(args: list[str]) -> RestoreCommand:
    """Parse 'restore MANIFEST... [-i DIR] [-o DIR] [-j N]' command."""
    manifests = []
    input_dir: Optional[str] = None
    output_dir: Optional[str] = None
    jobs: Optional[int] = None

    for name, value in _iter_options(args, manifests, flags=()):
        if name in ("-i", "--input-dir"):
            input_dir = value
        elif name in ("-o", "--output-dir"):
            output_dir = value
        elif name in ("-j", "--jobs"):
            jobs = _parse_jobs(value)
        else:
            raise ParseError(f"restore: unknown option {name}")

    if not manifests:
        raise ParseError("restore requires at least one manifest file")

    return RestoreCommand(
        manifests=tuple(manifests),
        input_dir=input_dir,
        output_dir=output_dir,
        jobs=jobs,
    )


def _iter_options(args: list[str], positionals: list[str], flags: tuple[str, ...]):
    """
    Yield (option, value) pairs, collecting positionals as a side effect.

    Supports '--name value', '--name=value', '-x value' and a '--'
    separator after which everything is positional.
    """
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--":
            positionals.extend(args[i + 1:])
            return
        if not arg.startswith("-") or arg == "-":
            positionals.append(arg)
            i += 1
            continue

        name, sep, inline_value = arg.partition("=")
        if name in flags:
            if sep:
                raise ParseError(f"{name} does not take a value")
            yield name, None
            i += 1
            continue

        if sep:
            yield name, inline_value
            i += 1
            continue

        if i + 1 >= len(args):
            raise ParseError(f"{name} requires a value")
        yield name, args[i + 1]
        i += 2


def _parse_size_value(value: str) -> int:
    try:
        return parse_size(value)
    except ValueError as e:
        raise ParseError(str(e))


def _parse_jobs(value: str) -> int:
    try:
        jobs = int(value)
    except ValueError:
        raise ParseError(f"--jobs expects an integer, got {value!r}")
    if jobs < 1:
        raise ParseError("--jobs must be at least 1")
    return jobs
