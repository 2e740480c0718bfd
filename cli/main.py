"""CLI entry point."""

import sys
import os

from common.logging_config import setup_logging
from cli.constants import HELP_TEXT, USAGE_TEXT


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for CLI.

    With arguments, runs one split/restore command and returns its exit code
    (0 success, 1 any file failed, 2 bad command line). Without arguments,
    starts the interactive REPL.
    """
    args = list(sys.argv[1:] if argv is None else argv)

    debug = '--debug' in args
    if debug:
        args = [a for a in args if a != '--debug']

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    if debug:
        logger.info("Debug logging enabled")

    if args and args[0] in ('help', '-h', '--help'):
        print(HELP_TEXT)
        return 0

    if not args:
        from cli.repl import repl_loop

        logger.info("Starting interactive mode")
        repl_loop()
        return 0

    from cli.commands import dispatch_command
    from cli.parser import ParseError, parse_args

    try:
        cmd_obj = parse_args(args)
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(USAGE_TEXT, file=sys.stderr)
        return 2

    try:
        result = dispatch_command(cmd_obj)
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise

    print(result.message)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
