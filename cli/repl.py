"""Interactive split/restore shell built on prompt_toolkit."""

import os
import sys
from typing import Callable, Dict

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from cli.commands import dispatch_command
from cli.completer import RedSplitCompleter
from cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    RED,
    RESET,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.parser import ParseError, parse_command
from common.logging_config import get_logger

logger = get_logger(__name__)


class ExitRepl(Exception):
    """Raised by the 'exit' built-in to leave the loop."""


def clear_screen() -> None:
    """Clear the terminal and redraw the banner."""
    os.system("cls" if sys.platform == "win32" else "clear")
    show_welcome()


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def _exit() -> None:
    raise ExitRepl()


BUILTINS: Dict[str, Callable[[], None]] = {
    "help": lambda: print(HELP_TEXT),
    "clear": clear_screen,
    "exit": _exit,
}


def execute_line(line: str) -> bool:
    """
    Run one line typed at the prompt.

    Built-ins are handled here; split/restore go through the parser and the
    command handlers, with failures printed in red.

    Returns:
        False if the line (or any file it named) failed, True otherwise

    Raises:
        ExitRepl: When the user typed 'exit'
    """
    line = line.strip()
    if not line:
        return True

    builtin = BUILTINS.get(line.lower())
    if builtin is not None:
        builtin()
        return True

    try:
        request = parse_command(line)
    except ParseError as e:
        print(f"Error: {e}")
        return False

    result = dispatch_command(request)
    if result.success:
        print(result.message)
    else:
        logger.debug(f"Command failed: {line}")
        print(f"{RED}{result.message}{RESET}")
    return result.success


def repl_loop() -> None:
    """Prompt for commands until 'exit' or end of input."""
    session: PromptSession = PromptSession(
        completer=RedSplitCompleter(), history=InMemoryHistory(), style=STYLE
    )
    clear_screen()

    while True:
        try:
            execute_line(session.prompt([("class:prompt", PROMPT_TEXT)]))
        except KeyboardInterrupt:
            continue
        except (EOFError, ExitRepl):
            print("Goodbye!")
            break
