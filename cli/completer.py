"""Custom completer for RedSplit CLI with path autocompletion."""

import os
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion, PathCompleter
from prompt_toolkit.document import Document

from cli.constants import (
    COMMANDS,
    DIRECTORY_OPTIONS,
    RESTORE_OPTIONS,
    SPLIT_OPTIONS,
    VALUE_OPTIONS,
)
from common.constants import MANIFEST_SUFFIX


def _is_manifest_or_directory(path: str) -> bool:
    return os.path.isdir(path) or path.endswith(MANIFEST_SUFFIX)


class RedSplitCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Option completion for tokens starting with '-'
    - File path completion for 'split', manifest completion for 'restore'
    - Directory completion after --output-dir/--input-dir
    """

    def __init__(self):
        self._files = PathCompleter(expanduser=True)
        self._directories = PathCompleter(only_directories=True, expanduser=True)
        self._manifests = PathCompleter(file_filter=_is_manifest_or_directory, expanduser=True)

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on cursor position and context.
        """
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        if command not in ("split", "restore"):
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        previous_word = tokens[-1] if is_typing_new_token else tokens[-2]

        if previous_word in VALUE_OPTIONS:
            return

        if current_word.startswith("-"):
            options = SPLIT_OPTIONS if command == "split" else RESTORE_OPTIONS
            for option in options:
                if option.startswith(current_word):
                    yield Completion(option, start_position=-len(current_word))
            return

        if previous_word in DIRECTORY_OPTIONS:
            path_completer = self._directories
        elif command == "restore":
            path_completer = self._manifests
        else:
            path_completer = self._files

        sub_document = Document(current_word, len(current_word))
        yield from path_completer.get_completions(sub_document, complete_event)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))
