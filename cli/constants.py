"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["split", "restore", "clear", "exit", "help"]

SPLIT_OPTIONS = ["--size-limit", "--output-dir", "--compress", "--jobs"]
RESTORE_OPTIONS = ["--input-dir", "--output-dir", "--jobs"]
DIRECTORY_OPTIONS = ("-o", "--output-dir", "-i", "--input-dir")
VALUE_OPTIONS = ("-s", "--size-limit", "-j", "--jobs")

STYLE = Style.from_dict(
    {
        "prompt": "#F45935 bold",
        "command": "#0088ff bold",
    }
)

RED_ORANGE = "\033[38;2;244;89;53m"
GREEN = "\033[32m"
RED = "\033[31m"
RESET = "\033[0m"

LOGO = f"""{RED_ORANGE}
 ┏━┓┏━╸╺┳┓┏━┓┏━┓╻  ╻╺┳╸
 ┣┳┛┣╸  ┃┃┗━┓┣━┛┃  ┃ ┃
 ╹┗╸┗━╸╺┻┛┗━┛╹  ┗━╸╹ ╹
{RESET}"""

WELCOME_TITLE = "RedSplit - split large files into verified parts and restore them"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "redsplit> "

USAGE_TEXT = """Usage:
  redsplit split FILE... [-s SIZE] [-o DIR] [-c] [-j N]
  redsplit restore MANIFEST... [-i DIR] [-o DIR] [-j N]
  redsplit                      (interactive mode)"""

HELP_TEXT = """Available commands:
  split FILE... [options]             Split files into parts
      -s, --size-limit SIZE           Maximum part size (bytes, or with KB/MB/GB/TB suffix)
      -o, --output-dir DIR            Root directory for <name>_parts/ folders
      -c, --compress                  Gzip every part
      -j, --jobs N                    Number of files processed in parallel
  restore MANIFEST... [options]       Rebuild files from their manifests
      -i, --input-dir DIR             Directory the manifest part paths are relative to
                                      (default: the folder holding <name>_parts/)
      -o, --output-dir DIR            Directory receiving restored files
      -j, --jobs N                    Number of files processed in parallel
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Defaults come from ~/.redsplit/config.json (REDSPLIT_CONFIG overrides the path;
REDSPLIT_SIZE_LIMIT overrides the default part size).
Examples:
  split movie.mkv -s 700MB -o parts
  split a.iso b.iso --size-limit 4GB --compress
  restore parts/movie.mkv_parts/movie.mkv.json -i parts -o restored"""

SIZE_UNITS = {
    "B": 1,
    "K": 1024,
    "KB": 1024,
    "KIB": 1024,
    "M": 1024 ** 2,
    "MB": 1024 ** 2,
    "MIB": 1024 ** 2,
    "G": 1024 ** 3,
    "GB": 1024 ** 3,
    "GIB": 1024 ** 3,
    "T": 1024 ** 4,
    "TB": 1024 ** 4,
    "TIB": 1024 ** 4,
}
