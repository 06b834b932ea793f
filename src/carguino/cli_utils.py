"""CLI utility functions for Carguino.

This module provides common utilities used by the ``carguino`` command:
- Cargo-style status, warning and error output
- Parsing of the options carguino consumes from cargo's command line
"""

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, TextIO

from .config.board_info import BoardInfo
from .errors import CarguinoError


class Verbosity(Enum):
    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"


class MessageFormat(Enum):
    HUMAN = "human"
    JSON = "json"


class OptionError(CarguinoError):
    """Raised for invalid carguino options."""
    pass


class Shell:
    """Writes cargo-style messages to standard error.

    Statuses are right-aligned in a 12 column gutter like cargo's own
    output; colour follows cargo's ``--color`` setting.
    """

    # ANSI color codes
    RED = "\033[1;31m"
    YELLOW = "\033[1;33m"
    CYAN = "\033[1;36m"
    RESET = "\033[0m"

    COLOR_CHOICES = ("auto", "always", "never")

    def __init__(self, stream: Optional[TextIO] = None, color: str = "auto"):
        self.stream = stream if stream is not None else sys.stderr
        self.verbosity = Verbosity.NORMAL
        self.color = "auto"
        self.set_color(color)

    def set_color(self, color: str) -> None:
        """
        Set the colour mode.

        Raises:
            OptionError: If the mode is not auto, always or never
        """
        if color not in self.COLOR_CHOICES:
            raise OptionError(
                f"argument for --color must be auto, always, or never, but found `{color}`"
            )
        self.color = color

    def use_color(self) -> bool:
        if self.color == "auto":
            return hasattr(self.stream, "isatty") and self.stream.isatty()
        return self.color == "always"

    def _paint(self, text: str, color: str) -> str:
        if self.use_color():
            return f"{color}{text}{self.RESET}"
        return text

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()

    def status(self, status: str, message: str) -> None:
        """Print a status line unless quiet."""
        if self.verbosity is Verbosity.QUIET:
            return
        self._write(f"{self._paint(status.rjust(12), self.CYAN)} {message}")

    def verbose(self, status: str, message: str) -> None:
        """Print a status line only in verbose mode."""
        if self.verbosity is Verbosity.VERBOSE:
            self.status(status, message)

    def warn(self, message: str) -> None:
        if self.verbosity is Verbosity.QUIET:
            return
        self._write(f"{self._paint('warning:', self.YELLOW)} {message}")

    def error(self, message: str) -> None:
        self._write(f"{self._paint('error:', self.RED)} {message}")


@dataclass
class CargoOptions:
    """Options carguino takes out of (or observes on) cargo's command line.

    Attributes:
        target_board: Board given with ``--target-board``
        message_format: Requested cargo message format
        cargo_args: Arguments to forward to cargo
    """

    target_board: Optional[BoardInfo] = None
    message_format: MessageFormat = MessageFormat.HUMAN
    cargo_args: List[str] = field(default_factory=list)

    @classmethod
    def parse(cls, args: List[str], shell: Shell) -> "CargoOptions":
        """Parse cargo arguments.

        ``--target`` is dropped with a warning (the board determines the
        target), ``--target-board`` and ``--message-format`` are consumed,
        ``--color`` and the verbosity flags are applied to the shell and
        forwarded. Everything else is forwarded untouched.

        Args:
            args: Arguments following the cargo subcommand
            shell: Shell to configure

        Returns:
            CargoOptions

        Raises:
            OptionError: If ``--target-board`` is empty or missing its value
            BoardInfoError: If the board name is malformed
        """
        options = cls()
        remaining = iter(args)
        for arg in remaining:
            if arg.startswith("--target="):
                shell.warn(TARGET_WARNING)
            elif arg == "--target":
                next(remaining, None)
                shell.warn(TARGET_WARNING)
            elif arg.startswith("--target-board="):
                board = arg[len("--target-board="):]
                if not board:
                    raise OptionError("target-board is empty")
                options.target_board = BoardInfo.from_fqbn(board)
            elif arg == "--target-board":
                board = next(remaining, None)
                if board is None:
                    raise OptionError("Expected argument for option '--target-board'")
                options.target_board = BoardInfo.from_fqbn(board)
            elif arg.startswith("--message-format="):
                options.message_format = _message_format(arg[len("--message-format="):])
            elif arg == "--message-format":
                value = next(remaining, None)
                if value is not None:
                    options.message_format = _message_format(value)
            elif arg.startswith("--color="):
                shell.set_color(arg[len("--color="):])
                options.cargo_args.append(arg)
            elif arg == "--color":
                options.cargo_args.append(arg)
                value = next(remaining, None)
                if value is not None:
                    shell.set_color(value)
                    options.cargo_args.append(value)
            elif arg in ("--verbose", "-v", "-vv"):
                shell.verbosity = Verbosity.VERBOSE
                options.cargo_args.append(arg)
            elif arg in ("--quiet", "-q"):
                shell.verbosity = Verbosity.QUIET
                options.cargo_args.append(arg)
            else:
                options.cargo_args.append(arg)
        return options

    def message_format_args(self) -> List[str]:
        return ["--message-format", self.message_format.value]


TARGET_WARNING = (
    "Do not specify a target triple directly, instead use '--target-board'; option ignored"
)


def _message_format(value: str) -> MessageFormat:
    if value.lower() == "json":
        return MessageFormat.JSON
    return MessageFormat.HUMAN
