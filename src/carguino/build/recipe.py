"""Compile recipes.

Arduino platforms describe each toolchain step as a ``recipe.*.pattern``
preference: a full command line in which the per-invocation values are left
as ``%name`` placeholders once the preferences have been expanded, e.g.

    "/opt/avr/bin/avr-gcc" -c -Os -mmcu=atmega328p %includes "%source_file" -o "%object_file"

A ``Recipe`` substitutes those placeholders, splits the result into a
program and its arguments and runs it.
"""

import logging
import re
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from ..config.preferences import Preferences
from ..errors import CarguinoError
from ..subprocess_utils import exec_with_output, format_command

logger = logging.getLogger(__name__)

RECIPE_PLACEHOLDER = re.compile(r"%(\w+)")

# A token is a single-quoted run, a double-quoted run or a run of non-spaces
COMMAND_TOKEN = re.compile(r"'(.*?)'|\"(.*?)\"|(\S+)")

WARNING_MARKER = "warning:"


class RecipeError(CarguinoError):
    """Raised when a recipe cannot be read or split."""
    pass


@dataclass(frozen=True)
class RecipeParams:
    """Values substituted into a recipe; unset fields are empty."""

    source_file: str = ""
    object_file: str = ""
    object_files: str = ""
    archive_file: str = ""
    includes: str = ""

    def substitute(self, name: str) -> str:
        """Value for a ``%name`` placeholder.

        Names other than the five parameters come back as the bare name, so
        an unknown ``%word`` loses its ``%``.
        """
        if name == "source_file":
            return self.source_file
        elif name == "object_file":
            return self.object_file
        elif name == "object_files":
            return self.object_files
        elif name == "archive_file":
            return self.archive_file
        elif name == "includes":
            return self.includes
        return name


def split_command_line(line: str) -> Tuple[Path, List[str]]:
    """
    Split a command line into program and arguments.

    Quotes delimit a token and are removed; there is no escaping.

    Args:
        line: Command line, e.g. ``foo "bar baz" 'qux'``

    Returns:
        Tuple of (program path, argument list)

    Raises:
        RecipeError: If the line holds no tokens
    """
    tokens = [
        next(group for group in match.groups() if group is not None)
        for match in COMMAND_TOKEN.finditer(line)
    ]
    if not tokens:
        raise RecipeError("Empty command line")
    return Path(tokens[0]), tokens[1:]


class Recipe:
    """A command line pattern with ``%name`` placeholders."""

    def __init__(self, pattern: str):
        self.pattern = pattern

    @classmethod
    def from_preferences(cls, prefs: Preferences, name: str) -> "Recipe":
        """
        Read ``recipe.<name>.pattern`` from expanded preferences.

        Raises:
            PreferencesError: If the recipe is not defined
        """
        return cls(prefs.require(f"recipe.{name}.pattern"))

    def command(self) -> Path:
        """Program the recipe runs."""
        return split_command_line(self.pattern)[0]

    def expand(self, params: RecipeParams) -> str:
        """Pattern with every ``%name`` placeholder replaced."""
        return RECIPE_PLACEHOLDER.sub(
            lambda match: params.substitute(match.group(1)), self.pattern
        )

    def substitute(self, params: RecipeParams) -> Tuple[Path, List[str]]:
        """Substitute placeholders and split into program and arguments."""
        return split_command_line(self.expand(params))

    def run(self, params: RecipeParams) -> subprocess.CompletedProcess:
        """
        Run the recipe and wait for it to finish.

        Compiler warnings on standard error are passed on to cargo as
        ``cargo:warning=`` lines. On failure the full standard error is
        relayed before the error is raised.

        Args:
            params: Placeholder values

        Returns:
            Completed process with captured stdout/stderr bytes

        Raises:
            ProcessError: If the program cannot start or exits non-zero
        """
        command, args = self.substitute(params)
        print(format_command([command, *args]))
        sys.stdout.flush()

        result = exec_with_output([command, *args])
        for line in result.stderr.decode("utf-8", errors="replace").splitlines():
            if WARNING_MARKER in line:
                print(f"cargo:warning={line}")
        return result

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Recipe) and other.pattern == self.pattern

    def __hash__(self) -> int:
        return hash(self.pattern)

    def __repr__(self) -> str:
        return f"Recipe({self.pattern!r})"


__all__ = [
    "Recipe",
    "RecipeError",
    "RecipeParams",
    "split_command_line",
]
