"""
Arduino build preferences.

``arduino-builder -dump-prefs`` prints the complete build configuration of a
board as ``key=value`` lines, where values refer to other keys through
``{key}`` placeholders:

    build.core.path={runtime.platform.path}/cores/{build.core}
    recipe.c.o.pattern="{compiler.path}{compiler.c.cmd}" {compiler.c.flags} ...

This module parses that text and expands the placeholders. The store stays a
plain string-to-string mapping because it mirrors arduino-builder's own
open-ended schema; typed decoding happens only when a value is read.
"""

import re
from typing import Callable, Dict, Iterator, List, Optional, Type, TypeVar, Union

from ..errors import CarguinoError

T = TypeVar("T")

# Bound on expansion rounds; mutually-referential keys never converge
MAX_EXPANSION_ROUNDS = 10

PLACEHOLDER_PATTERN = re.compile(r"\{(\S+?)\}")


class PreferencesError(CarguinoError):
    """Raised when a required preference is missing."""

    pass


def _parse_bool(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError(f"invalid boolean: {value!r}")


class Preferences:
    """
    Key-value build preferences with lazy ``{placeholder}`` expansion.

    The expanded view is computed on first read and cached until the next
    call to ``set`` or ``unset``.

    Usage:
        prefs = Preferences.parse(output)
        prefs.set("source_file", "%source_file")
        core = prefs.require("build.core")
        upload_speed = prefs.get("upload.speed", int)
    """

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._unexpanded: Dict[str, str] = dict(values or {})
        self._expanded: Optional[Dict[str, str]] = None

    @classmethod
    def parse(cls, text: str) -> "Preferences":
        """
        Parse ``key=value`` lines.

        Each line is split on its first ``=``; everything after it is kept
        verbatim. Later duplicates replace earlier ones. Lines without ``=``
        carry no preference and are skipped.

        Args:
            text: Output of ``arduino-builder -dump-prefs``

        Returns:
            Preferences instance
        """
        values: Dict[str, str] = {}
        for line in text.splitlines():
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            values[key] = value
        return cls(values)

    def copy(self) -> "Preferences":
        """Independent copy of the unexpanded preferences."""
        return Preferences(self._unexpanded)

    def set(self, key: str, value: object) -> None:
        """Set an unexpanded value and invalidate the expanded view."""
        self._unexpanded[key] = str(value)
        self._expanded = None

    def unset(self, key: str) -> None:
        """Remove a key (if present) and invalidate the expanded view."""
        self._unexpanded.pop(key, None)
        self._expanded = None

    def get(
        self,
        key: str,
        type_: Union[Type[T], Callable[[str], T]] = str  # type: ignore[assignment]
    ) -> Optional[T]:
        """
        Read an expanded value converted to ``type_``.

        Args:
            key: Preference key
            type_: Conversion applied to the string value

        Returns:
            Converted value, or None when the key is absent or the value
            does not convert
        """
        return self._convert(self.expanded_view().get(key), type_)

    def get_unexpanded(
        self,
        key: str,
        type_: Union[Type[T], Callable[[str], T]] = str  # type: ignore[assignment]
    ) -> Optional[T]:
        """Read a raw value without placeholder expansion."""
        return self._convert(self._unexpanded.get(key), type_)

    def require(self, key: str) -> str:
        """
        Read an expanded value that must be present.

        Raises:
            PreferencesError: If the key is missing
        """
        value = self.get(key)
        if value is None:
            raise PreferencesError(f"'{key}' missing from preferences")
        return value

    def keys(self) -> List[str]:
        """Sorted unexpanded keys."""
        return sorted(self._unexpanded)

    def expanded(self) -> Dict[str, str]:
        """Copy of the fully expanded mapping."""
        return dict(self.expanded_view())

    def expanded_view(self) -> Dict[str, str]:
        if self._expanded is None:
            self._expanded = expand(self._unexpanded)
        return self._expanded

    @staticmethod
    def _convert(value: Optional[str], type_: Callable[[str], T]) -> Optional[T]:
        if value is None:
            return None
        if type_ is bool:
            type_ = _parse_bool  # type: ignore[assignment]
        try:
            return type_(value)
        except (TypeError, ValueError):
            return None

    def __contains__(self, key: object) -> bool:
        return key in self._unexpanded

    def __len__(self) -> int:
        return len(self._unexpanded)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __str__(self) -> str:
        expanded = self.expanded_view()
        return "".join(f"{key}={expanded[key]}\n" for key in sorted(expanded))

    def __repr__(self) -> str:
        return f"Preferences({len(self)} keys)"


def expand(values: Dict[str, str]) -> Dict[str, str]:
    """
    Expand ``{key}`` placeholders.

    Each round substitutes placeholders using the previous round's values,
    so a round never observes its own replacements. Unknown keys are left in
    place, then ``{{`` and ``}}`` collapse to single braces. Rounds stop at a
    fixpoint or after ``MAX_EXPANSION_ROUNDS``, whichever comes first.

    Args:
        values: Unexpanded mapping (not modified)

    Returns:
        New expanded mapping
    """
    current = dict(values)
    for _ in range(MAX_EXPANSION_ROUNDS):
        previous = current

        def lookup(match: "re.Match[str]") -> str:
            return previous.get(match.group(1), match.group(0))

        updated = {
            key: PLACEHOLDER_PATTERN.sub(lookup, value)
            .replace("{{", "{")
            .replace("}}", "}")
            for key, value in previous.items()
        }
        if updated == previous:
            break
        current = updated
    return current
