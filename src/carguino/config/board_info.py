"""
Fully-qualified board names.

An FQBN identifies a board as ``vendor:arch:board`` with optional menu
parameters, e.g. ``arduino:avr:nano:cpu=atmega328old``.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from ..errors import CarguinoError

FQBN_PATTERN = re.compile(r"^([^:\s]+):([^:\s]+):([^:\s]+)(?::(\S+))?$")


class BoardInfoError(CarguinoError):
    """Raised for malformed board names."""

    pass


@dataclass(frozen=True)
class BoardInfo:
    """
    Board identity parsed from an FQBN.

    Equality ignores parameter order, so ``str(board)`` always re-parses to
    an equal value even when the parameters come out in a different order.

    Usage:
        board = BoardInfo.from_fqbn("arduino:samd:mkrzero:opt=small")
        board.arch  # 'samd'
    """

    vendor: str
    arch: str
    board: str
    params: Dict[str, str] = field(default_factory=dict, hash=False)

    @classmethod
    def from_fqbn(cls, fqbn: str) -> "BoardInfo":
        """
        Parse an FQBN.

        Args:
            fqbn: ``vendor:arch:board[:key=value[,key=value]...]``

        Returns:
            BoardInfo instance

        Raises:
            BoardInfoError: If any part of the name is malformed
        """
        match = FQBN_PATTERN.match(fqbn)
        if not match:
            raise BoardInfoError(f"Invalid fully-qualified board name: '{fqbn}'")

        params: Dict[str, str] = {}
        if match.group(4):
            for pair in match.group(4).split(","):
                key, sep, value = pair.partition("=")
                if not sep or not key or not value or "=" in value:
                    raise BoardInfoError(f"Invalid fully-qualified board name: '{fqbn}'")
                params[key] = value

        return cls(
            vendor=match.group(1),
            arch=match.group(2),
            board=match.group(3),
            params=params,
        )

    @classmethod
    def from_config(cls, value: Any) -> "BoardInfo":
        """
        Build from a configuration value.

        Accepts an FQBN string or a table with ``vendor``, ``arch``, ``board``
        and optional ``params`` keys.

        Raises:
            BoardInfoError: If the value has the wrong shape
        """
        if isinstance(value, str):
            return cls.from_fqbn(value)
        if not isinstance(value, Mapping):
            raise BoardInfoError(f"Invalid target board: {value!r}")

        unknown = set(value) - {"vendor", "arch", "board", "params"}
        if unknown:
            raise BoardInfoError(
                f"Unknown target board fields: {', '.join(sorted(unknown))}"
            )
        try:
            params = value.get("params", {})
            return cls(
                vendor=str(value["vendor"]),
                arch=str(value["arch"]),
                board=str(value["board"]),
                params={str(k): str(v) for k, v in params.items()},
            )
        except KeyError as e:
            raise BoardInfoError(f"Target board is missing field: {e}") from e
        except AttributeError as e:
            raise BoardInfoError("Target board params must be a table") from e

    def __str__(self) -> str:
        fqbn = f"{self.vendor}:{self.arch}:{self.board}"
        if self.params:
            fqbn += ":" + ",".join(f"{k}={v}" for k, v in self.params.items())
        return fqbn
