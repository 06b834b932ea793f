"""
User configuration files.

Carguino reads ``.carguino/config`` TOML files from the current directory and
each of its ancestors, with the home directory acting as the outermost
parent. Inner files override scalar settings of outer ones; list settings and
preferences accumulate from the outermost file inwards.

Example ``.carguino/config``:
    target-board = "arduino:avr:uno"

    [arduino-builder]
    home = "/opt/arduino-1.8.19"
    hardware = ["~/Arduino/hardware"]

    [arduino-builder.preferences]
    "build.extra_flags" = "-DDEBUG"
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..errors import CarguinoError
from .board_info import BoardInfo, BoardInfoError

CONFIG_FILE = Path(".carguino") / "config"

TOP_LEVEL_KEYS = {"target-board", "arduino-builder"}
BUILDER_KEYS = {"home", "hardware", "tools", "libraries", "preferences"}


class UserConfigError(CarguinoError):
    """Raised when a configuration file cannot be read or parsed."""

    pass


@dataclass(frozen=True)
class ConfigFile:
    """Settings from a single configuration file."""

    path: Path
    target_board: Optional[BoardInfo] = None
    home: Optional[Path] = None
    hardware: Tuple[Path, ...] = ()
    tools: Tuple[Path, ...] = ()
    libraries: Tuple[Path, ...] = ()
    preferences: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def load(cls, path: Path) -> "ConfigFile":
        """
        Load one configuration file.

        Raises:
            UserConfigError: If the file cannot be read or is invalid
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise UserConfigError(f"Could not read configuration file '{path}': {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise UserConfigError(f"Could not parse configuration file '{path}': {e}") from e

        try:
            return cls._from_data(path, data)
        except (BoardInfoError, TypeError, ValueError) as e:
            raise UserConfigError(f"Could not parse configuration file '{path}': {e}") from e

    @classmethod
    def _from_data(cls, path: Path, data: Dict[str, Any]) -> "ConfigFile":
        _reject_unknown(data, TOP_LEVEL_KEYS, "configuration")

        target_board = None
        if "target-board" in data:
            target_board = BoardInfo.from_config(data["target-board"])

        builder = data.get("arduino-builder", {})
        if not isinstance(builder, dict):
            raise TypeError("[arduino-builder] must be a table")
        _reject_unknown(builder, BUILDER_KEYS, "[arduino-builder]")

        preferences = builder.get("preferences", {})
        if not isinstance(preferences, dict):
            raise TypeError("[arduino-builder.preferences] must be a table")

        home = builder.get("home")
        return cls(
            path=path,
            target_board=target_board,
            home=Path(home) if home is not None else None,
            hardware=_path_list(builder, "hardware"),
            tools=_path_list(builder, "tools"),
            libraries=_path_list(builder, "libraries"),
            preferences=tuple((str(k), str(v)) for k, v in preferences.items()),
        )


@dataclass(frozen=True)
class UserConfig:
    """
    Configuration resolved from the whole chain of files.

    Attributes:
        target_board: Innermost configured board, if any
        home: Innermost configured Arduino installation, if any
        hardware: Extra ``-hardware`` directories, outermost first
        tools: Extra ``-tools`` directories, outermost first
        libraries: Extra ``-libraries`` directories, outermost first
        preferences: ``-prefs`` overrides, outermost first
        files: Files that contributed, outermost first
    """

    target_board: Optional[BoardInfo] = None
    home: Optional[Path] = None
    hardware: List[Path] = field(default_factory=list)
    tools: List[Path] = field(default_factory=list)
    libraries: List[Path] = field(default_factory=list)
    preferences: List[Tuple[str, str]] = field(default_factory=list)
    files: List[Path] = field(default_factory=list)

    @classmethod
    def load(cls, current_dir: Path, home_dir: Optional[Path] = None) -> "UserConfig":
        """
        Load and flatten the configuration chain for a directory.

        Args:
            current_dir: Directory the tool was started in
            home_dir: Outermost configuration directory (default: user home)

        Returns:
            Flattened UserConfig
        """
        if home_dir is None:
            home_dir = Path.home()
        return cls.resolve(
            [ConfigFile.load(path) for path in config_paths(current_dir, home_dir)]
        )

    @classmethod
    def resolve(cls, files: List[ConfigFile]) -> "UserConfig":
        """Flatten config files ordered outermost first."""
        target_board = None
        home = None
        for config in files:
            if config.target_board is not None:
                target_board = config.target_board
            if config.home is not None:
                home = config.home

        return cls(
            target_board=target_board,
            home=home,
            hardware=[p for config in files for p in config.hardware],
            tools=[p for config in files for p in config.tools],
            libraries=[p for config in files for p in config.libraries],
            preferences=[kv for config in files for kv in config.preferences],
            files=[config.path for config in files],
        )


def config_paths(current_dir: Path, home_dir: Path) -> List[Path]:
    """
    Existing configuration files for a directory, outermost first.

    The home directory comes first, then the filesystem root down to
    ``current_dir``. A home directory that is also an ancestor is only
    read once, as the outermost file.
    """
    directories = [home_dir]
    directories.extend(reversed([current_dir, *current_dir.parents]))

    paths: List[Path] = []
    for directory in directories:
        path = directory / CONFIG_FILE
        if path.is_file() and path not in paths:
            paths.append(path)
    return paths


def _reject_unknown(table: Dict[str, Any], allowed: set, where: str) -> None:
    unknown = set(table) - allowed
    if unknown:
        raise ValueError(f"unknown keys in {where}: {', '.join(sorted(unknown))}")


def _path_list(table: Dict[str, Any], key: str) -> Tuple[Path, ...]:
    value = table.get(key, [])
    if not isinstance(value, list):
        raise TypeError(f"'{key}' must be a list of paths")
    return tuple(Path(item) for item in value)
