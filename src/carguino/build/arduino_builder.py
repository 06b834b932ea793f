"""
arduino-builder invocation.

``arduino-builder`` resolves a board's platform, core, variant and tools from
an Arduino installation. Carguino only uses it to dump the board's complete
build preferences.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..config.board_info import BoardInfo
from ..config.preferences import Preferences
from ..config.user_config import UserConfig
from ..subprocess_utils import exec_with_output

logger = logging.getLogger(__name__)


class ArduinoBuilder:
    """
    Command builder for ``arduino-builder``.

    Args:
        board: Board to resolve
        home: Arduino installation; when None, ``arduino-builder`` is taken
            from PATH and no default directories are passed
    """

    def __init__(self, board: BoardInfo, home: Optional[Path] = None):
        self.board = board
        self.home = Path(home) if home is not None else None
        self.hardware: List[Path] = []
        self.tools: List[Path] = []
        self.libraries: List[Path] = []
        self.built_in_libraries: List[Path] = []
        self.prefs: List[str] = []

    @classmethod
    def from_user_config(
        cls,
        board: BoardInfo,
        user_config: UserConfig,
        home: Optional[Path] = None
    ) -> "ArduinoBuilder":
        """
        Configure from the user's configuration files.

        Args:
            board: Board to resolve
            user_config: Resolved configuration chain
            home: Installation overriding the configured one (``ARDUINO_HOME``)
        """
        builder = cls(board, home if home is not None else user_config.home)
        for path in user_config.hardware:
            builder.add_hardware(path)
        for path in user_config.tools:
            builder.add_tools(path)
        for path in user_config.libraries:
            builder.add_libraries(path)
        for key, value in user_config.preferences:
            builder.add_pref(key, value)
        return builder

    def add_hardware(self, path: Path) -> "ArduinoBuilder":
        self.hardware.append(Path(path))
        return self

    def add_tools(self, path: Path) -> "ArduinoBuilder":
        self.tools.append(Path(path))
        return self

    def add_libraries(self, path: Path) -> "ArduinoBuilder":
        self.libraries.append(Path(path))
        return self

    def add_pref(self, key: str, value: object) -> "ArduinoBuilder":
        self.prefs.append(f"{key}={value}")
        return self

    def base_command(self) -> List[str]:
        """Command line shared by every invocation."""
        if self.home is not None:
            cmd = [
                str(self.home / "arduino-builder"),
                "-built-in-libraries", str(self.home / "libraries"),
                "-hardware", str(self.home / "hardware"),
                "-tools", str(self.home / "hardware" / "tools" / "avr"),
                "-tools", str(self.home / "tools-builder"),
            ]
        else:
            cmd = ["arduino-builder"]

        flags: Sequence[Tuple[str, List[Path]]] = (
            ("-hardware", self.hardware),
            ("-tools", self.tools),
            ("-built-in-libraries", self.built_in_libraries),
            ("-libraries", self.libraries),
        )
        for flag, paths in flags:
            for path in paths:
                cmd.extend([flag, str(path)])

        cmd.extend(["-fqbn", str(self.board)])
        cmd.extend(["-warnings", "all"])
        cmd.extend(["-prefs", "compiler.warning_flags={compiler.warning_flags.all}"])
        for pref in self.prefs:
            cmd.extend(["-prefs", pref])
        return cmd

    def dump_prefs(self, source: Path) -> Preferences:
        """
        Dump the board's build preferences.

        Args:
            source: A sketch source file; its content does not matter

        Returns:
            Parsed (unexpanded) preferences

        Raises:
            ProcessError: If arduino-builder fails
        """
        cmd = self.base_command() + ["-dump-prefs", str(source)]
        result = exec_with_output(cmd)
        prefs = Preferences.parse(result.stdout.decode("utf-8", errors="replace"))
        logger.debug("Dumped %d preferences for %s", len(prefs), self.board)
        return prefs
