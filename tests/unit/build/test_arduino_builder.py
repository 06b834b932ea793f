"""Tests for arduino-builder command construction."""

import subprocess
from pathlib import Path
from unittest.mock import patch
from carguino.build.arduino_builder import ArduinoBuilder
from carguino.config.board_info import BoardInfo
from carguino.config.user_config import UserConfig


BOARD = BoardInfo.from_fqbn("arduino:avr:uno")


class TestBaseCommand:
    """Test the arduino-builder command line."""

    def test_without_home(self):
        assert ArduinoBuilder(BOARD).base_command() == [
            "arduino-builder",
            "-fqbn", "arduino:avr:uno",
            "-warnings", "all",
            "-prefs", "compiler.warning_flags={compiler.warning_flags.all}",
        ]

    def test_with_home(self):
        home = Path("/opt/arduino")

        cmd = ArduinoBuilder(BOARD, home).base_command()

        assert cmd[:9] == [
            str(home / "arduino-builder"),
            "-built-in-libraries", str(home / "libraries"),
            "-hardware", str(home / "hardware"),
            "-tools", str(home / "hardware" / "tools" / "avr"),
            "-tools", str(home / "tools-builder"),
        ]

    def test_configured_paths_and_prefs(self):
        builder = (
            ArduinoBuilder(BOARD)
            .add_hardware(Path("/hw"))
            .add_tools(Path("/tools"))
            .add_libraries(Path("/libs"))
            .add_pref("build.extra_flags", "-DFOO")
        )

        assert builder.base_command() == [
            "arduino-builder",
            "-hardware", "/hw",
            "-tools", "/tools",
            "-libraries", "/libs",
            "-fqbn", "arduino:avr:uno",
            "-warnings", "all",
            "-prefs", "compiler.warning_flags={compiler.warning_flags.all}",
            "-prefs", "build.extra_flags=-DFOO",
        ]

    def test_from_user_config(self):
        user_config = UserConfig(
            target_board=BOARD,
            home=Path("/configured"),
            hardware=[Path("/hw1"), Path("/hw2")],
            preferences=[("a", "1")],
        )

        builder = ArduinoBuilder.from_user_config(BOARD, user_config)

        assert builder.home == Path("/configured")
        assert builder.hardware == [Path("/hw1"), Path("/hw2")]
        assert builder.prefs == ["a=1"]

    def test_home_override(self):
        """Test an explicit home wins over the configured one."""
        user_config = UserConfig(home=Path("/configured"))

        builder = ArduinoBuilder.from_user_config(BOARD, user_config, Path("/env"))

        assert builder.home == Path("/env")


class TestDumpPrefs:
    """Test dumping board preferences."""

    def test_dump_prefs(self):
        output = b"name=Arduino Uno\nbuild.mcu=atmega328p\nbuild.core.path={runtime.platform.path}/cores/arduino\nruntime.platform.path=/avr\n"
        result = subprocess.CompletedProcess(args=[], returncode=0, stdout=output, stderr=b"")

        with patch("carguino.build.arduino_builder.exec_with_output", return_value=result) as mock_exec:
            prefs = ArduinoBuilder(BOARD).dump_prefs(Path("/tmp/project.c"))

        cmd = mock_exec.call_args.args[0]
        assert cmd[-2:] == ["-dump-prefs", "/tmp/project.c"]
        assert prefs.get("name") == "Arduino Uno"
        assert prefs.get("build.core.path") == "/avr/cores/arduino"
