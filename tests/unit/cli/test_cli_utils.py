"""Unit tests for CLI utility functions."""

import io
import pytest
from carguino.cli_utils import CargoOptions, MessageFormat, OptionError, Shell, Verbosity
from carguino.config.board_info import BoardInfo, BoardInfoError


class TestShell:
    """Test cargo-style output."""

    @pytest.fixture
    def shell(self):
        return Shell(io.StringIO(), color="never")

    def test_status_right_aligned(self, shell):
        shell.status("Configuring", "Arduino Uno")

        assert shell.stream.getvalue() == " Configuring Arduino Uno\n"

    def test_warn_and_error(self, shell):
        shell.warn("careful")
        shell.error("broken")

        assert shell.stream.getvalue() == "warning: careful\nerror: broken\n"

    def test_quiet_suppresses_status_and_warnings(self, shell):
        shell.verbosity = Verbosity.QUIET

        shell.status("Compiling", "x")
        shell.warn("careful")
        shell.error("broken")

        assert shell.stream.getvalue() == "error: broken\n"

    def test_verbose_only_when_verbose(self, shell):
        shell.verbose("Running", "cargo")
        assert shell.stream.getvalue() == ""

        shell.verbosity = Verbosity.VERBOSE
        shell.verbose("Running", "cargo")
        assert shell.stream.getvalue() == "     Running cargo\n"

    def test_color_always(self):
        shell = Shell(io.StringIO(), color="always")

        shell.error("broken")

        assert shell.stream.getvalue() == f"{Shell.RED}error:{Shell.RESET} broken\n"

    def test_color_auto_without_tty(self):
        """Test auto mode does not colour a buffer."""
        shell = Shell(io.StringIO())

        assert shell.use_color() is False

    def test_invalid_color(self):
        with pytest.raises(OptionError, match="argument for --color must be auto, always, or never"):
            Shell(io.StringIO(), color="sometimes")


class TestCargoOptions:
    """Test parsing of cargo arguments."""

    @pytest.fixture
    def shell(self):
        return Shell(io.StringIO(), color="never")

    def test_passthrough(self, shell):
        options = CargoOptions.parse(["--release", "--features", "x", "--", "arg"], shell)

        assert options.cargo_args == ["--release", "--features", "x", "--", "arg"]
        assert options.target_board is None
        assert options.message_format is MessageFormat.HUMAN

    @pytest.mark.parametrize("args", [
        ["--target-board", "arduino:avr:uno"],
        ["--target-board=arduino:avr:uno"],
    ])
    def test_target_board(self, shell, args):
        options = CargoOptions.parse(args + ["--release"], shell)

        assert options.target_board == BoardInfo("arduino", "avr", "uno")
        assert options.cargo_args == ["--release"]

    def test_target_board_empty(self, shell):
        with pytest.raises(OptionError, match="target-board is empty"):
            CargoOptions.parse(["--target-board="], shell)

    def test_target_board_missing_value(self, shell):
        with pytest.raises(OptionError, match="Expected argument for option '--target-board'"):
            CargoOptions.parse(["--target-board"], shell)

    def test_target_board_invalid(self, shell):
        with pytest.raises(BoardInfoError):
            CargoOptions.parse(["--target-board", "uno"], shell)

    @pytest.mark.parametrize("args", [
        ["--target", "thumbv7m-none-eabi"],
        ["--target=thumbv7m-none-eabi"],
    ])
    def test_target_ignored_with_warning(self, shell, args):
        options = CargoOptions.parse(args + ["--release"], shell)

        assert options.cargo_args == ["--release"]
        assert "warning: Do not specify a target triple directly" in shell.stream.getvalue()

    @pytest.mark.parametrize("args,expected", [
        (["--message-format", "json"], MessageFormat.JSON),
        (["--message-format=JSON"], MessageFormat.JSON),
        (["--message-format", "human"], MessageFormat.HUMAN),
        (["--message-format=short"], MessageFormat.HUMAN),
    ])
    def test_message_format_consumed(self, shell, args, expected):
        options = CargoOptions.parse(args, shell)

        assert options.message_format is expected
        assert options.cargo_args == []
        assert options.message_format_args() == ["--message-format", expected.value]

    def test_color_forwarded(self, shell):
        options = CargoOptions.parse(["--color", "always"], shell)

        assert shell.color == "always"
        assert options.cargo_args == ["--color", "always"]

    def test_color_attached_forwarded(self, shell):
        options = CargoOptions.parse(["--color=never"], shell)

        assert shell.color == "never"
        assert options.cargo_args == ["--color=never"]

    def test_invalid_color(self, shell):
        with pytest.raises(OptionError):
            CargoOptions.parse(["--color=blue"], shell)

    @pytest.mark.parametrize("flag,verbosity", [
        ("-v", Verbosity.VERBOSE),
        ("-vv", Verbosity.VERBOSE),
        ("--verbose", Verbosity.VERBOSE),
        ("-q", Verbosity.QUIET),
        ("--quiet", Verbosity.QUIET),
    ])
    def test_verbosity_forwarded(self, shell, flag, verbosity):
        options = CargoOptions.parse([flag], shell)

        assert shell.verbosity is verbosity
        assert options.cargo_args == [flag]
