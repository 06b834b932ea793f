"""
Command-line interface for Carguino.

This module provides the `carguino` CLI tool, a cargo wrapper that builds
Rust firmware for Arduino boards.
"""

import argparse
import logging
import os
import sys
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from carguino import __version__
from carguino.build import ArduinoBuilder, CargoOrchestrator
from carguino.cli_utils import CargoOptions, Shell, Verbosity
from carguino.config import BoardInfo, UserConfig
from carguino.errors import CarguinoError

USAGE_EPILOG = """\
The supported cargo subcommands are: `build`, `check`, `clean`, `doc`, `rustc`,
`rustdoc` and `clippy` (if installed). Any other commands are passed as-is to
cargo.
"""


@dataclass
class CargoArgs:
    """Arguments for a cargo command."""

    command: str
    args: List[str] = field(default_factory=list)
    target_board: Optional[str] = None
    current_dir: Path = field(default_factory=Path.cwd)


def create_builder(
    options: CargoOptions,
    user_config: UserConfig,
    environ: Mapping[str, str]
) -> Optional[ArduinoBuilder]:
    """arduino-builder for the selected board, or None when no board is selected.

    A board given on the command line wins over configuration files, and
    ``ARDUINO_HOME`` wins over a configured home directory.
    """
    board: Optional[BoardInfo] = options.target_board or user_config.target_board
    if board is None:
        return None
    home = environ.get("ARDUINO_HOME")
    return ArduinoBuilder.from_user_config(
        board, user_config, Path(home) if home else None
    )


def cargo_command(args: CargoArgs, shell: Shell, environ: Optional[Mapping[str, str]] = None) -> None:
    """Run a cargo subcommand for the configured board.

    Examples:
        carguino build --target-board arduino:sam:arduino_due_x
        carguino build --release       # Board from .carguino/config
        carguino check -v
    """
    environ = os.environ if environ is None else environ
    cargo_args = list(args.args)
    if args.target_board is not None:
        cargo_args = ["--target-board", args.target_board, *cargo_args]

    options = CargoOptions.parse(cargo_args, shell)
    if shell.verbosity is Verbosity.VERBOSE:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    user_config = UserConfig.load(args.current_dir)
    builder = create_builder(options, user_config, environ)
    CargoOrchestrator(options, builder, shell, environ=environ).run(args.command)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the carguino CLI."""
    parser = argparse.ArgumentParser(
        prog="carguino",
        allow_abbrev=False,
        description="Cargo wrapper for Arduino projects.",
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"carguino {__version__}",
    )
    parser.add_argument(
        "--target-board",
        default=None,
        metavar="BOARD",
        help="Fully-qualified Arduino board name to compile for",
    )
    parser.add_argument(
        "command",
        nargs="?",
        help="cargo subcommand",
    )
    parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to cargo",
    )

    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    cargo_args = CargoArgs(
        command=parsed_args.command,
        args=parsed_args.args,
        target_board=parsed_args.target_board,
    )

    shell = Shell()
    try:
        cargo_command(cargo_args, shell)
    except CarguinoError as e:
        shell.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        shell.warn("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        shell.error(f"{type(e).__name__}: {e}")
        if shell.verbosity is Verbosity.VERBOSE:
            shell.stream.write(traceback.format_exc())
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
