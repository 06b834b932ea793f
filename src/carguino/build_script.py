"""
Command-line interface for Carguino build scripts.

This module provides the `carguino-build` tool, run from a crate's
``build.rs`` while ``carguino`` drives cargo. It reads the board's build
configuration from ``CARGUINO_CONFIG`` and compiles board code or
generates bindings, printing cargo directives on stdout.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from carguino.build import BindingsBuilder, BuildConfig, LibraryBuilder
from carguino.errors import CarguinoError


@dataclass
class LibraryArgs:
    """Arguments for the build command."""

    lib_name: str
    core_sources: bool = False
    platform_libraries: List[str] = field(default_factory=list)
    sources: List[Path] = field(default_factory=list)
    include_dirs: List[Path] = field(default_factory=list)
    target_dir: Optional[Path] = None


@dataclass
class BindgenArgs:
    """Arguments for the bindgen command."""

    header: Path
    include_dirs: List[Path] = field(default_factory=list)
    target_dir: Optional[Path] = None
    options: List[str] = field(default_factory=list)


def build_command(args: LibraryArgs) -> Path:
    """Compile sources into a static library.

    Examples:
        carguino-build build arduino --core-sources
        carguino-build build servo --platform-library Servo
        carguino-build build shim --source src/shim.c --include-dir src
    """
    builder = LibraryBuilder(BuildConfig.from_env())
    if args.core_sources:
        builder.core_sources()
    for name in args.platform_libraries:
        builder.platform_library(name)
    for source in args.sources:
        builder.source(source)
    for include_dir in args.include_dirs:
        builder.include_dir(include_dir)
    if args.target_dir is not None:
        builder.target_dir(args.target_dir)
    return builder.build(args.lib_name)


def bindgen_command(args: BindgenArgs) -> Path:
    """Generate Rust bindings for a board header.

    Examples:
        carguino-build bindgen Arduino.h
        carguino-build bindgen Arduino.h --option=--allowlist-function --option=digitalWrite
    """
    builder = BindingsBuilder(BuildConfig.from_env())
    for include_dir in args.include_dirs:
        builder.include_dir(include_dir)
    if args.target_dir is not None:
        builder.target_dir(args.target_dir)
    builder.option(*args.options)
    return builder.generate(args.header)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the carguino-build CLI."""
    parser = argparse.ArgumentParser(
        prog="carguino-build",
        description="Build board support code from a cargo build script",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Build command
    build_parser = subparsers.add_parser(
        "build",
        help="Compile sources into a static library",
    )
    build_parser.add_argument(
        "lib_name",
        help="Library name (produces lib<name>.a)",
    )
    build_parser.add_argument(
        "--core-sources",
        action="store_true",
        help="Compile the board's core and variant sources",
    )
    build_parser.add_argument(
        "--platform-library",
        action="append",
        default=[],
        metavar="NAME",
        help="Compile a library bundled with the board's platform",
    )
    build_parser.add_argument(
        "--source",
        action="append",
        default=[],
        type=Path,
        help="Source file to compile (repeatable)",
    )
    build_parser.add_argument(
        "--include-dir",
        action="append",
        default=[],
        type=Path,
        help="Additional include directory (repeatable)",
    )
    build_parser.add_argument(
        "--target-dir",
        default=None,
        type=Path,
        help="Output directory (default: $OUT_DIR)",
    )

    # Bindgen command
    bindgen_parser = subparsers.add_parser(
        "bindgen",
        help="Generate Rust bindings for a header",
    )
    bindgen_parser.add_argument(
        "header",
        type=Path,
        help="C or C++ header file",
    )
    bindgen_parser.add_argument(
        "--include-dir",
        action="append",
        default=[],
        type=Path,
        help="Additional include directory (repeatable)",
    )
    bindgen_parser.add_argument(
        "--target-dir",
        default=None,
        type=Path,
        help="Output directory (default: $OUT_DIR)",
    )
    bindgen_parser.add_argument(
        "--option",
        action="append",
        default=[],
        help="Extra bindgen flag (repeatable)",
    )

    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    try:
        if parsed_args.command == "build":
            build_command(LibraryArgs(
                lib_name=parsed_args.lib_name,
                core_sources=parsed_args.core_sources,
                platform_libraries=parsed_args.platform_library,
                sources=parsed_args.source,
                include_dirs=parsed_args.include_dir,
                target_dir=parsed_args.target_dir,
            ))
        elif parsed_args.command == "bindgen":
            bindgen_command(BindgenArgs(
                header=parsed_args.header,
                include_dirs=parsed_args.include_dir,
                target_dir=parsed_args.target_dir,
                options=parsed_args.option,
            ))
    except CarguinoError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
