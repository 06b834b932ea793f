"""
Build orchestration for Carguino projects.

This module coordinates a complete cargo run for an Arduino board:
- Board preferences (arduino-builder)
- Target descriptor synthesis (rustc)
- Build configuration handoff to build scripts (CARGUINO_CONFIG)
- Cross compilation (xargo, two passes)
- Firmware conversion (objcopy recipes)
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from ..cli_utils import CargoOptions, Shell
from ..config.preferences import Preferences
from ..errors import CarguinoError
from ..subprocess_utils import exec_process, exec_with_output, format_command
from .arduino_builder import ArduinoBuilder
from .binary_generator import BinaryGenerator, objcopy_recipes
from .build_config import CONFIG_ENV_VAR, BuildConfig
from .linker_options import parse_linker_options
from .target_spec import DEFAULT_TARGETS_DIR, TargetSpecSynthesizer

logger = logging.getLogger(__name__)

REQUIRED_PREFERENCES = (
    "name",
    "build.mcu",
    "build.arch",
    "recipe.c.combine.pattern",
    "runtime.platform.path",
)


class OrchestratorError(CarguinoError):
    """Exception raised for orchestration errors."""
    pass


@dataclass
class CargoRunResult:
    """Result of a cargo run.

    Attributes:
        target: Name of the target descriptor built for (None without a board)
        package_id: cargo package id of the project
        artifacts: Firmware files cargo produced
        binaries: Files produced by the objcopy recipes
    """

    target: Optional[str] = None
    package_id: Optional[str] = None
    artifacts: List[Path] = field(default_factory=list)
    binaries: List[Path] = field(default_factory=list)


def detect_libraries(libraries_dir: Path, shell: Shell) -> Dict[str, Path]:
    """
    Find the libraries bundled with a platform.

    Every subdirectory is a library named after the directory. An unreadable
    directory only produces a warning.

    Args:
        libraries_dir: ``<platform>/libraries``
        shell: Shell for warnings

    Returns:
        Library directories by name
    """
    libraries: Dict[str, Path] = {}
    try:
        entries = sorted(libraries_dir.iterdir())
    except OSError as e:
        shell.warn(f"Skipping library directory '{libraries_dir}': {e}")
        return libraries

    for entry in entries:
        if not entry.is_dir():
            continue
        if entry.name in libraries:
            shell.warn(f"Library directory for '{entry.name}' overridden")
        libraries[entry.name] = entry
    return libraries


def cfg_flags(arch: str, mcu: str) -> List[str]:
    return [f'--cfg arduino_arch="{arch}"', f'--cfg arduino_mcu="{mcu}"']


def extend_flags(existing: Optional[str], flags: Sequence[str]) -> str:
    """Append flags to an environment flag string such as ``RUSTFLAGS``."""
    parts = [existing] if existing is not None else []
    parts.extend(flags)
    return " ".join(parts)


def binary_artifacts(stdout: str, package_id: str) -> List[Path]:
    """
    Firmware files from cargo's JSON message stream.

    Only ``compiler-artifact`` messages for the given package whose target
    kinds include ``bin`` count. Lines that are not JSON objects are skipped.
    """
    artifacts: List[Path] = []
    for line in stdout.splitlines():
        try:
            message = json.loads(line)
        except ValueError:
            continue
        if not isinstance(message, dict):
            continue
        if message.get("reason") != "compiler-artifact":
            continue
        if message.get("package_id") != package_id:
            continue
        if "bin" not in (message.get("target") or {}).get("kind", []):
            continue
        artifacts.extend(Path(filename) for filename in message.get("filenames", []))
    return artifacts


class CargoOrchestrator:
    """
    Runs cargo for an Arduino board.

    This class coordinates all phases of a run:
    1. Dump the board's preferences with arduino-builder
    2. Collect objcopy recipes, platform libraries and linker options
    3. Look up the project's package id with ``cargo metadata``
    4. Synthesize (or reuse) the board's target descriptor
    5. Run xargo with the build configuration in CARGUINO_CONFIG
    6. Run xargo again with JSON messages to find the firmware artifacts
    7. Convert each artifact with each objcopy recipe

    Without a board, cargo runs unchanged.

    Example usage:
        orchestrator = CargoOrchestrator(options, builder, shell)
        result = orchestrator.run("build")
        for binary in result.binaries:
            print(binary)
    """

    def __init__(
        self,
        options: CargoOptions,
        builder: Optional[ArduinoBuilder],
        shell: Shell,
        targets_dir: Path = DEFAULT_TARGETS_DIR,
        environ: Optional[Mapping[str, str]] = None,
        cargo: str = "cargo",
        xargo: str = "xargo",
        rustc: str = "rustc"
    ):
        """
        Initialize orchestrator.

        Args:
            options: Parsed cargo options
            builder: arduino-builder for the target board, None without a board
            shell: Shell for status output
            targets_dir: Target descriptor cache
            environ: Environment to read RUSTFLAGS/RUSTDOCFLAGS from
            cargo: cargo executable
            xargo: xargo executable
            rustc: rustc executable
        """
        self.options = options
        self.builder = builder
        self.shell = shell
        self.targets_dir = Path(targets_dir)
        self.environ = os.environ if environ is None else environ
        self.cargo = cargo
        self.xargo = xargo
        self.rustc = rustc

    def run(self, command: str) -> CargoRunResult:
        """
        Run a cargo subcommand.

        Args:
            command: cargo subcommand (build, check, doc, ...)

        Returns:
            CargoRunResult

        Raises:
            OrchestratorError: If the board's preferences are incomplete
            TargetSpecError: If the board is not supported
            ProcessError: If any tool fails
        """
        args = self.options.cargo_args
        if self.builder is None:
            self.shell.warn("No target-board was specified; running cargo normally.")
            cmd = [self.cargo, command, *self.options.message_format_args(), *args]
            self._verbose_command(cmd)
            exec_process(cmd)
            return CargoRunResult()

        self.shell.verbose("Retrieving", "build settings")
        prefs = self.dump_prefs()
        board_name, mcu, arch, link_recipe, platform_dir = (
            prefs.require(key) for key in REQUIRED_PREFERENCES
        )
        arch = arch.lower()
        self.shell.status("Configuring", board_name)

        recipes = objcopy_recipes(prefs)
        library_paths = detect_libraries(Path(platform_dir) / "libraries", self.shell)
        linker_options = parse_linker_options(link_recipe)

        flags = cfg_flags(arch, mcu)
        rustflags = extend_flags(self.environ.get("RUSTFLAGS"), flags)
        rustdocflags = extend_flags(self.environ.get("RUSTDOCFLAGS"), flags)

        package_id = self.package_id()

        try:
            self.targets_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OrchestratorError(
                f"Could not create targets directory '{self.targets_dir}': {e}"
            ) from e
        synthesizer = TargetSpecSynthesizer(
            self.targets_dir, rustc=self.rustc, verbose=self.shell.verbose
        )
        triple, target = synthesizer.create(self.builder.board, arch, mcu, linker_options)

        config = BuildConfig.from_preferences(prefs, triple, arch, library_paths)
        env = {
            CONFIG_ENV_VAR: config.to_json(),
            "RUSTFLAGS": rustflags,
            "RUSTDOCFLAGS": rustdocflags,
            "RUST_TARGET_PATH": str(self.targets_dir),
        }
        base = [self.xargo, command, "--target", target]

        first_pass = [*base, *self.options.message_format_args(), *args]
        self._verbose_command(first_pass)
        exec_process(first_pass, env=env)

        second_pass = [*base, "--message-format", "json", *args]
        output = exec_with_output(second_pass, env=env)
        artifacts = binary_artifacts(output.stdout.decode("utf-8", errors="replace"), package_id)
        logger.debug("Firmware artifacts: %s", artifacts)

        generator = BinaryGenerator(recipes, status=self.shell.status, verbose=self.shell.verbose)
        binaries = generator.generate(artifacts, package_id)
        return CargoRunResult(target, package_id, artifacts, binaries)

    def dump_prefs(self) -> Preferences:
        """Board preferences for an empty C project."""
        if self.builder is None:
            raise OrchestratorError("No target board to retrieve build settings for")
        try:
            with tempfile.TemporaryDirectory(prefix="carguino") as temp_dir:
                project = Path(temp_dir) / "project.c"
                project.touch()
                return self.builder.dump_prefs(project)
        except OSError as e:
            raise OrchestratorError(f"Could not create temporary project file: {e}") from e

    def package_id(self) -> str:
        """Id of the first package in ``cargo metadata --no-deps``."""
        cmd = [self.cargo, "metadata", "--no-deps"]
        self._verbose_command(cmd)
        output = exec_with_output(cmd)
        try:
            return json.loads(output.stdout)["packages"][0]["id"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise OrchestratorError(f"Unexpected output from cargo metadata: {e}") from e

    def _verbose_command(self, cmd: Sequence[str]) -> None:
        self.shell.verbose("Running", format_command(cmd))
