"""Build configuration handed to cargo build scripts.

``carguino`` gathers everything a build script needs to compile board support
code (recipes, core and variant paths, compiler include directories) while it
still has the board's preferences, serializes it to JSON and passes it to
``xargo`` in the ``CARGUINO_CONFIG`` environment variable. Build scripts
deserialize it verbatim; nothing is rediscovered on their side.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..config.preferences import Preferences
from ..errors import CarguinoError
from .recipe import Recipe
from .system_includes import discover_system_includes

CONFIG_ENV_VAR = "CARGUINO_CONFIG"

# Preferences that must survive expansion as recipe placeholders
RESERVED_PLACEHOLDERS = {
    "source_file": "%source_file",
    "object_file": "%object_file",
    "includes": "%includes",
    "archive_file": "%archive_file",
    "archive_file_path": "%archive_file",
}

# Recipe keys (``recipe.<name>.pattern``) for each build step
C_COMPILER_RECIPE = "c.o"
CPP_COMPILER_RECIPE = "cpp.o"
ASSEMBLER_RECIPE = "S.o"
ARCHIVER_RECIPE = "ar"


class BuildConfigError(CarguinoError):
    """Raised when the build configuration is unavailable or a build step fails."""
    pass


@dataclass(frozen=True)
class BuildConfig:
    """
    Per-build snapshot of the board's native build settings.

    Attributes:
        core: Core name (``build.core``)
        arch: Board architecture, lower case
        board: Board define (``build.board``), lower case
        llvm_target: Target triple for the cross compiler
        core_path: Core source directory
        variant_path: Variant source directory
        library_paths: Platform libraries by name
        c_system_includes: Built-in include directories of the C compiler
        cpp_system_includes: Built-in include directories of the C++ compiler
        c_compiler: C compile recipe
        cpp_compiler: C++ compile recipe
        assembler: Assembler recipe
        archiver: Archive recipe
    """

    core: str
    arch: str
    board: str
    llvm_target: str
    core_path: Path
    variant_path: Path
    c_compiler: Recipe
    cpp_compiler: Recipe
    assembler: Recipe
    archiver: Recipe
    library_paths: Dict[str, Path] = field(default_factory=dict, hash=False)
    c_system_includes: List[Path] = field(default_factory=list, hash=False)
    cpp_system_includes: List[Path] = field(default_factory=list, hash=False)

    @classmethod
    def from_preferences(
        cls,
        prefs: Preferences,
        llvm_target: str,
        arch: str,
        library_paths: Optional[Mapping[str, Path]] = None
    ) -> "BuildConfig":
        """
        Build the configuration from board preferences.

        Recipe placeholders are reserved first so that expansion leaves them
        in place, then both compilers are probed for their system includes.
        The caller's preferences are not modified.

        Raises:
            PreferencesError: If a required preference is missing
        """
        prefs = prefs.copy()
        for key, value in RESERVED_PLACEHOLDERS.items():
            prefs.set(key, value)

        core = prefs.require("build.core")
        board = prefs.require("build.board").lower()
        core_path = Path(prefs.require("build.core.path"))
        variant_path = Path(prefs.require("build.variant.path"))

        c_compiler = Recipe.from_preferences(prefs, C_COMPILER_RECIPE)
        cpp_compiler = Recipe.from_preferences(prefs, CPP_COMPILER_RECIPE)
        assembler = Recipe.from_preferences(prefs, ASSEMBLER_RECIPE)
        archiver = Recipe.from_preferences(prefs, ARCHIVER_RECIPE)

        return cls(
            core=core,
            arch=arch,
            board=board,
            llvm_target=llvm_target,
            core_path=core_path,
            variant_path=variant_path,
            c_compiler=c_compiler,
            cpp_compiler=cpp_compiler,
            assembler=assembler,
            archiver=archiver,
            library_paths=dict(library_paths or {}),
            c_system_includes=discover_system_includes(c_compiler.command(), "c"),
            cpp_system_includes=discover_system_includes(cpp_compiler.command(), "c++"),
        )

    @classmethod
    def from_json(cls, text: str) -> "BuildConfig":
        """
        Deserialize a configuration produced by ``to_json``.

        Raises:
            BuildConfigError: If the document is malformed
        """
        try:
            data = json.loads(text)
            return cls(
                core=data["core"],
                arch=data["arch"],
                board=data["board"],
                llvm_target=data["llvm_target"],
                core_path=Path(data["core_path"]),
                variant_path=Path(data["variant_path"]),
                c_compiler=Recipe(data["c_compiler"]),
                cpp_compiler=Recipe(data["cpp_compiler"]),
                assembler=Recipe(data["assembler"]),
                archiver=Recipe(data["archiver"]),
                library_paths={
                    name: Path(path) for name, path in data["library_paths"].items()
                },
                c_system_includes=[Path(p) for p in data["c_system_includes"]],
                cpp_system_includes=[Path(p) for p in data["cpp_system_includes"]],
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise BuildConfigError(f"Unable to deserialize configuration: {e}") from e

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BuildConfig":
        """
        Load the configuration passed down by ``carguino``.

        Raises:
            BuildConfigError: If the variable is missing or malformed
        """
        if environ is None:
            environ = os.environ
        text = environ.get(CONFIG_ENV_VAR)
        if text is None:
            raise BuildConfigError(
                f"Could not read ${CONFIG_ENV_VAR} variable (is carguino running?)"
            )
        return cls.from_json(text)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "core": self.core,
            "arch": self.arch,
            "board": self.board,
            "llvm_target": self.llvm_target,
            "core_path": str(self.core_path),
            "variant_path": str(self.variant_path),
            "library_paths": {name: str(path) for name, path in self.library_paths.items()},
            "c_system_includes": [str(p) for p in self.c_system_includes],
            "cpp_system_includes": [str(p) for p in self.cpp_system_includes],
            "c_compiler": self.c_compiler.pattern,
            "cpp_compiler": self.cpp_compiler.pattern,
            "assembler": self.assembler.pattern,
            "archiver": self.archiver.pattern,
        }

    def to_json(self) -> str:
        """Serialize for the ``CARGUINO_CONFIG`` variable."""
        return json.dumps(self.to_dict())

    def base_includes(self) -> List[Path]:
        """Include directories every native compile uses."""
        return [self.core_path, self.variant_path]

    def library_path(self, name: str) -> Optional[Path]:
        """Directory of a platform library, if the platform ships it."""
        return self.library_paths.get(name)
