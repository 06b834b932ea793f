"""Build-script front end.

Cargo build scripts use these builders to compile board support code into a
static library and to generate bindings for its headers:

    config = BuildConfig.from_env()
    LibraryBuilder(config).core_sources().build("arduino")
    BindingsBuilder(config).generate("Arduino.h")

Output defaults to cargo's ``OUT_DIR``; link directives are printed on
stdout for cargo to pick up.
"""

import os
from pathlib import Path
from typing import List, Optional, Union

from .bindings import BindingGenerator
from .build_config import BuildConfig, BuildConfigError
from .native_compiler import NativeCompiler
from .source_scanner import collect_sources

PathLike = Union[str, Path]


def default_target_dir() -> Optional[Path]:
    out_dir = os.environ.get("OUT_DIR")
    return Path(out_dir) if out_dir else None


def object_file_for(source: Path, target_dir: Path, lib_name: str) -> Path:
    """Object file path for a source within a library's build directory."""
    return target_dir / lib_name / Path(source.name).with_suffix(".o")


def archive_file_for(target_dir: Path, lib_name: str) -> Path:
    return target_dir / f"lib{lib_name}.a"


class LibraryBuilder:
    """Compiles sources into a static library, one source at a time."""

    def __init__(self, config: BuildConfig):
        self.config = config
        self.compiler = NativeCompiler(config)
        self.sources: List[Path] = []
        self.include_dirs: List[Path] = []
        self._target_dir = default_target_dir()

    def source(self, source: PathLike) -> "LibraryBuilder":
        self.sources.append(Path(source))
        return self

    def core_sources(self) -> "LibraryBuilder":
        """Add every source under the core and variant directories."""
        self.sources.extend(collect_sources(self.config.core_path))
        self.sources.extend(collect_sources(self.config.variant_path))
        return self

    def platform_library(self, name: str) -> "LibraryBuilder":
        """
        Add a library bundled with the board's platform.

        Libraries in the 1.5 layout keep their code under ``src``; older
        ones keep it at the top level. Either directory also becomes an
        include directory.

        Raises:
            BuildConfigError: If the platform has no such library
        """
        library_dir = self.config.library_path(name)
        if library_dir is None:
            raise BuildConfigError(f"Unknown platform library: '{name}'")
        source_dir = library_dir / "src"
        if not source_dir.is_dir():
            source_dir = library_dir
        self.sources.extend(collect_sources(source_dir))
        self.include_dirs.append(source_dir)
        return self

    def include_dir(self, include_dir: PathLike) -> "LibraryBuilder":
        self.include_dirs.append(Path(include_dir))
        return self

    def target_dir(self, target_dir: PathLike) -> "LibraryBuilder":
        self._target_dir = Path(target_dir)
        return self

    def build(self, lib_name: str) -> Path:
        """
        Compile and archive every registered source.

        Each source is compiled and then added to ``lib<lib_name>.a`` before
        the next one is compiled, in registration order. The first failure
        stops the build.

        Returns:
            Path of the static archive

        Raises:
            BuildConfigError: If no target directory is known or a build step
                cannot prepare its output
            ProcessError: If a compiler or the archiver fails
        """
        target_dir = _require_target_dir(self._target_dir)
        archive_file = archive_file_for(target_dir, lib_name)

        for source in self.sources:
            object_file = object_file_for(source, target_dir, lib_name)
            self.compiler.compile(source, object_file, self.include_dirs)
            self.compiler.archive(object_file, archive_file)

        print(f"cargo:rustc-link-search=native={target_dir}")
        print(f"cargo:rustc-link-lib=static={lib_name}")
        return archive_file


class BindingsBuilder:
    """Generates bindings for board headers."""

    def __init__(self, config: BuildConfig, bindgen: str = "bindgen"):
        self.generator = BindingGenerator(config, bindgen)
        self.include_dirs: List[Path] = []
        self.options: List[str] = []
        self._target_dir = default_target_dir()

    def include_dir(self, include_dir: PathLike) -> "BindingsBuilder":
        self.include_dirs.append(Path(include_dir))
        return self

    def target_dir(self, target_dir: PathLike) -> "BindingsBuilder":
        self._target_dir = Path(target_dir)
        return self

    def option(self, *args: str) -> "BindingsBuilder":
        """Pass extra flags to bindgen, e.g. ``option("--allowlist-function", "digitalWrite")``."""
        self.options.extend(args)
        return self

    def generate(self, header: PathLike) -> Path:
        """Write bindings for a header; returns the generated file."""
        target_dir = _require_target_dir(self._target_dir)
        return self.generator.generate(
            Path(header), self.include_dirs, target_dir, self.options
        )


def _require_target_dir(target_dir: Optional[Path]) -> Path:
    if target_dir is None:
        raise BuildConfigError("No target directory given and OUT_DIR is not set")
    return target_dir
