"""Native compilation of board support code.

Compiles C, C++ and assembly sources with the board platform's own recipes
and collects the objects into a static archive that cargo links into the
firmware.
"""

import subprocess
from pathlib import Path
from typing import Iterable, List

from .build_config import BuildConfig, BuildConfigError
from .recipe import Recipe, RecipeParams
from .source_scanner import SourceKind, source_kind


def include_flags(include_dirs: Iterable[Path]) -> str:
    """Render include directories for the ``%includes`` placeholder."""
    return "".join(f' "-I{directory}"' for directory in include_dirs)


def ensure_parent_dir(path: Path) -> None:
    """
    Create the directory a file will be written to.

    Raises:
        BuildConfigError: If the directory cannot be created
    """
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BuildConfigError(f"Unable to create directory '{Path(path).parent}': {e}") from e


class NativeCompiler:
    """
    Runs the compile and archive recipes of a build configuration.

    Every compile sees the core and variant directories first, followed by
    the caller's include directories.
    """

    def __init__(self, config: BuildConfig):
        self.config = config

    def includes(self, include_dirs: Iterable[Path] = ()) -> str:
        """``%includes`` value for the base plus caller include directories."""
        directories: List[Path] = self.config.base_includes()
        directories.extend(Path(d) for d in include_dirs)
        return include_flags(directories)

    def recipe_for(self, source: Path) -> Recipe:
        """
        Pick the recipe for a source file by its extension.

        Raises:
            BuildConfigError: If the extension is not a known source kind
        """
        kind = source_kind(source)
        if kind is SourceKind.C:
            return self.config.c_compiler
        elif kind is SourceKind.CPP:
            return self.config.cpp_compiler
        elif kind is SourceKind.ASM:
            return self.config.assembler
        raise BuildConfigError(f"Unsupported source file: {source}")

    def compile(
        self,
        source: Path,
        object_file: Path,
        include_dirs: Iterable[Path] = ()
    ) -> subprocess.CompletedProcess:
        """
        Compile one source file.

        Args:
            source: C, C++ or assembly source
            object_file: Object file to produce
            include_dirs: Extra include directories

        Raises:
            BuildConfigError: If the source kind is unsupported or the
                output directory cannot be created
            ProcessError: If the compiler fails
        """
        recipe = self.recipe_for(source)
        ensure_parent_dir(object_file)
        return recipe.run(RecipeParams(
            source_file=str(source),
            object_file=str(object_file),
            includes=self.includes(include_dirs),
        ))

    def archive(self, object_file: Path, archive_file: Path) -> subprocess.CompletedProcess:
        """
        Add an object file to a static archive.

        Raises:
            BuildConfigError: If the archive directory cannot be created
            ProcessError: If the archiver fails
        """
        ensure_parent_dir(archive_file)
        return self.config.archiver.run(RecipeParams(
            object_file=str(object_file),
            archive_file=str(archive_file),
        ))
