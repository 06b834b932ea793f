"""Rust bindings for board headers.

Runs ``bindgen`` on a C or C++ header with the same view of the headers the
board compiler has: the target triple, the compiler's built-in include
directories and the include paths, language standard, machine flags and
defines from the board's compile recipe.
"""

from pathlib import Path
from typing import Iterable, List, Sequence

from ..subprocess_utils import exec_with_output
from .build_config import BuildConfig, BuildConfigError
from .native_compiler import NativeCompiler
from .recipe import RecipeParams
from .source_scanner import HeaderKind, header_kind

# Recipe arguments clang understands; the rest are GCC/toolchain specific
FORWARDED_PREFIXES = ("-std=", "-m", "-I", "-D")


def forwarded_args(args: Iterable[str]) -> List[str]:
    """Recipe arguments worth passing on to clang."""
    return [arg for arg in args if arg.startswith(FORWARDED_PREFIXES)]


def bindings_file(header: Path, target_dir: Path) -> Path:
    """Output path for a header's bindings."""
    return Path(target_dir) / Path(header).with_suffix(".rs").name


class BindingGenerator:
    """Generates Rust bindings with the ``bindgen`` command line tool."""

    def __init__(self, config: BuildConfig, bindgen: str = "bindgen"):
        self.config = config
        self.bindgen = bindgen
        self.compiler = NativeCompiler(config)

    def clang_args(self, header: Path, include_dirs: Iterable[Path] = ()) -> List[str]:
        """
        Arguments for clang when parsing a header.

        Raises:
            BuildConfigError: If the header extension is not C or C++
        """
        kind = header_kind(header)
        if kind is HeaderKind.C:
            recipe, system_includes = self.config.c_compiler, self.config.c_system_includes
        elif kind is HeaderKind.CPP:
            recipe, system_includes = self.config.cpp_compiler, self.config.cpp_system_includes
        else:
            raise BuildConfigError(f"Unknown header extension: {header}")

        args = ["-target", self.config.llvm_target]
        for directory in system_includes:
            args.extend(["-isystem", str(directory)])

        _, recipe_args = recipe.substitute(
            RecipeParams(includes=self.compiler.includes(include_dirs))
        )
        args.extend(forwarded_args(recipe_args))
        return args

    def command(
        self,
        header: Path,
        include_dirs: Iterable[Path],
        target_dir: Path,
        options: Sequence[str] = ()
    ) -> List[str]:
        """Full ``bindgen`` command line for a header."""
        return [
            self.bindgen,
            str(header),
            "--use-core",
            "-o",
            str(bindings_file(header, target_dir)),
            *options,
            "--",
            *self.clang_args(header, include_dirs),
        ]

    def generate(
        self,
        header: Path,
        include_dirs: Iterable[Path],
        target_dir: Path,
        options: Sequence[str] = ()
    ) -> Path:
        """
        Write bindings for a header into ``target_dir``.

        Args:
            header: C or C++ header
            include_dirs: Extra include directories
            target_dir: Directory for the generated ``.rs`` file
            options: Extra ``bindgen`` flags

        Returns:
            Path of the generated bindings

        Raises:
            BuildConfigError: If the header kind is unknown or the output
                directory cannot be created
            ProcessError: If bindgen fails
        """
        include_dirs = list(include_dirs)
        cmd = self.command(header, include_dirs, target_dir, options)
        output = bindings_file(header, target_dir)
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BuildConfigError(f"Unable to create directory '{output.parent}': {e}") from e
        exec_with_output(cmd)
        return output
