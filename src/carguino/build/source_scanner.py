"""
Source and header classification.

Files are classified purely by extension, case-sensitively, following the
extensions GCC recognises:

    assembly      .s .S .sx
    C             .c .i
    C++           .cc .cp .cxx .cpp .CPP .c++ .C .ii
    C headers     .h
    C++ headers   .hh .H .hp .hxx .hpp .HPP .h++ .tcc
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from .build_config import BuildConfigError

ASM_EXTENSIONS = frozenset({"s", "S", "sx"})
C_EXTENSIONS = frozenset({"c", "i"})
CPP_EXTENSIONS = frozenset({"cc", "cp", "cxx", "cpp", "CPP", "c++", "C", "ii"})
C_HEADER_EXTENSIONS = frozenset({"h"})
CPP_HEADER_EXTENSIONS = frozenset({"hh", "H", "hp", "hxx", "hpp", "HPP", "h++", "tcc"})


class SourceKind(Enum):
    """Kind of a compilable source file."""

    ASM = "asm"
    C = "c"
    CPP = "cpp"


class HeaderKind(Enum):
    """Language of a header file."""

    C = "c"
    CPP = "cpp"


def _extension(path: Path) -> str:
    return path.suffix[1:]


def source_kind(path: Path) -> Optional[SourceKind]:
    """Kind of a source file, or None if it is not compilable."""
    extension = _extension(Path(path))
    if extension in ASM_EXTENSIONS:
        return SourceKind.ASM
    if extension in C_EXTENSIONS:
        return SourceKind.C
    if extension in CPP_EXTENSIONS:
        return SourceKind.CPP
    return None


def header_kind(path: Path) -> Optional[HeaderKind]:
    """Language of a header file, or None for unknown extensions."""
    extension = _extension(Path(path))
    if extension in C_HEADER_EXTENSIONS:
        return HeaderKind.C
    if extension in CPP_HEADER_EXTENSIONS:
        return HeaderKind.CPP
    return None


def is_source(path: Path) -> bool:
    """Whether the path has a compilable source extension."""
    return source_kind(path) is not None


def collect_sources(directory: Path, recursive: bool = True) -> List[Path]:
    """
    Find compilable sources in a directory.

    Entries are visited in name order so builds are reproducible. Files with
    other extensions are skipped.

    Args:
        directory: Directory to scan
        recursive: Whether to descend into subdirectories

    Returns:
        Source file paths

    Raises:
        BuildConfigError: If the directory cannot be read
    """
    try:
        entries = sorted(Path(directory).iterdir())
    except OSError as e:
        raise BuildConfigError(f"Unable to read source directory '{directory}': {e}") from e

    sources: List[Path] = []
    for path in entries:
        if path.is_dir():
            if recursive:
                sources.extend(collect_sources(path, recursive))
        elif path.is_file() and is_source(path):
            sources.append(path)
    return sources
