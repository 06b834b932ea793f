"""Linker options from the board's link recipe.

The platform's ``recipe.c.combine.pattern`` is the command the Arduino IDE
links firmware with. Rust links through its own linker invocation, so the
parts that matter (linker, script, specs, search paths, libraries, machine
flags) are pulled out of the recipe and written into the target descriptor.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional

from .recipe import split_command_line


@dataclass
class LinkerOptions:
    """
    Linker intent scraped from a link command line.

    Attributes:
        command: Linker executable
        script: Linker script (``-T``), last one wins
        specs: GCC specs files (``--specs``/``-specs``)
        library_search_path: ``-L`` directories that exist on disk
        libraries: ``-l`` library names
        platform_options: ``-m`` machine flags, verbatim
    """

    command: str
    script: Optional[str] = None
    specs: List[str] = field(default_factory=list)
    library_search_path: List[str] = field(default_factory=list)
    libraries: List[str] = field(default_factory=list)
    platform_options: List[str] = field(default_factory=list)


def _value(attached: str, args: Iterator[str]) -> Optional[str]:
    if attached:
        return attached
    return next(args, None)


def parse_linker_options(command_line: str) -> LinkerOptions:
    """
    Parse a link command line.

    Recognized, left to right:
        ``--specs X``, ``-specs X``, ``--specs=X``, ``-specs=X``  specs
        ``-T X``, ``-TX``   linker script
        ``-L X``, ``-LX``   search path (kept only if it is a directory)
        ``-l X``, ``-lX``   library
        ``-m...``           platform option

    Everything else is ignored, as is a separated flag missing its value at
    the end of the line.

    Args:
        command_line: Expanded ``recipe.c.combine.pattern``

    Returns:
        LinkerOptions
    """
    command, arg_list = split_command_line(command_line)
    options = LinkerOptions(command=str(command))

    args = iter(arg_list)
    for arg in args:
        if arg in ("--specs", "-specs"):
            value = next(args, None)
            if value is not None:
                options.specs.append(value)
        elif arg.startswith(("--specs=", "-specs=")):
            options.specs.append(arg.split("=", 1)[1])
        elif arg.startswith("-T"):
            value = _value(arg[2:], args)
            if value is not None:
                options.script = value
        elif arg.startswith("-L"):
            value = _value(arg[2:], args)
            if value is not None and Path(value).is_dir():
                options.library_search_path.append(value)
        elif arg.startswith("-l"):
            value = _value(arg[2:], args)
            if value is not None:
                options.libraries.append(value)
        elif arg.startswith("-m"):
            options.platform_options.append(arg)
    return options
