"""System include discovery.

GCC reports its built-in include directories when preprocessing in verbose
mode:

    #include "..." search starts here:
    #include <...> search starts here:
     /opt/avr/lib/gcc/avr/7.3.0/include
     /opt/avr/avr/include
    End of search list.

The binding generator runs clang, which does not know the board compiler's
built-in directories, so they are discovered once and passed along as
``-isystem`` paths.
"""

import logging
import subprocess
from pathlib import Path
from typing import Iterable, List, Union

logger = logging.getLogger(__name__)

SEARCH_LIST_MARKER = "#include <...>"


def parse_search_list(lines: Iterable[str]) -> List[Path]:
    """
    Extract the ``#include <...>`` search list from preprocessor output.

    Collects the space-indented lines after the first marker line, up to
    the first line that is not indented.

    Returns:
        Include directories in search order, or an empty list if the
        marker never appears
    """
    includes: List[Path] = []
    found = False
    for line in lines:
        if not found:
            found = line.startswith(SEARCH_LIST_MARKER)
            continue
        if not line.startswith(" "):
            break
        includes.append(Path(line[1:]))
    return includes


def discover_system_includes(compiler: Union[str, Path], language: str) -> List[Path]:
    """
    Ask a compiler for its built-in include directories.

    Runs ``<compiler> -w -v -E -x<language> -`` on empty input. A compiler
    that cannot be started or prints no search list yields no directories.

    Args:
        compiler: Compiler executable
        language: ``c`` or ``c++``

    Returns:
        Include directories in search order
    """
    cmd = [str(compiler), "-w", "-v", "-E", f"-x{language}", "-"]
    logger.debug("Probing system includes: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            input=b"",
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False
        )
    except OSError as e:
        logger.debug("Unable to probe %s: %s", compiler, e)
        return []

    stderr = result.stderr.decode("utf-8", errors="replace")
    return parse_search_list(stderr.splitlines())
