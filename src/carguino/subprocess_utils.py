"""Subprocess helpers for running external tools.

Every external tool Carguino drives (arduino-builder, rustc, cargo, xargo,
objcopy, bindgen, the board compilers) is run through these wrappers so that
failures are reported the same way: the program's standard error is relayed
to the user first, then a ``ProcessError`` naming the program and exit code
is raised. Calls block until the child exits; there is no timeout.
"""

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .errors import ProcessError

logger = logging.getLogger(__name__)

Command = Sequence[Union[str, Path]]


def exit_code(returncode: int) -> Optional[int]:
    """Map a subprocess return code to an exit code.

    Negative return codes mean the child was terminated by a signal, which
    has no exit code.
    """
    if returncode < 0:
        return None
    return returncode


def format_command(cmd: Command, env: Optional[Mapping[str, str]] = None) -> str:
    """Render a command line for status and debug output."""
    parts: List[str] = []
    if env:
        parts.extend(f"{key}={value!r}" for key, value in env.items())
    parts.extend(str(part) for part in cmd)
    return " ".join(parts)


def _merged_env(env: Optional[Mapping[str, str]]) -> Optional[Dict[str, str]]:
    if not env:
        return None
    merged = dict(os.environ)
    merged.update(env)
    return merged


def _start(cmd: Command, **kwargs: Any) -> subprocess.CompletedProcess:
    args = [str(part) for part in cmd]
    logger.debug("Running %s", format_command(args))
    try:
        return subprocess.run(args, **kwargs)
    except OSError as e:
        raise ProcessError(
            args[0], None, f"Unable to start process '{Path(args[0]).name}': {e}"
        ) from e


def exec_process(cmd: Command, env: Optional[Mapping[str, str]] = None) -> None:
    """Run a command with inherited standard streams.

    Args:
        cmd: Program and arguments
        env: Extra environment variables layered over the current environment

    Raises:
        ProcessError: If the program cannot be started or exits non-zero
    """
    result = _start(cmd, env=_merged_env(env), check=False)
    if result.returncode != 0:
        raise ProcessError(cmd[0], exit_code(result.returncode))


def exec_with_output(
    cmd: Command,
    env: Optional[Mapping[str, str]] = None,
    input: Optional[bytes] = None
) -> subprocess.CompletedProcess:
    """Run a command capturing stdout and stderr as bytes.

    On failure the captured standard error is written to ``sys.stderr``
    before the error is raised.

    Args:
        cmd: Program and arguments
        env: Extra environment variables layered over the current environment
        input: Bytes fed to the program's standard input

    Returns:
        The completed process

    Raises:
        ProcessError: If the program cannot be started or exits non-zero
    """
    result = _start(
        cmd,
        env=_merged_env(env),
        input=input,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=False
    )
    if result.returncode != 0:
        relay_stderr(result.stderr)
        raise ProcessError(cmd[0], exit_code(result.returncode))
    return result


def relay_stderr(stderr: Optional[bytes]) -> None:
    """Write a child's captured standard error to our own."""
    if not stderr:
        return
    sys.stderr.write(stderr.decode("utf-8", errors="replace"))
    sys.stderr.flush()
