"""Exception types shared across Carguino.

Each module raises its own subclass of ``CarguinoError`` so the CLI can
report every expected failure uniformly, while unexpected exceptions still
surface with a traceback.
"""

from pathlib import Path
from typing import Optional, Union


class CarguinoError(Exception):
    """Base class for all expected Carguino failures."""
    pass


class ProcessError(CarguinoError):
    """Raised when an external tool exits unsuccessfully.

    Attributes:
        program: File name of the program that failed
        code: Exit code, or None when the process was killed by a signal
    """

    def __init__(
        self,
        program: Union[str, Path],
        code: Optional[int],
        message: Optional[str] = None
    ):
        self.program = Path(program).name
        self.code = code
        if message is None:
            message = f"Process '{self.program}' exited with code {self.code_text}"
        super().__init__(message)

    @property
    def code_text(self) -> str:
        """Exit code as displayed to the user (``<none>`` for signals)."""
        return "<none>" if self.code is None else str(self.code)
