"""Binary Generation Utilities.

Arduino platforms convert the linked ELF into upload formats with
``recipe.objcopy.<format>.pattern`` recipes, e.g.

    recipe.objcopy.hex.pattern="{compiler.path}avr-objcopy" -O ihex -R .eeprom "{build.path}/{build.project_name}.elf" "{build.path}/{build.project_name}.hex"

The last two arguments name the input and output files; they are replaced
with each firmware artifact cargo produces and its sibling ``.<format>``
file.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..config.preferences import Preferences
from ..subprocess_utils import exec_process
from .recipe import split_command_line

OBJCOPY_RECIPE_KEY = re.compile(r"^recipe\.objcopy\.(\w+)\.pattern")


@dataclass(frozen=True)
class ObjcopyRecipe:
    """A conversion step without its input and output arguments."""

    extension: str
    command: Path
    args: List[str]

    def output_for(self, artifact: Path) -> Path:
        return Path(artifact).with_suffix(f".{self.extension}")

    def command_for(self, artifact: Path) -> List[str]:
        return [str(self.command), *self.args, str(artifact), str(self.output_for(artifact))]


def objcopy_recipes(prefs: Preferences) -> List[ObjcopyRecipe]:
    """All objcopy recipes in the preferences, ordered by key."""
    recipes = []
    for key in prefs.keys():
        match = OBJCOPY_RECIPE_KEY.match(key)
        if not match:
            continue
        pattern = prefs.get(key)
        if pattern is None:
            continue
        command, args = split_command_line(pattern)
        recipes.append(ObjcopyRecipe(match.group(1), command, args[:-2]))
    return recipes


class BinaryGenerator:
    """Runs objcopy recipes over firmware artifacts.

    Args:
        recipes: Conversion steps
        status: Callback for progress messages (status, message)
        verbose: Callback for command lines shown in verbose mode
    """

    def __init__(
        self,
        recipes: Sequence[ObjcopyRecipe],
        status: Optional[Callable[[str, str], None]] = None,
        verbose: Optional[Callable[[str, str], None]] = None
    ):
        self.recipes = list(recipes)
        self.status = status
        self.verbose = verbose

    def generate(self, artifacts: Sequence[Path], package_id: str) -> List[Path]:
        """
        Convert every artifact with every recipe.

        Returns:
            Paths of the generated files

        Raises:
            ProcessError: If a conversion fails
        """
        outputs: List[Path] = []
        if not artifacts:
            return outputs

        for recipe in self.recipes:
            if self.status:
                self.status("Extracting", f"{recipe.extension} data for {package_id}")
            for artifact in artifacts:
                cmd = recipe.command_for(artifact)
                if self.verbose:
                    self.verbose("Running", " ".join(cmd))
                exec_process(cmd)
                outputs.append(recipe.output_for(artifact))
        return outputs
