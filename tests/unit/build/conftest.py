"""Shared fixtures for build tests."""

import pytest
from pathlib import Path
from carguino.build.build_config import BuildConfig
from carguino.build.recipe import Recipe
from carguino.config.preferences import Preferences


SAM_PREFS = """\
name=Arduino Due (Programming Port)
build.mcu=cortex-m3
build.arch=SAM
build.core=arduino
build.board=SAM_DUE
build.variant=arduino_due_x
runtime.platform.path=/arduino/hardware/arduino/sam
build.core.path={runtime.platform.path}/cores/{build.core}
build.variant.path={runtime.platform.path}/variants/{build.variant}
build.path=/tmp/build
build.project_name=project.c
compiler.path=/arm/bin/
compiler.c.cmd=arm-none-eabi-gcc
compiler.cpp.cmd=arm-none-eabi-g++
compiler.ar.cmd=arm-none-eabi-ar
compiler.objcopy.cmd=arm-none-eabi-objcopy
compiler.elf2hex.cmd=arm-none-eabi-objcopy
recipe.c.o.pattern="{compiler.path}{compiler.c.cmd}" -c -g -Os -std=gnu11 -mcpu={build.mcu} -mthumb -DF_CPU=84000000L -DARDUINO=10819 {includes} "{source_file}" -o "{object_file}"
recipe.cpp.o.pattern="{compiler.path}{compiler.cpp.cmd}" -c -g -Os -std=gnu++11 -fno-rtti -mcpu={build.mcu} -mthumb -DF_CPU=84000000L {includes} "{source_file}" -o "{object_file}"
recipe.S.o.pattern="{compiler.path}{compiler.c.cmd}" -c -g -x assembler-with-cpp -mcpu={build.mcu} {includes} "{source_file}" -o "{object_file}"
recipe.ar.pattern="{compiler.path}{compiler.ar.cmd}" rcs "{archive_file_path}" "{object_file}"
recipe.c.combine.pattern="{compiler.path}{compiler.c.cmd}" -mcpu={build.mcu} -mthumb -Os -Wl,--gc-sections "-T{build.variant.path}/linker_scripts/gcc/flash.ld" "-L{build.path}" -lm -lgcc --specs=nano.specs -o "{build.path}/{build.project_name}.elf"
recipe.objcopy.bin.pattern="{compiler.path}{compiler.elf2hex.cmd}" -O binary "{build.path}/{build.project_name}.elf" "{build.path}/{build.project_name}.bin"
recipe.objcopy.hex.pattern="{compiler.path}{compiler.objcopy.cmd}" -O ihex "{build.path}/{build.project_name}.elf" "{build.path}/{build.project_name}.hex"
"""


@pytest.fixture
def sam_prefs():
    """Preferences as dumped for an Arduino Due."""
    return Preferences.parse(SAM_PREFS)


@pytest.fixture
def build_config(tmp_path):
    """Build configuration with recipes that are easy to assert on."""
    core = tmp_path / "cores" / "arduino"
    variant = tmp_path / "variants" / "standard"
    core.mkdir(parents=True)
    variant.mkdir(parents=True)
    return BuildConfig(
        core="arduino",
        arch="avr",
        board="avr_uno",
        llvm_target="avr-atmel-none",
        core_path=core,
        variant_path=variant,
        c_compiler=Recipe('gcc -c -std=gnu11 -mmcu=atmega328p -DF_CPU=16000000L -Os %includes "%source_file" -o "%object_file"'),
        cpp_compiler=Recipe('g++ -c -std=gnu++11 -mmcu=atmega328p -fno-rtti %includes "%source_file" -o "%object_file"'),
        assembler=Recipe('gcc -c -x assembler-with-cpp %includes "%source_file" -o "%object_file"'),
        archiver=Recipe('ar rcs "%archive_file" "%object_file"'),
        library_paths={"Wire": tmp_path / "libraries" / "Wire"},
        c_system_includes=[Path("/avr/lib/gcc/avr/7.3.0/include")],
        cpp_system_includes=[Path("/avr/include/c++"), Path("/avr/lib/gcc/avr/7.3.0/include")],
    )
