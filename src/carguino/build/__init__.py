"""
Build system components for Carguino.

This module provides the build system implementation including:
- Recipe templating and native compilation (board compilers, archiver)
- Bindings generation (bindgen)
- Target descriptor synthesis
- Cargo orchestration
"""

from .arduino_builder import ArduinoBuilder
from .binary_generator import BinaryGenerator, ObjcopyRecipe, objcopy_recipes
from .bindings import BindingGenerator
from .build_config import BuildConfig, BuildConfigError
from .library_builder import BindingsBuilder, LibraryBuilder
from .linker_options import LinkerOptions, parse_linker_options
from .native_compiler import NativeCompiler
from .orchestrator import CargoOrchestrator, CargoRunResult, OrchestratorError
from .recipe import Recipe, RecipeError, RecipeParams, split_command_line
from .target_spec import TargetSpecError, TargetSpecSynthesizer

__all__ = [
    'ArduinoBuilder',
    'BinaryGenerator',
    'BindingGenerator',
    'BindingsBuilder',
    'BuildConfig',
    'BuildConfigError',
    'CargoOrchestrator',
    'CargoRunResult',
    'LibraryBuilder',
    'LinkerOptions',
    'NativeCompiler',
    'ObjcopyRecipe',
    'OrchestratorError',
    'Recipe',
    'RecipeError',
    'RecipeParams',
    'TargetSpecError',
    'TargetSpecSynthesizer',
    'objcopy_recipes',
    'parse_linker_options',
    'split_command_line',
]
