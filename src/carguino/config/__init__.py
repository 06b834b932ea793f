"""Configuration parsing modules for Carguino."""

from .board_info import BoardInfo, BoardInfoError
from .preferences import Preferences, PreferencesError
from .user_config import ConfigFile, UserConfig, UserConfigError

__all__ = [
    "BoardInfo",
    "BoardInfoError",
    "ConfigFile",
    "Preferences",
    "PreferencesError",
    "UserConfig",
    "UserConfigError",
]
