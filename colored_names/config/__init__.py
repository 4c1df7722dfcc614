"""
Configuration package for colored player names.

Process settings come from the environment (see :mod:`.settings`); the
palette and feature flags come from the YAML document parsed by
:mod:`.palette` and stored through :mod:`.store`.

Usage:
    from colored_names.config import get_settings, ConfigStore, parse_palette

    store = ConfigStore(get_settings().storage.config_path)
    palette = parse_palette(store.read())
"""

from colored_names.config.settings import Settings, get_settings, reset_settings
from colored_names.config.palette import (
    ChatColor,
    ConfigError,
    Palette,
    default_document,
    normalize_document,
    parse_palette,
)
from colored_names.config.store import ConfigStore

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "ChatColor",
    "ConfigError",
    "Palette",
    "default_document",
    "normalize_document",
    "parse_palette",
    "ConfigStore",
]
