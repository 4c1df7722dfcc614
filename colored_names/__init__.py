"""
Colored player names.

Gives every online player a distinct chat color and mirrors the colors into
scoreboard teams.
"""

__version__ = "2.0.0"

from colored_names.config import ChatColor, ConfigError, ConfigStore, Palette
from colored_names.service import (
    ColorEngine,
    ExternalSyncError,
    PaletteExhausted,
    Participant,
    PlayerColors,
    TeamSync,
)

__all__ = [
    "__version__",
    "ChatColor",
    "ConfigError",
    "ConfigStore",
    "Palette",
    "ColorEngine",
    "ExternalSyncError",
    "PaletteExhausted",
    "Participant",
    "PlayerColors",
    "TeamSync",
]
