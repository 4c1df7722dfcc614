"""Color assignment services"""

from .types import (
    ExternalSyncError,
    PaletteExhausted,
    Participant,
    PresenceSource,
    Scoreboard,
    PERMISSION_COLOR,
    PERMISSION_CHANGECOLOR,
    PERMISSION_CHANGECOLOR_OTHERS,
    PERMISSION_RELOAD,
)

from .player_colors import (
    COLLISION_POLICIES,
    PlayerColors,
    get_collision_policy,
    least_used_collision,
    random_collision,
)

from .team_sync import NullTeamSync, TeamSync
from .scoreboard import InMemoryScoreboard
from .presence import InMemoryPresence
from .color_engine import ColorEngine
from .event_stream import ColorEvent, EventKind, EventStream

__all__ = [
    # Types and errors
    "ExternalSyncError",
    "PaletteExhausted",
    "Participant",
    "PresenceSource",
    "Scoreboard",
    "PERMISSION_COLOR",
    "PERMISSION_CHANGECOLOR",
    "PERMISSION_CHANGECOLOR_OTHERS",
    "PERMISSION_RELOAD",
    # Assignment table
    "COLLISION_POLICIES",
    "PlayerColors",
    "get_collision_policy",
    "least_used_collision",
    "random_collision",
    # Sync and collaborators
    "NullTeamSync",
    "TeamSync",
    "InMemoryScoreboard",
    "InMemoryPresence",
    # Engine
    "ColorEngine",
    "ColorEvent",
    "EventKind",
    "EventStream",
]
