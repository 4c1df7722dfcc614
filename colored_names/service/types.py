from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Set

# Permission nodes checked through the presence source
PERMISSION_COLOR = "coloredplayernames.color"
PERMISSION_CHANGECOLOR = "coloredplayernames.changecolor"
PERMISSION_CHANGECOLOR_OTHERS = "coloredplayernames.changecolor.others"
PERMISSION_RELOAD = "coloredplayernames.reload"


class PaletteExhausted(LookupError):
    """Raised by assign() when the palette holds no colors at all."""


class ExternalSyncError(RuntimeError):
    """A presentation layer call failed; the assignment table is unaffected."""

    def __init__(self, message: str, label: Optional[str] = None):
        super().__init__(message)
        self.label = label


@dataclass(frozen=True)
class Participant:
    """A connected player. ``id`` is stable across renames, ``name`` is not."""
    id: str
    name: str = ""

    @property
    def display(self) -> str:
        return self.name or self.id


class PresenceSource(Protocol):
    """Who is online and what they are allowed to do."""

    def online_participants(self) -> Iterable[Participant]: ...

    def get_participant(self, participant_id: str) -> Optional[Participant]: ...

    def find_by_name(self, name: str) -> Optional[Participant]: ...

    def has_permission(self, participant_id: str, permission: str) -> bool: ...


class Scoreboard(Protocol):
    """The presentation layer: named groups with member sets."""

    def create_group(self, label: str) -> None: ...

    def delete_group(self, label: str) -> None: ...

    def add_member(self, label: str, participant_id: str) -> None: ...

    def remove_member(self, label: str, participant_id: str) -> None: ...

    def has_group(self, label: str) -> bool: ...

    def get_members(self, label: str) -> Set[str]: ...

