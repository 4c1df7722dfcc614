"""In-memory Presence

Tracks who is online and which permission nodes they hold. Used by the CLI
simulation and the tests in place of a real host.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from colored_names.service.types import PERMISSION_COLOR, Participant

logger = logging.getLogger(__name__)


class InMemoryPresence:
    """Presence source backed by dictionaries."""

    def __init__(self, default_permissions: Iterable[str] = (PERMISSION_COLOR,)):
        self.default_permissions: Set[str] = set(default_permissions)
        # participant_id -> Participant, in join order
        self._online: Dict[str, Participant] = {}
        # participant_id -> granted permission nodes
        self._permissions: Dict[str, Set[str]] = {}

    def join(self, participant: Participant, permissions: Optional[Iterable[str]] = None) -> None:
        """Mark a participant online with the given (or default) permissions."""
        self._online[participant.id] = participant
        granted = self.default_permissions if permissions is None else permissions
        self._permissions[participant.id] = set(granted)
        logger.debug(f"[Presence] {participant.display} joined")

    def leave(self, participant_id: str) -> None:
        self._online.pop(participant_id, None)
        self._permissions.pop(participant_id, None)

    def rename(self, participant_id: str, name: str) -> Optional[Participant]:
        participant = self._online.get(participant_id)
        if participant is None:
            return None
        renamed = Participant(id=participant_id, name=name)
        self._online[participant_id] = renamed
        return renamed

    def grant(self, participant_id: str, permission: str) -> None:
        self._permissions.setdefault(participant_id, set()).add(permission)

    def revoke(self, participant_id: str, permission: str) -> None:
        self._permissions.get(participant_id, set()).discard(permission)

    def online_participants(self) -> List[Participant]:
        return list(self._online.values())

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        return self._online.get(participant_id)

    def find_by_name(self, name: str) -> Optional[Participant]:
        """Case-insensitive lookup of an online participant by display name."""
        wanted = name.lower()
        for participant in self._online.values():
            if participant.name.lower() == wanted:
                return participant
        return None

    def has_permission(self, participant_id: str, permission: str) -> bool:
        return permission in self._permissions.get(participant_id, set())
