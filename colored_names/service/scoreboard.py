"""In-memory Scoreboard

A host-independent presentation layer: named groups (teams) with member
sets. Mirrors the host scoreboard rules the sync adapter relies on:

- group labels are unique; creating an existing label is an error
- a participant is on at most one group; adding moves them
- operations on a missing group are errors
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class ScoreboardGroup:
    """A single team on the scoreboard."""
    label: str
    members: Set[str] = field(default_factory=set)


class InMemoryScoreboard:
    """Scoreboard backed by plain dictionaries."""

    def __init__(self):
        # label -> ScoreboardGroup
        self._groups: Dict[str, ScoreboardGroup] = {}
        # participant_id -> label of the group they are on
        self._member_of: Dict[str, str] = {}

    def create_group(self, label: str) -> None:
        if label in self._groups:
            raise ValueError(f"Group already exists: {label}")
        self._groups[label] = ScoreboardGroup(label=label)
        logger.debug(f"[Scoreboard] Created group {label}")

    def delete_group(self, label: str) -> None:
        group = self._require(label)
        for participant_id in group.members:
            self._member_of.pop(participant_id, None)
        del self._groups[label]
        logger.debug(f"[Scoreboard] Deleted group {label}")

    def add_member(self, label: str, participant_id: str) -> None:
        group = self._require(label)
        previous = self._member_of.get(participant_id)
        if previous is not None and previous != label:
            self._groups[previous].members.discard(participant_id)
        group.members.add(participant_id)
        self._member_of[participant_id] = label

    def remove_member(self, label: str, participant_id: str) -> None:
        group = self._require(label)
        group.members.discard(participant_id)
        if self._member_of.get(participant_id) == label:
            del self._member_of[participant_id]

    def has_group(self, label: str) -> bool:
        return label in self._groups

    def get_members(self, label: str) -> Set[str]:
        return set(self._require(label).members)

    def group_of(self, participant_id: str) -> Optional[str]:
        """Label of the group the participant is on, if any."""
        return self._member_of.get(participant_id)

    def groups(self) -> Dict[str, Set[str]]:
        """Snapshot of every group and its members."""
        return {label: set(group.members) for label, group in self._groups.items()}

    def _require(self, label: str) -> ScoreboardGroup:
        group = self._groups.get(label)
        if group is None:
            raise KeyError(f"No such group: {label}")
        return group
