"""Team Sync

Mirrors the assignment table into scoreboard teams. For every color held by
at least one participant there is exactly one team, labelled
``<prefix><color>``, whose members are exactly that color's holders; a color
nobody holds has no team.

Changes are applied as deltas (leave the old team, then join the new one).
When a scoreboard call fails the adapter stops trusting the scoreboard and
the next change is applied as a full reconciliation against the table.
"""

import logging
from typing import Callable, Dict, Mapping, Optional, Set

from colored_names.config.palette import ChatColor
from colored_names.service.types import ExternalSyncError, Scoreboard

logger = logging.getLogger(__name__)

Snapshot = Mapping[str, Optional[ChatColor]]


class TeamSync:
    """Keeps scoreboard teams in step with color assignments."""

    enabled = True

    def __init__(self, scoreboard: Scoreboard, prefix: str = "cpn_"):
        self.scoreboard = scoreboard
        self.prefix = prefix
        self.needs_resync = False

    def label_for(self, color: ChatColor) -> str:
        """Canonical team label for a color, stable across reloads."""
        return f"{self.prefix}{color.label}"

    def apply(
        self,
        participant_id: str,
        old: Optional[ChatColor],
        new: Optional[ChatColor],
        snapshot: Callable[[], Snapshot],
    ) -> None:
        """
        Reflect one committed change.

        Args:
            participant_id: Who changed
            old: Color held before the change
            new: Color held after the change
            snapshot: Returns the full table, used when reconciling

        Raises:
            ExternalSyncError: If a scoreboard call failed
        """
        if self.needs_resync:
            logger.info("[TeamSync] Reconciling teams after an earlier failure")
            self.resync(snapshot())
            return

        if old == new:
            return

        try:
            if old is not None:
                self._leave(self.label_for(old), participant_id)
            if new is not None:
                self._join(self.label_for(new), participant_id)
        except ExternalSyncError:
            self.needs_resync = True
            raise

    def resync(self, assignments: Snapshot) -> None:
        """
        Bring every prefixed team in line with a full table snapshot.

        Extra members are removed and empty teams deleted before any team is
        created or joined.

        Raises:
            ExternalSyncError: If a scoreboard call failed
        """
        desired: Dict[str, Set[str]] = {}
        for participant_id, color in assignments.items():
            if color is not None:
                desired.setdefault(self.label_for(color), set()).add(participant_id)

        try:
            current: Dict[str, Set[str]] = {}
            for color in ChatColor:
                label = self.label_for(color)
                if not self._call(self.scoreboard.has_group, label):
                    continue
                wanted = desired.get(label, set())
                members = self._call(self.scoreboard.get_members, label)
                for participant_id in members - wanted:
                    self._call(self.scoreboard.remove_member, label, participant_id)
                if wanted:
                    current[label] = members & wanted
                else:
                    self._call(self.scoreboard.delete_group, label)
                    logger.debug(f"[TeamSync] Deleted stale team {label}")

            for label, wanted in desired.items():
                if label not in current:
                    self._call(self.scoreboard.create_group, label)
                    current[label] = set()
                for participant_id in wanted - current[label]:
                    self._call(self.scoreboard.add_member, label, participant_id)
        except ExternalSyncError:
            self.needs_resync = True
            raise

        self.needs_resync = False

    def groups(self) -> Dict[str, Set[str]]:
        """
        Every prefixed team currently on the scoreboard, with members.

        Raises:
            ExternalSyncError: If a scoreboard call failed
        """
        result: Dict[str, Set[str]] = {}
        for color in ChatColor:
            label = self.label_for(color)
            if self._call(self.scoreboard.has_group, label):
                result[label] = self._call(self.scoreboard.get_members, label)
        return result

    def _leave(self, label: str, participant_id: str) -> None:
        if not self._call(self.scoreboard.has_group, label):
            return
        self._call(self.scoreboard.remove_member, label, participant_id)
        if not self._call(self.scoreboard.get_members, label):
            self._call(self.scoreboard.delete_group, label)
            logger.debug(f"[TeamSync] Deleted empty team {label}")

    def _join(self, label: str, participant_id: str) -> None:
        if not self._call(self.scoreboard.has_group, label):
            self._call(self.scoreboard.create_group, label)
            logger.debug(f"[TeamSync] Created team {label}")
        self._call(self.scoreboard.add_member, label, participant_id)

    def _call(self, func, label: str, *args):
        try:
            return func(label, *args)
        except Exception as e:
            raise ExternalSyncError(
                f"{getattr(func, '__name__', 'scoreboard call')}({label}) failed: {e}",
                label=label,
            ) from e


class NullTeamSync:
    """Used when team sync is disabled: no scoreboard calls, no teams."""

    enabled = False
    needs_resync = False

    def __init__(self, prefix: str = "cpn_"):
        self.prefix = prefix

    def label_for(self, color: ChatColor) -> str:
        return f"{self.prefix}{color.label}"

    def apply(self, participant_id, old, new, snapshot) -> None:
        return None

    def resync(self, assignments: Snapshot) -> None:
        return None

    def groups(self) -> Dict[str, Set[str]]:
        return {}
