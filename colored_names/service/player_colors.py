"""
Player color assignment table.

Maps participant ids to chat colors drawn from the current palette. A color
held by another participant is never handed out while a free one exists;
once every color is taken the collision policy decides which color to
share. Every committed change is pushed through the team sync adapter.

A table belongs to exactly one palette. On reload the old table is
``reset()`` (every holder cleared, teams flushed) and a new one is built.
"""

import logging
import random
import threading
from collections import Counter
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from colored_names.config.palette import ChatColor, Palette
from colored_names.service.team_sync import NullTeamSync
from colored_names.service.types import ExternalSyncError, PaletteExhausted

logger = logging.getLogger(__name__)

# (palette, holders per color, rng) -> color to share
CollisionPolicy = Callable[[Sequence[ChatColor], Mapping[ChatColor, int], random.Random], ChatColor]


def random_collision(
    palette: Sequence[ChatColor],
    usage: Mapping[ChatColor, int],
    rng: random.Random,
) -> ChatColor:
    """Pick uniformly from the full palette."""
    return rng.choice(list(palette))


def least_used_collision(
    palette: Sequence[ChatColor],
    usage: Mapping[ChatColor, int],
    rng: random.Random,
) -> ChatColor:
    """Pick uniformly among the colors with the fewest holders."""
    fewest = min(usage.get(color, 0) for color in palette)
    return rng.choice([color for color in palette if usage.get(color, 0) == fewest])


COLLISION_POLICIES: Dict[str, CollisionPolicy] = {
    "random": random_collision,
    "least-used": least_used_collision,
}


def get_collision_policy(name: str) -> CollisionPolicy:
    try:
        return COLLISION_POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown collision policy {name!r}, expected one of {', '.join(COLLISION_POLICIES)}"
        ) from None


def available_colors(palette: Iterable[ChatColor], used: Set[ChatColor]) -> List[ChatColor]:
    return [color for color in palette if color not in used]


class PlayerColors:
    """The participant -> color table for one palette."""

    def __init__(
        self,
        palette: Palette,
        sync=None,
        rng: Optional[random.Random] = None,
        collision_policy: Optional[CollisionPolicy] = None,
    ):
        self.palette = palette
        self.sync = sync if sync is not None else NullTeamSync()
        self._rng = rng if rng is not None else random.Random()
        self._collision = collision_policy or get_collision_policy(palette.collision_policy)
        # participant_id -> color, None for tracked but uncolored participants
        self._colors: Dict[str, Optional[ChatColor]] = {}
        self._lock = threading.RLock()
        self._closed = False

        # Teams left behind by an earlier session are removed up front
        try:
            self.sync.resync({})
        except ExternalSyncError as e:
            logger.warning(f"[PlayerColors] Could not clear stale teams: {e}")

    @property
    def closed(self) -> bool:
        return self._closed

    def assign(self, participant_id: str) -> ChatColor:
        """
        Give a participant a freshly rolled color.

        Free colors (held by nobody else) are preferred and chosen uniformly
        at random; a participant who already has a color gets a different
        one whenever another free color exists. With no free color left the
        collision policy picks a color to share.

        Args:
            participant_id: Stable participant identity

        Returns:
            The assigned color

        Raises:
            PaletteExhausted: If the palette holds no colors
            RuntimeError: If the table was reset
        """
        with self._lock:
            self._check_open()
            colors = self.palette.colors
            if not colors:
                raise PaletteExhausted("Palette has no colors to assign")

            current = self._colors.get(participant_id)
            taken = [
                color for other, color in self._colors.items()
                if other != participant_id and color is not None
            ]
            free = available_colors(colors, set(taken))
            fresh = [color for color in free if color != current]

            if fresh:
                color = self._rng.choice(fresh)
            elif free:
                color = free[0]
            else:
                color = self._collision(colors, Counter(taken), self._rng)
                logger.debug(
                    f"[PlayerColors] Palette exhausted, {participant_id} shares {color.name}"
                )

            self._commit(participant_id, color)
            logger.debug(f"[PlayerColors] {participant_id}: {current} -> {color.name}")
            return color

    def track(self, participant_id: str) -> None:
        """Record a present participant without a color."""
        with self._lock:
            self._check_open()
            self._colors.setdefault(participant_id, None)

    def clear(self, participant_id: str) -> None:
        """Set a participant's color to none. Absent or uncolored is a no-op."""
        with self._lock:
            if self._closed:
                return
            if self._colors.get(participant_id) is None:
                return
            self._commit(participant_id, None)

    def forget(self, participant_id: str) -> None:
        """Clear a departing participant and stop tracking them."""
        with self._lock:
            self.clear(participant_id)
            self._colors.pop(participant_id, None)

    def get(self, participant_id: str) -> Optional[ChatColor]:
        return self._colors.get(participant_id)

    def reset(self) -> None:
        """Clear every participant, flush the teams and discard the table."""
        with self._lock:
            if self._closed:
                return
            for participant_id in list(self._colors):
                self.clear(participant_id)
            if self.sync.needs_resync:
                try:
                    self.sync.resync({})
                except ExternalSyncError as e:
                    logger.warning(f"[PlayerColors] Teams may be stale after reset: {e}")
            self._colors.clear()
            self._closed = True
            logger.debug("[PlayerColors] Table reset")

    def snapshot(self) -> Dict[str, Optional[ChatColor]]:
        with self._lock:
            return dict(self._colors)

    def holders(self, color: ChatColor) -> Set[str]:
        with self._lock:
            return {pid for pid, held in self._colors.items() if held == color}

    def usage(self) -> Counter:
        """Number of holders per color."""
        with self._lock:
            return Counter(color for color in self._colors.values() if color is not None)

    def collisions(self) -> Dict[ChatColor, Set[str]]:
        """Colors held by more than one participant."""
        with self._lock:
            shared: Dict[ChatColor, Set[str]] = {}
            for color, count in self.usage().items():
                if count > 1:
                    shared[color] = self.holders(color)
            return shared

    def tracked(self) -> List[str]:
        with self._lock:
            return list(self._colors)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._colors

    def __len__(self) -> int:
        return len(self._colors)

    def _commit(self, participant_id: str, color: Optional[ChatColor]) -> None:
        old = self._colors.get(participant_id)
        self._colors[participant_id] = color
        try:
            self.sync.apply(participant_id, old, color, self.snapshot)
        except ExternalSyncError as e:
            logger.warning(
                f"[PlayerColors] Team sync failed for {participant_id}, will reconcile on next change: {e}"
            )

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Color table was reset; build a new one")
