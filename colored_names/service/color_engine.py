"""Color Engine

The long-lived owner of the palette, the color table and the team sync
adapter. Host events (join, quit, permission change, color re-roll, reload)
are handled one at a time under a single lock, so a reload never interleaves
with a per-participant change.

Lifecycle:
    engine = ColorEngine.from_settings(presence, scoreboard)
    engine.enable()      # load config, color everyone online
    engine.reload()      # validate new config, uncolor all, rebuild, recolor
    engine.disable()     # uncolor everyone, drop all teams
"""

import logging
import random
import threading
from typing import Any, Dict, Optional, Tuple

from colored_names.config.palette import (
    ChatColor,
    ConfigError,
    Palette,
    normalize_document,
    parse_palette,
)
from colored_names.config.settings import Settings, get_settings
from colored_names.config.store import ConfigStore
from colored_names.service.player_colors import PlayerColors
from colored_names.service.team_sync import NullTeamSync, TeamSync
from colored_names.service.types import (
    PERMISSION_COLOR,
    Participant,
    PresenceSource,
    Scoreboard,
)


class ColorEngine:
    """Assigns colors to online participants and keeps teams in sync."""

    def __init__(
        self,
        presence: PresenceSource,
        store: ConfigStore,
        scoreboard: Optional[Scoreboard] = None,
        team_prefix: str = "cpn_",
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            presence: Who is online and their permissions
            store: Palette document storage
            scoreboard: Presentation layer; team sync is off without one
            team_prefix: Prefix of every team label
            rng: Random source for color selection
            logger: Logger for this engine instance
        """
        self.presence = presence
        self.store = store
        self.scoreboard = scoreboard
        self.team_prefix = team_prefix
        self.rng = rng if rng is not None else random.Random()
        self.logger = logger or logging.getLogger(__name__)

        self._lock = threading.RLock()
        self._palette: Optional[Palette] = None
        self._colors: Optional[PlayerColors] = None
        self.reload_count = 0

    @classmethod
    def from_settings(
        cls,
        presence: PresenceSource,
        scoreboard: Optional[Scoreboard] = None,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "ColorEngine":
        """Build an engine from process settings."""
        settings = settings or get_settings()
        seed = settings.engine.random_seed
        return cls(
            presence=presence,
            store=ConfigStore(settings.storage.config_path),
            scoreboard=scoreboard,
            team_prefix=settings.teams.team_prefix,
            rng=random.Random(seed) if seed is not None else None,
            logger=logger,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self._colors is not None

    @property
    def palette(self) -> Palette:
        if self._palette is None:
            raise RuntimeError("Color engine is not enabled")
        return self._palette

    @property
    def colors(self) -> PlayerColors:
        if self._colors is None:
            raise RuntimeError("Color engine is not enabled")
        return self._colors

    def enable(self) -> Palette:
        """Load the configuration and color everyone online."""
        palette, _ = self.reload()
        self.logger.info(
            f"[ColorEngine] Enabled with {palette.size} colors "
            f"(team sync {'on' if self.colors.sync.enabled else 'off'})"
        )
        return palette

    def reload(self) -> Tuple[Palette, PlayerColors]:
        """
        Rebuild the palette and every assignment as one critical section.

        The new document is validated before anything is torn down, so a
        broken configuration leaves the running palette and colors intact.

        Returns:
            The new palette and color table

        Raises:
            ConfigError: If the configuration is malformed or enables no colors
        """
        with self._lock:
            try:
                self.store.save_default()
                document = normalize_document(self.store.read())
                palette = parse_palette(document)
            except ConfigError as e:
                self.logger.error(f"[ColorEngine] Reload aborted, keeping previous configuration: {e}")
                raise

            self._uncolor_all()

            try:
                self.store.persist(document)
            except OSError as e:
                self.logger.warning(f"[ColorEngine] Could not save normalized configuration: {e}")

            if self.scoreboard is not None and palette.scoreboard:
                sync = TeamSync(self.scoreboard, prefix=self.team_prefix)
            else:
                sync = NullTeamSync(prefix=self.team_prefix)

            colors = PlayerColors(palette, sync=sync, rng=self.rng)
            self._palette = palette
            self._colors = colors

            for participant in self.presence.online_participants():
                self._refresh(participant.id)

            self.reload_count += 1
            self.logger.info(
                f"[ColorEngine] Loaded {palette.size} colors, "
                f"colored {len(colors.usage())} distinct colors across {len(colors)} participants"
            )
            return palette, colors

    def disable(self) -> None:
        """Uncolor everyone so no participant is left on a team."""
        with self._lock:
            self._uncolor_all()
            self._colors = None
            self.logger.info("[ColorEngine] Disabled")

    def _uncolor_all(self) -> None:
        if self._colors is not None:
            self._colors.reset()

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    def on_join(self, participant: Participant) -> Optional[ChatColor]:
        with self._lock:
            if self._colors is None:
                return None
            color = self._refresh(participant.id)
            self.logger.debug(f"[ColorEngine] {participant.display} joined with {color}")
            return color

    def on_quit(self, participant_id: str) -> None:
        with self._lock:
            if self._colors is None:
                return
            self._colors.forget(participant_id)

    def on_permission_change(self, participant_id: str) -> Optional[ChatColor]:
        """Re-derive eligibility; an already colored participant keeps their color."""
        with self._lock:
            colors = self._colors
            if colors is None or self._drop_if_offline(participant_id):
                return None
            if self.is_eligible(participant_id):
                if colors.get(participant_id) is None:
                    return colors.assign(participant_id)
                return colors.get(participant_id)
            colors.clear(participant_id)
            colors.track(participant_id)
            return None

    def change_color(self, participant_id: str) -> Optional[ChatColor]:
        """Re-roll a participant's color. Ineligible or offline participants stay uncolored."""
        with self._lock:
            if self._colors is None or self._drop_if_offline(participant_id):
                return None
            if not self.is_eligible(participant_id):
                return None
            return self._colors.assign(participant_id)

    def is_eligible(self, participant_id: str) -> bool:
        return self.presence.has_permission(participant_id, PERMISSION_COLOR)

    def is_online(self, participant_id: str) -> bool:
        return self.presence.get_participant(participant_id) is not None

    def _drop_if_offline(self, participant_id: str) -> bool:
        # Only present participants may hold an entry
        if self.is_online(participant_id):
            return False
        self.colors.forget(participant_id)
        self.logger.debug(f"[ColorEngine] Ignoring event for offline participant {participant_id}")
        return True

    def _refresh(self, participant_id: str) -> Optional[ChatColor]:
        if self._drop_if_offline(participant_id):
            return None
        colors = self.colors
        if self.is_eligible(participant_id):
            return colors.assign(participant_id)
        colors.clear(participant_id)
        colors.track(participant_id)
        return None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def color_of(self, participant_id: str) -> Optional[ChatColor]:
        if self._colors is None:
            return None
        return self._colors.get(participant_id)

    def display_name(self, participant: Participant) -> str:
        """The participant's name wrapped in their color, or plain."""
        color = self.color_of(participant.id)
        if color is None:
            return participant.display
        return color.format(participant.display)

    def teams(self) -> Dict[str, set]:
        if self._colors is None:
            return {}
        return self._colors.sync.groups()

    def status(self) -> Dict[str, Any]:
        with self._lock:
            if self._colors is None:
                return {"enabled": False}
            palette = self.palette
            colors = self.colors
            return {
                "enabled": True,
                "colors": [color.name for color in palette.colors],
                "team_sync": colors.sync.enabled,
                "auto_update": palette.auto_update,
                "collision_policy": palette.collision_policy,
                "participants": len(colors),
                "colored": sum(colors.usage().values()),
                "collisions": len(colors.collisions()),
                "reloads": self.reload_count,
            }
