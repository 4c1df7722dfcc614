"""
Command handlers.

Thin callers into the color engine for the two commands players and
operators use:

- ``/changecolor [player]`` re-rolls a color
- ``/coloredplayernames [info|reload]`` reports status or reloads

A ``sender_id`` of ``None`` is the console, which holds every permission.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from colored_names import __version__
from colored_names.config.palette import ConfigError
from colored_names.service.color_engine import ColorEngine
from colored_names.service.types import (
    PERMISSION_CHANGECOLOR,
    PERMISSION_CHANGECOLOR_OTHERS,
    PERMISSION_RELOAD,
)


@dataclass
class CommandResult:
    ok: bool
    messages: List[str] = field(default_factory=list)


def _pretty(color) -> str:
    return color.format(color.label.replace("_", " "))


class _Command:
    name = ""

    def __init__(self, engine: ColorEngine):
        self.engine = engine

    def _allowed(self, sender_id: Optional[str], permission: str) -> bool:
        if sender_id is None:
            return True
        return self.engine.presence.has_permission(sender_id, permission)


class ChangeColorCommand(_Command):
    """``/changecolor [player]``"""

    name = "changecolor"

    def execute(self, sender_id: Optional[str], args: Sequence[str]) -> CommandResult:
        presence = self.engine.presence

        if len(args) > 1:
            return CommandResult(False, [f"Usage: /{self.name} [player]"])

        if args:
            if not self._allowed(sender_id, PERMISSION_CHANGECOLOR_OTHERS):
                return CommandResult(False, ["You do not have permission to change other players' colors"])
            target = presence.find_by_name(args[0])
            if target is None:
                return CommandResult(False, [f"Player not found: {args[0]}"])
        else:
            if sender_id is None:
                return CommandResult(False, [f"Usage from the console: /{self.name} <player>"])
            if not self._allowed(sender_id, PERMISSION_CHANGECOLOR):
                return CommandResult(False, ["You do not have permission to change your color"])
            target = presence.get_participant(sender_id)
            if target is None:
                return CommandResult(False, ["You are not online"])

        color = self.engine.change_color(target.id)
        if color is None:
            return CommandResult(False, [f"{target.display} cannot be colored"])

        if sender_id == target.id:
            return CommandResult(True, [f"Your color is now {_pretty(color)}"])
        return CommandResult(True, [f"{target.display}'s color is now {_pretty(color)}"])

    def complete(self, sender_id: Optional[str], args: Sequence[str]) -> List[str]:
        if len(args) != 1 or not self._allowed(sender_id, PERMISSION_CHANGECOLOR_OTHERS):
            return []
        prefix = args[0].lower()
        return sorted(
            p.name for p in self.engine.presence.online_participants()
            if p.name and p.name.lower().startswith(prefix)
        )


class ColoredPlayerNamesCommand(_Command):
    """``/coloredplayernames [info|reload]``"""

    name = "coloredplayernames"
    subcommands = ("info", "reload")

    def execute(self, sender_id: Optional[str], args: Sequence[str]) -> CommandResult:
        sub = args[0].lower() if args else "info"
        if sub == "info":
            return self._info()
        if sub == "reload":
            return self._reload(sender_id)
        return CommandResult(False, [f"Usage: /{self.name} [{'|'.join(self.subcommands)}]"])

    def complete(self, sender_id: Optional[str], args: Sequence[str]) -> List[str]:
        if len(args) != 1:
            return []
        prefix = args[0].lower()
        return [sub for sub in self.subcommands if sub.startswith(prefix)]

    def _info(self) -> CommandResult:
        status = self.engine.status()
        if not status["enabled"]:
            return CommandResult(True, [f"ColoredPlayerNames {__version__} (disabled)"])
        palette = self.engine.palette
        return CommandResult(True, [
            f"ColoredPlayerNames {__version__}",
            "Colors: " + ", ".join(_pretty(color) for color in palette.colors),
            f"Team sync: {'enabled' if status['team_sync'] else 'disabled'}",
            f"Auto-update: {'enabled' if status['auto_update'] else 'disabled'}",
            f"Colored players: {status['colored']} ({status['collisions']} shared colors)",
        ])

    def _reload(self, sender_id: Optional[str]) -> CommandResult:
        if not self._allowed(sender_id, PERMISSION_RELOAD):
            return CommandResult(False, ["You do not have permission to reload"])
        try:
            palette, _ = self.engine.reload()
        except ConfigError as e:
            return CommandResult(False, [f"Reload failed, keeping previous configuration: {e}"])
        return CommandResult(True, [f"Configuration reloaded ({palette.size} colors)"])
