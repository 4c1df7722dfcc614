"""Test helpers: a recording scoreboard, config writers, sample participants."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

import yaml

from colored_names.config.palette import ChatColor
from colored_names.service.scoreboard import InMemoryScoreboard
from colored_names.service.types import Participant

ALICE = Participant(id="0f9c-alice", name="Alice")
BOB = Participant(id="1a2b-bob", name="Bob")
CAROL = Participant(id="2c3d-carol", name="Carol")


class RecordingScoreboard(InMemoryScoreboard):
    """Scoreboard that logs every mutating call and can be told to fail on any call."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: List[Tuple[str, ...]] = []
        self.fail_on: Set[str] = set()

    def _check(self, op: str) -> None:
        if op in self.fail_on:
            raise RuntimeError(f"scoreboard unavailable during {op}")

    def _record(self, op: str, *args: str) -> None:
        self._check(op)
        self.calls.append((op, *args))

    def create_group(self, label: str) -> None:
        self._record("create_group", label)
        super().create_group(label)

    def delete_group(self, label: str) -> None:
        self._record("delete_group", label)
        super().delete_group(label)

    def add_member(self, label: str, participant_id: str) -> None:
        self._record("add_member", label, participant_id)
        super().add_member(label, participant_id)

    def remove_member(self, label: str, participant_id: str) -> None:
        self._record("remove_member", label, participant_id)
        super().remove_member(label, participant_id)

    def has_group(self, label: str) -> bool:
        self._check("has_group")
        return super().has_group(label)

    def get_members(self, label: str) -> Set[str]:
        self._check("get_members")
        return super().get_members(label)


def write_config(path: Path, colors: Iterable[ChatColor] | Dict[str, bool] | None = None, **flags) -> Path:
    """Write a palette document; ``colors`` may be a list of colors or a raw mapping."""
    document: Dict[str, object] = {}
    if isinstance(colors, dict):
        document["colors"] = colors
    elif colors is not None:
        document["colors"] = [color.name for color in colors]
    for key, value in flags.items():
        document[key.replace("_", "-")] = value
    path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
    return path


def expected_groups(snapshot: Dict[str, Optional[ChatColor]], prefix: str = "cpn_") -> Dict[str, Set[str]]:
    groups: Dict[str, Set[str]] = {}
    for participant_id, color in snapshot.items():
        if color is not None:
            groups.setdefault(f"{prefix}{color.label}", set()).add(participant_id)
    return groups


