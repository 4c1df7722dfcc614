from __future__ import annotations

import random
from typing import Set

import pytest

from colored_names.config.palette import ChatColor, Palette, palette_of
from colored_names.service.player_colors import (
    PlayerColors,
    get_collision_policy,
    least_used_collision,
)
from colored_names.service.team_sync import TeamSync
from colored_names.service.types import PaletteExhausted
from tests.helpers import RecordingScoreboard, expected_groups

RED_BLUE = palette_of([ChatColor.RED, ChatColor.BLUE])
FOUR = palette_of([ChatColor.RED, ChatColor.BLUE, ChatColor.GREEN, ChatColor.GOLD])


def check_invariants(table: PlayerColors, eligible: Set[str]) -> None:
    snapshot = table.snapshot()
    colored = {pid: color for pid, color in snapshot.items() if color is not None}
    # colored keys are tracked participants
    assert set(colored) <= set(table.tracked())
    # ineligible participants hold nothing
    for pid in set(snapshot) - eligible:
        assert snapshot[pid] is None
    for color in colored.values():
        assert color in table.palette.colors


def test_distinct_colors_while_palette_suffices(rng) -> None:
    table = PlayerColors(FOUR, rng=rng)
    players = [f"p{i}" for i in range(4)]

    colors = [table.assign(pid) for pid in players]

    assert len(set(colors)) == 4
    assert table.collisions() == {}


def test_one_collision_when_palette_is_one_short(rng) -> None:
    table = PlayerColors(RED_BLUE, rng=rng)

    for pid in ("a", "b", "c"):
        table.assign(pid)

    shared = table.collisions()
    assert len(shared) == 1
    assert len(next(iter(shared.values()))) == 2
    assert all(table.get(pid) is not None for pid in ("a", "b", "c"))


def test_reroll_picks_a_different_free_color(rng) -> None:
    table = PlayerColors(FOUR, rng=rng)
    first = table.assign("a")

    for _ in range(20):
        second = table.assign("a")
        assert second != first
        first = second


def test_reroll_keeps_color_when_it_is_the_only_free_one(rng) -> None:
    table = PlayerColors(RED_BLUE, rng=rng)
    a = table.assign("a")
    b = table.assign("b")

    assert a != b
    assert table.assign("a") == a


def test_free_colors_are_chosen_uniformly_not_first_fit() -> None:
    seen = {PlayerColors(FOUR, rng=random.Random(seed)).assign("a") for seed in range(200)}

    assert seen == set(FOUR.colors)


def test_clear_is_idempotent(rng) -> None:
    scoreboard = RecordingScoreboard()
    table = PlayerColors(RED_BLUE, sync=TeamSync(scoreboard), rng=rng)
    table.assign("a")

    table.clear("a")
    calls_after_first = list(scoreboard.calls)
    groups_after_first = scoreboard.groups()
    table.clear("a")

    assert table.get("a") is None
    assert "a" in table
    assert scoreboard.calls == calls_after_first
    assert scoreboard.groups() == groups_after_first == {}


def test_clear_and_get_on_unknown_participant_are_noops(rng) -> None:
    table = PlayerColors(RED_BLUE, rng=rng)

    table.clear("ghost")
    table.forget("ghost")

    assert table.get("ghost") is None
    assert "ghost" not in table


def test_track_records_uncolored_presence(rng) -> None:
    table = PlayerColors(RED_BLUE, rng=rng)

    table.track("a")

    assert "a" in table
    assert table.get("a") is None
    assert table.usage() == {}


def test_forget_stops_tracking(rng) -> None:
    table = PlayerColors(RED_BLUE, rng=rng)
    table.assign("a")

    table.forget("a")

    assert "a" not in table
    assert len(table) == 0


def test_reset_discards_table(rng) -> None:
    scoreboard = RecordingScoreboard()
    table = PlayerColors(RED_BLUE, sync=TeamSync(scoreboard), rng=rng)
    old = table.assign("a")
    table.assign("b")

    table.reset()

    assert table.closed
    assert len(table) == 0
    assert scoreboard.groups() == {}
    with pytest.raises(RuntimeError):
        table.assign("a")
    table.clear("a")
    table.reset()

    assert f"cpn_{old.label}" not in scoreboard.groups()
    fresh = PlayerColors(RED_BLUE, sync=TeamSync(scoreboard), rng=rng)
    assert fresh.assign("a") is not None


def test_empty_palette_raises_palette_exhausted(rng) -> None:
    empty = Palette.model_construct(colors=())
    table = PlayerColors(empty, rng=rng)

    with pytest.raises(PaletteExhausted):
        table.assign("a")


def test_least_used_policy_balances_collisions(rng) -> None:
    table = PlayerColors(RED_BLUE, rng=rng, collision_policy=least_used_collision)

    for pid in ("a", "b", "c", "d"):
        table.assign(pid)

    assert table.usage() == {ChatColor.RED: 2, ChatColor.BLUE: 2}


def test_collision_policy_follows_palette_setting(rng) -> None:
    palette = palette_of([ChatColor.RED], collision_policy="least-used")
    table = PlayerColors(palette, rng=rng)

    table.assign("a")
    assert table.assign("b") == ChatColor.RED
    assert get_collision_policy("least-used") is least_used_collision
    with pytest.raises(ValueError):
        get_collision_policy("round-robin")


def test_invariants_hold_over_random_operations() -> None:
    rng = random.Random(99)
    scoreboard = RecordingScoreboard()
    table = PlayerColors(FOUR, sync=TeamSync(scoreboard), rng=random.Random(5))
    eligible: Set[str] = set()
    players = [f"p{i}" for i in range(7)]

    for _ in range(300):
        pid = rng.choice(players)
        op = rng.choice(["assign", "clear", "forget", "ineligible"])
        if op == "assign":
            eligible.add(pid)
            held_by_others = {c for p, c in table.snapshot().items() if p != pid and c is not None}
            color = table.assign(pid)
            # a free color is always preferred over sharing
            if len(held_by_others) < table.palette.size:
                assert color not in held_by_others
        elif op == "clear":
            table.clear(pid)
        elif op == "forget":
            eligible.discard(pid)
            table.forget(pid)
        else:
            eligible.discard(pid)
            table.clear(pid)
            table.track(pid)
        check_invariants(table, eligible)
        assert scoreboard.groups() == expected_groups(table.snapshot())
