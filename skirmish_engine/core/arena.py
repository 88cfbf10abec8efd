"""
Arena — preset scenario snapshots.

The presets mirror the classic footmen-versus-archers training maps: the
melee squad starts in the north, the archers in the south, with a wall of
obstacles between them that only leaves gaps at the edges.
"""

from __future__ import annotations

from typing import List, Tuple

from skirmish_engine.core.state import Snapshot, UnitSnapshot
from skirmish_engine.entities.melee import create_melee
from skirmish_engine.entities.ranged import create_ranged
from skirmish_engine.entities.unit import Unit

# Skirmish map geometry (inclusive extents)
SKIRMISH_WIDTH: int = 8
SKIRMISH_HEIGHT: int = 8
SKIRMISH_WALL_Y: int = 4
SKIRMISH_WALL_X: Tuple[int, int] = (2, 6)  # inclusive span of the obstacle wall


def _to_snapshot(unit: Unit) -> UnitSnapshot:
    return UnitSnapshot(
        id=unit.id,
        role=unit.role,
        x=unit.x,
        y=unit.y,
        health=unit.health,
        attack_power=unit.attack_power,
    )


def create_duel_snapshot() -> Snapshot:
    """One melee unit next to one ranged unit on an open 3×3 map."""
    return Snapshot(
        map_width=3,
        map_height=3,
        units=[
            _to_snapshot(create_melee(1, 0, 0, health=10, attack_power=2)),
            _to_snapshot(create_ranged(2, 1, 0, health=10, attack_power=2)),
        ],
    )


def create_skirmish_snapshot(with_wall: bool = True) -> Snapshot:
    """Two footmen in the north against two archers in the south."""
    units: List[UnitSnapshot] = [
        _to_snapshot(create_melee(1, 1, 1)),
        _to_snapshot(create_melee(2, 2, 1)),
        _to_snapshot(create_ranged(3, 6, 7)),
        _to_snapshot(create_ranged(4, 7, 7)),
    ]
    obstacles = []
    if with_wall:
        lo, hi = SKIRMISH_WALL_X
        obstacles = [(x, SKIRMISH_WALL_Y) for x in range(lo, hi + 1)]
    return Snapshot(
        map_width=SKIRMISH_WIDTH,
        map_height=SKIRMISH_HEIGHT,
        units=units,
        obstacles=obstacles,
    )
