"""
Unit — one combatant inside a scenario snapshot.

Units are frozen: moving or damaging a unit returns a new :class:`Unit`,
so a parent state is never affected by the transitions of its children.
Positions are integer grid cells ``(x, y)``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from skirmish_engine.core.actions import Direction, Role, Side
from skirmish_engine.utils.constants import UNIT_STATS
from skirmish_engine.utils.converters import manhattan_distance, shift


@dataclass(frozen=True)
class Unit:
    """
    Immutable combatant record.

    Attributes
    ----------
    id : int
        Unique within a state.
    role : Role
        ``MELEE`` units fight for :attr:`Side.MAX`, ``RANGED`` for :attr:`Side.MIN`.
    position : tuple[int, int]
        Grid cell ``(x, y)``.
    health : int
        Remaining hit points; a unit at 0 is removed from its state.
    attack_power : int
        Damage dealt by one attack.
    """

    id: int
    role: Role
    position: Tuple[int, int]
    health: int
    attack_power: int

    # ── derived properties ────────────────────────────────────────────────

    @property
    def side(self) -> Side:
        return self.role.side

    @property
    def name(self) -> str:
        return UNIT_STATS[self.role.value]["name"]

    @property
    def x(self) -> int:
        return self.position[0]

    @property
    def y(self) -> int:
        return self.position[1]

    @property
    def is_dead(self) -> bool:
        return self.health <= 0

    # ── transitions ───────────────────────────────────────────────────────

    def moved(self, direction: Direction) -> Unit:
        return replace(self, position=shift(self.position, direction.offset))

    def damaged(self, amount: int) -> Unit:
        """Return a copy with *amount* damage taken, floored at 0."""
        return replace(self, health=max(0, self.health - amount))

    # ── convenience ───────────────────────────────────────────────────────

    def steps_to(self, other: Unit) -> int:
        """Manhattan distance in cells."""
        return manhattan_distance(self.position, other.position)

    def is_enemy_of(self, other: Unit) -> bool:
        return self.side is not other.side

    def __repr__(self) -> str:
        return (
            f"Unit(id={self.id}, name={self.name!r}, side={self.side.value}, "
            f"pos={self.position}, hp={self.health}, atk={self.attack_power})"
        )
