"""
Sides, directions and primitive actions.

A *joint action* maps every acting unit id of one side to exactly one
primitive action (:class:`Move` or :class:`Attack`) for a single ply.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from skirmish_engine.utils.constants import DIRECTION_OFFSETS


class Side(str, Enum):
    MAX = "max"  # side A, melee squad
    MIN = "min"  # side B, ranged squad

    @property
    def opponent(self) -> "Side":
        return Side.MIN if self is Side.MAX else Side.MAX


class Role(str, Enum):
    MELEE = "melee"
    RANGED = "ranged"

    @property
    def side(self) -> Side:
        return Side.MAX if self is Role.MELEE else Side.MIN


class Direction(str, Enum):
    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @property
    def offset(self) -> Tuple[int, int]:
        return DIRECTION_OFFSETS[self.value]


# Enumeration order for legal moves
VALID_DIRECTIONS: Tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.EAST,
    Direction.SOUTH,
    Direction.WEST,
)


@dataclass(frozen=True)
class Move:
    """Step one cell in *direction*."""

    direction: Direction


@dataclass(frozen=True)
class Attack:
    """Hit the unit with id *target_id* for the attacker's full attack power."""

    target_id: int


PrimitiveAction = Union[Move, Attack]
JointAction = Dict[int, PrimitiveAction]


def describe_joint_action(joint_action: JointAction) -> str:
    """Compact, id-ordered text form used in logs."""
    parts = []
    for unit_id in sorted(joint_action):
        action = joint_action[unit_id]
        if isinstance(action, Move):
            parts.append(f"{unit_id}:move({action.direction.value})")
        elif isinstance(action, Attack):
            parts.append(f"{unit_id}:attack({action.target_id})")
        else:
            parts.append(f"{unit_id}:{action!r}")
    return "{" + ", ".join(parts) + "}" if parts else "{}"
