"""
Move-ordering heuristic for alpha-beta search.

Children are sorted by a cheap proxy score before they are explored:
attacks weigh most because they lower enemy health and count, which the
evaluation rewards heavily; moves in the preferred direction weigh less
because they close in on the enemy on the standard maps.  Only pruning
efficiency depends on this ordering, never the backed-up value.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from skirmish_engine.core.actions import Attack, Direction, JointAction, Move
from skirmish_engine.utils.constants import (
    ORDERING_ATTACK_WEIGHT,
    ORDERING_DIRECTION_WEIGHT,
    ORDERING_PREFERRED_DIRECTION,
)

if TYPE_CHECKING:
    from skirmish_engine.core.state import SearchNode


class MoveOrdering:
    """Stable, descending sort of sibling nodes by :meth:`score`."""

    def __init__(
        self,
        attack_weight: int = ORDERING_ATTACK_WEIGHT,
        direction_weight: int = ORDERING_DIRECTION_WEIGHT,
        preferred_direction: Direction = Direction(ORDERING_PREFERRED_DIRECTION),
    ) -> None:
        self.attack_weight = attack_weight
        self.direction_weight = direction_weight
        self.preferred_direction = preferred_direction

    def score(self, joint_action: JointAction) -> int:
        attacks = 0
        preferred_moves = 0
        for action in joint_action.values():
            if isinstance(action, Attack):
                attacks += 1
            elif isinstance(action, Move) and action.direction is self.preferred_direction:
                preferred_moves += 1
        return attacks * self.attack_weight + preferred_moves * self.direction_weight

    def order(self, children: List["SearchNode"]) -> List["SearchNode"]:
        """Return *children* best-first; equal scores keep their generation order."""
        return sorted(children, key=lambda child: self.score(child.joint_action), reverse=True)
