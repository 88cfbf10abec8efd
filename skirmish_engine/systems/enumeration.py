"""
Action enumeration — the individually legal primitive actions of one unit.

1. ``Move(d)`` for each of the four directions whose destination cell is
   inside the map, is not an obstacle, and is not occupied by any unit.
2. ``Attack(t)`` for every enemy within Manhattan distance 1.  Diagonal
   neighbours are out of reach.

Moves come first in ``NORTH, EAST, SOUTH, WEST`` order, then attacks by
ascending target id, so enumeration is deterministic.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List

from skirmish_engine.core.actions import VALID_DIRECTIONS, Attack, Move, PrimitiveAction, Side
from skirmish_engine.entities.unit import Unit
from skirmish_engine.utils.constants import ATTACK_RANGE
from skirmish_engine.utils.converters import in_bounds, shift

if TYPE_CHECKING:
    from skirmish_engine.core.state import ScenarioState


class ActionEnumerator:
    """Stateless helper — queries a :class:`ScenarioState` without touching it."""

    @staticmethod
    def legal_actions(state: "ScenarioState", unit: Unit) -> List[PrimitiveAction]:
        """Return every legal primitive action of *unit* (possibly empty)."""
        actions: List[PrimitiveAction] = []

        occupied = state.occupied_cells
        for direction in VALID_DIRECTIONS:
            cell = shift(unit.position, direction.offset)
            if not in_bounds(cell, state.map_width, state.map_height):
                continue
            if cell in state.obstacles or cell in occupied:
                continue
            actions.append(Move(direction))

        for enemy_id in sorted(state.units):
            enemy = state.units[enemy_id]
            if enemy.is_enemy_of(unit) and unit.steps_to(enemy) <= ATTACK_RANGE:
                actions.append(Attack(enemy_id))

        return actions

    @staticmethod
    def legal_actions_for_side(
        state: "ScenarioState",
        side: Side,
    ) -> Dict[int, List[PrimitiveAction]]:
        """Map every unit id of *side* (ascending) to its legal actions."""
        return {
            unit_id: ActionEnumerator.legal_actions(state, state.units[unit_id])
            for unit_id in sorted(state.units)
            if state.units[unit_id].side is side
        }
