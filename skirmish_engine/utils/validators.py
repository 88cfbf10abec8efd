"""
Snapshot and joint-action validation utilities.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Set, Tuple

from skirmish_engine.core.actions import Attack, JointAction, Move, Side
from skirmish_engine.systems.enumeration import ActionEnumerator
from skirmish_engine.utils.converters import in_bounds, shift

if TYPE_CHECKING:
    from skirmish_engine.core.state import ScenarioState, Snapshot


class InvalidActionError(Exception):
    """Raised when an action is not valid."""


class InvalidJointActionError(InvalidActionError):
    """Raised when a joint action has the wrong shape for the side to move."""


class InvalidSnapshotError(ValueError):
    """Raised when a snapshot violates the scenario-state invariants."""


def validate_snapshot(snapshot: "Snapshot") -> Optional[str]:
    """
    Return ``None`` if *snapshot* can seed a scenario state, otherwise a
    human-readable error string.

    Rules
    -----
    * Map extents and ply are non-negative.
    * Unit ids are unique.
    * Every unit is alive and has positive attack power.
    * Every unit stands inside the map, off the obstacles, on its own cell.
    """
    if snapshot.map_width < 0 or snapshot.map_height < 0:
        return f"Negative map extents ({snapshot.map_width}, {snapshot.map_height})"
    if snapshot.ply < 0:
        return f"Negative ply: {snapshot.ply}"

    obstacles = set(snapshot.obstacles)
    seen_ids: Set[int] = set()
    occupied: Dict[Tuple[int, int], int] = {}

    for u in snapshot.units:
        if u.id in seen_ids:
            return f"Duplicate unit id: {u.id}"
        seen_ids.add(u.id)

        if u.health <= 0:
            return f"Unit {u.id} has non-positive health ({u.health})"
        if u.attack_power <= 0:
            return f"Unit {u.id} has non-positive attack power ({u.attack_power})"

        cell = (u.x, u.y)
        if not in_bounds(cell, snapshot.map_width, snapshot.map_height):
            return f"Unit {u.id} at {cell} is out of bounds"
        if cell in obstacles:
            return f"Unit {u.id} at {cell} stands on an obstacle"
        if cell in occupied:
            return f"Units {occupied[cell]} and {u.id} share cell {cell}"
        occupied[cell] = u.id

    return None  # valid


def validate_joint_action(
    state: "ScenarioState",
    joint_action: JointAction,
    side: Side,
    *,
    check_legality: bool = False,
) -> Optional[str]:
    """
    Return ``None`` if *joint_action* can be applied for *side*, otherwise a
    human-readable error string.

    The shape check always runs: every key is a living unit of *side*, every
    value is a :class:`Move` or :class:`Attack`, and no attack targets a
    friendly unit.  With ``check_legality`` the actions must also be legal
    in *state* (free destination cells, adjacent targets, no two moves into
    the same cell).  Units may be left out; they hold position.
    """
    for unit_id, action in joint_action.items():
        unit = state.units.get(unit_id)
        if unit is None:
            return f"Unit {unit_id} is not in the state"
        if unit.side is not side:
            return f"Unit {unit_id} does not belong to side {side.value}"
        if isinstance(action, Attack):
            target = state.units.get(action.target_id)
            if target is not None and target.side is side:
                return f"Unit {unit_id} cannot attack friendly unit {action.target_id}"
        elif not isinstance(action, Move):
            return f"Unit {unit_id} has unrecognised action {action!r}"

    if not check_legality:
        return None

    destinations: Dict[Tuple[int, int], int] = {}
    for unit_id in sorted(joint_action):
        action = joint_action[unit_id]
        if action not in ActionEnumerator.legal_actions(state, state.units[unit_id]):
            return f"Action {action!r} is not legal for unit {unit_id}"
        if isinstance(action, Move):
            cell = shift(state.units[unit_id].position, action.direction.offset)
            if cell in destinations:
                return f"Units {destinations[cell]} and {unit_id} both move into {cell}"
            destinations[cell] = unit_id

    return None  # valid
