"""
Scenario state — an immutable snapshot of one skirmish position.

Provides :class:`ScenarioState` (units, map extents, obstacles, ply) with its
legality queries, transition, terminal test and heuristic evaluation, the
:class:`SearchNode` exchanged with the search engine, and the external
:class:`Snapshot` format accepted by :func:`build_root_state`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple, Union

from skirmish_engine.core.actions import JointAction, PrimitiveAction, Role, Side
from skirmish_engine.entities.unit import Unit
from skirmish_engine.systems.combat import CombatSystem
from skirmish_engine.systems.enumeration import ActionEnumerator
from skirmish_engine.systems.evaluation import EvaluationWeights, StateEvaluator
from skirmish_engine.systems.joint_actions import JointActionGenerator
from skirmish_engine.utils.validators import (
    InvalidJointActionError,
    InvalidSnapshotError,
    validate_joint_action,
    validate_snapshot,
)

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]


# ══════════════════════════════════════════════════════════════════════════
# External snapshot format
# ══════════════════════════════════════════════════════════════════════════


@dataclass
class UnitSnapshot:
    """One living unit as reported by the outside world."""

    id: int
    role: Role
    x: int
    y: int
    health: int
    attack_power: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UnitSnapshot:
        return cls(
            id=int(data["id"]),
            role=Role(data["role"]),
            x=int(data["x"]),
            y=int(data["y"]),
            health=int(data["health"]),
            attack_power=int(data["attack_power"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "x": self.x,
            "y": self.y,
            "health": self.health,
            "attack_power": self.attack_power,
        }


@dataclass
class Snapshot:
    """Everything needed to build a root :class:`ScenarioState`."""

    map_width: int
    map_height: int
    units: List[UnitSnapshot]
    obstacles: List[Cell] = field(default_factory=list)
    ply: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Snapshot:
        return cls(
            map_width=int(data["map_width"]),
            map_height=int(data["map_height"]),
            units=[UnitSnapshot.from_dict(u) for u in data["units"]],
            obstacles=[(int(x), int(y)) for x, y in data.get("obstacles", [])],
            ply=int(data.get("ply", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "map_width": self.map_width,
            "map_height": self.map_height,
            "units": [u.to_dict() for u in self.units],
            "obstacles": [list(cell) for cell in self.obstacles],
            "ply": self.ply,
        }


# ══════════════════════════════════════════════════════════════════════════
# Scenario state
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ScenarioState:
    """
    Immutable skirmish position.

    Parameters
    ----------
    units : Mapping[int, Unit]
        Living units by id.  Stored as a read-only copy.
    map_width, map_height : int
        Inclusive map extents; valid cells satisfy ``0 <= x <= map_width``
        and ``0 <= y <= map_height``.
    obstacles : frozenset of (x, y)
        Static blocked cells, shared by every state derived from this one.
    ply : int
        Half-turn counter; even plies belong to :attr:`Side.MAX`.
    """

    units: Mapping[int, Unit]
    map_width: int
    map_height: int
    obstacles: FrozenSet[Cell] = frozenset()
    ply: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "units", MappingProxyType(dict(self.units)))
        if not isinstance(self.obstacles, frozenset):
            object.__setattr__(self, "obstacles", frozenset(self.obstacles))

    def __hash__(self) -> int:
        return hash((tuple(sorted(self.units.items())), self.map_width, self.map_height, self.obstacles, self.ply))

    # ── derived properties ────────────────────────────────────────────────

    @property
    def side_to_move(self) -> Side:
        return Side.MAX if self.ply % 2 == 0 else Side.MIN

    @cached_property
    def occupied_cells(self) -> FrozenSet[Cell]:
        return frozenset(u.position for u in self.units.values())

    @cached_property
    def _units_by_side(self) -> Dict[Side, List[Unit]]:
        by_side: Dict[Side, List[Unit]] = {Side.MAX: [], Side.MIN: []}
        for unit_id in sorted(self.units):
            unit = self.units[unit_id]
            by_side[unit.side].append(unit)
        return by_side

    def units_of(self, side: Side) -> List[Unit]:
        """Living units of *side*, ascending id."""
        return list(self._units_by_side[side])

    # ── terminal test & evaluation ────────────────────────────────────────

    def is_terminal(self) -> bool:
        return not self._units_by_side[Side.MAX] or not self._units_by_side[Side.MIN]

    def winner(self) -> Optional[Side]:
        """The side with units left once the other is wiped out, else ``None``."""
        if not self.is_terminal():
            return None
        if self._units_by_side[Side.MAX]:
            return Side.MAX
        if self._units_by_side[Side.MIN]:
            return Side.MIN
        return None

    def evaluate(self, weights: Optional[EvaluationWeights] = None) -> float:
        """Heuristic value from the maximizing side's point of view."""
        return StateEvaluator(weights).evaluate(self)

    # ── legality ──────────────────────────────────────────────────────────

    def legal_actions(self, unit_id: int) -> List[PrimitiveAction]:
        return ActionEnumerator.legal_actions(self, self.units[unit_id])

    def joint_actions(self, side: Side) -> Iterator[JointAction]:
        """Lazily generate every conflict-free joint action of *side*."""
        actions = ActionEnumerator.legal_actions_for_side(self, side)
        positions = {uid: self.units[uid].position for uid in actions}
        return JointActionGenerator(positions).generate(actions)

    # ── transition ────────────────────────────────────────────────────────

    def apply(self, joint_action: JointAction, side: Side, *, validate: bool = True) -> ScenarioState:
        """
        Return the successor reached when *side* plays *joint_action*.

        Raises :class:`InvalidJointActionError` if the action names units
        outside *side* or carries an unrecognised action type.
        """
        if validate:
            err = validate_joint_action(self, joint_action, side)
            if err is not None:
                raise InvalidJointActionError(err)

        return ScenarioState(
            units=CombatSystem.resolve(self.units, joint_action),
            map_width=self.map_width,
            map_height=self.map_height,
            obstacles=self.obstacles,
            ply=self.ply + 1,
        )

    def iter_children(self, side: Side) -> Iterator[SearchNode]:
        for joint_action in self.joint_actions(side):
            yield SearchNode(joint_action, self.apply(joint_action, side, validate=False))

    def get_children(self, side: Side) -> List[SearchNode]:
        """One :class:`SearchNode` per legal joint action of *side*, in generation order."""
        return list(self.iter_children(side))

    # ── conversion ────────────────────────────────────────────────────────

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            map_width=self.map_width,
            map_height=self.map_height,
            units=[
                UnitSnapshot(u.id, u.role, u.x, u.y, u.health, u.attack_power)
                for _, u in sorted(self.units.items())
            ],
            obstacles=sorted(self.obstacles),
            ply=self.ply,
        )

    def __repr__(self) -> str:
        return (
            f"ScenarioState(ply={self.ply}, map={self.map_width}x{self.map_height}, "
            f"units={list(self.units.values())}, obstacles={len(self.obstacles)})"
        )


@dataclass(frozen=True, eq=False)
class SearchNode:
    """
    A joint action paired with the state it produces.

    ``joint_action`` is empty for a root node.  ``value`` is filled in by the
    search for the node it returns (the backed-up minimax value).  Nodes
    compare and hash by identity; compare ``joint_action`` and
    ``resulting_state`` for structural equality.
    """

    joint_action: JointAction
    resulting_state: ScenarioState
    value: Optional[float] = None


def build_root_state(snapshot: Union[Snapshot, Dict[str, Any]]) -> ScenarioState:
    """
    Build a :class:`ScenarioState` from an external snapshot.

    Raises :class:`InvalidSnapshotError` if unit positions are out of
    bounds, on obstacles, or shared, or if any unit record is malformed.
    """
    if isinstance(snapshot, dict):
        snapshot = Snapshot.from_dict(snapshot)

    err = validate_snapshot(snapshot)
    if err is not None:
        raise InvalidSnapshotError(err)

    units = {
        u.id: Unit(
            id=u.id,
            role=u.role,
            position=(u.x, u.y),
            health=u.health,
            attack_power=u.attack_power,
        )
        for u in snapshot.units
    }
    state = ScenarioState(
        units=units,
        map_width=snapshot.map_width,
        map_height=snapshot.map_height,
        obstacles=frozenset(snapshot.obstacles),
        ply=snapshot.ply,
    )
    logger.debug("Built root state %r", state)
    return state
