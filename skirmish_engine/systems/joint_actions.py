"""
Joint-action generation — the conflict-free Cartesian product of per-unit
action lists.

Combinations are produced lazily by a depth-first generator over the units
in ascending id order.  A partial combination is abandoned as soon as a
``Move`` claims a destination cell already claimed by an earlier unit, so
conflicting combinations are never built.  Attacks never conflict.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Set, Tuple

from skirmish_engine.core.actions import JointAction, Move, PrimitiveAction
from skirmish_engine.utils.converters import shift

Cell = Tuple[int, int]


class JointActionGenerator:
    """
    Pure generator of joint actions for one side.

    Parameters
    ----------
    positions : Mapping[int, tuple[int, int]]
        Current cell of every unit that may appear in *actions*.
    """

    def __init__(self, positions: Mapping[int, Cell]) -> None:
        self.positions = positions

    def generate(self, actions: Mapping[int, List[PrimitiveAction]]) -> Iterator[JointAction]:
        """
        Yield every joint action choosing one entry per unit.

        Units with an empty action list contribute no entry.  When no unit
        has any action at all, nothing is yielded.
        """
        unit_ids = [uid for uid in sorted(actions) if actions[uid]]
        if not unit_ids:
            return
        yield from self._extend(unit_ids, 0, actions, {}, set())

    def _extend(
        self,
        unit_ids: List[int],
        index: int,
        actions: Mapping[int, List[PrimitiveAction]],
        partial: Dict[int, PrimitiveAction],
        claimed: Set[Cell],
    ) -> Iterator[JointAction]:
        if index == len(unit_ids):
            yield dict(partial)
            return

        unit_id = unit_ids[index]
        for action in actions[unit_id]:
            destination = None
            if isinstance(action, Move):
                destination = shift(self.positions[unit_id], action.direction.offset)
                if destination in claimed:
                    continue
                claimed.add(destination)

            partial[unit_id] = action
            yield from self._extend(unit_ids, index + 1, actions, partial, claimed)
            del partial[unit_id]

            if destination is not None:
                claimed.discard(destination)
