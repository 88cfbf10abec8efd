"""
Combat system — applies a joint action to a unit collection.

Entries are processed in ascending acting-unit id order:

* ``Move`` shifts the unit one cell; legality was settled at enumeration.
* ``Attack`` lowers the victim's health by the attacker's attack power,
  floored at 0.  A victim at 0 is removed at once, so a later attack on
  the same victim within the joint action finds nothing and is skipped.
"""

from __future__ import annotations

from typing import Dict, Mapping

from skirmish_engine.core.actions import Attack, JointAction, Move
from skirmish_engine.entities.unit import Unit
from skirmish_engine.utils.validators import InvalidJointActionError


class CombatSystem:
    """Resolve moves and attacks into a fresh unit mapping."""

    @staticmethod
    def resolve(units: Mapping[int, Unit], joint_action: JointAction) -> Dict[int, Unit]:
        """Return the unit mapping after *joint_action*; *units* is left as is."""
        resolved: Dict[int, Unit] = dict(units)

        for unit_id in sorted(joint_action):
            action = joint_action[unit_id]
            actor = resolved.get(unit_id)
            if actor is None:
                raise InvalidJointActionError(f"Unit {unit_id} is not in the state")

            if isinstance(action, Move):
                resolved[unit_id] = actor.moved(action.direction)
            elif isinstance(action, Attack):
                CombatSystem._apply_attack(resolved, actor, action.target_id)
            else:
                raise InvalidJointActionError(f"Unit {unit_id} has unrecognised action {action!r}")

        return resolved

    @staticmethod
    def _apply_attack(units: Dict[int, Unit], attacker: Unit, target_id: int) -> None:
        victim = units.get(target_id)
        if victim is None:
            return  # an earlier attack in this joint action already killed it

        victim = victim.damaged(attacker.attack_power)
        if victim.is_dead:
            del units[target_id]
        else:
            units[target_id] = victim
