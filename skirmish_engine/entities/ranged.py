"""Ranged archetype (archer) — fragile, fights for the minimizing side."""

from __future__ import annotations

from typing import Optional

from skirmish_engine.core.actions import Role
from skirmish_engine.entities.unit import Unit
from skirmish_engine.utils.constants import UNIT_STATS


def create_ranged(
    unit_id: int,
    x: int,
    y: int,
    health: Optional[int] = None,
    attack_power: Optional[int] = None,
) -> Unit:
    """Factory function for a ranged unit; stats default to ``UNIT_STATS["ranged"]``."""
    s = UNIT_STATS["ranged"]
    return Unit(
        id=unit_id,
        role=Role.RANGED,
        position=(x, y),
        health=s["hp"] if health is None else health,
        attack_power=s["damage"] if attack_power is None else attack_power,
    )
