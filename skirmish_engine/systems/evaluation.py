"""
Heuristic evaluation — a weighted linear combination of state features.

Features (computed on the current state only):

* total health of each side,
* number of living units of each side,
* mean Euclidean distance from each maximizing-side unit to its nearest
  minimizing-side unit,
* mean number of obstacle cells inside the bounding rectangle between each
  maximizing-side unit and that nearest enemy (line-of-sight obstruction).

The two averaged features are 0 when either side has no units.  Positive
weights favour the maximizing side.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

import numpy as np

from skirmish_engine.core.actions import Side
from skirmish_engine.utils.constants import (
    WEIGHT_MAX_ALIVE,
    WEIGHT_MAX_HEALTH,
    WEIGHT_MIN_ALIVE,
    WEIGHT_MIN_HEALTH,
    WEIGHT_NEAREST_ENEMY_DISTANCE,
    WEIGHT_OBSTRUCTION,
)
from skirmish_engine.utils.converters import obstacles_between

if TYPE_CHECKING:
    from skirmish_engine.core.state import ScenarioState
    from skirmish_engine.entities.unit import Unit


@dataclass(frozen=True)
class EvaluationWeights:
    """Tuning values for :class:`StateEvaluator`; defaults come from ``constants``."""

    max_health: float = WEIGHT_MAX_HEALTH
    min_health: float = WEIGHT_MIN_HEALTH
    max_alive: float = WEIGHT_MAX_ALIVE
    min_alive: float = WEIGHT_MIN_ALIVE
    nearest_enemy_distance: float = WEIGHT_NEAREST_ENEMY_DISTANCE
    obstruction: float = WEIGHT_OBSTRUCTION


DEFAULT_WEIGHTS = EvaluationWeights()


class StateEvaluator:
    """Score states from the maximizing side's point of view."""

    def __init__(self, weights: Optional[EvaluationWeights] = None) -> None:
        self.weights = weights or DEFAULT_WEIGHTS

    def evaluate(self, state: "ScenarioState") -> float:
        f = self.features(state)
        w = self.weights
        return float(
            w.max_health * f["max_health"]
            + w.min_health * f["min_health"]
            + w.max_alive * f["max_alive"]
            + w.min_alive * f["min_alive"]
            + w.nearest_enemy_distance * f["nearest_enemy_distance"]
            + w.obstruction * f["obstruction"]
        )

    @staticmethod
    def features(state: "ScenarioState") -> Dict[str, float]:
        """Raw (unweighted) feature values of *state*."""
        max_units = state.units_of(Side.MAX)
        min_units = state.units_of(Side.MIN)

        distance, obstruction = StateEvaluator._nearest_enemy_features(state, max_units, min_units)
        return {
            "max_health": float(sum(u.health for u in max_units)),
            "min_health": float(sum(u.health for u in min_units)),
            "max_alive": float(len(max_units)),
            "min_alive": float(len(min_units)),
            "nearest_enemy_distance": distance,
            "obstruction": obstruction,
        }

    @staticmethod
    def _nearest_enemy_features(
        state: "ScenarioState",
        max_units: List["Unit"],
        min_units: List["Unit"],
    ) -> Tuple[float, float]:
        if not max_units or not min_units:
            return 0.0, 0.0

        own = np.array([u.position for u in max_units], dtype=np.float64)
        enemy = np.array([u.position for u in min_units], dtype=np.float64)

        # (n_own, n_enemy) pairwise distance matrix
        diff = own[:, None, :] - enemy[None, :, :]
        dist = np.hypot(diff[..., 0], diff[..., 1])
        nearest = dist.argmin(axis=1)

        mean_distance = float(dist[np.arange(len(max_units)), nearest].mean())

        if not state.obstacles:
            return mean_distance, 0.0
        blocked = [
            obstacles_between(u.position, min_units[j].position, state.obstacles)
            for u, j in zip(max_units, nearest)
        ]
        return mean_distance, float(np.mean(blocked))
