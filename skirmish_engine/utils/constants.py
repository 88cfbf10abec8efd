"""
All tuning constants in a single place.

Grid conventions, unit archetype stats, evaluation weights, move-ordering
weights, search defaults, match-driver limits, and Gymnasium env sizes.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

# ────────────────────────────── GRID ───────────────────────────────────────────
# Screen convention: x grows to the east, y grows to the south.
DIRECTION_OFFSETS: Dict[str, Tuple[int, int]] = {
    "north": (0, -1),
    "east": (1, 0),
    "south": (0, 1),
    "west": (-1, 0),
}
ATTACK_RANGE: int = 1  # Manhattan distance, both archetypes

# ────────────────────────────── UNIT ARCHETYPES ────────────────────────────────
UNIT_STATS: Dict[str, Dict[str, Any]] = {
    "melee": {
        "name": "footman",
        "hp": 160,
        "damage": 6,
    },
    "ranged": {
        "name": "archer",
        "hp": 50,
        "damage": 6,
    },
}

# ────────────────────────────── EVALUATION WEIGHTS ─────────────────────────────
# Positive favours the maximizing (melee) side, negative the minimizing side.
WEIGHT_MAX_HEALTH: float = 1.0
WEIGHT_MIN_HEALTH: float = -2.0
WEIGHT_MAX_ALIVE: float = 10.0
WEIGHT_MIN_ALIVE: float = -20.0
WEIGHT_NEAREST_ENEMY_DISTANCE: float = -5.0
WEIGHT_OBSTRUCTION: float = -1.0

# ────────────────────────────── MOVE ORDERING ──────────────────────────────────
ORDERING_ATTACK_WEIGHT: int = 3
ORDERING_DIRECTION_WEIGHT: int = 1
ORDERING_PREFERRED_DIRECTION: str = "south"  # the melee squad starts north of the archers

# ────────────────────────────── SEARCH ─────────────────────────────────────────
DEFAULT_SEARCH_DEPTH: int = 3

# ────────────────────────────── MATCH DRIVER ───────────────────────────────────
DEFAULT_MAX_PLIES: int = 200

# ────────────────────────────── OBSERVATION ────────────────────────────────────
MAX_UNITS_PER_SIDE: int = 3
UNIT_FEATURE_DIM: int = 4  # present, x, y, health
OBS_FEATURE_DIM: int = 2 * MAX_UNITS_PER_SIDE * UNIT_FEATURE_DIM
# Each unit has at most 4 moves + 4 adjacent enemies.
MAX_JOINT_ACTIONS: int = 8 ** MAX_UNITS_PER_SIDE

# ────────────────────────────── REWARD ─────────────────────────────────────────
DENSE_REWARD_SCALE: float = 0.01  # evaluation points -> reward
WIN_REWARD: float = 10.0
INVALID_ACTION_PENALTY: float = 0.1
