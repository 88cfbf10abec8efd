"""
Skirmish Engine — simultaneous-move adversarial search for grid skirmishes.

Given a snapshot of a melee squad facing a ranged squad on a grid with
static obstacles, the engine enumerates every conflict-free joint action of
the side to move, resolves combat deterministically, and picks the move
that is optimal under depth-limited minimax with alpha-beta pruning.
"""

from skirmish_engine.core.actions import Attack, Direction, JointAction, Move, Role, Side
from skirmish_engine.core.engine import SkirmishEngine
from skirmish_engine.core.search import AlphaBetaSearch, minimax_value, search
from skirmish_engine.core.state import (
    ScenarioState,
    SearchNode,
    Snapshot,
    UnitSnapshot,
    build_root_state,
)
from skirmish_engine.entities.unit import Unit
from skirmish_engine.players.player_interface import (
    MinimaxPlayer,
    PlayerInterface,
    RandomPlayer,
)
from skirmish_engine.systems.evaluation import EvaluationWeights

__version__ = "0.1.0"

__all__ = [
    "AlphaBetaSearch",
    "Attack",
    "Direction",
    "EvaluationWeights",
    "JointAction",
    "MinimaxPlayer",
    "Move",
    "PlayerInterface",
    "RandomPlayer",
    "Role",
    "ScenarioState",
    "SearchNode",
    "Side",
    "SkirmishEngine",
    "Snapshot",
    "Unit",
    "UnitSnapshot",
    "build_root_state",
    "minimax_value",
    "search",
]
