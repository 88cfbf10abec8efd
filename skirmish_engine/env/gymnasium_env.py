"""
Gymnasium-compatible single-agent environment for the skirmish.

The agent commands the melee squad (:attr:`Side.MAX`); the ranged squad is
driven by a :class:`PlayerInterface` (default: depth-1
:class:`MinimaxPlayer`).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from skirmish_engine.core.actions import JointAction, Side
from skirmish_engine.core.engine import SkirmishEngine
from skirmish_engine.core.state import ScenarioState, Snapshot
from skirmish_engine.players.player_interface import (
    ExternalPlayer,
    MinimaxPlayer,
    PlayerInterface,
)
from skirmish_engine.utils.constants import (
    DEFAULT_MAX_PLIES,
    DENSE_REWARD_SCALE,
    INVALID_ACTION_PENALTY,
    MAX_JOINT_ACTIONS,
    MAX_UNITS_PER_SIDE,
    OBS_FEATURE_DIM,
    UNIT_FEATURE_DIM,
    UNIT_STATS,
    WIN_REWARD,
)
from skirmish_engine.utils.validators import InvalidActionError


class SkirmishEnv(gym.Env):
    """
    Gymnasium environment for a melee-versus-ranged skirmish.

    Action space
    -------------
    ``Discrete(MAX_JOINT_ACTIONS + 1)`` — index *i* picks the *i*-th legal
    joint action in generation order; the last index holds position.
    ``info["action_mask"]`` flags the indices that are currently valid.

    Observation space
    -----------------
    ``Box(0, 1, shape=(OBS_FEATURE_DIM,), float32)`` — per unit slot
    ``[present, x / width, y / height, health / max_health]``, melee slots
    first, units ordered by id.
    """

    metadata: Dict[str, Any] = {"render_modes": [None]}

    def __init__(
        self,
        opponent: Optional[PlayerInterface] = None,
        snapshot: Optional[Snapshot] = None,
        reward_shaping: str = "sparse",
        max_plies: int = DEFAULT_MAX_PLIES,
        render_mode: Optional[str] = None,
    ) -> None:
        super().__init__()

        self.reward_shaping = reward_shaping
        self.render_mode = render_mode

        opponent = opponent or MinimaxPlayer(Side.MIN, depth=1)
        self.engine = SkirmishEngine(
            player_max=ExternalPlayer(Side.MAX),  # actions are injected via step()
            player_min=opponent,
            snapshot=snapshot,
            max_plies=max_plies,
        )

        for side in Side:
            if len(self.engine.state.units_of(side)) > MAX_UNITS_PER_SIDE:
                raise ValueError(f"At most {MAX_UNITS_PER_SIDE} units per side are supported")

        self._options: List[JointAction] = []
        self._setup_spaces()

    # ── spaces ────────────────────────────────────────────────────────────

    def _setup_spaces(self) -> None:
        self.action_space = spaces.Discrete(MAX_JOINT_ACTIONS + 1)
        self.observation_space = spaces.Box(
            low=0.0,
            high=1.0,
            shape=(OBS_FEATURE_DIM,),
            dtype=np.float32,
        )

    # ── Gymnasium API ─────────────────────────────────────────────────────

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)

        self.engine.reset()
        # The opponent opens when the snapshot starts on an odd ply
        if not self.engine.is_done() and self.engine.side_to_move is Side.MIN:
            self.engine.step()

        state = self.engine.state
        self._refresh_options()
        info: Dict[str, Any] = {
            "raw_state": state,
            "action_mask": self.action_mask(),
        }
        return self._encode(state), info

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict[str, Any]]:
        before = self.engine.state.evaluate()
        decoded = self._decode_action(int(action))
        action_valid = decoded is not None or int(action) == MAX_JOINT_ACTIONS

        try:
            state, done = self.engine.step_with_action(Side.MAX, decoded)
        except InvalidActionError:
            # Invalid action: hold so the opponent still gets its turn
            state, done = self.engine.step_with_action(Side.MAX, None)
            action_valid = False

        reward = self._calculate_reward(state, before, action_valid)
        self._refresh_options()

        terminated = done and self.engine.has_winner()
        truncated = done and not self.engine.has_winner()

        info: Dict[str, Any] = {
            "raw_state": state,
            "action_valid": action_valid,
            "action_mask": self.action_mask(),
            "ply": state.ply,
        }
        return self._encode(state), reward, terminated, truncated, info

    def render(self) -> None:
        return None

    def close(self) -> None:
        pass

    # ── action coding ─────────────────────────────────────────────────────

    def _refresh_options(self) -> None:
        if self.engine.is_done():
            self._options = []
        else:
            self._options = self.engine.legal_joint_actions(Side.MAX)[:MAX_JOINT_ACTIONS]

    def _decode_action(self, action: int) -> Optional[JointAction]:
        """Map an index to a joint action; the hold index and unknown indices give ``None``."""
        if 0 <= action < len(self._options):
            return self._options[action]
        return None

    def action_mask(self) -> np.ndarray:
        mask = np.zeros(MAX_JOINT_ACTIONS + 1, dtype=bool)
        mask[: len(self._options)] = True
        mask[MAX_JOINT_ACTIONS] = True
        return mask

    # ── observation encoding ──────────────────────────────────────────────

    @staticmethod
    def _encode(state: ScenarioState) -> np.ndarray:
        width = max(state.map_width, 1)
        height = max(state.map_height, 1)
        features = np.zeros((2, MAX_UNITS_PER_SIDE, UNIT_FEATURE_DIM), dtype=np.float32)

        for row, side in enumerate((Side.MAX, Side.MIN)):
            for slot, unit in enumerate(state.units_of(side)[:MAX_UNITS_PER_SIDE]):
                max_hp = float(UNIT_STATS[unit.role.value]["hp"])
                features[row, slot] = (
                    1.0,
                    unit.x / width,
                    unit.y / height,
                    unit.health / max_hp,
                )

        return np.clip(features.reshape(OBS_FEATURE_DIM), 0.0, 1.0)

    # ── reward ────────────────────────────────────────────────────────────

    def _calculate_reward(self, state: ScenarioState, before: float, action_valid: bool) -> float:
        winner = self.engine.get_winner()

        if self.reward_shaping == "sparse":
            if self.engine.is_done():
                if winner is Side.MAX:
                    return 1.0
                elif winner is Side.MIN:
                    return -1.0
            return 0.0

        # Dense reward
        reward = (state.evaluate() - before) * DENSE_REWARD_SCALE
        if not action_valid:
            reward -= INVALID_ACTION_PENALTY

        if self.engine.is_done():
            if winner is Side.MAX:
                reward += WIN_REWARD
            elif winner is Side.MIN:
                reward -= WIN_REWARD

        return float(reward)
