"""
Player-agnostic interfaces: abstract base, minimax searcher, random bot,
scripted queue, and the external placeholder used by the Gymnasium env.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from collections import deque
from typing import Deque, Optional

from skirmish_engine.core.actions import JointAction, Side
from skirmish_engine.core.search import AlphaBetaSearch
from skirmish_engine.core.state import ScenarioState
from skirmish_engine.systems.evaluation import EvaluationWeights
from skirmish_engine.utils.constants import DEFAULT_SEARCH_DEPTH


class PlayerInterface(ABC):
    """
    Abstract interface that allows:
    - search-based agents
    - scripted / manual input
    - external (RL) controllers
    """

    def __init__(self, side: Side) -> None:
        self.side = side

    @abstractmethod
    def get_action(self, state: ScenarioState) -> Optional[JointAction]:
        """
        Return a joint action for :attr:`side` given the current state.

        Returns
        -------
        None
            Hold position this ply.
        dict[int, PrimitiveAction]
            One primitive action per acting unit.
        """

    @abstractmethod
    def reset(self) -> None:
        """Called at the start of each match."""


class MinimaxPlayer(PlayerInterface):
    """Plays the alpha-beta choice at a fixed look-ahead depth."""

    def __init__(
        self,
        side: Side = Side.MAX,
        depth: int = DEFAULT_SEARCH_DEPTH,
        weights: Optional[EvaluationWeights] = None,
    ) -> None:
        super().__init__(side)
        self.depth = depth
        self.searcher = AlphaBetaSearch(weights=weights)

    def get_action(self, state: ScenarioState) -> Optional[JointAction]:
        best = self.searcher.search(state, self.depth, side=self.side)
        return best.joint_action or None

    def reset(self) -> None:
        pass


class RandomPlayer(PlayerInterface):
    """Uniform choice among the conflict-free joint actions."""

    def __init__(self, side: Side = Side.MIN, seed: int = 42) -> None:
        super().__init__(side)
        self.seed = seed
        self._rng = random.Random(seed)

    def get_action(self, state: ScenarioState) -> Optional[JointAction]:
        options = list(state.joint_actions(self.side))
        if not options:
            return None
        return self._rng.choice(options)

    def reset(self) -> None:
        self._rng = random.Random(self.seed)


class ScriptedPlayer(PlayerInterface):
    """For manual play or debugging (joint actions are pushed into a queue)."""

    def __init__(self, side: Side) -> None:
        super().__init__(side)
        self._queue: Deque[JointAction] = deque()

    def push_action(self, joint_action: JointAction) -> None:
        self._queue.append(joint_action)

    def get_action(self, state: ScenarioState) -> Optional[JointAction]:
        if self._queue:
            return self._queue.popleft()
        return None

    def reset(self) -> None:
        self._queue.clear()


class ExternalPlayer(PlayerInterface):
    """Placeholder — the Gymnasium env injects this side's actions directly."""

    def get_action(self, state: ScenarioState) -> Optional[JointAction]:
        return None

    def reset(self) -> None:
        pass
