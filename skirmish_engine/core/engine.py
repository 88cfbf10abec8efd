"""
SkirmishEngine — in-process match driver.

Alternates plies between two :class:`PlayerInterface` objects, applies their
joint actions to an immutable :class:`ScenarioState`, and detects the end of
the match.  The search core never depends on this module; it exists so the
core can be played end to end without a live simulator.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from skirmish_engine.core.actions import JointAction, Side, describe_joint_action
from skirmish_engine.core.arena import create_skirmish_snapshot
from skirmish_engine.core.state import ScenarioState, Snapshot, build_root_state
from skirmish_engine.players.player_interface import PlayerInterface
from skirmish_engine.utils.constants import DEFAULT_MAX_PLIES
from skirmish_engine.utils.validators import InvalidActionError, validate_joint_action

logger = logging.getLogger(__name__)


class SkirmishEngine:
    """
    Main match driver — player-agnostic.

    Parameters
    ----------
    player_max, player_min : PlayerInterface
        Objects that produce joint actions for the melee and ranged squads.
    snapshot : Snapshot, optional
        Starting position; defaults to :func:`create_skirmish_snapshot`.
    max_plies : int
        Plies after which the match ends in a draw.
    """

    def __init__(
        self,
        player_max: PlayerInterface,
        player_min: PlayerInterface,
        snapshot: Optional[Snapshot] = None,
        max_plies: int = DEFAULT_MAX_PLIES,
    ) -> None:
        if player_max.side is not Side.MAX or player_min.side is not Side.MIN:
            raise ValueError("player_max must play Side.MAX and player_min Side.MIN")

        self.players: Dict[Side, PlayerInterface] = {
            Side.MAX: player_max,
            Side.MIN: player_min,
        }
        self.snapshot = snapshot or create_skirmish_snapshot()
        self.max_plies = max_plies

        self.history: List[Tuple[int, Side, JointAction]] = []
        self._done: bool = False
        self._winner: Optional[Side] = None
        self._plies_played: int = 0

        self.reset()

    # ══════════════════════════════════════════════════════════════════════
    # Public API
    # ══════════════════════════════════════════════════════════════════════

    @property
    def plies_played(self) -> int:
        return self._plies_played

    @property
    def side_to_move(self) -> Side:
        return self.state.side_to_move

    def reset(self) -> ScenarioState:
        """Rebuild the root state from the snapshot and reset both players."""
        self.state: ScenarioState = build_root_state(self.snapshot)
        self.history.clear()
        self._done = False
        self._winner = None
        self._plies_played = 0

        for player in self.players.values():
            player.reset()

        self._check_game_over()
        return self.state

    def step(self) -> Tuple[ScenarioState, bool]:
        """
        Let the side to move act through its player.

        An illegal action from a player is dropped and the side holds.
        Returns ``(state, done)``.
        """
        if self._done:
            return self.state, True

        side = self.side_to_move
        joint_action = self.players[side].get_action(self.state) or {}
        err = validate_joint_action(self.state, joint_action, side, check_legality=True)
        if err is not None:
            logger.warning("Dropping illegal action from %s player: %s", side.value, err)
            joint_action = {}

        self._apply(side, joint_action)
        return self.state, self._done

    def step_with_action(
        self,
        side: Side,
        joint_action: Optional[JointAction],
    ) -> Tuple[ScenarioState, bool]:
        """
        Apply an externally chosen action for *side*, then let the opponent
        reply through its player.

        Raises :class:`InvalidActionError` if it is not *side*'s turn or the
        action is not legal.
        """
        if self._done:
            return self.state, True
        if side is not self.side_to_move:
            raise InvalidActionError(f"It is not {side.value}'s turn (ply {self.state.ply})")

        joint_action = joint_action or {}
        err = validate_joint_action(self.state, joint_action, side, check_legality=True)
        if err is not None:
            raise InvalidActionError(err)
        self._apply(side, joint_action)

        if not self._done:
            self.step()
        return self.state, self._done

    def play(self) -> Optional[Side]:
        """Run the match to completion and return the winner (``None`` for a draw)."""
        while not self._done:
            self.step()
        return self._winner

    def legal_joint_actions(self, side: Optional[Side] = None) -> List[JointAction]:
        """Every conflict-free joint action of *side* (default: side to move)."""
        return list(self.state.joint_actions(side or self.side_to_move))

    def is_done(self) -> bool:
        return self._done

    def has_winner(self) -> bool:
        return self._winner is not None

    def get_winner(self) -> Optional[Side]:
        return self._winner

    # ══════════════════════════════════════════════════════════════════════
    # Internal
    # ══════════════════════════════════════════════════════════════════════

    def _apply(self, side: Side, joint_action: JointAction) -> None:
        logger.debug("ply %d %s plays %s", self.state.ply, side.value, describe_joint_action(joint_action))
        self.history.append((self.state.ply, side, dict(joint_action)))
        self.state = self.state.apply(joint_action, side)
        self._plies_played += 1
        self._check_game_over()

    def _check_game_over(self) -> None:
        if self.state.is_terminal():
            self._done = True
            self._winner = self.state.winner()
        elif self._plies_played >= self.max_plies:
            self._done = True
            self._winner = None

        if self._done:
            logger.info(
                "Match over after %d plies, winner: %s",
                self._plies_played,
                self._winner.value if self._winner is not None else "draw",
            )
