"""
Search engine — depth-limited minimax with alpha-beta pruning.

The root side picks the joint action whose subtree has the best backed-up
value.  Levels alternate between the maximizing and the minimizing side;
each level asks the state for its children *for that side explicitly*, sorts
them with :class:`MoveOrdering`, and recurses.

* ``depth == 0`` or a terminal state: the node is a leaf worth its
  heuristic evaluation.
* A non-leaf with no children (fully blocked side) is also treated as a
  leaf, so the search always returns a well-defined node.
* Ties keep the first child found under the ordering (strict ``>``/``<``).
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple, Union

from skirmish_engine.core.actions import Side, describe_joint_action
from skirmish_engine.core.state import ScenarioState, SearchNode
from skirmish_engine.systems.evaluation import EvaluationWeights, StateEvaluator
from skirmish_engine.systems.ordering import MoveOrdering

logger = logging.getLogger(__name__)


class AlphaBetaSearch:
    """
    Alpha-beta searcher with move ordering.

    Parameters
    ----------
    weights : EvaluationWeights, optional
        Heuristic weights used at the leaves; defaults to ``DEFAULT_WEIGHTS``.
    ordering : MoveOrdering, optional
        Sibling ordering; defaults to the attack/preferred-direction heuristic.
    order_moves : bool
        Disable to explore children in generation order (same value, slower).

    Attributes
    ----------
    nodes_visited : int
        Nodes expanded or scored by the last :meth:`search` call.
    cutoffs : int
        Sibling loops cut short by pruning during the last call.
    """

    def __init__(
        self,
        weights: Optional[EvaluationWeights] = None,
        ordering: Optional[MoveOrdering] = None,
        order_moves: bool = True,
    ) -> None:
        self.evaluator = StateEvaluator(weights)
        self.ordering = ordering or MoveOrdering()
        self.order_moves = order_moves
        self.nodes_visited: int = 0
        self.cutoffs: int = 0

    # ── public API ────────────────────────────────────────────────────────

    def search(
        self,
        root: Union[ScenarioState, SearchNode],
        depth: int,
        alpha: float = -math.inf,
        beta: float = math.inf,
        side: Side = Side.MAX,
    ) -> SearchNode:
        """
        Return the best child of *root* for *side*, looking *depth* plies ahead.

        The returned node carries the joint action to play, the state it
        leads to, and its backed-up ``value``.  With ``depth <= 0`` (or no
        legal joint action) the root node itself comes back with an empty
        joint action.
        """
        self.nodes_visited = 0
        self.cutoffs = 0

        node = root if isinstance(root, SearchNode) else SearchNode({}, root)
        if depth <= 0:
            return SearchNode(node.joint_action, node.resulting_state, self.evaluator.evaluate(node.resulting_state))

        value, best = self._alpha_beta(node, depth, alpha, beta, side)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "alpha-beta side=%s depth=%d value=%.3f nodes=%d cutoffs=%d action=%s",
                side.value,
                depth,
                value,
                self.nodes_visited,
                self.cutoffs,
                describe_joint_action(best.joint_action),
            )
        return SearchNode(best.joint_action, best.resulting_state, value)

    # ── internal ──────────────────────────────────────────────────────────

    def _alpha_beta(
        self,
        node: SearchNode,
        depth: int,
        alpha: float,
        beta: float,
        side: Side,
    ) -> Tuple[float, SearchNode]:
        self.nodes_visited += 1
        state = node.resulting_state

        if depth == 0 or state.is_terminal():
            return self.evaluator.evaluate(state), node

        children = state.get_children(side)
        if not children:
            return self.evaluator.evaluate(state), node
        if self.order_moves:
            children = self.ordering.order(children)

        best = children[0]
        if side is Side.MAX:
            v = -math.inf
            for child in children:
                child_value, _ = self._alpha_beta(child, depth - 1, alpha, beta, side.opponent)
                if child_value > v:
                    v = child_value
                    best = child
                if v >= beta:
                    self.cutoffs += 1
                    break
                alpha = max(alpha, v)
        else:
            v = math.inf
            for child in children:
                child_value, _ = self._alpha_beta(child, depth - 1, alpha, beta, side.opponent)
                if child_value < v:
                    v = child_value
                    best = child
                if v <= alpha:
                    self.cutoffs += 1
                    break
                beta = min(beta, v)

        return v, best


def search(
    root_state: Union[ScenarioState, SearchNode],
    depth: int,
    alpha: float = -math.inf,
    beta: float = math.inf,
    side: Side = Side.MAX,
    weights: Optional[EvaluationWeights] = None,
    order_moves: bool = True,
) -> SearchNode:
    """Module-level entry point; see :meth:`AlphaBetaSearch.search`."""
    return AlphaBetaSearch(weights=weights, order_moves=order_moves).search(
        root_state, depth, alpha, beta, side
    )


def minimax_value(
    state: ScenarioState,
    depth: int,
    side: Side = Side.MAX,
    weights: Optional[EvaluationWeights] = None,
) -> float:
    """Plain minimax over the full tree, no pruning and no ordering."""
    evaluator = StateEvaluator(weights)

    def _value(s: ScenarioState, d: int, to_move: Side) -> float:
        if d == 0 or s.is_terminal():
            return evaluator.evaluate(s)
        values = [_value(child.resulting_state, d - 1, to_move.opponent) for child in s.iter_children(to_move)]
        if not values:
            return evaluator.evaluate(s)
        return max(values) if to_move is Side.MAX else min(values)

    return _value(state, depth, side)
