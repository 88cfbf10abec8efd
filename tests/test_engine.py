"""
Tests for the skirmish state layer and match driver.

Covers: snapshot validation, unit factories, action enumeration, joint-action
generation with conflict filtering, combat resolution, terminal detection,
heuristic evaluation, move ordering, and the in-process match driver.
"""

from __future__ import annotations

import dataclasses

import pytest

from skirmish_engine.core.actions import Attack, Direction, Move, Role, Side
from skirmish_engine.core.arena import create_duel_snapshot, create_skirmish_snapshot
from skirmish_engine.core.engine import SkirmishEngine
from skirmish_engine.core.search import minimax_value, search
from skirmish_engine.core.state import (
    ScenarioState,
    SearchNode,
    Snapshot,
    UnitSnapshot,
    build_root_state,
)
from skirmish_engine.entities.melee import create_melee
from skirmish_engine.entities.ranged import create_ranged
from skirmish_engine.players.player_interface import (
    MinimaxPlayer,
    RandomPlayer,
    ScriptedPlayer,
)
from skirmish_engine.systems.evaluation import EvaluationWeights, StateEvaluator
from skirmish_engine.systems.joint_actions import JointActionGenerator
from skirmish_engine.systems.ordering import MoveOrdering
from skirmish_engine.utils.constants import UNIT_STATS
from skirmish_engine.utils.validators import (
    InvalidActionError,
    InvalidJointActionError,
    InvalidSnapshotError,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _make_state(*units, width: int = 6, height: int = 6, obstacles=(), ply: int = 0) -> ScenarioState:
    return ScenarioState(
        units={u.id: u for u in units},
        map_width=width,
        map_height=height,
        obstacles=frozenset(obstacles),
        ply=ply,
    )


@pytest.fixture()
def duel() -> ScenarioState:
    """Melee (id 1) at (0,0) next to ranged (id 2) at (1,0), both 10 hp / 2 atk."""
    return build_root_state(create_duel_snapshot())


@pytest.fixture()
def funnel() -> ScenarioState:
    """Two melee units whose only free cells meet at (3,3)."""
    return _make_state(
        create_melee(1, 2, 3),
        create_melee(2, 4, 3),
        create_ranged(3, 0, 0),
        obstacles=[(1, 3), (2, 4), (5, 3), (4, 2), (4, 4)],
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot / root state
# ═══════════════════════════════════════════════════════════════════════════════


class TestBuildRootState:
    """Root construction from external snapshots."""

    def test_duel_snapshot(self, duel: ScenarioState) -> None:
        assert set(duel.units) == {1, 2}
        assert duel.units[1].role is Role.MELEE
        assert duel.units[2].side is Side.MIN
        assert duel.ply == 0
        assert duel.side_to_move is Side.MAX

    def test_from_dict_round_trip(self) -> None:
        snapshot = create_skirmish_snapshot()
        state = build_root_state(snapshot.to_dict())
        assert state == build_root_state(snapshot)
        assert state.obstacles == frozenset(snapshot.obstacles)

    def test_inclusive_bounds_accepted(self) -> None:
        snapshot = Snapshot(
            map_width=3,
            map_height=3,
            units=[UnitSnapshot(1, Role.MELEE, 3, 3, 5, 1), UnitSnapshot(2, Role.RANGED, 0, 0, 5, 1)],
        )
        state = build_root_state(snapshot)
        assert state.units[1].position == (3, 3)

    @pytest.mark.parametrize(
        "units, obstacles",
        [
            # out of bounds
            ([UnitSnapshot(1, Role.MELEE, 4, 0, 5, 1)], []),
            ([UnitSnapshot(1, Role.MELEE, 0, -1, 5, 1)], []),
            # on an obstacle
            ([UnitSnapshot(1, Role.MELEE, 1, 1, 5, 1)], [(1, 1)]),
            # shared cell
            ([UnitSnapshot(1, Role.MELEE, 1, 1, 5, 1), UnitSnapshot(2, Role.RANGED, 1, 1, 5, 1)], []),
            # duplicate id
            ([UnitSnapshot(1, Role.MELEE, 0, 0, 5, 1), UnitSnapshot(1, Role.RANGED, 1, 1, 5, 1)], []),
            # dead unit
            ([UnitSnapshot(1, Role.MELEE, 0, 0, 0, 1)], []),
        ],
    )
    def test_invalid_snapshot_rejected(self, units, obstacles) -> None:
        snapshot = Snapshot(map_width=3, map_height=3, units=units, obstacles=obstacles)
        with pytest.raises(InvalidSnapshotError):
            build_root_state(snapshot)

    def test_state_is_immutable(self, duel: ScenarioState) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            duel.ply = 5  # type: ignore[misc]
        with pytest.raises(TypeError):
            duel.units[3] = create_melee(3, 2, 2)  # type: ignore[index]

    def test_state_does_not_alias_input(self) -> None:
        units = {1: create_melee(1, 0, 0), 2: create_ranged(2, 3, 3)}
        state = ScenarioState(units=units, map_width=3, map_height=3)
        del units[2]
        assert 2 in state.units


class TestUnitFactories:
    def test_default_stats(self) -> None:
        footman = create_melee(1, 0, 0)
        archer = create_ranged(2, 1, 1)
        assert footman.health == UNIT_STATS["melee"]["hp"]
        assert archer.attack_power == UNIT_STATS["ranged"]["damage"]
        assert footman.name == "footman"
        assert archer.name == "archer"

    def test_damage_floors_at_zero(self) -> None:
        u = create_ranged(2, 1, 1, health=3)
        assert u.damaged(10).health == 0
        assert u.damaged(10).is_dead
        assert u.health == 3


# ═══════════════════════════════════════════════════════════════════════════════
# Action enumeration
# ═══════════════════════════════════════════════════════════════════════════════


class TestActionEnumeration:
    def test_duel_melee_actions(self, duel: ScenarioState) -> None:
        """North/West are off the map, East is occupied, the ranged unit is adjacent."""
        assert duel.legal_actions(1) == [Move(Direction.SOUTH), Attack(2)]

    def test_duel_ranged_actions(self, duel: ScenarioState) -> None:
        assert duel.legal_actions(2) == [Move(Direction.EAST), Move(Direction.SOUTH), Attack(1)]

    def test_diagonal_enemy_not_attackable(self) -> None:
        state = _make_state(create_melee(1, 2, 2), create_ranged(2, 3, 3))
        assert not any(isinstance(a, Attack) for a in state.legal_actions(1))

    def test_boxed_in_unit_has_no_actions(self) -> None:
        state = _make_state(
            create_melee(1, 2, 2),
            create_ranged(2, 5, 5),
            obstacles=[(1, 2), (3, 2), (2, 1), (2, 3)],
        )
        assert state.legal_actions(1) == []
        assert list(state.joint_actions(Side.MAX)) == []
        assert state.get_children(Side.MAX) == []

    def test_own_units_block_moves(self) -> None:
        state = _make_state(create_melee(1, 2, 2), create_melee(2, 3, 2), create_ranged(3, 5, 5))
        assert Move(Direction.EAST) not in state.legal_actions(1)


# ═══════════════════════════════════════════════════════════════════════════════
# Joint-action generation
# ═══════════════════════════════════════════════════════════════════════════════


class TestJointActions:
    def test_conflicting_moves_filtered(self, funnel: ScenarioState) -> None:
        """Both units may step into (3,3), but never in the same joint action."""
        joint = list(funnel.joint_actions(Side.MAX))
        assert joint == [{1: Move(Direction.NORTH), 2: Move(Direction.WEST)}]

    def test_only_conflicting_moves_yield_nothing(self) -> None:
        generator = JointActionGenerator({1: (2, 3), 2: (4, 3)})
        assert list(generator.generate({1: [Move(Direction.EAST)], 2: [Move(Direction.WEST)]})) == []

    def test_attacks_never_conflict(self) -> None:
        generator = JointActionGenerator({1: (0, 1), 2: (1, 0)})
        joint = list(generator.generate({1: [Attack(3)], 2: [Attack(3)]}))
        assert joint == [{1: Attack(3), 2: Attack(3)}]

    def test_empty_unit_contributes_no_entry(self) -> None:
        generator = JointActionGenerator({1: (0, 0), 2: (5, 5)})
        joint = list(generator.generate({1: [], 2: [Move(Direction.NORTH), Move(Direction.WEST)]}))
        assert joint == [{2: Move(Direction.NORTH)}, {2: Move(Direction.WEST)}]

    def test_generation_is_lazy(self) -> None:
        generator = JointActionGenerator({1: (0, 0)})
        it = generator.generate({1: [Move(Direction.SOUTH)]})
        assert iter(it) is it

    def test_full_product_size(self) -> None:
        """Two free units far apart: 4 x 4 combinations."""
        state = _make_state(create_melee(1, 1, 1), create_melee(2, 4, 4), create_ranged(3, 6, 0))
        assert len(list(state.joint_actions(Side.MAX))) == 16

    def test_children_are_deterministic(self) -> None:
        state = build_root_state(create_skirmish_snapshot())
        first = state.get_children(Side.MAX)
        second = state.get_children(Side.MAX)
        assert [c.joint_action for c in first] == [c.joint_action for c in second]
        assert [c.resulting_state for c in first] == [c.resulting_state for c in second]

    def test_only_side_to_move_in_keys(self) -> None:
        state = build_root_state(create_skirmish_snapshot())
        for child in state.get_children(Side.MIN):
            assert all(state.units[uid].side is Side.MIN for uid in child.joint_action)


# ═══════════════════════════════════════════════════════════════════════════════
# Combat resolution
# ═══════════════════════════════════════════════════════════════════════════════


class TestCombatResolution:
    def test_attack_reduces_health(self, duel: ScenarioState) -> None:
        child = duel.apply({1: Attack(2)}, Side.MAX)
        assert child.units[2].health == 8
        assert duel.units[2].health == 10

    @pytest.mark.parametrize("victim_hp, survives", [(13, True), (12, False), (7, False)])
    def test_removed_iff_health_reaches_zero(self, victim_hp: int, survives: bool) -> None:
        state = _make_state(
            create_melee(1, 0, 1, attack_power=6),
            create_melee(2, 1, 0, attack_power=6),
            create_ranged(3, 1, 1, health=victim_hp),
        )
        child = state.apply({1: Attack(3), 2: Attack(3)}, Side.MAX)
        assert (3 in child.units) is survives
        if survives:
            assert child.units[3].health == victim_hp - 12

    def test_attack_on_removed_target_is_noop(self) -> None:
        """The first attacker kills; the second finds no target and is skipped."""
        state = _make_state(
            create_melee(1, 0, 1, attack_power=6),
            create_melee(2, 1, 0, attack_power=6),
            create_ranged(3, 1, 1, health=5),
            create_ranged(4, 5, 5),
        )
        child = state.apply({1: Attack(3), 2: Attack(3)}, Side.MAX)
        assert 3 not in child.units
        assert child.units[1] == state.units[1]
        assert child.units[2] == state.units[2]
        assert child.units[4] == state.units[4]

    def test_moves_update_positions(self, funnel: ScenarioState) -> None:
        child = funnel.apply({1: Move(Direction.NORTH), 2: Move(Direction.WEST)}, Side.MAX)
        assert child.units[1].position == (2, 2)
        assert child.units[2].position == (3, 3)

    def test_successor_bookkeeping(self, duel: ScenarioState) -> None:
        child = duel.apply({1: Move(Direction.SOUTH)}, Side.MAX)
        assert child.ply == duel.ply + 1
        assert child.obstacles is duel.obstacles
        assert (child.map_width, child.map_height) == (duel.map_width, duel.map_height)

    def test_foreign_unit_rejected(self, duel: ScenarioState) -> None:
        with pytest.raises(InvalidJointActionError):
            duel.apply({2: Move(Direction.SOUTH)}, Side.MAX)

    def test_unknown_unit_rejected(self, duel: ScenarioState) -> None:
        with pytest.raises(InvalidJointActionError):
            duel.apply({99: Move(Direction.SOUTH)}, Side.MAX)

    def test_unknown_action_type_rejected(self, duel: ScenarioState) -> None:
        with pytest.raises(InvalidJointActionError):
            duel.apply({1: "charge"}, Side.MAX)  # type: ignore[dict-item]

    def test_friendly_fire_rejected(self) -> None:
        state = _make_state(create_melee(1, 0, 0), create_melee(2, 1, 0), create_ranged(3, 5, 5))
        with pytest.raises(InvalidActionError):
            state.apply({1: Attack(2)}, Side.MAX)


# ═══════════════════════════════════════════════════════════════════════════════
# Terminal test & evaluation
# ═══════════════════════════════════════════════════════════════════════════════


class TestTerminalAndEvaluation:
    def test_no_ranged_units_is_terminal(self) -> None:
        state = _make_state(create_melee(1, 0, 0), create_melee(2, 1, 1))
        assert state.is_terminal()
        assert state.winner() is Side.MAX

    def test_no_melee_units_is_terminal(self) -> None:
        state = _make_state(create_ranged(1, 0, 0))
        assert state.is_terminal()
        assert state.winner() is Side.MIN

    def test_both_sides_present_not_terminal(self, duel: ScenarioState) -> None:
        assert not duel.is_terminal()
        assert duel.winner() is None

    def test_duel_features(self, duel: ScenarioState) -> None:
        f = StateEvaluator.features(duel)
        assert f["max_health"] == 10
        assert f["min_health"] == 10
        assert f["max_alive"] == 1
        assert f["min_alive"] == 1
        assert f["nearest_enemy_distance"] == pytest.approx(1.0)
        assert f["obstruction"] == 0.0

    def test_duel_evaluation(self, duel: ScenarioState) -> None:
        # 10 - 20 + 10 - 20 - 5
        assert duel.evaluate() == pytest.approx(-25.0)

    def test_custom_weights(self, duel: ScenarioState) -> None:
        weights = EvaluationWeights(
            max_health=0, min_health=-1, max_alive=0, min_alive=0,
            nearest_enemy_distance=0, obstruction=0,
        )
        assert duel.evaluate(weights) == pytest.approx(-10.0)

    def test_none_weights_fall_back_to_defaults(self, duel: ScenarioState) -> None:
        """An explicit ``None`` behaves like omitting the weights."""
        assert StateEvaluator(None).weights == EvaluationWeights()
        assert duel.evaluate(None) == pytest.approx(duel.evaluate())
        assert search(duel, 1, weights=None).value == pytest.approx(-21.0)
        assert minimax_value(duel, 2, weights=None) == pytest.approx(minimax_value(duel, 2))
        player = MinimaxPlayer(Side.MAX, depth=1, weights=None)
        assert player.get_action(duel) == {1: Attack(2)}

    def test_obstruction_inside_rectangle(self) -> None:
        state = _make_state(create_melee(1, 0, 0), create_ranged(2, 2, 2), obstacles=[(1, 1), (4, 4)])
        assert StateEvaluator.features(state)["obstruction"] == 1.0

    def test_distance_is_zero_when_side_empty(self) -> None:
        state = _make_state(create_melee(1, 0, 0))
        f = StateEvaluator.features(state)
        assert f["nearest_enemy_distance"] == 0.0
        assert f["obstruction"] == 0.0

    def test_features_query_each_side_once(self, duel: ScenarioState, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        original = ScenarioState.units_of

        def counting(state, side):
            calls.append(side)
            return original(state, side)

        monkeypatch.setattr(ScenarioState, "units_of", counting)
        duel.evaluate()
        assert sorted(calls) == sorted([Side.MAX, Side.MIN])

    def test_nearest_enemy_is_used(self) -> None:
        state = _make_state(create_melee(1, 0, 0), create_ranged(2, 3, 4), create_ranged(3, 0, 2))
        assert StateEvaluator.features(state)["nearest_enemy_distance"] == pytest.approx(2.0)


class TestMoveOrdering:
    def test_score(self) -> None:
        ordering = MoveOrdering()
        assert ordering.score({1: Attack(3), 2: Move(Direction.SOUTH)}) == 4
        assert ordering.score({1: Move(Direction.NORTH)}) == 0

    def test_order_is_stable_and_descending(self, duel: ScenarioState) -> None:
        children = [
            SearchNode({1: Move(Direction.NORTH)}, duel),
            SearchNode({1: Move(Direction.SOUTH)}, duel),
            SearchNode({1: Move(Direction.WEST)}, duel),
            SearchNode({1: Attack(2)}, duel),
        ]
        ordered = MoveOrdering().order(children)
        assert [c.joint_action for c in ordered] == [
            {1: Attack(2)},
            {1: Move(Direction.SOUTH)},
            {1: Move(Direction.NORTH)},
            {1: Move(Direction.WEST)},
        ]


# ═══════════════════════════════════════════════════════════════════════════════
# Match driver
# ═══════════════════════════════════════════════════════════════════════════════


class TestSkirmishEngine:
    def test_scripted_kill(self) -> None:
        """Five attacks of 2 damage remove a 10 hp archer on ply 8."""
        attacker = ScriptedPlayer(Side.MAX)
        engine = SkirmishEngine(attacker, ScriptedPlayer(Side.MIN), snapshot=create_duel_snapshot())
        for _ in range(5):
            attacker.push_action({1: Attack(2)})

        assert engine.play() is Side.MAX
        assert engine.plies_played == 9
        assert len(engine.history) == 9
        assert engine.state.units_of(Side.MIN) == []

    def test_illegal_player_action_dropped(self) -> None:
        mover = ScriptedPlayer(Side.MAX)
        engine = SkirmishEngine(mover, ScriptedPlayer(Side.MIN), snapshot=create_duel_snapshot())
        mover.push_action({1: Move(Direction.WEST)})  # off the map
        state, done = engine.step()
        assert not done
        assert state.ply == 1
        assert state.units[1].position == (0, 0)
        assert engine.history[-1] == (0, Side.MAX, {})

    def test_step_with_illegal_action_raises(self) -> None:
        engine = SkirmishEngine(ScriptedPlayer(Side.MAX), ScriptedPlayer(Side.MIN), snapshot=create_duel_snapshot())
        with pytest.raises(InvalidActionError):
            engine.step_with_action(Side.MAX, {1: Move(Direction.EAST)})  # occupied

    def test_step_with_action_out_of_turn(self) -> None:
        engine = SkirmishEngine(ScriptedPlayer(Side.MAX), ScriptedPlayer(Side.MIN), snapshot=create_duel_snapshot())
        with pytest.raises(InvalidActionError):
            engine.step_with_action(Side.MIN, {2: Attack(1)})

    def test_step_with_action_lets_opponent_reply(self) -> None:
        engine = SkirmishEngine(ScriptedPlayer(Side.MAX), ScriptedPlayer(Side.MIN), snapshot=create_duel_snapshot())
        state, done = engine.step_with_action(Side.MAX, {1: Attack(2)})
        assert state.ply == 2
        assert state.units[2].health == 8
        assert engine.side_to_move is Side.MAX

    def test_draw_after_max_plies(self) -> None:
        engine = SkirmishEngine(
            ScriptedPlayer(Side.MAX),
            ScriptedPlayer(Side.MIN),
            snapshot=create_duel_snapshot(),
            max_plies=4,
        )
        assert engine.play() is None
        assert engine.is_done()
        assert not engine.has_winner()
        assert engine.plies_played == 4

    def test_minimax_against_random_finishes(self) -> None:
        engine = SkirmishEngine(
            MinimaxPlayer(Side.MAX, depth=2),
            RandomPlayer(Side.MIN, seed=7),
            snapshot=create_duel_snapshot(),
            max_plies=40,
        )
        engine.play()
        assert engine.is_done()
        assert engine.plies_played <= 40

    def test_reset_restores_root(self) -> None:
        engine = SkirmishEngine(MinimaxPlayer(Side.MAX, depth=1), RandomPlayer(Side.MIN), snapshot=create_duel_snapshot())
        root = engine.state
        engine.step()
        engine.step()
        assert engine.reset() == root
        assert engine.history == []
        assert not engine.is_done()

    def test_players_must_match_sides(self) -> None:
        with pytest.raises(ValueError):
            SkirmishEngine(RandomPlayer(Side.MIN), RandomPlayer(Side.MIN))

    def test_random_player_is_seeded(self) -> None:
        state = build_root_state(create_skirmish_snapshot())
        a = RandomPlayer(Side.MIN, seed=3)
        b = RandomPlayer(Side.MIN, seed=3)
        assert [a.get_action(state) for _ in range(5)] == [b.get_action(state) for _ in range(5)]
