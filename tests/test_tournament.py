"""Tests for ultra_tournament.tournament — construction, inspection, solving."""

import dataclasses
import random
from dataclasses import dataclass

import pytest

from ultra_tournament.battle import BattleSystemMetadata, IntBattleSystem, IntFighter
from ultra_tournament.errors import (
    BattleSystemError,
    EntrantNotFoundError,
    MalformedBracketError,
    NeedsAtLeastOneEntrantError,
    RoundNotFoundError,
)
from ultra_tournament.tournament import Tournament
from ultra_tournament.types import (
    TIE,
    Complete,
    Decisive,
    EntrantId,
    EntrantNode,
    RoundNode,
    TournamentEdge,
    TournamentRoundResult,
)

A = TournamentRoundResult.A
B = TournamentRoundResult.B

WINNER_127 = [6, 1, 2, 9, 3, 4, 127, 5, 8, 7]


# ============================================================================
# Test doubles
# ============================================================================


class CountingBattleSystem:
    """Larger int wins. Counts every call."""

    def __init__(self):
        self.battles = 0
        self.tiebreaks = 0
        self.pairs = []

    @property
    def metadata(self) -> BattleSystemMetadata:
        return BattleSystemMetadata(name="counting", display_name="Counting", description="")

    def battle(self, a, b):
        self.battles += 1
        value_a, value_b = a.get(), b.get()
        self.pairs.append((value_a, value_b))
        if value_a == value_b:
            return TIE
        if value_a > value_b:
            return Decisive(A, f"{value_a} beats {value_b}")
        return Decisive(B, f"{value_b} beats {value_a}")

    def tiebreaker(self, a, b):
        self.tiebreaks += 1
        return A, "tiebreak"


class AlwaysTieBattleSystem(CountingBattleSystem):
    """Every battle ties; the tiebreaker always picks B."""

    def battle(self, a, b):
        self.battles += 1
        return TIE

    def tiebreaker(self, a, b):
        self.tiebreaks += 1
        return B, f"tiebreak #{self.tiebreaks}"


@dataclass
class Brawler:
    power: int
    wins: int = 0


class WinCountingBattleSystem(CountingBattleSystem):
    """Stronger brawler wins and records the win on the entrant itself."""

    def battle(self, a, b):
        self.battles += 1
        result = A if a.get().power >= b.get().power else B
        winner = a if result is A else b
        with winner.write() as slot:
            slot.value.wins += 1
        return Decisive(result, "")


def int_tournament(values, battle_system=None):
    return Tournament(values, battle_system or CountingBattleSystem())


def winner_127_tournament():
    return Tournament([IntFighter(v) for v in WINNER_127], IntBattleSystem(seed=0))


# ============================================================================
# Construction
# ============================================================================


class TestConstruction:
    def test_empty_raises(self):
        with pytest.raises(NeedsAtLeastOneEntrantError):
            Tournament([], CountingBattleSystem())

    def test_from_generator(self):
        rng = random.Random(1)
        t = Tournament.from_generator(50, lambda: rng.randint(0, 1000), CountingBattleSystem())
        assert t.len_entrants() == 50
        assert t.len_rounds() == 49

    def test_from_generator_zero_raises(self):
        with pytest.raises(NeedsAtLeastOneEntrantError):
            Tournament.from_generator(0, lambda: 1, CountingBattleSystem())

    def test_entrants_are_copied(self):
        brawlers = [Brawler(1), Brawler(2)]
        t = Tournament(brawlers, WinCountingBattleSystem())
        t.solve()
        assert brawlers[1].wins == 0
        assert t.entrant(EntrantId(1)).get().wins == 1

    def test_one_cell_per_entrant(self):
        t = int_tournament([3, 1, 2])
        assert t.entrant(EntrantId(0)) is t.entrant(EntrantId(0))
        assert [cell.get() for cell in t.entrants()] == [3, 1, 2]


# ============================================================================
# Inspection
# ============================================================================


class TestInspection:
    def test_counts(self):
        t = int_tournament(list(range(100)))
        assert t.len_entrants() == 100
        assert t.len_rounds() == 99
        assert t.len_rounds_complete() == 0
        assert t.len_rounds_incomplete() == 99

    def test_entrant_out_of_range(self):
        t = int_tournament(WINNER_127)
        with pytest.raises(EntrantNotFoundError) as exc:
            t.entrant(EntrantId(10))
        assert exc.value.entrant_id == EntrantId(10)

    def test_negative_entrant_id(self):
        t = int_tournament(WINNER_127)
        with pytest.raises(EntrantNotFoundError):
            t.entrant(EntrantId(-1))

    def test_unknown_node(self):
        t = int_tournament(WINNER_127)
        with pytest.raises(RoundNotFoundError):
            t.winner(999)
        with pytest.raises(RoundNotFoundError):
            t.solve_round(999)
        with pytest.raises(RoundNotFoundError):
            t.child_nodes(999)

    def test_child_nodes(self):
        t = int_tournament(WINNER_127)
        assert t.child_nodes(t.grand_finals) == (1, 2)
        assert t.child_node(t.grand_finals, TournamentEdge.A) == 1
        assert t.child_node(t.grand_finals, TournamentEdge.B) == 2

    def test_child_nodes_of_leaf_is_malformed(self):
        t = int_tournament([1, 2])
        leaf = t.child_node(t.grand_finals, TournamentEdge.A)
        with pytest.raises(MalformedBracketError):
            t.child_nodes(leaf)

    def test_round_metadata_defaults_until_solved(self):
        t = int_tournament([1, 2])
        assert t.round_metadata(t.grand_finals) == ""
        t.solve()
        assert t.round_metadata(t.grand_finals) == "2 beats 1"

    def test_custom_metadata_factory(self):
        t = Tournament([1, 2], CountingBattleSystem(), metadata_factory=dict)
        assert t.round_metadata(t.grand_finals) == {}

    def test_unsolved_round_has_no_winner(self):
        t = int_tournament(WINNER_127)
        assert t.winner(t.grand_finals) is None
        assert t.winner_entrant(t.grand_finals) is None
        assert not t.is_solved()

    def test_leaf_is_its_own_winner(self):
        t = int_tournament([5, 6])
        leaf = t.child_node(t.grand_finals, TournamentEdge.B)
        assert t.winner(leaf) == EntrantId(1)
        assert t.winner_entrant(leaf).get() == 6


# ============================================================================
# Solving
# ============================================================================


class TestSolve:
    def test_winner_127(self):
        t = winner_127_tournament()
        t.solve()
        winner = t.winner_entrant(t.grand_finals)
        with winner.read() as guard:
            assert guard.value.value == 127
        assert t.winner(t.grand_finals) == EntrantId(6)

    def test_grand_finals_metadata(self):
        t = winner_127_tournament()
        t.solve()
        assert t.node(t.grand_finals).metadata == "Int Fighter: 127 wins by 118!"

    def test_grand_finals_result_follows_bracket_shape(self):
        """9 comes up side A (lower half), 127 up side B."""
        t = winner_127_tournament()
        result = t.solve()
        assert result is B
        assert t.node(t.grand_finals).result is B
        assert t.winner(t.child_node(t.grand_finals, TournamentEdge.A)) == EntrantId(3)
        assert t.winner(t.child_node(t.grand_finals, TournamentEdge.B)) == EntrantId(6)

    def test_bye_round_keeps_sides(self):
        """Node 4: round (3 vs 4) on A, entrant 2 on a bye on B."""
        t = winner_127_tournament()
        t.solve()
        bye_round = t.node(4)
        assert t.node(t.child_node(4, TournamentEdge.B)) == EntrantNode(EntrantId(2))
        assert bye_round.result is A
        assert bye_round.metadata == "Int Fighter: 9 wins by 7!"

    def test_bye_entrant_can_win(self):
        # 9 sits out round one on B, then beats the winner of 1 vs 2
        t = int_tournament([9, 1, 2])
        assert t.solve() is B
        assert t.winner(t.grand_finals) == EntrantId(0)

    @pytest.mark.parametrize("n", list(range(1, 40)) + [64, 100, 127])
    def test_solve_completes_every_round(self, n):
        battles = CountingBattleSystem()
        t = int_tournament(list(range(n)), battles)
        t.solve()
        assert t.len_rounds_incomplete() == 0
        assert t.len_rounds_complete() == n - 1
        assert battles.battles == n - 1
        assert t.winner(t.grand_finals) == EntrantId(n - 1)

    def test_solve_twice_does_not_replay(self):
        battles = CountingBattleSystem()
        t = int_tournament(WINNER_127, battles)
        first = t.solve()
        second = t.solve()
        assert first is second
        assert battles.battles == 9

    def test_solve_round_on_complete_round_reuses_result(self):
        battles = CountingBattleSystem()
        t = int_tournament(WINNER_127, battles)
        t.solve()
        assert t.solve_round(4) is A
        assert battles.battles == 9

    def test_deterministic(self):
        first = winner_127_tournament()
        second = winner_127_tournament()
        first.solve()
        second.solve()
        for node_id in first.graph.node_indices():
            assert first.winner(node_id) == second.winner(node_id)
            assert first.node(node_id).metadata == second.node(node_id).metadata

    def test_single_entrant(self):
        battles = CountingBattleSystem()
        t = int_tournament([42], battles)
        assert t.len_rounds() == 0
        assert t.solve() is None
        assert t.winner(t.grand_finals) == EntrantId(0)
        assert t.winner_entrant(t.grand_finals).get() == 42
        assert t.is_solved()
        assert battles.battles == 0

    def test_solve_round_on_leaf_is_noop(self):
        battles = CountingBattleSystem()
        t = int_tournament([1, 2], battles)
        leaf = t.child_node(t.grand_finals, TournamentEdge.A)
        assert t.solve_round(leaf) is None
        assert battles.battles == 0


class TestPartialSolve:
    def test_solve_subtree_only(self):
        battles = CountingBattleSystem()
        t = int_tournament(WINNER_127, battles)
        # Node 1 covers entrants [6, 1, 2, 9, 3]: rounds 1, 3, 4, 7
        assert t.solve_round(1) is B
        assert t.len_rounds_complete() == 4
        assert battles.battles == 4
        assert t.winner(1) == EntrantId(3)
        assert t.winner(t.grand_finals) is None

    def test_resume_to_grand_finals_reuses_earlier_rounds(self):
        battles = CountingBattleSystem()
        t = int_tournament(WINNER_127, battles)
        t.solve_round(1)
        t.solve_round(12)
        t.solve()
        assert battles.battles == 9
        assert t.winner(t.grand_finals) == EntrantId(6)

    def test_bottom_up_round_by_round(self):
        battles = CountingBattleSystem()
        t = int_tournament(list(range(13)), battles)
        for node_id in reversed(t.graph.node_indices()):
            t.solve_round(node_id)
            assert battles.battles == t.len_rounds_complete()
        assert t.is_solved()

    def test_failure_keeps_earlier_rounds(self):
        class Exploding(CountingBattleSystem):
            def battle(self, a, b):
                if a.get() == 127 or b.get() == 127:
                    raise RuntimeError("boom")
                return super().battle(a, b)

        t = int_tournament(WINNER_127, Exploding())
        with pytest.raises(RuntimeError, match="boom"):
            t.solve()

        complete = t.len_rounds_complete()
        assert 0 < complete < 9
        # Everything on side A was played before side B hit 127
        assert t.winner(1) == EntrantId(3)

        battles = CountingBattleSystem()
        t.battle_system = battles
        t.solve()
        assert battles.battles == 9 - complete
        assert t.winner(t.grand_finals) == EntrantId(6)


# ============================================================================
# Ties
# ============================================================================


class TestTies:
    def test_tiebreaker_runs_every_round(self):
        battles = AlwaysTieBattleSystem()
        t = int_tournament(WINNER_127, battles)
        t.solve()
        assert battles.battles == 9
        assert battles.tiebreaks == 9

    def test_tiebreaker_result_is_recorded(self):
        battles = AlwaysTieBattleSystem()
        t = int_tournament(WINNER_127, battles)
        assert t.solve() is B
        for node_id, node in t.graph.nodes():
            if isinstance(node, RoundNode):
                assert node.result is B
                assert node.metadata.startswith("tiebreak #")
        # B all the way down: node 2 -> 12 -> bye entrant 7
        assert t.winner(t.grand_finals) == EntrantId(7)

    def test_tie_between_equal_entrants(self):
        battles = CountingBattleSystem()
        t = int_tournament([5, 5], battles)
        assert t.solve() is A
        assert battles.tiebreaks == 1
        assert t.node(t.grand_finals).state == Complete(A, "tiebreak")


# ============================================================================
# Shared entrant state
# ============================================================================


class TestEntrantState:
    def test_mutation_carries_across_rounds(self):
        t = Tournament([Brawler(p) for p in (1, 2, 3, 4)], WinCountingBattleSystem())
        t.solve()
        champion = t.winner_entrant(t.grand_finals).get()
        assert champion.power == 4
        assert champion.wins == 2
        assert t.entrant(EntrantId(1)).get().wins == 1
        assert t.entrant(EntrantId(0)).get().wins == 0

    def test_battle_receives_a_then_b(self):
        battles = CountingBattleSystem()
        t = int_tournament([10, 20, 30, 40], battles)
        t.solve()
        assert battles.pairs == [(10, 20), (30, 40), (20, 40)]


# ============================================================================
# Misbehaving battle systems and broken graphs
# ============================================================================


class TestErrors:
    def test_battle_returning_junk(self):
        class Junk(CountingBattleSystem):
            def battle(self, a, b):
                return "A"

        t = int_tournament([1, 2], Junk())
        with pytest.raises(BattleSystemError):
            t.solve()
        assert t.len_rounds_complete() == 0

    def test_tiebreaker_returning_junk(self):
        class Undecided(AlwaysTieBattleSystem):
            def tiebreaker(self, a, b):
                return None

        t = int_tournament([1, 2], Undecided())
        with pytest.raises(BattleSystemError):
            t.solve()

    def test_tiebreaker_returning_bad_side(self):
        class BadSide(AlwaysTieBattleSystem):
            def tiebreaker(self, a, b):
                return "A", "meta"

        t = int_tournament([1, 2], BadSide())
        with pytest.raises(BattleSystemError):
            t.solve()

    def test_extra_edge_is_malformed(self):
        t = int_tournament([1, 2, 3, 4])
        t._graph.add_edge(t.grand_finals, 3, TournamentEdge.A)
        with pytest.raises(MalformedBracketError):
            t.solve()

    def test_duplicate_side_is_malformed(self):
        t = int_tournament([1, 2])
        graph = t._graph
        # Rebuild the root's edges as two A edges
        graph._outgoing[t.grand_finals] = [
            type(edge)(edge.parent, edge.child, TournamentEdge.A)
            for edge in graph.outgoing(t.grand_finals)
        ]
        with pytest.raises(MalformedBracketError):
            t.solve()

    def test_leaf_pointing_outside_entrants(self):
        t = int_tournament([1, 2])
        leaf = t.child_node(t.grand_finals, TournamentEdge.B)
        t._graph.set_node(leaf, EntrantNode(EntrantId(5)))
        with pytest.raises(EntrantNotFoundError):
            t.solve()


class TestRepr:
    def test_repr_shows_progress(self):
        t = int_tournament([1, 2, 3])
        assert repr(t) == "Tournament(entrants=3, rounds=0/2 complete)"
        t.solve()
        assert repr(t) == "Tournament(entrants=3, rounds=2/2 complete)"


class TestGraphView:
    def test_view_has_no_mutators(self):
        t = int_tournament([1, 2, 3, 4])
        assert not hasattr(t.graph, "add_edge")
        assert not hasattr(t.graph, "set_node")
        assert not hasattr(t.graph, "add_node")

    def test_view_traversal(self):
        t = int_tournament(WINNER_127)
        graph = t.graph
        assert len(graph) == 19
        assert list(graph.node_indices()) == list(range(19))
        assert graph.parent(t.grand_finals) is None
        assert {edge.child for edge in graph.outgoing(t.grand_finals)} == {1, 2}
        assert len(graph.edges()) == 18

    def test_view_sees_solved_rounds(self):
        t = int_tournament([1, 2])
        graph = t.graph
        t.solve()
        assert graph.node(t.grand_finals).result is B

    def test_returned_collections_are_copies(self):
        t = int_tournament([1, 2, 3, 4])
        t.graph.outgoing(t.grand_finals).clear()
        t.graph.edges().clear()
        t.graph.nodes().clear()
        assert len(t.graph.outgoing(t.grand_finals)) == 2
        assert len(t.graph.edges()) == 6
        t.solve()
        assert t.is_solved()

    def test_node_payloads_are_frozen(self):
        t = int_tournament([1, 2])
        t.solve()
        node = t.graph.node(t.grand_finals)
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.state = RoundNode().state
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.state.result = A
        assert t.node(t.grand_finals).result is B
