"""
ultra_tournament/tournament.py - Single-elimination tournament

Tournament ties together the entrant cells, the bracket graph, and a battle
system. The bracket is built once in __init__; solving fills in round
results in place, bottom-up, and never re-plays a round that is already
complete. That makes solving resumable: solve an early round, look at it,
then solve the grand finals and the earlier work is reused.

Example:
    t = Tournament([IntFighter(n) for n in (6, 1, 2, 9)], IntBattleSystem())
    t.solve()
    champion = t.winner_entrant(t.grand_finals).get()
"""

import logging
from typing import Any, Callable, Generic, Sequence, TypeVar

from ultra_tournament.battle import BattleSystem
from ultra_tournament.bracket import BracketView, build_bracket
from ultra_tournament.entrant import EntrantCell, make_cells
from ultra_tournament.errors import (
    BattleSystemError,
    BracketInvariantError,
    EntrantNotFoundError,
    MalformedBracketError,
    NeedsAtLeastOneEntrantError,
)
from ultra_tournament.types import (
    Complete,
    Decisive,
    EntrantId,
    EntrantNode,
    RoundNode,
    Tie,
    TournamentEdge,
    TournamentNode,
    TournamentRoundResult,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")


class Tournament(Generic[E]):
    """
    A single-elimination bracket over arbitrary entrants.

    Args:
        entrants: Entrants in seeding order. Each is shallow-copied into its
            own EntrantCell.
        battle_system: Decides rounds. See battle.BattleSystem.
        metadata_factory: Builds the "empty" metadata returned by
            round_metadata() for rounds that aren't complete yet.

    Raises:
        NeedsAtLeastOneEntrantError: entrants is empty
    """

    def __init__(
        self,
        entrants: Sequence[E],
        battle_system: BattleSystem,
        metadata_factory: Callable[[], Any] = str,
    ):
        if len(entrants) == 0:
            raise NeedsAtLeastOneEntrantError()

        self._entrants: list[EntrantCell[E]] = make_cells(list(entrants))
        self._graph, self._grand_finals = build_bracket(len(self._entrants))
        self.battle_system = battle_system
        self.metadata_factory = metadata_factory

        logger.info(
            f"Created tournament: {self.len_entrants()} entrants, "
            f"{self.len_rounds()} rounds"
        )

    @classmethod
    def from_generator(
        cls,
        count: int,
        factory: Callable[[], E],
        battle_system: BattleSystem,
        metadata_factory: Callable[[], Any] = str,
    ) -> "Tournament[E]":
        """Create a tournament of `count` entrants, each made by calling factory()."""
        entrants = [factory() for _ in range(count)]
        return cls(entrants, battle_system, metadata_factory)

    # ========================================================================
    # Inspection
    # ========================================================================

    @property
    def grand_finals(self) -> int:
        """Node id of the final round (the entrant leaf when N=1)."""
        return self._grand_finals

    @property
    def graph(self) -> BracketView:
        """Read-only view of the bracket, for traversal and rendering."""
        return BracketView(self._graph)

    def node(self, node_id: int) -> TournamentNode:
        return self._graph.node(node_id)

    def len_entrants(self) -> int:
        return len(self._entrants)

    def len_rounds(self) -> int:
        """Number of rounds, complete and incomplete."""
        return sum(1 for _, node in self._graph.nodes() if isinstance(node, RoundNode))

    def len_rounds_complete(self) -> int:
        return sum(
            1 for _, node in self._graph.nodes()
            if isinstance(node, RoundNode) and node.is_complete
        )

    def len_rounds_incomplete(self) -> int:
        return sum(
            1 for _, node in self._graph.nodes()
            if isinstance(node, RoundNode) and not node.is_complete
        )

    def entrant(self, entrant_id: EntrantId) -> EntrantCell[E]:
        """Get the cell holding an entrant.

        Raises:
            EntrantNotFoundError: entrant_id is out of range
        """
        if not 0 <= entrant_id.index < len(self._entrants):
            raise EntrantNotFoundError(entrant_id)
        return self._entrants[entrant_id.index]

    def entrants(self) -> list[EntrantCell[E]]:
        return list(self._entrants)

    def child_node(self, node_id: int, side: TournamentEdge) -> int:
        """Get the node feeding side A or B of a round.

        Raises:
            RoundNotFoundError: node_id isn't in the graph
            MalformedBracketError: the node doesn't have one A and one B child
        """
        a, b = self.child_nodes(node_id)
        return a if side is TournamentEdge.A else b

    def child_nodes(self, node_id: int) -> tuple[int, int]:
        """Get the (A, B) children of a round."""
        edges = self._graph.outgoing(node_id)
        if len(edges) != 2:
            raise MalformedBracketError(
                f"Node {node_id} has {len(edges)} child edges, expected 2"
            )

        by_side = {edge.side: edge.child for edge in edges}
        if set(by_side) != {TournamentEdge.A, TournamentEdge.B}:
            raise MalformedBracketError(
                f"Node {node_id} needs one A and one B edge, "
                f"got {[str(edge.side) for edge in edges]}"
            )
        return by_side[TournamentEdge.A], by_side[TournamentEdge.B]

    def round_metadata(self, node_id: int) -> Any:
        """Metadata of a complete round, or metadata_factory() otherwise."""
        node = self._graph.node(node_id)
        if isinstance(node, RoundNode) and isinstance(node.state, Complete):
            return node.state.metadata
        return self.metadata_factory()

    # ========================================================================
    # Winners
    # ========================================================================

    def winner(self, node_id: int) -> EntrantId | None:
        """
        Get the id of whoever won a node.

        An entrant leaf is its own winner. An incomplete round has none. A
        complete round's winner is found by following its result edge down
        to a leaf.

        Raises:
            RoundNotFoundError: node_id isn't in the graph
            MalformedBracketError: a complete round has broken child edges
        """
        node = self._graph.node(node_id)
        while True:
            if isinstance(node, EntrantNode):
                return node.entrant_id
            if not isinstance(node.state, Complete):
                return None
            node_id = self.child_node(node_id, node.state.result.to_edge())
            node = self._graph.node(node_id)

    def winner_entrant(self, node_id: int) -> EntrantCell[E] | None:
        """Same as winner(), but returns the entrant's cell."""
        entrant_id = self.winner(node_id)
        if entrant_id is None:
            return None
        return self.entrant(entrant_id)

    def is_solved(self) -> bool:
        return self.winner(self._grand_finals) is not None

    # ========================================================================
    # Solving
    # ========================================================================

    def solve(self) -> TournamentRoundResult | None:
        """Solve every round up to and including the grand finals.

        Returns the grand finals result, or None for a one-entrant tournament.
        """
        return self.solve_round(self._grand_finals)

    def solve_round(self, node_id: int) -> TournamentRoundResult | None:
        """
        Solve only the rounds needed to decide node_id.

        Complete rounds are reused, never re-played. Solving an entrant leaf
        does nothing and returns None. If something fails partway, rounds
        solved before the failure stay complete.

        Raises:
            RoundNotFoundError: node_id isn't in the graph
            EntrantNotFoundError: a leaf points outside the entrant list
            MalformedBracketError: a round doesn't have one A and one B child
            BattleSystemError: the battle system returned an unusable result
        """
        node = self._graph.node(node_id)
        if isinstance(node, EntrantNode):
            return None
        return self._solve_rec(node_id)

    def _solve_rec(self, node_id: int) -> TournamentRoundResult:
        node = self._graph.node(node_id)
        if not isinstance(node, RoundNode):
            raise BracketInvariantError(f"Node {node_id} is not a round")
        if isinstance(node.state, Complete):
            return node.state.result

        a, b = self.child_nodes(node_id)
        node_a = self._graph.node(a)
        node_b = self._graph.node(b)

        if isinstance(node_a, EntrantNode) != isinstance(node_b, EntrantNode):
            bye_side = "A" if isinstance(node_a, EntrantNode) else "B"
            logger.debug(f"Round {node_id}: bye on side {bye_side}")

        # Leaves are their own winners; rounds are solved first if needed.
        # Keeping the A/B order here is what maps the result back to the edge.
        winner_a = self._resolved_winner(a, "A")
        winner_b = self._resolved_winner(b, "B")
        cell_a = self.entrant(winner_a)
        cell_b = self.entrant(winner_b)

        result, metadata = self._battle(node_id, cell_a, cell_b)
        self._graph.set_node(node_id, RoundNode(Complete(result, metadata)))

        logger.debug(f"Round {node_id}: {winner_a} vs {winner_b} -> {result}")
        return result

    def _resolved_winner(self, node_id: int, side: str) -> EntrantId:
        winner = self.winner(node_id)
        if winner is None:
            self._solve_rec(node_id)
            winner = self.winner(node_id)
            if winner is None:
                raise BracketInvariantError(f"Finding winner failed for {side}")
        return winner

    def _battle(
        self, node_id: int, a: EntrantCell[E], b: EntrantCell[E]
    ) -> tuple[TournamentRoundResult, Any]:
        outcome = self.battle_system.battle(a, b)

        if isinstance(outcome, Decisive):
            result, metadata = outcome.result, outcome.metadata
        elif isinstance(outcome, Tie):
            logger.debug(f"Round {node_id}: tie, running tiebreaker")
            decided = self.battle_system.tiebreaker(a, b)
            try:
                result, metadata = decided
            except (TypeError, ValueError) as e:
                raise BattleSystemError(
                    f"Tiebreaker must return (result, metadata): {e}"
                ) from e
        else:
            raise BattleSystemError(
                f"battle() must return Decisive or TIE, got {outcome!r}"
            )

        if not isinstance(result, TournamentRoundResult):
            raise BattleSystemError(
                f"Round result must be TournamentRoundResult.A or .B, got {result!r}"
            )
        return result, metadata

    def __repr__(self) -> str:
        return (
            f"Tournament(entrants={self.len_entrants()}, "
            f"rounds={self.len_rounds_complete()}/{self.len_rounds()} complete)"
        )


__all__ = ["Tournament"]
