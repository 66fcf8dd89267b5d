"""
ultra_tournament/bracket.py - Bracket graph and builder

The bracket is a node/edge arena: nodes live in an indexed list, edges are
(parent, child, side) triples pointing from a round to the two nodes that
feed it. The builder lays out N entrants as a size-balanced binary tree and
never touches the topology again; the solver only swaps round payloads.

Layout for a slice of entrant ids:
  - 2 ids: two leaves, first on A, second on B
  - 3 ids: first id is a bye leaf on B, a new round on A takes the other two
  - 4+ ids: split at len // 2, lower half to a round on A, upper half to B
"""

import logging
from dataclasses import dataclass
from typing import Iterator

from ultra_tournament.errors import NeedsAtLeastOneEntrantError, RoundNotFoundError
from ultra_tournament.types import (
    EntrantId,
    EntrantNode,
    RoundNode,
    TournamentEdge,
    TournamentNode,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Graph
# ============================================================================

@dataclass(frozen=True)
class BracketEdge:
    """A parent round fed by a child node on one side."""

    parent: int
    child: int
    side: TournamentEdge


class BracketGraph:
    """Indexed arena of bracket nodes and labelled parent -> child edges."""

    def __init__(self):
        self._nodes: list[TournamentNode] = []
        self._edges: list[BracketEdge] = []
        self._outgoing: dict[int, list[BracketEdge]] = {}
        self._parent: dict[int, int] = {}

    def add_node(self, node: TournamentNode) -> int:
        self._nodes.append(node)
        node_id = len(self._nodes) - 1
        self._outgoing[node_id] = []
        return node_id

    def add_edge(self, parent: int, child: int, side: TournamentEdge) -> BracketEdge:
        self._check(parent)
        self._check(child)
        edge = BracketEdge(parent, child, side)
        self._edges.append(edge)
        self._outgoing[parent].append(edge)
        self._parent[child] = parent
        return edge

    def node(self, node_id: int) -> TournamentNode:
        """Get a node's payload. Raises RoundNotFoundError for unknown ids."""
        self._check(node_id)
        return self._nodes[node_id]

    def set_node(self, node_id: int, node: TournamentNode) -> None:
        self._check(node_id)
        self._nodes[node_id] = node

    def outgoing(self, node_id: int) -> list[BracketEdge]:
        """Edges from a node to its children, in insertion order."""
        self._check(node_id)
        return list(self._outgoing[node_id])

    def parent(self, node_id: int) -> int | None:
        """The round a node feeds into, or None for the root."""
        self._check(node_id)
        return self._parent.get(node_id)

    def node_indices(self) -> range:
        return range(len(self._nodes))

    def nodes(self) -> Iterator[tuple[int, TournamentNode]]:
        return enumerate(self._nodes)

    def edges(self) -> list[BracketEdge]:
        return list(self._edges)

    def __contains__(self, node_id: object) -> bool:
        return isinstance(node_id, int) and 0 <= node_id < len(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def _check(self, node_id: int) -> None:
        if node_id not in self:
            raise RoundNotFoundError(node_id)


class BracketView:
    """Read-only window onto a BracketGraph.

    Exposes traversal only; there is no add_edge or set_node. Node payloads
    are frozen and edge lists are copies, so nothing returned here can
    change the bracket.
    """

    def __init__(self, graph: BracketGraph):
        self._graph = graph

    def node(self, node_id: int) -> TournamentNode:
        return self._graph.node(node_id)

    def outgoing(self, node_id: int) -> list[BracketEdge]:
        return self._graph.outgoing(node_id)

    def parent(self, node_id: int) -> int | None:
        return self._graph.parent(node_id)

    def node_indices(self) -> range:
        return self._graph.node_indices()

    def nodes(self) -> list[tuple[int, TournamentNode]]:
        return list(self._graph.nodes())

    def edges(self) -> list[BracketEdge]:
        return self._graph.edges()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    def __len__(self) -> int:
        return len(self._graph)


# ============================================================================
# Builder
# ============================================================================

def build_bracket(entrant_count: int) -> tuple[BracketGraph, int]:
    """Lay out a single-elimination bracket for entrant_count entrants.

    Entrants are seeded by input order. Returns the graph and the id of the
    root node (grand finals). With one entrant the root is that entrant's
    leaf and there are no rounds.

    Raises:
        NeedsAtLeastOneEntrantError: entrant_count < 1
    """
    if entrant_count < 1:
        raise NeedsAtLeastOneEntrantError()

    graph = BracketGraph()
    entrant_ids = [EntrantId(i) for i in range(entrant_count)]

    if entrant_count == 1:
        root = graph.add_node(EntrantNode(entrant_ids[0]))
    else:
        root = graph.add_node(RoundNode())
        _add_layer(graph, root, entrant_ids)

    logger.debug(
        "Built bracket: %d entrants, %d nodes, root=%d",
        entrant_count, len(graph), root,
    )
    return graph, root


def _add_layer(graph: BracketGraph, parent: int, entrant_ids: list[EntrantId]) -> None:
    """Attach the A and B subtrees for entrant_ids under parent."""
    if len(entrant_ids) == 3:
        # Bye: the first entrant skips a round and waits on side B
        round_a = graph.add_node(RoundNode())
        bye = graph.add_node(EntrantNode(entrant_ids[0]))
        graph.add_edge(parent, round_a, TournamentEdge.A)
        graph.add_edge(parent, bye, TournamentEdge.B)
        _add_layer(graph, round_a, entrant_ids[1:])
    elif len(entrant_ids) == 2:
        leaf_a = graph.add_node(EntrantNode(entrant_ids[0]))
        leaf_b = graph.add_node(EntrantNode(entrant_ids[1]))
        graph.add_edge(parent, leaf_a, TournamentEdge.A)
        graph.add_edge(parent, leaf_b, TournamentEdge.B)
    elif len(entrant_ids) == 1:
        # Only reachable from a 3-way split, which already placed this entrant
        pass
    else:
        mid = len(entrant_ids) // 2
        round_a = graph.add_node(RoundNode())
        round_b = graph.add_node(RoundNode())
        graph.add_edge(parent, round_a, TournamentEdge.A)
        graph.add_edge(parent, round_b, TournamentEdge.B)
        _add_layer(graph, round_a, entrant_ids[:mid])
        _add_layer(graph, round_b, entrant_ids[mid:])


__all__ = ["BracketEdge", "BracketGraph", "BracketView", "build_bracket"]
