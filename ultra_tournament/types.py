"""
ultra_tournament/types.py - Bracket data types

Node and edge payloads of the bracket graph, round states, and the values a
battle system hands back to the solver.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


# ============================================================================
# Sides
# ============================================================================

class TournamentRoundResult(Enum):
    """Which side of a round produced the winner."""

    A = "A"
    B = "B"

    @classmethod
    def from_edge(cls, edge: "TournamentEdge") -> "TournamentRoundResult":
        return cls(edge.value)

    def to_edge(self) -> "TournamentEdge":
        return TournamentEdge(self.value)

    def __str__(self) -> str:
        return f"{self.value} wins"


class TournamentEdge(Enum):
    """Label on a parent -> child edge: the child feeds side A or side B."""

    A = "A"
    B = "B"

    @classmethod
    def from_result(cls, result: TournamentRoundResult) -> "TournamentEdge":
        return cls(result.value)

    def to_result(self) -> TournamentRoundResult:
        return TournamentRoundResult(self.value)

    def __str__(self) -> str:
        return self.value


# ============================================================================
# Entrants
# ============================================================================

@dataclass(frozen=True, order=True)
class EntrantId:
    """Stable 0-based index into a tournament's entrant list."""

    index: int

    def __str__(self) -> str:
        return f"Entrant #{self.index}"


# ============================================================================
# Rounds
# ============================================================================

@dataclass(frozen=True)
class Incomplete:
    """A round that hasn't been played yet."""

    @property
    def is_complete(self) -> bool:
        return False

    def __str__(self) -> str:
        return "Incomplete"


@dataclass(frozen=True)
class Complete:
    """A solved round: the winning side plus caller-defined metadata."""

    result: TournamentRoundResult
    metadata: Any = None

    @property
    def is_complete(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"{self.result} --- {self.metadata}"


TournamentRound = Union[Incomplete, Complete]

INCOMPLETE = Incomplete()


# ============================================================================
# Nodes
# ============================================================================

@dataclass(frozen=True)
class EntrantNode:
    """Leaf of the bracket. Feeds exactly one round, or is the root when N=1."""

    entrant_id: EntrantId

    @property
    def entrant(self) -> EntrantId:
        return self.entrant_id

    @property
    def round(self) -> None:
        return None

    @property
    def result(self) -> None:
        return None

    @property
    def metadata(self) -> None:
        return None

    def __str__(self) -> str:
        return str(self.entrant_id)


@dataclass(frozen=True)
class RoundNode:
    """Internal node. Has one A child and one B child."""

    state: TournamentRound = INCOMPLETE

    @property
    def entrant(self) -> None:
        return None

    @property
    def round(self) -> TournamentRound:
        return self.state

    @property
    def is_complete(self) -> bool:
        return self.state.is_complete

    @property
    def result(self) -> TournamentRoundResult | None:
        """Winning side, or None while incomplete."""
        if isinstance(self.state, Complete):
            return self.state.result
        return None

    @property
    def metadata(self) -> Any:
        """Round metadata, or None while incomplete."""
        if isinstance(self.state, Complete):
            return self.state.metadata
        return None

    def __str__(self) -> str:
        return str(self.state)


TournamentNode = Union[EntrantNode, RoundNode]


# ============================================================================
# Battle outcomes
# ============================================================================

@dataclass(frozen=True)
class Decisive:
    """A battle with a winner. Returned from BattleSystem.battle()."""

    result: TournamentRoundResult
    metadata: Any = None


class Tie:
    """A battle without a winner. The solver runs the tiebreaker next."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "TIE"


TIE = Tie()

BattleResult = Union[Decisive, Tie]


__all__ = [
    "TournamentRoundResult",
    "TournamentEdge",
    "EntrantId",
    "Incomplete",
    "Complete",
    "TournamentRound",
    "INCOMPLETE",
    "EntrantNode",
    "RoundNode",
    "TournamentNode",
    "Decisive",
    "Tie",
    "TIE",
    "BattleResult",
]
