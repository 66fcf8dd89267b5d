"""
Ultra Tournament - single-elimination brackets over any entrant type

Hand it a list of entrants and a battle system; it seeds them into a
balanced bracket (byes included) and plays it out bottom-up.
"""

__version__ = "0.1.0"

from .types import (
    # Sides
    TournamentRoundResult,
    TournamentEdge,
    # Bracket payloads
    EntrantId,
    Incomplete,
    Complete,
    EntrantNode,
    RoundNode,
    # Battle outcomes
    Decisive,
    Tie,
    TIE,
)

from .errors import (
    TournamentError,
    NeedsAtLeastOneEntrantError,
    RoundNotFoundError,
    EntrantNotFoundError,
    MalformedBracketError,
    BracketInvariantError,
    BattleSystemError,
    PrintFailureError,
)

from .entrant import EntrantCell

from .battle import (
    BattleSystemMetadata,
    BattleSystem,
    BaseBattleSystem,
    IntFighter,
    IntBattleSystem,
    JankenFighter,
    JankenBattleSystem,
)

from .bracket import BracketEdge, BracketGraph, BracketView, build_bracket

from .tournament import Tournament

from .render import render_tournament, print_tournament

__all__ = [
    # Version
    "__version__",
    # Types
    "TournamentRoundResult",
    "TournamentEdge",
    "EntrantId",
    "Incomplete",
    "Complete",
    "EntrantNode",
    "RoundNode",
    "Decisive",
    "Tie",
    "TIE",
    # Errors
    "TournamentError",
    "NeedsAtLeastOneEntrantError",
    "RoundNotFoundError",
    "EntrantNotFoundError",
    "MalformedBracketError",
    "BracketInvariantError",
    "BattleSystemError",
    "PrintFailureError",
    # Entrants
    "EntrantCell",
    # Battle systems
    "BattleSystemMetadata",
    "BattleSystem",
    "BaseBattleSystem",
    "IntFighter",
    "IntBattleSystem",
    "JankenFighter",
    "JankenBattleSystem",
    # Bracket
    "BracketEdge",
    "BracketGraph",
    "BracketView",
    "build_bracket",
    "Tournament",
    # Rendering
    "render_tournament",
    "print_tournament",
]
