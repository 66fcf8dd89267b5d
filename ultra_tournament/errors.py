"""
ultra_tournament/errors.py - Exception hierarchy

Every failure the core can report is a TournamentError subclass, so callers
can catch the whole family or pick out the one they care about.
"""


class TournamentError(Exception):
    """Base exception for all tournament errors."""


class NeedsAtLeastOneEntrantError(TournamentError, ValueError):
    """Raised when creating a tournament with zero entrants."""

    def __init__(self, message: str = "A tournament needs at least one entrant"):
        super().__init__(message)


class RoundNotFoundError(TournamentError, LookupError):
    """Raised when the bracket graph has no node with the given id."""

    def __init__(self, node_id: int):
        self.node_id = node_id
        super().__init__(f"No node with id {node_id} in the bracket")


class EntrantNotFoundError(TournamentError, LookupError):
    """Raised when an entrant id is outside the entrant list."""

    def __init__(self, entrant_id):
        self.entrant_id = entrant_id
        super().__init__(f"{entrant_id} is not in the tournament")


class MalformedBracketError(TournamentError):
    """Raised when a round's child edges break the one-A/one-B shape.

    Builder-produced brackets never trigger this; it means the graph was
    edited after the tournament was created.
    """


class BracketInvariantError(TournamentError, RuntimeError):
    """Catch-all for internal invariants that failed while solving."""


class BattleSystemError(TournamentError):
    """Raised when a battle system returns something the solver can't record."""


class PrintFailureError(TournamentError):
    """Raised by the renderer when it can't format the tree."""
