"""
ultra_tournament/battle.py - Battle system interface and example systems

A battle system decides rounds between two entrants. It is the only place
entrant-specific logic enters the tournament; the bracket and solver are
generic over entrant and metadata types.
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from ultra_tournament.entrant import EntrantCell
from ultra_tournament.types import (
    TIE,
    BattleResult,
    Decisive,
    TournamentRoundResult,
)


# ============================================================================
# Data Types
# ============================================================================

@dataclass
class BattleSystemMetadata:
    """
    Static information about a battle system.

    Used for registry listings and the CLI `info` command.
    """

    name: str               # Lowercase, no spaces: "int"
    display_name: str       # Human readable: "Int Battle System"
    description: str        # One paragraph description
    entrant_type: str = ""  # What the entrants are: "IntFighter"


# ============================================================================
# Battle System Protocol
# ============================================================================

@runtime_checkable
class BattleSystem(Protocol):
    """
    The interface every battle system must implement.

    Both methods receive the two entrants' cells. Use `with a.read()` or
    `with a.write()` inside the call; don't keep the values afterwards.

    Example:
        class LargerWins:
            @property
            def metadata(self) -> BattleSystemMetadata:
                return BattleSystemMetadata(...)

            def battle(self, a, b):
                if a.get() == b.get():
                    return TIE
                winner = TournamentRoundResult.A if a.get() > b.get() else TournamentRoundResult.B
                return Decisive(winner, "")

            def tiebreaker(self, a, b):
                return TournamentRoundResult.A, "A by default"
    """

    @property
    def metadata(self) -> BattleSystemMetadata:
        """Return static information about this battle system."""
        ...

    def battle(self, a: EntrantCell, b: EntrantCell) -> BattleResult:
        """
        Play a round between side A and side B.

        Returns:
            Decisive(result, metadata), or TIE to hand over to tiebreaker()
        """
        ...

    def tiebreaker(self, a: EntrantCell, b: EntrantCell) -> tuple[TournamentRoundResult, Any]:
        """
        Decide a round that battle() called a tie.

        Must always decide. Returns (result, metadata).
        """
        ...


# ============================================================================
# Base Class
# ============================================================================

class BaseBattleSystem(ABC):
    """
    Convenience base class with sensible defaults.

    Inherit from this to get:
    - A seeded RNG in self._random
    - A coin-flip tiebreaker

    You must implement:
    - metadata property
    - battle() method

    The CLI also uses random_entrant() and parse_entrant() when a system
    provides them.
    """

    def __init__(self, seed: int | None = None):
        self._random = random.Random(seed)

    @property
    @abstractmethod
    def metadata(self) -> BattleSystemMetadata:
        """Subclasses must define their metadata."""
        ...

    @abstractmethod
    def battle(self, a: EntrantCell, b: EntrantCell) -> BattleResult:
        """Subclasses must implement the round logic."""
        ...

    def tiebreaker(self, a: EntrantCell, b: EntrantCell) -> tuple[TournamentRoundResult, Any]:
        """Flip a coin. Override for a domain-specific tiebreak."""
        if self._random.random() > 0.5:
            return TournamentRoundResult.A, "A won by random tiebreaker."
        return TournamentRoundResult.B, "B won by random tiebreaker."

    def random_entrant(self, rng: random.Random) -> Any:
        """Generate one entrant. Optional, used by `ultra-tournament run --entrants`."""
        raise NotImplementedError(f"{self.metadata.name} can't generate entrants")

    def parse_entrant(self, text: str) -> Any:
        """Parse one entrant from text. Optional, used by `run --values`."""
        raise NotImplementedError(f"{self.metadata.name} can't parse entrants")


# ============================================================================
# Example Battle Systems
# ============================================================================

@dataclass
class IntFighter:
    """An entrant that is just a number. Bigger is better."""

    value: int

    def __str__(self) -> str:
        return f"Int Fighter: {self.value:,}"


class IntBattleSystem(BaseBattleSystem):
    """
    The larger number wins. Ties go to a coin flip.
    """

    MAX_RANDOM = 2**32 - 1

    @property
    def metadata(self) -> BattleSystemMetadata:
        return BattleSystemMetadata(
            name="int",
            display_name="Int Battle System",
            description="The larger integer wins the round. Equal values are decided by a coin flip.",
            entrant_type="IntFighter",
        )

    def battle(self, a: EntrantCell, b: EntrantCell) -> BattleResult:
        with a.read() as guard_a, b.read() as guard_b:
            fighter_a, fighter_b = guard_a.value, guard_b.value
            if fighter_a.value == fighter_b.value:
                return TIE

            delta = abs(fighter_a.value - fighter_b.value)
            if fighter_a.value > fighter_b.value:
                winner, winner_fighter = TournamentRoundResult.A, fighter_a
            else:
                winner, winner_fighter = TournamentRoundResult.B, fighter_b

            return Decisive(winner, f"{winner_fighter} wins by {delta:,}!")

    def random_entrant(self, rng: random.Random) -> IntFighter:
        return IntFighter(rng.randint(0, self.MAX_RANDOM))

    def parse_entrant(self, text: str) -> IntFighter:
        return IntFighter(int(text.replace(",", "").replace("_", "")))


@dataclass
class JankenFighter:
    """
    A rock-paper-scissors player with a weight for each throw.

    Each roll draws random() * weight per throw and keeps the largest, so a
    weight of 0 means the throw is never picked (unless all weights are 0,
    which always throws rock).
    """

    rock: float
    paper: float
    scissors: float

    def roll(self, rng: random.Random) -> str:
        rolls = {
            "rock": rng.random() * self.rock,
            "paper": rng.random() * self.paper,
            "scissors": rng.random() * self.scissors,
        }
        throw = "rock"
        if rolls["paper"] > rolls[throw]:
            throw = "paper"
        if rolls["scissors"] > rolls[throw]:
            throw = "scissors"
        return throw

    def __str__(self) -> str:
        return (
            f"Rock: {self.rock * 100:.0f}% - "
            f"Paper: {self.paper * 100:.0f}% - "
            f"Scissors: {self.scissors * 100:.0f}%"
        )


# What each throw beats
BEATS = {"rock": "scissors", "paper": "rock", "scissors": "paper"}


class JankenBattleSystem(BaseBattleSystem):
    """
    Rock-paper-scissors. Same throws tie; the tiebreaker replays up to
    max_replays times before falling back to a coin flip.
    """

    def __init__(self, seed: int | None = None, max_replays: int = 10):
        super().__init__(seed)
        self.max_replays = max_replays

    @property
    def metadata(self) -> BattleSystemMetadata:
        return BattleSystemMetadata(
            name="janken",
            display_name="Janken",
            description="Rock-paper-scissors between weighted throwers. Ties are replayed.",
            entrant_type="JankenFighter",
        )

    def battle(self, a: EntrantCell, b: EntrantCell) -> BattleResult:
        with a.read() as guard_a, b.read() as guard_b:
            fighter_a, fighter_b = guard_a.value, guard_b.value
            throw_a = fighter_a.roll(self._random)
            throw_b = fighter_b.roll(self._random)

        if throw_a == throw_b:
            return TIE
        if BEATS[throw_a] == throw_b:
            return Decisive(TournamentRoundResult.A, f"{throw_a} beats {throw_b}")
        return Decisive(TournamentRoundResult.B, f"{throw_b} beats {throw_a}")

    def tiebreaker(self, a: EntrantCell, b: EntrantCell) -> tuple[TournamentRoundResult, Any]:
        for replay in range(1, self.max_replays + 1):
            outcome = self.battle(a, b)
            if isinstance(outcome, Decisive):
                return outcome.result, f"{outcome.metadata} (replay {replay})"
        return super().tiebreaker(a, b)

    def random_entrant(self, rng: random.Random) -> JankenFighter:
        return JankenFighter(rng.random(), rng.random(), rng.random())

    def parse_entrant(self, text: str) -> JankenFighter:
        """Parse "rock/paper/scissors" weights, e.g. "0.5/0.2/0.3"."""
        parts = text.split("/")
        if len(parts) != 3:
            raise ValueError(f"Expected rock/paper/scissors weights, got {text!r}")
        rock, paper, scissors = (float(p) for p in parts)
        return JankenFighter(rock, paper, scissors)


# ============================================================================
# Exports
# ============================================================================

__all__ = [
    # Data types
    "BattleSystemMetadata",
    # Protocol
    "BattleSystem",
    # Base class
    "BaseBattleSystem",
    # Example battle systems
    "IntFighter",
    "IntBattleSystem",
    "JankenFighter",
    "JankenBattleSystem",
]
