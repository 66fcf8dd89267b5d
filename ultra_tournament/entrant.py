"""
ultra_tournament/entrant.py - Shared entrant slots

A tournament holds exactly one EntrantCell per entrant, created at
construction and never replaced. Every round the entrant plays in sees the
same cell, so a battle system can carry state (health, fatigue, wins) from
one round to the next.

Access is scoped to a `with` block:

    with cell.read() as guard:
        power = guard.value.power

    with cell.write() as slot:
        slot.value = slot.value.damaged(10)

Both guards refuse to be used once their block exits, so nothing handed to
a battle system outlives the battle call. get() returns a shallow copy for
the same reason.
"""

import copy
import threading
from contextlib import contextmanager
from typing import Any, Generic, Iterator, TypeVar

E = TypeVar("E")


class _ReadGuard(Generic[E]):
    """Read-only view of a cell's value, valid only inside cell.read()."""

    def __init__(self, value: E):
        self._value = value
        self._open = True

    @property
    def value(self) -> E:
        if not self._open:
            raise RuntimeError("Entrant read access used outside its `with` block")
        return self._value

    def _close(self) -> None:
        self._open = False
        self._value = None


class _WriteSlot(Generic[E]):
    """Mutable view of a cell's value, valid only inside cell.write()."""

    def __init__(self, value: E):
        self._value = value
        self._open = True

    @property
    def value(self) -> E:
        self._check_open()
        return self._value

    @value.setter
    def value(self, new_value: E) -> None:
        self._check_open()
        self._value = new_value

    def _check_open(self) -> None:
        if not self._open:
            raise RuntimeError("Entrant write access used outside its `with` block")

    def _close(self) -> E:
        self._open = False
        return self._value


class EntrantCell(Generic[E]):
    """The canonical mutable slot for one entrant.

    A re-entrant lock guards the value, so a battle system that reads an
    entrant while already holding write access on the same thread doesn't
    deadlock. Concurrent solves from several threads still need external
    coordination: the lock covers a cell, not the bracket.
    """

    def __init__(self, value: E):
        self._value = value
        self._lock = threading.RLock()

    @contextmanager
    def read(self) -> Iterator[_ReadGuard[E]]:
        """Borrow the value as guard.value for the duration of the block.

        Mutate through write(); changes made through a read guard are not
        part of the contract.
        """
        with self._lock:
            guard = _ReadGuard(self._value)
            try:
                yield guard
            finally:
                guard._close()

    @contextmanager
    def write(self) -> Iterator[_WriteSlot[E]]:
        """Borrow a writable slot. Assigning slot.value replaces the entrant."""
        with self._lock:
            slot = _WriteSlot(self._value)
            try:
                yield slot
            finally:
                self._value = slot._close()

    def get(self) -> E:
        """Return a shallow copy of the current value.

        Changing the copy doesn't change the cell; use write() for that.
        """
        with self.read() as guard:
            return copy.copy(guard.value)

    def __repr__(self) -> str:
        return f"EntrantCell({self._value!r})"

    def __str__(self) -> str:
        with self.read() as guard:
            return str(guard.value)


def make_cells(entrants: list[Any]) -> list[EntrantCell]:
    """Copy each entrant into its own cell, preserving order.

    The copy is shallow: later changes to the caller's list or to the
    top-level entrant objects don't reach the tournament.
    """
    return [EntrantCell(copy.copy(entrant)) for entrant in entrants]


__all__ = ["EntrantCell", "make_cells"]
