"""
sequence.py — Resumable Sort Step Sequence
===========================================
Every sorting algorithm is a StepSequence: an explicit state machine
(indices, pivot stack, merge cursors) that advances to the next visible
mutation on each `pull()` and hands back a snapshot of the whole list.

Contract:
    seq = SelectionSortSteps(records)
    seq.pull()  →  RecordList   one snapshot per step
    seq.pull()  →  None         exhausted; list is sorted (reported ONCE)
    seq.pull()  →  raises GeneratorExhaustedError

Design decisions:
  - The sequence copies the caller's records into a private list, so the
    caller's list is never observed mid-sort.
  - Snapshots are tuples of frozen Records: nothing handed out is ever
    mutated afterwards.
  - Subclasses implement `_advance()` only.  It does the minimal
    comparison / swap work up to the next mutation and returns True, or
    returns False once the list is ordered.
  - Iterating (`for snap in seq`) stops at exhaustion like any iterator;
    iterating a second time fails loudly.
"""

import time
from typing import Callable, Iterator, List, Optional, Sequence

from errors import GeneratorExhaustedError
from records import Record, RecordList


class StepSequence:
    """
    Attributes:
        key           : Registry key of the algorithm.
        steps_yielded : Number of snapshots handed out so far.
    """

    key: str = ""

    def __init__(
        self,
        records: Sequence[Record],
        clock: Callable[[], float] = time.monotonic,
    ):
        self._rows:     List[Record]          = list(records)
        self._clock:    Callable[[], float]   = clock
        self._finished: bool                  = False
        self.steps_yielded: int               = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def pull(self) -> Optional[RecordList]:
        """Advance one step.  Returns the new snapshot, or None when done."""
        if self._finished:
            raise GeneratorExhaustedError(
                f"{self.key or type(self).__name__} already exhausted "
                f"after {self.steps_yielded} step(s)"
            )
        if not self._advance():
            self._finished = True
            return None
        self.steps_yielded += 1
        return self.snapshot()

    def snapshot(self) -> RecordList:
        return tuple(self._rows)

    @property
    def is_exhausted(self) -> bool:
        return self._finished

    def __iter__(self) -> Iterator[RecordList]:
        return self

    def __next__(self) -> RecordList:
        snap = self.pull()
        if snap is None:
            raise StopIteration
        return snap

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------
    def _advance(self) -> bool:
        raise NotImplementedError

    def _swap(self, i: int, j: int) -> None:
        """Swap two positions; both records are touched (even i == j)."""
        now = self._clock()
        rows = self._rows
        rows[i], rows[j] = rows[j].touched(now), rows[i].touched(now)

    def _touch(self, lo: int, hi: int) -> None:
        """Refresh timestamps of positions lo..hi inclusive."""
        now = self._clock()
        for k in range(lo, hi + 1):
            self._rows[k] = self._rows[k].touched(now)
