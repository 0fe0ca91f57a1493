"""
validation.py — Snapshot Invariant Checks
==========================================
Guards against a broken algorithm.  Built from the list a run started
with; every snapshot must be a permutation of it (same size, same value
multiset, same ids) and the drained list must be non-decreasing.
"""

from collections import Counter
from typing import Sequence

from errors import InvariantViolation
from records import Record, is_sorted, values_of


class InvariantChecker:
    def __init__(self, initial: Sequence[Record]):
        self._size   = len(initial)
        self._values = Counter(r.value for r in initial)
        self._ids    = frozenset(r.id for r in initial)

    def check_snapshot(self, snapshot: Sequence[Record], step: int) -> None:
        if len(snapshot) != self._size:
            raise InvariantViolation(
                "Snapshot size changed", step,
                {"expected_size": self._size, "actual_size": len(snapshot)},
            )
        values = Counter(r.value for r in snapshot)
        if values != self._values:
            raise InvariantViolation(
                "Snapshot is not a permutation of the input values", step,
                {
                    "missing": sorted((self._values - values).elements()),
                    "unexpected": sorted((values - self._values).elements()),
                },
            )
        ids = frozenset(r.id for r in snapshot)
        if ids != self._ids:
            raise InvariantViolation(
                "Snapshot record ids differ from the input", step,
                {"missing": sorted(self._ids - ids), "unexpected": sorted(ids - self._ids)},
            )

    def check_final(self, snapshot: Sequence[Record], step: int) -> None:
        self.check_snapshot(snapshot, step)
        if not is_sorted(snapshot):
            raise InvariantViolation(
                "Sequence exhausted but the list is not sorted", step,
                {"values": values_of(snapshot)},
            )
