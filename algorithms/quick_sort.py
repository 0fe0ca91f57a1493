"""
quick_sort.py — Quick Sort (Lomuto)
====================================
Pivot rule: the LAST element of the range.  Lomuto partition with a
strict `<` comparison, so records equal to the pivot stay on its right.

One step per partition swap that actually moves records; self-swaps
(i == j, or the pivot already in place) are skipped.  Recursion is an
explicit stack of (lo, hi) ranges, left range first, so the sequence
can be suspended after any swap.
"""

from typing import List, Optional, Tuple

from algorithms.sequence import StepSequence


PSEUDOCODE: List[str] = [
    "def quick_sort(rows, lo, hi):",                    # 0
    "    if lo >= hi: return",                          # 1
    "    pivot ← rows[hi]",                             # 2
    "    i ← lo",                                       # 3
    "    for j in lo .. hi-1:",                         # 4
    "        if rows[j] < pivot:",                      # 5
    "            swap(rows[i], rows[j]); yield rows",   # 6
    "            i ← i + 1",                            # 7
    "    swap(rows[i], rows[hi]); yield rows",          # 8
    "    quick_sort(rows, lo, i-1)",                    # 9
    "    quick_sort(rows, i+1, hi)",                    # 10
]


class QuickSortSteps(StepSequence):
    key = "quickSort"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        n = len(self._rows)
        self._stack: List[Tuple[int, int]] = [(0, n - 1)] if n > 1 else []
        # active partition: (lo, hi) or None between partitions
        self._range: Optional[Tuple[int, int]] = None
        self._i = 0
        self._j = 0

    def _advance(self) -> bool:
        rows = self._rows
        while True:
            if self._range is None:
                if not self._stack:
                    return False
                lo, hi = self._stack.pop()
                if lo >= hi:
                    continue
                self._range = (lo, hi)
                self._i = self._j = lo

            lo, hi = self._range
            pivot = rows[hi].value
            while self._j < hi:
                j = self._j
                self._j += 1
                if rows[j].value < pivot:
                    i = self._i
                    self._i += 1
                    if i != j:
                        self._swap(i, j)
                        return True

            # partition done: pivot goes to i, recurse left first
            p = self._i
            self._range = None
            self._stack.append((p + 1, hi))
            self._stack.append((lo, p - 1))
            if p != hi:
                self._swap(p, hi)
                return True
