"""
selection_sort.py — Selection Sort
===================================
One step per outer-loop iteration: scan the unsorted suffix for the
minimum, swap it to the front of the suffix, yield.  The last iteration
is always a self-swap, so a list of n >= 2 records takes exactly n steps.
"""

from typing import List

from algorithms.sequence import StepSequence


PSEUDOCODE: List[str] = [
    "def selection_sort(rows):",                        # 0
    "    for a in 0 .. n-1:",                           # 1
    "        lowest ← a",                               # 2
    "        for b in a+1 .. n-1:",                     # 3
    "            if rows[b] < rows[lowest]:",           # 4
    "                lowest ← b",                       # 5
    "        swap(rows[a], rows[lowest])",              # 6
    "        yield rows",                               # 7
]


class SelectionSortSteps(StepSequence):
    key = "selectionSort"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._a = 0

    def _advance(self) -> bool:
        rows = self._rows
        n = len(rows)
        if n < 2 or self._a >= n:
            return False

        a = self._a
        lowest = a
        for b in range(a + 1, n):
            # strict < keeps the first of equal minimums
            if rows[b].value < rows[lowest].value:
                lowest = b

        self._swap(a, lowest)
        self._a += 1
        return True
