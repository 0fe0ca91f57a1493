"""
bubble_sort.py — Bubble Sort
=============================
One step per adjacent-pair swap (not per pass).  A pass that swaps
nothing ends the sequence.  Every swap fixes exactly one inversion, so
the number of steps equals the number of inversions in the input.
"""

from typing import List

from algorithms.sequence import StepSequence


PSEUDOCODE: List[str] = [
    "def bubble_sort(rows):",                           # 0
    "    swapped ← true",                               # 1
    "    while swapped:",                               # 2
    "        swapped ← false",                          # 3
    "        for i in 1 .. n-1:",                       # 4
    "            if rows[i] < rows[i-1]:",              # 5
    "                swap(rows[i], rows[i-1])",         # 6
    "                swapped ← true",                   # 7
    "                yield rows",                       # 8
]


class BubbleSortSteps(StepSequence):
    key = "bubbleSort"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._i       = 1        # next index to compare with its left neighbour
        self._swapped = False    # any swap during the current pass?

    def _advance(self) -> bool:
        rows = self._rows
        n = len(rows)
        while True:
            while self._i < n:
                i = self._i
                self._i += 1
                if rows[i].value < rows[i - 1].value:
                    self._swap(i - 1, i)
                    self._swapped = True
                    return True

            # end of pass
            if not self._swapped:
                return False
            self._swapped = False
            self._i = 1
