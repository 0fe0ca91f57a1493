"""
merge_sort.py — Merge Sort (bottom-up, in place)
=================================================
Runs of width 1, 2, 4, … are merged left to right.  The merge is done
in place by rotation so every snapshot stays a permutation of the input:

    left run  rows[i:mid]      right run  rows[mid:hi]

    if rows[mid] < rows[i]:
        rows[mid] is written into position i,
        rows[i:mid] shift right by one   →  one step, yield rows
    else:
        rows[i] is already in its merged position  →  no step

Stable (ties keep the left-run record first).  Each step removes at
least one inversion, so the sequence has at most n(n-1)/2 steps.
"""

from typing import List

from algorithms.sequence import StepSequence


PSEUDOCODE: List[str] = [
    "def merge_sort(rows):",                            # 0
    "    width ← 1",                                    # 1
    "    while width < n:",                             # 2
    "        for lo in 0, 2·width, 4·width, …:",        # 3
    "            i, mid, hi ← lo, lo+width, lo+2·width",# 4
    "            while i < mid and mid < hi:",          # 5
    "                if rows[mid] < rows[i]:",          # 6
    "                    rotate rows[mid] into i",      # 7
    "                    mid ← mid + 1; yield rows",    # 8
    "                i ← i + 1",                        # 9
    "        width ← 2·width",                          # 10
]


class MergeSortSteps(StepSequence):
    key = "mergeSort"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._width   = 1
        self._lo      = 0          # start of the next pair of runs in this pass
        self._merging = False
        self._i       = 0
        self._mid     = 0
        self._hi      = 0

    def _advance(self) -> bool:
        rows = self._rows
        n = len(rows)
        while True:
            if not self._merging:
                if self._width >= n:
                    return False
                if self._lo >= n:
                    self._width *= 2
                    self._lo = 0
                    continue
                lo = self._lo
                mid = min(lo + self._width, n)
                hi = min(lo + 2 * self._width, n)
                self._lo = hi
                if mid >= hi:
                    continue
                self._i, self._mid, self._hi = lo, mid, hi
                self._merging = True

            while self._i < self._mid < self._hi:
                i, j = self._i, self._mid
                if rows[j].value < rows[i].value:
                    moved = rows[j]
                    rows[i + 1:j + 1] = rows[i:j]
                    rows[i] = moved
                    self._touch(i, j)
                    self._i += 1
                    self._mid += 1
                    return True
                self._i += 1

            self._merging = False
