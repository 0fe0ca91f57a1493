"""
algorithms/__init__.py — Algorithm Registry
=============================================
Single source of truth for every sorting algorithm the visualizer knows.

    from algorithms import REGISTRY, SortKind, get_algorithm, create

The set of algorithms is closed: SortKind enumerates them and REGISTRY
maps each key to an AlgoInfo card.  Both the engine and the UI consume
AlgoInfo; `create()` is the only way the engine builds a StepSequence.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Type, Union

from errors import UnknownAlgorithm
from records import Record

from algorithms.sequence       import StepSequence
from algorithms.selection_sort import SelectionSortSteps, PSEUDOCODE as _sel_pc
from algorithms.bubble_sort    import BubbleSortSteps,    PSEUDOCODE as _bub_pc
from algorithms.quick_sort     import QuickSortSteps,     PSEUDOCODE as _qs_pc
from algorithms.merge_sort     import MergeSortSteps,     PSEUDOCODE as _ms_pc


# ---------------------------------------------------------------------------
# SortKind — the closed set of algorithms
# ---------------------------------------------------------------------------
class SortKind(Enum):
    SELECTION = "selectionSort"
    BUBBLE    = "bubbleSort"
    QUICK     = "quickSort"
    MERGE     = "mergeSort"


# ---------------------------------------------------------------------------
# AlgoInfo — metadata card for each algorithm
# ---------------------------------------------------------------------------
@dataclass
class AlgoInfo:
    kind:             SortKind
    label:            str                       # human label, e.g. "Bubble Sort"
    cls:              Type[StepSequence]        # the resumable step sequence
    pseudocode:       List[str]                 # lines for the side-panel
    max_steps:        Callable[[int], int]      # worst-case step count for n records
    stable:           bool = False
    complexity_time:  str  = ""
    complexity_space: str  = ""
    description:      str  = ""
    tags:             List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.kind.value

    def create(
        self,
        records: Sequence[Record],
        clock: Callable[[], float] = time.monotonic,
    ) -> StepSequence:
        return self.cls(records, clock=clock)


# ---------------------------------------------------------------------------
# THE REGISTRY
# ---------------------------------------------------------------------------
REGISTRY: Dict[str, AlgoInfo] = {

    "selectionSort": AlgoInfo(
        kind=SortKind.SELECTION, label="Selection Sort",
        cls=SelectionSortSteps, pseudocode=_sel_pc,
        max_steps=lambda n: n if n > 1 else 0,
        complexity_time="O(n²)", complexity_space="O(1)",
        description="Finds the minimum of the unsorted suffix and swaps it into place. One step per pass.",
        tags=["in-place", "unstable"],
    ),

    "bubbleSort": AlgoInfo(
        kind=SortKind.BUBBLE, label="Bubble Sort",
        cls=BubbleSortSteps, pseudocode=_bub_pc,
        max_steps=lambda n: n * (n - 1) // 2,
        stable=True,
        complexity_time="O(n²)", complexity_space="O(1)",
        description="Swaps adjacent out-of-order pairs until a pass makes no swap.",
        tags=["in-place", "stable"],
    ),

    "quickSort": AlgoInfo(
        kind=SortKind.QUICK, label="Quick Sort",
        cls=QuickSortSteps, pseudocode=_qs_pc,
        max_steps=lambda n: n * (n + 1) // 2,
        complexity_time="O(n log n) avg, O(n²) worst", complexity_space="O(log n)",
        description="Lomuto partition around the last element, then sorts each side.",
        tags=["in-place", "unstable", "divide-and-conquer"],
    ),

    "mergeSort": AlgoInfo(
        kind=SortKind.MERGE, label="Merge Sort",
        cls=MergeSortSteps, pseudocode=_ms_pc,
        max_steps=lambda n: n * (n - 1) // 2,
        stable=True,
        complexity_time="O(n log n) compares", complexity_space="O(1)",
        description="Bottom-up merge of runs 1, 2, 4, … wide, rotating each record into place.",
        tags=["in-place", "stable", "divide-and-conquer"],
    ),
}


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------
def get_algorithm(key: Union[str, SortKind]) -> Optional[AlgoInfo]:
    """Return AlgoInfo by key or SortKind, or None."""
    if isinstance(key, SortKind):
        key = key.value
    if not isinstance(key, str):
        return None
    return REGISTRY.get(key)


def require_algorithm(key: Union[str, SortKind]) -> AlgoInfo:
    info = get_algorithm(key)
    if info is None:
        raise UnknownAlgorithm(key)
    return info


def list_algorithms() -> List[AlgoInfo]:
    """Return all registered algorithms in insertion order."""
    return list(REGISTRY.values())


def create(
    key: Union[str, SortKind],
    records: Sequence[Record],
    clock: Callable[[], float] = time.monotonic,
) -> StepSequence:
    """Build a fresh StepSequence over a private copy of `records`."""
    return require_algorithm(key).create(records, clock=clock)


__all__ = [
    "SortKind",
    "AlgoInfo",
    "StepSequence",
    "SelectionSortSteps",
    "BubbleSortSteps",
    "QuickSortSteps",
    "MergeSortSteps",
    "REGISTRY",
    "get_algorithm",
    "require_algorithm",
    "list_algorithms",
    "create",
]
