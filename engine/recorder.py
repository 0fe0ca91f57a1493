"""
recorder.py — Run Recorder & Analytics
========================================
Drains a sorting run to completion (no timer), keeps every snapshot (or
just the last one, with keep_steps=False) and computes the numbers the
Analytics panel shows.

Usage:
    rec = Recorder()
    rec.start("quickSort", records)
    metrics = rec.run_to_completion()
    rec.export()                       # JSON-friendly summary

Comparison Mode:
    Run two Recorders over the SAME records, then compare(left, right).
"""

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from algorithms import AlgoInfo, SortKind, StepSequence, require_algorithm
from records import Record, RecordList, is_sorted, values_of
from engine.validation import InvariantChecker


# ---------------------------------------------------------------------------
# Metrics dataclass — what the Analytics panel renders
# ---------------------------------------------------------------------------
@dataclass
class RunMetrics:
    algo_key:     str   = ""
    algo_label:   str   = ""
    size:         int   = 0          # number of records sorted
    total_steps:  int   = 0          # number of snapshots yielded
    max_steps:    int   = 0          # worst-case bound for this size
    wall_time_ms: float = 0.0        # wall-clock time to drain the run
    is_sorted:    bool  = False


# ---------------------------------------------------------------------------
# ComparisonResult — side-by-side analytics
# ---------------------------------------------------------------------------
@dataclass
class ComparisonResult:
    left:         RunMetrics = field(default_factory=RunMetrics)
    right:        RunMetrics = field(default_factory=RunMetrics)
    winner_steps: str = ""   # which algo needed fewer steps
    winner_time:  str = ""


# ---------------------------------------------------------------------------
# Recorder
# ---------------------------------------------------------------------------
class Recorder:
    """
    Attributes:
        snapshots  : Every snapshot from the run, in order (empty unless keep_steps).
        step_count : Snapshots the run yielded.
        metrics    : Computed RunMetrics (available after run_to_completion).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, keep_steps: bool = True):
        self.snapshots:  List[RecordList]     = []
        self.step_count: int                  = 0
        self.metrics:    Optional[RunMetrics] = None
        self.keep_steps: bool                 = keep_steps

        self._clock:    Callable[[], float]  = clock
        self._info:     Optional[AlgoInfo]   = None
        self._initial:  RecordList           = ()
        self._sequence: Optional[StepSequence] = None
        self._last:     Optional[RecordList]   = None

    def start(self, algo_key: Union[str, SortKind], records: Sequence[Record]) -> None:
        """Initialise the step sequence for this run."""
        self._info     = require_algorithm(algo_key)
        self._initial  = tuple(records)
        self._sequence = self._info.create(self._initial, clock=self._clock)
        self.snapshots  = []
        self.step_count = 0
        self.metrics    = None
        self._last      = None

    def run_to_completion(self) -> RunMetrics:
        """Drain the sequence, validating every snapshot, and compute metrics."""
        if self._sequence is None:
            raise RuntimeError("Call start() first.")

        checker = InvariantChecker(self._initial)
        started = time.perf_counter()
        for snapshot in self._sequence:
            self.step_count += 1
            checker.check_snapshot(snapshot, self.step_count)
            if self.keep_steps:
                self.snapshots.append(snapshot)
            self._last = snapshot
        wall_ms = (time.perf_counter() - started) * 1000

        final = self.final
        checker.check_final(final, self.step_count)

        info = self._info
        self.metrics = RunMetrics(
            algo_key=info.key,
            algo_label=info.label,
            size=len(self._initial),
            total_steps=self.step_count,
            max_steps=info.max_steps(len(self._initial)),
            wall_time_ms=round(wall_ms, 2),
            is_sorted=is_sorted(final),
        )
        return self.metrics

    @property
    def final(self) -> RecordList:
        return self._last if self._last is not None else self._initial

    def export(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "algo_key": self._info.key if self._info else "",
            "initial":  values_of(self._initial),
            "metrics":  asdict(self.metrics) if self.metrics else {},
        }
        if self.keep_steps:
            data["steps"] = [values_of(s) for s in self.snapshots]
        return data


# ---------------------------------------------------------------------------
# Comparison helper
# ---------------------------------------------------------------------------
def compare(left: Recorder, right: Recorder) -> ComparisonResult:
    """Given two completed Recorders, produce a ComparisonResult."""
    l = left.metrics  or RunMetrics()
    r = right.metrics or RunMetrics()

    def winner(l_val, r_val):
        if l_val == r_val:
            return "tie"
        return l.algo_label if l_val < r_val else r.algo_label

    return ComparisonResult(
        left=l,
        right=r,
        winner_steps=winner(l.total_steps, r.total_steps),
        winner_time=winner(l.wall_time_ms, r.wall_time_ms),
    )
