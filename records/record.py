"""
record.py — Record & RecordList
================================
A Record is one bar in the chart: an opaque id, a comparable value and
the monotonic time it was last touched (the renderer fades the bar's
colour from red to blue as that time ages).

Design decisions:
  - Record is a frozen dataclass.  A swap never mutates a Record; it
    replaces it with `touched()`, a copy carrying a fresh timestamp.
    That is what makes a tuple of Records a safe snapshot: a consumer
    holding an older snapshot never sees its timestamps move.
  - RecordList is the snapshot type (a tuple).  Sort sequences work on
    a private `list` and hand out `tuple(...)` copies.
"""

import math
import random
import time
import uuid
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

Number = Union[int, float]
Clock = Callable[[], float]


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Record:
    """
    Attributes:
        id         : Unique identifier, stable across every snapshot.
        value      : The sort key.
        updated_at : Monotonic timestamp (seconds) of the last swap / edit.
    """

    id:         str
    value:      Number
    updated_at: float = 0.0

    def touched(self, now: float) -> "Record":
        """Same record, new timestamp."""
        return replace(self, updated_at=now)

    def with_value(self, value: Number, now: float) -> "Record":
        return replace(self, value=value, updated_at=now)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "value": self.value, "updated_at": self.updated_at}


RecordList = Tuple[Record, ...]


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
def new_record(value: Number, clock: Clock = time.monotonic) -> Record:
    return Record(id=uuid.uuid4().hex, value=value, updated_at=clock())


def random_record(
    rng: Optional[random.Random] = None,
    max_value: int = 1000,
    clock: Clock = time.monotonic,
) -> Record:
    """A record with an integer value in [0, max_value]."""
    rng = rng or random.Random()
    return new_record(round(rng.random() * max_value), clock)


def random_records(
    count: int,
    rng: Optional[random.Random] = None,
    max_value: int = 1000,
    clock: Clock = time.monotonic,
) -> List[Record]:
    rng = rng or random.Random()
    return [random_record(rng, max_value, clock) for _ in range(count)]


def from_values(values: Iterable[Number], clock: Clock = time.monotonic) -> List[Record]:
    """Build records from bare values, ids assigned in input order."""
    return [new_record(v, clock) for v in values]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def shuffled(records: Sequence[Record], rng: Optional[random.Random] = None) -> List[Record]:
    """Return a shuffled copy; timestamps are left alone."""
    out = list(records)
    (rng or random.Random()).shuffle(out)
    return out


def values_of(records: Iterable[Record]) -> List[Number]:
    return [r.value for r in records]


def is_sorted(records: Sequence[Record]) -> bool:
    """Non-decreasing by value."""
    return all(records[i - 1].value <= records[i].value for i in range(1, len(records)))


def is_value(value: Any) -> bool:
    """A usable sort key: a finite int or float, never a bool."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)
