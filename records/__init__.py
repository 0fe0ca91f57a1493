"""
records/
--------
Core data layer.  Public API:

    from records import Record, RecordList
    from records import random_records, from_values, shuffled, is_sorted
"""

from records.record import (
    Record,
    RecordList,
    new_record,
    random_record,
    random_records,
    from_values,
    shuffled,
    values_of,
    is_sorted,
    is_value,
)

__all__ = [
    "Record",          "RecordList",
    "new_record",      "random_record",
    "random_records",  "from_values",
    "shuffled",        "values_of",
    "is_sorted",       "is_value",
]
