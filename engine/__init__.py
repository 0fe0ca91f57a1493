"""
engine/
-------
Playback & recording layer.

    from engine import PlaybackController, TickScheduler, Recorder, compare
"""

from engine.scheduler  import TickScheduler, TimerHandle
from engine.validation import InvariantChecker
from engine.controller import (
    PlaybackController,
    PlaybackState,
    CommandResult,
    SPEED_PRESETS,
)
from engine.recorder   import Recorder, RunMetrics, ComparisonResult, compare

__all__ = [
    "TickScheduler",
    "TimerHandle",
    "InvariantChecker",
    "PlaybackController",
    "PlaybackState",
    "CommandResult",
    "SPEED_PRESETS",
    "Recorder",
    "RunMetrics",
    "ComparisonResult",
    "compare",
]
