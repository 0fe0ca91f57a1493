"""
controller.py — Playback Controller
====================================
The PlaybackController is the ONLY object the UI talks to during a run.
It owns the record list, at most one live StepSequence and at most one
live timer handle, and exposes the transport commands.

State machine:
    IDLE/STOPPED →  play()     →  RUNNING   (new sequence, timer armed)
    RUNNING      →  pause()    →  PAUSED    (timer cancelled)
    PAUSED       →  unpause()  →  RUNNING   (timer re-armed)
    RUNNING/PAUSED → stop()    →  IDLE      (timer cancelled, sequence dropped)
    RUNNING/PAUSED → step()    →  same      (one synchronous pull)
    RUNNING      →  tick       →  same      (one pull, timer re-armed)
    any pull that exhausts the sequence      →  IDLE
    any pull or publish that raises          →  IDLE  (run aborted, last_error set)
    any          →  close()    →  STOPPED

Every command returns a CommandResult; a command that is not allowed in
the current state comes back with ok=False and an InvalidTransition, and
leaves the controller untouched.

Timing:
  The controller never sleeps.  It asks its scheduler to call `_on_tick`
  after `delay_ms`, and each tick re-arms the next one.  Commands that
  stop the timer cancel the handle before they return, so a tick that
  was already queued can never fire afterwards.

Thread safety:
  None.  Commands and ticks must run on the scheduler's thread
  (TickScheduler.run_due caller, or the asyncio loop).
"""

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Protocol, Union

from algorithms import AlgoInfo, SortKind, StepSequence, require_algorithm
from errors import (
    InvalidArgument,
    InvalidTransition,
    StepFailed,
    VisualizerError,
)
from records import Record, RecordList, is_value, new_record, shuffled
from engine.scheduler import TickScheduler
from engine.validation import InvariantChecker


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class PlaybackState(Enum):
    IDLE    = "idle"
    RUNNING = "running"
    PAUSED  = "paused"
    STOPPED = "stopped"


_AT_REST = (PlaybackState.IDLE, PlaybackState.STOPPED)
_LIVE    = (PlaybackState.RUNNING, PlaybackState.PAUSED)


# ---------------------------------------------------------------------------
# Speed presets (milliseconds per step)
# ---------------------------------------------------------------------------
SPEED_PRESETS = {
    "slow":    1000,
    "medium":   400,
    "fast":     150,
    "turbo":     50,
    "instant":    0,
}


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------
class Renderer(Protocol):
    def publish(self, records: RecordList) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Any: ...


# ---------------------------------------------------------------------------
# Command result
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class CommandResult:
    """
    Attributes:
        ok       : True if the command was applied.
        state    : Controller state after the command.
        error    : The rejection / failure, when ok is False.
        snapshot : The snapshot published by the command, if any.
    """

    ok:       bool
    state:    PlaybackState
    error:    Optional[VisualizerError] = None
    snapshot: Optional[RecordList]      = None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"ok": self.ok, "state": self.state.value}
        if self.error is not None:
            data.update(self.error.to_dict())
        return data


# ---------------------------------------------------------------------------
# PlaybackController
# ---------------------------------------------------------------------------
class PlaybackController:
    """
    Attributes:
        records     : The list currently shown (last published snapshot).
        state       : Current PlaybackState.
        delay_ms    : Milliseconds between ticks.
        algorithm   : AlgoInfo of the current / last run.
        steps_taken : Snapshots published by the current / last run.
        last_error  : The error that aborted the last run, if any.
        validate    : Check every snapshot with an InvariantChecker.
        max_records : Largest list reset() / add_record() may produce (None = no cap).
    """

    def __init__(
        self,
        records: Iterable[Record] = (),
        scheduler: Optional[Scheduler] = None,
        renderer: Optional[Renderer] = None,
        delay_ms: int = 0,
        validate: bool = False,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        max_value: int = 1000,
        max_records: Optional[int] = None,
    ):
        self.records:     RecordList                = tuple(records)
        self.state:       PlaybackState             = PlaybackState.IDLE
        self.delay_ms:    int                       = _check_delay(delay_ms)
        self.algorithm:   Optional[AlgoInfo]        = None
        self.steps_taken: int                       = 0
        self.last_error:  Optional[VisualizerError] = None
        self.validate:    bool                      = validate
        self.max_value:   int                       = max_value
        self.max_records: Optional[int]             = max_records

        self._scheduler = scheduler if scheduler is not None else TickScheduler(clock=clock)
        self._renderer  = renderer
        self._rng       = rng or random.Random()
        self._clock     = clock

        self._sequence: Optional[StepSequence]     = None
        self._checker:  Optional[InvariantChecker] = None
        self._timer:    Any                        = None

    # ------------------------------------------------------------------
    # Transport commands
    # ------------------------------------------------------------------
    def play(
        self,
        delay_ms: int,
        algorithm: Union[str, SortKind],
        records: Optional[Iterable[Record]] = None,
    ) -> CommandResult:
        """Start a run over `records` (default: the current list)."""
        if self.state in _LIVE:
            return self._reject("play")
        try:
            delay = _check_delay(delay_ms)
            info = require_algorithm(algorithm)
        except InvalidArgument as exc:
            return self._fail(exc)

        if records is not None:
            self.records = tuple(records)

        self._teardown()
        self._sequence    = info.create(self.records, clock=self._clock)
        self._checker     = InvariantChecker(self.records) if self.validate else None
        self.algorithm    = info
        self.delay_ms     = delay
        self.steps_taken  = 0
        self.last_error   = None
        self.state        = PlaybackState.RUNNING
        self._arm()
        logger.debug("play %s: %d records, delay %d ms", info.key, len(self.records), delay)
        return self._ok()

    def pause(self) -> CommandResult:
        if self.state is not PlaybackState.RUNNING:
            return self._reject("pause")
        self._disarm()
        self.state = PlaybackState.PAUSED
        logger.debug("paused after %d steps", self.steps_taken)
        return self._ok()

    def unpause(self) -> CommandResult:
        if self.state is not PlaybackState.PAUSED:
            return self._reject("unpause")
        self.state = PlaybackState.RUNNING
        self._arm()
        logger.debug("unpaused at step %d", self.steps_taken)
        return self._ok()

    def stop(self) -> CommandResult:
        """Abandon the run.  Stopping an idle controller is a no-op."""
        if self.state in _LIVE:
            logger.debug("stopped after %d steps", self.steps_taken)
            self._teardown()
            self.state = PlaybackState.IDLE
        return self._ok()

    def step(self) -> CommandResult:
        """Pull exactly one snapshot, synchronously."""
        if self.state not in _LIVE:
            return self._reject("step")
        self._disarm()
        try:
            snapshot = self._safe_pull()
        except VisualizerError as exc:
            self._abort(exc)
            return self._fail(exc)
        if self.state is PlaybackState.RUNNING:
            self._arm()
        return self._ok(snapshot)

    def set_delay(self, delay_ms: int) -> CommandResult:
        """Change the tick interval; a pending tick is re-armed at the new delay."""
        try:
            self.delay_ms = _check_delay(delay_ms)
        except InvalidArgument as exc:
            return self._fail(exc)
        if self.state is PlaybackState.RUNNING:
            self._disarm()
            self._arm()
        return self._ok()

    def set_speed(self, preset: str) -> CommandResult:
        if preset not in SPEED_PRESETS:
            return self._fail(InvalidArgument(f"Unknown speed preset: {preset}"))
        return self.set_delay(SPEED_PRESETS[preset])

    # ------------------------------------------------------------------
    # Record list editing (only while no sequence is live)
    # ------------------------------------------------------------------
    def shuffle(self) -> CommandResult:
        if self.state not in _AT_REST:
            return self._reject("shuffle")
        self.records = tuple(shuffled(self.records, self._rng))
        self._publish(self.records)
        return self._ok(self.records)

    def reset(self, records: Iterable[Record]) -> CommandResult:
        if self.state not in _AT_REST:
            return self._reject("reset")
        records = tuple(records)
        if self.max_records is not None and len(records) > self.max_records:
            return self._fail(InvalidArgument(
                f"{len(records)} records exceeds the limit of {self.max_records}"
            ))
        self.records = records
        self.steps_taken = 0
        self.last_error = None
        self._publish(self.records)
        return self._ok(self.records)

    def add_record(self, value: Optional[Union[int, float]] = None) -> CommandResult:
        """Append a record; a random value in [0, max_value] when none is given."""
        if self.state not in _AT_REST:
            return self._reject("add a record")
        if self.max_records is not None and len(self.records) >= self.max_records:
            return self._fail(InvalidArgument(f"Record limit of {self.max_records} reached"))
        if value is None:
            value = round(self._rng.random() * self.max_value)
        elif not is_value(value):
            return self._fail(InvalidArgument(f"Record value must be a finite number, got {value!r}"))
        self.records = self.records + (new_record(value, self._clock),)
        self._publish(self.records)
        return self._ok(self.records)

    def edit_record(self, record_id: str, value: Union[int, float]) -> CommandResult:
        if self.state not in _AT_REST:
            return self._reject("edit a record")
        if not is_value(value):
            return self._fail(InvalidArgument(f"Record value must be a finite number, got {value!r}"))
        for idx, rec in enumerate(self.records):
            if rec.id == record_id:
                rows = list(self.records)
                rows[idx] = rec.with_value(value, self._clock())
                self.records = tuple(rows)
                self._publish(self.records)
                return self._ok(self.records)
        return self._fail(InvalidArgument(f"No record with id {record_id!r}"))

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    def close(self) -> CommandResult:
        """End the session: cancel everything, land in STOPPED."""
        self._teardown()
        self.state = PlaybackState.STOPPED
        return self._ok()

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def has_sequence(self) -> bool:
        return self._sequence is not None

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    def status(self) -> Dict[str, Any]:
        return {
            "state":       self.state.value,
            "algorithm":   self.algorithm.key if self.algorithm else None,
            "delay_ms":    self.delay_ms,
            "steps_taken": self.steps_taken,
            "size":        len(self.records),
            "timer_armed": self.timer_armed,
            "last_error":  self.last_error.to_dict() if self.last_error else None,
        }

    # ------------------------------------------------------------------
    # Internal: timer
    # ------------------------------------------------------------------
    def _arm(self) -> None:
        self._timer = self._scheduler.call_later(self.delay_ms / 1000.0, self._on_tick)

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_tick(self) -> None:
        self._timer = None
        try:
            snapshot = self._safe_pull()
        except VisualizerError as exc:
            self._abort(exc)
            return
        if snapshot is not None:
            self._arm()

    # ------------------------------------------------------------------
    # Internal: sequence
    # ------------------------------------------------------------------
    def _safe_pull(self) -> Optional[RecordList]:
        """_pull, with any non-engine exception wrapped in StepFailed."""
        try:
            return self._pull()
        except VisualizerError:
            raise
        except Exception as exc:
            raise StepFailed(self.steps_taken + 1, exc) from exc

    def _pull(self) -> Optional[RecordList]:
        """Pull one snapshot and publish it; on exhaustion finish the run."""
        snapshot = self._sequence.pull()
        if snapshot is None:
            if self._checker is not None:
                self._checker.check_final(self._sequence.snapshot(), self.steps_taken)
            self._finish()
            return None
        if self._checker is not None:
            self._checker.check_snapshot(snapshot, self.steps_taken + 1)
        self.steps_taken += 1
        self.records = snapshot
        self._publish(snapshot)
        return snapshot

    def _finish(self) -> None:
        logger.debug(
            "%s finished after %d steps",
            self.algorithm.key if self.algorithm else "run", self.steps_taken,
        )
        self._teardown()
        self.state = PlaybackState.IDLE

    def _abort(self, exc: VisualizerError) -> None:
        logger.error(
            "run aborted at step %d: %s", self.steps_taken, exc,
            exc_info=exc if isinstance(exc, StepFailed) else None,
        )
        self._teardown()
        self.state = PlaybackState.IDLE
        self.last_error = exc

    def _teardown(self) -> None:
        self._disarm()
        self._sequence = None
        self._checker = None

    def _publish(self, records: RecordList) -> None:
        if self._renderer is not None:
            self._renderer.publish(records)

    # ------------------------------------------------------------------
    # Internal: results
    # ------------------------------------------------------------------
    def _ok(self, snapshot: Optional[RecordList] = None) -> CommandResult:
        return CommandResult(ok=True, state=self.state, snapshot=snapshot)

    def _reject(self, command: str) -> CommandResult:
        exc = InvalidTransition(command, self.state.value)
        logger.info("rejected: %s", exc)
        return CommandResult(ok=False, state=self.state, error=exc)

    def _fail(self, exc: VisualizerError) -> CommandResult:
        logger.info("command failed: %s", exc)
        return CommandResult(ok=False, state=self.state, error=exc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _check_delay(delay_ms: Any) -> int:
    if not isinstance(delay_ms, int) or isinstance(delay_ms, bool) or delay_ms < 0:
        raise InvalidArgument(f"Delay must be a non-negative integer (ms), got {delay_ms!r}")
    return delay_ms
