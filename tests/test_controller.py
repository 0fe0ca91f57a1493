"""Tests for ``engine.controller`` — the playback state machine."""

import asyncio

import pytest

from algorithms import SortKind, StepSequence
from engine import PlaybackController, PlaybackState, SPEED_PRESETS, TickScheduler
from errors import (
    GeneratorExhaustedError,
    InvalidArgument,
    InvalidTransition,
    InvariantViolation,
    StepFailed,
    UnknownAlgorithm,
)
from records import values_of

from conftest import RecordingRenderer, make_records

BUBBLE_STEPS = [
    [3, 5, 1, 4, 2],
    [3, 1, 5, 4, 2],
    [3, 1, 4, 5, 2],
    [3, 1, 4, 2, 5],
    [1, 3, 4, 2, 5],
    [1, 3, 2, 4, 5],
    [1, 2, 3, 4, 5],
]


class TestPlay:
    def test_initial_state(self, controller):
        assert controller.state is PlaybackState.IDLE
        assert not controller.has_sequence
        assert not controller.timer_armed

    def test_play_arms_timer(self, controller, renderer):
        result = controller.play(100, "bubbleSort")
        assert result.ok
        assert result.state is PlaybackState.RUNNING
        assert controller.timer_armed
        assert controller.has_sequence
        assert renderer.published == []

    def test_ticks_publish_one_snapshot_each(self, controller, renderer, run_ms):
        controller.play(100, "bubbleSort")
        run_ms(99)
        assert renderer.values == []
        run_ms(1)
        assert renderer.values == BUBBLE_STEPS[:1]
        run_ms(200)
        assert renderer.values == BUBBLE_STEPS[:3]

    def test_drains_to_idle(self, controller, renderer, run_ms):
        controller.play(10, "bubbleSort")
        run_ms(1000)
        assert renderer.values == BUBBLE_STEPS
        assert controller.state is PlaybackState.IDLE
        assert not controller.timer_armed
        assert not controller.has_sequence
        assert values_of(controller.records) == [1, 2, 3, 4, 5]
        assert controller.steps_taken == len(BUBBLE_STEPS)

    def test_accepts_sort_kind(self, controller):
        assert controller.play(10, SortKind.MERGE).ok
        assert controller.algorithm.key == "mergeSort"

    def test_play_with_explicit_records(self, controller, clock, run_ms):
        controller.play(0, "selectionSort", records=make_records([2, 1], clock))
        run_ms(0)
        run_ms(0)
        assert values_of(controller.records) == [1, 2]

    @pytest.mark.parametrize("setup", ["running", "paused"])
    def test_play_rejected_while_live(self, controller, setup):
        controller.play(100, "bubbleSort")
        if setup == "paused":
            controller.pause()
        result = controller.play(100, "quickSort")
        assert not result.ok
        assert isinstance(result.error, InvalidTransition)
        assert result.error_kind == "invalid_transition"
        assert controller.algorithm.key == "bubbleSort"

    def test_unknown_algorithm(self, controller):
        result = controller.play(100, "heapSort")
        assert not result.ok
        assert isinstance(result.error, UnknownAlgorithm)
        assert controller.state is PlaybackState.IDLE

    @pytest.mark.parametrize("delay", [-1, 1.5, "100", None, True])
    def test_bad_delay(self, controller, delay):
        result = controller.play(delay, "bubbleSort")
        assert not result.ok
        assert isinstance(result.error, InvalidArgument)
        assert controller.state is PlaybackState.IDLE

    def test_play_then_stop_before_tick(self, controller, renderer, run_ms):
        controller.play(100, "selectionSort")
        assert controller.stop().ok
        run_ms(1000)
        assert renderer.published == []
        assert controller.state is PlaybackState.IDLE

    @pytest.mark.parametrize("key", [k.value for k in SortKind])
    def test_empty_list_finishes_on_first_tick(self, clock, scheduler, renderer, key):
        ctl = PlaybackController(scheduler=scheduler, renderer=renderer, clock=clock)
        ctl.play(0, key)
        clock.advance(0)
        scheduler.run_due()
        assert ctl.state is PlaybackState.IDLE
        assert renderer.published == []


class TestPauseUnpause:
    def test_pause_cancels_timer(self, controller, renderer, run_ms):
        controller.play(100, "bubbleSort")
        run_ms(100)
        assert controller.pause().state is PlaybackState.PAUSED
        assert not controller.timer_armed
        run_ms(1000)
        assert len(renderer.published) == 1

    def test_resume_continues_where_it_left_off(self, controller, renderer, run_ms):
        controller.play(100, "bubbleSort")
        run_ms(300)
        controller.pause()
        run_ms(5000)
        assert controller.unpause().state is PlaybackState.RUNNING
        run_ms(100)
        assert renderer.values == BUBBLE_STEPS[:4]
        run_ms(1000)
        assert renderer.values == BUBBLE_STEPS

    def test_pause_unpause_matches_uninterrupted_run(self, clock, scheduler, run_ms):
        values = [9, 4, 7, 1, 8, 2, 6, 3, 5, 0]

        def run(interrupt_after):
            ren = RecordingRenderer()
            ctl = PlaybackController(
                records=make_records(values, clock), scheduler=scheduler,
                renderer=ren, clock=clock,
            )
            ctl.play(10, "quickSort")
            if interrupt_after is not None:
                run_ms(10 * interrupt_after)
                ctl.pause()
                run_ms(777)
                ctl.unpause()
            run_ms(10_000)
            return ren.values

        assert run(4) == run(None)

    def test_pause_rejected_unless_running(self, controller):
        assert isinstance(controller.pause().error, InvalidTransition)
        controller.play(100, "bubbleSort")
        controller.pause()
        assert isinstance(controller.pause().error, InvalidTransition)

    def test_unpause_rejected_unless_paused(self, controller):
        assert isinstance(controller.unpause().error, InvalidTransition)
        controller.play(100, "bubbleSort")
        assert isinstance(controller.unpause().error, InvalidTransition)


class TestStop:
    def test_stop_is_idempotent(self, controller):
        controller.play(100, "bubbleSort")
        first = controller.stop()
        second = controller.stop()
        assert first.ok and second.ok
        assert first.state is second.state is PlaybackState.IDLE
        assert second.error is None

    def test_stop_from_paused_discards_sequence(self, controller, run_ms):
        controller.play(100, "bubbleSort")
        run_ms(100)
        controller.pause()
        controller.stop()
        assert not controller.has_sequence
        assert values_of(controller.records) == BUBBLE_STEPS[0]

    def test_play_after_stop_starts_from_current_list(self, controller, renderer, run_ms):
        controller.play(100, "bubbleSort")
        run_ms(100)
        controller.stop()
        controller.play(100, "bubbleSort")
        run_ms(100)
        assert renderer.values[-1] == BUBBLE_STEPS[1]


class TestStep:
    def test_step_rejected_when_idle(self, controller):
        result = controller.step()
        assert isinstance(result.error, InvalidTransition)

    def test_step_while_paused(self, controller, renderer):
        controller.play(100, "bubbleSort")
        controller.pause()
        result = controller.step()
        assert result.ok
        assert values_of(result.snapshot) == BUBBLE_STEPS[0]
        assert controller.state is PlaybackState.PAUSED
        assert not controller.timer_armed

    def test_step_while_running_restarts_interval(self, controller, renderer, run_ms):
        controller.play(100, "bubbleSort")
        run_ms(60)
        controller.step()
        assert controller.state is PlaybackState.RUNNING
        run_ms(60)
        assert renderer.values == BUBBLE_STEPS[:1]
        run_ms(40)
        assert renderer.values == BUBBLE_STEPS[:2]

    def test_step_to_exhaustion(self, controller):
        controller.play(100, "bubbleSort")
        controller.pause()
        for _ in BUBBLE_STEPS:
            assert controller.step().snapshot is not None
        last = controller.step()
        assert last.ok
        assert last.snapshot is None
        assert last.state is PlaybackState.IDLE
        assert isinstance(controller.step().error, InvalidTransition)


class TestDelay:
    def test_set_delay_while_running_does_not_skip_or_duplicate(self, controller, renderer, run_ms):
        controller.play(100, "bubbleSort")
        run_ms(100)
        run_ms(50)
        assert controller.set_delay(300).ok
        run_ms(250)
        assert renderer.values == BUBBLE_STEPS[:1]
        run_ms(50)
        assert renderer.values == BUBBLE_STEPS[:2]
        run_ms(300)
        assert renderer.values == BUBBLE_STEPS[:3]

    def test_set_delay_when_idle_is_used_by_next_play(self, controller):
        controller.set_delay(250)
        assert controller.delay_ms == 250

    def test_bad_delay_keeps_old_value(self, controller):
        controller.set_delay(40)
        result = controller.set_delay(-5)
        assert isinstance(result.error, InvalidArgument)
        assert controller.delay_ms == 40

    def test_speed_presets(self, controller):
        assert controller.set_speed("fast").ok
        assert controller.delay_ms == SPEED_PRESETS["fast"]
        assert isinstance(controller.set_speed("ludicrous").error, InvalidArgument)

    def test_zero_delay_back_to_back(self, clock, renderer):
        scheduler = TickScheduler(clock=clock, max_callbacks=3)
        ctl = PlaybackController(
            records=make_records([5, 3, 1, 4, 2], clock),
            scheduler=scheduler, renderer=renderer, clock=clock,
        )
        ctl.play(0, "bubbleSort")
        scheduler.run_due()
        assert renderer.values == BUBBLE_STEPS[:3]
        while ctl.state is PlaybackState.RUNNING:
            scheduler.run_due()
        assert renderer.values == BUBBLE_STEPS


class TestRecordEditing:
    def test_shuffle_when_idle(self, controller, renderer):
        result = controller.shuffle()
        assert result.ok
        assert sorted(values_of(controller.records)) == [1, 2, 3, 4, 5]
        assert renderer.published[-1] == controller.records

    def test_shuffle_rejected_while_live(self, controller):
        controller.play(100, "bubbleSort")
        before = controller.records
        assert isinstance(controller.shuffle().error, InvalidTransition)
        controller.pause()
        assert isinstance(controller.shuffle().error, InvalidTransition)
        assert controller.records == before

    def test_reset(self, controller, clock):
        assert controller.reset(make_records([9, 8], clock)).ok
        assert values_of(controller.records) == [9, 8]

    def test_reset_rejected_while_live(self, controller, clock):
        controller.play(100, "bubbleSort")
        assert isinstance(controller.reset(make_records([1], clock)).error, InvalidTransition)

    def test_add_record(self, controller):
        assert controller.add_record(77).ok
        assert controller.records[-1].value == 77
        assert controller.add_record().ok
        assert 0 <= controller.records[-1].value <= controller.max_value
        assert len(controller.records) == 7

    def test_add_record_rejects_non_numbers(self, controller):
        assert isinstance(controller.add_record("7").error, InvalidArgument)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_values_rejected(self, controller, value):
        before = controller.records
        assert isinstance(controller.add_record(value).error, InvalidArgument)
        assert isinstance(controller.edit_record(before[0].id, value).error, InvalidArgument)
        assert controller.records == before

    def test_record_limit(self, clock, scheduler):
        ctl = PlaybackController(
            records=make_records([3, 1], clock), scheduler=scheduler, clock=clock, max_records=3,
        )
        assert ctl.add_record(5).ok
        assert isinstance(ctl.add_record(6).error, InvalidArgument)
        assert len(ctl.records) == 3
        assert isinstance(ctl.reset(make_records([1, 2, 3, 4], clock)).error, InvalidArgument)
        assert ctl.reset(make_records([1, 2], clock)).ok

    def test_edit_record(self, controller, clock):
        target = controller.records[2]
        clock.advance(5)
        assert controller.edit_record(target.id, 42).ok
        edited = controller.records[2]
        assert (edited.id, edited.value, edited.updated_at) == (target.id, 42, clock.now)

    def test_edit_unknown_id(self, controller):
        assert isinstance(controller.edit_record("nope", 1).error, InvalidArgument)

    def test_edit_rejected_while_live(self, controller):
        controller.play(100, "bubbleSort")
        assert isinstance(controller.edit_record(controller.records[0].id, 1).error, InvalidTransition)


class TestFailures:
    class Broken(StepSequence):
        """Duplicates the first record on its first step."""

        key = "broken"

        def _advance(self):
            if self.steps_yielded:
                return False
            self._rows[1] = self._rows[0]
            return True

    class Leaky(StepSequence):
        """Reports exhaustion but leaves the list unsorted."""

        key = "leaky"

        def _advance(self):
            return False

    def _install(self, controller, seq):
        controller.play(100, "bubbleSort")
        controller._sequence = seq

    def test_invariant_violation_aborts_tick(self, controller, renderer, run_ms):
        self._install(controller, self.Broken(controller.records))
        run_ms(100)
        assert controller.state is PlaybackState.IDLE
        assert isinstance(controller.last_error, InvariantViolation)
        assert controller.last_error.detail["unexpected"] == [5]
        assert not controller.timer_armed
        assert renderer.published == []

    def test_unsorted_exhaustion_is_a_violation(self, controller):
        self._install(controller, self.Leaky(controller.records))
        result = controller.step()
        assert not result.ok
        assert isinstance(result.error, InvariantViolation)
        assert controller.state is PlaybackState.IDLE

    def test_exhausted_sequence_pull_is_recoverable(self, controller):
        seq = self.Leaky(controller.records)
        seq.pull()
        self._install(controller, seq)
        result = controller.step()
        assert isinstance(result.error, GeneratorExhaustedError)
        assert controller.state is PlaybackState.IDLE
        assert not controller.has_sequence
        assert controller.play(0, "bubbleSort").ok

    class FailingRenderer:
        def publish(self, records):
            raise RuntimeError("renderer down")

    def _failing(self, clock, scheduler):
        ctl = PlaybackController(
            records=make_records([5, 3, 1, 4, 2], clock),
            scheduler=scheduler, renderer=self.FailingRenderer(), clock=clock,
        )
        ctl.play(100, "bubbleSort")
        return ctl

    def test_renderer_failure_aborts_tick(self, clock, scheduler, run_ms):
        ctl = self._failing(clock, scheduler)
        assert run_ms(100) == 1
        assert ctl.state is PlaybackState.IDLE
        assert not ctl.timer_armed
        assert not ctl.has_sequence
        assert isinstance(ctl.last_error, StepFailed)
        assert isinstance(ctl.last_error.__cause__, RuntimeError)
        assert ctl.status()["last_error"]["kind"] == "step_failed"
        assert run_ms(10_000) == 0
        assert ctl.play(100, "bubbleSort").ok

    def test_renderer_failure_aborts_step(self, clock, scheduler):
        ctl = self._failing(clock, scheduler)
        result = ctl.step()
        assert not result.ok
        assert isinstance(result.error, StepFailed)
        assert result.state is PlaybackState.IDLE
        assert scheduler.pending == 0

    def test_last_error_cleared_by_next_play(self, controller, run_ms):
        self._install(controller, self.Broken(controller.records))
        run_ms(100)
        controller.play(100, "bubbleSort")
        assert controller.last_error is None
        assert controller.status()["last_error"] is None


class TestSession:
    def test_close_cancels_and_stops(self, controller, renderer, run_ms):
        controller.play(100, "bubbleSort")
        assert controller.close().state is PlaybackState.STOPPED
        run_ms(1000)
        assert renderer.published == []

    def test_play_from_stopped(self, controller):
        controller.close()
        assert controller.play(100, "bubbleSort").state is PlaybackState.RUNNING

    def test_status(self, controller):
        controller.play(250, "quickSort")
        status = controller.status()
        assert status["state"] == "running"
        assert status["algorithm"] == "quickSort"
        assert status["delay_ms"] == 250
        assert status["size"] == 5
        assert status["timer_armed"] is True


class TestAsyncioLoop:
    def test_runs_on_an_event_loop(self):
        async def scenario():
            loop = asyncio.get_running_loop()
            renderer = RecordingRenderer()
            ctl = PlaybackController(
                records=make_records([5, 3, 1, 4, 2]),
                scheduler=loop, renderer=renderer, validate=True,
            )
            ctl.play(0, "bubbleSort")
            while ctl.state is PlaybackState.RUNNING:
                await asyncio.sleep(0.001)
            return renderer.values

        assert asyncio.run(scenario()) == BUBBLE_STEPS
