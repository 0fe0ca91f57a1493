"""
Shared pytest fixtures for the sorting visualizer tests.

This module provides:
- FakeClock: a manually advanced monotonic clock
- TickScheduler bound to the fake clock
- RecordingRenderer: keeps every published snapshot
- A controller wired to all of the above
- A Flask test client with a fresh playback session
"""

import random
from typing import List, Sequence

import pytest

from engine import PlaybackController, TickScheduler
from records import Record, RecordList, from_values, values_of


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingRenderer:
    def __init__(self):
        self.published: List[RecordList] = []

    def publish(self, records: RecordList) -> None:
        self.published.append(records)

    @property
    def values(self) -> List[list]:
        return [values_of(s) for s in self.published]


def make_records(values: Sequence, clock=None) -> List[Record]:
    return from_values(values, clock) if clock else from_values(values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock) -> TickScheduler:
    return TickScheduler(clock=clock)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def controller(clock, scheduler, renderer) -> PlaybackController:
    return PlaybackController(
        records=make_records([5, 3, 1, 4, 2], clock),
        scheduler=scheduler,
        renderer=renderer,
        validate=True,
        rng=random.Random(7),
        clock=clock,
    )


@pytest.fixture
def run_ms(clock, scheduler):
    """Advance virtual time by `ms` milliseconds and fire due ticks."""

    def _run(ms: float) -> int:
        clock.advance(ms / 1000.0)
        return scheduler.run_due()

    return _run


@pytest.fixture
def app_client(clock):
    import config
    import main

    main.app.config.from_mapping(config.TestingSettings().to_flask())
    playback = main.init_playback(main.app, clock=clock)
    main.app.testing = True
    with main.app.test_client() as client:
        client.playback = playback
        client.clock = clock
        yield client
