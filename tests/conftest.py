import random

import pytest

from gridsnake.config import GameConfig
from gridsnake.context import GameContext
from gridsnake.session import SessionTable
from gridsnake.world import World


class FakeHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.callback()


class FakeScheduler:
    """Records ``call_later`` requests so tests can fire them by hand."""

    def __init__(self):
        self.handles = []

    def __call__(self, delay, callback):
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle


class FakeClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def world(rng):
    return World(rng=rng)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def scheduler():
    return FakeScheduler()


@pytest.fixture()
def sessions(world, clock):
    return SessionTable(world, clock=clock)


@pytest.fixture()
def ctx(world, sessions, clock, scheduler):
    return GameContext(
        config=GameConfig(),
        world=world,
        sessions=sessions,
        clock=clock,
        scheduler=scheduler,
    )
