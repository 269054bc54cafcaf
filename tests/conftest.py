"""Shared fixtures: a controllable clock and a recording membership resolver."""

from datetime import datetime, timedelta, timezone

import pytest

from lunchbot.engine import LunchBotEngine

CHANNEL = "#lunch"
T0 = datetime(2024, 5, 6, 11, 0, 0, 123456, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingResolver:
    """Membership resolver returning a fixed member list and recording channels asked for."""

    def __init__(self, members=None):
        self.members = list(members or [])
        self.calls = []

    def __call__(self, channel):
        self.calls.append(channel)
        return list(self.members)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    return LunchBotEngine(CHANNEL, clock=clock)


@pytest.fixture
def resolver():
    return RecordingResolver(["alice|lunch", "bob|work", "carol"])
