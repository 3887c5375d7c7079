import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from strata_core.clock import VirtualClock
from strata_core.config import TimelineConfig
from strata_core.scheduler import Scheduler
from strata_core.surface import Surface


class SequenceRandom:
    """Random source replaying a fixed sequence of samples (cycling)."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def random(self) -> float:
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


@pytest.fixture
def clock():
    return VirtualClock(frame_interval_ms=16.0)


@pytest.fixture
def surface():
    return Surface()


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock, TimelineConfig())


@pytest.fixture
def stage(clock, surface, scheduler):
    """Surface with one mounted container, plus its clock and scheduler."""
    surface.add_container("#viz")
    return clock, surface, scheduler
