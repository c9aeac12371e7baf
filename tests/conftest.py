import pytest

from termspeed.config import Config
from termspeed.signals import FixedRandomSource
from termspeed.state import Orchestrator


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fixed_random():
    return FixedRandomSource(37)


@pytest.fixture
def orchestrator(clock, fixed_random):
    orch = Orchestrator(clock=clock, random_source=fixed_random)
    orch.start()
    return orch


@pytest.fixture
def fast_config():
    return Config(ping_delay=0, download_duration=0, upload_delay=0,
                  upload_duration=0, offline=True, seed=7)
