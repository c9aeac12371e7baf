from termspeed.events import (
    DownloadSettled, PingMeasured, ServerLocated,
    StageFailed, TestCompleted, UploadStarted,
)
from termspeed.signals import FixedRandomSource
from termspeed.stages import StageChain
from termspeed.state import Orchestrator, TestPhase


class StubLocator:
    def __init__(self, label="Mumbai, MH", error=None):
        self.label = label
        self.error = error

    def locate(self):
        if self.error:
            raise self.error
        return self.label


class StubProbe:
    def measure(self):
        return 18.0


def make_chain(config, post, run_id=1, locator=None):
    return StageChain(run_id, post, locator or StubLocator(), StubProbe(),
                      FixedRandomSource(37), config)


def test_chain_posts_one_event_per_stage_in_order(fast_config):
    events = []
    make_chain(fast_config, events.append, run_id=4).run()

    assert [type(e) for e in events] == [
        ServerLocated, PingMeasured, DownloadSettled, UploadStarted, TestCompleted,
    ]
    assert all(e.run_id == 4 for e in events)
    assert events[0].label == "Mumbai, MH"
    assert events[1].ping == 18.0
    assert events[2].speed == 52.0
    assert events[3].speed == 45.0
    assert events[4] == TestCompleted(4, download=87.0, upload=37.0, ping=32.0,
                                      server="Mumbai, MH")


def test_cancelled_chain_posts_nothing(fast_config):
    events = []
    chain = make_chain(fast_config, events.append)
    chain.cancel()
    chain.run()
    assert events == []


def test_cancel_mid_chain_stops_further_stages(fast_config):
    events = []
    chain = make_chain(fast_config, None)

    def post(event):
        events.append(event)
        chain.cancel()

    chain.post = post
    chain.run()
    assert [type(e) for e in events] == [ServerLocated]


def test_unexpected_stage_error_becomes_stage_failed(fast_config):
    events = []
    locator = StubLocator(error=RuntimeError("resolver exploded"))
    make_chain(fast_config, events.append, locator=locator).run()
    assert events == [StageFailed(1, "resolver exploded")]


def test_threaded_chain_drives_orchestrator_to_completion(fast_config, clock):
    orch = Orchestrator(clock=clock, random_source=FixedRandomSource(37))
    orch.start()
    events = []
    chain = make_chain(fast_config, events.append, run_id=orch.state.run_id).start()
    chain.join(timeout=5.0)
    assert not chain.thread.is_alive()

    for event in events:
        orch.handle(event)
    state = orch.state
    assert state.phase is TestPhase.COMPLETE
    assert state.server_label == "Mumbai, MH"
    assert state.download_speed == 87.0
    assert list(state.history) == [52.0]
