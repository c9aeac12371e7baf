"""
Test orchestrator: phases, the run state, and the transitions between them.

Each transition is a plain function taking the current RunState and an
event and returning the next RunState; the Orchestrator owns the current
state, dispatches events to transitions and tells the terminal loop what to
do next (arm a tick, start or stop the background stages, quit).
"""

import logging
import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, List, Optional

from . import animation, signals
from .errors import OrchestratorFault
from .events import (
    QUIT_KEYS, RESTART_KEYS, STAGE_EVENTS,
    DownloadSettled, KeyPressed, PingMeasured, ServerLocated,
    StageFailed, TestCompleted, Tick, UploadStarted,
)
from .history import HISTORY_CAPACITY, HistoryBuffer

logger = logging.getLogger(__name__)


class TestPhase(Enum):
    INIT = 'init'
    PING = 'ping'
    DOWNLOADING = 'downloading'
    UPLOADING = 'uploading'
    COMPLETE = 'complete'
    ERROR = 'error'

    __test__ = False


ANIMATED_PHASES = frozenset({TestPhase.DOWNLOADING, TestPhase.UPLOADING})
TERMINAL_PHASES = frozenset({TestPhase.COMPLETE, TestPhase.ERROR})


class Command(Enum):
    SCHEDULE_TICK = 'schedule_tick'
    START_STAGES = 'start_stages'
    STOP_STAGES = 'stop_stages'
    QUIT = 'quit'


@dataclass
class RunState:
    phase: TestPhase = TestPhase.INIT
    download_speed: float = 0.0
    upload_speed: float = 0.0
    ping: float = 0.0
    server_label: str = ''
    displayed_value: float = 0.0
    target_value: float = 0.0
    history: HistoryBuffer = field(default_factory=HistoryBuffer)
    start_time: float = 0.0
    duration: Optional[float] = None
    last_error: Optional[str] = None
    run_id: int = 0

    def evolve(self, **changes):
        """Copy with changes applied; the history is copied too unless replaced"""
        changes.setdefault('history', self.history.copy())
        return replace(self, **changes)


def fresh_state(run_id: int, start_time: float, history_capacity: int = HISTORY_CAPACITY) -> RunState:
    return RunState(history=HistoryBuffer(history_capacity),
                    start_time=start_time, run_id=run_id)


def _require_phase(state: RunState, event, *phases: TestPhase):
    if state.phase not in phases:
        raise OrchestratorFault(
            f"{type(event).__name__} received during {state.phase.value} phase")


def _speed(value, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OrchestratorFault(f"{name} is not a number: {value!r}")
    if not math.isfinite(value) or value < 0:
        raise OrchestratorFault(f"{name} out of range: {value!r}")
    return float(value)


# Transitions

def on_server_located(state: RunState, event: ServerLocated, now: float) -> RunState:
    _require_phase(state, event, TestPhase.INIT)
    if not isinstance(event.label, str):
        raise OrchestratorFault(f"server label is not a string: {event.label!r}")
    return state.evolve(phase=TestPhase.PING, server_label=event.label)


def on_ping_measured(state: RunState, event: PingMeasured, now: float) -> RunState:
    _require_phase(state, event, TestPhase.PING)
    return state.evolve(phase=TestPhase.DOWNLOADING,
                        ping=_speed(event.ping, 'ping'),
                        displayed_value=0.0,
                        target_value=0.0)


def on_download_settled(state: RunState, event: DownloadSettled, now: float) -> RunState:
    _require_phase(state, event, TestPhase.DOWNLOADING)
    speed = _speed(event.speed, 'download speed')
    next_state = state.evolve(download_speed=speed, target_value=speed)
    next_state.history.push(speed)
    return next_state


def on_upload_started(state: RunState, event: UploadStarted, now: float) -> RunState:
    _require_phase(state, event, TestPhase.DOWNLOADING)
    speed = _speed(event.speed, 'upload speed')
    return state.evolve(phase=TestPhase.UPLOADING,
                        upload_speed=speed,
                        target_value=speed)


def on_test_completed(state: RunState, event: TestCompleted, now: float) -> RunState:
    _require_phase(state, event, TestPhase.UPLOADING)
    download = _speed(event.download, 'download speed')
    upload = _speed(event.upload, 'upload speed')
    top = max(download, upload)
    return state.evolve(phase=TestPhase.COMPLETE,
                        download_speed=download,
                        upload_speed=upload,
                        ping=_speed(event.ping, 'ping'),
                        server_label=str(event.server),
                        duration=max(0.0, now - state.start_time),
                        target_value=top,
                        displayed_value=top)


def on_stage_failed(state: RunState, event: StageFailed, now: float) -> RunState:
    raise OrchestratorFault(f"background stage failed: {event.error}")


def on_tick(state: RunState, now: float, random_source) -> RunState:
    """Recompute the target inside the phase window and step the animation"""
    if state.phase not in ANIMATED_PHASES:
        return state

    elapsed = now - state.start_time
    changes = {}
    history = state.history

    if state.phase is TestPhase.DOWNLOADING:
        target = state.target_value
        if signals.in_window(elapsed, signals.DOWNLOAD_WINDOW):
            target = signals.download_target(elapsed, random_source.next_seed())
            changes['download_speed'] = target
            history = history.copy()
            history.push(target)
    else:
        target = state.target_value
        if signals.in_window(elapsed, signals.UPLOAD_WINDOW):
            target = signals.upload_target(elapsed, random_source.next_seed())
            changes['upload_speed'] = target

    return state.evolve(target_value=target,
                        displayed_value=animation.step(state.displayed_value, target),
                        history=history,
                        **changes)


def fail(state: RunState, message: str) -> RunState:
    return state.evolve(phase=TestPhase.ERROR, last_error=message)


TRANSITIONS = {
    ServerLocated: on_server_located,
    PingMeasured: on_ping_measured,
    DownloadSettled: on_download_settled,
    UploadStarted: on_upload_started,
    TestCompleted: on_test_completed,
    StageFailed: on_stage_failed,
}


class Orchestrator:
    """Owns the RunState and turns events into state changes and commands"""

    def __init__(self, clock: Callable[[], float] = time.monotonic,
                 random_source=None, history_capacity: int = HISTORY_CAPACITY):
        self.clock = clock
        self.random_source = random_source or signals.SystemRandomSource()
        self.history_capacity = history_capacity
        self._runs = 0
        self.state = fresh_state(0, clock(), history_capacity)

    def start(self) -> List[Command]:
        """Replace the state with a fresh run and ask for its stage chain"""
        self._runs += 1
        self.state = fresh_state(self._runs, self.clock(), self.history_capacity)
        logger.info("Run %d started", self._runs)
        return [Command.START_STAGES]

    def handle(self, event) -> List[Command]:
        if isinstance(event, KeyPressed):
            return self._on_key(event.key)
        if isinstance(event, Tick):
            return self._on_tick(event.now)

        if isinstance(event, STAGE_EVENTS):
            if event.run_id != self.state.run_id:
                logger.debug("Discarding %s from run %d (current run %d)",
                             type(event).__name__, event.run_id, self.state.run_id)
                return []
            if self.state.phase in TERMINAL_PHASES:
                logger.debug("Ignoring %s after %s", type(event).__name__, self.state.phase.value)
                return []

        transition = TRANSITIONS.get(type(event))
        previous = self.state.phase
        try:
            if transition is None:
                raise OrchestratorFault(f"unknown event: {event!r}")
            self.state = transition(self.state, event, self.clock())
        except OrchestratorFault as e:
            return self._fault(str(e))

        if self.state.phase is not previous:
            logger.info("Phase %s -> %s", previous.value, self.state.phase.value)
        if previous is TestPhase.PING and self.state.phase is TestPhase.DOWNLOADING:
            return [Command.SCHEDULE_TICK]
        return []

    def _on_key(self, key: str) -> List[Command]:
        if key in QUIT_KEYS:
            return [Command.QUIT]
        if key in RESTART_KEYS and self.state.phase in TERMINAL_PHASES:
            logger.info("Restart requested from %s", self.state.phase.value)
            return [Command.STOP_STAGES] + self.start()
        return []

    def _on_tick(self, now: float) -> List[Command]:
        if self.state.phase not in ANIMATED_PHASES:
            return []
        self.state = on_tick(self.state, now, self.random_source)
        logger.debug("Tick target=%.2f displayed=%.2f",
                     self.state.target_value, self.state.displayed_value)
        return [Command.SCHEDULE_TICK]

    def _fault(self, message: str) -> List[Command]:
        logger.error("Run %d failed: %s", self.state.run_id, message)
        self.state = fail(self.state, message)
        return [Command.STOP_STAGES]
