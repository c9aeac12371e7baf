"""
Messages delivered to the orchestrator.

Ticks and key presses come from the terminal loop. Everything else is
posted by the background stage chain and carries the run_id of the run that
started it, so results from an abandoned run can be told apart.
"""

from dataclasses import dataclass

QUIT_KEYS = frozenset({'q', 'Q', '\x1b', '\x03'})
RESTART_KEYS = frozenset({'r', 'R'})


@dataclass(frozen=True)
class Tick:
    now: float


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class ServerLocated:
    run_id: int
    label: str


@dataclass(frozen=True)
class PingMeasured:
    run_id: int
    ping: float


@dataclass(frozen=True)
class DownloadSettled:
    run_id: int
    speed: float


@dataclass(frozen=True)
class UploadStarted:
    run_id: int
    speed: float


@dataclass(frozen=True)
class TestCompleted:
    run_id: int
    download: float
    upload: float
    ping: float
    server: str

    # not a test case
    __test__ = False


@dataclass(frozen=True)
class StageFailed:
    run_id: int
    error: str


STAGE_EVENTS = (ServerLocated, PingMeasured, DownloadSettled,
                UploadStarted, TestCompleted, StageFailed)
