"""
Synthetic speed signals.

Every value shown on the dial comes from here: a ramp-up-then-jitter curve
for the live download and upload phases, plus the resampled values reported
at stage boundaries. Randomness enters only through a RandomSource so a run
can be replayed from a seed.
"""

import math
import random
from typing import Optional, Sequence, Tuple

DOWNLOAD_WINDOW = (2.0, 7.0)
UPLOAD_WINDOW = (7.0, 11.0)

DOWNLOAD_FLOOR = 5.0
UPLOAD_FLOOR = 8.0


class SystemRandomSource:
    """Seeds drawn from a private random.Random, optionally seeded for replay"""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def next_seed(self) -> int:
        return self._rng.getrandbits(32)

    def choice(self, items: Sequence):
        return items[self.next_seed() % len(items)]


class FixedRandomSource:
    """Returns the given seeds in order, repeating the last one forever."""

    def __init__(self, *seeds: int):
        if not seeds:
            seeds = (0,)
        self._seeds = list(seeds)
        self._index = 0

    def next_seed(self) -> int:
        seed = self._seeds[min(self._index, len(self._seeds) - 1)]
        self._index += 1
        return seed

    def choice(self, items: Sequence):
        return items[self.next_seed() % len(items)]


def clamp(value, low=0.0, high=1.0):
    return max(low, min(high, value))


def in_window(elapsed: float, window: Tuple[float, float]) -> bool:
    """True when elapsed lies strictly inside the (start, end) window"""
    start, end = window
    return start < elapsed < end


def download_target(elapsed: float, seed: int) -> float:
    max_speed = 50.0 + (seed % 50)
    progress = clamp((elapsed - DOWNLOAD_WINDOW[0]) / 5.0)
    variation = math.sin(elapsed * 2) * 5.0
    target = max_speed * (0.2 + 0.8 * progress) + variation
    if target < 0:
        target = DOWNLOAD_FLOOR
    return target


def upload_target(elapsed: float, seed: int) -> float:
    max_speed = 25.0 + (seed % 25)
    progress = clamp((elapsed - UPLOAD_WINDOW[0]) / 4.0)
    variation = math.sin(elapsed * 3) * 3.0
    target = max_speed * (0.3 + 0.7 * progress) + variation
    if target < 0:
        target = UPLOAD_FLOOR
    return target


# Values reported by the background stages

def final_download(seed: int) -> float:
    return 50.0 + (seed % 50)


def final_upload(seed: int) -> float:
    return 25.0 + (seed % 25)


def fallback_ping(seed: int) -> float:
    return 15.0 + (seed % 20)


def settled_download(seed: int) -> float:
    return 15.0 + (seed % 80)


def upload_baseline(seed: int) -> float:
    return 8.0 + (seed % 40)
