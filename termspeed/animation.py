"""Exponential smoothing between the target speed and what the dial shows."""

import math

SMOOTHING_FACTOR = 0.15
SNAP_THRESHOLD = 0.5


def step(displayed: float, target: float,
         gain: float = SMOOTHING_FACTOR, snap: float = SNAP_THRESHOLD) -> float:
    """Move displayed one tick toward target.

    Within `snap` of the target the value jumps onto it, so the needle
    settles instead of creeping. The result is always finite and >= 0.
    """
    if not math.isfinite(target):
        target = 0.0
    if not math.isfinite(displayed):
        return max(0.0, target)

    diff = target - displayed
    if abs(diff) > snap:
        displayed += diff * gain
    else:
        displayed = target

    return max(0.0, displayed)
