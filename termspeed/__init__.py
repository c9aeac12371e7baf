"""
termspeed - an animated terminal speed test visualizer.

Phases advance from locating a server through ping, download and upload,
while a polar dial and a history chart animate toward synthetic speeds.
"""

__version__ = "0.1.0"
