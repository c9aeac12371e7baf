"""
Runtime configuration for termspeed.

All tunables live on a single dataclass so the harness, the background
stages and the tests read the same values.
"""

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_LOG_FILE = Path.home() / '.cache' / 'termspeed' / 'termspeed.log'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


@dataclass
class Config:
    """Speed test visualizer configuration."""

    # Frame timing
    tick_interval: float = 0.016

    # History chart
    history_capacity: int = 60
    chart_width: int = 50
    chart_height: int = 8

    # Collaborators
    locator_url: str = "https://ipapi.co/json/"
    locator_timeout: float = 5.0
    ping_url: str = "https://www.google.com"
    ping_timeout: float = 2.0
    offline: bool = False

    # Background stage delays (seconds)
    ping_delay: float = 1.0
    download_duration: float = 5.0
    upload_delay: float = 1.0
    upload_duration: float = 4.0

    seed: Optional[int] = None

    log_file: Optional[Path] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")
        if self.history_capacity < 2:
            raise ValueError(f"history_capacity must be at least 2, got {self.history_capacity}")
        if self.chart_height < 2:
            raise ValueError(f"chart_height must be at least 2, got {self.chart_height}")
        for name in ('locator_timeout', 'ping_timeout', 'ping_delay',
                     'download_duration', 'upload_delay', 'upload_duration'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {self.log_level}")
        if self.log_file is not None:
            self.log_file = Path(self.log_file).expanduser()

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_args(cls, argv=None, environ=None):
        """Build a config from command line options and TERMSPEED_* variables"""
        environ = os.environ if environ is None else environ

        parser = argparse.ArgumentParser(
            prog="termspeed",
            description="Animated terminal speed test visualizer",
        )
        parser.add_argument("--seed", type=int, default=None,
                            help="seed for the synthetic speed signals")
        parser.add_argument("--offline", action="store_true",
                            help="skip network lookups and use fallback values")
        parser.add_argument("--tick-ms", type=int, default=16,
                            help="animation tick period in milliseconds")
        parser.add_argument("--log-file", default=None,
                            help=f"log file path (default: {DEFAULT_LOG_FILE})")
        parser.add_argument("--log-level", default="INFO",
                            choices=LOG_LEVELS, type=str.upper,
                            help="log level")
        args = parser.parse_args(argv)

        seed = args.seed
        if seed is None and environ.get('TERMSPEED_SEED'):
            try:
                seed = int(environ['TERMSPEED_SEED'])
            except ValueError:
                parser.error(f"TERMSPEED_SEED is not an integer: {environ['TERMSPEED_SEED']!r}")

        offline = args.offline or environ.get('TERMSPEED_OFFLINE', '').lower() in ('1', 'true', 'yes')
        log_file = args.log_file or environ.get('TERMSPEED_LOG_FILE') or DEFAULT_LOG_FILE

        return cls(
            tick_interval=args.tick_ms / 1000.0,
            offline=offline,
            seed=seed,
            log_file=log_file,
            log_level=args.log_level,
        )
