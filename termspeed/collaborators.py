"""
Server label and ping lookups.

Both are best effort: any network or decoding problem is logged and turned
into a fallback value here, so nothing above this module ever sees a
lookup failure.
"""

import logging
import time

import psutil
import requests

from . import signals
from .errors import AcquisitionError

logger = logging.getLogger(__name__)

OFFLINE_LOCATIONS = [
    "Mumbai, MH",
    "Delhi, DL",
    "Bangalore, KA",
    "Hyderabad, TG",
    "Chennai, TN",
    "Kolkata, WB",
    "Pune, MH",
    "Ahmedabad, GJ",
]
DEFAULT_LOCATION = "Mumbai, Maharashtra"


def network_available() -> bool:
    """True when at least one non-loopback interface is up"""
    try:
        stats = psutil.net_if_stats()
    except (OSError, psutil.Error) as e:
        logger.warning("Could not read interface stats: %s", e)
        # Unknown; let the request itself decide
        return True

    for name, stat in stats.items():
        if name.startswith('lo'):
            continue
        if stat.isup:
            return True
    return False


class Locator:
    """Resolves a human readable "City, Region" label for the test server"""

    def __init__(self, url, timeout=5.0, random_source=None, offline=False,
                 session=None):
        self.url = url
        self.timeout = timeout
        self.random_source = random_source or signals.SystemRandomSource()
        self.offline = offline
        self.session = session or requests

    def offline_label(self) -> str:
        return self.random_source.choice(OFFLINE_LOCATIONS)

    def fetch(self) -> str:
        """Query the geolocation service; raises on any failure"""
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise AcquisitionError(f"location lookup failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise AcquisitionError(f"location response is not JSON: {e}") from e

        city = data.get('city') if isinstance(data, dict) else None
        region = data.get('region_code') if isinstance(data, dict) else None
        if not city or not region:
            raise AcquisitionError("location response has no city/region")
        return f"{city}, {region}"

    def locate(self) -> str:
        if self.offline or not network_available():
            label = self.offline_label()
            logger.info("Offline, using server label %s", label)
            return label

        try:
            return self.fetch()
        except AcquisitionError as e:
            if isinstance(e.__cause__, requests.RequestException):
                label = self.offline_label()
            else:
                label = DEFAULT_LOCATION
            logger.warning("%s; falling back to %s", e, label)
            return label


class PingProbe:
    """Round trip time of a HEAD request, in milliseconds"""

    def __init__(self, url, timeout=2.0, random_source=None, offline=False,
                 session=None, clock=time.perf_counter):
        self.url = url
        self.timeout = timeout
        self.random_source = random_source or signals.SystemRandomSource()
        self.offline = offline
        self.session = session or requests
        self.clock = clock

    def fallback(self) -> float:
        return signals.fallback_ping(self.random_source.next_seed())

    def fetch(self) -> float:
        start = self.clock()
        try:
            self.session.head(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            raise AcquisitionError(f"ping failed: {e}") from e
        return (self.clock() - start) * 1000.0

    def measure(self) -> float:
        if self.offline:
            return self.fallback()
        try:
            return self.fetch()
        except AcquisitionError as e:
            ping = self.fallback()
            logger.warning("%s; using %.1f ms", e, ping)
            return ping
