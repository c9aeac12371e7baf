"""
Background stage chain for one run.

The stages run one after another on a daemon thread: locate the server,
ping it, let the download settle, start the upload, and finally report the
completed results. Each stage posts exactly one event to the loop's queue;
the thread never touches the run state itself.
"""

import logging
import threading

from . import signals
from .events import (
    DownloadSettled, PingMeasured, ServerLocated,
    StageFailed, TestCompleted, UploadStarted,
)

logger = logging.getLogger(__name__)


class StageChain:
    def __init__(self, run_id, post, locator, ping_probe, random_source, config):
        self.run_id = run_id
        self.post = post
        self.locator = locator
        self.ping_probe = ping_probe
        self.random_source = random_source
        self.config = config
        self._cancelled = threading.Event()
        self.thread = None

    def start(self):
        self.thread = threading.Thread(target=self.run, daemon=True,
                                       name=f"termspeed-stages-{self.run_id}")
        self.thread.start()
        return self

    def cancel(self):
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def join(self, timeout=None):
        if self.thread is not None:
            self.thread.join(timeout=timeout)

    def _sleep(self, seconds) -> bool:
        """Wait between stages; False once the chain has been cancelled"""
        if seconds > 0:
            self._cancelled.wait(seconds)
        return not self.cancelled

    def _emit(self, event) -> bool:
        if self.cancelled:
            return False
        logger.debug("Run %d stage -> %s", self.run_id, event)
        self.post(event)
        return True

    def run(self):
        try:
            self.run_stages()
        except Exception as e:
            logger.exception("Stage chain for run %d failed", self.run_id)
            self._emit(StageFailed(self.run_id, str(e) or type(e).__name__))

    def run_stages(self):
        config = self.config

        label = self.locator.locate()
        if not self._emit(ServerLocated(self.run_id, label)):
            return

        if not self._sleep(config.ping_delay):
            return
        if not self._emit(PingMeasured(self.run_id, self.ping_probe.measure())):
            return

        if not self._sleep(config.download_duration):
            return
        settled = signals.settled_download(self.random_source.next_seed())
        if not self._emit(DownloadSettled(self.run_id, settled)):
            return

        if not self._sleep(config.upload_delay):
            return
        baseline = signals.upload_baseline(self.random_source.next_seed())
        if not self._emit(UploadStarted(self.run_id, baseline)):
            return

        if not self._sleep(config.upload_duration):
            return
        self._emit(TestCompleted(
            self.run_id,
            download=signals.final_download(self.random_source.next_seed()),
            upload=signals.final_upload(self.random_source.next_seed()),
            ping=signals.fallback_ping(self.random_source.next_seed()),
            server=label,
        ))
