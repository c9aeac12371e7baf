"""
Terminal harness: raw keyboard input, the event queue, tick scheduling and
full-screen redraws.

Everything that mutates the run happens on the thread calling run(); the
background stages and the signal handlers only put events on the queue.
"""

import logging
import os
import queue
import select
import signal
import sys
import termios
import time
import tty

from . import signals
from .collaborators import Locator, PingProbe
from .errors import TermspeedError
from .events import KeyPressed, Tick
from .stages import StageChain
from .state import Command, Orchestrator
from .view import render_frame

logger = logging.getLogger(__name__)

ESCAPE = '\x1b'
INTERRUPT = '\x03'


class TerminalApp:
    def __init__(self, config, orchestrator=None, locator=None, ping_probe=None,
                 stage_random=None, stdin=None, stdout=None, clock=time.monotonic):
        self.config = config
        self.clock = clock
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

        seed = config.seed
        self.orchestrator = orchestrator or Orchestrator(
            clock=clock,
            random_source=signals.SystemRandomSource(seed),
            history_capacity=config.history_capacity,
        )
        # The stage thread gets its own generators so no source is shared across threads
        self.stage_random = stage_random or signals.SystemRandomSource(
            None if seed is None else seed + 1)
        self.locator = locator or Locator(
            config.locator_url, timeout=config.locator_timeout,
            random_source=signals.SystemRandomSource(None if seed is None else seed + 2),
            offline=config.offline)
        self.ping_probe = ping_probe or PingProbe(
            config.ping_url, timeout=config.ping_timeout,
            random_source=signals.SystemRandomSource(None if seed is None else seed + 3),
            offline=config.offline)

        self.events = queue.SimpleQueue()
        self.running = True
        self.next_tick = None
        self.chain = None
        self.dirty = True
        self.clear_pending = False
        self.old_settings = None

    # Event plumbing

    def post(self, event):
        self.events.put(event)

    def dispatch(self, event):
        self.execute(self.orchestrator.handle(event))
        self.dirty = True

    def execute(self, commands):
        for command in commands:
            if command is Command.SCHEDULE_TICK:
                self.next_tick = self.clock() + self.config.tick_interval
            elif command is Command.START_STAGES:
                self.start_stages()
            elif command is Command.STOP_STAGES:
                self.stop_stages()
            elif command is Command.QUIT:
                self.running = False

    def start_stages(self):
        self.stop_stages()
        run_id = self.orchestrator.state.run_id
        self.chain = StageChain(run_id, self.post, self.locator, self.ping_probe,
                                self.stage_random, self.config).start()

    def stop_stages(self):
        if self.chain is not None:
            self.chain.cancel()
            self.chain = None

    def process_pending(self):
        """Handle every queued event, in arrival order"""
        while self.running:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return
            self.dispatch(event)

    def fire_tick(self):
        if self.next_tick is not None and self.clock() >= self.next_tick:
            self.next_tick = None
            self.dispatch(Tick(self.clock()))

    # Terminal

    def setup_terminal(self):
        if not self.stdin.isatty():
            raise TermspeedError("termspeed needs an interactive terminal")
        self.old_settings = termios.tcgetattr(self.stdin)
        tty.setcbreak(self.stdin.fileno())
        self.stdout.write('\033[?1049h\033[?25l\033[2J\033[H')
        self.stdout.flush()

    def cleanup(self):
        self.stop_stages()
        if self.old_settings is not None:
            termios.tcsetattr(self.stdin, termios.TCSADRAIN, self.old_settings)
            self.old_settings = None
        self.stdout.write('\033[0m\033[?25h\033[?1049l')
        self.stdout.flush()

    def handle_interrupt(self, signum, frame):
        self.post(KeyPressed(INTERRUPT))

    def handle_resize(self, signum, frame):
        self.dirty = True
        self.clear_pending = True

    def read_keys(self, timeout):
        if not select.select([self.stdin], [], [], timeout)[0]:
            return
        chunk = os.read(self.stdin.fileno(), 32).decode('utf-8', errors='ignore')
        if not chunk:
            return
        # Arrow and function keys arrive as escape sequences; only a lone Esc quits
        if chunk.startswith(ESCAPE) and len(chunk) > 1:
            return
        for key in chunk:
            self.post(KeyPressed(key))

    def render(self):
        frame = render_frame(self.orchestrator.state,
                             chart_width=self.config.chart_width,
                             chart_height=self.config.chart_height)
        lines = frame.split('\n')
        if self.clear_pending:
            self.stdout.write('\033[2J')
            self.clear_pending = False
        self.stdout.write('\033[H' + '\033[K\n'.join(lines) + '\033[K\033[J')
        self.stdout.flush()
        self.dirty = False

    def poll_timeout(self):
        if self.next_tick is None:
            return self.config.tick_interval
        return max(0.0, min(self.config.tick_interval, self.next_tick - self.clock()))

    def run(self):
        self.setup_terminal()
        signal.signal(signal.SIGINT, self.handle_interrupt)
        signal.signal(signal.SIGWINCH, self.handle_resize)
        try:
            self.execute(self.orchestrator.start())
            while self.running:
                if self.dirty:
                    self.render()
                self.read_keys(self.poll_timeout())
                self.process_pending()
                self.fire_tick()
        finally:
            self.cleanup()
            logger.info("Exited")
