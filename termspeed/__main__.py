import logging
import sys

import termios

from .app import TerminalApp
from .config import Config
from .errors import TermspeedError
from .logs import setup_logging

logger = logging.getLogger('termspeed')


def main(argv=None):
    config = Config.from_args(argv)
    setup_logging(config.log_file, config.level)
    logger.info("Starting termspeed (seed=%s, offline=%s)", config.seed, config.offline)

    app = TerminalApp(config)
    try:
        app.run()
    except (TermspeedError, termios.error, OSError) as e:
        logger.error("Startup failed: %s", e)
        print(f"termspeed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
