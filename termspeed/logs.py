"""Logging setup. The terminal is taken over by the dial, so records go to a file."""

import logging
from pathlib import Path

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

logger = logging.getLogger(__name__)


def setup_logging(path=None, level=logging.INFO):
    """Attach a file handler to the package logger, or a NullHandler when path is None"""
    root = logging.getLogger('termspeed')
    root.setLevel(level)
    root.propagate = True
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if path is None:
        root.addHandler(logging.NullHandler())
        return root

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding='utf-8')
    except OSError as e:
        # Unwritable log location must not keep the visualizer from starting
        root.addHandler(logging.NullHandler())
        root.warning("Could not open log file %s: %s", path, e)
        return root

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.propagate = False
    logger.debug("Logging to %s", path)
    return root
