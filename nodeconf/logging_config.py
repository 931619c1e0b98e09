"""
Python logging configuration for the node tooling entry points.

Library modules only emit records; handlers are set up here, once, by
whichever script is running.
"""

import logging
import sys
from typing import TextIO


def setup_logging(level: str = "INFO", stream: TextIO = sys.stdout) -> None:
    """
    Configure Python logging for an entry point.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR); unknown names fall back to INFO
        stream: Where records are written

    Log Format:
        YYYY-MM-DD HH:MM:SS [LEVEL] Message
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=stream,
        force=True
    )
