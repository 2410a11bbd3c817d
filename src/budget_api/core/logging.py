"""
Shared logging setup.
"""

import logging
import sys

from budget_api.api.middleware.logging import JSONLogFormatter


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger to emit JSON lines on stdout.

    Safe to call more than once; existing JSON handlers are replaced.

    Args:
        level: Log level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONLogFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in list(root_logger.handlers):
        if isinstance(existing.formatter, JSONLogFormatter):
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    # httpx logs full request URLs at INFO, which include aggregator query strings
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))
