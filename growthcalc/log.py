"""Logging setup for growthcalc entry points."""

import logging
import sys

_configured = False

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    """Configure the growthcalc logger once. Library code never calls this."""
    global _configured
    if _configured:
        return
    logger = logging.getLogger("growthcalc")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name (e.g. __name__)."""
    return logging.getLogger(name)
