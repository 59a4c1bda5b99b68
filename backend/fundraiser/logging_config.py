import logging
from typing import Optional

from . import config

FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a single console handler to the package logger."""
    logger = logging.getLogger('fundraiser')
    logger.setLevel(getattr(logging, (level or config.log_level()).upper(), logging.INFO))

    # calling twice (app factory in tests) must not duplicate output
    logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger
