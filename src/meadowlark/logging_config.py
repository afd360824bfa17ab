"""
Logging configuration for the application.

``setup_logging`` configures the root logger once with a console
handler. ``configure_access_log`` points the access logger at the
console in development and at a daily-rotated file in production.
"""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from meadowlark.steps.access_log import access_logger

FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger.

    Does nothing when the root logger already has handlers, so repeated
    calls (tests, several app builds) are harmless.
    """
    logger = logging.getLogger()
    if logger.handlers:
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def configure_access_log(env: str, log_dir: Path) -> logging.Logger:
    """Attach the environment's handler to the access logger, replacing any old one."""
    for handler in list(access_logger.handlers):
        access_logger.removeHandler(handler)
        handler.close()

    handler: logging.Handler
    if env == "production":
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = TimedRotatingFileHandler(
            log_dir / "requests.log", when="midnight", encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))

    access_logger.addHandler(handler)
    access_logger.setLevel(logging.INFO)
    access_logger.propagate = False
    return access_logger
