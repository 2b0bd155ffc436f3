"""
Logging configuration for the payment gate and client scripts
"""

import logging
import sys
from typing import Iterable

LOG_FORMAT = "%(asctime)s - %(levelname)-8s %(name)s %(filename)s:%(lineno)d %(message)s"

# Chatty third-party loggers kept at WARNING unless explicitly raised
NOISY_LOGGERS = ("web3", "urllib3", "httpx", "httpcore", "asyncio")


def resolve_level(level: int | str) -> int:
    """Turn "debug"/"INFO"/20 into a logging level, falling back to INFO."""
    if isinstance(level, int):
        return level
    resolved = getattr(logging, level.strip().upper(), None)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: int | str = logging.INFO,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Logging level, as a number or a level name
        quiet: Logger names pinned to WARNING
    """
    resolved = resolve_level(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolved)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in quiet:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (typically ``__name__``)."""
    return logging.getLogger(name)
