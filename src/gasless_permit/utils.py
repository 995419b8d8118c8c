"""
Logging helpers shared across the package.

    from gasless_permit.utils import logger, setup_logger, error_context

``logger`` is the package logger; modules log through it so that a single
``setup_logger`` call configures output for the whole library.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional, Union

LOGGER_NAME = "gasless_permit"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())


def setup_logger(
    level: Union[int, str] = logging.INFO,
    fmt: str = LOG_FORMAT,
    stream=None,
) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Calling this more than once replaces the previously installed handler
    instead of stacking duplicates.

    Args:
        level: Logging level, as an int or a name such as ``"DEBUG"``.
        fmt: Log record format string.
        stream: Output stream; defaults to ``sys.stderr``.

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_gasless_permit", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    handler._gasless_permit = True
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


@contextmanager
def error_context(action: str, log: Optional[logging.Logger] = None) -> Iterator[None]:
    """
    Log a failure of ``action`` and re-raise it unchanged.

    Example::

        with error_context("sign permit"):
            signature = await sign_permit(...)
    """
    log = log or logger
    try:
        yield
    except Exception as exc:
        log.error("%s failed: %s: %s", action, type(exc).__name__, exc)
        raise


def mask_hex(value: Union[str, bytes, None], keep: int = 6) -> str:
    """Shorten a hex value for log output, e.g. ``0x1234ab…9f0e``."""
    if value is None:
        return "None"
    if isinstance(value, (bytes, bytearray)):
        value = "0x" + bytes(value).hex()
    if len(value) <= 2 + keep * 2:
        return value
    return f"{value[:2 + keep]}…{value[-4:]}"
