"""
Logging for the tracker.

Every module logs through logging.getLogger(__name__), so all records end up
under the 'guestify' logger, which writes to logs/guestify.log (rotated at
5 MB, 3 backups kept).

The level comes from the CLI's --log-level option, then the LOG_LEVEL env var,
then INFO.

Store actions and CLI commands are wrapped with @log_call:

    2026-10-19 09:12:44 | DEBUG    | CALL AppearanceStore.transition_status | args=(42, 'aired')
    2026-10-19 09:12:44 | INFO     | OK   AppearanceStore.transition_status -> False | 118ms
    2026-10-19 09:12:44 | ERROR    | FAIL board | ApiError: Forbidden | 12ms
"""

import functools
import inspect
import logging
import logging.handlers
import os
import time
from pathlib import Path
from typing import Optional

LOGGER_NAME = "guestify"

_LOG_DIR = Path(__file__).parent.parent / "logs"
_LOG_FILE = _LOG_DIR / "guestify.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 3

# Longest argument repr written to a CALL line; id lists can be long
_MAX_ARG_REPR = 80


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach the rotating file handler to the 'guestify' logger.
    Calling it again only updates the level; no second handler is added.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level(level))

    if any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers):
        return logger

    _LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        _LOG_FILE, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    return logger


def _short_repr(value) -> str:
    text = repr(value)
    if len(text) > _MAX_ARG_REPR:
        return text[:_MAX_ARG_REPR - 3] + "..."
    return text


def _takes_self(func) -> bool:
    try:
        params = list(inspect.signature(func).parameters)
    except (TypeError, ValueError):
        return False
    return bool(params) and params[0] == "self"


def log_call(func):
    """
    Trace a store action or CLI command.

    CALL at DEBUG with the arguments (the bound instance is left out),
    OK at INFO with the elapsed time and, for actions that report success
    as a bool, the result; FAIL at ERROR before re-raising.
    """
    name = func.__qualname__
    skip_self = _takes_self(func)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(LOGGER_NAME)
        shown = args[1:] if skip_self else args
        parts = [_short_repr(a) for a in shown] + [f"{k}={_short_repr(v)}" for k, v in kwargs.items()]
        logger.debug(f"CALL {name} | args=({', '.join(parts)})")

        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as exc:
            ms = int((time.perf_counter() - start) * 1000)
            logger.error(f"FAIL {name} | {type(exc).__name__}: {exc} | {ms}ms")
            raise

        ms = int((time.perf_counter() - start) * 1000)
        outcome = f" -> {result}" if isinstance(result, bool) else ""
        logger.info(f"OK   {name}{outcome} | {ms}ms")
        return result

    return wrapper
