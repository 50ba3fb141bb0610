from __future__ import annotations
import logging
import os
from typing import Optional


_DEFAULT_MAX_DEPTH = 100


def int_from_env(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if not raw or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{var} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{var} must be positive, got {value}")
    return value


def get_max_depth() -> int:
    """Maximum nesting of evaluate calls before QuosureRecursionError."""
    return int_from_env('QUOSURE_MAX_DEPTH', _DEFAULT_MAX_DEPTH)


def get_log_level() -> Optional[int]:
    raw = os.environ.get('QUOSURE_LOG_LEVEL')
    if not raw:
        return None
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"QUOSURE_LOG_LEVEL: unknown level {raw!r}")
    return level


def configure_logging(level: Optional[int] = None) -> None:
    """Apply `level` (or QUOSURE_LOG_LEVEL) to the package logger.

    Without either the library stays silent and leaves handlers to the host.
    """
    if level is None:
        level = get_log_level()
    if level is None:
        return
    logger = logging.getLogger('quosure')
    logger.setLevel(level)
    if not any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(name)s %(levelname)s: %(message)s'))
        logger.addHandler(handler)
