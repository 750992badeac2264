# -*- coding: utf-8 -*-
"""
Logging Decorators and Context Managers
=======================================

``log_execution`` / ``log_exceptions`` wrap engine entry points;
``log_context`` tags records with problem or phase information and
``timed_operation`` brackets a block with start / finish records.
"""

from __future__ import annotations

import time
import logging
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, Optional

from .context import LogContext

ENGINE_LOGGER = 'fuzzy_engine'


# =============================================================================
# Decorators
# =============================================================================

def log_execution(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    show_args: bool = False,
) -> Callable:
    """Log entry, exit and timing of the wrapped callable."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            log = logger or logging.getLogger(ENGINE_LOGGER)
            name = func.__qualname__
            if show_args:
                args_str = ', '.join(
                    [repr(a)[:50] for a in args]
                    + [f'{k}={repr(v)[:50]}' for k, v in kwargs.items()]
                )
                log.log(level, 'Calling %s(%s)', name, args_str)
            else:
                log.log(level, 'Calling %s', name)

            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                log.log(level, '%s failed after %.3fs: %s: %s', name,
                        time.perf_counter() - start, type(exc).__name__, exc)
                raise
            log.log(level, '%s completed (%.3fs)', name, time.perf_counter() - start)
            return result

        return wrapper
    return decorator


def log_exceptions(
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
    reraise: bool = True,
) -> Callable:
    """Log unhandled exceptions of the wrapped callable with traceback."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            log = logger or logging.getLogger(ENGINE_LOGGER)
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                log.log(level, 'Exception in %s: %s', func.__qualname__, exc,
                        exc_info=True)
                if reraise:
                    raise
                return None
        return wrapper
    return decorator


# =============================================================================
# Context Managers
# =============================================================================

@contextmanager
def log_context(**kwargs: Any) -> Generator[None, None, None]:
    """Temporarily inject key/value pairs into the thread-local log context."""
    previous = {k: LogContext.get()[k] for k in kwargs if k in LogContext.get()}
    for key, value in kwargs.items():
        LogContext.set(key, value)
    try:
        yield
    finally:
        for key in kwargs:
            LogContext.remove(key)
        for key, value in previous.items():
            LogContext.set(key, value)


@contextmanager
def timed_operation(
    logger: logging.Logger,
    operation: str,
    level: int = logging.INFO,
) -> Generator[None, None, None]:
    """Log start / finish of a block with elapsed time."""
    start = time.perf_counter()
    logger.log(level, 'Starting: %s', operation)
    try:
        yield
    finally:
        logger.log(level, 'Finished: %s (%.3fs)', operation, time.perf_counter() - start)


__all__ = [
    'ENGINE_LOGGER',
    'log_execution',
    'log_exceptions',
    'log_context',
    'timed_operation',
]
