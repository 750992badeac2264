# -*- coding: utf-8 -*-
"""
Fuzzy Engine Logging Package
============================

Two-channel logging system:
  * **ConsoleLogger**: concise, colour-coded monitoring output
  * **DebugLogger**: exhaustive structured JSON for post-hoc inspection

Usage::

    from loggers import setup_logging
    console, debug = setup_logging('outputs')
"""

import logging
from typing import Tuple

from .context import Colors, LogContext, PhaseMetrics
from .console_logger import ConsoleLogger
from .debug_logger import DebugLogger, ENGINE_LOGGERS
from .decorators import (
    ENGINE_LOGGER,
    log_execution,
    log_exceptions,
    log_context,
    timed_operation,
)


def get_module_logger(module_name: str) -> logging.Logger:
    """Logger for an engine module, nested under ``fuzzy_engine``."""
    return logging.getLogger(f'{ENGINE_LOGGER}.{module_name}')


def setup_logging(
    output_dir: str = 'outputs',
    use_color: bool = None,
) -> Tuple[ConsoleLogger, DebugLogger]:
    """Create and return both loggers.

    Parameters
    ----------
    output_dir : str
        Root output directory; debug JSON goes to ``<output_dir>/logs/``.
    use_color : bool, optional
        Force colours on or off; autodetected when ``None``.

    Returns
    -------
    tuple[ConsoleLogger, DebugLogger]
    """
    console = ConsoleLogger(use_color=use_color)
    debug = DebugLogger(output_dir=f'{output_dir}/logs')
    return console, debug


__all__ = [
    'setup_logging',
    'get_module_logger',
    'ConsoleLogger',
    'DebugLogger',
    'ENGINE_LOGGERS',
    'ENGINE_LOGGER',
    'Colors',
    'LogContext',
    'PhaseMetrics',
    'log_execution',
    'log_exceptions',
    'log_context',
    'timed_operation',
]
