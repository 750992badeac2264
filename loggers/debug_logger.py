# -*- coding: utf-8 -*-
"""
Structured Debug Logger
=======================

Records every log record of an engine run into one JSON array file
(``<output_dir>/debug_<timestamp>.json``) for post-hoc inspection.

Records emitted through the stdlib loggers of the engine packages are
bridged in by an intercept handler.  Each entry carries: timestamp, level,
logger, module, function, line, context (problem / phase), message, and an
optional structured *data* payload.
"""

from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .context import Colors, LogContext

# Logger names whose records are captured; module loggers nest below.
ENGINE_LOGGERS = ('fuzzy_engine',)


class DebugLogger:
    """Accumulates structured log entries and flushes them to a JSON file."""

    def __init__(self, output_dir: str = 'outputs/logs',
                 logger_names: Sequence[str] = ENGINE_LOGGERS,
                 level: int = logging.DEBUG):
        self._dir = Path(output_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime('%Y%m%d_%H%M%S')
        self._path = self._dir / f'debug_{ts}.json'
        self._entries: List[Dict[str, Any]] = []

        self._handler = _InterceptHandler(self, level)
        self._loggers = [logging.getLogger(name) for name in logger_names]
        for lg in self._loggers:
            lg.setLevel(level)
            lg.addHandler(self._handler)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def debug(self, message: str, *, data: Any = None) -> None:
        self._add('DEBUG', message, data=data)

    def info(self, message: str, *, data: Any = None) -> None:
        self._add('INFO', message, data=data)

    def warning(self, message: str, *, data: Any = None) -> None:
        self._add('WARNING', message, data=data)

    def exception(self, message: str, exc: Optional[BaseException] = None) -> None:
        tb = traceback.format_exc() if exc is None else traceback.format_exception(
            type(exc), exc, exc.__traceback__)
        self._add('ERROR', message, data={'traceback': tb})

    def log_data(self, label: str, payload: Any) -> None:
        """Store a structured payload (arrays, frames, dicts)."""
        self._add('DATA', label, data=payload)

    # ------------------------------------------------------------------
    # Flush / close
    # ------------------------------------------------------------------

    def flush(self) -> str:
        """Write accumulated entries to disk and return the file path."""
        with open(self._path, 'w', encoding='utf-8') as fh:
            json.dump(self._entries, fh, indent=2, default=_json_default,
                      ensure_ascii=False)
        return str(self._path)

    def close(self) -> str:
        """Flush and detach the intercept handler."""
        path = self.flush()
        for lg in self._loggers:
            lg.removeHandler(self._handler)
        return path

    @property
    def path(self) -> str:
        return str(self._path)

    @property
    def entries(self) -> List[Dict[str, Any]]:
        return list(self._entries)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _add(self, level: str, message: str, *, data: Any = None,
             logger: str = '', module: str = '', function: str = '',
             line: int = 0) -> None:
        entry: Dict[str, Any] = {
            'timestamp': datetime.now().isoformat(),
            'level': level,
            'logger': logger,
            'module': module,
            'function': function,
            'line': line,
            'context': dict(LogContext.get()),
            'message': Colors.strip(str(message)),
        }
        if data is not None:
            entry['data'] = data
        self._entries.append(entry)


# ------------------------------------------------------------------
# Stdlib-compatible intercept handler
# ------------------------------------------------------------------

class _InterceptHandler(logging.Handler):
    """Bridges stdlib ``logging`` records into :class:`DebugLogger`."""

    def __init__(self, debug_logger: DebugLogger, level: int):
        super().__init__(level=level)
        self._dl = debug_logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._dl._add(
                level=record.levelname,
                message=record.getMessage(),
                logger=record.name,
                module=record.module,
                function=record.funcName,
                line=record.lineno,
            )
        except Exception:
            self.handleError(record)


# ------------------------------------------------------------------
# JSON serialisation helper
# ------------------------------------------------------------------

def _json_default(obj: Any) -> Any:
    """Fallback serialiser for numpy / pandas / engine objects."""
    import numpy as np
    import pandas as pd
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, pd.DataFrame):
        return obj.to_dict(orient='records')
    if isinstance(obj, pd.Series):
        return obj.to_dict()
    if hasattr(obj, '__dataclass_fields__'):
        return {k: getattr(obj, k) for k in obj.__dataclass_fields__}
    return str(obj)


__all__ = ['DebugLogger', 'ENGINE_LOGGERS']
