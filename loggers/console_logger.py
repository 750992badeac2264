# -*- coding: utf-8 -*-
"""
Console Logger for the Fuzzy Decision Engine
============================================

Concise, colour-coded output for interactive runs.  All console output of
the demo entry point goes through this class.

Design goals
------------
* One-line status per step
* Phase banners with timing
* Compact metric / table display
* Evaluation summary (fuzzified inputs and crisp outputs)
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional, Sequence

from .context import Colors, LogContext, PhaseMetrics


_LINE_W = 70


class ConsoleLogger:
    """Structured console logger."""

    def __init__(self, use_color: Optional[bool] = None, stream=None):
        self._color = Colors.supports_color() if use_color is None else use_color
        self._stream = stream or sys.stdout
        self._phases: List[PhaseMetrics] = []

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def _c(self, text: str, *codes: str) -> str:
        if not self._color:
            return text
        return ''.join(codes) + text + Colors.RESET

    def _write(self, msg: str) -> None:
        self._stream.write(msg + '\n')
        self._stream.flush()

    # ------------------------------------------------------------------
    # Banners & phases
    # ------------------------------------------------------------------

    def banner(self, title: str, subtitle: str = '') -> None:
        """Print a prominent banner (e.g. at startup)."""
        self._write('')
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))
        self._write(self._c(f'  {title}', Colors.BOLD, Colors.BRIGHT_WHITE))
        if subtitle:
            self._write(self._c(f'  {subtitle}', Colors.DIM))
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))

    @contextmanager
    def phase(self, name: str) -> Generator[_PhaseCtx, None, None]:
        """Context manager printing phase start / end with timing.

        Example::

            with console.phase('Build problem') as p:
                problem = editor.create_problem('Tipping')
                p.detail(f'problem {problem.id} created')
        """
        label = f'[{len(self._phases) + 1}] {name}'
        metrics = PhaseMetrics(name=name, start_time=time.time())
        self._phases.append(metrics)
        LogContext.set('phase', name)
        self._write('')
        self._write(self._c(f'>> {label}', Colors.BOLD, Colors.CYAN))
        try:
            yield _PhaseCtx(self, metrics)
        except Exception as exc:
            metrics.end_time = time.time()
            metrics.status = 'failed'
            self._write(self._c(
                f'   FAIL  {label}  ({metrics.elapsed:.2f}s): {type(exc).__name__}: {exc}',
                Colors.RED, Colors.BOLD,
            ))
            raise
        else:
            metrics.end_time = time.time()
            metrics.status = 'completed'
            self._write(self._c(f'   OK    {label}  ({metrics.elapsed:.2f}s)', Colors.GREEN))
        finally:
            LogContext.remove('phase')

    @property
    def phases(self) -> List[PhaseMetrics]:
        return list(self._phases)

    # ------------------------------------------------------------------
    # Step / metric / table helpers
    # ------------------------------------------------------------------

    def step(self, message: str) -> None:
        self._write(self._c(f'   . {message}', Colors.WHITE))

    def metric(self, label: str, value: Any, unit: str = '') -> None:
        val_str = f'{value:.4f}' if isinstance(value, float) else str(value)
        suffix = f' {unit}' if unit else ''
        self._write(self._c(f'     {label}: ', Colors.DIM) + f'{val_str}{suffix}')

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[Any]],
              col_widths: Optional[Sequence[int]] = None, indent: int = 6) -> None:
        """Print a compact fixed-width table; numeric cells are right-aligned."""
        if col_widths is None:
            col_widths = [max([len(h) + 2, 10] + [len(str(r[i])) for r in rows])
                          for i, h in enumerate(headers)]
        pad = ' ' * indent
        self._write(self._c(pad + '  '.join(f'{h:^{w}}' for h, w in zip(headers, col_widths)),
                            Colors.BOLD))
        self._write(pad + '  '.join('-' * w for w in col_widths))
        for row in rows:
            cells = []
            for cell, w in zip(row, col_widths):
                if isinstance(cell, float):
                    cells.append(f'{cell:>{w}.4f}')
                elif isinstance(cell, int):
                    cells.append(f'{cell:>{w}}')
                else:
                    cells.append(f'{str(cell):<{w}}')
            self._write(pad + '  '.join(cells))

    # ------------------------------------------------------------------
    # Informational / warning / error
    # ------------------------------------------------------------------

    def info(self, message: str) -> None:
        self._write(self._c(f'  i {message}', Colors.GREEN))

    def success(self, message: str) -> None:
        self._write(self._c(f'  OK {message}', Colors.BRIGHT_GREEN, Colors.BOLD))

    def warning(self, message: str) -> None:
        self._write(self._c(f'  ! {message}', Colors.YELLOW))

    def error(self, message: str) -> None:
        self._write(self._c(f'  X {message}', Colors.RED, Colors.BOLD))

    # ------------------------------------------------------------------
    # Domain summaries
    # ------------------------------------------------------------------

    def show_partition(self, variable: Any, terms: Sequence[Any]) -> None:
        """Print one variable's terms as a table."""
        self._write(self._c(
            f'\n  {variable.name}  [{variable.start:g}, {variable.end:g}]', Colors.BOLD))
        rows = [[t.label, float(t.a), float(t.b), float(t.c), float(t.d)] for t in terms]
        self.table(['Term', 'a', 'b', 'c', 'd'], rows)

    def show_evaluation(self, result: Any) -> None:
        """Print fuzzified inputs and crisp outputs of an ``EvaluationResult``."""
        self._write('')
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))
        self._write(self._c(
            f'  EVALUATION  {result.problem_name}  '
            f'({result.method.value}, resolution {result.resolution})',
            Colors.BOLD, Colors.BRIGHT_WHITE))
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))

        self._write(self._c('\n  INPUTS', Colors.BOLD))
        rows = []
        for item in result.inputs:
            for _, label, degree in item.degrees:
                rows.append([item.name, float(item.value), label, float(degree)])
        self.table(['Variable', 'Value', 'Term', 'Degree'], rows)

        self._write(self._c('\n  OUTPUTS', Colors.BOLD))
        rows = [[o.name, float(o.crisp_value), int(o.fired_rules)] for o in result.outputs]
        self.table(['Variable', 'Crisp', 'Fired'], rows)
        self._write(self._c('=' * _LINE_W, Colors.BOLD, Colors.BLUE))


# ------------------------------------------------------------------
# Phase context helper returned by ConsoleLogger.phase()
# ------------------------------------------------------------------

class _PhaseCtx:
    """Lightweight proxy for logging detail inside a phase block."""

    def __init__(self, logger: ConsoleLogger, metrics: PhaseMetrics):
        self._logger = logger
        self.metrics = metrics

    def detail(self, message: str) -> None:
        self._logger.step(message)

    def metric(self, label: str, value: Any, unit: str = '') -> None:
        self.metrics.details[label] = value
        self._logger.metric(label, value, unit)

    def warning(self, message: str) -> None:
        self._logger.warning(message)


__all__ = ['ConsoleLogger']
