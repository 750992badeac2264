# -*- coding: utf-8 -*-
"""
Unit of Work
============

Stages every write of one structural edit, validates the registered
invariant checks, and only then applies the writes inside a single storage
transaction.  A failed check raises ``DataInconsistencyError`` before
anything is written; a storage failure during the write phase rolls the
transaction back.

Example::

    uow = UnitOfWork(storage)
    uow.update(resized_term)
    uow.add(new_term)
    uow.check('partition', lambda: report.violations)
    uow.commit()
"""

from typing import Any, Callable, List, Tuple

from core.entities import Problem, Rule, Term, Variable
from core.exceptions import DataInconsistencyError, InternalError
from loggers import get_module_logger
from .base import Storage

logger = get_module_logger(__name__)

_TABLE_OF = {Problem: 'problem', Variable: 'variable', Term: 'term', Rule: 'rule'}


def _table(entity: Any) -> str:
    try:
        return _TABLE_OF[type(entity)]
    except KeyError:
        raise InternalError(f"cannot stage {type(entity).__name__}") from None


class UnitOfWork:
    """Ordered list of staged writes plus the checks guarding them."""

    def __init__(self, storage: Storage):
        self.storage = storage
        self._ops: List[Tuple[str, str, Any]] = []
        self._checks: List[Tuple[str, Callable[[], List[str]]]] = []
        self.committed = False

    # ------------------------------------------------------------------
    # Staging
    # ------------------------------------------------------------------

    def add(self, entity: Any) -> None:
        self._ops.append(('add', _table(entity), entity))

    def update(self, entity: Any) -> None:
        self._ops.append(('update', _table(entity), entity))

    def delete(self, entity: Any) -> None:
        self._ops.append(('delete', _table(entity), entity.id))

    def check(self, name: str, fn: Callable[[], List[str]]) -> None:
        """Register a check returning a list of violations (empty when ok)."""
        self._checks.append((name, fn))

    @property
    def pending(self) -> int:
        return len(self._ops)

    def staged(self, table: str, verb: str = None) -> List[Any]:
        """Entities or ids staged for *table*, optionally filtered by verb."""
        return [payload for v, t, payload in self._ops
                if t == table and (verb is None or v == verb)]

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Run every registered check; raise on the first failing one."""
        for name, fn in self._checks:
            violations = list(fn())
            if violations:
                logger.warning("Aborting edit, %s check failed: %s",
                               name, '; '.join(violations))
                raise DataInconsistencyError(f"{name} check failed", violations)

    def commit(self) -> None:
        if self.committed:
            raise InternalError("unit of work already committed")
        self.validate()
        with self.storage.transaction():
            for verb, table, payload in self._ops:
                getattr(self.storage, f'{verb}_{table}')(payload)
        logger.debug("Committed %d staged write(s)", len(self._ops))
        self.committed = True
        self._ops.clear()

    def discard(self) -> None:
        self._ops.clear()
        self._checks.clear()

    def __enter__(self) -> 'UnitOfWork':
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.discard()
        elif not self.committed:
            self.commit()
        return False


__all__ = ['UnitOfWork']
