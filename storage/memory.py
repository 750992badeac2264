# -*- coding: utf-8 -*-
"""
In-Memory Storage Backend
=========================

Dictionary tables guarded by a re-entrant lock.  A transaction takes a deep
copy of every table on ``begin`` and restores it on ``rollback``; the lock
is held from ``begin`` until ``commit``/``rollback`` so concurrent readers
never observe a half-applied edit.
"""

import copy
import itertools
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Generator, List, Optional

from core.entities import Problem, Rule, Term, Variable, VariableKind
from core.exceptions import InternalError, NotFoundError
from .base import Storage

_TABLES = ('problem', 'variable', 'term', 'rule')


class InMemoryStorage(Storage):
    """Storage backend keeping every table in process memory."""

    def __init__(self):
        self._tables: Dict[str, Dict[int, object]] = {t: {} for t in _TABLES}
        self._counters = {t: itertools.count(1) for t in _TABLES}
        self._lock = threading.RLock()
        self._saved: Optional[Dict[str, Dict[int, object]]] = None

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin(self) -> None:
        self._lock.acquire()
        if self._saved is not None:
            self._lock.release()
            raise InternalError("a transaction is already open")
        self._saved = copy.deepcopy(self._tables)

    def commit(self) -> None:
        if self._saved is None:
            raise InternalError("commit without an open transaction")
        self._saved = None
        self._lock.release()

    def rollback(self) -> None:
        if self._saved is None:
            raise InternalError("rollback without an open transaction")
        self._tables = self._saved
        self._saved = None
        self._lock.release()

    @property
    def in_transaction(self) -> bool:
        return self._saved is not None

    @contextmanager
    def read_lock(self) -> Generator[None, None, None]:
        with self._lock:
            yield

    def allocate_id(self, table: str) -> int:
        with self._lock:
            return next(self._counters[table])

    # ------------------------------------------------------------------
    # Generic table helpers
    # ------------------------------------------------------------------

    def _get(self, table: str, entity_id: int):
        with self._lock:
            try:
                return copy.deepcopy(self._tables[table][entity_id])
            except KeyError:
                raise NotFoundError(table, entity_id) from None

    def _put(self, table: str, entity, must_exist: bool) -> None:
        with self._lock:
            exists = entity.id in self._tables[table]
            if must_exist and not exists:
                raise NotFoundError(table, entity.id)
            if not must_exist and exists:
                raise InternalError(f"{table} {entity.id} already exists")
            self._tables[table][entity.id] = copy.deepcopy(entity)

    def _delete(self, table: str, entity_id: int) -> None:
        with self._lock:
            if self._tables[table].pop(entity_id, None) is None:
                raise NotFoundError(table, entity_id)

    def _select(self, table: str, predicate) -> list:
        with self._lock:
            return [copy.deepcopy(e) for e in self._tables[table].values()
                    if predicate(e)]

    # ------------------------------------------------------------------
    # Problems
    # ------------------------------------------------------------------

    def get_problem(self, problem_id: int) -> Problem:
        return self._get('problem', problem_id)

    def list_problems(self, parent_id: Optional[int] = None) -> List[Problem]:
        found = self._select('problem', lambda p: p.parent_id == parent_id)
        return sorted(found, key=lambda p: p.id)

    def add_problem(self, problem: Problem) -> None:
        self._put('problem', problem, must_exist=False)

    def update_problem(self, problem: Problem) -> None:
        problem.updated_at = datetime.now()
        self._put('problem', problem, must_exist=True)

    def delete_problem(self, problem_id: int) -> None:
        self._delete('problem', problem_id)

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    def get_variable(self, variable_id: int) -> Variable:
        return self._get('variable', variable_id)

    def list_variables(self, problem_id: int,
                       kind: Optional[VariableKind] = None) -> List[Variable]:
        found = self._select(
            'variable',
            lambda v: v.problem_id == problem_id and (kind is None or v.kind is kind),
        )
        return sorted(found, key=lambda v: v.id)

    def add_variable(self, variable: Variable) -> None:
        self._put('variable', variable, must_exist=False)

    def update_variable(self, variable: Variable) -> None:
        self._put('variable', variable, must_exist=True)

    def delete_variable(self, variable_id: int) -> None:
        self._delete('variable', variable_id)

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    def get_term(self, term_id: int) -> Term:
        return self._get('term', term_id)

    def list_terms(self, variable_id: int) -> List[Term]:
        found = self._select('term', lambda t: t.variable_id == variable_id)
        return sorted(found, key=lambda t: (t.a, t.b, t.id))

    def add_term(self, term: Term) -> None:
        self._put('term', term, must_exist=False)

    def update_term(self, term: Term) -> None:
        self._put('term', term, must_exist=True)

    def delete_term(self, term_id: int) -> None:
        self._delete('term', term_id)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def get_rule(self, rule_id: int) -> Rule:
        return self._get('rule', rule_id)

    def list_rules(self, output_variable_id: int) -> List[Rule]:
        found = self._select('rule', lambda r: r.output_variable_id == output_variable_id)
        return sorted(found, key=lambda r: r.id)

    def add_rule(self, rule: Rule) -> None:
        self._put('rule', rule, must_exist=False)

    def update_rule(self, rule: Rule) -> None:
        self._put('rule', rule, must_exist=True)

    def delete_rule(self, rule_id: int) -> None:
        self._delete('rule', rule_id)


__all__ = ['InMemoryStorage']
