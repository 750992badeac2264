# -*- coding: utf-8 -*-
"""
Storage Collaborator Interface
==============================

The engine never talks to a database directly.  It reads and writes
problems, variables, terms and rules through ``Storage``, and it groups
writes into transactions::

    with storage.transaction():
        storage.update_term(term)
        storage.delete_rule(rule_id)

Any exception inside the block rolls the transaction back.  Errors that are
not engine errors are re-raised as ``InternalError``.

Read-only evaluations use ``snapshot()`` to obtain a consistent copy of a
whole problem.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Generator, List, Optional

from core.entities import Problem, Rule, Term, Variable, VariableKind
from core.exceptions import FuzzyEngineError, InternalError
from loggers import get_module_logger

logger = get_module_logger(__name__)


@dataclass
class ProblemSnapshot:
    """Consistent read-only copy of one problem."""
    problem: Problem
    inputs: List[Variable] = field(default_factory=list)
    outputs: List[Variable] = field(default_factory=list)
    terms: Dict[int, List[Term]] = field(default_factory=dict)
    rules: Dict[int, List[Rule]] = field(default_factory=dict)

    def terms_of(self, variable_id: int) -> List[Term]:
        return self.terms.get(variable_id, [])

    def rules_of(self, output_variable_id: int) -> List[Rule]:
        return self.rules.get(output_variable_id, [])


class Storage(ABC):
    """Abstract storage backend.

    Reads return copies; mutating a returned entity has no effect until it
    is written back with the matching ``update_*`` call.  ``list_terms``
    returns terms ordered by ascending ``a``.
    """

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @abstractmethod
    def begin(self) -> None:
        ...

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...

    @property
    @abstractmethod
    def in_transaction(self) -> bool:
        ...

    @contextmanager
    def transaction(self) -> Generator['Storage', None, None]:
        """Run the block in one transaction, rolling back on any error."""
        self.begin()
        try:
            yield self
        except FuzzyEngineError:
            self.rollback()
            logger.warning("Transaction rolled back")
            raise
        except Exception as exc:
            self.rollback()
            logger.warning("Transaction rolled back after storage failure: %s", exc)
            raise InternalError(f"storage failure: {exc}") from exc
        else:
            self.commit()

    @contextmanager
    def read_lock(self) -> Generator[None, None, None]:
        """Hold off writers while a multi-read snapshot is taken."""
        yield

    @abstractmethod
    def allocate_id(self, table: str) -> int:
        """Reserve a fresh identifier for *table*."""

    # ------------------------------------------------------------------
    # Problems
    # ------------------------------------------------------------------

    @abstractmethod
    def get_problem(self, problem_id: int) -> Problem: ...

    @abstractmethod
    def list_problems(self, parent_id: Optional[int] = None) -> List[Problem]:
        """Children of *parent_id*; root problems when it is ``None``."""

    @abstractmethod
    def add_problem(self, problem: Problem) -> None: ...

    @abstractmethod
    def update_problem(self, problem: Problem) -> None: ...

    @abstractmethod
    def delete_problem(self, problem_id: int) -> None: ...

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    @abstractmethod
    def get_variable(self, variable_id: int) -> Variable: ...

    @abstractmethod
    def list_variables(self, problem_id: int,
                       kind: Optional[VariableKind] = None) -> List[Variable]: ...

    @abstractmethod
    def add_variable(self, variable: Variable) -> None: ...

    @abstractmethod
    def update_variable(self, variable: Variable) -> None: ...

    @abstractmethod
    def delete_variable(self, variable_id: int) -> None: ...

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    @abstractmethod
    def get_term(self, term_id: int) -> Term: ...

    @abstractmethod
    def list_terms(self, variable_id: int) -> List[Term]: ...

    @abstractmethod
    def add_term(self, term: Term) -> None: ...

    @abstractmethod
    def update_term(self, term: Term) -> None: ...

    @abstractmethod
    def delete_term(self, term_id: int) -> None: ...

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    @abstractmethod
    def get_rule(self, rule_id: int) -> Rule: ...

    @abstractmethod
    def list_rules(self, output_variable_id: int) -> List[Rule]: ...

    @abstractmethod
    def add_rule(self, rule: Rule) -> None: ...

    @abstractmethod
    def update_rule(self, rule: Rule) -> None: ...

    @abstractmethod
    def delete_rule(self, rule_id: int) -> None: ...

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self, problem_id: int) -> ProblemSnapshot:
        """Read a whole problem under the read lock."""
        with self.read_lock():
            snap = ProblemSnapshot(problem=self.get_problem(problem_id))
            snap.inputs = self.list_variables(problem_id, VariableKind.INPUT)
            snap.outputs = self.list_variables(problem_id, VariableKind.OUTPUT)
            for var in snap.inputs + snap.outputs:
                snap.terms[var.id] = self.list_terms(var.id)
            for var in snap.outputs:
                snap.rules[var.id] = self.list_rules(var.id)
        return snap


__all__ = ['ProblemSnapshot', 'Storage']
