# -*- coding: utf-8 -*-
"""
Problem Tree Editor
===================

Thin editing layer over the partition store and the rule matrix:

- problems form a tree; deleting one cascades to its variables, terms,
  rules and child problems
- creating an output variable materialises its full rule product
- removing an input variable projects it out of every rule
- changing a variable's universe rescales its terms

Every method that writes goes through one ``UnitOfWork``.
"""

import math
from typing import List, Optional, Sequence, Tuple

from core.entities import Problem, Variable, VariableKind
from core.exceptions import ValidationError
from loggers import log_execution, get_module_logger
from partition.store import PartitionStore
from rules.matrix import RuleMatrix
from storage.base import Storage
from storage.unit_of_work import UnitOfWork

logger = get_module_logger(__name__)


def _clean_name(name: str, what: str) -> str:
    name = (name or '').strip()
    if not name:
        raise ValidationError(f"{what} name must not be empty")
    return name


def _check_universe(start: float, end: float) -> None:
    if not (math.isfinite(start) and math.isfinite(end)) or not start < end:
        raise ValidationError(f"universe needs finite start < end, got [{start}, {end}]")


class ProblemEditor:
    """Create, edit and delete problems and their variables."""

    def __init__(self, storage: Storage, partitions: Optional[PartitionStore] = None):
        self.storage = storage
        self.partitions = partitions or PartitionStore(storage)
        self.rules: RuleMatrix = self.partitions.rules

    # =====================================================================
    # Problems
    # =====================================================================

    def get_problem(self, problem_id: int) -> Problem:
        return self.storage.get_problem(problem_id)

    def list_roots(self) -> List[Problem]:
        return self.storage.list_problems(None)

    def list_children(self, problem_id: int) -> List[Problem]:
        self.storage.get_problem(problem_id)
        return self.storage.list_problems(problem_id)

    @log_execution()
    def create_problem(self, name: str, description: str = '',
                       parent_id: Optional[int] = None) -> Problem:
        name = _clean_name(name, 'problem')
        if parent_id is not None:
            self.storage.get_problem(parent_id)
        problem = Problem(id=self.storage.allocate_id('problem'), name=name,
                          parent_id=parent_id, description=description or '')
        uow = UnitOfWork(self.storage)
        uow.add(problem)
        uow.commit()
        logger.info("Created problem %d %r", problem.id, name)
        return problem

    def update_problem(self, problem_id: int, name: Optional[str] = None,
                       description: Optional[str] = None) -> Problem:
        problem = self.storage.get_problem(problem_id)
        if name is not None:
            problem.name = _clean_name(name, 'problem')
        if description is not None:
            problem.description = description
        uow = UnitOfWork(self.storage)
        uow.update(problem)
        uow.commit()
        return self.storage.get_problem(problem_id)

    def mark_final(self, problem_id: int, is_final: bool = True) -> Problem:
        problem = self.storage.get_problem(problem_id)
        problem.is_final = bool(is_final)
        uow = UnitOfWork(self.storage)
        uow.update(problem)
        uow.commit()
        return self.storage.get_problem(problem_id)

    @log_execution()
    def delete_problem(self, problem_id: int) -> List[int]:
        """Delete a problem and its whole subtree; returns the deleted ids."""
        root = self.storage.get_problem(problem_id)
        subtree, pending = [], [root]
        while pending:
            node = pending.pop()
            subtree.append(node)
            pending.extend(self.storage.list_problems(node.id))

        uow = UnitOfWork(self.storage)
        for node in subtree:
            for var in self.storage.list_variables(node.id):
                for rule in (self.storage.list_rules(var.id)
                             if var.kind is VariableKind.OUTPUT else []):
                    uow.delete(rule)
                for term in self.storage.list_terms(var.id):
                    uow.delete(term)
                uow.delete(var)
            uow.delete(node)
        uow.commit()
        logger.info("Deleted problem %d %r with %d descendant(s)",
                    root.id, root.name, len(subtree) - 1)
        return [p.id for p in subtree]

    # =====================================================================
    # Variables
    # =====================================================================

    def variables(self, problem_id: int,
                  kind: Optional[VariableKind] = None) -> List[Variable]:
        self.storage.get_problem(problem_id)
        return self.storage.list_variables(problem_id, kind)

    def add_input_variable(self, problem_id: int, name: str, start: float, end: float,
                           term_labels: Sequence[str] = ()) -> Variable:
        """Add an input variable, optionally seeded with an even partition."""
        return self._add_variable(problem_id, VariableKind.INPUT, name, start, end,
                                  term_labels)

    def add_output_variable(self, problem_id: int, name: str, start: float, end: float,
                            term_labels: Sequence[str] = ()) -> Variable:
        """Add an output variable together with its (unassigned) rule rows."""
        return self._add_variable(problem_id, VariableKind.OUTPUT, name, start, end,
                                  term_labels)

    @log_execution()
    def _add_variable(self, problem_id: int, kind: VariableKind, name: str,
                      start: float, end: float, term_labels: Sequence[str]) -> Variable:
        name = _clean_name(name, 'variable')
        start, end = float(start), float(end)
        _check_universe(start, end)
        self._check_unique_name(problem_id, name)

        variable = Variable(id=self.storage.allocate_id('variable'), problem_id=problem_id,
                            kind=kind, name=name, start=start, end=end)
        uow = UnitOfWork(self.storage)
        uow.add(variable)
        self.partitions.stage_default_terms(uow, variable, list(term_labels))
        if kind is VariableKind.OUTPUT:
            self.rules.stage_output_variable_added(
                uow, variable, self.rules.term_sets(problem_id))
        uow.commit()
        logger.info("Added %s variable %d %r [%g, %g] with %d term(s)",
                    kind.value, variable.id, name, start, end, len(term_labels))
        return variable

    def update_variable(self, variable_id: int, name: Optional[str] = None,
                        start: Optional[float] = None,
                        end: Optional[float] = None) -> Variable:
        """Rename a variable and/or move it to a new universe."""
        variable = self.storage.get_variable(variable_id)
        new_name = variable.name if name is None else _clean_name(name, 'variable')
        if new_name != variable.name:
            self._check_unique_name(variable.problem_id, new_name)
        new_start = variable.start if start is None else float(start)
        new_end = variable.end if end is None else float(end)
        _check_universe(new_start, new_end)

        if (new_start, new_end) != (variable.start, variable.end):
            self.partitions.rescale(variable_id, new_start, new_end, name=new_name)
        elif new_name != variable.name:
            variable.name = new_name
            uow = UnitOfWork(self.storage)
            uow.update(variable)
            uow.commit()
        return self.storage.get_variable(variable_id)

    @log_execution()
    def remove_variable(self, variable_id: int) -> None:
        """Delete a variable, its terms, and repair or drop dependent rules."""
        variable = self.storage.get_variable(variable_id)
        terms = self.storage.list_terms(variable_id)
        uow = UnitOfWork(self.storage)
        if variable.is_input:
            sets = self.rules.term_sets(variable.problem_id, {variable.id: None})
            self.rules.stage_input_variable_removed(
                uow, variable.problem_id, [t.id for t in terms], sets)
        else:
            self.rules.stage_output_variable_removed(uow, variable.id)
        for term in terms:
            uow.delete(term)
        uow.delete(variable)
        uow.commit()
        logger.info("Removed %s variable %d %r", variable.kind.value, variable.id,
                    variable.name)

    @log_execution()
    def swap_variables(self, first_id: int, second_id: int) -> Tuple[Variable, Variable]:
        """Exchange two variables' positions within their problem.

        Everything but the ids moves: name, universe, terms and, for output
        variables, the rule rows.  Variables list by id, so the pair trades
        places while every term and rule id stays valid.
        """
        first = self.storage.get_variable(first_id)
        second = self.storage.get_variable(second_id)
        if first.id == second.id:
            return first, second
        if first.problem_id != second.problem_id or first.kind is not second.kind:
            raise ValidationError(
                f"variables {first.id} and {second.id} must be of the same kind "
                f"in the same problem to be swapped")

        uow = UnitOfWork(self.storage)
        for source, target in ((first, second), (second, first)):
            for term in self.storage.list_terms(source.id):
                term.variable_id = target.id
                uow.update(term)
            if not source.is_input:
                for rule in self.storage.list_rules(source.id):
                    rule.output_variable_id = target.id
                    uow.update(rule)
        first.name, second.name = second.name, first.name
        first.start, second.start = second.start, first.start
        first.end, second.end = second.end, first.end
        uow.update(first)
        uow.update(second)
        uow.commit()

        logger.info("Swapped %s variables %d and %d", first.kind.value, first.id, second.id)
        return self.storage.get_variable(first.id), self.storage.get_variable(second.id)

    def _check_unique_name(self, problem_id: int, name: str) -> None:
        self.storage.get_problem(problem_id)
        if any(v.name == name for v in self.storage.list_variables(problem_id)):
            raise ValidationError(f"problem {problem_id} already has a variable named {name!r}")


__all__ = ['ProblemEditor']
