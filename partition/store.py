# -*- coding: utf-8 -*-
"""
Partition Store
===============

Owns the ordered term list of every variable and keeps it a valid Ruspini
partition across structural edits:

- ``insert_term``  splits the rightmost term
- ``remove_term``  lets the neighbours absorb the removed support
- ``update_term``  re-snaps the neighbours to the edited edges
- ``swap_terms``   exchanges the geometry of two terms
- ``rescale``      maps every term onto a new universe

Each edit stages its term writes and the matching rule-matrix repair in one
``UnitOfWork``; the partition and rule checks run before anything is
written, so a failed edit leaves storage untouched.
"""

import math
from dataclasses import replace
from typing import Dict, List, Optional

from config import PartitionConfig, get_config
from core.entities import Term, Variable
from core.exceptions import ValidationError
from loggers import log_execution, get_module_logger
from rules.matrix import RuleMatrix, TermSets
from storage.base import Storage
from storage.unit_of_work import UnitOfWork
from .geometry import (
    default_partition,
    guard_epsilon,
    initial_geometry,
    merge_on_remove,
    rescale,
    snap_neighbours,
    split_rightmost,
    swap_geometry,
)
from .invariant import PartitionInvariant, PartitionReport, sort_terms

logger = get_module_logger(__name__)


def _clean_label(label: str) -> str:
    label = (label or '').strip()
    if not label:
        raise ValidationError("term label must not be empty")
    return label


def _check_bounds(a: float, b: float, c: float, d: float) -> None:
    values = (a, b, c, d)
    if not all(math.isfinite(v) for v in values):
        raise ValidationError(f"term bounds must be finite, got {values}")
    if not a < b:
        raise ValidationError(f"term bounds need a < b, got a={a:g}, b={b:g}")
    if not b <= c:
        raise ValidationError(f"term bounds need b <= c, got b={b:g}, c={c:g}")
    if not c < d:
        raise ValidationError(f"term bounds need c < d, got c={c:g}, d={d:g}")


class PartitionStore:
    """
    Structural edits of variable partitions.

    Parameters
    ----------
    storage : Storage
        Backend holding variables, terms and rules.
    rules : RuleMatrix, optional
        Rule matrix repaired alongside input-term edits.
    config : PartitionConfig, optional
        Guard ratio and invariant tolerance; the global config by default.
    """

    def __init__(self, storage: Storage, rules: Optional[RuleMatrix] = None,
                 config: Optional[PartitionConfig] = None):
        self.storage = storage
        self.rules = rules or RuleMatrix(storage)
        self.config = config or get_config().partition
        self.invariant = PartitionInvariant(self.config.tolerance,
                                            self.config.sample_points)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_terms(self, variable_id: int) -> List[Term]:
        """Terms of a variable ordered by ascending ``a``."""
        self.storage.get_variable(variable_id)
        return self.storage.list_terms(variable_id)

    def validate(self, variable_id: int) -> PartitionReport:
        variable = self.storage.get_variable(variable_id)
        return self.invariant.validate(self.storage.list_terms(variable_id),
                                       variable.start, variable.end)

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    @log_execution()
    def insert_term(self, variable_id: int, label: str) -> int:
        """
        Add a term without caller-supplied geometry.

        The first term covers the whole universe; later terms are produced
        by splitting the rightmost term at its midpoint.

        Returns
        -------
        int
            Identifier of the new term.
        """
        label = _clean_label(label)
        variable = self.storage.get_variable(variable_id)
        terms = self.storage.list_terms(variable_id)
        eps = guard_epsilon(variable.start, variable.end, self.config.guard_ratio)

        uow = UnitOfWork(self.storage)
        if terms:
            resized, geometry = split_rightmost(sort_terms(terms), variable.end, eps)
            changed = {t.id: t for t in resized}
            for term in resized:
                uow.update(term)
            terms = [changed.get(t.id, t) for t in terms]
        else:
            geometry = initial_geometry(variable.start, variable.end, eps)

        new_term = Term(self.storage.allocate_id('term'), variable.id, label, *geometry)
        uow.add(new_term)
        after = sort_terms(terms + [new_term])
        self._stage_partition_check(uow, variable, after)
        if variable.is_input:
            self.rules.stage_term_added(uow, variable.problem_id, variable.id,
                                        new_term.id, self._sets_after(variable, after))
        uow.commit()

        logger.info("Inserted term %d %r into %r (%d term(s))",
                    new_term.id, label, variable.name, len(after))
        return new_term.id

    @log_execution()
    def remove_term(self, term_id: int) -> List[Term]:
        """Delete a term and let its neighbours absorb its support.

        Returns the remaining terms of the variable in order.
        """
        term = self.storage.get_term(term_id)
        variable = self.storage.get_variable(term.variable_id)
        terms = self.storage.list_terms(variable.id)

        uow = UnitOfWork(self.storage)
        resized = {t.id: t for t in merge_on_remove(terms, term)}
        for t in resized.values():
            uow.update(t)
        uow.delete(term)
        after = sort_terms([resized.get(t.id, t) for t in terms if t.id != term.id])
        self._stage_partition_check(uow, variable, after)
        if variable.is_input:
            self.rules.stage_term_removed(uow, variable.problem_id, variable.id,
                                          term.id, self._sets_after(variable, after))
        else:
            self.rules.stage_output_term_removed(uow, variable.id, term.id)
        uow.commit()

        logger.info("Removed term %d %r from %r (%d term(s) left)",
                    term.id, term.label, variable.name, len(after))
        return after

    @log_execution()
    def update_term(self, term_id: int, a: float, b: float, c: float, d: float,
                    label: Optional[str] = None,
                    is_triangle: Optional[bool] = None) -> List[Term]:
        """
        Edit a term's bounds and re-snap its neighbours.

        The left neighbour's ``(c, d)`` becomes the new ``(a, b)``, the right
        neighbour's ``(a, b)`` becomes the new ``(c, d)``.

        Raises
        ------
        ValidationError
            If ``a < b <= c < d`` does not hold or the label is empty.
        DataInconsistencyError
            If the snapped partition is no longer valid.
        """
        term = self.storage.get_term(term_id)
        triangle = term.is_triangle if is_triangle is None else bool(is_triangle)
        if triangle:
            c = b
        _check_bounds(a, b, c, d)
        new_label = term.label if label is None else _clean_label(label)

        variable = self.storage.get_variable(term.variable_id)
        terms = self.storage.list_terms(variable.id)
        edited = replace(term, a=a, b=b, c=c, d=d, label=new_label, is_triangle=triangle)

        uow = UnitOfWork(self.storage)
        uow.update(edited)
        changed = {edited.id: edited}
        for t in snap_neighbours(terms, edited):
            uow.update(t)
            changed[t.id] = t
        after = sort_terms([changed.get(t.id, t) for t in terms])
        self._stage_partition_check(uow, variable, after)
        uow.commit()

        logger.info("Updated term %d %r of %r to (%g, %g, %g, %g)",
                    term.id, new_label, variable.name, a, b, c, d)
        return after

    @log_execution()
    def swap_terms(self, first_id: int, second_id: int) -> List[Term]:
        """Exchange the geometry of two terms of the same variable."""
        first = self.storage.get_term(first_id)
        second = self.storage.get_term(second_id)
        if first.variable_id != second.variable_id:
            raise ValidationError(
                f"terms {first_id} and {second_id} belong to different variables")
        variable = self.storage.get_variable(first.variable_id)
        terms = self.storage.list_terms(variable.id)
        if first_id == second_id:
            return terms

        new_first, new_second = swap_geometry(first, second)
        uow = UnitOfWork(self.storage)
        uow.update(new_first)
        uow.update(new_second)
        changed = {new_first.id: new_first, new_second.id: new_second}
        after = sort_terms([changed.get(t.id, t) for t in terms])
        self._stage_partition_check(uow, variable, after)
        uow.commit()

        logger.info("Swapped terms %r and %r of %r", first.label, second.label,
                    variable.name)
        return after

    def rescale(self, variable_id: int, start: float, end: float,
                name: Optional[str] = None) -> List[Term]:
        """Move a variable to a new universe, mapping its terms linearly."""
        if not (math.isfinite(start) and math.isfinite(end)) or not start < end:
            raise ValidationError(f"universe needs start < end, got [{start:g}, {end:g}]")
        variable = self.storage.get_variable(variable_id)
        terms = self.storage.list_terms(variable_id)
        old_start, old_end = variable.start, variable.end

        variable.start, variable.end = start, end
        if name is not None:
            variable.name = name
        uow = UnitOfWork(self.storage)
        uow.update(variable)
        after = rescale(terms, old_start, old_end, start, end)
        for t in after:
            uow.update(t)
        after = sort_terms(after)
        self._stage_partition_check(uow, variable, after)
        uow.commit()

        logger.info("Rescaled %r from [%g, %g] to [%g, %g]",
                    variable.name, old_start, old_end, start, end)
        return after

    def stage_default_terms(self, uow: UnitOfWork, variable: Variable,
                            labels: List[str]) -> List[Term]:
        """Stage an evenly spaced partition for a variable that has no terms."""
        labels = [_clean_label(label) for label in labels]
        if self.storage.list_terms(variable.id):
            raise ValidationError(f"variable {variable.name!r} already has terms")
        geometries = default_partition(len(labels), variable.start, variable.end)
        created = [Term(self.storage.allocate_id('term'), variable.id, label, *g)
                   for label, g in zip(labels, geometries)]
        for t in created:
            uow.add(t)
        self._stage_partition_check(uow, variable, created)
        if variable.is_input and created:
            sets = self.rules.term_sets(variable.problem_id,
                                        {variable.id: [t.id for t in created]})
            self.rules.stage_terms_added(uow, variable.problem_id, variable.id,
                                         [t.id for t in created], sets)
        return created

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _stage_partition_check(self, uow: UnitOfWork, variable: Variable,
                               terms_after: List[Term]) -> None:
        uow.check(
            f"partition of {variable.name!r}",
            lambda: self.invariant.validate(terms_after, variable.start,
                                            variable.end).violations,
        )

    def _sets_after(self, variable: Variable, terms_after: List[Term]) -> TermSets:
        return self.rules.term_sets(variable.problem_id,
                                    {variable.id: [t.id for t in terms_after]})


__all__ = ['PartitionStore']
