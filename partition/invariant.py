# -*- coding: utf-8 -*-
"""
Ruspini Partition Invariant
===========================

A variable's terms form a Ruspini partition when their memberships sum to
exactly 1 at every point of ``[start, end]``.  ``validate_partition`` checks:

1. Ordering per boundary position
   - FIRST may have ``a = b``, every other term needs ``a < b``
   - every term needs ``b ≤ c`` (after the triangle collapse)
   - LAST may have ``c = d``, every other term needs ``c < d``
2. Anchoring: first term ``b = start`` and ``a ≤ start``,
   last term ``c = end`` and ``d ≥ end``
3. Adjacency: ``T[i].c = T[i+1].a`` and ``T[i].d = T[i+1].b``
4. Sampled sum: ``Σ μ(x) = 1 ± tolerance`` at evenly spaced points

The sampled check is decisive; the algebraic checks localise the fault.
"""

from dataclasses import dataclass, field
from enum import Flag
from typing import List, Sequence

import numpy as np

from core.entities import Term
from loggers import get_module_logger
from .membership import membership_array

logger = get_module_logger(__name__)

MIN_SAMPLE_POINTS = 100


class Boundary(Flag):
    """Position of a term inside its ordered partition.

    A sole term carries both flags: ``Boundary.FIRST | Boundary.LAST``.
    """
    INTERIOR = 0
    FIRST = 1
    LAST = 2


def boundary_positions(count: int) -> List[Boundary]:
    """Tag each of *count* ordered terms with its boundary position."""
    tags = []
    for i in range(count):
        tag = Boundary.INTERIOR
        if i == 0:
            tag |= Boundary.FIRST
        if i == count - 1:
            tag |= Boundary.LAST
        tags.append(tag)
    return tags


@dataclass
class PartitionReport:
    """Outcome of a partition validation."""
    positions: List[Boundary] = field(default_factory=list)
    violations: List[str] = field(default_factory=list)
    max_deviation: float = 0.0
    sample_points: int = 0

    @property
    def ok(self) -> bool:
        return not self.violations

    def __bool__(self) -> bool:
        return self.ok

    def summary(self) -> str:
        if self.ok:
            return (f"valid partition of {len(self.positions)} term(s), "
                    f"max deviation {self.max_deviation:.2e}")
        return "invalid partition: " + '; '.join(self.violations)


def sort_terms(terms: Sequence[Term]) -> List[Term]:
    """Order terms by ascending ``a`` (ties broken by ``b`` then id)."""
    return sorted(terms, key=lambda t: (t.a, t.b, t.id))


def membership_sum(terms: Sequence[Term], xs: np.ndarray) -> np.ndarray:
    """Pointwise sum of all term memberships at *xs*."""
    total = np.zeros(len(xs))
    for t in terms:
        total += membership_array(xs, t.a, t.b, t.c, t.d, t.is_triangle)
    return total


def _check_ordering(term: Term, tag: Boundary, tol: float) -> List[str]:
    problems = []
    c = term.effective_c
    name = f"term {term.id} ({term.label!r})"

    if Boundary.FIRST in tag:
        if term.a > term.b + tol:
            problems.append(f"{name}: a={term.a:g} > b={term.b:g}")
    elif not term.a < term.b:
        problems.append(f"{name}: a={term.a:g} must be < b={term.b:g}")

    if term.b > c + tol:
        problems.append(f"{name}: b={term.b:g} > c={c:g}")

    if Boundary.LAST in tag:
        if c > term.d + tol:
            problems.append(f"{name}: c={c:g} > d={term.d:g}")
    elif not c < term.d:
        problems.append(f"{name}: c={c:g} must be < d={term.d:g}")
    return problems


def validate_partition(terms_in_order: Sequence[Term], start: float, end: float,
                       tolerance: float = 1e-3,
                       sample_points: int = 1000) -> PartitionReport:
    """
    Validate that *terms_in_order* form a Ruspini partition of ``[start, end]``.

    Parameters
    ----------
    terms_in_order : sequence of Term
        Terms ordered by ascending ``a``.
    start, end : float
        Universe of discourse.
    tolerance : float
        Allowed deviation of the membership sum; positional checks use the
        same tolerance scaled by the universe width.
    sample_points : int
        Points of the sampled sum check, raised to at least 100.

    Returns
    -------
    PartitionReport
        ``report.ok`` is ``True`` when every check passes.
    """
    terms = list(terms_in_order)
    positions = boundary_positions(len(terms))
    report = PartitionReport(positions=positions)
    if not terms:
        return report

    pos_tol = tolerance * max(1.0, abs(end - start))

    for term, tag in zip(terms, positions):
        report.violations.extend(_check_ordering(term, tag, pos_tol))

    first, last = terms[0], terms[-1]
    if abs(first.b - start) > pos_tol or first.a > start + pos_tol:
        report.violations.append(
            f"first term {first.id} not anchored at start={start:g} "
            f"(a={first.a:g}, b={first.b:g})")
    last_c = last.effective_c
    if abs(last_c - end) > pos_tol or last.d < end - pos_tol:
        report.violations.append(
            f"last term {last.id} not anchored at end={end:g} "
            f"(c={last_c:g}, d={last.d:g})")

    for left, right in zip(terms, terms[1:]):
        if (abs(left.effective_c - right.a) > pos_tol
                or abs(left.d - right.b) > pos_tol):
            report.violations.append(
                f"terms {left.id} and {right.id} not adjacent "
                f"(c={left.effective_c:g}/a={right.a:g}, d={left.d:g}/b={right.b:g})")

    n = max(MIN_SAMPLE_POINTS, int(sample_points))
    xs = np.linspace(start, end, n)
    deviation = np.abs(membership_sum(terms, xs) - 1.0)
    report.sample_points = n
    report.max_deviation = float(deviation.max())
    if report.max_deviation > tolerance:
        worst = int(deviation.argmax())
        report.violations.append(
            f"membership sum deviates by {report.max_deviation:.4g} "
            f"at x={xs[worst]:g}")

    if not report.ok:
        logger.debug("Partition check failed: %s", report.summary())
    return report


class PartitionInvariant:
    """Validator bound to a tolerance and sample count."""

    def __init__(self, tolerance: float = 1e-3, sample_points: int = 1000):
        self.tolerance = tolerance
        self.sample_points = sample_points

    def validate(self, terms_in_order: Sequence[Term], start: float,
                 end: float) -> PartitionReport:
        return validate_partition(terms_in_order, start, end,
                                  tolerance=self.tolerance,
                                  sample_points=self.sample_points)


__all__ = [
    'Boundary',
    'boundary_positions',
    'PartitionReport',
    'sort_terms',
    'membership_sum',
    'validate_partition',
    'PartitionInvariant',
]
