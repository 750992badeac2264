# -*- coding: utf-8 -*-
"""
Trapezoidal Membership Evaluation
=================================

Mathematical Foundation:
    A trapezoidal fuzzy set (a, b, c, d) has the membership function

        μ(x) = 0                  if x ≤ a or x ≥ d
             = (x - a) / (b - a)  if a < x < b
             = 1                  if b ≤ x ≤ c
             = (d - x) / (d - c)  if c < x < d

    A triangular set is the special case c = b.  The plateau test comes
    first, so a degenerate edge (a = b or c = d) jumps straight to 1 and
    never divides by zero.
"""

from typing import Union

import numpy as np

from core.entities import Term


def membership(x: float, a: float, b: float, c: float, d: float,
               is_triangle: bool = False) -> float:
    """
    Membership degree of *x* in the trapezoid ``(a, b, c, d)``.

    Args:
        x: Point to evaluate
        a, b, c, d: Trapezoid parameters, ``a ≤ b ≤ c ≤ d``
        is_triangle: Collapse the plateau to ``b``

    Returns:
        Degree in ``[0, 1]``
    """
    if is_triangle:
        c = b
    if b <= x <= c:
        return 1.0
    if x <= a or x >= d:
        return 0.0
    if x < b:
        return (x - a) / (b - a)
    return (d - x) / (d - c)


def membership_with_edges(x: float, a: float, b: float, c: float, d: float,
                          is_triangle: bool = False,
                          extend_left: bool = False,
                          extend_right: bool = False) -> float:
    """
    Membership with saturation at the universe boundary.

    The leftmost term of a partition may report 1 for every ``x ≤ c`` and
    the rightmost for every ``x ≥ b``, so crisp values outside the universe
    still belong fully to the boundary term.
    """
    if is_triangle:
        c = b
    if extend_left and x <= c:
        return 1.0
    if extend_right and x >= b:
        return 1.0
    return membership(x, a, b, c, d)


def membership_array(xs: np.ndarray, a: float, b: float, c: float, d: float,
                     is_triangle: bool = False) -> np.ndarray:
    """Vectorised :func:`membership` over an array of points."""
    xs = np.asarray(xs, dtype=float)
    if is_triangle:
        c = b
    out = np.zeros_like(xs)

    if b > a:
        rising = (xs > a) & (xs < b)
        out[rising] = (xs[rising] - a) / (b - a)
    if d > c:
        falling = (xs > c) & (xs < d)
        out[falling] = (d - xs[falling]) / (d - c)
    out[(xs >= b) & (xs <= c)] = 1.0
    return out


def term_membership(term: Term, x: Union[float, np.ndarray]):
    """Evaluate a :class:`Term` at a scalar or an array of points."""
    if isinstance(x, np.ndarray):
        return membership_array(x, term.a, term.b, term.c, term.d, term.is_triangle)
    return membership(float(x), term.a, term.b, term.c, term.d, term.is_triangle)


class MembershipEvaluator:
    """
    Stateless membership evaluator bound to edge-saturation settings.

    ``saturate_edges`` makes the first and last term of a variable report
    full membership beyond the universe bounds.
    """

    def __init__(self, saturate_edges: bool = False):
        self.saturate_edges = saturate_edges

    def degree(self, term: Term, x: float,
               is_first: bool = False, is_last: bool = False) -> float:
        if self.saturate_edges and (is_first or is_last):
            return membership_with_edges(
                x, term.a, term.b, term.c, term.d, term.is_triangle,
                extend_left=is_first, extend_right=is_last,
            )
        return membership(x, term.a, term.b, term.c, term.d, term.is_triangle)

    def curve(self, term: Term, xs: np.ndarray) -> np.ndarray:
        return membership_array(xs, term.a, term.b, term.c, term.d, term.is_triangle)


__all__ = [
    'membership',
    'membership_with_edges',
    'membership_array',
    'term_membership',
    'MembershipEvaluator',
]
