# -*- coding: utf-8 -*-
"""
Defuzzification
===============

Every output term is clipped at its aggregated strength and the clipped
curves are combined by pointwise maximum.  The aggregated curve is sampled
at ``resolution`` evenly spaced points over ``[start, end]`` and reduced to
one crisp value:

    centroid : Σ x·μ(x) / Σ μ(x)
    bisector : smallest x where the cumulative area reaches half the total
    mom      : mean of the points attaining the maximum
    som      : first point attaining the maximum
    lom      : last point attaining the maximum

When nothing fired (or the curve has no area) the result falls back to the
universe midpoint, except ``som`` (start) and ``lom`` (end).
"""

from typing import Mapping, Sequence, Union

import numpy as np

from config import DefuzzificationMethod
from core.entities import Term
from core.exceptions import ValidationError
from partition.membership import membership_array

_ZERO = 1e-12


def resolve_method(method: Union[str, DefuzzificationMethod]) -> DefuzzificationMethod:
    """Accept an enum member or its (case-insensitive) name."""
    if isinstance(method, DefuzzificationMethod):
        return method
    try:
        return DefuzzificationMethod(str(method).strip().lower())
    except ValueError:
        valid = ', '.join(m.value for m in DefuzzificationMethod)
        raise ValidationError(
            f"unknown defuzzification method {method!r}; expected one of {valid}") from None


def sample_points(start: float, end: float, resolution: int) -> np.ndarray:
    if int(resolution) < 2:
        raise ValidationError(f"resolution must be at least 2, got {resolution}")
    return np.linspace(start, end, int(resolution))


def aggregated_curve(terms: Sequence[Term], strengths: Mapping[int, float],
                     xs: np.ndarray) -> np.ndarray:
    """Pointwise maximum of the clipped output terms."""
    mu = np.zeros(len(xs))
    for t in terms:
        level = strengths.get(t.id, 0.0)
        if level <= 0:
            continue
        clipped = np.minimum(membership_array(xs, t.a, t.b, t.c, t.d, t.is_triangle), level)
        np.maximum(mu, clipped, out=mu)
    return mu


def _fallback(method: DefuzzificationMethod, start: float, end: float) -> float:
    if method is DefuzzificationMethod.SOM:
        return float(start)
    if method is DefuzzificationMethod.LOM:
        return float(end)
    return (start + end) / 2.0


def reduce_curve(xs: np.ndarray, mu: np.ndarray, method: DefuzzificationMethod,
                 start: float, end: float, plateau_tolerance: float = 1e-6) -> float:
    """Reduce a sampled membership curve to a crisp value."""
    total = float(mu.sum())
    if total <= _ZERO:
        return _fallback(method, start, end)

    if method is DefuzzificationMethod.CENTROID:
        return float((xs * mu).sum() / total)

    if method is DefuzzificationMethod.BISECTOR:
        cumulative = np.cumsum(mu)
        idx = int(np.argmax(cumulative >= total / 2.0 - _ZERO))
        return float(xs[idx])

    peak = float(mu.max())
    tol = max(_ZERO, plateau_tolerance * peak)
    tops = xs[np.abs(mu - peak) <= tol]
    if method is DefuzzificationMethod.MOM:
        return float(tops.mean())
    if method is DefuzzificationMethod.SOM:
        return float(tops[0])
    return float(tops[-1])


def defuzzify(terms: Sequence[Term], strengths: Mapping[int, float],
              start: float, end: float,
              method: Union[str, DefuzzificationMethod] = DefuzzificationMethod.CENTROID,
              resolution: int = 100, plateau_tolerance: float = 1e-6) -> float:
    """
    Crisp value of the aggregated output.

    Parameters
    ----------
    terms : sequence of Term
        Terms of the output variable.
    strengths : mapping
        Output term id -> aggregated firing strength.  Ids that match no
        term are ignored.
    start, end : float
        Universe of the output variable.
    method : str or DefuzzificationMethod
    resolution : int
        Number of sample points (at least 2).

    Returns
    -------
    float
    """
    method = resolve_method(method)
    xs = sample_points(start, end, resolution)
    mu = aggregated_curve(terms, strengths, xs)
    return reduce_curve(xs, mu, method, start, end, plateau_tolerance)


__all__ = [
    'resolve_method',
    'sample_points',
    'aggregated_curve',
    'reduce_curve',
    'defuzzify',
]
