# -*- coding: utf-8 -*-
"""
Split / Merge / Snap Geometry
=============================

Pure functions computing new term parameters for every structural edit of
a partition.  None of them touch storage; ``PartitionStore`` stages their
results inside a unit of work and validates before writing.

All functions expect terms ordered by ascending ``a`` and return new
``Term`` objects (inputs are never mutated).
"""

from typing import List, Optional, Sequence, Tuple

from core.entities import Term

Geometry = Tuple[float, float, float, float]


def guard_epsilon(start: float, end: float, ratio: float = 1e-3) -> float:
    """Guard distance placed beyond the universe bounds."""
    return (end - start) * ratio


# =========================================================================
# Insertion
# =========================================================================

def initial_geometry(start: float, end: float, eps: float) -> Geometry:
    """Single plateau term covering the whole universe."""
    return (start - eps, start, end, end + eps)


def split_rightmost(terms: Sequence[Term], end: float,
                    eps: float) -> Tuple[List[Term], Geometry]:
    """
    Split the rightmost term (max ``d``) at its midpoint.

    The left half keeps the existing term's identity, the right half is the
    geometry of the new term.  When the rightmost term's plateau reaches
    ``end`` the new term becomes the last term: it keeps ``c = end`` and the
    outer edge ``max(d, end + eps)``, while the split point is taken between
    ``b`` and ``end + eps`` so a widened right shoulder does not push it past
    ``end``.  A last term peaking at ``end`` (no plateau left to split) is
    split on its rising edge instead, and its left neighbour follows.

    Parameters
    ----------
    terms : sequence of Term
        Current partition, ordered by ascending ``a``.
    end : float
        Upper bound of the universe.
    eps : float
        Guard distance beyond ``end``.

    Returns
    -------
    tuple[list[Term], Geometry]
        Resized existing terms and the new term's ``(a, b, c, d)``.
    """
    if not terms:
        raise ValueError("split_rightmost needs at least one term")
    rightmost = max(terms, key=lambda t: (t.d, t.a, t.b))
    a, b, d = rightmost.a, rightmost.b, rightmost.d

    if rightmost.effective_c < end - eps:
        mid = (a + d) / 2
        q = (d - a) / 4
        resized = rightmost.with_geometry(a, b, mid - q, mid + q)
        resized.is_triangle = False
        return [resized], (mid - q, mid + q, d - q, d)

    outer = max(d, end + eps)
    left, _ = neighbours(terms, rightmost)
    if end - b < eps and left is not None:
        mid = (a + b) / 2
        shoulder = (mid + b) / 2
        resized = rightmost.with_geometry(a, mid, mid, shoulder)
        snapped = left.with_geometry(left.a, left.b, a, mid)
        return [snapped, resized], (mid, shoulder, end, outer)

    width = min(d, end + eps) - b
    mid = b + width / 2
    q = width / 4
    resized = rightmost.with_geometry(a, b, mid - q, mid + q)
    resized.is_triangle = False
    return [resized], (mid - q, mid + q, end, outer)


# =========================================================================
# Removal
# =========================================================================

def neighbours(terms: Sequence[Term], term: Term) -> Tuple[Optional[Term], Optional[Term]]:
    """
    Left and right neighbour of *term* in the ordered sequence *terms*.

    Neighbours are looked up by position, so equal ``a`` values (as produced
    by :func:`default_partition`) still resolve to the right pair.
    """
    ids = [t.id for t in terms]
    if term.id not in ids:
        raise ValueError(f"term {term.id} is not part of the partition")
    i = ids.index(term.id)
    left = terms[i - 1] if i > 0 else None
    right = terms[i + 1] if i + 1 < len(terms) else None
    return left, right


def merge_on_remove(terms: Sequence[Term], removed: Term) -> List[Term]:
    """
    Resize the neighbours of *removed* so they absorb its support.

    Returns the resized neighbours (zero, one or two terms).
    """
    left, right = neighbours(terms, removed)
    if left is not None and right is not None:
        span = removed.d - removed.a
        mid = removed.a + span / 2
        pivot = span / 4
        return [
            left.with_geometry(left.a, left.b, mid - pivot, mid + pivot),
            right.with_geometry(mid - pivot, mid + pivot, right.c, right.d),
        ]
    if left is not None:
        return [left.with_geometry(left.a, left.b, removed.c, removed.d)]
    if right is not None:
        return [right.with_geometry(removed.a, removed.b, right.c, right.d)]
    return []


# =========================================================================
# Direct edit
# =========================================================================

def snap_neighbours(terms: Sequence[Term], edited: Term) -> List[Term]:
    """Re-snap the neighbours of *edited* to its new edges."""
    left, right = neighbours(terms, edited)
    snapped = []
    if left is not None:
        snapped.append(left.with_geometry(left.a, left.b, edited.a, edited.b))
    if right is not None:
        snapped.append(right.with_geometry(edited.effective_c, edited.d,
                                           right.c, right.d))
    return snapped


def swap_geometry(first: Term, second: Term) -> Tuple[Term, Term]:
    """Exchange parameters of two terms; ids and labels stay put."""
    new_first = first.with_geometry(*second.geometry)
    new_first.is_triangle = second.is_triangle
    new_second = second.with_geometry(*first.geometry)
    new_second.is_triangle = first.is_triangle
    return new_first, new_second


def rescale(terms: Sequence[Term], old_start: float, old_end: float,
            new_start: float, new_end: float) -> List[Term]:
    """Map every term linearly from ``[old_start, old_end]`` onto the new range."""
    ratio = (new_end - new_start) / (old_end - old_start)

    def _map(v: float) -> float:
        return new_start + (v - old_start) * ratio

    return [t.with_geometry(_map(t.a), _map(t.b), _map(t.c), _map(t.d))
            for t in terms]


# =========================================================================
# Default partitions
# =========================================================================

def default_partition(n: int, start: float, end: float) -> List[Geometry]:
    """
    Evenly spaced partition of *n* terms over ``[start, end]``.

    Neighbouring terms overlap by ``(end - start) / (n - 1) / 2``; the first
    term starts with ``a = b = start`` and the last ends with ``c = d = end``.
    """
    if n <= 0:
        return []
    if n == 1:
        return [(start, start, end, end)]

    width = end - start
    overlap = width / (n - 1) / 2
    out: List[Geometry] = []
    for i in range(n):
        centre = start + width * i / (n - 1)
        if i == 0:
            out.append((start, start, centre, centre + overlap))
        elif i == n - 1:
            prev = out[-1]
            out.append((prev[2], prev[3], end, end))
        else:
            prev = out[-1]
            out.append((prev[2], prev[3], centre, centre + overlap))
    return out


__all__ = [
    'Geometry',
    'guard_epsilon',
    'initial_geometry',
    'split_rightmost',
    'neighbours',
    'merge_on_remove',
    'snap_neighbours',
    'swap_geometry',
    'rescale',
    'default_partition',
]
