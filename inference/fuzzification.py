# -*- coding: utf-8 -*-
"""
Fuzzification
=============

Maps crisp input values to membership degrees of every term of the
corresponding input variable.
"""

from typing import Dict, List, Mapping, Sequence, Tuple

from core.entities import Term, Variable
from partition.membership import MembershipEvaluator
from .results import FuzzifiedInput


def fuzzify(value: float, terms: Sequence[Term],
            evaluator: MembershipEvaluator) -> Dict[int, float]:
    """Degree of *value* in every term; *terms* ordered by ascending ``a``."""
    last = len(terms) - 1
    return {
        t.id: evaluator.degree(t, value, is_first=(i == 0), is_last=(i == last))
        for i, t in enumerate(terms)
    }


def fuzzify_inputs(variables: Sequence[Variable],
                   terms: Mapping[int, Sequence[Term]],
                   values: Mapping[int, float],
                   evaluator: MembershipEvaluator,
                   ) -> Tuple[Dict[int, float], List[FuzzifiedInput]]:
    """
    Fuzzify every input variable.

    Returns
    -------
    tuple
        ``term_id -> degree`` over all input terms, and the per-variable
        breakdown kept for display.
    """
    memberships: Dict[int, float] = {}
    breakdown: List[FuzzifiedInput] = []
    for var in variables:
        var_terms = list(terms.get(var.id, []))
        degrees = fuzzify(values[var.id], var_terms, evaluator)
        memberships.update(degrees)
        breakdown.append(FuzzifiedInput(
            variable_id=var.id,
            name=var.name,
            value=values[var.id],
            degrees=[(t.id, t.label, degrees[t.id]) for t in var_terms],
        ))
    return memberships, breakdown


__all__ = ['fuzzify', 'fuzzify_inputs']
