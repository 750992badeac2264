# -*- coding: utf-8 -*-
"""
Rule Evaluation and Aggregation
===============================

Rule evaluation (min T-norm):
    strength(rule) = min(μ(t) for t in rule.key)

Aggregation (max S-norm):
    strength(output term) = max(strength(rule) for rules assigned to it)

Rows without an assignment, with an empty key, or referring to a term that
has no membership entry are skipped, not reported as errors.
"""

from typing import Dict, Iterable, List, Mapping

from core.entities import Rule
from loggers import get_module_logger
from .results import FiredRule

logger = get_module_logger(__name__)


def evaluate_rules(rules: Iterable[Rule], memberships: Mapping[int, float]) -> List[FiredRule]:
    """Firing strength of every rule that fires (strength > 0)."""
    fired = []
    for rule in rules:
        if rule.output_term_id is None or not rule.key:
            continue
        missing = [i for i in rule.key if i not in memberships]
        if missing:
            logger.debug("Skipping rule %d: key %s refers to unknown term(s) %s",
                         rule.id, rule.key, missing)
            continue
        strength = min(memberships[i] for i in rule.key)
        if strength > 0:
            fired.append(FiredRule(rule.id, rule.key, rule.output_term_id, strength))
    return fired


def aggregate(fired: Iterable[FiredRule]) -> Dict[int, float]:
    """Maximum firing strength per output term."""
    strengths: Dict[int, float] = {}
    for f in fired:
        if f.strength > strengths.get(f.output_term_id, 0.0):
            strengths[f.output_term_id] = f.strength
    return strengths


__all__ = ['evaluate_rules', 'aggregate']
