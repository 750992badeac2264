# -*- coding: utf-8 -*-
"""
Problem Consistency Audit
=========================

Read-only audit of a whole problem:

1. Partition validity
   - every variable with terms forms a Ruspini partition
2. Rule matrix completeness
   - each output variable holds exactly the Cartesian product of the input
     term sets, with no duplicates or stale combinations
   - assignments point at terms of the rule's own output variable
3. Coverage
   - share of assigned rules per output variable

Structural edits keep all of this true; the audit is meant for data that
was written by other tools or imported from elsewhere.
"""

from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from config import PartitionConfig, get_config
from core.entities import VariableKind
from loggers import get_module_logger
from partition.invariant import PartitionInvariant
from rules.matrix import rule_violations
from storage.base import Storage

_logger = get_module_logger(__name__)


@dataclass
class VariableAudit:
    """Audit outcome for one variable."""
    variable_id: int
    name: str
    kind: VariableKind
    n_terms: int
    partition_violations: List[str] = field(default_factory=list)
    rule_violations: List[str] = field(default_factory=list)
    n_rules: int = 0
    n_assigned: int = 0

    @property
    def ok(self) -> bool:
        return not self.partition_violations and not self.rule_violations

    @property
    def coverage(self) -> float:
        return self.n_assigned / self.n_rules if self.n_rules else 0.0


@dataclass
class ConsistencyReport:
    """Audit outcome for a whole problem."""
    problem_id: int
    problem_name: str
    variables: List[VariableAudit] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(v.ok for v in self.variables)

    @property
    def violations(self) -> Dict[str, List[str]]:
        return {v.name: v.partition_violations + v.rule_violations
                for v in self.variables if not v.ok}

    def to_frame(self) -> pd.DataFrame:
        rows = [{
            'variable': v.name,
            'kind': v.kind.value,
            'terms': v.n_terms,
            'rules': v.n_rules,
            'coverage': v.coverage,
            'ok': v.ok,
        } for v in self.variables]
        return pd.DataFrame(rows, columns=['variable', 'kind', 'terms', 'rules',
                                           'coverage', 'ok'])

    def summary(self) -> str:
        lines = [
            f"\n{'='*70}",
            f"CONSISTENCY AUDIT: {self.problem_name}",
            f"{'='*70}",
            f"Status: {'PASSED' if self.ok else 'FAILED'}",
        ]
        for v in self.variables:
            line = f"  {v.kind.value:<6} {v.name:<20} terms={v.n_terms}"
            if v.kind is VariableKind.OUTPUT:
                line += f" rules={v.n_rules} coverage={v.coverage:.0%}"
            lines.append(line)
            for msg in v.partition_violations + v.rule_violations:
                lines.append(f"      - {msg}")
        lines.append('=' * 70)
        return '\n'.join(lines)


def audit_problem(storage: Storage, problem_id: int,
                  config: PartitionConfig = None) -> ConsistencyReport:
    """Audit partitions and rule matrices of one problem."""
    config = config or get_config().partition
    invariant = PartitionInvariant(config.tolerance, config.sample_points)
    snap = storage.snapshot(problem_id)
    report = ConsistencyReport(problem_id=problem_id, problem_name=snap.problem.name)
    term_sets = {v.id: sorted(t.id for t in snap.terms_of(v.id)) for v in snap.inputs}

    for var in snap.inputs + snap.outputs:
        terms = snap.terms_of(var.id)
        audit = VariableAudit(variable_id=var.id, name=var.name, kind=var.kind,
                              n_terms=len(terms))
        audit.partition_violations = invariant.validate(terms, var.start, var.end).violations
        if var.kind is VariableKind.OUTPUT:
            rules = snap.rules_of(var.id)
            audit.n_rules = len(rules)
            audit.n_assigned = sum(1 for r in rules if r.is_assigned)
            audit.rule_violations = rule_violations(
                rules, term_sets, (t.id for t in terms))
        report.variables.append(audit)

    if not report.ok:
        _logger.warning("Problem %d failed the consistency audit: %s",
                        problem_id, report.violations)
    return report


__all__ = ['VariableAudit', 'ConsistencyReport', 'audit_problem']
