# -*- coding: utf-8 -*-
"""
Rule Matrix
===========

For every output variable of a problem the rule matrix holds exactly one
row per element of the Cartesian product of the input variables' term sets.
Input variables without terms do not take part in the product, so with no
input term anywhere there are no rows.

Repairs are staged into a ``UnitOfWork`` by the partition store and the
problem editor.  Each repair first transforms the existing rows (extend,
clone, repoint or project keys), then reconciles them against the expected
product:

- rows whose key is not expected are deleted
- duplicate keys collapse onto one row (an assigned row wins)
- missing keys are created unassigned

A final check compares the staged result with the expected product.
"""

import itertools
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import pandas as pd

from core.entities import Rule, Variable, VariableKind
from core.exceptions import NotFoundError, ValidationError
from core.keys import RuleKey
from loggers import get_module_logger
from storage.base import Storage
from storage.unit_of_work import UnitOfWork

logger = get_module_logger(__name__)

TermSets = Dict[int, List[int]]


def expected_keys(term_sets: TermSets) -> Set[RuleKey]:
    """Cartesian product of the non-empty term-id sets."""
    groups = [ids for _, ids in sorted(term_sets.items()) if ids]
    if not groups:
        return set()
    return {RuleKey(combo) for combo in itertools.product(*groups)}


def key_violations(rules: Sequence[Rule], expected: Set[RuleKey]) -> List[str]:
    """Describe how *rules* differ from the expected key set."""
    problems = []
    keys = [r.key for r in rules]
    seen: Set[RuleKey] = set()
    for k in keys:
        if k in seen:
            problems.append(f"duplicate rule key {k}")
        seen.add(k)
    missing = expected - seen
    stale = seen - expected
    if missing:
        problems.append(f"{len(missing)} missing combination(s), e.g. "
                        f"{sorted(missing, key=lambda k: k.ids)[0]}")
    if stale:
        problems.append(f"{len(stale)} stale combination(s), e.g. "
                        f"{sorted(stale, key=lambda k: k.ids)[0]}")
    return problems


def rule_violations(rules: Sequence[Rule], term_sets: TermSets,
                    own_term_ids: Iterable[int]) -> List[str]:
    """Key problems plus assignments to terms outside the output variable."""
    problems = key_violations(rules, expected_keys(term_sets))
    own = set(own_term_ids)
    for r in rules:
        if r.output_term_id is not None and r.output_term_id not in own:
            problems.append(f"rule {r.id} assigned to foreign term {r.output_term_id}")
    return problems


class RuleMatrix:
    """Reads, assigns and repairs rule rows through a storage backend."""

    def __init__(self, storage: Storage):
        self.storage = storage

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _output_variable(self, output_variable_id: int) -> Variable:
        variable = self.storage.get_variable(output_variable_id)
        if variable.kind is not VariableKind.OUTPUT:
            raise ValidationError(
                f"variable {output_variable_id} ({variable.name!r}) is not an output variable")
        return variable

    def get_rules(self, output_variable_id: int) -> List[Rule]:
        self._output_variable(output_variable_id)
        return self.storage.list_rules(output_variable_id)

    def get_rows(self, output_variable_id: int) -> List[Tuple[RuleKey, Optional[int]]]:
        """``(key, assigned output term id or None)`` for every row."""
        return [(r.key, r.output_term_id) for r in self.get_rules(output_variable_id)]

    def term_sets(self, problem_id: int,
                  overrides: Optional[TermSets] = None) -> TermSets:
        """Input variable id -> sorted term ids, with staged *overrides* applied."""
        sets: TermSets = {}
        for var in self.storage.list_variables(problem_id, VariableKind.INPUT):
            sets[var.id] = sorted(t.id for t in self.storage.list_terms(var.id))
        for var_id, ids in (overrides or {}).items():
            if ids is None:
                sets.pop(var_id, None)
            else:
                sets[var_id] = sorted(ids)
        return sets

    def expected_keys(self, problem_id: int) -> Set[RuleKey]:
        return expected_keys(self.term_sets(problem_id))

    def violations(self, output_variable_id: int) -> List[str]:
        """Consistency problems of one output variable's rule set."""
        variable = self._output_variable(output_variable_id)
        return rule_violations(
            self.storage.list_rules(output_variable_id),
            self.term_sets(variable.problem_id),
            (t.id for t in self.storage.list_terms(output_variable_id)),
        )

    def to_frame(self, output_variable_id: int) -> pd.DataFrame:
        """Rule table with one label column per input variable plus the output."""
        variable = self._output_variable(output_variable_id)
        inputs = self.storage.list_variables(variable.problem_id, VariableKind.INPUT)
        owner: Dict[int, Tuple[str, str]] = {}
        for var in inputs:
            for t in self.storage.list_terms(var.id):
                owner[t.id] = (var.name, t.label)
        out_labels = {t.id: t.label for t in self.storage.list_terms(output_variable_id)}

        records = []
        for rule in self.storage.list_rules(output_variable_id):
            row = {var.name: None for var in inputs}
            for term_id in rule.key:
                if term_id in owner:
                    var_name, label = owner[term_id]
                    row[var_name] = label
            row[variable.name] = out_labels.get(rule.output_term_id)
            row['key'] = rule.key.encode()
            row['rule_id'] = rule.id
            records.append(row)
        columns = [v.name for v in inputs] + [variable.name, 'key', 'rule_id']
        return pd.DataFrame.from_records(records, columns=columns).set_index('rule_id')

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    def assign(self, rule_id: int, output_term_id: Optional[int]) -> Rule:
        """Point a rule at an output term of its own variable, or clear it."""
        rule = self.storage.get_rule(rule_id)
        if output_term_id is not None:
            term = self.storage.get_term(output_term_id)
            if term.variable_id != rule.output_variable_id:
                raise ValidationError(
                    f"term {output_term_id} does not belong to output variable "
                    f"{rule.output_variable_id}")
        rule.output_term_id = output_term_id
        uow = UnitOfWork(self.storage)
        uow.update(rule)
        uow.commit()
        logger.info("Rule %d %s -> %s", rule.id, rule.key, output_term_id)
        return rule

    def assign_by_labels(self, output_variable_id: int, labels: Dict[int, str],
                         output_label: Optional[str]) -> Rule:
        """Assign the row selected by ``{input variable id: term label}``."""
        variable = self._output_variable(output_variable_id)
        ids = []
        for var_id, label in labels.items():
            match = [t.id for t in self.storage.list_terms(var_id) if t.label == label]
            if not match:
                raise NotFoundError(
                    'term', message=f"term {label!r} of variable {var_id} not found")
            ids.append(match[0])
        key = RuleKey(ids)
        rule = next((r for r in self.storage.list_rules(variable.id) if r.key == key), None)
        if rule is None:
            raise NotFoundError('rule', message=f"rule {key.encode()} not found")
        target = None
        if output_label is not None:
            target = next((t.id for t in self.storage.list_terms(variable.id)
                           if t.label == output_label), None)
            if target is None:
                raise NotFoundError(
                    'term',
                    message=f"term {output_label!r} of variable {variable.id} not found")
        return self.assign(rule.id, target)

    # ------------------------------------------------------------------
    # Staged repairs
    # ------------------------------------------------------------------

    def stage_term_added(self, uow: UnitOfWork, problem_id: int, variable_id: int,
                         new_term_id: int, term_sets_after: TermSets) -> None:
        self.stage_terms_added(uow, problem_id, variable_id, [new_term_id], term_sets_after)

    def stage_terms_added(self, uow: UnitOfWork, problem_id: int, variable_id: int,
                          new_term_ids: Sequence[int], term_sets_after: TermSets) -> None:
        """Extend the product with new terms of one input variable.

        Rows holding a sibling term are cloned (unassigned) with the new id in
        that slot.  When the variable had no terms, the first new id is
        appended to every existing row, keeping its assignment.
        """
        new_ids = list(new_term_ids)
        if not new_ids:
            return
        siblings = [i for i in term_sets_after.get(variable_id, []) if i not in new_ids]

        def extend(rules: List[Rule]) -> List[Tuple[Optional[Rule], RuleKey, Optional[int]]]:
            rows = [(r, r.key, r.output_term_id) for r in rules]
            clone_ids = new_ids
            if siblings:
                pivot = min(siblings)
            else:
                pivot, clone_ids = new_ids[0], new_ids[1:]
                rows = [(r, k.with_term(pivot), a) for r, k, a in rows]
            clones = [(None, k.replace_term(pivot, new_id), None)
                      for new_id in clone_ids
                      for _, k, _ in rows if pivot in k]
            return rows + clones

        self._repair(uow, problem_id, term_sets_after, extend, 'term added')

    def stage_term_removed(self, uow: UnitOfWork, problem_id: int, variable_id: int,
                           removed_term_id: int, term_sets_after: TermSets) -> None:
        siblings = sorted(term_sets_after.get(variable_id, []))

        def repoint(rules: List[Rule]) -> List[Tuple[Optional[Rule], RuleKey, Optional[int]]]:
            if not siblings:
                return [(r, r.key.without_term(removed_term_id), r.output_term_id)
                        for r in rules]
            taken = {r.key for r in rules if removed_term_id not in r.key}
            rows = []
            for r in rules:
                key = r.key
                if removed_term_id in key:
                    for s in siblings:
                        candidate = key.replace_term(removed_term_id, s)
                        if candidate not in taken:
                            key = candidate
                            taken.add(candidate)
                            break
                rows.append((r, key, r.output_term_id))
            return rows

        self._repair(uow, problem_id, term_sets_after, repoint, 'term removed')

    def stage_input_variable_removed(self, uow: UnitOfWork, problem_id: int,
                                     term_ids: Iterable[int],
                                     term_sets_after: TermSets) -> None:
        """Project a removed input variable out of every row.

        Rows of its lowest-id term survive with that id stripped, keeping their
        assignment; rows of its other terms become stale and are dropped.
        """
        ids = sorted(term_ids)
        if not ids:
            return
        keep = ids[0]

        def project(rules: List[Rule]) -> List[Tuple[Optional[Rule], RuleKey, Optional[int]]]:
            return [(r, r.key.without_term(keep) if keep in r.key else r.key,
                     r.output_term_id) for r in rules]

        self._repair(uow, problem_id, term_sets_after, project, 'input variable removed')

    def stage_output_variable_added(self, uow: UnitOfWork, output_variable: Variable,
                                    term_sets: TermSets) -> None:
        target = expected_keys(term_sets)
        self._reconcile(uow, output_variable.id, [], target)
        logger.debug("Generated %d rule row(s) for output %r", len(target),
                     output_variable.name)

    def stage_output_term_removed(self, uow: UnitOfWork, output_variable_id: int,
                                  term_id: int) -> int:
        """Clear every assignment pointing at a removed output term."""
        cleared = 0
        for rule in self.storage.list_rules(output_variable_id):
            if rule.output_term_id == term_id:
                rule.output_term_id = None
                uow.update(rule)
                cleared += 1
        if cleared:
            logger.debug("Cleared %d assignment(s) of output term %d", cleared, term_id)
        return cleared

    def stage_output_variable_removed(self, uow: UnitOfWork, output_variable_id: int) -> None:
        for rule in self.storage.list_rules(output_variable_id):
            uow.delete(rule)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _repair(self, uow: UnitOfWork, problem_id: int, term_sets_after: TermSets,
                transform: Callable[[List[Rule]], list], reason: str) -> None:
        target = expected_keys(term_sets_after)
        for output in self.storage.list_variables(problem_id, VariableKind.OUTPUT):
            rows = transform(self.storage.list_rules(output.id))
            self._reconcile(uow, output.id, rows, target)
        logger.debug("Rule repair (%s): %d expected combination(s)", reason, len(target))

    def _reconcile(self, uow: UnitOfWork, output_variable_id: int,
                   rows: List[Tuple[Optional[Rule], RuleKey, Optional[int]]],
                   target: Set[RuleKey]) -> None:
        chosen: Dict[RuleKey, Tuple[Optional[Rule], Optional[int]]] = {}
        dropped: List[Rule] = []
        for rule, key, assigned in rows:
            if key not in target:
                if rule is not None:
                    dropped.append(rule)
                continue
            if key in chosen:
                prev_rule, prev_assigned = chosen[key]
                if prev_assigned is None and assigned is not None:
                    chosen[key] = (rule, assigned)
                    rule, assigned = prev_rule, prev_assigned
                if rule is not None:
                    dropped.append(rule)
                continue
            chosen[key] = (rule, assigned)

        final: List[Rule] = []
        for key, (rule, assigned) in chosen.items():
            if rule is None:
                rule = Rule(id=self.storage.allocate_id('rule'),
                            output_variable_id=output_variable_id,
                            key=key, output_term_id=assigned)
                uow.add(rule)
            elif rule.key != key or rule.output_term_id != assigned:
                rule.key = key
                rule.output_term_id = assigned
                uow.update(rule)
            final.append(rule)
        for key in sorted(target - set(chosen), key=lambda k: k.ids):
            rule = Rule(id=self.storage.allocate_id('rule'),
                        output_variable_id=output_variable_id, key=key)
            uow.add(rule)
            final.append(rule)
        for rule in dropped:
            uow.delete(rule)

        uow.check(f"rule matrix of output {output_variable_id}",
                  lambda: key_violations(final, target))


__all__ = [
    'TermSets',
    'expected_keys',
    'key_violations',
    'rule_violations',
    'RuleMatrix',
]
