# -*- coding: utf-8 -*-
"""
Inference Result Types
======================
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import pandas as pd

from config import DefuzzificationMethod
from core.keys import RuleKey


@dataclass
class FuzzifiedInput:
    """Membership breakdown of one crisp input."""
    variable_id: int
    name: str
    value: float
    degrees: List[Tuple[int, str, float]]   # (term id, label, degree)

    def degree_of(self, label: str) -> float:
        for _, term_label, degree in self.degrees:
            if term_label == label:
                return degree
        raise KeyError(label)


@dataclass
class FiredRule:
    """A rule whose antecedent holds with positive strength."""
    rule_id: int
    key: RuleKey
    output_term_id: int
    strength: float


@dataclass
class OutputResult:
    """Crisp value of one output variable plus how it was reached."""
    variable_id: int
    name: str
    crisp_value: float
    fired_rules: int
    strengths: Dict[int, float] = field(default_factory=dict)   # output term id -> max strength


@dataclass
class EvaluationResult:
    """Result of ``InferenceEngine.evaluate`` for one problem."""
    problem_id: int
    problem_name: str
    method: DefuzzificationMethod
    resolution: int
    inputs: List[FuzzifiedInput] = field(default_factory=list)
    outputs: List[OutputResult] = field(default_factory=list)

    @property
    def crisp_values(self) -> Dict[int, float]:
        """Output variable id -> crisp value."""
        return {o.variable_id: o.crisp_value for o in self.outputs}

    def output(self, name: str) -> OutputResult:
        for o in self.outputs:
            if o.name == name:
                return o
        raise KeyError(name)

    def memberships_frame(self) -> pd.DataFrame:
        """Long table of ``variable, value, term, degree``."""
        rows = [
            {'variable': i.name, 'value': i.value, 'term': label, 'degree': degree}
            for i in self.inputs for _, label, degree in i.degrees
        ]
        return pd.DataFrame(rows, columns=['variable', 'value', 'term', 'degree'])

    def outputs_frame(self) -> pd.DataFrame:
        rows = [
            {'variable': o.name, 'crisp_value': o.crisp_value, 'fired_rules': o.fired_rules}
            for o in self.outputs
        ]
        return pd.DataFrame(rows, columns=['variable', 'crisp_value', 'fired_rules'])


__all__ = ['FuzzifiedInput', 'FiredRule', 'OutputResult', 'EvaluationResult']
