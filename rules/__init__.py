# -*- coding: utf-8 -*-
"""
Rule Matrix Module
==================

Keeps every output variable's rule rows equal to the Cartesian product of
the input variables' term sets.

Example
-------
>>> from rules import RuleMatrix
>>> matrix = RuleMatrix(storage)
>>> for key, assigned in matrix.get_rows(output_id):
...     print(key.encode(), assigned)
"""

from core.keys import RuleKey
from .matrix import RuleMatrix, expected_keys, key_violations, rule_violations

__all__ = [
    'RuleKey',
    'RuleMatrix',
    'expected_keys',
    'key_violations',
    'rule_violations',
]
