# -*- coding: utf-8 -*-
"""
Core Domain Types
=================

Entities of the problem tree and the engine's exception hierarchy.
"""

from .keys import RuleKey
from .entities import VariableKind, Problem, Variable, Term, Rule
from .exceptions import (
    FuzzyEngineError,
    ValidationError,
    NotFoundError,
    DataInconsistencyError,
    InternalError,
)

__all__ = [
    'RuleKey',
    'VariableKind',
    'Problem',
    'Variable',
    'Term',
    'Rule',
    'FuzzyEngineError',
    'ValidationError',
    'NotFoundError',
    'DataInconsistencyError',
    'InternalError',
]
