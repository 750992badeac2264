# -*- coding: utf-8 -*-
"""
Domain Entities
===============

Plain dataclasses describing a decision problem:

- Problem  : node of the problem tree
- Variable : linguistic variable (input or output) with universe ``[start, end]``
- Term     : trapezoidal / triangular fuzzy set owned by one variable
- Rule     : one row of the rule matrix of an output variable

Entities are mutable records; storage backends hand out copies so that
changing an entity never touches stored state until it is written back.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .keys import RuleKey


class VariableKind(Enum):
    """Role of a linguistic variable inside a problem."""
    INPUT = "input"
    OUTPUT = "output"


@dataclass
class Problem:
    """Node of the problem tree (``parent_id`` is ``None`` for roots)."""
    id: int
    name: str
    parent_id: Optional[int] = None
    description: str = ""
    is_final: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass
class Variable:
    """Linguistic variable over the universe of discourse ``[start, end]``."""
    id: int
    problem_id: int
    kind: VariableKind
    name: str
    start: float
    end: float

    @property
    def is_input(self) -> bool:
        return self.kind is VariableKind.INPUT

    @property
    def midpoint(self) -> float:
        return (self.start + self.end) / 2.0

    @property
    def width(self) -> float:
        return self.end - self.start


@dataclass
class Term:
    """
    Trapezoidal fuzzy set ``(a, b, c, d)``.

    ``a``/``d`` bound the support, ``b``/``c`` the plateau. With
    ``is_triangle`` set the plateau collapses to the single point ``b``
    and ``c`` is ignored for evaluation.
    """
    id: int
    variable_id: int
    label: str
    a: float
    b: float
    c: float
    d: float
    is_triangle: bool = False

    @property
    def effective_c(self) -> float:
        return self.b if self.is_triangle else self.c

    @property
    def geometry(self) -> Tuple[float, float, float, float]:
        return (self.a, self.b, self.c, self.d)

    def with_geometry(self, a: float, b: float, c: float, d: float) -> 'Term':
        """Copy of this term with new parameters, same id and label."""
        return replace(self, a=a, b=b, c=c, d=d)


@dataclass
class Rule:
    """Rule row: input-term combination and the output term it fires."""
    id: int
    output_variable_id: int
    key: RuleKey
    output_term_id: Optional[int] = None

    @property
    def is_assigned(self) -> bool:
        return self.output_term_id is not None


__all__ = ['VariableKind', 'Problem', 'Variable', 'Term', 'Rule']
