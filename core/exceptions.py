# -*- coding: utf-8 -*-
"""
Exception Hierarchy
===================

All errors raised by the engine derive from ``FuzzyEngineError`` so that
callers can catch the whole family at once.

- ValidationError       : malformed input, rejected before any write
- NotFoundError         : referenced problem / variable / term / rule missing
- DataInconsistencyError: an invariant failed after a computed repair
- InternalError         : storage failure, transaction rolled back
"""

from typing import List, Optional, Sequence


class FuzzyEngineError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(FuzzyEngineError, ValueError):
    """Caller supplied data that can never be accepted."""


class NotFoundError(FuzzyEngineError, LookupError):
    """A referenced entity does not exist.

    Parameters
    ----------
    entity : str
        Entity kind, e.g. ``'term'`` or ``'variable'``.
    entity_id : int, optional
        Identifier that failed to resolve; ``None`` for lookups by label or
        rule key.
    message : str, optional
        Replaces the default ``"<entity> <entity_id> not found"`` text.
    """

    def __init__(self, entity: str, entity_id: Optional[int] = None,
                 message: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(message or f"{entity} {entity_id} not found")


class DataInconsistencyError(FuzzyEngineError):
    """An invariant check failed after a repair; the operation is aborted."""

    def __init__(self, message: str, violations: Optional[Sequence[str]] = None):
        self.violations: List[str] = list(violations or [])
        if self.violations:
            message = f"{message}: " + '; '.join(self.violations)
        super().__init__(message)


class InternalError(FuzzyEngineError):
    """The storage collaborator failed."""


__all__ = [
    'FuzzyEngineError',
    'ValidationError',
    'NotFoundError',
    'DataInconsistencyError',
    'InternalError',
]
