# -*- coding: utf-8 -*-
"""
Storage Module
==============

Storage collaborator interface, an in-memory backend, and the unit of work
grouping one structural edit into a single validated transaction.
"""

from .base import ProblemSnapshot, Storage
from .memory import InMemoryStorage
from .unit_of_work import UnitOfWork

__all__ = [
    'ProblemSnapshot',
    'Storage',
    'InMemoryStorage',
    'UnitOfWork',
]
