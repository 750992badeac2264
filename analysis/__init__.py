# -*- coding: utf-8 -*-
"""
Analysis Module
===============

Read-only consistency audit of problems.

Example
-------
>>> from analysis import audit_problem
>>> report = audit_problem(storage, problem_id)
>>> print(report.summary())
"""

from .consistency import VariableAudit, ConsistencyReport, audit_problem

__all__ = ['VariableAudit', 'ConsistencyReport', 'audit_problem']
