# -*- coding: utf-8 -*-
"""
Editor Module
=============

Problem tree and variable editing on top of the partition store and the
rule matrix.
"""

from .problem_editor import ProblemEditor

__all__ = ['ProblemEditor']
