# -*- coding: utf-8 -*-
"""
Visualization Package
=====================

Membership-curve figures for partitions and evaluation outputs.

Quick start::

    from visualization import PartitionPlotter
    plotter = PartitionPlotter('outputs/figures')
    plotter.plot_partition(variable, terms)
"""

from .base import BasePlotter, apply_style, HAS_MATPLOTLIB
from .partition_plots import PartitionPlotter

__all__ = [
    'BasePlotter',
    'apply_style',
    'HAS_MATPLOTLIB',
    'PartitionPlotter',
]
