# -*- coding: utf-8 -*-
"""
Partition and Evaluation Plots
==============================

Membership curves of a variable's partition, and the clipped, aggregated
output of an evaluation with its crisp value.
"""

from __future__ import annotations

import numpy as np
from typing import Mapping, Optional, Sequence

from core.entities import Term, Variable
from partition.membership import membership_array
from partition.invariant import membership_sum
from inference.defuzzification import aggregated_curve
from .base import (
    BasePlotter, HAS_MATPLOTLIB,
    AGGREGATE_COLOR, CATEGORICAL_COLORS, CRISP_COLOR, plt,
)


class PartitionPlotter(BasePlotter):
    """Figures for linguistic variables and evaluation outputs."""

    def __init__(self, output_dir: str = 'outputs/figures', dpi: int = 150,
                 figsize=(10, 5), curve_points: int = 500):
        super().__init__(output_dir, dpi, figsize)
        self.curve_points = curve_points

    def _grid(self, variable: Variable) -> np.ndarray:
        return np.linspace(variable.start, variable.end, self.curve_points)

    # ==================================================================
    #  Partition of one variable
    # ==================================================================

    def plot_partition(
        self,
        variable: Variable,
        terms: Sequence[Term],
        show_sum: bool = True,
        save_name: Optional[str] = None,
    ) -> Optional[str]:
        if not HAS_MATPLOTLIB:
            return None

        xs = self._grid(variable)
        fig, ax = plt.subplots(figsize=self.figsize)
        for i, t in enumerate(terms):
            color = CATEGORICAL_COLORS[i % len(CATEGORICAL_COLORS)]
            mu = membership_array(xs, t.a, t.b, t.c, t.d, t.is_triangle)
            ax.plot(xs, mu, lw=2, color=color, label=t.label)
            ax.fill_between(xs, mu, alpha=0.08, color=color)
        if show_sum and terms:
            ax.plot(xs, membership_sum(terms, xs), ls=':', lw=1.2,
                    color=AGGREGATE_COLOR, label='Σ μ')

        ax.set_xlim(variable.start, variable.end)
        ax.set_ylim(-0.02, 1.08)
        ax.set_xlabel(variable.name)
        ax.set_ylabel('Membership')
        ax.set_title(f'{variable.name}: {len(terms)} term(s)')
        if terms:
            ax.legend(loc='upper right', ncol=min(len(terms) + 1, 4))
        return self._save(fig, save_name or f'partition_{self._slug(variable.name)}.png')

    # ==================================================================
    #  Aggregated output of an evaluation
    # ==================================================================

    def plot_output(
        self,
        variable: Variable,
        terms: Sequence[Term],
        strengths: Mapping[int, float],
        crisp_value: float,
        method: str = 'centroid',
        save_name: Optional[str] = None,
    ) -> Optional[str]:
        if not HAS_MATPLOTLIB:
            return None

        xs = self._grid(variable)
        fig, ax = plt.subplots(figsize=self.figsize)
        for i, t in enumerate(terms):
            color = CATEGORICAL_COLORS[i % len(CATEGORICAL_COLORS)]
            ax.plot(xs, membership_array(xs, t.a, t.b, t.c, t.d, t.is_triangle),
                    lw=1, ls='--', color=color, alpha=0.6, label=t.label)
        mu = aggregated_curve(terms, strengths, xs)
        ax.fill_between(xs, mu, color=AGGREGATE_COLOR, alpha=0.35, label='aggregated')
        ax.axvline(crisp_value, color=CRISP_COLOR, lw=2,
                   label=f'{method} = {crisp_value:.3f}')

        ax.set_xlim(variable.start, variable.end)
        ax.set_ylim(-0.02, 1.08)
        ax.set_xlabel(variable.name)
        ax.set_ylabel('Membership')
        ax.set_title(f'{variable.name}: aggregated output')
        ax.legend(loc='upper right', fontsize=8)
        return self._save(fig, save_name or f'output_{self._slug(variable.name)}.png')


__all__ = ['PartitionPlotter']
