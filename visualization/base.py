# -*- coding: utf-8 -*-
"""
Visualization Shared Utilities
==============================

Palette, styling helper, and the ``BasePlotter`` base class used by the
partition plotter.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

try:
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False
    plt = None

# =========================================================================
# Color constants
# =========================================================================

CATEGORICAL_COLORS = [
    '#2E86AB', '#A23B72', '#F18F01', '#17B169', '#C73E1D',
    '#7B68EE', '#0E7C7B', '#F4A100', '#E5625E', '#626D71',
]

AGGREGATE_COLOR = '#1B2838'
CRISP_COLOR = '#C73E1D'


def apply_style(dpi: int = 150) -> None:
    """Apply a consistent style to all figures."""
    if not HAS_MATPLOTLIB:
        return
    plt.rcParams.update({
        'figure.dpi': dpi,
        'savefig.dpi': dpi,
        'font.family': 'sans-serif',
        'font.size': 10,
        'axes.titlesize': 12,
        'axes.titleweight': 'bold',
        'axes.labelsize': 10,
        'axes.grid': True,
        'grid.alpha': 0.25,
        'grid.linestyle': '--',
        'legend.fontsize': 9,
        'legend.framealpha': 0.9,
        'figure.facecolor': 'white',
        'savefig.facecolor': 'white',
        'savefig.bbox': 'tight',
    })


# =========================================================================
# BasePlotter
# =========================================================================

class BasePlotter:
    """
    Shared functionality for plotter subclasses.

    Subclasses call ``self._save(fig, name)``; every saved path is recorded
    in ``generated_figures``.
    """

    def __init__(self,
                 output_dir: str = 'outputs/figures',
                 dpi: int = 150,
                 figsize: Tuple[int, int] = (10, 5)):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.dpi = dpi
        self.figsize = figsize
        self.generated_figures: List[str] = []
        apply_style(dpi)

    def _save(self, fig, name: str) -> Optional[str]:
        """Save *fig* to *output_dir/name*, record it, close it."""
        path = self.output_dir / name
        try:
            fig.savefig(path, dpi=self.dpi, bbox_inches='tight', format='png')
        finally:
            plt.close(fig)
        self.generated_figures.append(str(path))
        return str(path)

    @staticmethod
    def _slug(label: str) -> str:
        return ''.join(ch if ch.isalnum() else '_' for ch in label.lower()).strip('_')

    def get_generated_figures(self) -> List[str]:
        return list(self.generated_figures)


__all__ = [
    'HAS_MATPLOTLIB',
    'CATEGORICAL_COLORS', 'AGGREGATE_COLOR', 'CRISP_COLOR',
    'apply_style', 'BasePlotter', 'plt',
]
