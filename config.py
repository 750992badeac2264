# -*- coding: utf-8 -*-
"""
Centralised Configuration for the Fuzzy Decision Engine
=======================================================

All configurable parameters are defined here as typed dataclasses.
The master ``Config`` class composes every sub-config and provides
serialisation, summary printing, and global singleton management.

Configuration Groups
--------------------
- PathConfig         : output directory structure
- PartitionConfig    : guard epsilon, invariant tolerance, sampling
- InferenceConfig    : default defuzzification method and resolution
- VisualizationConfig: figure appearance defaults
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple
from enum import Enum
import json


# =========================================================================
# Enumerations
# =========================================================================

class DefuzzificationMethod(Enum):
    """Supported defuzzification methods."""
    CENTROID = "centroid"
    BISECTOR = "bisector"
    MOM = "mom"      # mean of maximum
    SOM = "som"      # smallest of maximum
    LOM = "lom"      # largest of maximum


# =========================================================================
# Path Configuration
# =========================================================================

@dataclass
class PathConfig:
    """Output paths, all derived from *base_dir*."""
    base_dir: Path = field(default_factory=lambda: Path.cwd())

    @property
    def output_dir(self) -> Path:
        return self.base_dir / "outputs"

    @property
    def figures_dir(self) -> Path:
        return self.output_dir / "figures"

    @property
    def logs_dir(self) -> Path:
        return self.output_dir / "logs"

    def ensure_directories(self) -> None:
        """Create every output directory if missing."""
        for d in [self.output_dir, self.figures_dir, self.logs_dir]:
            d.mkdir(parents=True, exist_ok=True)


# =========================================================================
# Partition Maintenance
# =========================================================================

@dataclass
class PartitionConfig:
    """Ruspini partition maintenance.

    Parameters
    ----------
    guard_ratio : float
        Guard epsilon as a fraction of the universe width.  Boundary terms
        extend ``a`` below ``start`` and ``d`` above ``end`` by this much.
    tolerance : float
        Allowed deviation of the sampled membership sum from 1.
    sample_points : int
        Points used by the sampled sum check (at least 100).
    """
    guard_ratio: float = 1e-3
    tolerance: float = 1e-3
    sample_points: int = 1000


# =========================================================================
# Inference
# =========================================================================

@dataclass
class InferenceConfig:
    """Defaults for ``InferenceEngine.evaluate``."""
    default_method: DefuzzificationMethod = DefuzzificationMethod.CENTROID
    default_resolution: int = 100
    plateau_tolerance: float = 1e-6   # relative, for MOM / SOM / LOM
    saturate_edges: bool = False      # boundary terms report 1 outside the universe


# =========================================================================
# Visualisation
# =========================================================================

@dataclass
class VisualizationConfig:
    """Figure appearance defaults."""
    figsize: Tuple[int, int] = (10, 5)
    dpi: int = 150
    curve_points: int = 500


# =========================================================================
# Master Configuration
# =========================================================================

@dataclass
class Config:
    """Master configuration composing every sub-config."""
    paths: PathConfig = field(default_factory=PathConfig)
    partition: PartitionConfig = field(default_factory=PartitionConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)

    # --- convenience properties ---

    @property
    def output_dir(self) -> str:
        return str(self.paths.output_dir)

    # --- serialisation ---

    def to_dict(self) -> Dict:
        def _cvt(obj):
            if hasattr(obj, '__dataclass_fields__'):
                return {k: _cvt(v) for k, v in obj.__dict__.items()}
            if isinstance(obj, Enum):
                return obj.value
            if isinstance(obj, Path):
                return str(obj)
            if isinstance(obj, (list, tuple)):
                return [_cvt(i) for i in obj]
            if isinstance(obj, dict):
                return {k: _cvt(v) for k, v in obj.items()}
            return obj
        return _cvt(self)

    def save(self, filepath: Path) -> None:
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def summary(self) -> str:
        return (
            f"\n{'='*72}\n"
            f"  Fuzzy Decision Engine Configuration\n"
            f"{'='*72}\n\n"
            f"  PARTITION\n"
            f"    Guard ratio     : {self.partition.guard_ratio}\n"
            f"    Tolerance       : {self.partition.tolerance}\n"
            f"    Sample points   : {self.partition.sample_points}\n\n"
            f"  INFERENCE\n"
            f"    Method          : {self.inference.default_method.value}\n"
            f"    Resolution      : {self.inference.default_resolution}\n"
            f"    Saturate edges  : {self.inference.saturate_edges}\n\n"
            f"  OUTPUT\n"
            f"    Directory       : {self.output_dir}\n"
            f"{'='*72}\n"
        )


# =========================================================================
# Global Config Singleton
# =========================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Return global config (create default on first call)."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_default_config() -> Config:
    """Return a *fresh* default Config instance."""
    return Config()


def set_config(config: Config) -> None:
    """Replace the global config singleton."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset to a fresh default Config."""
    global _config
    _config = Config()
