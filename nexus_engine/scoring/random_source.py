"""
Random Source
nexus_engine/scoring/random_source.py

Every stochastic calculator (Monte Carlo, illustrative SEAM, competition)
draws from an injected numpy Generator so tests can pin a seed.
"""

from typing import Optional

import numpy as np


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a Generator; seed=None gives fresh OS entropy."""
    return np.random.default_rng(seed)


def uniform(rng: np.random.Generator, low: float, high: float) -> float:
    """Single uniform draw in [low, high) as a plain float."""
    return float(rng.uniform(low, high))
