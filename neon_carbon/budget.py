"""
Site carbon budget vector.
"""

import numpy as np
import pandas as pd

from .constants import BUDGET_LABELS


def carbon_budget(
    live_trees: float = np.nan,
    standing_dead: float = np.nan,
    downed_coarse_wood: float = np.nan,
    soil: float = np.nan
) -> pd.Series:
    """
    Combine pool carbon densities into a labeled budget.

    Missing pools stay missing in their own slot. The total is the sum of
    the pools that are present, so one missing pool does not make the total
    missing; the total is NaN only when every pool is missing.

    Parameters
    ----------
    live_trees, standing_dead, downed_coarse_wood, soil : float
        Carbon density of each pool (kg C/m²), NaN/None if unavailable

    Returns
    -------
    pd.Series
        Indexed by live_trees, standing_dead, downed_coarse_wood, soil, total
    """
    pools = pd.Series(
        [live_trees, standing_dead, downed_coarse_wood, soil],
        index=BUDGET_LABELS[:-1],
        dtype=float,
    )
    total = pools.sum(min_count=1)
    return pd.concat([pools, pd.Series({'total': total})]).rename('carbonDensity')
