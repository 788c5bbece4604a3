"""
Fine-root carbon density from NEON root biomass cores (DP1.10067.001).

Core dry masses are normalised by core area and split into live, dead and
unknown status classes. For years where roots were not sorted by status, the
live share learned from a sorted reference year is transferred to the
unsorted mass. This assumes the live/dead ratio is stationary between years.
"""

import logging
from typing import Dict

import numpy as np
import pandas as pd

from .config import CarbonConfig, DEFAULT_CONFIG
from .constants import ROOT_LIVE, ROOT_DEAD, ROOT_UNKNOWN, ROOT_STATUS_CLASSES
from .data_loader import add_year_column
from .errors import UndefinedRatioError
from .tables import lookup
from .tree_carbon import summarize_site
from .utils import classify_root_status, g_to_kg

logger = logging.getLogger(__name__)


def prepare_root_samples(
    bbc_rootmass: pd.DataFrame,
    bbc_percore: pd.DataFrame
) -> pd.DataFrame:
    """
    Attach core areas and status classes to root mass samples.

    Samples without a core area (or with a non-positive one) are excluded,
    since they cannot be normalised by area.

    Parameters
    ----------
    bbc_rootmass : pd.DataFrame
        Root mass table with sampleID, plotID, collectDate, dryMass, rootStatus
    bbc_percore : pd.DataFrame
        Per-core table with sampleID and rootSampleArea (m²), one row per sampleID

    Returns
    -------
    pd.DataFrame
        Samples with year, rootSampleArea, rootClass, statusSource and
        massPerArea (g/m²) columns
    """
    samples = add_year_column(bbc_rootmass, date_col='collectDate')
    samples = lookup(samples, bbc_percore, 'sampleID', ['rootSampleArea'])

    has_area = samples['rootSampleArea'].notna() & (samples['rootSampleArea'] > 0)
    n_excluded = int((~has_area).sum())
    if n_excluded:
        logger.warning("Excluded %d root sample(s) with no core area", n_excluded)
    samples = samples[has_area].reset_index(drop=True)

    resolved = samples['rootStatus'].apply(classify_root_status) if len(samples) else pd.Series(dtype=object)
    samples['rootClass'] = resolved.apply(lambda r: r.value)
    samples['statusSource'] = resolved.apply(lambda r: r.source.value)
    samples['massPerArea'] = samples['dryMass'] / samples['rootSampleArea']

    return samples


def aggregate_plot_year_root_carbon(
    samples: pd.DataFrame,
    config: CarbonConfig = DEFAULT_CONFIG
) -> pd.DataFrame:
    """
    Live, dead and unknown root carbon density (kg C/m²) per plot and year.

    Returns
    -------
    pd.DataFrame
        Columns plotID, year, live, dead, unknown. A class with no samples in
        a plot-year contributes 0; a class whose samples all lack a dry mass
        is NaN.
    """
    if samples.empty:
        return pd.DataFrame(columns=['plotID', 'year'] + ROOT_STATUS_CLASSES)

    n_missing = int(samples['massPerArea'].isna().sum())
    if n_missing:
        logger.warning("%d root sample(s) have no dry mass", n_missing)

    carbon = samples.assign(
        carbonDensity=g_to_kg(samples['massPerArea'] * config.carbon_fraction, config.root_mass_scale)
    )
    grouped = carbon.groupby(['plotID', 'year', 'rootClass'])['carbonDensity']
    sums = grouped.sum(min_count=1).unstack('rootClass')
    counts = grouped.size().unstack('rootClass')

    table = sums.where(counts.notna(), 0.0)
    table = table.reindex(columns=ROOT_STATUS_CLASSES, fill_value=0.0)
    table.columns.name = None

    return table.reset_index()


def live_fraction(plot_years: pd.DataFrame, reference_year: int) -> float:
    """
    Site-level live share of sorted root carbon in a reference year.

    rho = mean(live) / (mean(live) + mean(dead)) over the plots sampled in
    the reference year.

    Raises
    ------
    ValueError
        If there are no samples for the reference year
    UndefinedRatioError
        If live plus dead carbon is zero or not finite
    """
    ref = plot_years[plot_years['year'] == reference_year]
    if ref.empty:
        raise ValueError(f"No root samples for reference year {reference_year}")

    live = ref[ROOT_LIVE].mean()
    dead = ref[ROOT_DEAD].mean()
    total = live + dead

    if not np.isfinite(total) or total == 0:
        raise UndefinedRatioError(
            f"Live plus dead root carbon is {total} in reference year {reference_year}; "
            "the live fraction is undefined"
        )

    return float(live / total)


def transfer_live_carbon(
    plot_years: pd.DataFrame,
    rho: float,
    target_year: int
) -> pd.DataFrame:
    """
    Estimate live root carbon in a year whose roots were not sorted.

    Parameters
    ----------
    plot_years : pd.DataFrame
        Output of aggregate_plot_year_root_carbon
    rho : float
        Live fraction from live_fraction
    target_year : int
        Year to estimate

    Returns
    -------
    pd.DataFrame
        Target-year rows with an added liveEstimated column = rho * unknown
    """
    target = plot_years[plot_years['year'] == target_year].copy()

    if (target[[ROOT_LIVE, ROOT_DEAD]].to_numpy() > 0).any():
        logger.warning("Target year %s has status-sorted root mass; only the unknown share is transferred",
                       target_year)

    target['liveEstimated'] = rho * target[ROOT_UNKNOWN]
    return target.reset_index(drop=True)


def compute_root_carbon(
    bbc_tables: Dict,
    reference_year: int,
    target_year: int,
    config: CarbonConfig = DEFAULT_CONFIG
) -> Dict:
    """
    Fine-root carbon per plot-year with the live share transferred to target_year.

    Parameters
    ----------
    bbc_tables : dict
        Tables 'bbc_rootmass' and 'bbc_percore'
    reference_year : int
        Year with live/dead sorted root mass
    target_year : int
        Year whose root mass is unsorted
    config : CarbonConfig
        Site configuration

    Returns
    -------
    dict
        'samples', 'plot_years', 'rho', 'target' (plot rows with liveEstimated)
        and 'site' (target-year summary of liveEstimated)
    """
    samples = prepare_root_samples(bbc_tables['bbc_rootmass'], bbc_tables['bbc_percore'])
    plot_years = aggregate_plot_year_root_carbon(samples, config)

    rho = live_fraction(plot_years, reference_year)
    target = transfer_live_carbon(plot_years, rho, target_year)

    return {
        'samples': samples,
        'plot_years': plot_years,
        'rho': rho,
        'target': target,
        'site': summarize_site(target, value_col='liveEstimated'),
    }
