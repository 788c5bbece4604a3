"""
Coarse downed wood carbon density from NEON CWD bulk density data (DP1.10014.001).

Each log sample takes the mean bulk density of its disks, scaled by the site
volume factor. Log densities are pooled per plot across all sampling dates.
"""

import logging
from typing import Dict

import numpy as np
import pandas as pd

from .config import CarbonConfig, DEFAULT_CONFIG
from .tables import lookup

logger = logging.getLogger(__name__)


def filter_tower_plots(df: pd.DataFrame, config: CarbonConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """Keep rows of tower plots; tables without a plotType column pass through."""
    if 'plotType' not in df.columns:
        return df
    return df[df['plotType'] == config.tower_plot_type]


def mean_disk_density(cdw_densitydisk: pd.DataFrame) -> pd.DataFrame:
    """
    Mean disk bulk density per sampleID.

    Returns
    -------
    pd.DataFrame
        Columns sampleID, meanBulkDensity, n_disks
    """
    grouped = cdw_densitydisk.groupby('sampleID')['bulkDensDisk']
    return pd.DataFrame({
        'meanBulkDensity': grouped.mean(),
        'n_disks': grouped.count(),
    }).reset_index()


def calculate_log_density(
    cdw_densitylog: pd.DataFrame,
    cdw_densitydisk: pd.DataFrame,
    config: CarbonConfig = DEFAULT_CONFIG
) -> pd.DataFrame:
    """
    Derived volumetric density for every log sample in tower plots.

    Logs with no matching disk sample keep NaN in logDensity.

    Parameters
    ----------
    cdw_densitylog : pd.DataFrame
        Log tally table with sampleID, plotID and plotType
    cdw_densitydisk : pd.DataFrame
        Disk density table with sampleID and bulkDensDisk
    config : CarbonConfig
        Supplies the tower plot type and site volume factor

    Returns
    -------
    pd.DataFrame
        Log rows with meanBulkDensity, n_disks and logDensity columns
    """
    logs = filter_tower_plots(cdw_densitylog, config)
    disks = mean_disk_density(filter_tower_plots(cdw_densitydisk, config))

    logs = lookup(logs, disks, 'sampleID', ['meanBulkDensity', 'n_disks'])
    logs['n_disks'] = logs['n_disks'].fillna(0).astype(int)
    logs['logDensity'] = logs['meanBulkDensity'] * config.cwd_volume_factor

    n_unmatched = int(logs['logDensity'].isna().sum())
    if n_unmatched:
        logger.warning("%d log sample(s) have no matching disk density", n_unmatched)

    return logs


def aggregate_plot_cwd_carbon(logs: pd.DataFrame, config: CarbonConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Carbon density per plot, pooled over all sampling dates.

    carbonDensity = carbon_fraction * sum(logDensity) * cwd_length_scale.
    Unmatched logs are left out of the sum without dropping the plot; a plot
    whose logs are all unmatched gets NaN.
    """
    if logs.empty:
        return pd.DataFrame(columns=['plotID', 'summedDensity', 'carbonDensity', 'n_logs', 'n_logs_matched'])

    grouped = logs.groupby('plotID')['logDensity']
    plots = pd.DataFrame({
        'summedDensity': grouped.sum(min_count=1),
        'n_logs': grouped.size(),
        'n_logs_matched': grouped.count(),
    }).reset_index()
    plots['carbonDensity'] = config.carbon_fraction * plots['summedDensity'] * config.cwd_length_scale

    return plots[['plotID', 'summedDensity', 'carbonDensity', 'n_logs', 'n_logs_matched']]


def compute_cwd_carbon(cdw_tables: Dict, config: CarbonConfig = DEFAULT_CONFIG) -> Dict:
    """
    CWD carbon density per plot and for the site.

    Parameters
    ----------
    cdw_tables : dict
        Tables 'cdw_densitylog' and 'cdw_densitydisk'
    config : CarbonConfig
        Site configuration

    Returns
    -------
    dict
        'logs' and 'plots' DataFrames plus site 'mean', 'std' and 'n_plots'
    """
    logs = calculate_log_density(cdw_tables['cdw_densitylog'], cdw_tables['cdw_densitydisk'], config)
    plots = aggregate_plot_cwd_carbon(logs, config)

    values = plots['carbonDensity'].dropna()
    return {
        'logs': logs,
        'plots': plots,
        'mean': values.mean() if len(values) else np.nan,
        'std': values.std() if len(values) > 1 else np.nan,
        'n_plots': len(values),
    }
