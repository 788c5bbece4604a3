"""
Main workflow orchestration for computing a site carbon budget from
NEON vegetation structure, coarse downed wood, root biomass and megapit
soil data.
"""

import logging
from typing import Callable, Dict, List, Optional

import numpy as np
import pandas as pd

from .allometry import PowerLawAllometry
from .budget import carbon_budget
from .config import CarbonConfig, DEFAULT_CONFIG
from .constants import (
    VST_DPID,
    CDW_DPID,
    BBC_DPID,
    MGP_DPID,
    SAAT_DPID,
    STATUS_ALIVE,
    STATUS_STANDING_DEAD,
)
from .cwd_carbon import compute_cwd_carbon
from .data_loader import load_product_tables, get_table
from .driver_imputer import impute_driver
from .errors import CarbonBudgetError, UndefinedRatioError
from .root_carbon import compute_root_carbon
from .soil_carbon import compute_soil_carbon
from .tree_carbon import compute_tree_carbon

logger = logging.getLogger(__name__)


def _load_tables(dpid: str, site_id: str, data_dir: str, names: List[str]) -> Dict[str, pd.DataFrame]:
    tables = load_product_tables(dpid, site_id, data_dir)
    return {name: get_table(tables, name) for name in names}


def site_value_for_year(site_summary: pd.DataFrame, year: int, value_col: str = 'mean') -> float:
    """Value of a site summary in a year, NaN if the year was not sampled."""
    row = site_summary[site_summary['year'] == year]
    if row.empty:
        return np.nan
    return float(row[value_col].iloc[0])


def latest_year(site_summary: pd.DataFrame) -> Optional[int]:
    """Most recent year in a site summary, or None if it is empty."""
    if site_summary.empty:
        return None
    return int(site_summary['year'].max())


def compute_site_carbon_budget(
    site_id: str,
    data_dir: str = "./data",
    year: Optional[int] = None,
    root_reference_year: Optional[int] = None,
    root_target_year: Optional[int] = None,
    allometry: Optional[Callable] = None,
    allometry_coefficients_path: Optional[str] = None,
    config: CarbonConfig = DEFAULT_CONFIG,
    verbose: bool = True
) -> Dict:
    """
    Compute the carbon budget of a NEON site.

    This is the main workflow function that:
    1. Loads the cached vegetation structure, CWD, root and megapit tables
    2. Computes live and standing dead tree carbon per plot-year
    3. Computes coarse downed wood carbon per plot
    4. Computes fine-root carbon with live share transferred between years
    5. Computes depth-integrated soil carbon
    6. Combines the pools into a budget vector

    Parameters
    ----------
    site_id : str
        Four-character NEON site code (e.g., 'HARV')
    data_dir : str
        Root directory of the cached product tables
    year : int, optional
        Tree inventory year used in the budget; defaults to the latest year
        with live tree carbon
    root_reference_year, root_target_year : int, optional
        Years for the root live-share transfer; roots are skipped if either
        is missing, and are left missing if the live fraction is undefined
    allometry : callable, optional
        biomass(diameter, genus, species, coordinates) -> kg; defaults to
        PowerLawAllometry
    allometry_coefficients_path : str, optional
        CSV with genus, species, B1, B2 for the default allometry
    config : CarbonConfig
        Site configuration
    verbose : bool
        Whether to log progress messages

    Returns
    -------
    dict
        Dictionary containing:
        - 'site_id': Site identifier
        - 'budget': Budget vector (kg C/m²)
        - 'live_trees', 'standing_dead': tree carbon tables
        - 'cwd', 'roots', 'soil': pool results
        - 'metadata': year and count information
    """
    if verbose:
        logger.info("Processing site: %s", site_id)

    if allometry is None:
        coefficients = pd.read_csv(allometry_coefficients_path) if allometry_coefficients_path else None
        allometry = PowerLawAllometry(coefficients, config)

    # Step 1: Trees
    if verbose:
        logger.info("  Computing tree carbon...")
    vst_tables = _load_tables(VST_DPID, site_id, data_dir, [
        'vst_apparentindividual', 'vst_mappingandtagging', 'vst_perplotperyear'])
    live = compute_tree_carbon(vst_tables, allometry, STATUS_ALIVE, config)
    dead = compute_tree_carbon(vst_tables, allometry, STATUS_STANDING_DEAD, config)

    if year is None:
        year = latest_year(live['site'])
        if verbose:
            logger.info("  Using latest tree inventory year: %s", year)

    # Step 2: Coarse downed wood
    if verbose:
        logger.info("  Computing coarse downed wood carbon...")
    cdw_tables = _load_tables(CDW_DPID, site_id, data_dir, ['cdw_densitylog', 'cdw_densitydisk'])
    cwd = compute_cwd_carbon(cdw_tables, config)

    # Step 3: Fine roots
    roots = None
    if root_reference_year is not None and root_target_year is not None:
        if verbose:
            logger.info("  Computing fine-root carbon (%s -> %s)...", root_reference_year, root_target_year)
        bbc_tables = _load_tables(BBC_DPID, site_id, data_dir, ['bbc_rootmass', 'bbc_percore'])
        try:
            roots = compute_root_carbon(bbc_tables, root_reference_year, root_target_year, config)
        except (UndefinedRatioError, ValueError) as e:
            logger.warning("  Fine-root carbon unavailable for %s: %s", site_id, e)

    # Step 4: Soil
    if verbose:
        logger.info("  Computing soil carbon...")
    mgp_tables = _load_tables(MGP_DPID, site_id, data_dir, ['mgp_perbulksample', 'mgp_perbiogeosample'])
    soil = compute_soil_carbon(mgp_tables, config)

    budget = carbon_budget(
        live_trees=site_value_for_year(live['site'], year),
        standing_dead=site_value_for_year(dead['site'], year),
        downed_coarse_wood=cwd['mean'],
        soil=soil['total'],
    )

    if verbose:
        logger.info("  Done! Total carbon: %.3f kg C/m2", budget['total'])

    return {
        'site_id': site_id,
        'budget': budget,
        'live_trees': live,
        'standing_dead': dead,
        'cwd': cwd,
        'roots': roots,
        'soil': soil,
        'metadata': {
            'year': year,
            'n_live_stems': len(live['stems']),
            'n_dead_stems': len(dead['stems']),
            'n_cwd_plots': cwd['n_plots'],
            'n_soil_horizons': len(soil['profile']),
            'root_live_fraction': roots['rho'] if roots is not None else np.nan,
        },
    }


def compute_site_driver_series(
    site_id: str,
    data_dir: str = "./data",
    table_name: str = 'SAAT_30min',
    value_col: str = 'tempSingleMean',
    start: Optional[str] = None,
    end: Optional[str] = None,
    config: CarbonConfig = DEFAULT_CONFIG
) -> Dict[str, pd.DataFrame]:
    """
    Gap-filled daily air temperature extremes for a NEON site.

    Parameters
    ----------
    site_id : str
        Four-character NEON site code
    data_dir : str
        Root directory of the cached product tables
    table_name : str
        Sub-daily table of the air temperature product
    value_col : str
        Column with the readings
    start, end : str, optional
        Bounds of the daily index
    config : CarbonConfig
        Site configuration

    Returns
    -------
    dict
        Output of impute_driver
    """
    readings = _load_tables(SAAT_DPID, site_id, data_dir, [table_name])[table_name]
    return impute_driver(readings, value_col=value_col, start=start, end=end, config=config)


def compute_all_sites_budget(
    site_ids: List[str],
    data_dir: str = "./data",
    config: CarbonConfig = DEFAULT_CONFIG,
    verbose: bool = True
) -> pd.DataFrame:
    """
    Compute carbon budgets for multiple NEON sites.

    Sites whose inputs are missing are logged and skipped.

    Returns
    -------
    pd.DataFrame
        One row per site with the budget columns
    """
    rows = []

    for site_id in site_ids:
        try:
            output = compute_site_carbon_budget(site_id, data_dir=data_dir, config=config, verbose=verbose)
        except (FileNotFoundError, ValueError, CarbonBudgetError) as e:
            logger.error("  Error processing site %s: %s", site_id, e)
            continue
        rows.append(output['budget'].rename(site_id))

    if rows:
        return pd.DataFrame(rows).rename_axis('siteID').reset_index()
    return pd.DataFrame()


# NEON terrestrial sites with tower plots
ALL_SITES = [
    'DELA', 'LENO', 'TALL', 'BONA', 'DEJU', 'HEAL', 'SRER', 'SJER', 'SOAP',
    'TEAK', 'CPER', 'NIWO', 'RMNP', 'DSNY', 'OSBS', 'JERC', 'PUUM', 'KONZ',
    'UKFS', 'SERC', 'HARV', 'UNDE', 'BART', 'JORN', 'DCFS', 'NOGP', 'WOOD',
    'GUAN', 'LAJA', 'GRSM', 'ORNL', 'CLBJ', 'MOAB', 'ONAQ', 'BLAN', 'MLBS',
    'SCBI', 'ABBY', 'WREF', 'STEI', 'TREE', 'YELL'
]
