"""
Tree carbon density from NEON vegetation structure data (DP1.10098.001).

Stems measured at breast height in tower plots are converted to above- and
below-ground biomass, then to carbon per square metre of sampled plot area,
and summed per plot and year.
"""

import logging
from typing import Callable, Dict

import numpy as np
import pandas as pd

from .allometry import parse_scientific_name
from .config import CarbonConfig, DEFAULT_CONFIG
from .constants import STATUS_ALIVE, STATUS_STANDING_DEAD
from .data_loader import add_year_column
from .tables import select, first_per_key, inner_join, join_retention, lookup
from .utils import Source, classify_tree_status

logger = logging.getLogger(__name__)

TREE_STATUSES = (STATUS_ALIVE, STATUS_STANDING_DEAD)


def plot_metadata(vst_perplotperyear: pd.DataFrame) -> pd.DataFrame:
    """
    One row per plot with its type and sampled tree area.

    Parameters
    ----------
    vst_perplotperyear : pd.DataFrame
        The vst_perplotperyear table

    Returns
    -------
    pd.DataFrame
        Columns plotID, plotType, totalSampledAreaTrees (m²)
    """
    plots = select(vst_perplotperyear, ['plotID', 'plotType', 'totalSampledAreaTrees'])
    return first_per_key(plots, 'plotID')


def taxon_table(vst_mappingandtagging: pd.DataFrame) -> pd.DataFrame:
    """One row per individual with its genus and species."""
    taxa = first_per_key(select(vst_mappingandtagging, ['individualID', 'scientificName']), 'individualID')
    names = taxa['scientificName'].apply(parse_scientific_name)
    taxa['genus'] = names.apply(lambda n: n[0])
    taxa['species'] = names.apply(lambda n: n[1])
    return taxa


def prepare_individual_records(
    vst_apparentindividual: pd.DataFrame,
    vst_mappingandtagging: pd.DataFrame,
    vst_perplotperyear: pd.DataFrame
) -> pd.DataFrame:
    """
    Join stem measurements with taxa and plot metadata.

    Stems without a mapping row are kept with no genus or species, so the
    allometry falls back to its default coefficients. Stems without plot
    metadata are dropped.

    Returns
    -------
    pd.DataFrame
        vst_apparentindividual rows with year, genus, species, plotType,
        totalSampledAreaTrees and a 'status' class column
    """
    ai = add_year_column(vst_apparentindividual)
    records = lookup(ai, taxon_table(vst_mappingandtagging), 'individualID',
                     ['scientificName', 'genus', 'species'])
    for col in ('genus', 'species'):
        records[col] = records[col].astype(object).where(records[col].notna(), None)

    n_untaxed = int(records['scientificName'].isna().sum())
    if n_untaxed:
        logger.warning("%d stem record(s) had no taxon match", n_untaxed)

    records = inner_join(records, plot_metadata(vst_perplotperyear), 'plotID')

    retention = join_retention(ai, records)
    if retention < 1:
        logger.warning("%.1f%% of stem records had no plot match and were dropped",
                       100 * (1 - retention))

    records['status'] = records['plantStatus'].apply(classify_tree_status)
    return records


def is_eligible(record: pd.Series, config: CarbonConfig = DEFAULT_CONFIG) -> bool:
    """A stem is eligible if its diameter was measured at breast height."""
    return (
        pd.notna(record['stemDiameter'])
        and pd.notna(record['measurementHeight'])
        and record['measurementHeight'] == config.breast_height_cm
    )


def estimate_stem_carbon(
    record: pd.Series,
    allometry: Callable,
    config: CarbonConfig = DEFAULT_CONFIG
) -> pd.Series:
    """
    Derive biomass and carbon values for one eligible stem.

    Parameters
    ----------
    record : pd.Series
        A prepared individual record
    allometry : callable
        biomass(diameter, genus, species, coordinates) -> kg
    config : CarbonConfig
        Supplies the below-ground ratio, carbon fraction and site coordinates

    Returns
    -------
    pd.Series
        B1, B2, coefficientSource, agb_kg, bgb_kg, carbon_kg and
        carbonDensity (kg C/m² of sampled plot area)
    """
    resolve = getattr(allometry, 'resolve', None)
    if resolve is not None:
        resolved = resolve(record['genus'], record['species'])
        (b1, b2), source = resolved.value, resolved.source
    else:
        b1, b2, source = np.nan, np.nan, Source.UNKNOWN

    agb = allometry(record['stemDiameter'], record['genus'], record['species'], config.site_coordinates)
    bgb = agb * config.bg_ratio
    carbon = (agb + bgb) * config.carbon_fraction

    area = record['totalSampledAreaTrees']
    density = carbon / area if pd.notna(area) and area > 0 else np.nan

    return pd.Series({
        'B1': b1,
        'B2': b2,
        'coefficientSource': source.value,
        'agb_kg': agb,
        'bgb_kg': bgb,
        'carbon_kg': carbon,
        'carbonDensity': density,
    })


def calculate_stem_carbon(
    records: pd.DataFrame,
    allometry: Callable,
    status: str = STATUS_ALIVE,
    config: CarbonConfig = DEFAULT_CONFIG
) -> pd.DataFrame:
    """
    Per-stem carbon for eligible stems of one status in tower plots.

    Parameters
    ----------
    records : pd.DataFrame
        Output of prepare_individual_records
    allometry : callable
        Allometric biomass model
    status : str
        'alive' or 'standing_dead'
    config : CarbonConfig
        Site configuration

    Returns
    -------
    pd.DataFrame
        One row per selected stem with the derived carbon columns
    """
    if status not in TREE_STATUSES:
        raise ValueError(f"status must be one of {TREE_STATUSES}, got {status!r}")

    eligible = records.apply(lambda r: is_eligible(r, config), axis=1) if len(records) else pd.Series(dtype=bool)
    mask = eligible & (records['status'] == status) & (records['plotType'] == config.tower_plot_type)
    stems = records[mask].reset_index(drop=True)

    if stems.empty:
        return stems.assign(B1=[], B2=[], coefficientSource=[], agb_kg=[], bgb_kg=[],
                            carbon_kg=[], carbonDensity=[])

    derived = stems.apply(lambda r: estimate_stem_carbon(r, allometry, config), axis=1)
    n_default = int((derived['coefficientSource'] == Source.DEFAULT.value).sum())
    if n_default:
        logger.info("%d %s stem(s) used default allometric coefficients", n_default, status)

    return pd.concat([stems, derived], axis=1)


def aggregate_plot_year_carbon(stems: pd.DataFrame) -> pd.DataFrame:
    """
    Sum stem carbon densities per plot and year.

    Stems with a missing carbon density are left out of the sum; a plot-year
    where every stem is missing gets NaN rather than zero.
    """
    if stems.empty:
        return pd.DataFrame(columns=['plotID', 'year', 'carbonDensity', 'n_stems'])

    grouped = stems.groupby(['plotID', 'year'])
    result = pd.DataFrame({
        'carbonDensity': grouped['carbonDensity'].sum(min_count=1),
        'n_stems': grouped.size(),
    })
    return result.reset_index()


def summarize_site(plot_values: pd.DataFrame, value_col: str = 'carbonDensity',
                   by: str = 'year') -> pd.DataFrame:
    """
    Site mean and across-plot standard deviation of a plot-level value.

    Parameters
    ----------
    plot_values : pd.DataFrame
        Plot-level table with 'plotID', the grouping column and value_col
    value_col : str
        Column to summarize
    by : str
        Grouping column, usually 'year'

    Returns
    -------
    pd.DataFrame
        Columns: by, mean, std, n_plots
    """
    if plot_values.empty:
        return pd.DataFrame(columns=[by, 'mean', 'std', 'n_plots'])

    grouped = plot_values.groupby(by)[value_col]
    summary = pd.DataFrame({
        'mean': grouped.mean(),
        'std': grouped.std(),
        'n_plots': grouped.count(),
    })
    return summary.reset_index()


def compute_tree_carbon(
    vst_tables: Dict,
    allometry: Callable,
    status: str = STATUS_ALIVE,
    config: CarbonConfig = DEFAULT_CONFIG
) -> Dict[str, pd.DataFrame]:
    """
    Tree carbon density per plot-year and per site-year for one status.

    Parameters
    ----------
    vst_tables : dict
        Vegetation structure tables: vst_apparentindividual,
        vst_mappingandtagging, vst_perplotperyear
    allometry : callable
        Allometric biomass model
    status : str
        'alive' or 'standing_dead'
    config : CarbonConfig
        Site configuration

    Returns
    -------
    dict
        'stems', 'plot_years' and 'site' DataFrames
    """
    records = prepare_individual_records(
        vst_tables['vst_apparentindividual'],
        vst_tables['vst_mappingandtagging'],
        vst_tables['vst_perplotperyear'],
    )
    stems = calculate_stem_carbon(records, allometry, status, config)
    plot_years = aggregate_plot_year_carbon(stems)

    return {
        'stems': stems,
        'plot_years': plot_years,
        'site': summarize_site(plot_years),
    }
