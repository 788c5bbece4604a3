"""
Data loading functions for the NEON products used in the carbon budget.

Raw tables are retrieved once with neonutilities and cached as one pickled
dictionary of DataFrames per product and site.
"""

import logging
import pickle
from pathlib import Path
from typing import Dict, List, Optional

import neonutilities as nu
import pandas as pd

from .errors import MissingTableError

logger = logging.getLogger(__name__)


def product_cache_path(dpid: str, site_id: str, data_dir: str = "./data") -> Path:
    """Location of the cached tables for a product and site."""
    return Path(data_dir) / dpid / f"{site_id}.pkl"


def download_product_tables(
    dpid: str,
    site_id: str,
    data_dir: str = "./data",
    startdate: Optional[str] = None,
    enddate: Optional[str] = None,
    token: Optional[str] = None,
    overwrite: bool = False
) -> Path:
    """
    Download a NEON data product for one site and cache its tables.

    Parameters
    ----------
    dpid : str
        NEON data product identifier (e.g., 'DP1.10098.001')
    site_id : str
        Four-character NEON site code (e.g., 'HARV')
    data_dir : str
        Root directory of the local cache
    startdate, enddate : str, optional
        'YYYY-MM' bounds of the download
    token : str, optional
        NEON API token
    overwrite : bool
        Re-download even if a cached copy exists

    Returns
    -------
    Path
        Path of the pickle file holding the dictionary of tables
    """
    pkl_path = product_cache_path(dpid, site_id, data_dir)

    if pkl_path.exists() and not overwrite:
        logger.info("Using cached %s tables for %s at %s", dpid, site_id, pkl_path)
        return pkl_path

    logger.info("Downloading %s for site %s", dpid, site_id)
    tables = nu.load_by_product(
        dpid=dpid,
        site=site_id,
        startdate=startdate,
        enddate=enddate,
        package='basic',
        check_size=False,
        token=token,
    )

    pkl_path.parent.mkdir(parents=True, exist_ok=True)
    with open(pkl_path, 'wb') as f:
        pickle.dump(tables, f)

    return pkl_path


def load_product_tables(dpid: str, site_id: str, data_dir: str = "./data") -> Dict:
    """
    Load the cached tables of a NEON data product for a given site.

    Parameters
    ----------
    dpid : str
        NEON data product identifier
    site_id : str
        Four-character NEON site code
    data_dir : str
        Root directory of the local cache

    Returns
    -------
    dict
        Dictionary mapping table names (e.g. 'vst_apparentindividual')
        to DataFrames
    """
    pkl_path = product_cache_path(dpid, site_id, data_dir)

    if not pkl_path.exists():
        raise FileNotFoundError(f"No {dpid} data file found for site {site_id} at {pkl_path}")

    with open(pkl_path, 'rb') as f:
        data = pickle.load(f)

    return data


def list_table_names(tables: Dict) -> List[str]:
    """Names of the data tables in a product dictionary, sorted."""
    return sorted(name for name, value in tables.items() if isinstance(value, pd.DataFrame))


def get_table(tables: Dict, name: str) -> pd.DataFrame:
    """
    Fetch a required table from a product dictionary.

    Raises
    ------
    MissingTableError
        If the table is absent or has no rows
    """
    table = tables.get(name)
    if table is None:
        raise MissingTableError(f"Required table '{name}' not found; available: {list_table_names(tables)}")
    if len(table) == 0:
        raise MissingTableError(f"Required table '{name}' is empty")
    return table


def extract_year_from_event_id(event_id: str) -> int:
    """
    Extract the year from an eventID string.

    The eventID format is 'vst_SITE_YYYY' (e.g., 'vst_HARV_2019').
    """
    return int(event_id[-4:])


def add_year_column(df: pd.DataFrame, date_col: str = 'date') -> pd.DataFrame:
    """
    Add a 'year' column, from eventID when present and from a date otherwise.

    Parameters
    ----------
    df : pd.DataFrame
        Table with an 'eventID' column or a date column
    date_col : str
        Date column used when eventID is missing or blank

    Returns
    -------
    pd.DataFrame
        Copy of the table with an integer-valued 'year' column
    """
    df = df.copy()
    years = pd.to_datetime(df[date_col]).dt.year if date_col in df.columns else None

    if 'eventID' in df.columns:
        from_event = pd.to_numeric(df['eventID'].apply(
            lambda e: extract_year_from_event_id(e) if isinstance(e, str) and e[-4:].isdigit() else None
        ), errors='coerce')
        df['year'] = from_event if years is None else from_event.fillna(years)
    elif years is not None:
        df['year'] = years
    else:
        raise KeyError(f"Table has neither 'eventID' nor '{date_col}' to derive a year from")

    df['year'] = df['year'].astype('Int64')
    return df
