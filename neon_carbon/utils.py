"""
Quality filtering, unit conversion and status classification helpers.
"""

import logging
from enum import Enum
from typing import Any, Iterable, NamedTuple

import numpy as np
import pandas as pd

from .constants import (
    LIVE_STATUSES,
    STANDING_DEAD_STATUSES,
    STATUS_ALIVE,
    STATUS_STANDING_DEAD,
    STATUS_OTHER,
    ROOT_LIVE,
    ROOT_DEAD,
    ROOT_UNKNOWN,
    G_TO_KG,
    CM2_PER_M2,
)

logger = logging.getLogger(__name__)


class Source(Enum):
    """Where a resolved value came from."""
    KNOWN = 'KNOWN'
    DEFAULT = 'DEFAULT'
    UNKNOWN = 'UNKNOWN'


class Resolved(NamedTuple):
    """
    A categorical lookup result tagged with its source.

    ``Known`` carries a matched value, ``Default`` carries the fallback that
    was substituted for an unmatched key, and ``Unknown`` carries a label for
    data that was missing in the first place.
    """
    source: Source
    value: Any = None

    @classmethod
    def known(cls, value: Any) -> 'Resolved':
        return cls(Source.KNOWN, value)

    @classmethod
    def default(cls, value: Any) -> 'Resolved':
        return cls(Source.DEFAULT, value)

    @classmethod
    def unknown(cls, value: Any = None) -> 'Resolved':
        return cls(Source.UNKNOWN, value)

    @property
    def is_known(self) -> bool:
        return self.source is Source.KNOWN


def quality_filter(values: Iterable, threshold: float) -> float:
    """
    Mean of the non-missing values if few enough values are missing.

    Parameters
    ----------
    values : iterable of float
        Values, with missing entries as None/NaN
    threshold : float
        Largest accepted fraction of missing values. A missing fraction
        exactly equal to the threshold is accepted.

    Returns
    -------
    float
        Mean of the non-missing values, or NaN if the missing fraction
        exceeds the threshold or nothing was observed
    """
    series = pd.to_numeric(pd.Series(list(values), dtype=object), errors='coerce')

    if len(series) == 0:
        return np.nan

    missing = series.isna()
    if missing.all():
        return np.nan

    missing_fraction = missing.sum() / len(series)
    if missing_fraction > threshold:
        return np.nan

    return float(series[~missing].mean())


def summarize_by_date(
    df: pd.DataFrame,
    value_col: str,
    threshold: float,
    date_col: str = 'date'
) -> pd.DataFrame:
    """
    Apply the quality filter to every acquisition date of a pixel series.

    Used for remote-sensing products (e.g. a MODIS index over the tower
    footprint) where each date has many pixels, some of them masked.

    Parameters
    ----------
    df : pd.DataFrame
        Long table with one row per pixel and date
    value_col : str
        Column holding the pixel values
    threshold : float
        Largest accepted fraction of masked pixels per date
    date_col : str
        Column holding the acquisition date

    Returns
    -------
    pd.DataFrame
        One row per date with the filtered mean and the missing fraction
    """
    grouped = df.groupby(date_col)[value_col]
    summary = pd.DataFrame({
        value_col: grouped.apply(lambda s: quality_filter(s, threshold)),
        'missingFraction': grouped.apply(lambda s: s.isna().mean()),
    })
    return summary.reset_index()


def discard_implausible(values: pd.Series, lower: float, upper: float) -> pd.Series:
    """
    Replace readings outside [lower, upper] with NaN.

    Parameters
    ----------
    values : pd.Series
        Raw readings
    lower, upper : float
        Physically plausible range

    Returns
    -------
    pd.Series
        Copy of the readings with implausible values set to NaN
    """
    implausible = (values < lower) | (values > upper)
    n_discarded = int(implausible.sum())
    if n_discarded:
        logger.debug("Discarded %d reading(s) outside [%s, %s]", n_discarded, lower, upper)
    return values.mask(implausible)


def g_to_kg(mass_g, scale: float = G_TO_KG):
    """Convert grams (or g/m²) to kilograms (or kg/m²)."""
    return mass_g * scale


def g_per_cm2_to_kg_per_m2(density, factor: float = CM2_PER_M2 * G_TO_KG):
    """Convert an areal density from g/cm² to kg/m²."""
    return density * factor


def concentration_to_fraction(concentration_g_per_kg, scale: float = G_TO_KG):
    """Convert a concentration in g/kg to a mass fraction."""
    return concentration_g_per_kg * scale


def classify_tree_status(status: str) -> str:
    """
    Classify a plantStatus value as alive, standing dead, or other.

    Parameters
    ----------
    status : str
        The plantStatus value from vst_apparentindividual

    Returns
    -------
    str
        'alive', 'standing_dead' or 'other'
    """
    if pd.isna(status):
        return STATUS_OTHER
    if status in LIVE_STATUSES:
        return STATUS_ALIVE
    if status in STANDING_DEAD_STATUSES:
        return STATUS_STANDING_DEAD
    return STATUS_OTHER


def classify_root_status(status: str) -> Resolved:
    """
    Classify a rootStatus value.

    Missing or unrecognised statuses resolve to Unknown rather than to one
    of the known classes.
    """
    if pd.isna(status) or status == '':
        return Resolved.unknown(ROOT_UNKNOWN)

    normalized = str(status).strip().lower()
    if normalized in (ROOT_LIVE, ROOT_DEAD):
        return Resolved.known(normalized)
    return Resolved.unknown(ROOT_UNKNOWN)
