"""
Daily driver series with gap filling.

Sub-daily sensor readings (e.g. single aspirated air temperature,
DP1.00002.001) are reduced to daily minima and maxima on a fixed daily index.
Missing days are then filled in two independent ways: monotone cubic
interpolation across time, and Gaussian process regression fit on the
observed days.
"""

import logging
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
from scipy.interpolate import PchipInterpolator
from sklearn.gaussian_process import GaussianProcessRegressor
from sklearn.gaussian_process.kernels import ConstantKernel, RBF, WhiteKernel

from .config import CarbonConfig, DEFAULT_CONFIG
from .utils import discard_implausible

logger = logging.getLogger(__name__)


def _day_numbers(index: pd.DatetimeIndex) -> np.ndarray:
    """Days since the Unix epoch, as floats."""
    return index.values.astype('datetime64[D]').astype(float)


def _bound_to_day(bound, tz) -> pd.Timestamp:
    """Midnight of a start/end bound, in the timezone of the readings."""
    ts = pd.Timestamp(bound)
    if ts.tzinfo is None and tz is not None:
        ts = ts.tz_localize(tz)
    elif ts.tzinfo is not None:
        ts = ts.tz_convert(tz)
    return ts.floor('D')


def daily_extremes(
    readings: pd.DataFrame,
    value_col: str = 'tempSingleMean',
    time_col: str = 'startDateTime',
    start: Optional[str] = None,
    end: Optional[str] = None,
    config: CarbonConfig = DEFAULT_CONFIG
) -> pd.DataFrame:
    """
    Daily minimum and maximum of sub-daily readings.

    Readings outside config.driver_bounds are discarded before reduction.
    Days without any valid reading are NaN.

    Parameters
    ----------
    readings : pd.DataFrame
        Sub-daily table with a timestamp column and a value column
    value_col : str
        Column with the readings
    time_col : str
        Column with the reading timestamps
    start, end : str, optional
        Bounds of the daily index; default to the first and last reading.
        Naive bounds are read in the timezone of the readings
    config : CarbonConfig
        Supplies the plausible range of readings

    Returns
    -------
    pd.DataFrame
        Indexed by day, columns 'min' and 'max'
    """
    times = pd.to_datetime(readings[time_col])
    lower, upper = config.driver_bounds
    values = discard_implausible(readings[value_col].astype(float), lower, upper)

    days = times.dt.floor('D')
    daily = values.groupby(days).agg(['min', 'max'])

    tz = days.dt.tz
    index = pd.date_range(
        start=_bound_to_day(start, tz) if start is not None else days.min(),
        end=_bound_to_day(end, tz) if end is not None else days.max(),
        freq='D',
        name='date',
    )
    return daily.reindex(index)


def interpolate_fill(series: pd.Series) -> pd.Series:
    """
    Fill missing days by monotone (PCHIP) interpolation.

    Days before the first or after the last observation take the nearest
    observed value. Observed values are returned unchanged.

    Raises
    ------
    ValueError
        If the series has no observed values
    """
    observed = series.notna()
    if observed.all():
        return series.copy()
    if not observed.any():
        raise ValueError(f"Cannot interpolate series '{series.name}' with no observations")

    filled = series.copy()
    if observed.sum() == 1:
        return filled.fillna(series[observed].iloc[0])

    x = _day_numbers(series.index)
    interpolator = PchipInterpolator(x[observed.values], series[observed].values, extrapolate=False)
    filled[~observed] = interpolator(x[~observed.values])

    return filled.ffill().bfill()


class GaussianProcessImputer:
    """
    Gaussian process regression of a value on day number.

    ``fit`` takes a DatetimeIndex and the observed values; ``predict``
    returns the predictive mean and variance at any DatetimeIndex.
    """

    def __init__(self, kernel=None, random_state: int = 0):
        if kernel is None:
            kernel = (ConstantKernel(1.0) * RBF(length_scale=10.0, length_scale_bounds=(1.0, 1e3))
                      + WhiteKernel(noise_level=1.0))
        self.model = GaussianProcessRegressor(kernel=kernel, normalize_y=True, random_state=random_state)

    def fit(self, index: pd.DatetimeIndex, values: np.ndarray) -> 'GaussianProcessImputer':
        self.model.fit(_day_numbers(index).reshape(-1, 1), np.asarray(values, dtype=float))
        logger.debug("Fitted GP kernel: %s", self.model.kernel_)
        return self

    def predict(self, index: pd.DatetimeIndex) -> Tuple[np.ndarray, np.ndarray]:
        mean, std = self.model.predict(_day_numbers(index).reshape(-1, 1), return_std=True)
        return mean, std ** 2


def gaussian_process_fill(
    series: pd.Series,
    imputer: Optional[GaussianProcessImputer] = None
) -> pd.DataFrame:
    """
    Fill missing days with the predictive mean of a GP fit on observed days.

    Parameters
    ----------
    series : pd.Series
        Daily series indexed by date
    imputer : GaussianProcessImputer, optional
        Regression model; a default one is created if not given

    Returns
    -------
    pd.DataFrame
        Columns 'value' (observed or predicted), 'variance' (0 for observed
        days) and 'observed'
    """
    observed = series.notna()
    result = pd.DataFrame({
        'value': series.astype(float),
        'variance': 0.0,
        'observed': observed,
    }, index=series.index)

    if observed.all():
        return result
    if not observed.any():
        raise ValueError(f"Cannot fit series '{series.name}' with no observations")

    imputer = imputer if imputer is not None else GaussianProcessImputer()
    imputer.fit(series.index[observed.values], series[observed].values)
    mean, variance = imputer.predict(series.index[~observed.values])

    result.loc[~observed, 'value'] = mean
    result.loc[~observed, 'variance'] = variance
    return result


def impute_driver(
    readings: pd.DataFrame,
    value_col: str = 'tempSingleMean',
    time_col: str = 'startDateTime',
    start: Optional[str] = None,
    end: Optional[str] = None,
    config: CarbonConfig = DEFAULT_CONFIG
) -> Dict[str, pd.DataFrame]:
    """
    Daily extremes of a driver with both gap-filling strategies applied.

    Returns
    -------
    dict
        'daily': raw daily min/max with gaps;
        'interpolated': min/max filled by interpolation;
        'gaussian_process': min/max filled by GP mean;
        'gp_diagnostics': GP variance and observed flag per day and column
    """
    daily = daily_extremes(readings, value_col, time_col, start, end, config)
    n_missing = int(daily['min'].isna().sum())
    logger.info("Daily %s series: %d day(s), %d missing", value_col, len(daily), n_missing)

    gp = {col: gaussian_process_fill(daily[col]) for col in ('min', 'max')}
    diagnostics = pd.concat(
        {col: frame[['variance', 'observed']] for col, frame in gp.items()},
        axis=1,
    )

    return {
        'daily': daily,
        'interpolated': daily.apply(interpolate_fill),
        'gaussian_process': pd.DataFrame({col: frame['value'] for col, frame in gp.items()}),
        'gp_diagnostics': diagnostics,
    }
