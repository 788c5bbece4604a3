"""Tests for daily driver extraction and gap filling."""

import numpy as np
import pandas as pd
import pytest

from neon_carbon.driver_imputer import (
    daily_extremes,
    interpolate_fill,
    GaussianProcessImputer,
    gaussian_process_fill,
    impute_driver,
)


@pytest.fixture
def full_series():
    index = pd.date_range('2020-01-01', periods=10, freq='D', name='date')
    return pd.Series(np.linspace(-3.0, 6.0, 10), index=index, name='min')


@pytest.fixture
def gapped_series():
    index = pd.date_range('2020-01-01', periods=60, freq='D', name='date')
    values = 10.0 + 5.0 * np.sin(np.arange(60) / 9.0)
    series = pd.Series(values, index=index, name='max')
    series.iloc[[0, 20, 21, 22, 40, 59]] = np.nan
    return series


class ConstantImputer:
    """Stands in for the regression model: always predicts 7 with variance 0.5."""

    def fit(self, index, values):
        self.n_fit = len(values)
        return self

    def predict(self, index):
        return np.full(len(index), 7.0), np.full(len(index), 0.5)


class TestDailyExtremes:

    def test_min_max_per_day_with_implausible_reading_discarded(self, saat_readings):
        daily = daily_extremes(saat_readings)

        assert len(daily) == 5
        assert daily.loc['2020-01-01', 'min'] == 1.0
        assert daily.loc['2020-01-01', 'max'] == 5.0
        assert daily.loc['2020-01-05', 'max'] == 9.0

    def test_day_without_readings_is_missing(self, saat_readings):
        daily = daily_extremes(saat_readings)
        assert daily.loc['2020-01-03'].isna().all()

    def test_fixed_daily_index(self, saat_readings):
        daily = daily_extremes(saat_readings, start='2019-12-31', end='2020-01-07')

        assert len(daily) == 8
        assert daily.loc['2019-12-31'].isna().all()

    def test_utc_readings_with_naive_bounds(self, saat_readings):
        readings = saat_readings.assign(
            startDateTime=pd.to_datetime(saat_readings['startDateTime']).dt.tz_localize('UTC'))
        daily = daily_extremes(readings, start='2020-01-01', end='2020-01-05')

        assert len(daily) == 5
        assert daily['min'].notna().sum() == 4
        assert daily['max'].iloc[-1] == 9.0


class TestInterpolation:

    def test_identity_on_fully_observed(self, full_series):
        pd.testing.assert_series_equal(interpolate_fill(full_series), full_series)

    def test_fills_every_day_and_keeps_observed(self, gapped_series):
        filled = interpolate_fill(gapped_series)
        observed = gapped_series.notna()

        assert filled.notna().all()
        pd.testing.assert_series_equal(filled[observed], gapped_series[observed])

    def test_linear_data_interpolated_exactly(self, saat_readings):
        filled = interpolate_fill(daily_extremes(saat_readings)['min'])
        assert filled.loc['2020-01-03'] == pytest.approx(3.0)

    def test_edges_take_nearest_observation(self, gapped_series):
        filled = interpolate_fill(gapped_series)
        assert filled.iloc[0] == gapped_series.iloc[1]
        assert filled.iloc[-1] == gapped_series.iloc[-2]

    def test_no_observations(self, full_series):
        with pytest.raises(ValueError):
            interpolate_fill(full_series * np.nan)


class TestGaussianProcess:

    def test_identity_on_fully_observed(self, full_series):
        result = gaussian_process_fill(full_series, ConstantImputer())

        pd.testing.assert_series_equal(result['value'], full_series.rename('value'))
        assert (result['variance'] == 0.0).all()

    def test_model_fit_on_observed_and_evaluated_at_missing(self, gapped_series):
        imputer = ConstantImputer()
        result = gaussian_process_fill(gapped_series, imputer)
        missing = gapped_series.isna()

        assert imputer.n_fit == int((~missing).sum())
        assert (result.loc[missing, 'value'] == 7.0).all()
        assert (result.loc[missing, 'variance'] == 0.5).all()
        assert not result.loc[missing, 'observed'].any()

    def test_sklearn_model_fills_every_day(self, gapped_series):
        result = gaussian_process_fill(gapped_series, GaussianProcessImputer())
        missing = gapped_series.isna()

        assert np.isfinite(result['value']).all()
        assert (result.loc[missing, 'variance'] > 0).all()
        pd.testing.assert_series_equal(
            result.loc[~missing, 'value'], gapped_series[~missing].rename('value')
        )

    def test_predict_returns_mean_and_variance(self, gapped_series):
        observed = gapped_series.dropna()
        imputer = GaussianProcessImputer().fit(observed.index, observed.values)
        mean, variance = imputer.predict(gapped_series.index)

        assert mean.shape == variance.shape == (60,)
        assert (variance >= 0).all()


def test_impute_driver_strategies_are_independent(saat_readings):
    result = impute_driver(saat_readings)

    assert result['interpolated'].notna().all().all()
    assert result['gaussian_process'].notna().all().all()
    assert result['daily'].loc['2020-01-03'].isna().all()
    assert not result['gp_diagnostics'].loc['2020-01-03', ('min', 'observed')]
