"""Tests for coarse downed wood carbon."""

import numpy as np
import pandas as pd
import pytest

from neon_carbon.cwd_carbon import (
    mean_disk_density,
    calculate_log_density,
    aggregate_plot_cwd_carbon,
    compute_cwd_carbon,
)


def test_mean_disk_density(cdw_tables):
    disks = mean_disk_density(cdw_tables['cdw_densitydisk']).set_index('sampleID')
    assert disks.loc['L1', 'meanBulkDensity'] == pytest.approx(0.5)
    assert disks.loc['L1', 'n_disks'] == 2


def test_log_density_uses_volume_factor_and_tower_plots(cdw_tables, config):
    logs = calculate_log_density(cdw_tables['cdw_densitylog'], cdw_tables['cdw_densitydisk'], config)
    density = logs.set_index('sampleID')['logDensity']

    assert 'L5' not in density.index
    assert density.loc['L1'] == pytest.approx(1.0)
    assert density.loc['L2'] == pytest.approx(0.6)


def test_unmatched_log_is_missing_not_zero(cdw_tables, config):
    logs = calculate_log_density(cdw_tables['cdw_densitylog'], cdw_tables['cdw_densitydisk'], config)
    unmatched = logs.set_index('sampleID').loc['L3']

    assert np.isnan(unmatched['logDensity'])
    assert unmatched['n_disks'] == 0


def test_plot_kept_when_some_logs_unmatched(cdw_tables, config):
    result = compute_cwd_carbon(cdw_tables, config)
    plots = result['plots'].set_index('plotID')

    assert plots.loc['BART_001', 'n_logs'] == 3
    assert plots.loc['BART_001', 'n_logs_matched'] == 2
    assert plots.loc['BART_001', 'carbonDensity'] == pytest.approx(0.5 * 1.6 * 0.1)


def test_plot_with_no_matched_logs_is_missing(cdw_tables, config):
    result = compute_cwd_carbon(cdw_tables, config)
    plots = result['plots'].set_index('plotID')

    assert 'BART_002' in plots.index
    assert np.isnan(plots.loc['BART_002', 'carbonDensity'])
    assert result['mean'] == pytest.approx(0.08)
    assert result['n_plots'] == 1


def test_all_dates_pooled_per_plot(cdw_tables, config):
    plots = compute_cwd_carbon(cdw_tables, config)['plots']
    assert 'year' not in plots.columns
    assert plots['plotID'].is_unique


def test_empty_logs(config):
    logs = pd.DataFrame(columns=['sampleID', 'plotID', 'plotType'])
    disks = pd.DataFrame({'sampleID': ['L1'], 'bulkDensDisk': [0.5]})
    result = compute_cwd_carbon({'cdw_densitylog': logs, 'cdw_densitydisk': disks}, config)

    assert result['plots'].empty
    assert np.isnan(result['mean'])
