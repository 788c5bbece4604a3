"""Tests for megapit soil carbon."""

import numpy as np
import pandas as pd
import pytest

from neon_carbon.soil_carbon import prepare_horizon_samples, horizon_carbon, compute_soil_carbon


def test_only_regular_samples_are_used(mgp_tables):
    horizons = prepare_horizon_samples(mgp_tables['mgp_perbulksample'], mgp_tables['mgp_perbiogeosample'])

    assert len(horizons) == 2
    assert 9.9 not in horizons['bulkDensity'].tolist()
    assert 99.0 not in horizons['carbonConcentration'].tolist()


def test_two_horizon_reference_values(mgp_tables):
    result = compute_soil_carbon(mgp_tables)
    profile = result['profile']

    # 10 cm * 1.0 g/cm3 * 50 g/kg / 1000 * 10 = 5.0 kg C/m2
    # 20 cm * 1.2 g/cm3 * 40 g/kg / 1000 * 10 = 9.6 kg C/m2
    assert profile['horizonID'].tolist() == ['H1', 'H2']
    assert profile['soilMass'].tolist() == pytest.approx([10.0, 24.0])
    assert profile['carbonDensity'].tolist() == pytest.approx([5.0, 9.6], abs=1e-12)
    assert result['total'] == pytest.approx(14.6, abs=1e-12)


def test_horizon_carbon_uses_configured_factor():
    from neon_carbon.config import CarbonConfig

    horizon = pd.Series({'topDepth': 0.0, 'bottomDepth': 10.0, 'bulkDensity': 1.0, 'carbonConcentration': 50.0})
    assert horizon_carbon(horizon, CarbonConfig(soil_area_factor=1.0))['carbonDensity'] == pytest.approx(0.5)


def test_horizon_without_bulk_density_is_dropped(mgp_tables):
    bulk = mgp_tables['mgp_perbulksample'][mgp_tables['mgp_perbulksample']['horizonID'] != 'H2']
    result = compute_soil_carbon({**mgp_tables, 'mgp_perbulksample': bulk})

    assert result['profile']['horizonID'].tolist() == ['H1']
    assert result['total'] == pytest.approx(5.0)


def test_no_regular_samples_gives_missing_total(mgp_tables):
    biogeo = mgp_tables['mgp_perbiogeosample'].assign(biogeoSampleType='Audit')
    result = compute_soil_carbon({**mgp_tables, 'mgp_perbiogeosample': biogeo})

    assert result['profile'].empty
    assert np.isnan(result['total'])
