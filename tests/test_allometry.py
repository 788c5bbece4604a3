"""Tests for the allometric biomass model."""

import numpy as np
import pandas as pd
import pytest

from neon_carbon.allometry import PowerLawAllometry, parse_scientific_name
from neon_carbon.config import CarbonConfig
from neon_carbon.utils import Source


@pytest.fixture
def coefficients():
    return pd.DataFrame({
        'genus': ['Acer', 'Fagus'],
        'species': ['rubrum', np.nan],
        'B1': [-2.0, -2.2],
        'B2': [2.4, 2.5],
    })


@pytest.mark.parametrize('name, expected', [
    ('Acer rubrum L.', ('Acer', 'rubrum')),
    ('Tsuga canadensis (L.) Carrière', ('Tsuga', 'canadensis')),
    ('Betula sp.', ('Betula', None)),
    ('Pinus', ('Pinus', None)),
    (np.nan, (None, None)),
])
def test_parse_scientific_name(name, expected):
    assert parse_scientific_name(name) == expected


def test_resolve_species_genus_and_default(coefficients):
    model = PowerLawAllometry(coefficients, CarbonConfig(default_b1=-1.0, default_b2=2.0))

    assert model.resolve('Acer', 'rubrum') == (Source.KNOWN, (-2.0, 2.4))
    assert model.resolve('Fagus', 'grandifolia') == (Source.KNOWN, (-2.2, 2.5))

    fallback = model.resolve('Quercus', 'rubra')
    assert fallback.source is Source.DEFAULT
    assert fallback.value == (-1.0, 2.0)


def test_biomass_value(coefficients):
    model = PowerLawAllometry(coefficients)
    expected = np.exp(-2.0 + 2.4 * np.log(25.0))
    assert model(25.0, 'Acer', 'rubrum') == pytest.approx(expected)


def test_unmatched_taxon_does_not_fail():
    model = PowerLawAllometry()
    assert model(20.0, 'Nothing', None, (44.0, -71.0)) > 0


def test_invalid_diameter_is_missing():
    model = PowerLawAllometry()
    assert np.isnan(model(0.0, 'Acer', 'rubrum'))
    assert np.isnan(model(np.nan, 'Acer', 'rubrum'))
