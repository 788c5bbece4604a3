"""Shared fixtures: small NEON-shaped tables for one site."""

import numpy as np
import pandas as pd
import pytest

from neon_carbon import CarbonConfig


def linear_allometry(diameter, genus, species, coordinates=None):
    """Biomass of 10 kg per cm of diameter; keeps expected values easy to compute."""
    return diameter * 10.0


@pytest.fixture
def allometry():
    return linear_allometry


@pytest.fixture
def config():
    return CarbonConfig(cwd_volume_factor=2.0)


@pytest.fixture
def vst_tables():
    apparent = pd.DataFrame([
        # individualID, plotID, eventID, date, stemDiameter, measurementHeight, plantStatus
        ('ind1', 'BART_001', 'vst_BART_2019', '2019-08-01', 20.0, 130.0, 'Live'),
        ('ind2', 'BART_001', 'vst_BART_2019', '2019-08-01', 30.0, 130.0, 'Live, insect damaged'),
        ('ind3', 'BART_001', 'vst_BART_2019', '2019-08-01', 25.0, 200.0, 'Live'),
        ('ind4', 'BART_002', 'vst_BART_2019', '2019-08-02', 40.0, 130.0, 'Standing dead'),
        ('ind6', 'BART_002', 'vst_BART_2019', '2019-08-02', 10.0, 130.0, 'Live'),
        ('ind7', 'BART_002', 'vst_BART_2019', '2019-08-02', np.nan, 130.0, 'Live'),
        ('ind5', 'BART_050', 'vst_BART_2019', '2019-08-03', 20.0, 130.0, 'Live'),
        ('ind1', 'BART_001', 'vst_BART_2021', '2021-08-01', 22.0, 130.0, 'Live'),
    ], columns=['individualID', 'plotID', 'eventID', 'date', 'stemDiameter',
                'measurementHeight', 'plantStatus'])

    mapping = pd.DataFrame({
        'individualID': ['ind1', 'ind2', 'ind3', 'ind4', 'ind5', 'ind6', 'ind7'],
        'scientificName': ['Acer rubrum L.', 'Fagus grandifolia Ehrh.', 'Betula sp.',
                           'Acer rubrum L.', 'Acer rubrum L.', 'Tsuga canadensis (L.) Carrière',
                           'Acer rubrum L.'],
    })

    per_plot = pd.DataFrame({
        'plotID': ['BART_001', 'BART_002', 'BART_002', 'BART_050'],
        'eventID': ['vst_BART_2019', 'vst_BART_2019', 'vst_BART_2021', 'vst_BART_2019'],
        'plotType': ['tower', 'tower', 'tower', 'distributed'],
        'totalSampledAreaTrees': [400.0, 800.0, 400.0, 400.0],
    })

    return {
        'vst_apparentindividual': apparent,
        'vst_mappingandtagging': mapping,
        'vst_perplotperyear': per_plot,
    }


@pytest.fixture
def cdw_tables():
    logs = pd.DataFrame({
        'sampleID': ['L1', 'L2', 'L3', 'L4', 'L5'],
        'plotID': ['BART_001', 'BART_001', 'BART_001', 'BART_002', 'BART_050'],
        'plotType': ['tower', 'tower', 'tower', 'tower', 'distributed'],
        'date': ['2019-06-01', '2019-06-01', '2020-06-01', '2019-06-02', '2019-06-03'],
    })
    disks = pd.DataFrame({
        'sampleID': ['L1', 'L1', 'L2', 'L5'],
        'bulkDensDisk': [0.4, 0.6, 0.3, 0.5],
    })
    return {'cdw_densitylog': logs, 'cdw_densitydisk': disks}


@pytest.fixture
def bbc_tables():
    rootmass = pd.DataFrame([
        ('S1', 'BART_001', '2016-07-01', 10.0, 'live'),
        ('S1', 'BART_001', '2016-07-01', 5.0, 'dead'),
        ('S2', 'BART_002', '2016-07-02', 12.0, 'live'),
        ('S2', 'BART_002', '2016-07-02', 8.0, 'dead'),
        ('S3', 'BART_001', '2021-07-01', 20.0, np.nan),
        ('S4', 'BART_002', '2021-07-02', 10.0, np.nan),
        ('S5', 'BART_002', '2021-07-02', 3.0, np.nan),
    ], columns=['sampleID', 'plotID', 'collectDate', 'dryMass', 'rootStatus'])

    percore = pd.DataFrame({
        'sampleID': ['S1', 'S2', 'S3', 'S4'],
        'rootSampleArea': [0.01, 0.01, 0.01, 0.02],
    })
    return {'bbc_rootmass': rootmass, 'bbc_percore': percore}


@pytest.fixture
def mgp_tables():
    bulk = pd.DataFrame({
        'horizonID': ['H1', 'H2', 'H2'],
        'bulkDensSampleType': ['Regular', 'Regular', 'Audit'],
        'bulkDensExclCoarseFrag': [1.0, 1.2, 9.9],
    })
    biogeo = pd.DataFrame({
        'horizonID': ['H2', 'H1', 'H1'],
        'biogeoSampleType': ['Regular', 'Regular', 'Audit'],
        'biogeoTopDepth': [10.0, 0.0, 0.0],
        'biogeoBottomDepth': [30.0, 10.0, 10.0],
        'carbonTot': [40.0, 50.0, 99.0],
    })
    return {'mgp_perbulksample': bulk, 'mgp_perbiogeosample': biogeo}


@pytest.fixture
def saat_readings():
    rows = [
        ('2020-01-01 00:00', 1.0), ('2020-01-01 12:00', 5.0), ('2020-01-01 18:00', 999.0),
        ('2020-01-02 00:00', 2.0), ('2020-01-02 12:00', 6.0),
        ('2020-01-03 06:00', np.nan),
        ('2020-01-04 00:00', 4.0), ('2020-01-04 12:00', 8.0),
        ('2020-01-05 00:00', 5.0), ('2020-01-05 12:00', 9.0),
    ]
    return pd.DataFrame(rows, columns=['startDateTime', 'tempSingleMean'])
