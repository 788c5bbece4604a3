"""
Soil carbon stock from NEON megapit horizon samples (DP1.00096.001).
"""

import logging
from typing import Dict

import pandas as pd

from .config import CarbonConfig, DEFAULT_CONFIG
from .tables import select, inner_join, join_retention
from .utils import concentration_to_fraction, g_per_cm2_to_kg_per_m2

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = [
    'horizonID', 'topDepth', 'bottomDepth', 'thickness', 'bulkDensity',
    'carbonConcentration', 'soilMass', 'carbonMass', 'carbonDensity',
]


def prepare_horizon_samples(
    mgp_perbulksample: pd.DataFrame,
    mgp_perbiogeosample: pd.DataFrame,
    config: CarbonConfig = DEFAULT_CONFIG
) -> pd.DataFrame:
    """
    Join regular bulk density and biogeochemistry samples on horizon.

    Returns
    -------
    pd.DataFrame
        Columns horizonID, topDepth, bottomDepth (cm), bulkDensity (g/cm³)
        and carbonConcentration (g/kg)
    """
    bulk = mgp_perbulksample[mgp_perbulksample['bulkDensSampleType'] == config.regular_sample_type]
    bulk = select(bulk, ['horizonID', 'bulkDensExclCoarseFrag'])

    biogeo = mgp_perbiogeosample[mgp_perbiogeosample['biogeoSampleType'] == config.regular_sample_type]
    biogeo = select(biogeo, ['horizonID', 'biogeoTopDepth', 'biogeoBottomDepth', 'carbonTot'])

    horizons = inner_join(biogeo, bulk, 'horizonID')
    if join_retention(biogeo, horizons) < 1:
        logger.warning("%d regular biogeochemistry horizon(s) had no bulk density sample",
                       len(biogeo) - len(horizons))

    return horizons.rename(columns={
        'biogeoTopDepth': 'topDepth',
        'biogeoBottomDepth': 'bottomDepth',
        'bulkDensExclCoarseFrag': 'bulkDensity',
        'carbonTot': 'carbonConcentration',
    })


def horizon_carbon(horizon: pd.Series, config: CarbonConfig = DEFAULT_CONFIG) -> pd.Series:
    """
    Carbon stock of one horizon.

    soilMass (g/cm²) = thickness (cm) * bulk density (g/cm³);
    carbonMass (g/cm²) = soilMass * concentration (g/kg) / 1000;
    carbonDensity (kg/m²) = carbonMass * 10.
    """
    thickness = horizon['bottomDepth'] - horizon['topDepth']
    soil_mass = thickness * horizon['bulkDensity']
    fraction = concentration_to_fraction(horizon['carbonConcentration'], config.soil_concentration_scale)
    carbon_mass = soil_mass * fraction
    return pd.Series({
        'thickness': thickness,
        'soilMass': soil_mass,
        'carbonMass': carbon_mass,
        'carbonDensity': g_per_cm2_to_kg_per_m2(carbon_mass, config.soil_area_factor),
    })


def calculate_soil_profile(horizons: pd.DataFrame, config: CarbonConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """Per-horizon carbon stocks ordered by top depth."""
    if horizons.empty:
        return pd.DataFrame(columns=PROFILE_COLUMNS)

    derived = horizons.apply(lambda h: horizon_carbon(h, config), axis=1)
    profile = pd.concat([horizons, derived], axis=1)
    return profile.sort_values('topDepth').reset_index(drop=True)[PROFILE_COLUMNS]


def compute_soil_carbon(mgp_tables: Dict, config: CarbonConfig = DEFAULT_CONFIG) -> Dict:
    """
    Depth-integrated soil carbon for the site megapit.

    Parameters
    ----------
    mgp_tables : dict
        Tables 'mgp_perbulksample' and 'mgp_perbiogeosample'
    config : CarbonConfig
        Site configuration

    Returns
    -------
    dict
        'profile' (per-horizon DataFrame) and 'total' (kg C/m², NaN when no
        horizon has a value)
    """
    horizons = prepare_horizon_samples(
        mgp_tables['mgp_perbulksample'], mgp_tables['mgp_perbiogeosample'], config
    )
    profile = calculate_soil_profile(horizons, config)

    return {
        'profile': profile,
        'total': profile['carbonDensity'].sum(min_count=1),
    }
