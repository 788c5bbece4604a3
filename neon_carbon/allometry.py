"""
Allometric above-ground biomass model.

The carbon estimators only rely on the call signature
``biomass(diameter, genus, species, coordinates) -> kg``. ``PowerLawAllometry``
is the model used by default: a Jenkins-style log-linear equation with
taxon-specific coefficients and a default pair for unmatched taxa.
"""

from typing import Optional, Tuple

import numpy as np
import pandas as pd

from .config import CarbonConfig, DEFAULT_CONFIG
from .utils import Resolved


def parse_scientific_name(name: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a scientificName into genus and specific epithet.

    'Acer rubrum L.' gives ('Acer', 'rubrum'); 'Acer sp.' gives ('Acer', None).
    """
    if pd.isna(name) or not str(name).strip():
        return None, None

    parts = str(name).split()
    genus = parts[0]
    species = parts[1] if len(parts) > 1 else None
    if species is not None and (species.endswith('.') or not species.islower()):
        species = None
    return genus, species


class PowerLawAllometry:
    """
    AGB (kg) = exp(B1 + B2 * ln(diameter_cm)).

    Parameters
    ----------
    coefficients : pd.DataFrame, optional
        Table with columns genus, species, B1, B2. Rows with a missing
        species apply to the whole genus.
    config : CarbonConfig
        Supplies the default coefficients for unmatched taxa
    """

    def __init__(self, coefficients: Optional[pd.DataFrame] = None,
                 config: CarbonConfig = DEFAULT_CONFIG):
        self.default = (config.default_b1, config.default_b2)
        self._species = {}
        self._genus = {}

        if coefficients is not None:
            for row in coefficients.itertuples(index=False):
                pair = (float(row.B1), float(row.B2))
                if pd.isna(row.species):
                    self._genus[row.genus] = pair
                else:
                    self._species[(row.genus, row.species)] = pair

    def resolve(self, genus: Optional[str], species: Optional[str]) -> Resolved:
        """Coefficients for a taxon: species match, then genus match, then default."""
        if (genus, species) in self._species:
            return Resolved.known(self._species[(genus, species)])
        if genus in self._genus:
            return Resolved.known(self._genus[genus])
        return Resolved.default(self.default)

    def __call__(self, diameter: float, genus: Optional[str], species: Optional[str],
                 coordinates: Optional[Tuple[float, float]] = None) -> float:
        if pd.isna(diameter) or diameter <= 0:
            return np.nan
        b1, b2 = self.resolve(genus, species).value
        return float(np.exp(b1 + b2 * np.log(diameter)))
