"""
Site-wide configuration for the carbon budget estimators.

Every estimator takes a ``CarbonConfig`` explicitly so that parameter sweeps
can be run without touching module state.
"""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import yaml

from .constants import G_TO_KG


@dataclass(frozen=True)
class CarbonConfig:
    """
    Immutable set of ratios, unit constants and site parameters.

    Attributes
    ----------
    bg_ratio : float
        Below-ground to above-ground biomass ratio
    carbon_fraction : float
        Carbon fraction of dry biomass
    breast_height_cm : float
        Measurement height (cm) at which stem diameters are eligible for allometry
    tower_plot_type : str
        plotType value of the plots in the flux tower footprint
    cwd_volume_factor : float
        Site volume factor applied to mean disk bulk density (site-specific)
    cwd_length_scale : float
        Converts summed per-length log density to per-area density
    root_mass_scale : float
        Converts root g/m² to kg/m²
    soil_concentration_scale : float
        Converts carbon concentration (g/kg) to a mass fraction
    soil_area_factor : float
        Converts g/cm² to kg/m² (cm²->m² and g->kg folded into one constant)
    regular_sample_type : str
        Sample type of megapit samples that take part in the soil estimate
    default_b1, default_b2 : float
        Allometric coefficients used when a taxon has no match
    site_coordinates : tuple of float, optional
        (latitude, longitude) of the site, passed to the allometric model
    quality_threshold : float
        Largest accepted missing fraction for the quality filter
    driver_bounds : tuple of float
        Physically plausible (min, max) range of raw driver readings
    """
    bg_ratio: float = 0.3
    carbon_fraction: float = 0.5
    breast_height_cm: float = 130.0
    tower_plot_type: str = 'tower'
    cwd_volume_factor: float = 1.0
    cwd_length_scale: float = 0.1
    root_mass_scale: float = G_TO_KG
    soil_concentration_scale: float = G_TO_KG
    soil_area_factor: float = 10.0
    regular_sample_type: str = 'Regular'
    default_b1: float = -2.48
    default_b2: float = 2.4835
    site_coordinates: Optional[Tuple[float, float]] = None
    quality_threshold: float = 0.2
    driver_bounds: Tuple[float, float] = (-60.0, 60.0)

    def __post_init__(self):
        if not 0 < self.quality_threshold < 1:
            raise ValueError(f"quality_threshold must be in (0, 1), got {self.quality_threshold}")
        if self.bg_ratio < 0:
            raise ValueError(f"bg_ratio must be non-negative, got {self.bg_ratio}")
        if self.driver_bounds[0] >= self.driver_bounds[1]:
            raise ValueError(f"driver_bounds must be (min, max), got {self.driver_bounds}")

    def with_overrides(self, **kwargs) -> 'CarbonConfig':
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **kwargs)

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> 'CarbonConfig':
        """
        Build a configuration from a YAML file of field overrides.

        Parameters
        ----------
        config_path : str or Path
            YAML file with a mapping of field names to values

        Returns
        -------
        CarbonConfig
            Defaults updated with the file's values

        Raises
        ------
        FileNotFoundError
            If the file does not exist
        ValueError
            If the file holds keys that are not configuration fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            values = yaml.safe_load(f) or {}

        known = {field.name for field in dataclasses.fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        # YAML has no tuples
        for key in ('site_coordinates', 'driver_bounds'):
            if values.get(key) is not None:
                values[key] = tuple(values[key])

        return cls(**values)


DEFAULT_CONFIG = CarbonConfig()
