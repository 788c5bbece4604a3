"""
NEON site carbon budget package.

This package estimates per-area carbon density of live trees, standing dead
trees, coarse downed wood, fine roots and soil at a NEON site from the
vegetation structure (DP1.10098.001), CWD bulk density (DP1.10014.001),
root biomass (DP1.10067.001) and megapit soil (DP1.00096.001) products,
and gap-fills daily air temperature (DP1.00002.001) driver series.
"""

from .config import CarbonConfig, DEFAULT_CONFIG

from .errors import (
    CarbonBudgetError,
    UndefinedRatioError,
    MissingTableError,
)

from .utils import (
    Source,
    Resolved,
    quality_filter,
    summarize_by_date,
    discard_implausible,
    g_to_kg,
    g_per_cm2_to_kg_per_m2,
    concentration_to_fraction,
    classify_tree_status,
    classify_root_status,
)

from .tables import (
    select,
    first_per_key,
    inner_join,
    lookup,
    join_retention,
)

from .data_loader import (
    download_product_tables,
    load_product_tables,
    list_table_names,
    get_table,
    extract_year_from_event_id,
)

from .allometry import PowerLawAllometry, parse_scientific_name

from .tree_carbon import (
    prepare_individual_records,
    calculate_stem_carbon,
    aggregate_plot_year_carbon,
    summarize_site,
    compute_tree_carbon,
)

from .cwd_carbon import (
    calculate_log_density,
    aggregate_plot_cwd_carbon,
    compute_cwd_carbon,
)

from .root_carbon import (
    prepare_root_samples,
    aggregate_plot_year_root_carbon,
    live_fraction,
    transfer_live_carbon,
    compute_root_carbon,
)

from .soil_carbon import (
    prepare_horizon_samples,
    calculate_soil_profile,
    compute_soil_carbon,
)

from .budget import carbon_budget

from .driver_imputer import (
    daily_extremes,
    interpolate_fill,
    GaussianProcessImputer,
    gaussian_process_fill,
    impute_driver,
)

from .main import (
    compute_site_carbon_budget,
    compute_site_driver_series,
    compute_all_sites_budget,
    ALL_SITES,
)

__version__ = "0.1.0"
