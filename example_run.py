#!/usr/bin/env python3
"""
Example script demonstrating how to run the NEON site carbon budget workflow.

This script downloads (or reuses cached) NEON products for a site and produces:
1. The site carbon budget vector (kg C/m²)
2. Plot-year tree carbon tables for live and standing dead stems
3. Plot-level coarse downed wood carbon and the megapit soil profile

Output is saved as both a pickle file (dictionary) and individual CSVs.
"""

import pickle
import sys
from pathlib import Path

from neon_carbon import (
    ALL_SITES,
    compute_site_carbon_budget,
    download_product_tables,
)
from neon_carbon.constants import VST_DPID, CDW_DPID, MGP_DPID
from neon_carbon.logging_utils import setup_logging

logger = setup_logging('INFO', format_style='simple')


def process_site(site_id: str, data_dir: str = "./data", output_dir: str = "./output") -> dict:
    """
    Process a single NEON site and save results.

    Parameters
    ----------
    site_id : str
        Four-character NEON site code (e.g., 'HARV', 'BART')
    data_dir : str
        Directory of the cached product tables
    output_dir : str
        Directory to save output files

    Returns
    -------
    dict
        Dictionary containing all output tables and metadata
    """
    csvs_output_dir = Path(output_dir) / "csvs"
    csvs_output_dir.mkdir(parents=True, exist_ok=True)

    for dpid in (VST_DPID, CDW_DPID, MGP_DPID):
        download_product_tables(dpid, site_id, data_dir)

    output = compute_site_carbon_budget(site_id=site_id, data_dir=data_dir, verbose=True)

    pkl_file = Path(output_dir) / f"{site_id}_carbon.pkl"
    with open(pkl_file, 'wb') as f:
        pickle.dump(output, f)
    logger.info("Pickle file saved: %s", pkl_file)

    csv_tables = {
        f"{site_id}_budget.csv": output['budget'].to_frame(),
        f"{site_id}_live_trees.csv": output['live_trees']['plot_years'],
        f"{site_id}_standing_dead.csv": output['standing_dead']['plot_years'],
        f"{site_id}_cwd_plots.csv": output['cwd']['plots'],
        f"{site_id}_soil_profile.csv": output['soil']['profile'],
    }
    for filename, table in csv_tables.items():
        filepath = csvs_output_dir / filename
        table.to_csv(filepath)
        logger.info("CSV saved: %s", filepath)

    logger.info("Carbon budget for %s (year %s):\n%s",
                site_id, output['metadata']['year'], output['budget'].to_string())

    return output


def main():
    """Main entry point."""
    site_id = sys.argv[1].upper() if len(sys.argv) > 1 else 'BART'

    if site_id not in ALL_SITES:
        logger.error("Site '%s' not found in available sites: %s", site_id, ', '.join(sorted(ALL_SITES)))
        sys.exit(1)

    process_site(site_id)


if __name__ == "__main__":
    main()
