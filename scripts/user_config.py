"""pdfclust User Configuration.

This is the user-facing configuration file. Modify settings here to customize
the pipeline behavior. Advanced settings are in pdfclust/schemas/param.py

Usage:
    python scripts/run_pdf_clustering.py scripts/user_config.py
    python scripts/run_pdf_clustering.py scripts/user_config.py --input-dir /data/trmm_daily
"""

CONFIG = {
    # ========================================================================
    # SOURCE & OUTPUT
    # ========================================================================
    "SOURCE": "synthetic",    # "synthetic" or "netcdf"
    "INPUT_DIR": None,        # Daily NetCDF files (netcdf source)
    "BASE_DIR": "./pdfclust_output",  # All outputs go here

    # ========================================================================
    # DATASET SHAPE
    # ========================================================================
    "START_YEAR": 2001,
    "END_YEAR": 2002,
    "NUM_DAYS": 2,            # Days per year sharing a day-of-year key
    "NUM_LATS": 2,
    "NUM_LONGS": 2,
    "NUM_HOURLY": 2,          # Hourly samples per day
    "SEED": 0,                # Synthetic data seed

    # ========================================================================
    # BINNING & CLUSTERING
    # ========================================================================
    "NUM_BINS": 10,
    "NUM_CLUSTERS": 3,
    "NUM_ITERATIONS": 10,

    # ========================================================================
    # EXECUTION
    # ========================================================================
    "SCHEDULER": "threads",   # "threads", "processes" or "synchronous"
    "NUM_PARTITIONS": 4,
    # Note: k-means seed, tolerance and init sample size are under
    # "clustering" in pdfclust/schemas/param.py
}
