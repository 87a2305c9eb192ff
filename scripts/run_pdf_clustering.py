#!/usr/bin/env python3
"""``pdfclust`` Precipitation Anomaly PDF Clustering Runner.

Usage:
    python scripts/run_pdf_clustering.py
    python scripts/run_pdf_clustering.py scripts/user_config.py
    python scripts/run_pdf_clustering.py scripts/user_config.py --input-dir /data/trmm_daily

Note: User config in scripts/user_config.py, expert defaults in pdfclust.schemas.param
"""

import sys
import argparse
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from pdfclust.cli import run_pdf_pipeline


def main():
    parser = argparse.ArgumentParser(description="Cluster locations by their precipitation anomaly PDFs")
    parser.add_argument("config", nargs="?", help="Path to user config file")
    parser.add_argument("--source", choices=["synthetic", "netcdf"], help="Override record source")
    parser.add_argument("--input-dir", help="Directory of daily NetCDF files")
    parser.add_argument("--base-dir", help="Output directory")
    parser.add_argument("--scheduler", choices=["threads", "processes", "synchronous"],
                        help="Dask scheduler")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    result = run_pdf_pipeline(
        args.config,
        cli_args={
            "source": args.source,
            "input_dir": args.input_dir,
            "base_dir": args.base_dir,
            "scheduler": args.scheduler,
        },
        verbose=args.verbose,
    )

    print(result.to_dataframe().to_string(index=False))


if __name__ == "__main__":
    main()
