"""`pdfclust` - Precipitation anomaly PDF clustering.

Derives a per-grid-cell precipitation anomaly histogram (an empirical PDF)
from daily gridded observations and clusters the histograms into regimes.

Subpackages:
- core: GridRecord data model
- algorithms: Temporal reduction, cohort anomalies, flattening, binning, k-means
- pipeline: Processor and orchestrator over a partitioned dask bag
- data: Synthetic calibration records and NetCDF loader
"""

__version__ = "0.1.0"
