"""Synthetic calibration records.

Generates the small random dataset used to exercise the pipeline end to end:
one shared random latitude and longitude vector and, for every day of every
year, a random ``[num_hourly, num_lats, num_longs]`` precipitation cube.
Record ``idx`` belongs to year ``start_year + idx // days`` and day
``1 + idx % days``.
"""

import logging
from typing import List, TYPE_CHECKING

import numpy as np

from pdfclust.core.record import GridRecord

if TYPE_CHECKING:
    from pdfclust.schemas import InternalConfig

__all__ = ['make_calibration_records']

logger = logging.getLogger(__name__)


def make_calibration_records(config: "InternalConfig") -> List[GridRecord]:
    """Build ``config.total_num_days`` seeded random hourly records.

    Parameters
    ----------
    config : InternalConfig
        ``dataset`` section gives years, days, grid shape, hours and seed;
        ``global.metadata_keys`` gives the metadata key names.

    Returns
    -------
    list of GridRecord
        Records with uniform [0, 1) values, identical for identical seeds.
    """
    ds_cfg = config.dataset
    keys = config.global_.metadata_keys
    rng = np.random.default_rng(ds_cfg.seed)

    lat = rng.random(ds_cfg.num_lats)
    lon = rng.random(ds_cfg.num_longs)

    records = []
    for idx in range(config.total_num_days):
        prec = rng.random((ds_cfg.num_hourly, ds_cfg.num_lats, ds_cfg.num_longs))
        year = ds_cfg.start_year + idx // ds_cfg.num_days_per_cohort
        day = 1 + idx % ds_cfg.num_days_per_cohort
        records.append(GridRecord(
            lat=lat,
            lon=lon,
            prec=prec,
            metadata={keys.year: str(year), keys.day: str(day)},
        ))

    logger.info("Generated %d synthetic records (%d years x %d days, grid %dx%d, %d hours)",
                len(records), config.num_years, ds_cfg.num_days_per_cohort,
                ds_cfg.num_lats, ds_cfg.num_longs, ds_cfg.num_hourly)
    return records
