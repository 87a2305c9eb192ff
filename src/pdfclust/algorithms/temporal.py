"""Hour-of-day temporal reduction.

Collapses the hourly axis of each record's precipitation cube into a daily
mean field. Pure per-record transformation.
"""

import logging
from functools import reduce

import dask.bag as db
import numpy as np

from pdfclust.core.record import GridRecord
from pdfclust.contracts import assert_hourly_record

__all__ = ['TemporalReducer']

logger = logging.getLogger(__name__)


class TemporalReducer:
    """Average ``prec [H, Lat, Lon]`` over the hour axis."""

    def reduce(self, record: GridRecord) -> GridRecord:
        """Return a record whose prec is the hourly mean ``[Lat, Lon]``.

        The hour slices are added in order onto a zero accumulator and the
        sum is divided by H once at the end. ``np.mean`` is not used because
        its pairwise summation changes the rounding for larger H.

        Raises
        ------
        InvalidGridShape
            If prec is not 3-D or has zero hours.
        """
        assert_hourly_record(record)
        prec = record.prec
        hours = prec.shape[0]
        total = reduce(np.add, prec, np.zeros(prec.shape[1:], dtype=np.float64))
        return record.with_prec(total / hours)

    def transform(self, records: db.Bag) -> db.Bag:
        """Lazily reduce every record of the bag."""
        logger.debug("Temporal reduction over %d partition(s)", records.npartitions)
        return records.map(self.reduce)
