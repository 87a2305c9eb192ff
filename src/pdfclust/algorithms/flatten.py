"""Spatial flattening of daily anomaly grids into location-keyed pairs."""

import logging
from typing import List, Tuple

import dask.bag as db

from pdfclust.core.record import GridRecord
from pdfclust.contracts import assert_daily_record

__all__ = ['SpatialFlattener', 'Location']

logger = logging.getLogger(__name__)

Location = Tuple[float, float]


class SpatialFlattener:
    """Emit one ``((lat, lon), value)`` pair per grid cell.

    Location identity is the coordinate value, not the grid index: cells
    with duplicate coordinates are emitted separately and merged later by
    the per-location fold.
    """

    def flatten(self, record: GridRecord) -> List[Tuple[Location, float]]:
        assert_daily_record(record)
        lats = record.lat.tolist()
        lons = record.lon.tolist()
        values = record.prec.tolist()
        return [
            ((lat, lon), values[i][j])
            for i, lat in enumerate(lats)
            for j, lon in enumerate(lons)
        ]

    def transform(self, records: db.Bag) -> db.Bag:
        """Lazily flatten a bag of daily records into a bag of pairs."""
        logger.debug("Flattening records over %d partition(s)", records.npartitions)
        return records.map(self.flatten).flatten()
