"""Cross-cohort anomaly computation.

Records sharing a day key (e.g. January 1st of every year) form a cohort.
The cohort mean is subtracted from each member so that every record carries
its anomaly against the multi-year average of its day.
"""

import logging
from functools import reduce
from operator import add
from typing import Dict, Hashable, Iterable, List, Optional, Tuple, TYPE_CHECKING

import dask.bag as db
import numpy as np

from pdfclust.core.record import GridRecord
from pdfclust.contracts import ContractViolation, EmptyGroup, require

if TYPE_CHECKING:
    from pdfclust.schemas import InternalConfig

__all__ = ['CohortAggregator']

logger = logging.getLogger(__name__)

# (running sum of prec, number of members)
_EMPTY_PARTIAL = (0.0, 0)


def _accumulate(partial_sum: Tuple, record: GridRecord) -> Tuple:
    return (partial_sum[0] + record.prec, partial_sum[1] + 1)


def _combine(left: Tuple, right: Tuple) -> Tuple:
    return (left[0] + right[0], left[1] + right[1])


def _merge_lookups(lookups: Iterable[Dict]) -> Dict:
    merged = {}
    for lookup in lookups:
        merged.update(lookup)
    return merged


class CohortAggregator:
    """Replace each record's prec by its anomaly against the cohort mean.

    Parameters
    ----------
    config : InternalConfig
        Supplies the metadata key used for grouping
        (``global.metadata_keys.day``).
    """

    def __init__(self, config: "InternalConfig"):
        self.day_key = config.global_.metadata_keys.day
        logger.info("CohortAggregator initialized: grouping by '%s'", self.day_key)

    def group_key(self, record: GridRecord) -> int:
        """Day-of-year key of a record.

        Raises
        ------
        ContractViolation
            If the day entry is missing or not an integer.
        """
        metadata = dict(record.metadata)
        value = metadata.get(self.day_key)
        require(value is not None,
                f"record metadata has no '{self.day_key}' entry",
                ContractViolation, stage="cohort", key=metadata)
        try:
            return int(value)
        except ValueError:
            raise ContractViolation(
                f"[cohort] (key={metadata!r}) '{self.day_key}' is not an integer: {value!r}",
                stage="cohort", key=metadata,
            ) from None

    def cohort_mean(self, records: Iterable[GridRecord], key: Optional[Hashable] = None) -> np.ndarray:
        """Mean precipitation of a cohort: sum over members / member count.

        Raises
        ------
        EmptyGroup
            If the cohort has no members.
        """
        records = list(records)
        require(len(records) > 0, "no records reached cohort aggregation",
                EmptyGroup, stage="cohort", key=key)
        total = reduce(add, (r.prec for r in records))
        return total / len(records)

    def anomalies(self, records: Iterable[GridRecord], key: Optional[Hashable] = None) -> List[GridRecord]:
        """Subtract the cohort mean from every member.

        Each member keeps its own metadata; a single-member cohort yields
        an all-zero anomaly.
        """
        records = list(records)
        mean = self.cohort_mean(records, key)
        return [r.with_prec(r.prec - mean) for r in records]

    def _finalize(self, keyed_partial: Tuple) -> Tuple:
        key, (total, count) = keyed_partial
        require(count > 0, "no records reached cohort aggregation",
                EmptyGroup, stage="cohort", key=key)
        return key, total / count

    def _subtract_mean(self, record: GridRecord, means: Dict) -> GridRecord:
        key = self.group_key(record)
        require(key in means, "cohort mean missing for record",
                EmptyGroup, stage="cohort", key=key)
        return record.with_prec(record.prec - means[key])

    def cohort_means(self, records: db.Bag):
        """Lazy ``{day key: mean prec}`` lookup.

        Per-key ``(sum, count)`` partials are folded inside partitions and
        combined across partitions, so member order never matters.
        """
        partials = records.foldby(
            self.group_key,
            _accumulate,
            _EMPTY_PARTIAL,
            _combine,
            _EMPTY_PARTIAL,
        )
        return partials.map(self._finalize).reduction(dict, _merge_lookups)

    def transform(self, records: db.Bag) -> db.Bag:
        """Lazily turn every record of the bag into its anomaly record."""
        means = self.cohort_means(records)
        return records.map(self._subtract_mean, means)
