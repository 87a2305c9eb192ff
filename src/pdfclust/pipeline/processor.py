"""Precipitation anomaly PDF clustering pipeline.

Chains the five numeric stages over a partitioned dask bag of GridRecords:
temporal reduction, cohort anomalies, spatial flattening, global binning
and k-means clustering.
"""

import logging
from typing import Iterable, TYPE_CHECKING, Union

import dask
import dask.bag as db

from pdfclust.algorithms import (
    TemporalReducer,
    CohortAggregator,
    SpatialFlattener,
    Binner,
    ClusterAssigner,
)
from pdfclust.contracts import ContractViolation, assert_histograms, require
from pdfclust.core.record import GridRecord
from pdfclust.pipeline.result import ClusteringResult

if TYPE_CHECKING:
    from pdfclust.schemas import InternalConfig

__all__ = ['PdfClusteringProcessor']

logger = logging.getLogger(__name__)


class PdfClusteringProcessor:
    """Runs the complete anomaly PDF clustering pipeline.

    **Processing Pipeline:**

    1. **Temporal reduction**: hourly ``prec [H, Lat, Lon]`` → daily mean.

    2. **Cohort anomalies**: subtract the multi-year mean of each day key
       (fold by day, broadcast the means back to every record).

    3. **Flattening**: one ``((lat, lon), value)`` pair per grid cell.

    4. **Binning**: global min/max barrier, then one normalized histogram
       per location (fold by location).

    5. **Clustering**: seeded k-means over the histograms, one barrier per
       iteration, then nearest-centroid assignment per location.

    Stages 1-2 run once and their anomaly records are persisted, so the
    range barrier and the histogram fold both start from them. The
    histogram bag is persisted before clustering so the k-means passes do
    not recompute the upstream stages.

    Example usage::

        processor = PdfClusteringProcessor(config)
        result = processor.run(records)
        df = result.to_dataframe()
    """

    def __init__(self, config: "InternalConfig"):
        """Initialize processor with validated configuration.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        """
        self.config = config
        self.scheduler = config.execution.scheduler
        self.num_partitions = config.execution.num_partitions

        self.reducer = TemporalReducer()
        self.aggregator = CohortAggregator(config)
        self.flattener = SpatialFlattener()
        self.binner = Binner(config)
        self.assigner = ClusterAssigner(config)

    def to_bag(self, records: Union[db.Bag, Iterable[GridRecord]]) -> db.Bag:
        """Partition an in-memory record sequence (bags pass through)."""
        if isinstance(records, db.Bag):
            return records
        records = list(records)
        require(len(records) > 0, "no input records", ContractViolation, stage="input")
        return db.from_sequence(records, npartitions=min(self.num_partitions, len(records)))

    def run(self, records: Union[db.Bag, Iterable[GridRecord]]) -> ClusteringResult:
        """Process records through all stages.

        Parameters
        ----------
        records : dask.bag.Bag or iterable of GridRecord
            Hourly records, one per observation day.

        Returns
        -------
        ClusteringResult
            Distributed assignments and histograms plus the fitted model.

        Raises
        ------
        ContractViolation
            InvalidGridShape, DegenerateRange or EmptyGroup; the run is
            aborted since continuing would corrupt the statistics.
        """
        bag = self.to_bag(records)
        logger.info("Running pipeline: %d partition(s), scheduler=%s",
                    bag.npartitions, self.scheduler)

        with dask.config.set(scheduler=self.scheduler):
            try:
                result = self._run(bag)
            except ContractViolation as e:
                logger.critical("CRITICAL: Pipeline contract violated: %s", e)
                logger.critical("Aborting run (stage=%s, key=%r)", e.stage, e.key)
                raise
        return result

    def _run(self, bag: db.Bag) -> ClusteringResult:
        daily = self.reducer.transform(bag)
        # Barrier 0: cohort means; anomalies are reused by both binning phases
        anomalies = self.aggregator.transform(daily).persist()
        pairs = self.flattener.transform(anomalies)

        # Barrier 1: global range (and input day count for normalization)
        extent, total_record_count = dask.compute(self.binner.extent(pairs), anomalies.count())
        bin_range = self.binner.make_range(*extent)
        self._check_record_count(total_record_count)

        histograms = self.binner.transform(pairs, bin_range, total_record_count).persist()

        # Barrier 2: one reduction per k-means iteration
        model, assignments = self.assigner.fit_assign(histograms)
        assert_histograms(model.centroids, bin_range.num_bins)
        logger.info("Clustering done: %d cluster(s), %d iteration(s), converged=%s",
                    model.num_clusters, model.n_iter, model.converged)

        return ClusteringResult(
            assignments=assignments,
            histograms=histograms,
            model=model,
            bin_range=bin_range,
            total_record_count=total_record_count,
            scheduler=self.scheduler,
        )

    def _check_record_count(self, total_record_count: int):
        expected = self.config.total_num_days
        if total_record_count != expected:
            logger.warning("Input holds %d records but the dataset config describes %d "
                           "(%d years x %d days); normalizing by %d",
                           total_record_count, expected, self.config.num_years,
                           self.config.dataset.num_days_per_cohort, total_record_count)
        else:
            logger.info("Input records: %d", total_record_count)
