"""Numeric stages of the anomaly PDF clustering pipeline.

Stages, in pipeline order:
- TemporalReducer: hourly cube -> daily mean field
- CohortAggregator: daily field -> anomaly against the multi-year day mean
- SpatialFlattener: anomaly grid -> ((lat, lon), value) pairs
- Binner: pairs -> normalized per-location histograms over a global range
- ClusterAssigner: histograms -> k-means cluster id per location
"""

from pdfclust.algorithms.temporal import TemporalReducer
from pdfclust.algorithms.cohort import CohortAggregator
from pdfclust.algorithms.flatten import SpatialFlattener
from pdfclust.algorithms.binning import Binner, BinRange
from pdfclust.algorithms.clustering import ClusterAssigner, KMeansModel

__all__ = [
    'TemporalReducer',
    'CohortAggregator',
    'SpatialFlattener',
    'Binner',
    'BinRange',
    'ClusterAssigner',
    'KMeansModel',
]
