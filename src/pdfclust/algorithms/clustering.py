"""K-means clustering of per-location histogram vectors.

Fixed policy so runs are reproducible:

- **Initialization**: k-means++ (``sklearn.cluster.kmeans_plusplus``) seeded
  with ``clustering.seed`` on the first ``clustering.init_sample_size``
  vectors taken in partition order (never fewer than ``num_clusters``).
- **Iteration**: Lloyd's algorithm. Every iteration is one full pass over
  the vectors: each partition assigns its vectors to the nearest centroid
  and returns per-cluster sums and counts; the partials are added up at the
  barrier. A cluster that receives no member keeps its previous centroid.
- **Distance / ties**: Euclidean distance, lowest centroid index wins.
- **Convergence**: largest centroid shift ``<= clustering.tolerance``.
  Reaching ``clustering.num_iterations`` first issues a
  ``ClusteringNonconvergence`` warning and returns the capped result.
"""

import logging
import warnings
from dataclasses import dataclass
from functools import partial
from typing import Iterable, List, Tuple, TYPE_CHECKING

import dask.bag as db
import numpy as np
from scipy.spatial.distance import cdist
from sklearn.cluster import kmeans_plusplus

from pdfclust.contracts import ClusteringNonconvergence, ContractViolation, require

if TYPE_CHECKING:
    from pdfclust.schemas import InternalConfig

__all__ = ['ClusterAssigner', 'KMeansModel', 'nearest_centroid']

logger = logging.getLogger(__name__)


def nearest_centroid(vectors: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid for every row of ``vectors``.

    ``np.argmin`` returns the first minimum, so ties go to the lowest index.
    """
    vectors = np.atleast_2d(np.asarray(vectors, dtype=np.float64))
    distances = cdist(vectors, centroids, metric="euclidean")
    return np.argmin(distances, axis=1)


def _partition_sums(vectors: Iterable[np.ndarray], centroids: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    sums = np.zeros_like(centroids)
    counts = np.zeros(centroids.shape[0], dtype=np.int64)
    vectors = list(vectors)
    if not vectors:
        return sums, counts
    matrix = np.stack(vectors)
    labels = nearest_centroid(matrix, centroids)
    np.add.at(sums, labels, matrix)
    counts += np.bincount(labels, minlength=centroids.shape[0])
    return sums, counts


def _merge_sums(partials: Iterable[Tuple[np.ndarray, np.ndarray]]) -> Tuple[np.ndarray, np.ndarray]:
    partials = list(partials)
    sums = np.sum([p[0] for p in partials], axis=0)
    counts = np.sum([p[1] for p in partials], axis=0)
    return sums, counts


def _assign_partition(pairs: Iterable[Tuple], centroids: np.ndarray) -> List[Tuple]:
    pairs = list(pairs)
    if not pairs:
        return []
    locations = [p[0] for p in pairs]
    labels = nearest_centroid(np.stack([p[1] for p in pairs]), centroids)
    return list(zip(locations, labels.tolist()))


@dataclass(frozen=True)
class KMeansModel:
    """Fitted centroids and convergence information."""

    centroids: np.ndarray
    n_iter: int
    converged: bool

    @property
    def num_clusters(self) -> int:
        return self.centroids.shape[0]

    def predict(self, vector) -> int:
        """Cluster id of a single histogram vector."""
        return int(nearest_centroid(vector, self.centroids)[0])


class ClusterAssigner:
    """Fit k-means over histogram vectors and assign every location.

    Parameters
    ----------
    config : InternalConfig
        Supplies the ``clustering`` section.
    """

    def __init__(self, config: "InternalConfig"):
        cfg = config.clustering
        self.num_clusters = cfg.num_clusters
        self.num_iterations = cfg.num_iterations
        self.seed = cfg.seed
        self.tolerance = cfg.tolerance
        self.init_sample_size = cfg.init_sample_size
        logger.info("ClusterAssigner initialized: num_clusters=%d, num_iterations=%d, seed=%d",
                    self.num_clusters, self.num_iterations, self.seed)

    def initial_centroids(self, sample: np.ndarray) -> np.ndarray:
        """Seeded k-means++ centroids from a sample of vectors.

        ``fit`` samples at least ``num_clusters`` vectors, so a smaller
        sample means the whole collection is smaller; the number of clusters
        is then capped at the number of vectors.
        """
        sample = np.asarray(sample, dtype=np.float64)
        require(sample.ndim == 2 and sample.shape[0] > 0,
                "no histogram vectors to cluster", ContractViolation, stage="clustering")
        n_clusters = self.num_clusters
        if sample.shape[0] < n_clusters:
            logger.warning("Only %d vectors for %d clusters; capping num_clusters at %d",
                           sample.shape[0], n_clusters, sample.shape[0])
            n_clusters = sample.shape[0]
        centers, _ = kmeans_plusplus(sample, n_clusters, random_state=self.seed)
        return centers

    def fit(self, vectors: db.Bag) -> KMeansModel:
        """Run Lloyd iterations over a bag of histogram vectors.

        Each iteration computes once (global barrier). Persist the bag
        beforehand to avoid recomputing upstream stages every pass.
        """
        sample_size = max(self.init_sample_size, self.num_clusters)
        sample = vectors.take(sample_size, npartitions=-1, warn=False)
        centroids = self.initial_centroids(np.stack(sample) if sample else np.empty((0, 0)))

        converged = False
        n_iter = 0
        for n_iter in range(1, self.num_iterations + 1):
            sums, counts = vectors.reduction(
                partial(_partition_sums, centroids=centroids), _merge_sums
            ).compute()
            updated = centroids.copy()
            filled = counts > 0
            updated[filled] = sums[filled] / counts[filled][:, np.newaxis]
            shift = float(np.max(np.linalg.norm(updated - centroids, axis=1)))
            centroids = updated
            logger.debug("k-means iteration %d: max centroid shift %.3g, sizes %s",
                         n_iter, shift, counts.tolist())
            if shift <= self.tolerance:
                converged = True
                break

        if converged:
            logger.info("k-means converged after %d iteration(s)", n_iter)
        else:
            message = (f"k-means did not converge within {self.num_iterations} iterations "
                       f"(tolerance {self.tolerance}); returning capped result")
            logger.warning(message)
            warnings.warn(message, ClusteringNonconvergence, stacklevel=2)

        return KMeansModel(centroids=centroids, n_iter=n_iter, converged=converged)

    def assign(self, histograms: db.Bag, model: KMeansModel) -> db.Bag:
        """Lazily map ``(location, vector)`` pairs to ``(location, cluster_id)``."""
        return histograms.map_partitions(_assign_partition, model.centroids)

    def fit_assign(self, histograms: db.Bag) -> Tuple[KMeansModel, db.Bag]:
        """Fit on the vectors of a ``(location, vector)`` bag and assign it."""
        model = self.fit(histograms.pluck(1))
        return model, self.assign(histograms, model)
