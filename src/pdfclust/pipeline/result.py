"""Terminal artifacts of a clustering run."""

from dataclasses import dataclass

import dask.bag as db
import numpy as np
import pandas as pd
import xarray as xr

from pdfclust.algorithms.binning import BinRange
from pdfclust.algorithms.clustering import KMeansModel

__all__ = ['ClusteringResult']


@dataclass
class ClusteringResult:
    """Output of PdfClusteringProcessor.run().

    ``assignments`` and ``histograms`` stay distributed (dask bags);
    the helpers below gather them into pandas / xarray objects.
    """

    assignments: db.Bag
    histograms: db.Bag
    model: KMeansModel
    bin_range: BinRange
    total_record_count: int
    scheduler: str = "threads"

    @property
    def centroids(self) -> np.ndarray:
        return self.model.centroids

    @property
    def converged(self) -> bool:
        return self.model.converged

    def num_locations(self) -> int:
        """Number of distinct locations that were binned."""
        return self.histograms.count().compute(scheduler=self.scheduler)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per location: ``lat, lon, cluster_id``, sorted by location."""
        rows = self.assignments.compute(scheduler=self.scheduler)
        df = pd.DataFrame(
            [(lat, lon, cid) for (lat, lon), cid in rows],
            columns=["lat", "lon", "cluster_id"],
        )
        df["cluster_id"] = df["cluster_id"].astype("int64")
        return df.sort_values(["lat", "lon"], ignore_index=True)

    def histograms_dataframe(self) -> pd.DataFrame:
        """One row per location: ``lat, lon, bin_0 .. bin_{n-1}``."""
        rows = self.histograms.compute(scheduler=self.scheduler)
        bins = [f"bin_{b}" for b in range(self.bin_range.num_bins)]
        df = pd.DataFrame(
            [[lat, lon, *vec.tolist()] for (lat, lon), vec in rows],
            columns=["lat", "lon", *bins],
        )
        return df.sort_values(["lat", "lon"], ignore_index=True)

    def centroids_dataset(self) -> xr.Dataset:
        """Centroid histograms on a ``(cluster, bin)`` grid with bin edges."""
        return xr.Dataset(
            {"centroid": (("cluster", "bin"), self.centroids)},
            coords={
                "cluster": np.arange(self.model.num_clusters),
                "bin": np.arange(self.bin_range.num_bins),
                "bin_lower": ("bin", self.bin_range.lower_edges),
                "bin_upper": ("bin", self.bin_range.upper_edges),
            },
            attrs={
                "min_prec": self.bin_range.min_prec,
                "max_prec": self.bin_range.max_prec,
                "bin_size": self.bin_range.bin_size,
                "total_record_count": self.total_record_count,
                "n_iter": self.model.n_iter,
                "converged": int(self.model.converged),
            },
        )
