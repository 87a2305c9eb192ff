"""Pipeline orchestration.

Sets up logging, builds the record source (synthetic or NetCDF), runs the
processor and persists the terminal artifacts.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, TYPE_CHECKING

from pdfclust.contracts import assert_cluster_assignments, assert_histograms
from pdfclust.data import GridRecordLoader, make_calibration_records
from pdfclust.pipeline.processor import PdfClusteringProcessor
from pdfclust.pipeline.result import ClusteringResult
from pdfclust.setup_directories import get_results_path

if TYPE_CHECKING:
    from pdfclust.schemas import InternalConfig

__all__ = ['PipelineOrchestrator']

logger = logging.getLogger(__name__)


class PipelineOrchestrator:
    """Runs one clustering job from configuration to files on disk.

    **Sources:**

    - **synthetic**: seeded random calibration records built from the
      ``dataset`` section (default 2 years x 2 days x 2x2 grid x 2 hours).

    - **netcdf**: one file per day under ``dataset.input_dir``; files are
      read lazily on the workers and unreadable files are skipped with a
      logged cause.

    **Outputs** (when ``output_dirs`` is given):

    - ``results/pdfclust_cluster_assignments.parquet``: lat, lon, cluster_id
    - ``results/pdfclust_centroids.nc``: centroid histograms and bin edges
    - ``results/pdfclust_histograms.parquet``: per-location histograms
      (if ``output.save_histograms``)
    - ``logs/pdfclust_pipeline.log``

    Example usage::

        config = resolve_config(ParamConfig(), user_cfg, cli_cfg)
        output_dirs = setup_output_directories(config.base_dir)
        orch = PipelineOrchestrator(config, output_dirs)
        result = orch.start()
    """

    def __init__(self, config: "InternalConfig", output_dirs: Optional[Dict[str, Path]] = None):
        self.config = config
        self.output_dirs = output_dirs
        self.processor = PdfClusteringProcessor(config)
        self.saved_paths: Dict[str, Path] = {}

    def _setup_logging(self):
        """Configure root logger with console and (if output dirs) file handlers."""
        log_level = getattr(logging, self.config.logging.level.upper(), logging.INFO)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Clear existing handlers and add new ones
        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        log_path = None
        if self.output_dirs:
            log_dir = Path(self.output_dirs["logs"])
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / "pdfclust_pipeline.log"
            fh = logging.FileHandler(log_path)
            fh.setLevel(log_level)
            fh.setFormatter(formatter)
            root.addHandler(fh)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", logging.getLevelName(log_level), log_path)

    def load_records(self):
        """Record source selected by ``config.source``."""
        if self.config.source == "synthetic":
            return make_calibration_records(self.config)

        loader = GridRecordLoader(self.config)
        paths = loader.discover()
        return loader.load_bag(paths, npartitions=min(self.config.execution.num_partitions, max(len(paths), 1)))

    def start(self, setup_logging: bool = True) -> ClusteringResult:
        """Run the pipeline once and persist its outputs."""
        if setup_logging:
            self._setup_logging()

        logger.info("Starting pdfclust pipeline: source=%s, bins=%d, clusters=%d, iterations=%d",
                    self.config.source, self.config.binning.num_bins,
                    self.config.clustering.num_clusters, self.config.clustering.num_iterations)

        records = self.load_records()
        result = self.processor.run(records)

        df = result.to_dataframe()
        assert_cluster_assignments(df, self.config.clustering.num_clusters,
                                   expected_locations=result.num_locations())
        self._log_cluster_sizes(df)

        if self.output_dirs:
            self.save_results(result, df)
        return result

    def save_results(self, result: ClusteringResult, assignments=None) -> Dict[str, Path]:
        """Write assignments (Parquet), centroids (NetCDF) and histograms (Parquet)."""
        if assignments is None:
            assignments = result.to_dataframe()
        compression = self.config.output.compression
        compression = None if compression == "none" else compression

        path = get_results_path(self.output_dirs, "cluster_assignments", ".parquet")
        path.parent.mkdir(parents=True, exist_ok=True)
        assignments.to_parquet(path, engine='pyarrow', compression=compression, index=False)
        self.saved_paths["assignments"] = path
        logger.info("Saved %d assignments to: %s", len(assignments), path)

        path = get_results_path(self.output_dirs, "centroids", ".nc")
        result.centroids_dataset().to_netcdf(path, mode='w')
        self.saved_paths["centroids"] = path
        logger.info("Saved centroids to: %s", path)

        if self.config.output.save_histograms:
            hist_df = result.histograms_dataframe()
            bins = [c for c in hist_df.columns if c.startswith("bin_")]
            assert_histograms(hist_df[bins].to_numpy(), result.bin_range.num_bins)
            path = get_results_path(self.output_dirs, "histograms", ".parquet")
            hist_df.to_parquet(path, engine='pyarrow', compression=compression, index=False)
            self.saved_paths["histograms"] = path
            logger.info("Saved %d histograms to: %s", len(hist_df), path)

        return self.saved_paths

    def _log_cluster_sizes(self, df):
        sizes = df["cluster_id"].value_counts().sort_index()
        summary = ", ".join(f"#{cid}: {n}" for cid, n in sizes.items())
        logger.info("Cluster sizes (%d locations): %s", len(df), summary)
