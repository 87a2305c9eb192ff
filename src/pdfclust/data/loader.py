"""Load daily GridRecords from NetCDF files.

One file holds one observation day: ``lat``, ``lon`` coordinate variables,
an hourly ``prec(hour, lat, lon)`` variable and global attributes carrying
the record metadata (e.g. ``YEAR``, ``DAYOFJAN``). Variable and metadata
names come from the configuration.

A file that cannot be read is a per-record collaborator failure: under
``FailurePolicy.SKIP_RECORD`` it is logged with its cause and skipped,
under ``FailurePolicy.FAIL_FAST`` the error propagates. A file that reads
fine but holds inconsistent arrays raises InvalidGridShape under either
policy.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, TYPE_CHECKING

import dask.bag as db
import xarray as xr

from pdfclust.core.record import GridRecord
from pdfclust.contracts import ContractViolation, FailurePolicy

if TYPE_CHECKING:
    from pdfclust.schemas import InternalConfig

__all__ = ['GridRecordLoader']

logger = logging.getLogger(__name__)


def _is_loaded(record: Optional[GridRecord]) -> bool:
    return record is not None


class GridRecordLoader:
    """Read NetCDF day files into GridRecords.

    Parameters
    ----------
    config : InternalConfig
        ``dataset.input_dir`` / ``dataset.file_pattern`` locate the files,
        ``global`` gives variable and metadata key names.

    on_error : FailurePolicy, optional
        What to do with an unreadable file (default SKIP_RECORD).

    Examples
    --------
    >>> loader = GridRecordLoader(config)
    >>> records = loader.load_all(loader.discover())
    """

    def __init__(self, config: "InternalConfig",
                 on_error: FailurePolicy = FailurePolicy.SKIP_RECORD):
        self.config = config
        self.on_error = FailurePolicy(on_error)
        self.var_names = config.global_.var_names.model_dump()
        self.required_keys = (
            config.global_.metadata_keys.year,
            config.global_.metadata_keys.day,
        )

    def discover(self) -> List[Path]:
        """Sorted list of files matching the configured pattern."""
        input_dir = Path(self.config.dataset.input_dir).expanduser()
        if not input_dir.is_dir():
            raise FileNotFoundError(f"Input directory not found: {input_dir}")
        paths = sorted(input_dir.glob(self.config.dataset.file_pattern))
        logger.info("Found %d files in %s matching '%s'",
                    len(paths), input_dir, self.config.dataset.file_pattern)
        return paths

    def read(self, path) -> GridRecord:
        """Read one file; errors propagate."""
        with xr.open_dataset(path) as ds:
            record = GridRecord.from_dataset(ds.load(), self.var_names)
        missing = [k for k in self.required_keys if k not in record.metadata]
        if missing:
            raise ValueError(f"{Path(path).name}: missing metadata attribute(s) {missing}")
        return record

    def load(self, path) -> Optional[GridRecord]:
        """Read one file, applying the failure policy.

        Returns
        -------
        GridRecord or None
            None when the file was skipped.
        """
        try:
            record = self.read(path)
        except ContractViolation:
            raise
        except Exception as e:
            if self.on_error == FailurePolicy.FAIL_FAST:
                raise
            logger.warning("Skipping record %s: %s", path, e)
            return None
        logger.debug("Loaded %s: %s", Path(path).name, record)
        return record

    def load_all(self, paths: Iterable) -> List[GridRecord]:
        """Eagerly load every readable file."""
        paths = list(paths)
        records = [r for r in (self.load(p) for p in paths) if r is not None]
        skipped = len(paths) - len(records)
        if skipped:
            logger.warning("Skipped %d of %d files", skipped, len(paths))
        return records

    def load_bag(self, paths: Iterable, npartitions: int) -> db.Bag:
        """Lazily load files on the workers; skipped files drop out."""
        paths = [str(p) for p in paths]
        if not paths:
            raise FileNotFoundError("No input files to load")
        return db.from_sequence(paths, npartitions=npartitions).map(self.load).filter(_is_loaded)
