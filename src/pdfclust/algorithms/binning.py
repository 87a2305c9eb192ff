"""Global histogram binning of per-location anomaly series.

Binning runs in two phases:

1. **Global range** (barrier): min and max over every flattened value of the
   whole dataset, not per location. ``bin_size = (max - min) / num_bins``.
2. **Per-location histogram**: for each location, count the values falling
   into each bin and divide by the total number of input days.

Bin edges are inclusive on both sides: a value sitting exactly on an
interior edge ``min + b * bin_size`` is counted in bin ``b - 1`` *and* in
bin ``b``. A normalized histogram can therefore sum above the fraction of
in-range values when boundary hits occur.
"""

import logging
import math
from dataclasses import dataclass
from functools import partial
from operator import itemgetter
from typing import Iterable, Tuple, TYPE_CHECKING

import dask.bag as db
import numpy as np

from pdfclust.contracts import ContractViolation, DegenerateRange, require

if TYPE_CHECKING:
    from pdfclust.schemas import InternalConfig

__all__ = ['Binner', 'BinRange']

logger = logging.getLogger(__name__)

# (min, max, number of values) of an empty collection
_EMPTY_EXTENT = (math.inf, -math.inf, 0)


@dataclass(frozen=True)
class BinRange:
    """Global value range shared by every histogram vector."""

    min_prec: float
    max_prec: float
    num_bins: int

    @property
    def range(self) -> float:
        return self.max_prec - self.min_prec

    @property
    def bin_size(self) -> float:
        return self.range / self.num_bins

    @property
    def lower_edges(self) -> np.ndarray:
        """``min + b * bin_size`` for b in [0, num_bins)."""
        return self.min_prec + np.arange(self.num_bins) * self.bin_size

    @property
    def upper_edges(self) -> np.ndarray:
        """``min + (b + 1) * bin_size`` for b in [0, num_bins).

        The last edge is pinned to ``max_prec`` so the global maximum is
        never lost to rounding of ``num_bins * bin_size``.
        """
        edges = self.min_prec + np.arange(1, self.num_bins + 1) * self.bin_size
        edges[-1] = self.max_prec
        return edges


def _partition_extent(values: Iterable[float]) -> Tuple[float, float, int]:
    lo, hi, n = _EMPTY_EXTENT
    for v in values:
        if v < lo:
            lo = v
        if v > hi:
            hi = v
        n += 1
    return lo, hi, n


def _merge_extents(extents: Iterable[Tuple[float, float, int]]) -> Tuple[float, float, int]:
    lo, hi, n = _EMPTY_EXTENT
    for e_lo, e_hi, e_n in extents:
        lo = min(lo, e_lo)
        hi = max(hi, e_hi)
        n += e_n
    return lo, hi, n


def bin_counts(value: float, bin_range: BinRange) -> np.ndarray:
    """0/1 membership of one value in every bin (both edges inclusive).

    A value outside ``[min, max]`` (possible only through rounding of the
    edges) belongs to no bin.
    """
    inside = (bin_range.lower_edges <= value) & (value <= bin_range.upper_edges)
    return inside.astype(np.float64)


def _add_value(counts: np.ndarray, pair: Tuple, bin_range: BinRange) -> np.ndarray:
    return counts + bin_counts(pair[1], bin_range)


def _normalize(keyed_counts: Tuple, total_record_count: int) -> Tuple:
    location, counts = keyed_counts
    return location, counts / total_record_count


class Binner:
    """Two-phase global binning.

    Parameters
    ----------
    config : InternalConfig
        Supplies ``binning.num_bins``.
    """

    def __init__(self, config: "InternalConfig"):
        self.num_bins = config.binning.num_bins
        logger.info("Binner initialized: num_bins=%d", self.num_bins)

    # ------------------------------------------------------------------
    # Phase 1: global range
    # ------------------------------------------------------------------

    def extent(self, pairs: db.Bag):
        """Lazy ``(min, max, count)`` of the scalar part of every pair.

        A commutative, associative reduction; computing it is the global
        barrier of the binning stage.
        """
        return pairs.pluck(1).reduction(_partition_extent, _merge_extents)

    def make_range(self, min_prec: float, max_prec: float, count: int = 1) -> BinRange:
        """Validate a global extent and build the shared BinRange.

        Raises
        ------
        DegenerateRange
            If there are no values or max - min <= 0.
        """
        require(count > 0, "no values to bin", DegenerateRange, stage="binning")
        require(max_prec - min_prec > 0,
                f"all values identical (min={min_prec!r}, max={max_prec!r}), "
                "bins cannot discriminate",
                DegenerateRange, stage="binning")
        bin_range = BinRange(float(min_prec), float(max_prec), self.num_bins)
        logger.info("Global range: min=%.6g, max=%.6g, bin_size=%.6g (%d values)",
                    bin_range.min_prec, bin_range.max_prec, bin_range.bin_size, count)
        return bin_range

    def range_of(self, values: Iterable[float]) -> BinRange:
        """In-memory phase 1 over an iterable of values."""
        return self.make_range(*_partition_extent(values))

    def global_range(self, pairs: db.Bag) -> BinRange:
        """Compute phase 1 over a bag of pairs (blocks until done)."""
        return self.make_range(*self.extent(pairs).compute())

    # ------------------------------------------------------------------
    # Phase 2: per-location histograms
    # ------------------------------------------------------------------

    def histogram(self, values: Iterable[float], bin_range: BinRange,
                  total_record_count: int) -> np.ndarray:
        """Normalized histogram of one location's multiset of values.

        Counts are divided by ``total_record_count`` (number of input days),
        not by the number of values of this location.
        """
        require(total_record_count > 0,
                f"total_record_count must be positive, got {total_record_count}",
                ContractViolation, stage="binning")
        counts = np.zeros(bin_range.num_bins, dtype=np.float64)
        for v in values:
            counts = counts + bin_counts(v, bin_range)
        return counts / total_record_count

    def transform(self, pairs: db.Bag, bin_range: BinRange,
                  total_record_count: int) -> db.Bag:
        """Lazily fold a bag of ``(location, value)`` pairs into
        ``(location, histogram)`` pairs, one per distinct location."""
        require(total_record_count > 0,
                f"total_record_count must be positive, got {total_record_count}",
                ContractViolation, stage="binning")
        # foldby calls a callable initial once per key
        zeros = partial(np.zeros, bin_range.num_bins, dtype=np.float64)
        counts = pairs.foldby(
            itemgetter(0),
            partial(_add_value, bin_range=bin_range),
            zeros,
            np.add,
            zeros,
        )
        return counts.map(_normalize, total_record_count)
