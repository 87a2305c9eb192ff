"""Histogram stage contract.

Enforces the guarantee that every histogram vector has the configured
number of bins and holds finite, non-negative normalized counts.
"""

import numpy as np

from pdfclust.contracts.base import require


def assert_histograms(vectors: np.ndarray, num_bins: int) -> None:
    """Enforce histogram stage contract.

    Called on the histogram matrix before clustering. Normalized bins may
    sum above 1 only through boundary double-counts, so the sum is not
    checked here.

    Parameters
    ----------
    vectors : np.ndarray
        ``[n_locations, num_bins]`` matrix of normalized counts

    num_bins : int
        Configured number of bins

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    vectors = np.asarray(vectors)
    require(
        vectors.ndim == 2,
        f"Histogram contract violated: got {vectors.ndim}-D array, expected 2-D"
    )
    require(
        vectors.shape[1] == num_bins,
        f"Histogram contract violated: vectors have {vectors.shape[1]} bins, expected {num_bins}"
    )
    require(
        bool(np.all(np.isfinite(vectors))),
        "Histogram contract violated: non-finite bin values"
    )
    require(
        bool(np.all(vectors >= 0)),
        "Histogram contract violated: negative bin values"
    )
