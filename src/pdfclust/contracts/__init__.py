"""Pipeline contracts: fail-fast enforcement of stage invariants.

Contracts fail immediately and loudly when a stage receives or produces
data that breaks its promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate pipeline correctness
- Algorithms handle numeric edge cases
"""

from pdfclust.contracts.failure import (
    ContractViolation,
    FailurePolicy,
    InvalidGridShape,
    DegenerateRange,
    EmptyGroup,
    ClusteringNonconvergence,
)
from pdfclust.contracts.base import require
from pdfclust.contracts.grid import assert_hourly_record, assert_daily_record
from pdfclust.contracts.histogram import assert_histograms
from pdfclust.contracts.clustering import assert_cluster_assignments

__all__ = [
    "ContractViolation",
    "FailurePolicy",
    "InvalidGridShape",
    "DegenerateRange",
    "EmptyGroup",
    "ClusteringNonconvergence",
    "require",
    "assert_hourly_record",
    "assert_daily_record",
    "assert_histograms",
    "assert_cluster_assignments",
]
