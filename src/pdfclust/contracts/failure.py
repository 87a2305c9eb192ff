"""Centralized failure policy and error kinds for the clustering pipeline.

Structural errors fail fast, loud, and once. All of them derive from
ContractViolation so callers can handle pipeline bugs uniformly, while the
subclasses name the kind of structural problem that was found.
"""

from enum import Enum
from typing import Any, Optional


class FailurePolicy(str, Enum):
    """Failure policy for per-record collaborator failures (load/store).

    FAIL_FAST: Re-raise the first failure and abort the run
    SKIP_RECORD (default for loaders): Log the cause and skip the record
    """
    FAIL_FAST = "fail_fast"
    SKIP_RECORD = "skip_record"


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates that a stage received or produced data that breaks the
    invariants it promised. Continuing would silently corrupt downstream
    statistics, so the run is aborted.

    Key distinction:
    - ValueError / ValidationError: User/config error (handled by Pydantic)
    - ContractViolation: Structural pipeline error (fatal)
    - ClusteringNonconvergence: Soft warning, result still usable

    Parameters
    ----------
    message : str
        Human readable description of the violation.
    stage : str, optional
        Pipeline stage that detected the violation.
    key : any, optional
        Grouping key involved (day of year or location), if any.
    """

    def __init__(self, message: str, stage: Optional[str] = None, key: Any = None):
        super().__init__(message)
        self.stage = stage
        self.key = key

    def __reduce__(self):
        # Keep stage/key when the exception crosses a process boundary
        return (type(self), (self.args[0], self.stage, self.key))


class InvalidGridShape(ContractViolation):
    """Array dimensions of co-dependent variables disagree, or a reduction
    axis has length zero."""


class DegenerateRange(ContractViolation):
    """Global max equals (or is below) global min during binning."""


class EmptyGroup(ContractViolation):
    """A grouping key reached an aggregation stage with zero members."""


class ClusteringNonconvergence(RuntimeWarning):
    """Iteration limit reached before the k-means centroids stabilized.

    Issued with ``warnings.warn``; the capped-iteration result is returned.
    """
