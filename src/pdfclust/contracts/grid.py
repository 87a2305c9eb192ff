"""Grid record contracts.

Enforces the shape guarantees records must satisfy before and after the
temporal reduction stage.
"""

from typing import TYPE_CHECKING

from pdfclust.contracts.base import require
from pdfclust.contracts.failure import InvalidGridShape

if TYPE_CHECKING:
    from pdfclust.core.record import GridRecord


def assert_hourly_record(record: "GridRecord", stage: str = "temporal") -> None:
    """Enforce the input contract of the temporal reduction.

    Parameters
    ----------
    record : GridRecord
        Record whose precipitation must be ``[H, Lat, Lon]`` with H > 0.

    stage : str, optional
        Stage name used in the error message.

    Raises
    ------
    InvalidGridShape
        If prec is not 3-D or the hour axis is empty.
    """
    prec = record.prec
    require(
        prec.ndim == 3,
        f"Grid contract violated: 'prec' has {prec.ndim} dims, expected 3 (hour, lat, lon)",
        InvalidGridShape, stage=stage, key=dict(record.metadata),
    )
    require(
        prec.shape[0] > 0,
        "Grid contract violated: hour axis has length 0, cannot average",
        InvalidGridShape, stage=stage, key=dict(record.metadata),
    )


def assert_daily_record(record: "GridRecord", stage: str = "flatten") -> None:
    """Enforce that a record has been reduced to a ``[Lat, Lon]`` field.

    Raises
    ------
    InvalidGridShape
        If prec is not 2-D.
    """
    prec = record.prec
    require(
        prec.ndim == 2,
        f"Grid contract violated: 'prec' has {prec.ndim} dims, expected 2 (lat, lon)",
        InvalidGridShape, stage=stage, key=dict(record.metadata),
    )
