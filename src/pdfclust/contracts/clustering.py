"""Cluster assignment contract.

Enforces the guarantee that the terminal output covers every location
exactly once with a valid cluster id.
"""

from typing import Optional

import pandas as pd

from pdfclust.contracts.base import require


def assert_cluster_assignments(
    df: pd.DataFrame,
    num_clusters: int,
    expected_locations: Optional[int] = None,
) -> None:
    """Enforce cluster assignment contract.

    Parameters
    ----------
    df : pd.DataFrame
        Output of ClusteringResult.to_dataframe()

    num_clusters : int
        Number of clusters the model was fitted with

    expected_locations : int, optional
        Number of distinct locations that were binned

    Raises
    ------
    ContractViolation
        If structural requirements are violated
    """
    require(
        isinstance(df, pd.DataFrame),
        f"Clustering contract violated: output is {type(df)}, expected DataFrame"
    )

    for col in ("lat", "lon", "cluster_id"):
        require(
            col in df.columns,
            f"Clustering contract violated: missing required column '{col}'"
        )

    require(
        not df.duplicated(subset=["lat", "lon"]).any(),
        "Clustering contract violated: a location is assigned more than once"
    )

    if len(df) > 0:
        require(
            bool(((df["cluster_id"] >= 0) & (df["cluster_id"] < num_clusters)).all()),
            f"Clustering contract violated: cluster_id outside [0, {num_clusters})"
        )

    if expected_locations is not None:
        require(
            len(df) == expected_locations,
            f"Clustering contract violated: {len(df)} assignments, "
            f"expected {expected_locations} locations"
        )
