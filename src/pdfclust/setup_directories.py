"""
Directory setup for the clustering pipeline.

Layout under the base directory:
- results/: cluster assignments (Parquet), centroids and histograms
- logs/: pipeline log files
"""

from pathlib import Path


def setup_output_directories(base_output_dir):
    """
    Set up organized output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path
        Base output directory (created if missing).

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'results', 'logs'
    """
    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "results": base_output_dir / "results",
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    return directories


def get_results_path(output_dirs, name, suffix):
    """
    Get the path of a result file.

    Parameters
    ----------
    output_dirs : dict
        Output directories from setup_output_directories()
    name : str
        Product name (e.g. 'cluster_assignments')
    suffix : str
        File extension including the dot (e.g. '.parquet')

    Returns
    -------
    Path
        results/pdfclust_{name}{suffix}

    Example
    -------
    >>> get_results_path(dirs, 'centroids', '.nc')
    Path('output/results/pdfclust_centroids.nc')
    """
    return Path(output_dirs["results"]) / f"pdfclust_{name}{suffix}"
