"""Core clustering pipeline execution logic.

This module contains the actual pipeline runner, separated from argument parsing.
Scripts are thin wrappers; this is the real implementation.
"""

import json
import logging
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any

from pdfclust.setup_directories import setup_output_directories
from pdfclust.pipeline.orchestrator import PipelineOrchestrator
from pdfclust.pipeline.result import ClusteringResult
from pdfclust.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def run_pdf_pipeline(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    verbose: bool = False
) -> ClusteringResult:
    """Execute the anomaly PDF clustering pipeline.

    1. Loads and resolves configuration (Param < User < CLI)
    2. Sets up output directories (if a base directory is configured)
    3. Runs the orchestrator and returns its result

    Parameters
    ----------
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict).
        If None, only expert defaults and CLI overrides apply.

    cli_args : dict, optional
        CLI argument overrides. Keys: source, input_dir, base_dir,
        scheduler, log_level. All optional.

    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    ClusteringResult

    Raises
    ------
    FileNotFoundError
        If user_config_path or the input directory does not exist.
    pydantic.ValidationError
        If configuration validation fails.
    ContractViolation
        If a pipeline invariant fails during the run.

    Examples
    --------
    Calibration run on synthetic data::

        result = run_pdf_pipeline(cli_args={"base_dir": "/tmp/pdfclust"})

    Run over NetCDF day files::

        run_pdf_pipeline(
            "scripts/user_config.py",
            cli_args={"input_dir": "/data/trmm_daily"},
        )
    """
    param_cfg = ParamConfig()

    if user_config_path is not None:
        user_cfg = UserConfig.model_validate(load_user_config_dict(user_config_path))
    else:
        user_cfg = UserConfig()

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"

    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    output_dirs = setup_output_directories(config.base_dir) if config.base_dir else None

    print(f"\n{'='*60}")
    print("pdfclust Precipitation Anomaly PDF Clustering")
    print('='*60)
    print(f"Config:   {user_config_path or '(defaults)'}")
    print(f"Source:   {config.source}")
    print(f"Years:    {config.dataset.start_year}-{config.dataset.end_year}")
    print(f"Bins:     {config.binning.num_bins}")
    print(f"Clusters: {config.clustering.num_clusters}")
    print(f"Output:   {config.base_dir or '(not saved)'}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(by_alias=True), indent=2))
        print('='*60)

    orchestrator = PipelineOrchestrator(config, output_dirs)
    return orchestrator.start()
