"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: data source, input/output paths, scheduler, verbosity.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import model_validator
from pdfclust.schemas.base import PdfBaseModel


class CLIConfig(PdfBaseModel):
    """Command-line configuration overrides.

    Operational-only settings that override user and param configs.
    Highest priority in config resolution.

    Notes
    -----
    If input_dir is provided but source is not, source is automatically
    set to "netcdf" (schema responsibility, not runtime).

    Usage
    -----
        cli_cfg = CLIConfig(
            input_dir="/data/trmm_daily",
            base_dir="/scratch/pdfclust_output",
        )
        # source automatically set to "netcdf"

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    source: Optional[Literal["synthetic", "netcdf"]] = None
    input_dir: Optional[str] = None
    base_dir: Optional[str] = None
    scheduler: Optional[Literal["threads", "processes", "synchronous"]] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    @model_validator(mode="after")
    def infer_netcdf_source_from_input_dir(self):
        """If an input directory is given but no source, read NetCDF files."""
        if self.source is None and self.input_dir:
            self.source = "netcdf"
        return self

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        if self.source is not None:
            overrides["source"] = self.source

        if self.base_dir is not None:
            overrides["base_dir"] = str(self.base_dir)

        if self.input_dir is not None:
            overrides["dataset"] = {"input_dir": str(self.input_dir)}

        if self.scheduler is not None:
            overrides["execution"] = {"scheduler": self.scheduler}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
