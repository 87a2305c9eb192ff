"""ParamConfig: Expert defaults for the pdfclust pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code defines fallback
values - this is the single source of truth for defaults.

The defaults describe the calibration dataset: 2 years x 2 January days
on a 2x2 grid with 2 hourly samples, 10 bins, 3 clusters, 10 iterations.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from pdfclust.schemas.base import PdfBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class DatasetConfig(PdfBaseModel):
    """Shape of the input record collection."""
    start_year: int = 2001
    end_year: int = 2002
    num_days_per_cohort: int = Field(2, ge=1, description="Days per year (cohort size per day key)")
    num_lats: int = Field(2, ge=1)
    num_longs: int = Field(2, ge=1)
    num_hourly: int = Field(2, ge=1, description="Hourly samples per record")
    seed: int = Field(0, description="Seed for synthetic record generation")
    input_dir: Optional[str] = None
    file_pattern: str = "*.nc"

    @model_validator(mode="after")
    def check_year_order(self):
        """end_year may not precede start_year."""
        if self.end_year < self.start_year:
            raise ValueError(
                f"end_year ({self.end_year}) must be >= start_year ({self.start_year})"
            )
        return self


class VarNamesConfig(PdfBaseModel):
    """Variable name mappings."""
    lat: str = "lat"
    lon: str = "lon"
    prec: str = "prec"


class MetadataKeysConfig(PdfBaseModel):
    """Metadata keys parsed as integers for grouping."""
    year: str = "YEAR"
    day: str = "DAYOFJAN"


class GlobalConfig(PdfBaseModel):
    """Global pipeline settings."""
    var_names: VarNamesConfig = Field(default_factory=VarNamesConfig)
    metadata_keys: MetadataKeysConfig = Field(default_factory=MetadataKeysConfig)


class BinningConfig(PdfBaseModel):
    """Histogram binning configuration."""
    num_bins: int = Field(10, ge=1)


class ClusteringConfig(PdfBaseModel):
    """K-means configuration."""
    num_clusters: int = Field(3, ge=1)
    num_iterations: int = Field(10, ge=1)
    seed: int = Field(42, description="random_state for k-means++ initialization")
    tolerance: float = Field(1e-4, ge=0, description="Max centroid shift for convergence")
    init_sample_size: int = Field(10000, ge=1, description="Vectors sampled for initialization")

    @field_validator("tolerance", mode="before")
    @classmethod
    def coerce_tolerance_to_float(cls, v):
        """Allow int or float for tolerance."""
        return float(v)


class ExecutionConfig(PdfBaseModel):
    """Dask execution settings."""
    scheduler: Literal["threads", "processes", "synchronous"] = "threads"
    num_partitions: int = Field(4, ge=1)


class OutputConfig(PdfBaseModel):
    """Output file configuration."""
    compression: Literal["snappy", "gzip", "lz4", "none"] = "snappy"
    save_histograms: bool = True


class LoggingConfig(PdfBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(PdfBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    source: Literal["synthetic", "netcdf"] = "synthetic"
    base_dir: Optional[str] = None
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    binning: BinningConfig = Field(default_factory=BinningConfig)
    clustering: ClusteringConfig = Field(default_factory=ClusteringConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = PdfBaseModel.model_config.copy()
    model_config.update({"populate_by_name": True})  # Allow both 'global' and 'global_'
