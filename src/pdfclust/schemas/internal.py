"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict, model_validator
from pdfclust.schemas.base import PdfBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalDatasetConfig(PdfBaseModel):
    """Runtime dataset shape."""
    start_year: int
    end_year: int
    num_days_per_cohort: int = Field(ge=1)
    num_lats: int = Field(ge=1)
    num_longs: int = Field(ge=1)
    num_hourly: int = Field(ge=1)
    seed: int
    input_dir: Optional[str]  # Required when source == "netcdf" (validated below)
    file_pattern: str


class InternalVarNamesConfig(PdfBaseModel):
    """Runtime variable name mappings."""
    lat: str
    lon: str
    prec: str


class InternalMetadataKeysConfig(PdfBaseModel):
    """Runtime metadata keys."""
    year: str
    day: str


class InternalGlobalConfig(PdfBaseModel):
    """Runtime global settings."""
    var_names: InternalVarNamesConfig
    metadata_keys: InternalMetadataKeysConfig


class InternalBinningConfig(PdfBaseModel):
    """Runtime binning configuration."""
    num_bins: int = Field(ge=1)


class InternalClusteringConfig(PdfBaseModel):
    """Runtime k-means configuration."""
    num_clusters: int = Field(ge=1)
    num_iterations: int = Field(ge=1)
    seed: int
    tolerance: float = Field(ge=0)
    init_sample_size: int = Field(ge=1)


class InternalExecutionConfig(PdfBaseModel):
    """Runtime dask execution settings."""
    scheduler: Literal["threads", "processes", "synchronous"]
    num_partitions: int = Field(ge=1)


class InternalOutputConfig(PdfBaseModel):
    """Runtime output configuration."""
    compression: Literal["snappy", "gzip", "lz4", "none"]
    save_histograms: bool


class InternalLoggingConfig(PdfBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(PdfBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.num_bins = config.binning.num_bins  # NOT .get()
            self.day_key = config.global_.metadata_keys.day

    Derived constants of the dataset are exposed as properties
    (``num_years``, ``total_num_days``).
    """

    source: Literal["synthetic", "netcdf"]
    base_dir: Optional[str]
    dataset: InternalDatasetConfig
    global_: InternalGlobalConfig = Field(alias="global")
    binning: InternalBinningConfig
    clustering: InternalClusteringConfig
    execution: InternalExecutionConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
        populate_by_name=True,  # Allow both 'global' and 'global_'
    )

    @model_validator(mode="after")
    def check_source_inputs(self):
        """NetCDF source needs an input directory."""
        if self.source == "netcdf" and not self.dataset.input_dir:
            raise ValueError("source='netcdf' requires dataset.input_dir")
        if self.dataset.end_year < self.dataset.start_year:
            raise ValueError("dataset.end_year must be >= dataset.start_year")
        return self

    @property
    def num_years(self) -> int:
        """Number of cohorts (years) in the dataset."""
        return self.dataset.end_year - self.dataset.start_year + 1

    @property
    def total_num_days(self) -> int:
        """Total number of daily records expected in the dataset."""
        return self.num_years * self.dataset.num_days_per_cohort
