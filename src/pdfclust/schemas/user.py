"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs in a variety of formats, with aliases
for common naming patterns (e.g., NUM_BINS → num_bins, SOURCE → source).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults. Validation is lenient to accept
both uppercase and lowercase keys, integers where floats are expected, etc.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from pdfclust.schemas.base import PdfBaseModel


class UserDatasetConfig(PdfBaseModel):
    """User-facing dataset config."""
    start_year: Optional[int] = None
    end_year: Optional[int] = None
    num_days_per_cohort: Optional[int] = None
    num_lats: Optional[int] = None
    num_longs: Optional[int] = None
    num_hourly: Optional[int] = None
    seed: Optional[int] = None
    input_dir: Optional[str] = None
    file_pattern: Optional[str] = None


class UserGlobalConfig(PdfBaseModel):
    """User-facing global config."""
    var_names: Optional[dict[str, str]] = None
    metadata_keys: Optional[dict[str, str]] = None


class UserClusteringConfig(PdfBaseModel):
    """User-facing clustering config."""
    num_clusters: Optional[int] = None
    num_iterations: Optional[int] = None
    seed: Optional[int] = None
    tolerance: Optional[float] = None
    init_sample_size: Optional[int] = None

    @field_validator("tolerance", mode="before")
    @classmethod
    def coerce_tolerance(cls, v):
        """Accept int or float for tolerance."""
        if v is not None:
            return float(v)
        return v


class UserExecutionConfig(PdfBaseModel):
    """User-facing execution config."""
    scheduler: Optional[str] = None
    num_partitions: Optional[int] = None

    @field_validator("scheduler", mode="before")
    @classmethod
    def normalize_scheduler(cls, v):
        """Normalize scheduler names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserConfig(PdfBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    This config is converted to internal overrides during resolution.

    Usage
    -----
        user_cfg = UserConfig(
            SOURCE="netcdf",
            INPUT_DIR="/data/trmm_daily",
            BASE_DIR="/data/pdfclust",
            NUM_BINS=20,
            NUM_CLUSTERS=4,
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Top-level operational settings
    source: Optional[Literal["synthetic", "netcdf"]] = Field(None, alias="SOURCE")
    base_dir: Optional[str] = Field(None, alias="BASE_DIR")
    input_dir: Optional[str] = Field(None, alias="INPUT_DIR")

    # Dataset settings (flat aliases)
    start_year: Optional[int] = Field(None, alias="START_YEAR")
    end_year: Optional[int] = Field(None, alias="END_YEAR")
    num_days_per_cohort: Optional[int] = Field(None, alias="NUM_DAYS")
    num_lats: Optional[int] = Field(None, alias="NUM_LATS")
    num_longs: Optional[int] = Field(None, alias="NUM_LONGS")
    num_hourly: Optional[int] = Field(None, alias="NUM_HOURLY")
    seed: Optional[int] = Field(None, alias="SEED")

    # Binning / clustering settings (flat aliases)
    num_bins: Optional[int] = Field(None, alias="NUM_BINS")
    num_clusters: Optional[int] = Field(None, alias="NUM_CLUSTERS")
    num_iterations: Optional[int] = Field(None, alias="NUM_ITERATIONS")

    # Execution settings (flat aliases)
    scheduler: Optional[str] = Field(None, alias="SCHEDULER")
    num_partitions: Optional[int] = Field(None, alias="NUM_PARTITIONS")

    # Nested overrides (advanced users)
    dataset: Optional[UserDatasetConfig] = None
    global_: Optional[UserGlobalConfig] = Field(None, alias="global")
    clustering: Optional[UserClusteringConfig] = None
    execution: Optional[UserExecutionConfig] = None

    model_config = PdfBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("source", "scheduler", mode="before")
    @classmethod
    def normalize_names(cls, v):
        """Normalize source/scheduler names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

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

        # Dataset section
        dataset = {}
        flat_dataset = {
            "input_dir": self.input_dir,
            "start_year": self.start_year,
            "end_year": self.end_year,
            "num_days_per_cohort": self.num_days_per_cohort,
            "num_lats": self.num_lats,
            "num_longs": self.num_longs,
            "num_hourly": self.num_hourly,
            "seed": self.seed,
        }
        dataset.update({k: v for k, v in flat_dataset.items() if v is not None})

        # Merge with explicit dataset config
        if self.dataset is not None:
            dataset.update(self.dataset.model_dump(exclude_none=True))

        if dataset:
            overrides["dataset"] = dataset

        # Global section
        if self.global_ is not None:
            global_cfg = self.global_.model_dump(exclude_none=True)
            if global_cfg:
                overrides["global"] = global_cfg

        # Binning section
        if self.num_bins is not None:
            overrides["binning"] = {"num_bins": self.num_bins}

        # Clustering section
        clustering = {}
        if self.num_clusters is not None:
            clustering["num_clusters"] = self.num_clusters
        if self.num_iterations is not None:
            clustering["num_iterations"] = self.num_iterations

        if self.clustering is not None:
            clustering.update(self.clustering.model_dump(exclude_none=True))

        if clustering:
            overrides["clustering"] = clustering

        # Execution section
        execution = {}
        if self.scheduler is not None:
            execution["scheduler"] = self.scheduler
        if self.num_partitions is not None:
            execution["num_partitions"] = self.num_partitions

        if self.execution is not None:
            execution.update(self.execution.model_dump(exclude_none=True))

        if execution:
            overrides["execution"] = execution

        return overrides
