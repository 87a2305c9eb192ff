"""Tests for CLIConfig schema and conversion to internal overrides."""

import pytest
from pydantic import ValidationError

from pdfclust.schemas.cli import CLIConfig
from pdfclust.schemas.param import ParamConfig
from pdfclust.schemas.resolve import resolve_config
from pdfclust.schemas.user import UserConfig


def test_cli_to_internal_overrides_empty():
    """Test CLI config conversion with no overrides."""
    assert CLIConfig().to_internal_overrides() == {}


def test_cli_to_internal_overrides_with_multiple_fields():
    """Test CLI config conversion with multiple overrides."""
    cli = CLIConfig(base_dir="/out", scheduler="processes", log_level="DEBUG")
    overrides = cli.to_internal_overrides()

    assert overrides["base_dir"] == "/out"
    assert overrides["execution"]["scheduler"] == "processes"
    assert overrides["logging"]["level"] == "DEBUG"


def test_cli_infers_netcdf_source_from_input_dir():
    """CLI sets source=netcdf if input_dir is given without a source."""
    cli = CLIConfig(input_dir="/data/daily")

    assert cli.source == "netcdf"
    overrides = cli.to_internal_overrides()
    assert overrides["source"] == "netcdf"
    assert overrides["dataset"]["input_dir"] == "/data/daily"


def test_cli_explicit_source_is_kept():
    cli = CLIConfig(source="synthetic", input_dir="/data/daily")
    assert cli.source == "synthetic"


def test_cli_rejects_unknown_log_level():
    with pytest.raises(ValidationError):
        CLIConfig(log_level="LOUD")


def test_cli_overrides_do_not_mutate_user():
    user = UserConfig.model_validate({"SCHEDULER": "threads", "BASE_DIR": "/tmp"})
    cli = CLIConfig.model_validate({"scheduler": "synchronous"})

    internal = resolve_config(ParamConfig(), user, cli)

    assert internal.execution.scheduler == "synchronous"
    assert user.scheduler == "threads"


def test_cli_only_overrides_specified_fields():
    user = UserConfig(BASE_DIR="/tmp", NUM_CLUSTERS=6, SOURCE="netcdf", INPUT_DIR="/data/user")
    cli = CLIConfig(input_dir="/data/cli")

    config = resolve_config(ParamConfig(), user, cli)

    assert config.dataset.input_dir == "/data/cli"
    assert config.clustering.num_clusters == 6
    assert config.base_dir == "/tmp"
