"""Configuration resolution.

resolve_config() is the only way runtime code obtains an InternalConfig:
the three layers are validated, turned into nested dicts and merged
(CLI over user file over expert defaults).
"""

from typing import Optional, Type, TypeVar, Union

from pydantic import BaseModel

from pdfclust.schemas.param import ParamConfig
from pdfclust.schemas.user import UserConfig
from pdfclust.schemas.cli import CLIConfig
from pdfclust.schemas.internal import InternalConfig

ModelT = TypeVar("ModelT", bound=BaseModel)


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Merge nested dicts, later arguments winning.

    Sub-dicts present on both sides are merged key by key; any other value
    is replaced. ``base`` is not modified.

    Examples
    --------
    >>> deep_merge({"binning": {"num_bins": 10}, "source": "synthetic"},
    ...            {"binning": {"num_bins": 20}})
    {'binning': {'num_bins': 20}, 'source': 'synthetic'}
    """
    merged = dict(base)
    for override in overrides:
        for key, value in override.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = deep_merge(current, value)
            else:
                merged[key] = value
    return merged


def _as_model(cfg: Union[dict, BaseModel, None], model_cls: Type[ModelT]) -> ModelT:
    """Validate a config layer given as a model, a dict or nothing."""
    if isinstance(cfg, model_cls):
        return cfg
    if not cfg:
        return model_cls()
    return model_cls.model_validate(cfg)


def resolve_config(
    param_cfg: Union[dict, ParamConfig],
    user_cfg: Optional[Union[dict, UserConfig]] = None,
    cli_cfg: Optional[Union[dict, CLIConfig]] = None,
) -> InternalConfig:
    """Build the frozen runtime configuration.

    Parameters
    ----------
    param_cfg : dict or ParamConfig
        Expert defaults; must be complete.
    user_cfg : dict or UserConfig, optional
        Overrides from the user's CONFIG file.
    cli_cfg : dict or CLIConfig, optional
        Command-line overrides (highest priority).

    Returns
    -------
    InternalConfig

    Raises
    ------
    pydantic.ValidationError
        If any layer, or the merged result, is invalid.

    Examples
    --------
    >>> config = resolve_config(ParamConfig(), UserConfig(NUM_BINS=20))
    >>> config.binning.num_bins, config.total_num_days
    (20, 4)
    """
    if isinstance(param_cfg, ParamConfig):
        param = param_cfg
    else:
        param = ParamConfig.model_validate(param_cfg)
    user = _as_model(user_cfg, UserConfig)
    cli = _as_model(cli_cfg, CLIConfig)

    merged = deep_merge(
        param.model_dump(by_alias=True),  # 'global', not 'global_'
        user.to_internal_overrides(),
        cli.to_internal_overrides(),
    )
    return InternalConfig.model_validate(merged)
