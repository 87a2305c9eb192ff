"""Pydantic configuration schemas for the pdfclust pipeline.

All configuration validation, coercion, and normalization happens at
schema validation time via Pydantic.

Exports
-------
resolve_config : function
    Single entrypoint for configuration resolution
InternalConfig : class
    Fully validated, authoritative runtime configuration
ParamConfig : class
    Expert defaults (complete)
UserConfig : class
    User-facing configuration (forgiving, minimal)
CLIConfig : class
    Command-line operational overrides
"""

from pdfclust.schemas.resolve import resolve_config
from pdfclust.schemas.internal import InternalConfig
from pdfclust.schemas.param import ParamConfig
from pdfclust.schemas.user import UserConfig
from pdfclust.schemas.cli import CLIConfig

__all__ = [
    'resolve_config',
    'InternalConfig',
    'ParamConfig',
    'UserConfig',
    'CLIConfig',
]
