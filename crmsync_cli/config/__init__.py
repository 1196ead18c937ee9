"""Configuration: typed settings and environment resolution."""

from .settings import Settings, load_settings, deep_merge
from .environment import (
    resolve_environment,
    validate_b2c_connection,
    validate_sf_connection,
    parse_site_ids,
)

__all__ = [
    "Settings",
    "load_settings",
    "deep_merge",
    "resolve_environment",
    "validate_b2c_connection",
    "validate_sf_connection",
    "parse_site_ids",
]
