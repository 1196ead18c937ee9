"""
Environment resolution

Merges .env values, the process environment and CLI flags into one
EnvironmentDefinition, and validates the connection properties each
platform needs.
"""

import os
import re
from pathlib import Path
from typing import Dict, Mapping, Optional

from crmsync_cli.constants import (
    B2C_REQUIRED_PROPERTIES,
    ENV_VAR_MAP,
    SF_REQUIRED_PROPERTIES,
)
from crmsync_cli.models.environment import EnvironmentDefinition
from crmsync_cli.models.results import ValidationResult
from crmsync_cli.utils import find_env_file, load_env_file

HOST_NAME_PATTERN = re.compile(r"^[A-Za-z0-9.-]+$")
CODE_VERSION_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def parse_site_ids(value: Optional[str]) -> tuple[str, ...]:
    """Split a comma-separated site id list, dropping blanks."""
    if not value:
        return ()
    return tuple(site.strip() for site in value.split(",") if site.strip())


def resolve_environment(
    overrides: Optional[Mapping[str, Optional[str]]] = None,
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EnvironmentDefinition:
    """
    Build the invocation's EnvironmentDefinition.

    Precedence (lowest to highest): .env file, process environment, CLI flags.

    Args:
        overrides: CLI flag values keyed by EnvironmentDefinition field name
        env_file: .env file to read (auto-detected when omitted)
        environ: Process environment (os.environ when omitted)

    Returns:
        Frozen EnvironmentDefinition
    """
    env_file = env_file or find_env_file()
    environ = os.environ if environ is None else environ
    file_values = load_env_file(env_file)

    values: Dict[str, Optional[str]] = {}
    for field_name, var_name in ENV_VAR_MAP.items():
        value = file_values.get(var_name)
        if environ.get(var_name):
            value = environ[var_name]
        if overrides and overrides.get(field_name):
            value = overrides[field_name]
        values[field_name] = value.strip() if isinstance(value, str) else value

    site_ids = parse_site_ids(values.pop("b2c_site_ids"))
    return EnvironmentDefinition(b2c_site_ids=site_ids, **values)


def validate_b2c_connection(
    environment: EnvironmentDefinition, require_code_version: bool = False
) -> ValidationResult:
    """Check the properties needed to talk to a B2C Commerce instance."""
    result = ValidationResult(is_valid=True)
    required = list(B2C_REQUIRED_PROPERTIES)
    if require_code_version:
        required.append("b2c_code_version")

    for name in environment.missing(*required):
        result.add_error(f"Missing required property: {ENV_VAR_MAP[name]}")

    host = environment.b2c_host_name
    if host and not HOST_NAME_PATTERN.match(host):
        result.add_error(
            f"{ENV_VAR_MAP['b2c_host_name']} must be a bare host name (no scheme or path): {host}"
        )

    version = environment.b2c_code_version
    if version and not CODE_VERSION_PATTERN.match(version):
        result.add_error(f"{ENV_VAR_MAP['b2c_code_version']} contains invalid characters: {version}")

    if not environment.b2c_username or not environment.b2c_access_key:
        result.add_warning("Business Manager credentials not set; bm-user authentication unavailable")

    return result


def validate_sf_connection(environment: EnvironmentDefinition) -> ValidationResult:
    """Check the properties needed to log into the Salesforce org."""
    result = ValidationResult(is_valid=True)
    for name in environment.missing(*SF_REQUIRED_PROPERTIES):
        result.add_error(f"Missing required property: {ENV_VAR_MAP[name]}")

    login_url = environment.sf_login_url
    if login_url and not login_url.startswith("https://"):
        result.add_error(f"{ENV_VAR_MAP['sf_login_url']} must be an https URL: {login_url}")

    return result
