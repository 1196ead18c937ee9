"""Shared click options for environment-bound commands."""

import functools
from pathlib import Path

import click

from crmsync_cli.constants import ENV_VAR_MAP
from crmsync_cli.models.environment import AuthMode

# (flag, field, help)
ENVIRONMENT_FLAGS = [
    ("--b2c-hostname", "b2c_host_name", "B2C Commerce host name"),
    ("--b2c-instance", "b2c_instance_name", "B2C Commerce instance name"),
    ("--b2c-client-id", "b2c_client_id", "Account Manager client id"),
    ("--b2c-client-secret", "b2c_client_secret", "Account Manager client secret"),
    ("--b2c-username", "b2c_username", "Business Manager user"),
    ("--b2c-access-key", "b2c_access_key", "Business Manager access key"),
    ("--b2c-code-version", "b2c_code_version", "Code version to deploy"),
    ("--b2c-site-ids", "b2c_site_ids", "Comma-separated storefront site ids"),
    ("--sf-hostname", "sf_host_name", "Salesforce org host name"),
    ("--sf-login-url", "sf_login_url", "Salesforce login URL"),
    ("--sf-username", "sf_username", "Salesforce user"),
    ("--sf-password", "sf_password", "Salesforce password"),
    ("--sf-security-token", "sf_security_token", "Salesforce security token"),
    ("--sf-scratch-org-username", "sf_scratch_org_username", "Scratch org alias or user"),
]


def environment_options(func):
    """
    Add the environment override flags plus --env-file.

    The flag values are gathered into a single ``overrides`` keyword
    argument keyed by EnvironmentDefinition field name.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        overrides = {field: kwargs.pop(field, None) for field in ENV_VAR_MAP}
        return func(*args, overrides=overrides, **kwargs)

    for flag, field, help_text in reversed(ENVIRONMENT_FLAGS):
        wrapper = click.option(
            flag, field, default=None, help=f"{help_text} (overrides {ENV_VAR_MAP[field]})"
        )(wrapper)

    return click.option(
        "--env-file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="Path to the .env file (default: ./.env)",
    )(wrapper)


auth_mode_option = click.option(
    "--auth-mode",
    type=click.Choice([mode.value for mode in AuthMode]),
    default=AuthMode.CLIENT_CREDENTIALS.value,
    show_default=True,
    help="B2C Commerce authentication mode",
)


def output_options(func):
    """--verbose/-v and --json."""
    func = click.option("--json", "json_output", is_flag=True, help="Output in JSON format")(func)
    return click.option("--verbose", "-v", is_flag=True, help="Show all command output")(func)
