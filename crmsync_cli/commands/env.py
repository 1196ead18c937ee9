"""crm-sync CLI - Environment inspection command"""

import click

from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.commands.options import environment_options, output_options
from crmsync_cli.config import validate_b2c_connection, validate_sf_connection
from crmsync_cli.constants import ENV_VAR_MAP
from crmsync_cli.ui_components import render_table
from crmsync_cli.utils import mask_value


class EnvListCommand(EnvironmentCommand):
    """Show the resolved environment definition (masked)."""

    def __init__(self, no_mask: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.no_mask = no_mask

    def _display_values(self) -> dict:
        values = {}
        for field, value in self.environment.to_dict().items():
            var_name = ENV_VAR_MAP[field]
            values[var_name] = value if self.no_mask else mask_value(var_name, value)
        return values

    def execute(self) -> None:
        """Execute env:list command."""
        values = self._display_values()
        b2c = validate_b2c_connection(self.environment)
        sf = validate_sf_connection(self.environment)

        if self.json_output:
            self.output_json(
                {
                    "variables": values,
                    "masked": not self.no_mask,
                    "b2c": {"valid": b2c.is_valid, "errors": b2c.errors, "warnings": b2c.warnings},
                    "sf": {"valid": sf.is_valid, "errors": sf.errors},
                }
            )
            return

        self.show_header(
            title="Environment",
            instance=self.environment.b2c_instance_name,
            details={"Masked": "No" if self.no_mask else "Yes"},
        )

        rows = [[key, value or "[dim]not set[/dim]"] for key, value in values.items()]
        self.print_table(render_table("Environment Definition", ["Variable", "Value"], rows))

        self.console.print()
        for label, result in (("B2C Commerce", b2c), ("Salesforce", sf)):
            if result.is_valid:
                self.print_success(f"{label} connection properties are complete")
            else:
                self.print_error(f"{label}: {'; '.join(result.errors)}")
        for warning in b2c.warnings:
            self.print_warning(warning)


@click.command(name="env:list")
@click.option("--no-mask", is_flag=True, help="Show full values")
@environment_options
@output_options
def env_list(overrides, env_file=None, no_mask=False, verbose=False, json_output=False):
    """
    Show the resolved environment definition

    \b
    Values come from .env, then the process environment, then CLI flags
    (later sources win). Secrets are masked unless --no-mask is given.

    \b
    Examples:
      crm-sync env:list
      crm-sync env:list --b2c-instance zzzz_007 --json
    """
    cmd = EnvListCommand(
        no_mask=no_mask,
        overrides=overrides,
        env_file=env_file,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
