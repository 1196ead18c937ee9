"""crm-sync CLI - OCAPI configuration command"""

from pathlib import Path
from typing import Tuple

import click

from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.commands.options import environment_options, output_options
from crmsync_cli.constants import ENV_VAR_MAP, ERROR_BAD_ENVIRONMENT
from crmsync_cli.exceptions import ValidationError
from crmsync_cli.models.environment import AuthMode
from crmsync_cli.services.ocapi_service import OCAPIConfigReport, OCAPIConfigService
from crmsync_cli.ui_components import render_table


class OCAPIGetCommand(EnvironmentCommand):
    """Retrieve the instance's OCAPI settings using Business Manager credentials."""

    def __init__(self, **kwargs):
        super().__init__(auth_mode=AuthMode.BM_USER.value, **kwargs)

    async def _fetch(self) -> Tuple[OCAPIConfigReport, Path]:
        async with self.b2c_client() as client:
            token = await self.authenticate(client)
            service = OCAPIConfigService(client)
            report = await service.fetch(token)
            return report, service.write_audit(report)

    def execute(self) -> None:
        logger = self.init_logger(self.instance_name, "b2c:ocapi:get")
        self.show_header(
            title="Retrieve OCAPI configuration",
            instance=self.environment.b2c_instance_name,
            details={"Client id": self.environment.b2c_client_id, "Auth": self.auth_mode.value},
        )
        self.require_b2c()
        missing = self.environment.missing(*AuthMode.BM_USER.required_properties)
        if missing:
            raise ValidationError(
                ERROR_BAD_ENVIRONMENT,
                context=", ".join(ENV_VAR_MAP[name] for name in missing),
            )

        if logger:
            logger.step("Retrieving OCAPI Data and Shop API configuration")
            with logger.span("b2c.ocapi.get"):
                report, audit_path = self.run_async(self._fetch())
            logger.log(f"OCAPI configuration written to {audit_path}")
        else:
            report, audit_path = self.run_async(self._fetch())

        if self.json_output:
            self.output_json({**report.to_dict(), "audit_file": audit_path})
            return

        self.print_table(
            render_table("Global OCAPI Configuration", ["API", "Settings"], report.global_rows())
        )
        site_rows = report.site_rows()
        if site_rows:
            self.print_table(
                render_table("Site OCAPI Configuration", ["Site", "Settings"], site_rows)
            )
        self.console.print()
        self.print_success(f"OCAPI configuration saved to {audit_path}")


@click.command(name="b2c:ocapi:get")
@environment_options
@output_options
def ocapi_get(overrides, env_file=None, verbose=False, json_output=False):
    """
    Retrieve the OCAPI Shop and Data API configuration

    \b
    Authenticates with Business Manager user credentials (B2C_USERNAME,
    B2C_ACCESSKEY) and shows the global and site-specific settings for
    the configured client id. A copy is written to the dx config folder.
    """
    cmd = OCAPIGetCommand(
        overrides=overrides,
        env_file=env_file,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
