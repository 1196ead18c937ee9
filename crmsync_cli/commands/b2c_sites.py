"""crm-sync CLI - Site cartridge path commands"""

from typing import List

import click

from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.commands.options import auth_mode_option, environment_options, output_options
from crmsync_cli.models.sites import CartridgeOperationResult
from crmsync_cli.services.site_service import SiteService
from crmsync_cli.ui_components import render_table


class SiteCartridgesCommand(EnvironmentCommand):
    """Add or remove the integration cartridges on every verified site."""

    OPERATIONS = ("add", "remove")

    def __init__(self, operation: str, **kwargs):
        super().__init__(**kwargs)
        if operation not in self.OPERATIONS:
            raise ValueError(f"Unknown cartridge operation: {operation}")
        self.operation = operation

    async def _apply(self) -> List[CartridgeOperationResult]:
        async with self.b2c_client() as client:
            token = await self.authenticate(client)
            sites = await self.verified_sites(client, token)
            service = SiteService(client)
            if self.operation == "add":
                return await service.add_cartridges(token, sites)
            return await service.remove_cartridges(token, sites)

    def execute(self) -> None:
        command_name = f"b2c:sites:cartridges:{self.operation}"
        logger = self.init_logger(self.instance_name, command_name)
        self.show_header(
            title=f"{self.operation.title()} site cartridges",
            instance=self.environment.b2c_instance_name,
            details={"Cartridges": ", ".join(self.settings.b2c.cartridges)},
        )
        self.require_b2c()

        if logger:
            with logger.span(command_name):
                results = self.run_async(self._apply())
        else:
            results = self.run_async(self._apply())

        failed = [result for result in results if not result.is_success]

        if self.json_output:
            self.output_json(
                {
                    "operation": self.operation,
                    "results": [
                        {
                            "site": r.site_id,
                            "cartridge": r.cartridge,
                            "status": r.status_code,
                            "fault": r.fault,
                        }
                        for r in results
                    ],
                },
                exit_code=1 if failed else 0,
            )
            return

        self.print_table(
            render_table(
                "Cartridge Path",
                ["Site", "Cartridge", "Operation", "Status", "Fault"],
                [result.to_row() for result in results],
            )
        )
        self.console.print()
        if failed:
            self.exit_with_error(f"{len(failed)} cartridge operation(s) failed")
        self.print_success(f"{len(results)} cartridge operation(s) applied")


@click.command(name="b2c:sites:cartridges:add")
@auth_mode_option
@environment_options
@output_options
def cartridges_add(overrides, env_file=None, auth_mode=None, verbose=False, json_output=False):
    """
    Append the integration cartridges to each site's cartridge path
    """
    cmd = SiteCartridgesCommand(
        "add",
        overrides=overrides,
        env_file=env_file,
        auth_mode=auth_mode,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()


@click.command(name="b2c:sites:cartridges:remove")
@auth_mode_option
@environment_options
@output_options
def cartridges_remove(overrides, env_file=None, auth_mode=None, verbose=False, json_output=False):
    """
    Remove the integration cartridges from each site's cartridge path
    """
    cmd = SiteCartridgesCommand(
        "remove",
        overrides=overrides,
        env_file=env_file,
        auth_mode=auth_mode,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
