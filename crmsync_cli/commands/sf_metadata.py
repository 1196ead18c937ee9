"""crm-sync CLI - Salesforce metadata generation commands"""

import click

from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.commands.options import auth_mode_option, environment_options, output_options
from crmsync_cli.services.metadata_service import MetadataService
from crmsync_cli.ui_components import render_table


class ConnectedAppsCommand(EnvironmentCommand):
    """One connected app per verified storefront, with fresh credentials."""

    async def _sites(self):
        async with self.b2c_client() as client:
            token = await self.authenticate(client)
            return await self.verified_sites(client, token)

    def execute(self) -> None:
        logger = self.init_logger(self.instance_name, "sf:connectedapps:create")
        self.show_header(
            title="Create connected apps",
            instance=self.environment.b2c_instance_name,
        )
        self.require_b2c()

        sites = self.run_async(self._sites())
        service = MetadataService(self.settings, self.environment)
        if logger:
            logger.step("Rendering connected apps")
            with logger.span("sf.connectedapps", sites=len(sites)):
                credentials = service.create_connected_apps(sites)
            logger.success(f"credentials written to {service.credentials_path()}")
        else:
            credentials = service.create_connected_apps(sites)

        if self.json_output:
            # Secrets stay in the credentials file
            self.output_json(
                {
                    "credentials_file": str(service.credentials_path()),
                    "connected_apps": {c.site_id: c.app_id for c in credentials},
                }
            )
            return

        self.print_table(
            render_table(
                "Connected Apps",
                ["Site", "App", "File"],
                [[c.site_id, c.app_id, c.file_path] for c in credentials],
            )
        )
        self.console.print()
        self.print_success(f"{len(credentials)} connected app(s) generated")
        self.print_dim(f"Credentials: {service.credentials_path()}")


class HostMetadataCommand(EnvironmentCommand):
    """CSP trusted site or remote site setting for the B2C host."""

    KINDS = {
        "trustedsites": ("CSP trusted site", "create_trusted_site"),
        "remotesites": ("Remote site setting", "create_remote_site"),
    }

    def __init__(self, kind: str, **kwargs):
        super().__init__(**kwargs)
        self.kind = kind

    def execute(self) -> None:
        label, method = self.KINDS[self.kind]
        command_name = f"sf:{self.kind}:create"
        logger = self.init_logger(self.instance_name, command_name)
        self.show_header(title=f"Create {label.lower()}", instance=self.environment.b2c_instance_name)
        self.require_b2c()

        service = MetadataService(self.settings, self.environment)
        generated = getattr(service, method)()
        if logger:
            logger.success(f"{label} written to {generated.file_path}")

        if self.json_output:
            self.output_json({"name": generated.name, "file": str(generated.file_path)})
            return

        self.print_table(render_table(label, ["Name", "File"], [generated.to_row()]))
        self.console.print()
        self.print_success(f"{label} generated")


@click.command(name="sf:connectedapps:create")
@auth_mode_option
@environment_options
@output_options
def connectedapps_create(
    overrides, env_file=None, auth_mode=None, verbose=False, json_output=False
):
    """
    Generate a connected app for each verified storefront

    \b
    Consumer keys and secrets are regenerated on every run and saved to
    config-dx/<instance>.connectedAppCredentials.json.
    """
    cmd = ConnectedAppsCommand(
        overrides=overrides,
        env_file=env_file,
        auth_mode=auth_mode,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()


@click.command(name="sf:trustedsites:create")
@environment_options
@output_options
def trustedsites_create(overrides, env_file=None, verbose=False, json_output=False):
    """
    Generate the CSP trusted site for the B2C Commerce host
    """
    cmd = HostMetadataCommand(
        "trustedsites",
        overrides=overrides,
        env_file=env_file,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()


@click.command(name="sf:remotesites:create")
@environment_options
@output_options
def remotesites_create(overrides, env_file=None, verbose=False, json_output=False):
    """
    Generate the remote site setting for the B2C Commerce host
    """
    cmd = HostMetadataCommand(
        "remotesites",
        overrides=overrides,
        env_file=env_file,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
