"""crm-sync CLI - Archive build commands"""

import click

from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.commands.options import environment_options, output_options
from crmsync_cli.models.deployment import ArtifactScope
from crmsync_cli.services.archive_service import ArchiveBuilder
from crmsync_cli.ui_components import render_table


class ZipCommand(EnvironmentCommand):
    """Build the code or data archive for the configured instance."""

    def __init__(self, scope: ArtifactScope, **kwargs):
        super().__init__(**kwargs)
        self.scope = scope

    def execute(self) -> None:
        command_name = f"b2c:{self.scope.value}:zip"
        logger = self.init_logger(self.instance_name, command_name)

        self.show_header(
            title=f"Build {self.scope.value} archive",
            instance=self.environment.b2c_instance_name,
            details={"Code version": self.environment.b2c_code_version}
            if self.scope is ArtifactScope.CODE
            else None,
        )

        builder = ArchiveBuilder(self.settings)
        if logger:
            logger.step("Zipping sources")
            with logger.span("archive.build", scope=self.scope.value):
                summary = builder.build(self.environment, self.scope)
            logger.success(f"{summary.file_count} files added")
        else:
            summary = builder.build(self.environment, self.scope)

        if self.json_output:
            self.output_json(
                {
                    "archive": summary.archive_name,
                    "path": str(summary.archive_path),
                    "files": summary.file_count,
                    "bytes": summary.size_bytes,
                }
            )
            return

        self.print_table(
            render_table("Archive", ["Name", "Path", "Files", "Bytes"], [summary.to_row()])
        )
        self.console.print()
        self.print_success(f"{summary.archive_name} created")


@click.command(name="b2c:code:zip")
@environment_options
@output_options
def code_zip(overrides, env_file=None, verbose=False, json_output=False):
    """
    Zip the integration cartridges for deployment

    \b
    The archive nests every cartridge under the configured code version
    and is written to _dist/code/cartridges/<instance>-code.zip.
    """
    cmd = ZipCommand(
        ArtifactScope.CODE,
        overrides=overrides,
        env_file=env_file,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()


@click.command(name="b2c:data:zip")
@environment_options
@output_options
def data_zip(overrides, env_file=None, verbose=False, json_output=False):
    """
    Zip the site metadata for import

    \b
    Written to _dist/data/meta/<instance>-data.zip.
    """
    cmd = ZipCommand(
        ArtifactScope.DATA,
        overrides=overrides,
        env_file=env_file,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
