"""crm-sync CLI - Deployment pipeline commands"""

from typing import Optional

import click

from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.commands.options import auth_mode_option, environment_options, output_options
from crmsync_cli.constants import SUCCESS_CODE_DEPLOYED, SUCCESS_DATA_DEPLOYED
from crmsync_cli.models.deployment import ArtifactScope
from crmsync_cli.models.results import Outcome
from crmsync_cli.services.pipeline import build_pipeline
from crmsync_cli.ui_components import render_table


class DeployCommand(EnvironmentCommand):
    """
    Run locate -> authenticate -> deploy -> activate -> verify for one archive.

    Nothing is rolled back when a stage fails; the failed stage is reported
    and the command exits 1.
    """

    def __init__(self, scope: ArtifactScope, path_element: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.scope = scope
        self.path_element = path_element

    async def _deploy(self) -> Outcome:
        async with self.b2c_client() as client:
            pipeline = build_pipeline(
                client, self.settings, self.scope, self.auth_mode, logger=self.logger
            )
            return await pipeline.run(self.environment, self.scope, self.path_element)

    def execute(self) -> None:
        command_name = f"b2c:{self.scope.value}:deploy"
        logger = self.init_logger(self.instance_name, command_name)

        self.show_header(
            title=f"Deploy {self.scope.value} archive",
            instance=self.environment.b2c_instance_name,
            details={"Auth": self.auth_mode.value},
        )
        self.require_b2c(require_code_version=self.scope is ArtifactScope.CODE)

        if logger:
            with logger.span(command_name, instance=self.instance_name):
                outcome = self.run_async(self._deploy())
        else:
            outcome = self.run_async(self._deploy())

        # Err re-raises its StageError; BaseCommand.run reports the failed stage
        result = outcome.unwrap()

        if self.json_output:
            self.output_json(result.to_dict())
            return

        summary = result.summary
        self.print_table(
            render_table(
                "Deployment",
                [name.replace("_", " ").title() for name in summary.FIELDS],
                [summary.to_row()],
            )
        )
        self.console.print()
        self.print_success(
            SUCCESS_CODE_DEPLOYED if self.scope is ArtifactScope.CODE else SUCCESS_DATA_DEPLOYED
        )
        if logger:
            self.print_dim(f"Logs saved to: {logger.log_path}")


@click.command(name="b2c:code:deploy")
@click.option("--path-element", default=None, help="Archive sub-folder (default: cartridges)")
@auth_mode_option
@environment_options
@output_options
def code_deploy(
    overrides, env_file=None, path_element=None, auth_mode=None, verbose=False, json_output=False
):
    """
    Deploy and activate the code archive

    \b
    Steps:
      1. Locate _dist/code/cartridges/<instance>-code.zip
      2. Authenticate
      3. Upload and unzip via WebDAV
      4. Activate the code version
      5. Read the version back

    \b
    Run b2c:code:zip first.
    """
    cmd = DeployCommand(
        ArtifactScope.CODE,
        path_element=path_element,
        overrides=overrides,
        env_file=env_file,
        auth_mode=auth_mode,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()


@click.command(name="b2c:data:deploy")
@click.option("--path-element", default=None, help="Archive sub-folder (default: meta)")
@auth_mode_option
@environment_options
@output_options
def data_deploy(
    overrides, env_file=None, path_element=None, auth_mode=None, verbose=False, json_output=False
):
    """
    Deploy and import the site data archive

    \b
    Steps:
      1. Locate _dist/data/meta/<instance>-data.zip
      2. Authenticate
      3. Upload to the Impex folder
      4. Start the site-archive import job
      5. Read the job execution back
    """
    cmd = DeployCommand(
        ArtifactScope.DATA,
        path_element=path_element,
        overrides=overrides,
        env_file=env_file,
        auth_mode=auth_mode,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
