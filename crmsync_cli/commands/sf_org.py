"""crm-sync CLI - Salesforce org commands"""

import click

from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.commands.options import environment_options, output_options
from crmsync_cli.services.salesforce_service import SalesforceService
from crmsync_cli.ui_components import render_table


class OrgDeployCommand(EnvironmentCommand):
    """Push the SFDX source tree with the sf CLI."""

    def execute(self) -> None:
        logger = self.init_logger(self.instance_name, "sf:org:deploy")
        source_dir = self.settings.paths.dx_deploy_path
        self.show_header(
            title="Deploy SFDX source",
            instance=self.environment.b2c_instance_name,
            details={"Source": source_dir},
        )
        if not source_dir.is_dir():
            raise FileNotFoundError(f"SFDX source folder not found: {source_dir}")

        service = SalesforceService(self.settings, self.environment, logger=logger)
        if logger:
            with logger.span("sf.org.deploy"):
                summary = service.deploy_source(source_dir)
        else:
            summary = service.deploy_source(source_dir)

        if self.json_output:
            self.output_json(
                {"status": summary.status, "id": summary.deploy_id, "files": summary.files}
            )
            return

        self.print_table(
            render_table("Deployed Source", ["File"], [[path] for path in summary.files])
        )
        self.console.print()
        self.print_success(f"{summary.status}: {len(summary.files)} file(s) deployed")


class InstanceSetupCommand(EnvironmentCommand):
    """Run the B2C instance setup flow in the Salesforce org."""

    def execute(self) -> None:
        logger = self.init_logger(self.instance_name, "sf:b2cinstance:setup")
        flow = self.settings.salesforce.instance_setup_flow
        self.show_header(
            title="Set up B2C instance in Salesforce",
            instance=self.environment.b2c_instance_name,
            details={"Flow": flow},
        )
        self.require_b2c()
        self.require_sf()

        service = SalesforceService(self.settings, self.environment, logger=logger)
        if logger:
            logger.step(f"Invoking {flow}")
            with logger.span("sf.b2cinstance.setup", flow=flow):
                results = service.b2c_instance_setup()
            logger.success(f"{flow} completed")
        else:
            results = service.b2c_instance_setup()

        if self.json_output:
            self.output_json({"flow": flow, "results": results})
            return

        rows = [
            [result.get("actionName", flow), result.get("isSuccess"), result.get("outputValues")]
            for result in results
            if isinstance(result, dict)
        ]
        self.print_table(render_table("Flow Results", ["Action", "Success", "Output"], rows))
        self.console.print()
        self.print_success(f"{self.environment.b2c_instance_name} registered in Salesforce")


@click.command(name="sf:org:deploy")
@environment_options
@output_options
def org_deploy(overrides, env_file=None, verbose=False, json_output=False):
    """
    Deploy the SFDX source to the Salesforce org

    \b
    Targets SF_SCRATCHORGUSERNAME when set, otherwise SF_USERNAME.
    Requires the sf CLI on PATH.
    """
    cmd = OrgDeployCommand(
        overrides=overrides, env_file=env_file, verbose=verbose, json_output=json_output
    )
    cmd.run()


@click.command(name="sf:b2cinstance:setup")
@environment_options
@output_options
def b2cinstance_setup(overrides, env_file=None, verbose=False, json_output=False):
    """
    Create the B2C instance records in the Salesforce org
    """
    cmd = InstanceSetupCommand(
        overrides=overrides, env_file=env_file, verbose=verbose, json_output=json_output
    )
    cmd.run()
