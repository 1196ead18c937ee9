"""crm-sync CLI - Instance verification command"""

from typing import Optional, Tuple

import click

from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.commands.options import auth_mode_option, environment_options, output_options
from crmsync_cli.constants import ERROR_NO_VERIFIED_SITES
from crmsync_cli.exceptions import VerificationError
from crmsync_cli.models.deployment import VersionSummary
from crmsync_cli.models.sites import SiteVerificationReport
from crmsync_cli.services.site_service import SiteService
from crmsync_cli.services.verification_service import CodeVersionVerifier, find_version
from crmsync_cli.ui_components import render_table


class VerifyCommand(EnvironmentCommand):
    """Check credentials, configured sites and (optionally) the code version."""

    async def _verify(
        self,
    ) -> Tuple[SiteVerificationReport, Optional[VersionSummary], Optional[str]]:
        async with self.b2c_client() as client:
            token = await self.authenticate(client)
            report = await SiteService(client).verify_sites(token)

            version, listing_error = None, None
            if self.environment.b2c_code_version:
                try:
                    versions = await CodeVersionVerifier(client).list_versions(token)
                except VerificationError as e:
                    listing_error = e.message
                    if e.status_code is not None:
                        listing_error += f" (HTTP {e.status_code})"
                    if self.logger:
                        self.logger.warning(f"code versions could not be listed: {listing_error}")
                else:
                    version = find_version(versions, self.environment.b2c_code_version)
            return report, version, listing_error

    def execute(self) -> None:
        logger = self.init_logger(self.instance_name, "b2c:verify")
        self.show_header(
            title="Verify B2C Commerce configuration",
            instance=self.environment.b2c_instance_name,
            details={"Sites": ", ".join(self.environment.b2c_site_ids)},
        )
        self.require_b2c()

        if logger:
            logger.step("Verifying credentials and sites")
            with logger.span("b2c.verify"):
                report, version, listing_error = self.run_async(self._verify())
        else:
            report, version, listing_error = self.run_async(self._verify())

        if self.json_output:
            self.output_json(
                {
                    "sites": {
                        "success": [site.site_id for site in report.success],
                        "error": {site.site_id: site.fault for site in report.error},
                    },
                    "code_version": version.to_dict() if version else None,
                    "code_version_error": listing_error,
                },
                exit_code=0 if report.success else 1,
            )
            return

        rows = [site.to_row() for site in report.success]
        rows += [[site.site_id, site.status_code, "", site.fault] for site in report.error]
        self.print_table(
            render_table("Sites", ["Site", "Status", "Customer List", "Cartridges / Fault"], rows)
        )

        if version:
            self.print_table(
                render_table(
                    "Code Version",
                    [name.replace("_", " ").title() for name in VersionSummary.FIELDS],
                    [version.to_row()],
                )
            )
        elif listing_error:
            self.print_warning(f"Code versions could not be listed: {listing_error}")
        elif self.environment.b2c_code_version:
            self.print_warning(
                f"Code version '{self.environment.b2c_code_version}' is not deployed yet"
            )

        self.console.print()
        if not report.success:
            self.exit_with_error(ERROR_NO_VERIFIED_SITES)
        if report.has_errors:
            self.print_warning(f"{len(report.error)} site(s) could not be verified")
        self.print_success(f"{len(report.success)} site(s) verified")


@click.command(name="b2c:verify")
@auth_mode_option
@environment_options
@output_options
def b2c_verify(overrides, env_file=None, auth_mode=None, verbose=False, json_output=False):
    """
    Verify B2C Commerce credentials, sites and code version

    \b
    Authenticates, looks up every configured site id and reports the
    state of the configured code version.
    """
    cmd = VerifyCommand(
        overrides=overrides,
        env_file=env_file,
        auth_mode=auth_mode,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
