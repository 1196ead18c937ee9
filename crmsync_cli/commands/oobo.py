"""crm-sync CLI - OOBO customer command"""

from typing import List, Tuple

import click

from crmsync_cli.base import EnvironmentCommand
from crmsync_cli.commands.options import auth_mode_option, environment_options, output_options
from crmsync_cli.models.sites import CustomerProfileResult, SitePreferenceResult
from crmsync_cli.services.customer_service import CustomerService
from crmsync_cli.services.salesforce_service import SalesforceService
from crmsync_cli.ui_components import render_table


class OOBOCustomersCommand(EnvironmentCommand):
    """
    Register the order-on-behalf-of customer per customer list.

    Verifies or creates the customer, writes its id into each site's
    preferences and stamps it onto the org's B2C site records.
    """

    async def _ensure(self) -> Tuple[List[CustomerProfileResult], List[SitePreferenceResult]]:
        async with self.b2c_client() as client:
            token = await self.authenticate(client)
            sites = await self.verified_sites(client, token)
            service = CustomerService(client)
            customers = await service.ensure_oobo_customers(token, sites)
            preferences = await service.update_site_preferences(token, customers)
            return customers, preferences

    def execute(self) -> None:
        logger = self.init_logger(self.instance_name, "oobo:customers:create")
        self.show_header(
            title="Create OOBO customers",
            instance=self.environment.b2c_instance_name,
            details={"Customer no": self.settings.oobo.customer_no},
        )
        self.require_b2c()
        self.require_sf()

        salesforce = SalesforceService(self.settings, self.environment, logger=logger)
        if logger:
            with logger.span("oobo.customers"):
                customers, preferences = self.run_async(self._ensure())
            logger.step("Updating Salesforce B2C site records")
            with logger.span("oobo.sf_sites"):
                sf_sites = salesforce.update_oobo_sites(customers)
        else:
            customers, preferences = self.run_async(self._ensure())
            sf_sites = salesforce.update_oobo_sites(customers)

        failed = [result for result in preferences if not result.is_success]

        if self.json_output:
            self.output_json(
                {
                    "customers": [
                        {
                            "customer_list": r.customer_list_id,
                            "sites": r.site_ids,
                            "customer_no": r.customer_no,
                            "customer_id": r.customer_id,
                            "email": r.email,
                            "created": r.created,
                        }
                        for r in customers
                    ],
                    "site_preferences": [
                        {"site": r.site_id, "status": r.status_code, "fault": r.fault}
                        for r in preferences
                    ],
                    "sf_sites": sf_sites,
                },
                exit_code=1 if failed else 0,
            )
            return

        self.print_table(
            render_table(
                "OOBO Customers",
                ["Customer List", "Sites", "Customer No", "Email", "Status"],
                [result.to_row() for result in customers],
            )
        )
        self.print_table(
            render_table(
                "Site Preferences",
                ["Site", "Preference", "Value", "Status", "Fault"],
                [result.to_row() for result in preferences],
            )
        )
        self.print_table(
            render_table(
                "Salesforce B2C Sites",
                ["Site", "Record Id", "Updated"],
                [[entry["site"], entry["id"], entry["updated"]] for entry in sf_sites],
            )
        )
        self.console.print()

        missing = [entry["site"] for entry in sf_sites if not entry["updated"]]
        if missing:
            self.print_warning(f"No Salesforce B2C site record for: {', '.join(missing)}")
        if failed:
            self.exit_with_error(f"{len(failed)} site preference update(s) failed")
        created = sum(1 for result in customers if result.created)
        self.print_success(f"{created} created, {len(customers) - created} already present")


@click.command(name="oobo:customers:create")
@auth_mode_option
@environment_options
@output_options
def oobo_customers_create(
    overrides, env_file=None, auth_mode=None, verbose=False, json_output=False
):
    """
    Create the OOBO customer in each site's customer list

    \b
    Customer lists shared by several sites are processed once.
    Existing customers are left untouched. The customer id is then
    written to each site's preferences and to the Salesforce B2C site
    records.
    """
    cmd = OOBOCustomersCommand(
        overrides=overrides,
        env_file=env_file,
        auth_mode=auth_mode,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
