"""Tests for site verification, cartridge paths and OOBO customers."""

import pytest

from conftest import OCAPI
from crmsync_cli.exceptions import B2CRequestError, CrmSyncError
from crmsync_cli.models.deployment import AuthToken
from crmsync_cli.models.sites import CustomerProfileResult, SiteVerification
from crmsync_cli.services.b2c_client import B2CClient
from crmsync_cli.services.customer_service import CustomerService, oobo_email
from crmsync_cli.services.site_service import SiteService

TOKEN = AuthToken(access_token="tok123")


def site_body(site_id, customer_list):
    return {
        "_type": "site",
        "id": site_id,
        "cartridges": "app_storefront_base",
        "customer_list_link": {"customer_list_id": customer_list},
    }


class TestSiteService:
    @pytest.mark.asyncio
    async def test_sites_are_split_into_success_and_error(
        self, fake_instance, settings, environment
    ):
        fake_instance.add("GET", f"{OCAPI}/sites/RefArch", json_body=site_body("RefArch", "RefArch"))

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            report = await SiteService(client).verify_sites(TOKEN)

        assert [site.site_id for site in report.success] == ["RefArch"]
        assert report.success[0].customer_list_id == "RefArch"
        assert [site.site_id for site in report.error] == ["RefArchGlobal"]
        assert report.error[0].status_code == 404
        assert report.has_errors

    @pytest.mark.asyncio
    async def test_cartridges_added_to_every_site(self, fake_instance, settings, environment):
        for site_id in ("RefArch", "RefArchGlobal"):
            fake_instance.add("POST", f"{OCAPI}/sites/{site_id}/cartridges", json_body={})
        sites = [SiteVerification("RefArch", 200), SiteVerification("RefArchGlobal", 200)]

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            results = await SiteService(client).add_cartridges(TOKEN, sites)

        assert len(results) == 4
        assert all(result.is_success for result in results)
        assert fake_instance.body(0) == {"name": "int_b2ccrmsync", "position": "last"}
        assert fake_instance.body(1) == {"name": "plugin_b2ccrmsync", "position": "last"}

    @pytest.mark.asyncio
    async def test_cartridge_removal_reports_faults(self, fake_instance, settings, environment):
        fake_instance.add("DELETE", f"{OCAPI}/sites/RefArch/cartridges/int_b2ccrmsync", status=204)

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            results = await SiteService(client).remove_cartridges(
                TOKEN, [SiteVerification("RefArch", 200)]
            )

        assert [r.is_success for r in results] == [True, False]
        assert results[1].fault.startswith("No route")

    @pytest.mark.asyncio
    async def test_server_error_on_site_lookup_raises_request_error(
        self, fake_instance, settings, environment
    ):
        fake_instance.add(
            "GET", f"{OCAPI}/sites/RefArch", status=500, json_body={"fault": {"message": "boom"}}
        )

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            with pytest.raises(B2CRequestError) as exc_info:
                await SiteService(client).verify_sites(TOKEN)

        assert exc_info.value.status_code == 500
        assert exc_info.value.headline == "boom (HTTP 500)"
        assert not hasattr(exc_info.value, "stage")


class TestCustomerService:
    @pytest.mark.asyncio
    async def test_shared_customer_list_is_processed_once(
        self, fake_instance, settings, environment
    ):
        url = f"{OCAPI}/customer_lists/RefArch/customers/9999999"
        fake_instance.add("GET", url, status=404, json_body={"fault": {"message": "not found"}})
        fake_instance.add("PUT", url, json_body={"customer_no": "9999999", "customer_id": "abOOBO"})
        sites = [
            SiteVerification("RefArch", 200, customer_list_id="RefArch"),
            SiteVerification("RefArchGlobal", 200, customer_list_id="RefArch"),
        ]

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            results = await CustomerService(client).ensure_oobo_customers(TOKEN, sites)

        assert fake_instance.calls() == [f"GET {url}", f"PUT {url}"]
        assert len(results) == 1
        assert results[0].created
        assert results[0].site_ids == ["RefArch", "RefArchGlobal"]
        assert results[0].customer_id == "abOOBO"
        profile = fake_instance.body(1)
        assert profile["last_name"] == "Anonymous"
        assert profile["email"] == "oobo.refarch@b2ccrmsync.example.com"

    @pytest.mark.asyncio
    async def test_existing_customer_is_left_alone(self, fake_instance, settings, environment):
        url = f"{OCAPI}/customer_lists/RefArch/customers/9999999"
        fake_instance.add("GET", url, json_body={"customer_no": "9999999", "email": "x@y.com"})

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            results = await CustomerService(client).ensure_oobo_customers(
                TOKEN, [SiteVerification("RefArch", 200, customer_list_id="RefArch")]
            )

        assert fake_instance.calls("PUT") == []
        assert results[0].exists
        assert results[0].email == "x@y.com"

    @pytest.mark.asyncio
    async def test_lookup_failure_raises(self, fake_instance, settings, environment):
        url = f"{OCAPI}/customer_lists/RefArch/customers/9999999"
        fake_instance.add("GET", url, status=403, json_body={"fault": {"message": "forbidden"}})

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            with pytest.raises(CrmSyncError) as exc_info:
                await CustomerService(client).ensure_oobo_customers(
                    TOKEN, [SiteVerification("RefArch", 200, customer_list_id="RefArch")]
                )

        assert exc_info.value.context == "forbidden"

    def test_email_is_derived_from_site_id(self):
        assert oobo_email("Ref-Arch_Global", "example.com") == "oobo.refarchglobal@example.com"

    @pytest.mark.asyncio
    async def test_site_preferences_receive_the_customer_id(
        self, fake_instance, settings, environment
    ):
        prefs = "site_preferences/preference_groups/B2CCRMSync/sandbox"
        fake_instance.add("PATCH", f"{OCAPI}/sites/RefArch/{prefs}", json_body={})
        customer = CustomerProfileResult(
            customer_list_id="RefArch",
            site_ids=["RefArch", "RefArchGlobal"],
            customer_no="9999999",
            email="oobo.refarch@b2ccrmsync.example.com",
            exists=False,
            created=True,
            customer_id="abOOBO",
        )

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            results = await CustomerService(client).update_site_preferences(TOKEN, [customer])

        assert fake_instance.calls() == [
            f"PATCH {OCAPI}/sites/RefArch/{prefs}",
            f"PATCH {OCAPI}/sites/RefArchGlobal/{prefs}",
        ]
        assert fake_instance.body(0) == {"c_b2ccrm_syncCustomersOOBOCustomerId": "abOOBO"}
        assert [r.is_success for r in results] == [True, False]
        assert results[1].status_code == 404
        assert results[1].fault.startswith("No route")

    @pytest.mark.asyncio
    async def test_site_preferences_fall_back_to_customer_no(
        self, fake_instance, settings, environment
    ):
        prefs = "site_preferences/preference_groups/B2CCRMSync/sandbox"
        fake_instance.add("PATCH", f"{OCAPI}/sites/RefArch/{prefs}", json_body={})
        customer = CustomerProfileResult(
            customer_list_id="RefArch",
            site_ids=["RefArch"],
            customer_no="9999999",
            email="x@y.com",
            exists=True,
        )

        async with B2CClient(environment, settings, transport=fake_instance.transport) as client:
            results = await CustomerService(client).update_site_preferences(TOKEN, [customer])

        assert results[0].value == "9999999"
        assert fake_instance.body(0) == {"c_b2ccrm_syncCustomersOOBOCustomerId": "9999999"}
