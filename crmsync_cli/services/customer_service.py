"""
OOBO customer registration

Ensures every customer list behind the verified sites holds the synthetic
order-on-behalf-of customer used by the service agent integration, then
points each site's preferences at that customer.
"""

import re
from typing import Dict, List

from crmsync_cli.exceptions import B2CRequestError, CrmSyncError
from crmsync_cli.models.deployment import AuthToken
from crmsync_cli.models.sites import (
    CustomerProfileResult,
    SitePreferenceResult,
    SiteVerification,
)
from crmsync_cli.services.b2c_client import B2CClient, fault_message, response_payload


def oobo_email(site_id: str, email_domain: str) -> str:
    """Login/email of the OOBO customer for a site."""
    local = re.sub(r"[^a-z0-9]+", "", site_id.lower())
    return f"oobo.{local}@{email_domain}"


def group_by_customer_list(sites: List[SiteVerification]) -> Dict[str, List[str]]:
    """customer_list_id -> site ids sharing it; sites without a list are skipped."""
    groups: Dict[str, List[str]] = {}
    for site in sites:
        if site.customer_list_id:
            groups.setdefault(site.customer_list_id, []).append(site.site_id)
    return groups


class CustomerService:
    def __init__(self, client: B2CClient):
        self.client = client

    def profile(self, site_id: str) -> dict:
        oobo = self.client.settings.oobo
        email = oobo_email(site_id, oobo.email_domain)
        return {
            "customer_no": oobo.customer_no,
            "first_name": oobo.first_name,
            "last_name": oobo.last_name,
            "email": email,
            "login": email,
        }

    async def ensure_oobo_customers(
        self, token: AuthToken, sites: List[SiteVerification]
    ) -> List[CustomerProfileResult]:
        """
        Verify or create the OOBO customer in each customer list.

        Sites sharing a customer list are handled once, using the first
        site's id to derive the profile email.

        Raises:
            CrmSyncError: If a lookup or creation fails with anything but 404
        """
        customer_no = self.client.settings.oobo.customer_no
        results = []

        for list_id, site_ids in group_by_customer_list(sites).items():
            url = self.client.ocapi_url(f"customer_lists/{list_id}/customers/{customer_no}")
            profile = self.profile(site_ids[0])

            try:
                response = await self.client.request(
                    "GET", url, B2CRequestError, token=token, expected=(404,)
                )
                exists = response.status_code != 404
                if not exists:
                    response = await self.client.request(
                        "PUT", url, B2CRequestError, token=token, json=profile
                    )
            except B2CRequestError as e:
                raise CrmSyncError(
                    f"Unable to register the OOBO customer in '{list_id}'",
                    context=fault_message(e.payload) if e.payload else e.message,
                ) from e

            payload = response_payload(response)
            if not isinstance(payload, dict):
                payload = {}
            if exists and payload.get("email"):
                profile["email"] = payload["email"]

            results.append(
                CustomerProfileResult(
                    customer_list_id=list_id,
                    site_ids=site_ids,
                    customer_no=customer_no,
                    email=profile["email"],
                    exists=exists,
                    created=not exists,
                    customer_id=payload.get("customer_id"),
                )
            )

        return results

    async def update_site_preferences(
        self, token: AuthToken, customers: List[CustomerProfileResult]
    ) -> List[SitePreferenceResult]:
        """
        Write the OOBO customer id into the preferences of every site
        sharing the customer's list.

        Failures are recorded per site, not raised.
        """
        oobo = self.client.settings.oobo
        group = f"{oobo.preference_group}/{oobo.preference_instance_type}"
        path = f"site_preferences/preference_groups/{group}"
        results = []

        for customer in customers:
            value = customer.customer_id or customer.customer_no
            for site_id in customer.site_ids:
                status_code, fault = 200, None
                try:
                    response = await self.client.request(
                        "PATCH",
                        self.client.ocapi_url(f"sites/{site_id}/{path}"),
                        B2CRequestError,
                        token=token,
                        json={oobo.customer_id_preference: value},
                    )
                    status_code = response.status_code
                except B2CRequestError as e:
                    status_code = e.status_code or 0
                    fault = e.message
                results.append(
                    SitePreferenceResult(
                        site_id=site_id,
                        preference=oobo.customer_id_preference,
                        value=value,
                        status_code=status_code,
                        fault=fault,
                    )
                )

        return results
