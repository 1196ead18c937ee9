"""
Site Service

Verifies configured storefronts and manages the integration cartridges on
their cartridge paths.
"""

from typing import Iterable, List, Optional

import httpx

from crmsync_cli.exceptions import B2CRequestError
from crmsync_cli.models.deployment import AuthToken
from crmsync_cli.models.sites import (
    CartridgeOperationResult,
    SiteVerification,
    SiteVerificationReport,
)
from crmsync_cli.services.b2c_client import B2CClient, fault_message, response_payload


class SiteService:
    """OCAPI site lookups and cartridge path changes."""

    def __init__(self, client: B2CClient):
        self.client = client

    async def verify_sites(
        self, token: AuthToken, site_ids: Optional[Iterable[str]] = None
    ) -> SiteVerificationReport:
        """
        Look up every configured site.

        A missing site is reported in the error list rather than raised, so
        one bad site id does not hide the others.

        Raises:
            B2CRequestError: On transport errors or any other non-2xx status
        """
        site_ids = list(site_ids if site_ids is not None else self.client.environment.b2c_site_ids)
        report = SiteVerificationReport()

        for site_id in site_ids:
            response = await self.client.request(
                "GET",
                self.client.ocapi_url(f"sites/{site_id}"),
                B2CRequestError,
                token=token,
                expected=(400, 403, 404),
            )
            payload = response_payload(response)
            verification = SiteVerification.from_api(
                site_id, response.status_code, payload if isinstance(payload, dict) else {}
            )
            if verification.is_success:
                report.success.append(verification)
            else:
                report.error.append(verification)

        return report

    async def _cartridge_call(
        self, method: str, url: str, token: AuthToken, **kwargs
    ) -> httpx.Response:
        try:
            return await self.client.http.request(
                method,
                url,
                headers={"Authorization": token.authorization_header},
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise B2CRequestError(f"{method} {url} failed", context=str(e)) from e

    async def add_cartridges(
        self,
        token: AuthToken,
        sites: List[SiteVerification],
        cartridges: Optional[List[str]] = None,
    ) -> List[CartridgeOperationResult]:
        """Append each integration cartridge to each verified site's path."""
        cartridges = cartridges or self.client.settings.b2c.cartridges
        results = []
        for site in sites:
            for cartridge in cartridges:
                response = await self._cartridge_call(
                    "POST",
                    self.client.ocapi_url(f"sites/{site.site_id}/cartridges"),
                    token,
                    json={"name": cartridge, "position": "last"},
                )
                results.append(self._result(site.site_id, cartridge, "add", response))
        return results

    async def remove_cartridges(
        self,
        token: AuthToken,
        sites: List[SiteVerification],
        cartridges: Optional[List[str]] = None,
    ) -> List[CartridgeOperationResult]:
        """Remove each integration cartridge from each verified site's path."""
        cartridges = cartridges or self.client.settings.b2c.cartridges
        results = []
        for site in sites:
            for cartridge in cartridges:
                response = await self._cartridge_call(
                    "DELETE",
                    self.client.ocapi_url(f"sites/{site.site_id}/cartridges/{cartridge}"),
                    token,
                )
                results.append(self._result(site.site_id, cartridge, "remove", response))
        return results

    @staticmethod
    def _result(
        site_id: str, cartridge: str, operation: str, response: httpx.Response
    ) -> CartridgeOperationResult:
        fault = None
        if not response.is_success:
            fault = fault_message(response_payload(response))
        return CartridgeOperationResult(
            site_id=site_id,
            cartridge=cartridge,
            operation=operation,
            status_code=response.status_code,
            fault=fault,
        )
