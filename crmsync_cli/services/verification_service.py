"""
Verification Service

Reads back the state of an activated version and projects it into an
allow-listed summary.
"""

from typing import Any, Dict, List, Optional

from crmsync_cli.exceptions import VerificationError
from crmsync_cli.models.deployment import (
    ActivationResponse,
    AuthToken,
    JobExecutionSummary,
    VersionSummary,
)
from crmsync_cli.services.b2c_client import B2CClient, response_payload


def find_version(versions: List[Dict[str, Any]], version_id: str) -> Optional[VersionSummary]:
    """Summary of version_id in a code_versions listing, or None if absent."""
    for record in versions:
        if record.get("id") == version_id:
            return VersionSummary.from_api(record)
    return None


class CodeVersionVerifier:
    """Finds the activated version in the code_versions listing."""

    def __init__(self, client: B2CClient):
        self.client = client

    async def list_versions(self, token: AuthToken) -> List[Dict[str, Any]]:
        response = await self.client.request(
            "GET", self.client.ocapi_url("code_versions"), VerificationError, token=token
        )
        payload = response_payload(response)
        if not isinstance(payload, dict) or not isinstance(payload.get("data", []), list):
            raise VerificationError(
                "unexpected code_versions response", payload=payload
            )
        return payload.get("data", [])

    async def verify_version(self, token: AuthToken, version_id: str) -> VersionSummary:
        """
        Summarise one code version.

        Raises:
            VerificationError: If the listing fails or the version is absent
        """
        summary = find_version(await self.list_versions(token), version_id)
        if summary is not None:
            return summary
        raise VerificationError(
            f"code version '{version_id}' was not found on the instance"
        )

    async def verify(self, token: AuthToken, activation: ActivationResponse) -> VersionSummary:
        return await self.verify_version(token, activation.identifier)


class SiteImportVerifier:
    """Reads the import job execution started by SiteImportActivator."""

    def __init__(self, client: B2CClient):
        self.client = client

    async def verify(self, token: AuthToken, activation: ActivationResponse) -> JobExecutionSummary:
        job_id = self.client.settings.b2c.site_import_job_id
        response = await self.client.request(
            "GET",
            self.client.ocapi_url(f"jobs/{job_id}/executions/{activation.identifier}"),
            VerificationError,
            token=token,
        )
        payload = response_payload(response)
        if not isinstance(payload, dict) or payload.get("id") is None:
            raise VerificationError(
                f"job execution '{activation.identifier}' was not found", payload=payload
            )
        return JobExecutionSummary.from_api(payload)
