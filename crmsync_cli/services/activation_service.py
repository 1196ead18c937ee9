"""
Activation Service

Makes a deployed archive live: code versions are flagged active, site
data archives are handed to the site-import job.
"""

from crmsync_cli.exceptions import ActivationError
from crmsync_cli.models.deployment import ActivationResponse, AuthToken, DeployResponse
from crmsync_cli.services.b2c_client import B2CClient, response_payload


def require_version(deploy: DeployResponse) -> str:
    """The deploy response must name a version before activation is attempted."""
    version = (deploy.version or "").strip() if deploy else ""
    if not version:
        raise ActivationError(
            "the deploy step did not return a usable version identifier"
        )
    return version


class CodeVersionActivator:
    """PATCH code_versions/{id} with active=true."""

    def __init__(self, client: B2CClient):
        self.client = client

    async def activate(self, token: AuthToken, deploy: DeployResponse) -> ActivationResponse:
        version = require_version(deploy)
        response = await self.client.request(
            "PATCH",
            self.client.ocapi_url(f"code_versions/{version}"),
            ActivationError,
            token=token,
            json={"active": True},
        )
        payload = response_payload(response)
        return ActivationResponse(
            identifier=version, raw=payload if isinstance(payload, dict) else {}
        )


class SiteImportActivator:
    """Starts the site-archive import job for an uploaded data archive."""

    def __init__(self, client: B2CClient):
        self.client = client

    async def activate(self, token: AuthToken, deploy: DeployResponse) -> ActivationResponse:
        archive_name = require_version(deploy)
        job_id = self.client.settings.b2c.site_import_job_id
        response = await self.client.request(
            "POST",
            self.client.ocapi_url(f"jobs/{job_id}/executions"),
            ActivationError,
            token=token,
            json={"file_name": archive_name},
        )
        payload = response_payload(response)
        if not isinstance(payload, dict) or not payload.get("id"):
            raise ActivationError(
                "the import job did not return an execution id",
                status_code=response.status_code,
                payload=payload,
            )
        return ActivationResponse(identifier=str(payload["id"]), raw=payload)
