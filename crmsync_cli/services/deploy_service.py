"""
Deploy Service

Uploads a located archive to the instance's WebDAV repository.
"""

from crmsync_cli.exceptions import DeploymentTransportError
from crmsync_cli.models.deployment import (
    ArtifactReference,
    ArtifactScope,
    AuthToken,
    DeployResponse,
)
from crmsync_cli.services.b2c_client import B2CClient


class Deployer:
    """
    Uploads an archive with a single WebDAV PUT.

    Code archives are additionally unzipped server-side (which creates the
    code version) and the uploaded zip is removed.
    """

    def __init__(self, client: B2CClient):
        self.client = client

    async def deploy(self, artifact: ArtifactReference, token: AuthToken) -> DeployResponse:
        url = self.client.webdav_url(artifact.scope, artifact.archive_name)

        try:
            content = artifact.resolved_path.read_bytes()
        except OSError as e:
            raise DeploymentTransportError(
                f"cannot read {artifact.resolved_path}", context=str(e)
            ) from e

        await self.client.request(
            "PUT",
            url,
            DeploymentTransportError,
            token=token,
            content=content,
            headers={"Content-Type": "application/zip"},
        )

        if artifact.scope is ArtifactScope.CODE:
            await self.client.request(
                "POST",
                url,
                DeploymentTransportError,
                token=token,
                data={"method": "UNZIP"},
            )
            await self.client.request(
                "DELETE", url, DeploymentTransportError, token=token, expected=(404,)
            )
            version = self.client.environment.b2c_code_version
        else:
            version = artifact.archive_name

        return DeployResponse(version=version, archive_name=artifact.archive_name, web_dav_url=url)
