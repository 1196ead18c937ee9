"""
Deployment Pipeline

Sequences locate -> authenticate -> deploy -> activate -> verify for one
archive, stopping at the first failed stage.
"""

import inspect
from typing import Any, Callable, List, Optional

from crmsync_cli.config.settings import Settings
from crmsync_cli.constants import STAGE_LABELS
from crmsync_cli.exceptions import StageError
from crmsync_cli.logger import DeployLogger
from crmsync_cli.models.deployment import (
    STAGE_STATES,
    ArtifactScope,
    DeploymentResult,
    DeploymentResultBuilder,
    PipelineStage,
    PipelineState,
)
from crmsync_cli.models.environment import AuthMode, EnvironmentDefinition
from crmsync_cli.models.results import Err, Ok, Outcome
from crmsync_cli.services.activation_service import CodeVersionActivator, SiteImportActivator
from crmsync_cli.services.archive_service import ArchiveLocator
from crmsync_cli.services.auth_service import Authenticator
from crmsync_cli.services.b2c_client import B2CClient
from crmsync_cli.services.deploy_service import Deployer
from crmsync_cli.services.verification_service import CodeVersionVerifier, SiteImportVerifier


class DeploymentPipeline:
    """
    Single-use orchestrator for one deployment.

    States advance strictly in order; a StageError moves the pipeline to
    FAILED and nothing after the failed stage runs. Remote side effects of
    earlier stages are left in place (an uploaded but inactive archive
    stays on the instance).
    """

    def __init__(
        self,
        locator: ArchiveLocator,
        authenticator: Authenticator,
        deployer: Deployer,
        activator: Any,
        verifier: Any,
        logger: Optional[DeployLogger] = None,
    ):
        self.locator = locator
        self.authenticator = authenticator
        self.deployer = deployer
        self.activator = activator
        self.verifier = verifier
        self.logger = logger

        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = [PipelineState.IDLE]
        self.current_stage: Optional[PipelineStage] = None
        self.failed_stage: Optional[PipelineStage] = None

    def _transition(self, state: PipelineState) -> None:
        self.state = state
        self.history.append(state)

    async def _run_stage(self, stage: PipelineStage, action: Callable[[], Any]) -> Any:
        self.current_stage = stage
        self._transition(STAGE_STATES[stage])

        if self.logger is None:
            result = action()
            return await result if inspect.isawaitable(result) else result

        self.logger.step(STAGE_LABELS[stage.value])
        with self.logger.span(f"stage.{stage.value}"):
            result = action()
            if inspect.isawaitable(result):
                result = await result
        self.logger.success(f"{stage.value} complete")
        return result

    async def run(
        self,
        environment: EnvironmentDefinition,
        scope: ArtifactScope,
        path_element: Optional[str] = None,
    ) -> Outcome[DeploymentResult]:
        """
        Execute every stage in order.

        Returns:
            Ok(DeploymentResult) when all stages succeed, otherwise
            Err(StageError) for the first failing stage
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError("DeploymentPipeline instances are single-use")

        builder = DeploymentResultBuilder()
        try:
            artifact = await self._run_stage(
                PipelineStage.LOCATE,
                lambda: self.locator.locate(environment, scope, path_element),
            )
            builder = builder.with_artifact(artifact)

            token = await self._run_stage(
                PipelineStage.AUTHENTICATE, self.authenticator.authenticate
            )
            builder = builder.with_auth_token(token)

            deploy = await self._run_stage(
                PipelineStage.DEPLOY, lambda: self.deployer.deploy(artifact, token)
            )
            builder = builder.with_deploy(deploy)

            activation = await self._run_stage(
                PipelineStage.ACTIVATE, lambda: self.activator.activate(token, deploy)
            )
            builder = builder.with_activation(activation)

            summary = await self._run_stage(
                PipelineStage.VERIFY, lambda: self.verifier.verify(token, activation)
            )
            builder = builder.with_summary(summary)
        except StageError as e:
            self.failed_stage = self.current_stage
            self._transition(PipelineState.FAILED)
            return Err(e)

        self._transition(PipelineState.DONE)
        return Ok(builder.build())


def build_pipeline(
    client: B2CClient,
    settings: Settings,
    scope: ArtifactScope,
    auth_mode: AuthMode = AuthMode.CLIENT_CREDENTIALS,
    logger: Optional[DeployLogger] = None,
) -> DeploymentPipeline:
    """Wire the stage collaborators for a code or data deployment."""
    if scope is ArtifactScope.CODE:
        activator = CodeVersionActivator(client)
        verifier = CodeVersionVerifier(client)
    else:
        activator = SiteImportActivator(client)
        verifier = SiteImportVerifier(client)

    return DeploymentPipeline(
        locator=ArchiveLocator(settings),
        authenticator=Authenticator(client, auth_mode),
        deployer=Deployer(client),
        activator=activator,
        verifier=verifier,
        logger=logger,
    )
