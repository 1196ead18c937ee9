"""
crm-sync CLI Exception Hierarchy

Clean exception hierarchy for consistent error handling across the CLI.
"""

from typing import Any, Optional

from crmsync_cli.constants import STAGE_PREFIXES
from crmsync_cli.models.deployment import PipelineStage


class CrmSyncError(Exception):
    """Base exception for all crm-sync errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(CrmSyncError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(CrmSyncError):
    """Raised when environment validation fails."""

    pass


class SalesforceError(CrmSyncError):
    """Raised when Salesforce Platform operations fail."""

    pass


class B2CRequestError(CrmSyncError):
    """
    Raised when a B2C Commerce call outside the deployment pipeline fails.

    Site lookups, cartridge changes, customer and preference updates use
    this instead of a stage error.
    """

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message, context)

    @property
    def headline(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message

    def format_message(self) -> str:
        if self.context:
            return f"{self.headline}\nContext: {self.context}"
        return self.headline


class StageError(CrmSyncError):
    """
    Raised when a deployment pipeline stage fails.

    Carries the stage tag and, when available, the upstream HTTP status and
    response body so the failure can be diagnosed from the command log.
    Only the subclasses below are raised; each one fixes its stage.
    """

    stage: PipelineStage

    def __init__(
        self,
        message: str,
        context: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message, context)

    @property
    def prefix(self) -> str:
        return STAGE_PREFIXES[self.stage.value]

    def format_message(self) -> str:
        text = f"{self.prefix}: {self.message}"
        if self.status_code is not None:
            text += f" (HTTP {self.status_code})"
        if self.context:
            text += f"\nContext: {self.context}"
        return text


class ArtifactNotFoundError(StageError):
    """Raised when the deployment archive does not exist on disk."""

    stage = PipelineStage.LOCATE


class AuthenticationError(StageError):
    """Raised when no access token could be obtained."""

    stage = PipelineStage.AUTHENTICATE


class DeploymentTransportError(StageError):
    """Raised when the archive upload fails."""

    stage = PipelineStage.DEPLOY


class ActivationError(StageError):
    """Raised when the uploaded version cannot be activated."""

    stage = PipelineStage.ACTIVATE


class VerificationError(StageError):
    """Raised when the activated version cannot be read back."""

    stage = PipelineStage.VERIFY
