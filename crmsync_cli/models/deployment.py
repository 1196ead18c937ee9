"""
Deployment Pipeline Models

Dataclass models for artifacts, tokens, stage responses and the
accumulated deployment result.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class ArtifactScope(Enum):
    """Kind of archive being deployed."""

    CODE = "code"
    DATA = "data"


class PipelineStage(Enum):
    """Discrete steps of the deployment pipeline."""

    LOCATE = "locate"
    AUTHENTICATE = "authenticate"
    DEPLOY = "deploy"
    ACTIVATE = "activate"
    VERIFY = "verify"


class PipelineState(Enum):
    """Orchestrator states; FAILED is absorbing."""

    IDLE = "idle"
    LOCATING = "locating"
    AUTHENTICATING = "authenticating"
    DEPLOYING = "deploying"
    ACTIVATING = "activating"
    VERIFYING = "verifying"
    DONE = "done"
    FAILED = "failed"


# State entered when a stage starts
STAGE_STATES = {
    PipelineStage.LOCATE: PipelineState.LOCATING,
    PipelineStage.AUTHENTICATE: PipelineState.AUTHENTICATING,
    PipelineStage.DEPLOY: PipelineState.DEPLOYING,
    PipelineStage.ACTIVATE: PipelineState.ACTIVATING,
    PipelineStage.VERIFY: PipelineState.VERIFYING,
}


@dataclass(frozen=True)
class ArtifactReference:
    """A located archive on local storage."""

    scope: ArtifactScope
    path_element: str
    resolved_path: Path

    @property
    def archive_name(self) -> str:
        return self.resolved_path.name


@dataclass(frozen=True)
class AuthToken:
    """Short-lived bearer credential; never cached across invocations."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "AuthToken":
        """Create from an OAuth token response body."""
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type", "Bearer"),
            expires_in=data.get("expires_in"),
        )

    def __repr__(self) -> str:
        return f"AuthToken(token_type={self.token_type}, expires_in={self.expires_in})"


@dataclass(frozen=True)
class DeployResponse:
    """Result of uploading an archive."""

    version: Optional[str]
    archive_name: str
    web_dav_url: str


@dataclass(frozen=True)
class ActivationResponse:
    """Result of activating a deployed version or starting its import."""

    identifier: str
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class VersionSummary:
    """Allow-listed view of a remote code version."""

    id: str
    active: bool
    last_modification_time: Optional[str] = None
    compatibility_mode: Optional[str] = None
    web_dav_url: Optional[str] = None

    FIELDS = (
        "id",
        "active",
        "last_modification_time",
        "compatibility_mode",
        "web_dav_url",
    )

    @classmethod
    def from_api(cls, record: Dict[str, Any]) -> "VersionSummary":
        """Project a code_versions record; every other field is dropped."""
        return cls(
            id=record["id"],
            active=bool(record.get("active", False)),
            last_modification_time=record.get("last_modification_time"),
            compatibility_mode=record.get("compatibility_mode"),
            web_dav_url=record.get("web_dav_url"),
        )

    def to_row(self) -> List[Any]:
        return [getattr(self, name) for name in self.FIELDS]

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.FIELDS}


@dataclass(frozen=True)
class JobExecutionSummary:
    """Allow-listed view of a site-import job execution."""

    id: str
    job_id: Optional[str] = None
    execution_status: Optional[str] = None
    exit_status: Optional[str] = None
    start_time: Optional[str] = None

    FIELDS = ("id", "job_id", "execution_status", "exit_status", "start_time")

    @classmethod
    def from_api(cls, record: Dict[str, Any]) -> "JobExecutionSummary":
        exit_status = record.get("exit_status") or {}
        return cls(
            id=str(record["id"]),
            job_id=record.get("job_id"),
            execution_status=record.get("execution_status"),
            exit_status=exit_status.get("code"),
            start_time=record.get("start_time"),
        )

    def to_row(self) -> List[Any]:
        return [getattr(self, name) for name in self.FIELDS]

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.FIELDS}


Summary = Union[VersionSummary, JobExecutionSummary]


@dataclass(frozen=True)
class DeploymentResult:
    """Frozen record of a completed pipeline run."""

    artifact: ArtifactReference
    auth_token: AuthToken
    deploy: DeployResponse
    activation: ActivationResponse
    summary: Summary

    @property
    def output_display(self) -> Dict[str, Any]:
        """Human-facing subset of the run."""
        return self.summary.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "archive": str(self.artifact.resolved_path),
            "scope": self.artifact.scope.value,
            "version": self.deploy.version,
            "activation": self.activation.identifier,
            "summary": self.output_display,
        }


@dataclass(frozen=True)
class DeploymentResultBuilder:
    """
    Immutable builder for DeploymentResult.

    Every ``with_*`` call returns a new builder; ``build()`` refuses to
    produce a result until all stages have contributed.
    """

    artifact: Optional[ArtifactReference] = None
    auth_token: Optional[AuthToken] = None
    deploy: Optional[DeployResponse] = None
    activation: Optional[ActivationResponse] = None
    summary: Optional[Summary] = None

    def with_artifact(self, artifact: ArtifactReference) -> "DeploymentResultBuilder":
        return replace(self, artifact=artifact)

    def with_auth_token(self, token: AuthToken) -> "DeploymentResultBuilder":
        return replace(self, auth_token=token)

    def with_deploy(self, deploy: DeployResponse) -> "DeploymentResultBuilder":
        return replace(self, deploy=deploy)

    def with_activation(
        self, activation: ActivationResponse
    ) -> "DeploymentResultBuilder":
        return replace(self, activation=activation)

    def with_summary(self, summary: Summary) -> "DeploymentResultBuilder":
        return replace(self, summary=summary)

    @property
    def missing(self) -> List[str]:
        return [
            name
            for name in ("artifact", "auth_token", "deploy", "activation", "summary")
            if getattr(self, name) is None
        ]

    def build(self) -> DeploymentResult:
        if self.missing:
            raise ValueError(
                f"Deployment result is incomplete; missing: {', '.join(self.missing)}"
            )
        return DeploymentResult(
            artifact=self.artifact,
            auth_token=self.auth_token,
            deploy=self.deploy,
            activation=self.activation,
            summary=self.summary,
        )
