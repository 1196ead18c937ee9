"""
crm-sync CLI Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .results import (
    ValidationResult,
    ExecutionResult,
    Ok,
    Err,
)
from .environment import (
    AuthMode,
    EnvironmentDefinition,
)
from .deployment import (
    ArtifactScope,
    ArtifactReference,
    AuthToken,
    DeployResponse,
    ActivationResponse,
    VersionSummary,
    JobExecutionSummary,
    DeploymentResult,
    DeploymentResultBuilder,
    PipelineStage,
    PipelineState,
)
from .sites import (
    SiteVerification,
    SiteVerificationReport,
    CartridgeOperationResult,
    CustomerProfileResult,
    SitePreferenceResult,
    ConnectedAppCredential,
    GeneratedMetadata,
    ArchiveSummary,
)

__all__ = [
    # Results
    "ValidationResult",
    "ExecutionResult",
    "Ok",
    "Err",
    # Environment
    "AuthMode",
    "EnvironmentDefinition",
    # Deployment
    "ArtifactScope",
    "ArtifactReference",
    "AuthToken",
    "DeployResponse",
    "ActivationResponse",
    "VersionSummary",
    "JobExecutionSummary",
    "DeploymentResult",
    "DeploymentResultBuilder",
    "PipelineStage",
    "PipelineState",
    # Sites
    "SiteVerification",
    "SiteVerificationReport",
    "CartridgeOperationResult",
    "CustomerProfileResult",
    "SitePreferenceResult",
    "ConnectedAppCredential",
    "GeneratedMetadata",
    "ArchiveSummary",
]
