"""
Archive Service

Locates deployment archives by naming convention and builds them from
local cartridge code or site metadata.
"""

import zipfile
from pathlib import Path
from typing import Optional

from crmsync_cli.config.settings import Settings
from crmsync_cli.exceptions import ArtifactNotFoundError, ValidationError
from crmsync_cli.models.deployment import ArtifactReference, ArtifactScope
from crmsync_cli.models.environment import EnvironmentDefinition
from crmsync_cli.models.sites import ArchiveSummary


class ArchiveLocator:
    """
    Resolves <deploy_root>/<scope>/<path_element>/<instance>-<label>.zip.

    The path is derived deterministically from the environment and the
    configured naming conventions; nothing is created here.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def archive_name(self, environment: EnvironmentDefinition, scope: ArtifactScope) -> str:
        label = self.settings.paths.label_for(scope)
        return f"{environment.b2c_instance_name}-{label}.zip"

    def archive_path(
        self,
        environment: EnvironmentDefinition,
        scope: ArtifactScope,
        path_element: Optional[str] = None,
    ) -> Path:
        path_element = path_element or self.settings.paths.path_element_for(scope)
        directory = self.settings.paths.deploy_root / scope.value / path_element
        return directory / self.archive_name(environment, scope)

    def locate(
        self,
        environment: EnvironmentDefinition,
        scope: ArtifactScope,
        path_element: Optional[str] = None,
    ) -> ArtifactReference:
        """
        Resolve and verify the archive.

        Raises:
            ArtifactNotFoundError: If the instance name is unset or the file is absent
        """
        if not environment.b2c_instance_name:
            raise ArtifactNotFoundError(
                "B2C instance name is not set; cannot derive the archive name"
            )

        path_element = path_element or self.settings.paths.path_element_for(scope)
        resolved = self.archive_path(environment, scope, path_element)
        if not resolved.is_file():
            raise ArtifactNotFoundError(
                f"archive not found at {resolved}",
                context=f"Run: crm-sync b2c:{scope.value}:zip",
            )

        return ArtifactReference(scope=scope, path_element=path_element, resolved_path=resolved)


class ArchiveBuilder:
    """Zips local sources into the locator's conventional path."""

    def __init__(self, settings: Settings, locator: Optional[ArchiveLocator] = None):
        self.settings = settings
        self.locator = locator or ArchiveLocator(settings)

    def build(self, environment: EnvironmentDefinition, scope: ArtifactScope) -> ArchiveSummary:
        """
        Build the archive for a scope.

        Code archives nest every cartridge under a folder named after the
        code version (the platform unzips that folder as the version); data
        archives nest the metadata under a folder named after the archive.

        Raises:
            ValidationError: If the instance name or code version is missing
            ArtifactNotFoundError: If the source folder does not exist
        """
        if not environment.b2c_instance_name:
            raise ValidationError("B2C instance name is required to name the archive")

        if scope is ArtifactScope.CODE:
            if not environment.b2c_code_version:
                raise ValidationError("B2C code version is required to build a code archive")
            source = self.settings.paths.code_source
            archive_path = self.locator.archive_path(environment, scope)
            root_folder = environment.b2c_code_version
        else:
            source = self.settings.paths.data_source
            archive_path = self.locator.archive_path(environment, scope)
            root_folder = archive_path.stem

        if not source.is_dir():
            raise ArtifactNotFoundError(f"source folder not found at {source}")

        archive_path.parent.mkdir(parents=True, exist_ok=True)
        file_count = 0
        with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED) as archive:
            for path in sorted(source.rglob("*")):
                if not path.is_file() or path.name.startswith("."):
                    continue
                arcname = Path(root_folder) / path.relative_to(source)
                archive.write(path, arcname.as_posix())
                file_count += 1

        return ArchiveSummary(
            archive_name=archive_path.name,
            archive_path=archive_path,
            file_count=file_count,
            size_bytes=archive_path.stat().st_size,
        )
