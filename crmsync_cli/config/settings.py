"""
Settings loader

Packaged defaults.yaml, deep-merged with an optional project crm-sync.yml,
validated once into a typed Settings object.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from crmsync_cli.constants import PROJECT_CONFIG_FILE
from crmsync_cli.exceptions import ConfigurationError
from crmsync_cli.models.deployment import ArtifactScope

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"
PACKAGED_TEMPLATES = Path(__file__).parent.parent / "templates"


class StrictModel(BaseModel):
    """Rejects keys that are not part of the schema."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class B2CSettings(StrictModel):
    ocapi_version: str
    account_manager_url: str
    webdav_code_path: str
    webdav_impex_path: str
    site_import_job_id: str
    ocapi_config_path: str
    request_timeout: Optional[float] = None
    cartridges: List[str] = Field(default_factory=list)


class PathSettings(StrictModel):
    deploy_root: Path
    code_path_element: str
    data_path_element: str
    labels: Dict[str, str]
    code_source: Path
    data_source: Path
    dx_deploy_path: Path
    dx_config: Path
    templates: Optional[Path] = None

    def label_for(self, scope: ArtifactScope) -> str:
        return self.labels.get(scope.value, scope.value)

    def path_element_for(self, scope: ArtifactScope) -> str:
        if scope is ArtifactScope.CODE:
            return self.code_path_element
        return self.data_path_element

    @property
    def template_root(self) -> Path:
        return self.templates or PACKAGED_TEMPLATES


class SalesforceSettings(StrictModel):
    api_version: str
    instance_setup_flow: str
    perm_set_name: str
    connected_app_file_name: str
    site_object: str
    site_oobo_customer_id_field: str
    site_oobo_customer_no_field: str
    sf_executable: str = "sf"


class OOBOSettings(StrictModel):
    customer_no: str
    last_name: str
    first_name: str
    email_domain: str
    preference_group: str
    preference_instance_type: str
    customer_id_preference: str


class Settings(StrictModel):
    """Complete, validated crm-sync configuration."""

    version_no: str
    b2c: B2CSettings
    paths: PathSettings
    salesforce: SalesforceSettings
    oobo: OOBOSettings

    def resolve_paths(self, project_root: Path) -> "Settings":
        """Anchor relative output/input paths at the project root."""
        paths = self.paths
        anchored = {
            name: project_root / getattr(paths, name)
            for name in ("deploy_root", "code_source", "data_source", "dx_deploy_path", "dx_config")
            if not getattr(paths, name).is_absolute()
        }
        return self.model_copy(update={"paths": paths.model_copy(update=anchored)})


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}", context=str(e))
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {path}")
    return data


def load_settings(project_root: Optional[Path] = None) -> Settings:
    """
    Load and validate settings.

    Args:
        project_root: Directory searched for crm-sync.yml and used to anchor
            relative paths (defaults to the current working directory)

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If a file is unreadable or fails schema validation
    """
    project_root = project_root or Path.cwd()
    raw = _load_yaml(DEFAULTS_PATH)

    override_path = project_root / PROJECT_CONFIG_FILE
    if override_path.exists():
        raw = deep_merge(raw, _load_yaml(override_path))

    try:
        settings = Settings.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigurationError("Invalid crm-sync configuration", context=str(e))

    return settings.resolve_paths(project_root)
