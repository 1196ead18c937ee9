"""
Salesforce metadata generation

Renders connected apps, CSP trusted sites and remote site settings for a
B2C Commerce instance into the SFDX source tree.
"""

import json
import re
import secrets
from pathlib import Path
from typing import Dict, List

from jinja2 import Template

from crmsync_cli.config.settings import Settings
from crmsync_cli.constants import (
    CONSUMER_KEY_LENGTH,
    CONSUMER_SECRET_LENGTH,
    CREDENTIAL_ALPHABET,
)
from crmsync_cli.exceptions import ConfigurationError
from crmsync_cli.models.environment import EnvironmentDefinition
from crmsync_cli.models.sites import ConnectedAppCredential, GeneratedMetadata, SiteVerification

META_EXTENSION = "-meta.xml"


def generate_secret(length: int) -> str:
    """Random URL-safe identifier of the given length."""
    return "".join(secrets.choice(CREDENTIAL_ALPHABET) for _ in range(length))


def clean_site_id(site_id: str) -> str:
    """Connected app names allow letters, digits and single underscores."""
    cleaned = re.sub(r"[^A-Za-z0-9]+", "_", site_id).strip("_")
    return cleaned or "site"


class MetadataService:
    """Writes rendered metadata files below the configured deploy path."""

    def __init__(self, settings: Settings, environment: EnvironmentDefinition):
        self.settings = settings
        self.environment = environment

    def _load_template(self, folder: str, metadata_type: str) -> Template:
        """
        Load a Jinja2 template file.

        Raises:
            ConfigurationError: If the template does not exist
        """
        path = (
            self.settings.paths.template_root
            / folder
            / f"template.{metadata_type}{META_EXTENSION}.j2"
        )
        if not path.exists():
            raise ConfigurationError(f"Metadata template not found: {path}")

        with open(path, "r") as f:
            return Template(f.read())

    def _write(self, folder: str, file_name: str, content: str) -> Path:
        target_dir = self.settings.paths.dx_deploy_path / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        file_path = target_dir / file_name
        file_path.write_text(content)
        return file_path

    def _base_context(self) -> Dict[str, str]:
        return {
            "instance_name": self.environment.b2c_instance_name,
            "host_name": self.environment.b2c_host_name,
        }

    def create_connected_apps(self, sites: List[SiteVerification]) -> List[ConnectedAppCredential]:
        """
        Render one connected app per verified site and persist the generated
        credentials to the dx config directory.

        Consumer keys and secrets are new on every call; re-running replaces
        the previous files and credentials.
        """
        template = self._load_template("connectedApps", "connectedApp")
        sf = self.settings.salesforce
        instance = self.environment.b2c_instance_name
        credentials: List[ConnectedAppCredential] = []

        for site in sites:
            if not site.is_success:
                continue
            app_id = f"{instance}_{clean_site_id(site.site_id)}_{sf.perm_set_name}"
            consumer_key = generate_secret(CONSUMER_KEY_LENGTH)
            consumer_secret = generate_secret(CONSUMER_SECRET_LENGTH)

            content = template.render(
                app_id=app_id,
                site_id=site.site_id,
                consumer_key=consumer_key,
                consumer_secret=consumer_secret,
                perm_set_name=sf.perm_set_name,
                contact_email=self.environment.sf_username or "",
                **self._base_context(),
            )
            file_path = self._write(
                "connectedApps", f"{app_id}.connectedApp{META_EXTENSION}", content
            )
            credentials.append(
                ConnectedAppCredential(
                    site_id=site.site_id,
                    app_id=app_id,
                    consumer_key=consumer_key,
                    consumer_secret=consumer_secret,
                    file_path=file_path,
                )
            )

        self.write_credentials(credentials)
        return credentials

    def credentials_path(self) -> Path:
        file_name = f"{self.environment.b2c_instance_name}.{self.settings.salesforce.connected_app_file_name}"
        return self.settings.paths.dx_config / file_name

    def write_credentials(self, credentials: List[ConnectedAppCredential]) -> Path:
        document = {
            "siteIds": [credential.site_id for credential in credentials],
            "credentials": {credential.site_id: credential.to_dict() for credential in credentials},
        }
        path = self.credentials_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(document, f, indent=2)
        return path

    def create_trusted_site(self) -> GeneratedMetadata:
        """CSP trusted site for the B2C Commerce host."""
        template = self._load_template("cspTrustedSites", "cspTrustedSite")
        name = f"{self.environment.b2c_instance_name}_B2C"
        file_path = self._write(
            "cspTrustedSites",
            f"{name}.cspTrustedSite{META_EXTENSION}",
            template.render(**self._base_context()),
        )
        return GeneratedMetadata(name=name, file_path=file_path)

    def create_remote_site(self) -> GeneratedMetadata:
        """Remote site setting for the B2C Commerce host."""
        template = self._load_template("remoteSiteSettings", "remoteSite")
        name = f"{self.environment.b2c_instance_name}_B2C"
        file_path = self._write(
            "remoteSiteSettings",
            f"{name}.remoteSite{META_EXTENSION}",
            template.render(**self._base_context()),
        )
        return GeneratedMetadata(name=name, file_path=file_path)
