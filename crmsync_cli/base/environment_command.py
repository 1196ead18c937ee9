"""
Environment Command Base Class

Base class for commands that talk to a B2C Commerce instance or its
Salesforce org. Resolves the environment and settings once per invocation.
"""

import asyncio
from pathlib import Path
from typing import Any, Coroutine, Dict, List, Optional

import httpx

from crmsync_cli.config import (
    load_settings,
    resolve_environment,
    validate_b2c_connection,
    validate_sf_connection,
)
from crmsync_cli.config.settings import Settings
from crmsync_cli.constants import ERROR_BAD_ENVIRONMENT, ERROR_NO_VERIFIED_SITES
from crmsync_cli.exceptions import CrmSyncError, ValidationError
from crmsync_cli.models.deployment import AuthToken
from crmsync_cli.models.environment import AuthMode, EnvironmentDefinition
from crmsync_cli.models.results import ValidationResult
from crmsync_cli.models.sites import SiteVerification
from crmsync_cli.services.auth_service import Authenticator
from crmsync_cli.services.b2c_client import B2CClient
from crmsync_cli.services.site_service import SiteService
from crmsync_cli.utils import print_validation_errors

from .base_command import BaseCommand


class EnvironmentCommand(BaseCommand):
    """
    Base class for environment-bound commands.

    Provides:
    - EnvironmentDefinition from .env, process environment and CLI flags
    - Validated Settings
    - B2C client construction and authentication
    """

    # Replaced in tests with an httpx.MockTransport
    transport: Optional[httpx.AsyncBaseTransport] = None

    def __init__(
        self,
        overrides: Optional[Dict[str, Optional[str]]] = None,
        env_file: Optional[Path] = None,
        auth_mode: str = AuthMode.CLIENT_CREDENTIALS.value,
        verbose: bool = False,
        json_output: bool = False,
    ):
        super().__init__(verbose=verbose, json_output=json_output)
        self.overrides = overrides or {}
        self.env_file = env_file
        self.auth_mode = AuthMode(auth_mode)
        self._environment: Optional[EnvironmentDefinition] = None
        self._settings: Optional[Settings] = None

    @property
    def environment(self) -> EnvironmentDefinition:
        if self._environment is None:
            self._environment = resolve_environment(self.overrides, env_file=self.env_file)
        return self._environment

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = load_settings(self.project_root)
        return self._settings

    @property
    def instance_name(self) -> str:
        return self.environment.b2c_instance_name or "global"

    def _check(self, result: ValidationResult) -> None:
        if not self.json_output:
            print_validation_errors(result, self.console)
        if self.logger:
            for warning in result.warnings:
                self.logger.log(warning, "WARNING")
        if result.has_errors:
            raise ValidationError(ERROR_BAD_ENVIRONMENT, context="; ".join(result.errors))

    def require_b2c(self, require_code_version: bool = False) -> None:
        """
        Raises:
            ValidationError: If B2C Commerce connection properties are invalid
        """
        self._check(validate_b2c_connection(self.environment, require_code_version))

    def require_sf(self) -> None:
        """
        Raises:
            ValidationError: If Salesforce connection properties are invalid
        """
        self._check(validate_sf_connection(self.environment))

    def b2c_client(self) -> B2CClient:
        return B2CClient(self.environment, self.settings, transport=self.transport)

    async def authenticate(self, client: B2CClient) -> AuthToken:
        return await Authenticator(client, self.auth_mode).authenticate()

    def run_async(self, coroutine: Coroutine[Any, Any, Any]) -> Any:
        """Drive one coroutine to completion on a fresh event loop."""
        return asyncio.run(coroutine)

    async def verified_sites(self, client: B2CClient, token: AuthToken) -> List[SiteVerification]:
        """
        Sites that answered 200; failures are logged as warnings.

        Raises:
            CrmSyncError: If no configured site could be verified
        """
        report = await SiteService(client).verify_sites(token)
        for site in report.error:
            message = f"site '{site.site_id}' skipped (HTTP {site.status_code}: {site.fault})"
            if self.logger:
                self.logger.warning(message)
            else:
                self.print_warning(message)
        if not report.success:
            raise CrmSyncError(ERROR_NO_VERIFIED_SITES)
        return report.success
