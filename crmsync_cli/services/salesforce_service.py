"""
Salesforce Platform Service

REST access through simple_salesforce and SFDX source deployment through
the sf CLI.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from simple_salesforce import Salesforce
from simple_salesforce.exceptions import SalesforceError as SimpleSalesforceError
from simple_salesforce.exceptions import SalesforceAuthenticationFailed

from crmsync_cli.config.settings import Settings
from crmsync_cli.exceptions import SalesforceError
from crmsync_cli.logger import DeployLogger, run_with_progress
from crmsync_cli.models.environment import EnvironmentDefinition
from crmsync_cli.models.sites import CustomerProfileResult


def soql_quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


@dataclass
class SourceDeploySummary:
    """Parsed `sf project deploy start --json` output."""

    status: str
    deploy_id: Optional[str] = None
    files: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @classmethod
    def from_output(cls, stdout: str, returncode: int) -> "SourceDeploySummary":
        try:
            data = json.loads(stdout or "{}")
        except ValueError:
            data = {}
        result = data.get("result", data) if isinstance(data, dict) else {}

        status = result.get("status") or ("Succeeded" if returncode == 0 else "Failed")
        deploy_id = result.get("id") or result.get("deployId")

        deployed = result.get("files") or result.get("deployedSource") or []
        if isinstance(deployed, dict):
            deployed = [deployed]

        files, failures = [], []
        for entry in deployed:
            path = entry.get("filePath") or entry.get("fullName") or "?"
            if entry.get("state") == "Failed" or entry.get("error"):
                failures.append(f"{path}: {entry.get('error', 'failed')}")
            elif path not in files:
                files.append(path)

        if returncode != 0 and not failures and isinstance(data, dict) and data.get("message"):
            failures.append(data["message"])

        return cls(status=status, deploy_id=deploy_id, files=files, failures=failures)


class SalesforceService:
    """Operations against the Salesforce org paired with a B2C instance."""

    def __init__(
        self,
        settings: Settings,
        environment: EnvironmentDefinition,
        logger: Optional[DeployLogger] = None,
    ):
        self.settings = settings
        self.environment = environment
        self.logger = logger
        self._sf: Optional[Salesforce] = None

    def connect(self) -> Salesforce:
        """
        Log into the org (once per service instance).

        Raises:
            SalesforceError: If authentication fails
        """
        if self._sf is not None:
            return self._sf

        env = self.environment
        try:
            self._sf = Salesforce(
                username=env.sf_username,
                password=env.sf_password,
                security_token=env.sf_security_token,
                domain=env.sf_domain,
                version=self.settings.salesforce.api_version,
            )
        except SalesforceAuthenticationFailed as e:
            raise SalesforceError(
                f"Unable to log into Salesforce as {env.sf_username}",
                context=str(e),
            ) from e
        return self._sf

    def b2c_instance_setup(self) -> List[Dict[str, Any]]:
        """
        Invoke the instance setup flow for the current B2C instance.

        Returns:
            Flow action results as returned by the REST API
        """
        sf = self.connect()
        flow = self.settings.salesforce.instance_setup_flow
        body = {
            "inputs": [
                {
                    "instanceName": self.environment.b2c_instance_name,
                    "BypassAuthTokenAuditing": True,
                }
            ]
        }
        try:
            results = sf.restful(f"actions/custom/flow/{flow}", method="POST", json=body)
        except SimpleSalesforceError as e:
            raise SalesforceError(f"The {flow} flow could not be invoked", context=str(e)) from e

        results = results if isinstance(results, list) else [results]
        failures = [r for r in results if isinstance(r, dict) and not r.get("isSuccess", True)]
        if failures:
            messages = "; ".join(
                error.get("message", "unknown error")
                for failure in failures
                for error in (failure.get("errors") or [{}])
            )
            raise SalesforceError(f"The {flow} flow reported a failure", context=messages)
        return results

    def update_oobo_sites(self, customers: List[CustomerProfileResult]) -> List[Dict[str, Any]]:
        """
        Stamp the OOBO customer onto the org's B2C site records.

        Returns:
            One {"site", "id", "updated"} entry per site id; sites without a
            record in the org come back with id None

        Raises:
            SalesforceError: If the query or an update is rejected
        """
        site_customers = {
            site_id: customer for customer in customers for site_id in customer.site_ids
        }
        if not site_customers:
            return []

        sf = self.connect()
        config = self.settings.salesforce
        names = ", ".join(soql_quote(site_id) for site_id in site_customers)
        soql = f"SELECT Id, Name FROM {config.site_object} WHERE Name IN ({names})"

        results = []
        try:
            records = sf.query_all(soql).get("records", [])
            record_ids = {record["Name"]: record["Id"] for record in records}
            site_object = getattr(sf, config.site_object)
            for site_id, customer in site_customers.items():
                record_id = record_ids.get(site_id)
                if record_id:
                    site_object.update(
                        record_id,
                        {
                            config.site_oobo_customer_id_field: customer.customer_id,
                            config.site_oobo_customer_no_field: customer.customer_no,
                        },
                    )
                results.append({"site": site_id, "id": record_id, "updated": record_id is not None})
        except SimpleSalesforceError as e:
            raise SalesforceError("Unable to update the B2C site records", context=str(e)) from e
        return results

    def deploy_source(self, source_dir: Optional[Path] = None) -> SourceDeploySummary:
        """
        Push SFDX source to the target org with the sf CLI.

        Raises:
            SalesforceError: If the sf CLI exits non-zero
        """
        source_dir = source_dir or self.settings.paths.dx_deploy_path
        command = [
            self.settings.salesforce.sf_executable,
            "project",
            "deploy",
            "start",
            "--source-dir",
            str(source_dir),
            "--json",
        ]
        target_org = self.environment.sf_scratch_org_username or self.environment.sf_username
        if target_org:
            command.extend(["--target-org", target_org])

        try:
            result = run_with_progress(self.logger, command, "Deploying SFDX source")
        except FileNotFoundError as e:
            raise SalesforceError(
                f"'{self.settings.salesforce.sf_executable}' executable not found",
                context="Install the Salesforce CLI and make sure it is on PATH",
            ) from e

        summary = SourceDeploySummary.from_output(result.stdout, result.returncode)
        if not result.is_success:
            raise SalesforceError(
                f"sf project deploy failed ({summary.status})",
                context="; ".join(summary.failures) or result.stderr.strip() or None,
            )
        return summary
