"""
OCAPI Configuration Service

Reads the Shop and Data API settings the instance holds for the configured
client id, globally and per site.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from crmsync_cli.constants import OCAPI_CONFIG_AUDIT_FILE
from crmsync_cli.exceptions import B2CRequestError
from crmsync_cli.models.deployment import AuthToken
from crmsync_cli.services.b2c_client import B2CClient, response_payload

API_TYPES = ("data", "shop")


def short_site_id(site_id: str) -> str:
    """'Sites-RefArch-Site' -> 'RefArch'."""
    return site_id.replace("Sites-", "").replace("-Site", "")


@dataclass
class OCAPIConfigReport:
    """Global and per-site OCAPI settings, keyed by api type / site id."""

    global_configs: List[Dict[str, Any]] = field(default_factory=list)
    site_configs: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "OCAPIConfigReport":
        global_entries = payload.get("global") or []
        global_configs = list(global_entries[0].get("site_configs") or []) if global_entries else []

        site_configs: Dict[str, List[Dict[str, Any]]] = {}
        for entry in payload.get("sites") or []:
            site_id = short_site_id(entry.get("site_id", ""))
            site_configs.setdefault(site_id, []).append(entry)

        return cls(global_configs=global_configs, site_configs=site_configs, raw=payload)

    def global_rows(self) -> List[List[str]]:
        # Nothing configured globally: one placeholder row per api type
        if not self.global_configs:
            return [[api_type, "---"] for api_type in API_TYPES]
        return [
            [config.get("api_type", "?"), json.dumps(config, indent=4)]
            for config in self.global_configs
        ]

    def site_rows(self) -> List[List[str]]:
        return [
            [site_id, json.dumps(config, indent=4)]
            for site_id, configs in self.site_configs.items()
            for config in configs
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {"global": self.global_configs, "sites": self.site_configs}


class OCAPIConfigService:
    def __init__(self, client: B2CClient):
        self.client = client

    async def fetch(self, token: AuthToken) -> OCAPIConfigReport:
        """
        Retrieve the OCAPI settings for the configured client id.

        Raises:
            B2CRequestError: If the request fails or the body is not a JSON object
        """
        response = await self.client.request(
            "GET",
            self.client.ocapi_url(self.client.settings.b2c.ocapi_config_path),
            B2CRequestError,
            token=token,
            params={"client_id": self.client.environment.b2c_client_id},
        )
        payload = response_payload(response)
        if not isinstance(payload, dict):
            raise B2CRequestError(
                "unexpected OCAPI configuration response",
                status_code=response.status_code,
                payload=payload,
            )
        return OCAPIConfigReport.from_api(payload)

    def audit_path(self) -> Path:
        instance = self.client.environment.b2c_instance_name
        return self.client.settings.paths.dx_config / f"{instance}.{OCAPI_CONFIG_AUDIT_FILE}"

    def write_audit(self, report: OCAPIConfigReport) -> Path:
        """Keep the retrieved settings next to the other generated config."""
        path = self.audit_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(report.raw, f, indent=2)
        return path
