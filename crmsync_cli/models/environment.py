"""
Environment Models

Immutable connection parameters for one B2C Commerce instance and its
paired Salesforce org.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, Optional, Tuple


class AuthMode(Enum):
    """B2C Commerce authentication modes."""

    CLIENT_CREDENTIALS = "client-credentials"
    BM_USER = "bm-user"

    @property
    def required_properties(self) -> Tuple[str, ...]:
        """Environment properties the mode needs before a token request."""
        if self is AuthMode.BM_USER:
            return (
                "b2c_host_name",
                "b2c_client_id",
                "b2c_client_secret",
                "b2c_username",
                "b2c_access_key",
            )
        return ("b2c_client_id", "b2c_client_secret")


@dataclass(frozen=True)
class EnvironmentDefinition:
    """Resolved connection parameters for one invocation."""

    b2c_host_name: Optional[str] = None
    b2c_instance_name: Optional[str] = None
    b2c_client_id: Optional[str] = None
    b2c_client_secret: Optional[str] = None
    b2c_username: Optional[str] = None
    b2c_access_key: Optional[str] = None
    b2c_code_version: Optional[str] = None
    b2c_site_ids: Tuple[str, ...] = ()
    sf_host_name: Optional[str] = None
    sf_login_url: Optional[str] = None
    sf_username: Optional[str] = None
    sf_password: Optional[str] = None
    sf_security_token: Optional[str] = None
    sf_scratch_org_username: Optional[str] = None

    def missing(self, *properties: str) -> list[str]:
        """Return the subset of properties that carry no value."""
        return [name for name in properties if not getattr(self, name)]

    @property
    def sf_domain(self) -> str:
        """
        Login domain understood by simple_salesforce.

        https://test.salesforce.com -> "test", https://acme.my.salesforce.com -> "acme.my"
        """
        if not self.sf_login_url:
            return "login"
        host = self.sf_login_url.split("://", 1)[-1].strip("/")
        return host.replace(".salesforce.com", "") or "login"

    def to_dict(self) -> Dict[str, str]:
        """Flatten for display; site ids are comma-joined."""
        result = {}
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, tuple):
                value = ",".join(value)
            result[field.name] = value or ""
        return result

    def __repr__(self) -> str:
        return (
            f"EnvironmentDefinition(b2c_host_name={self.b2c_host_name}, "
            f"instance={self.b2c_instance_name}, sites={len(self.b2c_site_ids)})"
        )
