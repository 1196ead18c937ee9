"""
Site and Storefront Models

Results of site verification, cartridge path changes, OOBO customer
registration and generated CRM metadata.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class SiteVerification:
    """Outcome of looking up one configured storefront."""

    site_id: str
    status_code: int
    cartridges: Optional[str] = None
    customer_list_id: Optional[str] = None
    fault: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status_code == 200

    @classmethod
    def from_api(cls, site_id: str, status_code: int, data: Dict[str, Any]) -> "SiteVerification":
        if status_code != 200:
            fault = (data.get("fault") or {}).get("message") if data else None
            return cls(site_id=site_id, status_code=status_code, fault=fault)
        customer_list = data.get("customer_list_link") or {}
        return cls(
            site_id=site_id,
            status_code=status_code,
            cartridges=data.get("cartridges"),
            customer_list_id=customer_list.get("customer_list_id"),
        )

    def to_row(self) -> List[Any]:
        if self.is_success:
            return [self.site_id, self.status_code, self.customer_list_id, self.cartridges]
        return [self.site_id, self.status_code, self.fault]


@dataclass
class SiteVerificationReport:
    """Verified and failed sites, split."""

    success: List[SiteVerification] = field(default_factory=list)
    error: List[SiteVerification] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.error) > 0


@dataclass
class CartridgeOperationResult:
    """One cartridge add/remove call against one site."""

    site_id: str
    cartridge: str
    operation: str
    status_code: int
    fault: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def to_row(self) -> List[Any]:
        return [self.site_id, self.cartridge, self.operation, self.status_code, self.fault or ""]


@dataclass
class CustomerProfileResult:
    """Synthetic OOBO customer for one customer list."""

    customer_list_id: str
    site_ids: List[str]
    customer_no: str
    email: str
    exists: bool
    created: bool = False
    customer_id: Optional[str] = None

    def to_row(self) -> List[Any]:
        return [
            self.customer_list_id,
            ",".join(self.site_ids),
            self.customer_no,
            self.email,
            "existing" if self.exists else "created",
        ]


@dataclass
class SitePreferenceResult:
    """OOBO customer id written to one site's preferences."""

    site_id: str
    preference: str
    value: str
    status_code: int
    fault: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def to_row(self) -> List[Any]:
        return [self.site_id, self.preference, self.value, self.status_code, self.fault or ""]


@dataclass
class ConnectedAppCredential:
    """Generated connected app for one storefront."""

    site_id: str
    app_id: str
    consumer_key: str
    consumer_secret: str
    file_path: Path

    def to_dict(self) -> Dict[str, str]:
        return {
            "appId": self.app_id,
            "consumerKey": self.consumer_key,
            "consumerSecret": self.consumer_secret,
        }


@dataclass
class GeneratedMetadata:
    """A metadata file rendered from a template."""

    name: str
    file_path: Path

    def to_row(self) -> List[Any]:
        return [self.name, str(self.file_path)]


@dataclass
class ArchiveSummary:
    """A zip archive produced from local sources."""

    archive_name: str
    archive_path: Path
    file_count: int
    size_bytes: int

    def to_row(self) -> List[Any]:
        return [self.archive_name, str(self.archive_path), self.file_count, self.size_bytes]
