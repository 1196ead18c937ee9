"""B2C Commerce and Salesforce Platform services."""

from crmsync_cli.services.archive_service import ArchiveBuilder, ArchiveLocator
from crmsync_cli.services.auth_service import Authenticator
from crmsync_cli.services.b2c_client import B2CClient
from crmsync_cli.services.customer_service import CustomerService
from crmsync_cli.services.deploy_service import Deployer
from crmsync_cli.services.metadata_service import MetadataService
from crmsync_cli.services.ocapi_service import OCAPIConfigService
from crmsync_cli.services.pipeline import DeploymentPipeline, build_pipeline
from crmsync_cli.services.salesforce_service import SalesforceService
from crmsync_cli.services.site_service import SiteService

__all__ = [
    "ArchiveBuilder",
    "ArchiveLocator",
    "Authenticator",
    "B2CClient",
    "CustomerService",
    "Deployer",
    "DeploymentPipeline",
    "MetadataService",
    "OCAPIConfigService",
    "SalesforceService",
    "SiteService",
    "build_pipeline",
]
