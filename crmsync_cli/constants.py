"""
crm-sync CLI Constants

Centralized constants for environment variable names, stage prefixes and defaults.
"""

# CLI identity
CLI_NAME = "crm-sync"
CLI_VERSION = "1.0.0"
USER_AGENT = f"b2c-crm-sync|cli|{CLI_VERSION}"

# Environment variable names (.env / process environment)
ENV_VAR_MAP = {
    "b2c_host_name": "B2C_HOSTNAME",
    "b2c_instance_name": "B2C_INSTANCENAME",
    "b2c_client_id": "B2C_CLIENTID",
    "b2c_client_secret": "B2C_CLIENTSECRET",
    "b2c_username": "B2C_USERNAME",
    "b2c_access_key": "B2C_ACCESSKEY",
    "b2c_code_version": "B2C_CODEVERSION",
    "b2c_site_ids": "B2C_SITEIDS",
    "sf_host_name": "SF_HOSTNAME",
    "sf_login_url": "SF_LOGINURL",
    "sf_username": "SF_USERNAME",
    "sf_password": "SF_PASSWORD",
    "sf_security_token": "SF_SECURITYTOKEN",
    "sf_scratch_org_username": "SF_SCRATCHORGUSERNAME",
}

# Connection properties required before any B2C Commerce call
B2C_REQUIRED_PROPERTIES = [
    "b2c_host_name",
    "b2c_instance_name",
    "b2c_client_id",
    "b2c_client_secret",
    "b2c_site_ids",
]

# Connection properties required before any Salesforce call
SF_REQUIRED_PROPERTIES = [
    "sf_login_url",
    "sf_username",
    "sf_password",
    "sf_security_token",
]

# OAuth grant types
GRANT_CLIENT_CREDENTIALS = "client_credentials"
GRANT_BM_USER = "urn:demandware:params:oauth:grant-type:client-id:dwsid:dwsecuretoken"

# Pipeline stage error prefixes
STAGE_PREFIXES = {
    "locate": "Unable to locate the deployment archive",
    "authenticate": "Unable to authenticate against the B2C Commerce instance",
    "deploy": "Unable to upload the deployment archive",
    "activate": "Unable to activate the deployed version",
    "verify": "Unable to retrieve the deployed version details",
}

# Human-readable stage labels (logger steps)
STAGE_LABELS = {
    "locate": "Locating deployment archive",
    "authenticate": "Authenticating with B2C Commerce",
    "deploy": "Uploading archive",
    "activate": "Activating version",
    "verify": "Verifying deployed version",
}

# Connected app credential generation (URL-safe alphabet)
CREDENTIAL_ALPHABET = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-"
)
CONSUMER_KEY_LENGTH = 128
CONSUMER_SECRET_LENGTH = 32

# Sensitive Keywords (for secret masking)
SENSITIVE_KEYWORDS = [
    "PASSWORD",
    "TOKEN",
    "SECRET",
    "KEY",
]

# Log Configuration
LOG_DATE_FORMAT = "%Y-%m-%d"
LOG_TIME_FORMAT = "%H-%M-%S"

# Audit copy of the instance OCAPI settings, written under dx_config
OCAPI_CONFIG_AUDIT_FILE = "ocapiConfig.json"

# Project override file (deep-merged over packaged defaults)
PROJECT_CONFIG_FILE = "crm-sync.yml"

# Error Messages
ERROR_BAD_ENVIRONMENT = (
    "The environment definition is incomplete; check the .env file or CLI flags"
)
ERROR_NO_VERIFIED_SITES = "No B2C Commerce sites could be verified"

# Success Messages
SUCCESS_CODE_DEPLOYED = "Code version deployed and activated"
SUCCESS_DATA_DEPLOYED = "Site data archive uploaded and import started"
