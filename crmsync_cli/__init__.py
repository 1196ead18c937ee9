"""crm-sync - B2C Commerce and Salesforce Platform integration CLI"""

from crmsync_cli.constants import CLI_VERSION

__version__ = CLI_VERSION
