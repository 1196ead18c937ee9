#!/usr/bin/env python3
"""crm-sync CLI - Main entry point"""

import functools
import os
import sys

from rich.console import Console

import rich_click as click

from crmsync_cli.constants import CLI_NAME, CLI_VERSION

# Configure rich-click
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = False
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

# COMMANDS / OPTIONS
click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_ARGUMENT = "bold yellow"

# HEADERS
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_USAGE_COMMAND = "bold cyan"

# HELP TEXT
click.rich_click.STYLE_HELPTEXT_FIRST_LINE = "bold white"
click.rich_click.STYLE_HELPTEXT = ""
click.rich_click.STYLE_OPTION_HELP = ""
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"

# PANEL BORDERS
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "cyan"
click.rich_click.ALIGN_OPTIONS_PANEL = "left"
click.rich_click.ERRORS_EPILOGUE = ""

from crmsync_cli.commands.b2c_deploy import code_deploy, data_deploy
from crmsync_cli.commands.b2c_ocapi import ocapi_get
from crmsync_cli.commands.b2c_sites import cartridges_add, cartridges_remove
from crmsync_cli.commands.b2c_verify import b2c_verify
from crmsync_cli.commands.b2c_zip import code_zip, data_zip
from crmsync_cli.commands.env import env_list
from crmsync_cli.commands.oobo import oobo_customers_create
from crmsync_cli.commands.sf_metadata import (
    connectedapps_create,
    remotesites_create,
    trustedsites_create,
)
from crmsync_cli.commands.sf_org import b2cinstance_setup, org_deploy

console = Console()


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""
    from click.exceptions import ClickException, UsageError

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except UsageError as e:
            console.print(f"\n[bold red]✗ Error:[/bold red] {e.format_message()}\n")
            if e.ctx and e.ctx.command:
                console.print(
                    f"[dim]Run[/dim] [cyan]{CLI_NAME} {e.ctx.command.name} --help[/cyan] [dim]for usage information[/dim]\n"
                )
            sys.exit(1)
        except ClickException as e:
            e.show()
            sys.exit(e.exit_code)
        except KeyboardInterrupt:
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(130)
        except Exception as e:
            console.print(f"\n[bold red]✗ Unexpected error:[/bold red] {e}\n")

            # Show traceback if DEBUG env var is set
            if os.environ.get("DEBUG") or os.environ.get("VERBOSE"):
                import traceback

                console.print("[dim]Traceback:[/dim]")
                traceback.print_exc()
            sys.exit(1)

    return wrapper


@click.group(invoke_without_command=True)
@click.version_option(version=CLI_VERSION, prog_name=CLI_NAME)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    crm-sync - Deploy and configure the B2C Commerce / Salesforce integration.

    \b
    Quick Start:
      crm-sync env:list              # Check the resolved environment
      crm-sync b2c:verify            # Verify credentials and sites
      crm-sync b2c:ocapi:get         # Show the OCAPI configuration
      crm-sync b2c:code:zip          # Build the cartridge archive
      crm-sync b2c:code:deploy       # Upload, activate, verify
      crm-sync b2c:data:zip          # Build the site data archive
      crm-sync b2c:data:deploy       # Upload and import

    \b
    Salesforce Platform:
      crm-sync sf:connectedapps:create
      crm-sync sf:trustedsites:create
      crm-sync sf:remotesites:create
      crm-sync sf:org:deploy
      crm-sync sf:b2cinstance:setup
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Environment
cli.add_command(env_list)
# B2C Commerce
cli.add_command(code_zip)
cli.add_command(data_zip)
cli.add_command(code_deploy)
cli.add_command(data_deploy)
cli.add_command(b2c_verify)
cli.add_command(ocapi_get)
cli.add_command(cartridges_add)
cli.add_command(cartridges_remove)
cli.add_command(oobo_customers_create)
# Salesforce Platform
cli.add_command(connectedapps_create)
cli.add_command(trustedsites_create)
cli.add_command(remotesites_create)
cli.add_command(org_deploy)
cli.add_command(b2cinstance_setup)


@handle_cli_errors
def main():
    """Main entry point with error handling."""
    cli()


if __name__ == "__main__":
    main()
