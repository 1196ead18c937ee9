"""
Base Command Class

Abstract base for all crm-sync CLI commands.
Provides common functionality and structure.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from rich.console import Console

from crmsync_cli.exceptions import B2CRequestError, CrmSyncError, StageError
from crmsync_cli.logger import DeployLogger
from crmsync_cli.ui_components import show_header
from crmsync_cli.utils import get_project_root


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling
    - JSON output support
    """

    def __init__(self, verbose: bool = False, json_output: bool = False):
        self.verbose = verbose
        self.json_output = json_output
        self.console = Console()
        self.project_root = get_project_root()
        self.logger: Optional[DeployLogger] = None

    def init_logger(self, instance_name: str, command_name: str) -> Optional[DeployLogger]:
        """
        Initialize command logger (skip in JSON mode).

        Args:
            instance_name: B2C instance name (use "global" when unknown)
            command_name: Command name

        Returns:
            DeployLogger instance or None if JSON mode
        """
        if self.json_output:
            return None
        self.logger = DeployLogger(
            instance_name or "global",
            command_name,
            verbose=self.verbose,
            log_root=self.project_root,
        )
        return self.logger

    def output_json(self, data: Dict[str, Any], exit_code: int = 0) -> None:
        """
        Output data as JSON and exit.

        Args:
            data: Data to output as JSON
            exit_code: Exit code (0 for success, non-zero for error)
        """
        print(json.dumps(data, indent=2, default=str))
        if exit_code != 0:
            raise SystemExit(exit_code)

    def output_json_error(
        self, error: str, details: Optional[Dict[str, Any]] = None, exit_code: int = 1
    ) -> None:
        error_data = {"error": error}
        if details:
            error_data["details"] = details
        self.output_json(error_data, exit_code=exit_code)

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        instance: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in JSON or verbose mode)."""
        if not self.verbose and not self.json_output:
            show_header(
                title=title,
                subtitle=subtitle,
                instance=instance,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        """Print success message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[green]✓ {message}[/green]")

    def print_error(self, message: str) -> None:
        """Print error message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[red]✗ {message}[/red]")

    def print_warning(self, message: str) -> None:
        """Print warning message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[yellow]⚠ {message}[/yellow]")

    def print_dim(self, message: str) -> None:
        """Print dim message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[dim]{message}[/dim]")

    def print_table(self, table) -> None:
        if not self.json_output:
            self.console.print()
            self.console.print(table)

    def exit_with_error(self, message: str, code: int = 1) -> None:
        """
        Print error and exit.

        Args:
            message: Error message
            code: Exit code
        """
        if self.json_output:
            self.output_json_error(message, exit_code=code)
        self.print_error(message)
        raise SystemExit(code)

    def _fail(self, label: str, message: str, context: Optional[str] = None, details=None) -> None:
        if self.json_output:
            if details is None and context:
                details = {"context": context}
            self.output_json_error(message, details=details)
        self.console.print(f"\n[bold red]✗ {label}:[/bold red] {message}\n")
        if context:
            self.console.print(f"  [color(208)]{context}[/color(208)]")
        if self.logger:
            self.logger.log_error(f"{label}: {message}", context=context)
            self.console.print(f"[dim]Logs saved to:[/dim] {self.logger.log_path}\n")
        raise SystemExit(1)

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Args:
            **kwargs: Command arguments
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            if self.logger:
                self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")
            raise SystemExit(130)
        except SystemExit:
            raise
        except StageError as e:
            self._fail(
                "Pipeline failed",
                e.format_message(),
                context=f"stage: {e.stage.value}",
                details={"stage": e.stage.value, "status_code": e.status_code},
            )
        except B2CRequestError as e:
            self._fail(
                "B2C Commerce request failed",
                e.headline,
                context=e.context,
                details={"status_code": e.status_code, "context": e.context},
            )
        except CrmSyncError as e:
            self._fail(type(e).__name__, e.message, context=e.context)
        except FileNotFoundError as e:
            self._fail("File not found", str(e))
        except PermissionError as e:
            self._fail("Permission denied", str(e))
        except ValueError as e:
            self._fail("Invalid value", str(e))
        except Exception as e:
            self._fail(type(e).__name__, str(e))
        finally:
            if self.logger:
                self.logger.close()
