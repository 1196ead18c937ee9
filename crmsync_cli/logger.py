"""
Logging system for crm-sync CLI
Writes a per-command log file with clean console output and timed spans
"""

import re
import subprocess
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, TextIO

from rich.console import Console
from rich.live import Live
from rich.padding import Padding
from rich.spinner import Spinner
from rich.text import Text

from crmsync_cli.constants import LOG_DATE_FORMAT, LOG_TIME_FORMAT
from crmsync_cli.models.results import ExecutionResult

console = Console()

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class DeployLogger:
    """
    Manages logging for one crm-sync command invocation
    - Writes all output to a log file in real-time
    - Shows clean progress UI in console (unless verbose)
    - Wraps the command and each pipeline stage in timed spans
    """

    def __init__(
        self,
        instance_name: str,
        operation: str,
        verbose: bool = False,
        log_root: Optional[Path] = None,
    ):
        """
        Initialize logger

        Args:
            instance_name: B2C instance name (or 'global')
            operation: Command name (e.g., 'b2c:code:deploy')
            verbose: If True, show all output in console
            log_root: Directory receiving logs/ (defaults to the project root)
        """
        self.instance_name = instance_name
        self.operation = operation
        self.verbose = verbose
        self.log_file: Optional[TextIO] = None
        self.current_step = ""
        self.has_errors = False

        if log_root is None:
            from crmsync_cli.utils import get_project_root

            log_root = get_project_root()

        # Structure: logs/{instance}/{date}/{time}_{operation}.log
        now = datetime.now()
        logs_dir = log_root / "logs" / instance_name / now.strftime(LOG_DATE_FORMAT)
        logs_dir.mkdir(parents=True, exist_ok=True)

        safe_operation = operation.replace(":", "-")
        self.log_path: Path = logs_dir / f"{now.strftime(LOG_TIME_FORMAT)}_{safe_operation}.log"

        # Line-buffered for real-time tailing
        self.log_file = open(self.log_path, "w", buffering=1)
        self._write_log_header()

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
crm-sync Command Log
{"=" * 80}
Instance: {self.instance_name}
Command: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self.log_file.write(header)

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        timestamp = datetime.now().strftime("%H:%M:%S")
        if self.log_file:
            self.log_file.write(f"[{timestamp}] [{level}] {message}\n")

        if self.verbose:
            if level == "ERROR":
                console.print(f"[red]{message}[/red]")
            elif level == "WARNING":
                console.print(f"[yellow]{message}[/yellow]")
            elif level == "DEBUG":
                console.print(f"[dim]{message}[/dim]")
            else:
                console.print(message)

    def log_output(self, output: str, stream: str = "stdout"):
        """
        Log subprocess or HTTP output; always written to the file, shown
        in console only when verbose.
        """
        if not output or not self.log_file:
            return

        for line in ANSI_ESCAPE.sub("", output).splitlines():
            self.log_file.write(f"  [{stream}] {line}\n")

        if self.verbose:
            console.print(output)

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., failed stage)
        """
        self.has_errors = True

        if self.log_file:
            error_block = f"\n{'!' * 80}\nERROR OCCURRED\n{'!' * 80}\n{error}\n"
            if context:
                error_block += f"\nContext: {context}\n"
            error_block += f"{'!' * 80}\n\n"
            self.log_file.write(error_block)

        if not self.verbose:
            console.print()

        console.print(f"[bold red]✗ {error}[/bold red]")
        if context:
            console.print(f"  [color(208)]{context}[/color(208)]")

    def step(self, step_name: str):
        """Start a new step"""
        if self.current_step and not self.verbose:
            console.print()

        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            console.print(f"[color(214)]▶[/color(214)] [white]{step_name}[/white]")

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            console.print(f"  [dim]✓ {message}[/dim]")

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")

        if not self.verbose:
            console.print(f"  [yellow]⚠[/yellow] [dim]{message}[/dim]")

    @contextmanager
    def span(self, name: str, **fields) -> Iterator[None]:
        """
        Timed span written as key=value lines.

        Emits span.start on entry and span.end with status and duration on
        exit; exceptions propagate after being recorded.
        """
        attrs = " ".join(f"{key}={value}" for key, value in fields.items())
        self.log(f"span.start name={name} {attrs}".rstrip(), "DEBUG")
        started = time.monotonic()
        status = "ok"
        try:
            yield
        except BaseException as e:
            status = f"error:{type(e).__name__}"
            raise
        finally:
            duration = time.monotonic() - started
            self.log(
                f"span.end name={name} status={status} duration={duration:.3f}s",
                "DEBUG",
            )

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self.log_file.write(footer)
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        """Context manager exit"""
        if exc_type is not None and exc_type != SystemExit:
            self.has_errors = True
            if self.log_file:
                self.log_file.write(f"\nUnhandled {exc_type.__name__}: {exc_val}\n")
        self.close()
        return False


def run_with_progress(
    logger: Optional[DeployLogger],
    command: List[str],
    description: str,
    cwd: Optional[Path] = None,
) -> ExecutionResult:
    """
    Run a command with progress indicator

    Args:
        logger: DeployLogger instance (None in JSON mode)
        command: Command and arguments
        description: Description for progress indicator
        cwd: Working directory

    Returns:
        ExecutionResult with captured output
    """
    command_text = " ".join(command)
    if logger:
        logger.log(f"Executing: {command_text}", "DEBUG")

    if logger is None or logger.verbose:
        result = subprocess.run(command, cwd=cwd, capture_output=True, text=True)
    else:
        spinner = Spinner("dots", text=f"[cyan]{description}...[/cyan]")
        with Live(Padding(spinner, (0, 0, 0, 2)), console=console, refresh_per_second=10) as live:
            result = subprocess.run(command, cwd=cwd, capture_output=True, text=True)

            if result.returncode == 0:
                mark = Text("  ✓ ", style="dim")
            else:
                mark = Text("  ✗ ", style="red")
            mark.append(description, style="dim")
            live.update(mark)

    if logger:
        logger.log_output(result.stdout, "stdout")
        logger.log_output(result.stderr, "stderr")

    return ExecutionResult(
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
        command=command_text,
    )
