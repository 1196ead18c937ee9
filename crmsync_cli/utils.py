"""
CLI Utilities

.env discovery, project root resolution and display helpers.
"""

from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values
from rich.console import Console

from crmsync_cli.constants import SENSITIVE_KEYWORDS
from crmsync_cli.models.results import ValidationResult


def find_env_file(start: Optional[Path] = None) -> Optional[Path]:
    """Smart .env file detection"""
    start = start or Path.cwd()
    search_paths = [
        start / ".env",
        Path.home() / ".crm-sync" / ".env",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_env_file(env_file: Optional[Path]) -> Dict[str, str]:
    """Read a .env file without touching os.environ."""
    if not env_file:
        return {}
    return {key: value for key, value in dotenv_values(env_file).items() if value is not None}


def get_project_root() -> Path:
    """
    Get the crm-sync project root.

    The directory holding the .env file when one is found, otherwise the
    current working directory. Archives, generated metadata and logs are
    all placed relative to it.
    """
    env_file = find_env_file()
    if env_file and env_file.parent != Path.home() / ".crm-sync":
        return env_file.parent
    return Path.cwd()


def mask_value(key: str, value: str) -> str:
    """Mask a sensitive value."""
    if not value:
        return ""
    if any(keyword in key.upper() for keyword in SENSITIVE_KEYWORDS):
        if len(value) > 8:
            return f"{value[:4]}...{value[-4:]}"
        return "***"
    # Truncate long values
    return value[:60] + "..." if len(value) > 60 else value


def print_validation_errors(
    result: ValidationResult, console: Optional[Console] = None
) -> None:
    """
    Print validation errors to console.

    Args:
        result: ValidationResult with errors
        console: Rich console (creates new if not provided)
    """
    if console is None:
        console = Console()

    if result.has_errors:
        console.print("[red]✗ Validation failed:[/red]")
        for error in result.errors:
            console.print(f"  • {error}")

    if result.has_warnings:
        console.print("[yellow]⚠ Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  • {warning}")
