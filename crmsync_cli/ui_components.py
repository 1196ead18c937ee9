"""
crm-sync CLI - UI Components
Standardized headers and tables
"""

from typing import Any, Iterable, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

LOGO = "crm-sync"


def show_header(
    title: str,
    subtitle: str = None,
    instance: str = None,
    details: dict = None,
    console: Console = None,
):
    """
    Display a standardized crm-sync command header.

    Args:
        title: Main title (e.g., "Deploy Code")
        subtitle: Optional subtitle line
        instance: B2C instance name (if applicable)
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)

    Example:
        show_header(
            title="Deploy Code",
            instance="zzzz_007",
            details={"Code version": "v7", "Auth": "client-credentials"}
        )
    """
    if console is None:
        console = Console()

    prefix = f" [bold color(214)]{LOGO}[/bold color(214)] [dim]›[/dim]"

    console.print(f"{prefix} [bold white]{title}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{subtitle}[/dim]")

    if instance:
        console.print(f"{prefix} Instance: [cyan]{instance}[/cyan]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [cyan]{value}[/cyan]")

    console.print()


def render_table(
    title: str,
    columns: Sequence[str],
    rows: Iterable[List[Any]],
    first_column_style: str = "cyan",
) -> Table:
    """Build a summary table; None cells render empty."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold cyan",
        title_justify="left",
        padding=(0, 1),
    )
    for index, column in enumerate(columns):
        if index == 0:
            table.add_column(column, style=first_column_style, no_wrap=True)
        else:
            table.add_column(column)

    for row in rows:
        table.add_row(*["" if cell is None else str(cell) for cell in row])

    return table
