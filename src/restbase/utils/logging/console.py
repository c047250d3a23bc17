"""
Rich console configuration for restbase.

This module provides the shared Rich console used by the logging handler and
the command-line interface, plus a table printing helper.
"""
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from .themes import RICH_THEME

# Configure global console with our theme
console = Console(
    theme=RICH_THEME,
    highlight=True,
    markup=True,
    emoji=True,
    record=False,
    width=None,  # Auto-width
    color_system="auto",
)


def print_table(
    rows: List[Dict[str, Any]],
    title: Optional[str] = None,
    columns: Optional[List[str]] = None,
) -> None:
    """Print a list of dictionaries as a table.

    Args:
        rows: Rows to print
        title: Optional table title
        columns: Column order (defaults to the keys of the first row)
    """
    table = Table(title=title)
    columns = columns or (list(rows[0].keys()) if rows else [])
    for column in columns:
        table.add_column(column, style="bright_blue" if column == columns[0] else "")

    for row in rows:
        table.add_row(*[str(row.get(column, "")) for column in columns])

    console.print(table)
