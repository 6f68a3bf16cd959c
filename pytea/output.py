"""Console output for the pytea CLI."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Renders messages, tables and JSON for CLI commands."""

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Print machine readable JSON instead of text
            quiet: Suppress informational messages
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console(highlight=False, soft_wrap=True)
        self.err_console = Console(stderr=True, highlight=False, soft_wrap=True)

    def print(self, message: str = "") -> None:
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if not self.json_output:
            self.console.print(message, style="green", markup=False)

    def progress_message(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(message, style="cyan", markup=False)

    def warning(self, message: str) -> None:
        self.err_console.print(message, style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.err_console.print(message, style="bold red", markup=False)

    def output_json(self, data: Any) -> None:
        self.console.print_json(json.dumps(data, default=str))

    def output_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str],
        headers: Optional[dict[str, str]] = None,
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a table.

        Args:
            rows: One dict per row
            columns: Keys to show, in order
            headers: Optional display names for the columns
            title: Optional table title
        """
        headers = headers or {}
        table = Table(title=title, show_edge=False, box=None, pad_edge=False)
        for column in columns:
            table.add_column(headers.get(column, column.capitalize()), overflow="fold")
        for row in rows:
            table.add_row(*(str(row.get(column, "")) for column in columns))
        self.console.print(table)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of key/value pairs."""
        if self.json_output:
            self.output_json({key: value for key, value in items})
            return
        self.console.print(title, style="bold", markup=False)
        width = max((len(key) for key, _ in items), default=0)
        for key, value in items:
            self.console.print(f"  {key.ljust(width)} = {value}", markup=False)
