"""Console output formatting for the pys3sync CLI."""

import json
from typing import Any

from rich.console import Console


class OutputFormatter:
    """Writes user-facing messages to the terminal.

    Informational messages go to stdout and are suppressed in quiet mode;
    warnings and errors always go to stderr.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit machine readable JSON instead of text
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console(highlight=False, soft_wrap=True)
        self.err_console = Console(stderr=True, highlight=False, soft_wrap=True)

    def print(self, message: str = "") -> None:
        """Print a plain line to stdout (ignores quiet mode)."""
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        self.err_console.print(f"Warning: {message}", style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.err_console.print(f"Error: {message}", style="bold red", markup=False)

    def output_json(self, data: Any) -> None:
        """Print data as indented JSON."""
        self.console.print(json.dumps(data, indent=2, default=str), markup=False)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of ``label: value`` rows.

        Args:
            title: Heading for the block
            items: List of (label, value) tuples
        """
        if self.json_output:
            self.output_json({label: value for label, value in items})
            return
        if self.quiet:
            return

        width = max((len(label) for label, _ in items), default=0)
        self.console.print(title, style="bold", markup=False)
        for label, value in items:
            self.console.print(f"  {label.ljust(width)}  {value}", markup=False)
