"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich library for colored output and formatted summaries. Supports
the --no-color flag.
"""

from rich.console import Console

from docupack.cli.models import SyncSummary


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(no_color=False)
        >>> handler.success("Convert process is successfully completed")
    """

    def __init__(self, no_color: bool = False):
        """Initialize output handler.

        Args:
            no_color: Disable color output if True
        """
        self.console = Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def print_summary(self, summary: SyncSummary) -> None:
        """Display synchronization summary with color coding.

        Args:
            summary: SyncSummary of the finished run
        """
        self.console.print("\n[bold]Sync Summary:[/bold]")

        if summary.added_count > 0:
            self.console.print(f"  [green]+[/green] Added: {summary.added_count} file(s)")

        if summary.updated_count > 0:
            self.console.print(f"  [blue]↻[/blue] Updated: {summary.updated_count} file(s)")

        if summary.deleted_count > 0:
            self.console.print(f"  [red]✗[/red] Deleted: {summary.deleted_count} file(s)")

        if summary.unchanged_count > 0:
            self.console.print(f"  [dim]─[/dim] Unchanged: {summary.unchanged_count} file(s)")

        if summary.skipped_count > 0:
            self.console.print(f"  [yellow]⊘[/yellow] Skipped (no frontmatter): {summary.skipped_count} file(s)")

        if summary.index_written:
            self.console.print("  [green]✓[/green] index.json regenerated")

        if summary.converted_count == 0 and summary.deleted_count == 0 and not summary.index_written:
            self.console.print("\n[green]Already in sync. No changes detected.[/green]")
        else:
            self.console.print("\n[green]Sync completed successfully[/green]")
