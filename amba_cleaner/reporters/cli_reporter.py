"""
CLI Reporter Module
===================

Provides rich terminal output for cleanup runs using the Rich library.

This module creates terminal displays with:
- A discovery table with one row per resource kind
- A target table shown before asking for confirmation
- One status line per deletion attempt
- A summary panel at the end of a run

Classes
-------
CLIReporter
    Main reporter class for terminal output.

Example
-------
>>> from amba_cleaner.reporters import CLIReporter
>>>
>>> reporter = CLIReporter()
>>> reporter.print_discovery(report.scan_results)
>>> reporter.print_summary(report)

Notes
-----
Log lines go to stderr through the logging setup. This reporter writes
the human-facing tables to its own console.

See Also
--------
rich : Python library for rich text and formatting.
JSONReporter : For programmatic access.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from amba_cleaner.cleaners.base_cleaner import DeleteResult, DeleteStatus
from amba_cleaner.core.base_scanner import ScanResult
from amba_cleaner.core.targets import target_id

if TYPE_CHECKING:
    from amba_cleaner.orchestrator import CleanupReport

# Module logger
logger = logging.getLogger(__name__)

STATUS_ICONS = {
    DeleteStatus.SUCCESS: "[green]✓[/green]",
    DeleteStatus.FAILED: "[red]✗[/red]",
    DeleteStatus.SKIPPED: "[yellow]○[/yellow]",
    DeleteStatus.DRY_RUN: "[blue]~[/blue]",
}

STATUS_STYLES = {
    "completed": "green",
    "nothing_found": "green",
    "declined": "yellow",
    "dry_run": "blue",
    "failed": "red",
}


class CLIReporter:
    """
    Reporter for displaying cleanup runs in the terminal.

    Parameters
    ----------
    console : Console, optional
        Rich Console instance. If not provided, creates a new one.

    Examples
    --------
    >>> reporter = CLIReporter()
    >>> reporter.print_header("contoso", "Alerts", dry_run=True)
    >>> reporter.print_discovery(report.scan_results)
    """

    # Longest list of IDs printed per resource kind before confirming
    MAX_TARGETS_SHOWN = 25

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the CLI reporter with a Rich Console."""
        self.console = console or Console()
        logger.debug("Initialized CLIReporter")

    def print_header(
        self,
        pseudo_root_management_group: str,
        cleanup_scope: str,
        dry_run: bool = False,
        force: bool = False,
    ) -> None:
        """
        Print the run header panel.

        Parameters
        ----------
        pseudo_root_management_group : str
            Top of the management group scope.
        cleanup_scope : str
            Name of the cleanup scope.
        dry_run : bool, default=False
            Whether deletions are simulated.
        force : bool, default=False
            Whether the confirmation prompt is skipped.
        """
        header_text = Text()
        header_text.append(f"\nAMBA Cleanup: {cleanup_scope}\n", style="bold blue")
        header_text.append(
            f"Pseudo root management group: {pseudo_root_management_group}",
            style="dim",
        )
        self.console.print(Panel(header_text, border_style="blue"))

        if dry_run:
            self.console.print(
                Panel(
                    "[yellow bold]DRY-RUN MODE[/yellow bold]\n"
                    "No resources will actually be deleted.",
                    border_style="yellow",
                )
            )
        elif force:
            self.console.print(
                Panel(
                    "[red bold]FORCE MODE[/red bold]\n"
                    "Resources will be deleted WITHOUT confirmation!",
                    border_style="red",
                )
            )

    def print_discovery(self, scan_results: Sequence[ScanResult]) -> None:
        """
        Print how many resources of each kind were found.

        Parameters
        ----------
        scan_results : sequence of ScanResult
            Results in scan order.
        """
        table = Table(title="\nAMBA Resources Found", title_style="bold")
        table.add_column("Resource", style="cyan")
        table.add_column("Count", justify="right")

        for result in scan_results:
            style = "red" if result.has_targets else "green"
            table.add_row(
                self._label(result.resource_type),
                f"[{style}]{result.count}[/]",
            )

        self.console.print(table)

    def print_targets(self, description: str, scan_results: Sequence[ScanResult]) -> None:
        """
        Print the resources about to be deleted.

        Parameters
        ----------
        description : str
            What the run will do.
        scan_results : sequence of ScanResult
            Results in deletion order.
        """
        self.console.print(f"\n[bold]{description}:[/bold]\n")

        table = Table(show_lines=False)
        table.add_column("#", style="dim", width=4)
        table.add_column("Resource", style="yellow")
        table.add_column("Resource ID", style="cyan", overflow="fold")

        row = 0
        for result in scan_results:
            shown = result.targets[: self.MAX_TARGETS_SHOWN]
            for target in shown:
                row += 1
                table.add_row(str(row), self._label(result.resource_type), target_id(target))
            hidden = result.count - len(shown)
            if hidden > 0:
                table.add_row("", self._label(result.resource_type), f"[dim]... and {hidden} more[/dim]")

        self.console.print(table)

    def print_delete_result(self, result: DeleteResult) -> None:
        """
        Print one line for a deletion attempt.

        Parameters
        ----------
        result : DeleteResult
            Outcome of the attempt.
        """
        status_icon = STATUS_ICONS.get(result.status, "?")
        status_text = {
            DeleteStatus.SUCCESS: "Deleted",
            DeleteStatus.FAILED: f"Failed: {result.error_message}",
            DeleteStatus.SKIPPED: "Skipped (already gone)",
            DeleteStatus.DRY_RUN: "Would delete",
        }.get(result.status, "Unknown")

        self.console.print(f"  {status_icon} {result.resource_id} - {status_text}", highlight=False)

    def print_summary(self, report: CleanupReport) -> None:
        """
        Print the end-of-run summary.

        Parameters
        ----------
        report : CleanupReport
            The finished run.
        """
        summary = Table(show_header=False, box=None, padding=(0, 2))
        summary.add_column("Metric", style="cyan")
        summary.add_column("Value", style="white")

        status = report.status.value
        style = STATUS_STYLES.get(status, "white")
        summary.add_row("Status:", f"[{style}]{status.replace('_', ' ').title()}[/]")
        summary.add_row("Management Groups:", str(len(report.management_groups)))
        summary.add_row("Resources Found:", str(report.total_found))

        if report.delete_summaries:
            if report.dry_run:
                would = sum(s.dry_run for s in report.delete_summaries)
                summary.add_row("Would Delete:", f"[blue]{would}[/blue]")
            else:
                skipped = sum(s.skipped for s in report.delete_summaries)
                summary.add_row("Deleted:", f"[green]{report.total_deleted}[/green]")
                summary.add_row("Failed:", f"[red]{report.total_failed}[/red]")
                summary.add_row("Skipped:", f"[yellow]{skipped}[/yellow]")

        self.console.print()
        self.console.print(Panel(summary, title="Summary", border_style=style))

        if report.error:
            self.print_error(report.error.get("message", "Cleanup stopped"))

    def print_management_groups(self, root: str, management_groups: List[str]) -> None:
        """
        Print the flattened management group scope.

        Parameters
        ----------
        root : str
            Pseudo root management group.
        management_groups : list of str
            Management group IDs in pre-order.
        """
        self.console.print(
            f"\n[bold]Management groups under '{root}' ({len(management_groups)} total):[/bold]\n"
        )
        for group_id in management_groups:
            self.console.print(f"  • {group_id}", highlight=False)
        self.console.print()

    def print_completion_message(self, output_file: Optional[str] = None) -> None:
        """
        Print run completion message.

        Parameters
        ----------
        output_file : str, optional
            Path to the JSON report if one was written.
        """
        self.console.print("\n[green bold]Done.[/green bold]")
        if output_file:
            self.console.print(f"[dim]Report saved to: {output_file}[/dim]")

    def print_error(self, message: str) -> None:
        """
        Print an error message.

        Parameters
        ----------
        message : str
            Error message to display.
        """
        self.console.print(f"\n[red bold]Error:[/red bold] {message}")

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"\n[yellow bold]Warning:[/yellow bold] {message}")

    @staticmethod
    def _label(resource_type: str) -> str:
        return resource_type.replace("_", " ").title()

    def __repr__(self) -> str:
        """Return string representation."""
        return "CLIReporter()"
