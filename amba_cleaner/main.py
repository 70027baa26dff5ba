"""
AMBA Cleaner CLI - Azure Monitor Baseline Alerts cleanup

Main entry point for the command-line interface.
"""

import logging
import sys
from typing import List, Optional

import click
from rich.console import Console
from rich.prompt import Prompt

from .core.azure_client import AzureClient
from .core.base_scanner import ScanResult
from .core.exceptions import AmbaCleanerError, CredentialsError, HierarchyError
from .core.hierarchy import get_management_group_scope
from .core.logging import setup_logging
from .orchestrator import (
    CleanupOrchestrator,
    CleanupReport,
    CleanupScope,
    ConfirmCallback,
    ConfirmDecision,
)
from .reporters.cli_reporter import CLIReporter
from .reporters.json_reporter import JSONReporter


console = Console()
logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def parse_cleanup_scope(ctx, param, value: Optional[str]) -> Optional[CleanupScope]:
    """Convert the cleanup scope option to a CleanupScope."""
    if value is None:
        return None
    try:
        return CleanupScope.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def make_confirm(reporter: CLIReporter, force: bool) -> ConfirmCallback:
    """Build the confirmation callback handed to the orchestrator."""

    def always_accept(description: str, scan_results: List[ScanResult]) -> ConfirmDecision:
        return ConfirmDecision.ACCEPT

    def ask(description: str, scan_results: List[ScanResult]) -> ConfirmDecision:
        reporter.print_targets(description, scan_results)
        answer = Prompt.ask(
            "[yellow]Delete these resources?[/yellow]",
            choices=["y", "n", "preview"],
            default="n",
            console=reporter.console,
        )
        if answer == "y":
            return ConfirmDecision.ACCEPT
        if answer == "preview":
            return ConfirmDecision.PREVIEW
        return ConfirmDecision.DECLINE

    return always_accept if force else ask


@click.group()
@click.version_option(version="0.1.0", prog_name="amba-cleaner")
def cli():
    """
    AMBA Cleaner: Azure Monitor Baseline Alerts cleanup

    Finds the alerts, policies, identities, notification assets and
    deployment records that AMBA deployed under a management group and
    deletes them in dependency order.
    """
    pass


@cli.command("cleanup")
@click.option(
    "--pseudo-root-management-group",
    "-m",
    required=True,
    help="Management group at the top of the AMBA deployment",
)
@click.option(
    "--cleanup-scope",
    "-s",
    required=True,
    type=click.Choice([scope.value for scope in CleanupScope], case_sensitive=False),
    callback=parse_cleanup_scope,
    help="Which AMBA resources to delete",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Find and report resources without deleting anything",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Skip the confirmation prompt (dangerous!)",
)
@click.option(
    "--continue-on-error",
    is_flag=True,
    default=False,
    help="Keep deleting after a failure (policy assignments always stop)",
)
@click.option(
    "--subscription-id",
    default=None,
    help="Subscription used for management group scoped API clients",
)
@click.option(
    "--max-retries",
    default=3,
    type=int,
    help="Maximum transport retries per Azure API call (default: 3)",
)
@click.option(
    "--timeout",
    default=30,
    type=int,
    help="Connection and read timeout in seconds (default: 30)",
)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (default: INFO)",
)
@click.option(
    "--log-file",
    default=None,
    help="Also write log lines to this file",
)
@click.option(
    "--output",
    "-o",
    default=None,
    help="Write a JSON report of the run to this file",
)
def cleanup(
    pseudo_root_management_group: str,
    cleanup_scope: CleanupScope,
    dry_run: bool,
    force: bool,
    continue_on_error: bool,
    subscription_id: Optional[str],
    max_retries: int,
    timeout: int,
    log_level: str,
    log_file: Optional[str],
    output: Optional[str],
):
    """
    Delete AMBA resources under a management group.

    Scans every management group below the pseudo root, shows what was
    found, asks once for confirmation, then deletes.

    Cleanup scopes:

        All                 Alerts, policy items, identities, notification assets
        Deployments         amba-* deployment records
        NotificationAssets  Alert processing rules and action groups
        Alerts              Metric, activity log and log search alerts
        PolicyItems         Policy assignments, initiatives, definitions, role assignments

    Examples:

        # Preview what would be deleted (safe)
        amba-cleaner cleanup -m contoso -s All --dry-run

        # Delete alerts with confirmation prompt
        amba-cleaner cleanup -m contoso -s Alerts

        # Skip confirmation (dangerous!)
        amba-cleaner cleanup -m contoso -s PolicyItems --force

        # Save a JSON report
        amba-cleaner cleanup -m contoso -s All -o cleanup.json
    """
    setup_logging(level=log_level, log_file=log_file)
    reporter = CLIReporter(console)
    reporter.print_header(
        pseudo_root_management_group,
        cleanup_scope.value,
        dry_run=dry_run,
        force=force,
    )

    try:
        with AzureClient(
            subscription_id=subscription_id,
            max_retries=max_retries,
            timeout=timeout,
        ) as azure_client:
            orchestrator = CleanupOrchestrator(
                azure_client,
                confirm=make_confirm(reporter, force),
                dry_run=dry_run,
                continue_on_error=continue_on_error,
                progress_callback=reporter.print_delete_result,
            )
            report = orchestrator.run(pseudo_root_management_group, cleanup_scope)

    except HierarchyError as e:
        console.print(f"\n[red bold]Configuration Error:[/red bold] {str(e)}")
        sys.exit(1)
    except CredentialsError as e:
        console.print(f"\n[red bold]Authentication Error:[/red bold] {str(e)}")
        sys.exit(1)
    except AmbaCleanerError as e:
        console.print(f"\n[red bold]Azure Error:[/red bold] {str(e)}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cleanup cancelled by user.[/yellow]")
        sys.exit(130)

    logger.debug(f"Cleanup finished with status {report.status.value}")
    _output_report(report, reporter, output)

    if report.failed:
        sys.exit(1)


def _output_report(report: CleanupReport, reporter: CLIReporter, output: Optional[str]) -> None:
    """Print the run summary and optionally save the JSON report."""
    reporter.print_discovery(report.scan_results)
    reporter.print_summary(report)

    output_file = None
    if output:
        try:
            output_file = JSONReporter(output_path=output).report(report)
        except OSError as e:
            reporter.print_warning(f"Could not write report to {output}: {e}")

    reporter.print_completion_message(output_file)


@cli.command("hierarchy")
@click.option(
    "--pseudo-root-management-group",
    "-m",
    required=True,
    help="Management group to start from",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (default: WARNING)",
)
def show_hierarchy(pseudo_root_management_group: str, log_level: str):
    """List the management groups a cleanup would search."""
    setup_logging(level=log_level)
    reporter = CLIReporter(console)

    try:
        with AzureClient() as azure_client:
            management_groups = get_management_group_scope(
                azure_client, pseudo_root_management_group
            )
    except AmbaCleanerError as e:
        console.print(f"\n[red bold]Error:[/red bold] {str(e)}")
        sys.exit(1)

    reporter.print_management_groups(pseudo_root_management_group, management_groups)


@cli.command("validate")
@click.option(
    "--subscription-id",
    default=None,
    help="Subscription to report as the one used for API clients",
)
def validate_credentials(subscription_id: Optional[str]):
    """Validate Azure credentials and show the visible subscriptions."""
    setup_logging(level="WARNING")

    try:
        with AzureClient(subscription_id=subscription_id) as azure_client:
            subscription_ids = azure_client.list_subscription_ids()
            default_subscription = subscription_id or (
                subscription_ids[0] if subscription_ids else None
            )
    except AmbaCleanerError as e:
        console.print(f"\n[red bold]Validation Failed:[/red bold] {str(e)}")
        sys.exit(1)

    console.print("\n[green bold]Azure credentials are valid![/green bold]")
    console.print(f"\n  Visible subscriptions: {len(subscription_ids)}")
    if default_subscription:
        console.print(f"  Subscription for API clients: {default_subscription}")
    else:
        console.print(
            "  [yellow]No subscription visible; pass --subscription-id to run a cleanup[/yellow]"
        )
    console.print()


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
