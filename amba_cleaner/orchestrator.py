"""
Cleanup Orchestrator Module
===========================

Drives a complete cleanup run: resolve the management group scope, run
the scanners the requested cleanup scope needs, ask for confirmation
once, then run the cleaners in dependency order.

Classes
-------
CleanupScope
    Which group of AMBA resources to clean up.
ConfirmDecision
    Answer returned by the confirmation callback.
CleanupStatus
    How a run ended.
CleanupReport
    Everything found and deleted during a run.
CleanupOrchestrator
    Runs the scan, confirm and delete sequence.

Example
-------
>>> from amba_cleaner.core import AzureClient
>>> from amba_cleaner.orchestrator import CleanupOrchestrator, CleanupScope
>>>
>>> orchestrator = CleanupOrchestrator(AzureClient(), dry_run=True)
>>> report = orchestrator.run("contoso", CleanupScope.ALERTS)
>>> print(f"{report.total_found} alerts would be deleted")

Deletion Order
--------------
Policy assignments go before the initiatives and definitions they
reference. Role assignments go before the identities they were granted
to. Alert processing rules go before the action groups they route to.

Notes
-----
Hierarchy and query failures propagate: without a complete picture of
what exists nothing may be deleted. A failed deletion stops the run and
is recorded in the report; what was already deleted stays deleted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from amba_cleaner.cleaners import (
    ActionGroupCleaner,
    AlertCleaner,
    AlertProcessingRuleCleaner,
    BaseCleaner,
    DeleteResult,
    DeleteSummary,
    DeploymentCleaner,
    ManagedIdentityCleaner,
    PolicyAssignmentCleaner,
    PolicyDefinitionCleaner,
    PolicySetDefinitionCleaner,
    RoleAssignmentCleaner,
)
from amba_cleaner.core.azure_client import AzureClient
from amba_cleaner.core.base_scanner import BaseScanner, GraphScanner, ScanResult
from amba_cleaner.core.exceptions import DeleteError
from amba_cleaner.core.hierarchy import get_management_group_scope
from amba_cleaner.core.query_executor import BatchedQueryExecutor
from amba_cleaner.scanners import (
    ActionGroupScanner,
    AlertProcessingRuleScanner,
    AlertScanner,
    DeploymentScanner,
    ManagedIdentityScanner,
    PolicyAssignmentScanner,
    PolicyDefinitionScanner,
    PolicySetDefinitionScanner,
    ResourceGroupScanner,
    RoleAssignmentScanner,
)

# Module logger
logger = logging.getLogger(__name__)


class CleanupScope(str, Enum):
    """Which group of AMBA resources a run cleans up."""

    ALL = "All"
    DEPLOYMENTS = "Deployments"
    NOTIFICATION_ASSETS = "NotificationAssets"
    ALERTS = "Alerts"
    POLICY_ITEMS = "PolicyItems"

    @classmethod
    def parse(cls, value: str) -> CleanupScope:
        """
        Parse a cleanup scope name, ignoring case.

        Raises
        ------
        ValueError
            If the name matches no scope.
        """
        for scope in cls:
            if scope.value.lower() == value.strip().lower():
                return scope
        choices = ", ".join(scope.value for scope in cls)
        raise ValueError(f"Unknown cleanup scope '{value}' (expected one of: {choices})")


class ConfirmDecision(Enum):
    """Answer to the confirmation prompt."""

    ACCEPT = "accept"
    DECLINE = "decline"
    PREVIEW = "preview"


class CleanupStatus(Enum):
    """How a cleanup run ended."""

    COMPLETED = "completed"
    NOTHING_FOUND = "nothing_found"
    DECLINED = "declined"
    DRY_RUN = "dry_run"
    FAILED = "failed"


ConfirmCallback = Callable[[str, List[ScanResult]], ConfirmDecision]


@dataclass(frozen=True)
class CleanupPlan:
    """
    Scanners to run and cleaners to run, by resource type, in order.

    Attributes:
        description: What the run will do, shown when asking to confirm
        scan_order: Resource types to scan
        delete_order: Resource types to delete, dependency-safe
    """

    description: str
    scan_order: Tuple[str, ...]
    delete_order: Tuple[str, ...]


# Resource groups are scanned for visibility only and never deleted
CLEANUP_PLANS: Dict[CleanupScope, CleanupPlan] = {
    CleanupScope.ALL: CleanupPlan(
        description=(
            "Delete all AMBA alerts, policy assignments, policy set definitions, "
            "policy definitions, role assignments, user assigned managed identities, "
            "alert processing rules and action groups"
        ),
        scan_order=(
            "alert",
            "resource_group",
            "policy_assignment",
            "policy_set_definition",
            "policy_definition",
            "user_assigned_managed_identity",
            "role_assignment",
            "alert_processing_rule",
            "action_group",
        ),
        delete_order=(
            "alert",
            "policy_assignment",
            "policy_set_definition",
            "policy_definition",
            "role_assignment",
            "user_assigned_managed_identity",
            "alert_processing_rule",
            "action_group",
        ),
    ),
    CleanupScope.DEPLOYMENTS: CleanupPlan(
        description="Delete AMBA deployment history records",
        scan_order=("deployment",),
        delete_order=("deployment",),
    ),
    CleanupScope.NOTIFICATION_ASSETS: CleanupPlan(
        description="Delete AMBA alert processing rules and action groups",
        scan_order=("action_group", "alert_processing_rule"),
        delete_order=("alert_processing_rule", "action_group"),
    ),
    CleanupScope.ALERTS: CleanupPlan(
        description="Delete AMBA metric, activity log and log search alerts",
        scan_order=("alert",),
        delete_order=("alert",),
    ),
    CleanupScope.POLICY_ITEMS: CleanupPlan(
        description=(
            "Delete AMBA policy assignments, policy set definitions, "
            "policy definitions and role assignments"
        ),
        scan_order=(
            "policy_assignment",
            "policy_set_definition",
            "policy_definition",
            "role_assignment",
        ),
        delete_order=(
            "policy_assignment",
            "policy_set_definition",
            "policy_definition",
            "role_assignment",
        ),
    ),
}

SCANNER_CLASSES: Dict[str, Type[BaseScanner]] = {
    scanner.resource_type: scanner
    for scanner in (
        AlertScanner,
        ResourceGroupScanner,
        PolicyAssignmentScanner,
        PolicySetDefinitionScanner,
        PolicyDefinitionScanner,
        ManagedIdentityScanner,
        RoleAssignmentScanner,
        AlertProcessingRuleScanner,
        ActionGroupScanner,
        DeploymentScanner,
    )
}

CLEANER_CLASSES: Dict[str, Type[BaseCleaner]] = {
    cleaner.resource_type: cleaner
    for cleaner in (
        AlertCleaner,
        PolicyAssignmentCleaner,
        PolicySetDefinitionCleaner,
        PolicyDefinitionCleaner,
        RoleAssignmentCleaner,
        ManagedIdentityCleaner,
        AlertProcessingRuleCleaner,
        ActionGroupCleaner,
        DeploymentCleaner,
    )
}


@dataclass
class CleanupReport:
    """
    Everything found and deleted during one cleanup run.

    Parameters
    ----------
    cleanup_scope : CleanupScope
        Requested cleanup scope.
    pseudo_root_management_group : str
        Top of the management group scope.
    dry_run : bool
        Whether deletions were simulated.
    management_groups : list of str
        Flattened management group scope.
    scan_results : list of ScanResult
        One result per scanner, in scan order.
    delete_summaries : list of DeleteSummary
        One summary per cleaner that ran, in deletion order.
    status : CleanupStatus
        How the run ended.
    error : dict, optional
        Serialized error that stopped the run.
    """

    cleanup_scope: CleanupScope
    pseudo_root_management_group: str
    dry_run: bool = False
    management_groups: List[str] = field(default_factory=list)
    scan_results: List[ScanResult] = field(default_factory=list)
    delete_summaries: List[DeleteSummary] = field(default_factory=list)
    status: CleanupStatus = CleanupStatus.COMPLETED
    error: Optional[Dict[str, Any]] = None
    start_time: datetime = field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None

    @property
    def total_found(self) -> int:
        """Targets found by all scanners."""
        return sum(result.count for result in self.scan_results)

    @property
    def any_found(self) -> bool:
        """True if any scanner found at least one target."""
        return any(result.has_targets for result in self.scan_results)

    @property
    def total_deleted(self) -> int:
        """Targets actually deleted."""
        return sum(summary.deleted for summary in self.delete_summaries)

    @property
    def total_failed(self) -> int:
        """Targets that failed to delete."""
        return sum(summary.failed for summary in self.delete_summaries)

    @property
    def failed(self) -> bool:
        """True if the run stopped on an error or recorded failures."""
        return self.status == CleanupStatus.FAILED or self.total_failed > 0

    def get_scan_result(self, resource_type: str) -> Optional[ScanResult]:
        """Return the scan result for a resource type, if it was scanned."""
        for result in self.scan_results:
            if result.resource_type == resource_type:
                return result
        return None

    def complete(self) -> None:
        """Mark the run as complete."""
        self.end_time = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "cleanup_scope": self.cleanup_scope.value,
            "pseudo_root_management_group": self.pseudo_root_management_group,
            "dry_run": self.dry_run,
            "status": self.status.value,
            "management_groups": self.management_groups,
            "total_found": self.total_found,
            "total_deleted": self.total_deleted,
            "total_failed": self.total_failed,
            "scan_results": [r.to_dict() for r in self.scan_results],
            "delete_summaries": [s.to_dict() for s in self.delete_summaries],
            "error": self.error,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }


class CleanupOrchestrator:
    """
    Runs one cleanup: scope, scan, confirm, delete.

    Parameters
    ----------
    azure_client : AzureClient
        Client shared by every scanner and cleaner.
    confirm : callable, optional
        Called once per run with the plan description and the scan
        results about to be deleted. Returns a :class:`ConfirmDecision`.
        When omitted every run is accepted.
    dry_run : bool, default=False
        Scan and log as usual but make no deletion call.
    continue_on_error : bool, default=False
        Passed to every cleaner. Policy assignments stop on error anyway.
    progress_callback : callable, optional
        Called with each :class:`DeleteResult`.
    scanner_classes : dict, optional
        Scanner class per resource type. Defaults to ``SCANNER_CLASSES``.
    cleaner_classes : dict, optional
        Cleaner class per resource type. Defaults to ``CLEANER_CLASSES``.
    """

    def __init__(
        self,
        azure_client: AzureClient,
        confirm: Optional[ConfirmCallback] = None,
        dry_run: bool = False,
        continue_on_error: bool = False,
        progress_callback: Optional[Callable[[DeleteResult], None]] = None,
        scanner_classes: Optional[Dict[str, Type[BaseScanner]]] = None,
        cleaner_classes: Optional[Dict[str, Type[BaseCleaner]]] = None,
    ) -> None:
        self.azure_client = azure_client
        self.confirm = confirm
        self.dry_run = dry_run
        self.continue_on_error = continue_on_error
        self.progress_callback = progress_callback
        self.scanner_classes = scanner_classes or SCANNER_CLASSES
        self.cleaner_classes = cleaner_classes or CLEANER_CLASSES
        self._executor: Optional[BatchedQueryExecutor] = None

    @property
    def executor(self) -> BatchedQueryExecutor:
        """Query executor shared by every Resource Graph scanner."""
        if self._executor is None:
            self._executor = BatchedQueryExecutor(self.azure_client)
        return self._executor

    def create_scanner(self, resource_type: str) -> BaseScanner:
        """Create the scanner registered for a resource type."""
        scanner_class = self.scanner_classes[resource_type]
        if issubclass(scanner_class, GraphScanner):
            return scanner_class(self.azure_client, executor=self.executor)
        return scanner_class(self.azure_client)

    def create_cleaner(self, resource_type: str) -> BaseCleaner:
        """Create the cleaner registered for a resource type."""
        cleaner_class = self.cleaner_classes[resource_type]
        return cleaner_class(self.azure_client, continue_on_error=self.continue_on_error)

    def _decide(self, plan: CleanupPlan, to_delete: List[ScanResult]) -> ConfirmDecision:
        if self.dry_run or self.confirm is None:
            return ConfirmDecision.ACCEPT
        return self.confirm(plan.description, to_delete)

    def run(
        self,
        pseudo_root_management_group: str,
        cleanup_scope: CleanupScope,
    ) -> CleanupReport:
        """
        Run a cleanup.

        Parameters
        ----------
        pseudo_root_management_group : str
            Top of the management group scope.
        cleanup_scope : CleanupScope
            Which resources to clean up.

        Returns
        -------
        CleanupReport
            What was found and deleted. A deletion failure is recorded
            with status ``FAILED``; later cleaners do not run.

        Raises
        ------
        HierarchyError
            If the management group scope is empty or unreadable.
        QueryError
            If a scan fails. Nothing is deleted in that case.
        """
        plan = CLEANUP_PLANS[cleanup_scope]
        report = CleanupReport(
            cleanup_scope=cleanup_scope,
            pseudo_root_management_group=pseudo_root_management_group,
            dry_run=self.dry_run,
        )

        logger.info(
            f"Starting '{cleanup_scope.value}' cleanup under "
            f"'{pseudo_root_management_group}'"
            + (" (dry run)" if self.dry_run else "")
        )
        report.management_groups = get_management_group_scope(
            self.azure_client, pseudo_root_management_group
        )

        logger.info("Gathering resources to delete...")
        for resource_type in plan.scan_order:
            scanner = self.create_scanner(resource_type)
            report.scan_results.append(scanner.scan(report.management_groups))

        to_delete = [report.get_scan_result(rt) for rt in plan.delete_order]
        if not any(result.has_targets for result in to_delete):
            logger.info("No AMBA resources found to delete")
            report.status = CleanupStatus.NOTHING_FOUND
            report.complete()
            return report

        dry_run = self.dry_run
        decision = self._decide(plan, to_delete)
        if decision == ConfirmDecision.DECLINE:
            logger.info("Cleanup declined; nothing was deleted")
            report.status = CleanupStatus.DECLINED
            report.complete()
            return report
        if decision == ConfirmDecision.PREVIEW:
            dry_run = True
            report.dry_run = True

        try:
            for result in to_delete:
                cleaner = self.create_cleaner(result.resource_type)
                report.delete_summaries.append(
                    cleaner.delete_batch(
                        result.targets,
                        dry_run=dry_run,
                        progress_callback=self.progress_callback,
                    )
                )
        except DeleteError as e:
            partial = getattr(e, "summary", None)
            if partial is not None:
                report.delete_summaries.append(partial)
            logger.error(f"Cleanup stopped: {e}")
            report.status = CleanupStatus.FAILED
            report.error = e.to_dict()
            report.complete()
            return report

        report.status = CleanupStatus.DRY_RUN if dry_run else CleanupStatus.COMPLETED
        report.complete()
        logger.info(
            f"Cleanup {report.status.value}: {report.total_deleted} deleted, "
            f"{report.total_failed} failed"
        )
        return report
