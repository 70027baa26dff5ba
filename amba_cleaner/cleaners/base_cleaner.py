"""
Base cleaner for deleting AMBA resources.

Provides dry-run mode, per-item results, and an explicit failure policy.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from azure.core.exceptions import AzureError, ResourceNotFoundError

from amba_cleaner.core.exceptions import CleanerError, DeleteError
from amba_cleaner.core.targets import DeletionTarget, target_id

# Module logger
logger = logging.getLogger(__name__)


class DeleteStatus(Enum):
    """Status of a delete operation."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    DRY_RUN = "dry_run"


@dataclass
class DeleteResult:
    """
    Result of a single deletion attempt.

    Attributes:
        resource_id: Resource ID of the target
        resource_type: Kind of resource
        status: Result status
        error_message: Error message if failed or skipped
        timestamp: When the operation was attempted
    """

    resource_id: str
    resource_type: str
    status: DeleteStatus
    error_message: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "resource_id": self.resource_id,
            "resource_type": self.resource_type,
            "status": self.status.value,
            "error_message": self.error_message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class DeleteSummary:
    """
    Summary of a batch delete operation for one resource kind.

    Attributes:
        resource_type: Kind of resource deleted
        total: Total number of targets processed
        deleted: Number successfully deleted
        failed: Number that failed to delete
        skipped: Number already gone
        dry_run: Number processed in dry-run mode
        results: Individual results for each target
        start_time: When the operation started
        end_time: When the operation completed
    """

    resource_type: str = ""
    total: int = 0
    deleted: int = 0
    failed: int = 0
    skipped: int = 0
    dry_run: int = 0
    results: List[DeleteResult] = field(default_factory=list)
    start_time: datetime = field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None

    def add_result(self, result: DeleteResult) -> None:
        """Add a result and update counts."""
        self.results.append(result)
        self.total += 1

        if result.status == DeleteStatus.SUCCESS:
            self.deleted += 1
        elif result.status == DeleteStatus.FAILED:
            self.failed += 1
        elif result.status == DeleteStatus.SKIPPED:
            self.skipped += 1
        elif result.status == DeleteStatus.DRY_RUN:
            self.dry_run += 1

    def complete(self) -> None:
        """Mark the operation as complete."""
        self.end_time = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "resource_type": self.resource_type,
            "total": self.total,
            "deleted": self.deleted,
            "failed": self.failed,
            "skipped": self.skipped,
            "dry_run": self.dry_run,
            "results": [r.to_dict() for r in self.results],
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }


class BaseCleaner(ABC):
    """
    Base class for deleting one kind of AMBA resource.

    Targets are deleted one at a time, in the order given. An empty
    target list makes no API call.

    Failure policy: by default the first failed deletion raises
    :class:`DeleteError` and stops the run. With ``continue_on_error``
    the failure is recorded and the next target is processed, unless
    the cleaner sets ``always_stop_on_error``.

    Parameters
    ----------
    azure_client : AzureClient
        Instance of AzureClient for Azure API access.
    continue_on_error : bool, default=False
        Record failures and keep going instead of stopping.
    """

    resource_type: str = ""
    display_name: str = ""
    always_stop_on_error: bool = False

    # Common status codes and user-friendly messages
    ERROR_MESSAGES = {
        400: "Azure rejected the request",
        403: "Insufficient permissions to delete the resource",
        409: "Resource is still referenced by another resource",
        429: "Request throttled by Azure Resource Manager",
    }

    def __init__(self, azure_client, continue_on_error: bool = False) -> None:
        self.azure_client = azure_client
        self.continue_on_error = continue_on_error

    @property
    def stops_on_error(self) -> bool:
        """True if a failed deletion aborts the batch."""
        return self.always_stop_on_error or not self.continue_on_error

    @abstractmethod
    def delete_target(self, target: DeletionTarget) -> None:
        """
        Issue the Azure deletion call for one target.

        Implementations wait for long-running operations to finish and
        let Azure SDK exceptions propagate.
        """
        pass

    def _error_message(self, error: Exception) -> str:
        status_code = getattr(error, "status_code", None)
        detail = getattr(error, "message", None) or str(error)
        friendly = self.ERROR_MESSAGES.get(status_code)
        return f"{friendly}: {detail}" if friendly else detail

    def delete(self, target: DeletionTarget, dry_run: bool = False) -> DeleteResult:
        """
        Delete a single target.

        Args:
            target: Resource ID or target record
            dry_run: If True, only simulate deletion

        Returns:
            DeleteResult with operation status
        """
        resource_id = target_id(target)

        if dry_run:
            return DeleteResult(
                resource_id=resource_id,
                resource_type=self.resource_type,
                status=DeleteStatus.DRY_RUN,
            )

        try:
            self.delete_target(target)
        except ResourceNotFoundError:
            return DeleteResult(
                resource_id=resource_id,
                resource_type=self.resource_type,
                status=DeleteStatus.SKIPPED,
                error_message="Resource no longer exists",
            )
        except (AzureError, CleanerError) as e:
            return DeleteResult(
                resource_id=resource_id,
                resource_type=self.resource_type,
                status=DeleteStatus.FAILED,
                error_message=self._error_message(e),
            )

        return DeleteResult(
            resource_id=resource_id,
            resource_type=self.resource_type,
            status=DeleteStatus.SUCCESS,
        )

    def delete_batch(
        self,
        targets: Sequence[DeletionTarget],
        dry_run: bool = False,
        progress_callback: Optional[Callable[[DeleteResult], None]] = None,
    ) -> DeleteSummary:
        """
        Delete multiple targets sequentially.

        Args:
            targets: Targets returned by the matching scanner
            dry_run: If True, only simulate deletion
            progress_callback: Optional callback called after each deletion

        Returns:
            DeleteSummary with results

        Raises:
            DeleteError: If a deletion fails and the cleaner stops on error
        """
        summary = DeleteSummary(resource_type=self.resource_type)

        if not targets:
            logger.debug(f"No {self.display_name} to delete")
            summary.complete()
            return summary

        verb = "Simulating deletion of" if dry_run else "Deleting"
        logger.info(f"-- {verb} {len(targets)} {self.display_name} ...")

        for target in targets:
            result = self.delete(target, dry_run=dry_run)
            summary.add_result(result)

            if result.status == DeleteStatus.FAILED:
                logger.error(f"Failed to delete {result.resource_id}: {result.error_message}")
            else:
                logger.debug(f"{result.status.value}: {result.resource_id}")

            if progress_callback:
                progress_callback(result)

            if result.status == DeleteStatus.FAILED and self.stops_on_error:
                summary.complete()
                error = DeleteError(
                    f"Failed to delete {self.display_name}; stopping",
                    resource_id=result.resource_id,
                    resource_type=self.resource_type,
                    details={
                        "error": result.error_message,
                        "deleted_before_failure": summary.deleted,
                    },
                )
                error.summary = summary
                raise error

        summary.complete()
        logger.info(
            f"-- {self.display_name.capitalize()}: {summary.deleted} deleted, "
            f"{summary.failed} failed, {summary.skipped} skipped, "
            f"{summary.dry_run} simulated"
        )
        return summary

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"{self.__class__.__name__}(resource_type='{self.resource_type}', "
            f"continue_on_error={self.continue_on_error})"
        )
