"""
Base Scanner Module
===================

Provides the abstract base classes for all AMBA resource scanners.

A scanner finds the resources of one kind that were deployed by AMBA
within a management group scope and returns them as deletion targets.

Classes
-------
ScanResult
    Data class containing results from a scan operation.
BaseScanner
    Abstract base class for resource scanners.
GraphScanner
    Base class for scanners backed by a Resource Graph query.

Example
-------
>>> from amba_cleaner.core.base_scanner import GraphScanner
>>>
>>> class WorkbookScanner(GraphScanner):
...     resource_type = "workbook"
...     display_name = "workbooks"
...     query = (
...         "resources | where type =~ 'Microsoft.Insights/workbooks' "
...         "and tags['_deployed_by_amba'] =~ 'True' | project id"
...     )

Notes
-----
Scanners do not catch query failures. A failed query means the cleanup
cannot know what exists, so the error propagates and stops the run.

See Also
--------
BatchedQueryExecutor : Runs the queries.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from amba_cleaner.core.query_executor import BatchedQueryExecutor
from amba_cleaner.core.targets import DeletionTarget, target_to_dict

# Module logger
logger = logging.getLogger(__name__)


def unique_targets(targets: Iterable[DeletionTarget]) -> List[DeletionTarget]:
    """
    Remove duplicate targets, keeping the first occurrence.

    Parameters
    ----------
    targets : iterable
        Resource IDs or frozen target records.

    Returns
    -------
    list
        Targets in first-seen order, each exactly once.
    """
    return list(dict.fromkeys(targets))


@dataclass
class ScanResult:
    """
    Data class representing the results of a resource scan.

    Parameters
    ----------
    resource_type : str
        Kind of resource scanned (e.g., 'alert', 'policy_assignment').
    targets : list
        Deletion targets found, de-duplicated where the scanner requires it.
    scope_size : int
        Number of management groups that were searched.
    scan_time : datetime, optional
        When the scan was performed (defaults to current time).

    Examples
    --------
    >>> result = ScanResult(
    ...     resource_type="alert",
    ...     targets=["/subscriptions/.../metricAlerts/cpu"],
    ...     scope_size=4,
    ... )
    >>> result.count
    1
    """

    resource_type: str
    targets: List[DeletionTarget]
    scope_size: int
    scan_time: datetime = field(default_factory=datetime.utcnow)

    @property
    def count(self) -> int:
        """Number of targets found."""
        return len(self.targets)

    @property
    def has_targets(self) -> bool:
        """True if at least one target was found."""
        return self.count > 0

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert scan result to a dictionary for serialization.

        Returns
        -------
        dict
            Dictionary representation suitable for JSON serialization.
        """
        return {
            "resource_type": self.resource_type,
            "count": self.count,
            "scope_size": self.scope_size,
            "targets": [target_to_dict(t) for t in self.targets],
            "scan_time": self.scan_time.isoformat(),
        }

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"ScanResult(resource_type='{self.resource_type}', "
            f"count={self.count}, scope_size={self.scope_size})"
        )


class BaseScanner(ABC):
    """
    Abstract base class for all resource scanners.

    Parameters
    ----------
    azure_client : AzureClient
        Instance of AzureClient for Azure API access.

    Attributes
    ----------
    resource_type : str
        Identifier of the resource kind, lowercase with underscores.
    display_name : str
        Plural, human-readable name used in log lines.
    """

    resource_type: str = ""
    display_name: str = ""

    def __init__(self, azure_client) -> None:
        self.azure_client = azure_client
        logger.debug(f"Initialized {self.__class__.__name__}")

    @abstractmethod
    def find_targets(self, scope: Sequence[str]) -> List[DeletionTarget]:
        """
        Find the deletion targets of this kind within the scope.

        Parameters
        ----------
        scope : sequence of str
            Management group IDs.

        Returns
        -------
        list
            Deletion targets.
        """
        pass

    def scan(self, scope: Sequence[str]) -> ScanResult:
        """
        Perform a scan, log the count found and return the result.

        Parameters
        ----------
        scope : sequence of str
            Management group IDs.

        Returns
        -------
        ScanResult
            Targets found within the scope.
        """
        logger.debug(f"Searching for {self.display_name} in {len(scope)} management group(s)")
        targets = self.find_targets(scope)

        result = ScanResult(
            resource_type=self.resource_type,
            targets=targets,
            scope_size=len(scope),
        )
        logger.info(f"- Found {result.count} {self.display_name}")
        return result

    def __repr__(self) -> str:
        """Return string representation."""
        return f"{self.__class__.__name__}(resource_type='{self.resource_type}')"


class GraphScanner(BaseScanner):
    """
    Scanner whose targets come from a fixed Resource Graph query.

    Subclasses set ``query`` and, when the target is richer than a
    resource ID, override :meth:`to_target`. Results are de-duplicated
    because paged results may repeat rows.

    Parameters
    ----------
    azure_client : AzureClient
        Instance of AzureClient for Azure API access.
    executor : BatchedQueryExecutor, optional
        Shared executor. A new one is created when omitted.
    """

    query: str = ""

    def __init__(
        self,
        azure_client,
        executor: Optional[BatchedQueryExecutor] = None,
    ) -> None:
        super().__init__(azure_client)
        self.executor = executor or BatchedQueryExecutor(azure_client)

    def to_target(self, record: Mapping[str, Any]) -> DeletionTarget:
        """Convert a Resource Graph row into a deletion target."""
        return record["id"]

    def find_targets(self, scope: Sequence[str]) -> List[DeletionTarget]:
        """Run the query over the scope and return unique targets."""
        records = self.executor.execute(self.query, scope)
        return unique_targets(self.to_target(record) for record in records)
