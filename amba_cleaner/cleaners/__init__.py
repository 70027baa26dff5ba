"""
Resource Cleaners
=================

This module provides cleaner implementations for deleting the resources
found by the scanners.

Each cleaner implements:
- Dry-run mode for previewing deletions
- Sequential, in-order deletion with one result per target
- No API call at all for an empty target list
- An explicit failure policy (stop on first failure, or continue)

Available Cleaners
------------------
AlertCleaner, AlertProcessingRuleCleaner, ActionGroupCleaner
    Generic resources deleted by ID.
PolicyAssignmentCleaner
    Policy assignments; always stops on the first failure.
PolicySetDefinitionCleaner, PolicyDefinitionCleaner
    Policy initiatives and definitions.
RoleAssignmentCleaner, ManagedIdentityCleaner
    Remediation identities and their role assignments.
DeploymentCleaner
    Deployment records.

Data Classes
------------
DeleteStatus
    Enum representing the status of a delete operation.
DeleteResult
    Result of a single deletion attempt.
DeleteSummary
    Summary of a batch delete operation.

Example
-------
>>> from amba_cleaner.cleaners import AlertCleaner, DeleteStatus
>>> from amba_cleaner.core import AzureClient
>>>
>>> cleaner = AlertCleaner(AzureClient())
>>> summary = cleaner.delete_batch(alert_ids, dry_run=True)
>>> print(f"Would delete: {summary.dry_run}")

See Also
--------
amba_cleaner.scanners : For finding the resources to delete.
"""

from amba_cleaner.cleaners.base_cleaner import (
    BaseCleaner,
    DeleteResult,
    DeleteStatus,
    DeleteSummary,
)
from amba_cleaner.cleaners.deployment_cleaner import DeploymentCleaner
from amba_cleaner.cleaners.identity_cleaner import (
    ManagedIdentityCleaner,
    RoleAssignmentCleaner,
)
from amba_cleaner.cleaners.policy_cleaner import (
    PolicyAssignmentCleaner,
    PolicyDefinitionCleaner,
    PolicySetDefinitionCleaner,
)
from amba_cleaner.cleaners.resource_cleaner import (
    ActionGroupCleaner,
    AlertCleaner,
    AlertProcessingRuleCleaner,
)

__all__ = [
    "ActionGroupCleaner",
    "AlertCleaner",
    "AlertProcessingRuleCleaner",
    "BaseCleaner",
    "DeleteResult",
    "DeleteStatus",
    "DeleteSummary",
    "DeploymentCleaner",
    "ManagedIdentityCleaner",
    "PolicyAssignmentCleaner",
    "PolicyDefinitionCleaner",
    "PolicySetDefinitionCleaner",
    "RoleAssignmentCleaner",
]
