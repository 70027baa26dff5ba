"""
Resource Scanners
=================

This module provides one scanner per kind of resource that AMBA deploys.

Each scanner searches the management group scope for resources marked
with the ``_deployed_by_amba`` tag, metadata entry or description and
returns them as deletion targets.

Available Scanners
------------------
AlertScanner
    Metric, activity log and log search alert rules.
AlertProcessingRuleScanner
    Alert processing rules of the notification assets.
ActionGroupScanner
    Action groups of the notification assets.
ResourceGroupScanner
    Resource groups (reported, never deleted).
PolicyAssignmentScanner
    Policy assignments.
PolicySetDefinitionScanner
    Policy initiatives.
PolicyDefinitionScanner
    Policy definitions.
ManagedIdentityScanner
    User assigned managed identities.
RoleAssignmentScanner
    Role assignments of the policy remediation identities.
DeploymentScanner
    ``amba-*`` deployment records.

Example
-------
>>> from amba_cleaner.scanners import AlertScanner
>>> from amba_cleaner.core import AzureClient, get_management_group_scope
>>>
>>> client = AzureClient()
>>> scope = get_management_group_scope(client, "contoso")
>>> result = AlertScanner(client).scan(scope)
>>> print(f"Found {result.count} alerts")

Adding New Scanners
-------------------
Resource Graph backed scanners only need a query::

    from amba_cleaner.core.base_scanner import GraphScanner

    class WorkbookScanner(GraphScanner):
        resource_type = "workbook"
        display_name = "workbooks"
        query = "resources | where type =~ 'Microsoft.Insights/workbooks' ... | project id"

See Also
--------
amba_cleaner.core.base_scanner : Base classes for all scanners.
"""

from amba_cleaner.scanners.alert_scanner import (
    ActionGroupScanner,
    AlertProcessingRuleScanner,
    AlertScanner,
)
from amba_cleaner.scanners.deployment_scanner import DeploymentScanner
from amba_cleaner.scanners.identity_scanner import (
    ManagedIdentityScanner,
    RoleAssignmentScanner,
)
from amba_cleaner.scanners.policy_scanner import (
    PolicyAssignmentScanner,
    PolicyDefinitionScanner,
    PolicySetDefinitionScanner,
)
from amba_cleaner.scanners.resource_group_scanner import ResourceGroupScanner

__all__ = [
    "ActionGroupScanner",
    "AlertProcessingRuleScanner",
    "AlertScanner",
    "DeploymentScanner",
    "ManagedIdentityScanner",
    "PolicyAssignmentScanner",
    "PolicyDefinitionScanner",
    "PolicySetDefinitionScanner",
    "ResourceGroupScanner",
    "RoleAssignmentScanner",
]
