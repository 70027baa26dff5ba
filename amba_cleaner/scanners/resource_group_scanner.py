"""
Scanner for resource groups tagged by AMBA.

Resource groups are reported for visibility only. They may hold
resources AMBA did not create, so they are never deleted automatically
and are left for manual review.
"""

from __future__ import annotations

from amba_cleaner.core.base_scanner import GraphScanner

RESOURCE_GROUPS_QUERY = (
    "resourcecontainers "
    "| where type =~ 'Microsoft.Resources/subscriptions/resourceGroups' "
    "and tags['_deployed_by_amba'] =~ 'True' "
    "| project id"
)


class ResourceGroupScanner(GraphScanner):
    """Finds resource groups tagged by AMBA."""

    resource_type = "resource_group"
    display_name = "resource groups"
    query = RESOURCE_GROUPS_QUERY
