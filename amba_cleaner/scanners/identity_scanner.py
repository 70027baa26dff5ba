"""
Scanners for the identities AMBA creates for its policy remediation.

User assigned managed identities are tagged. Role assignments cannot be
tagged, so AMBA writes a fixed description on them instead.
"""

from __future__ import annotations

from typing import Any, Mapping

from amba_cleaner.core.base_scanner import GraphScanner
from amba_cleaner.core.targets import ManagedIdentityTarget, RoleAssignmentTarget

MANAGED_IDENTITIES_QUERY = (
    "resources "
    "| where type =~ 'Microsoft.ManagedIdentity/userAssignedIdentities' "
    "and tags['_deployed_by_amba'] =~ 'True' "
    "| project id, name, principalId = tostring(properties.principalId), "
    "tenantId, subscriptionId, resourceGroup"
)

ROLE_ASSIGNMENTS_QUERY = (
    "authorizationresources "
    "| where type =~ 'Microsoft.Authorization/roleAssignments' "
    "and tostring(properties.description) == '_deployed_by_amba' "
    "| project roleDefinitionId = tostring(properties.roleDefinitionId), "
    "objectId = tostring(properties.principalId), "
    "scope = tostring(properties.scope), id"
)


class ManagedIdentityScanner(GraphScanner):
    """Finds user assigned managed identities tagged by AMBA."""

    resource_type = "user_assigned_managed_identity"
    display_name = "user assigned managed identities"
    query = MANAGED_IDENTITIES_QUERY

    def to_target(self, record: Mapping[str, Any]) -> ManagedIdentityTarget:
        return ManagedIdentityTarget.from_record(record)


class RoleAssignmentScanner(GraphScanner):
    """Finds role assignments whose description is exactly ``_deployed_by_amba``."""

    resource_type = "role_assignment"
    display_name = "role assignments"
    query = ROLE_ASSIGNMENTS_QUERY

    def to_target(self, record: Mapping[str, Any]) -> RoleAssignmentTarget:
        return RoleAssignmentTarget.from_record(record)
