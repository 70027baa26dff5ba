"""
Cleaners for AMBA role assignments and user assigned managed identities.

Role assignments are removed before the identities they were granted to.
"""

from __future__ import annotations

import logging

from amba_cleaner.cleaners.base_cleaner import BaseCleaner
from amba_cleaner.core.targets import ManagedIdentityTarget, RoleAssignmentTarget

# Module logger
logger = logging.getLogger(__name__)


class RoleAssignmentCleaner(BaseCleaner):
    """Deletes role assignments at the scope they were created on."""

    resource_type = "role_assignment"
    display_name = "role assignments"

    def delete_target(self, target: RoleAssignmentTarget) -> None:
        logger.debug(
            f"Removing role {target.role_definition_id} from {target.object_id} "
            f"at {target.scope}"
        )
        self.azure_client.get_authorization_client().role_assignments.delete(
            scope=target.scope,
            role_assignment_name=target.name,
        )


class ManagedIdentityCleaner(BaseCleaner):
    """Deletes user assigned managed identities."""

    resource_type = "user_assigned_managed_identity"
    display_name = "user assigned managed identities"

    def delete_target(self, target: ManagedIdentityTarget) -> None:
        client = self.azure_client.get_msi_client(target.subscription_id)
        client.user_assigned_identities.delete(
            resource_group_name=target.resource_group,
            resource_name=target.name,
        )
