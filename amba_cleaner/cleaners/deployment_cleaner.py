"""
Cleaner for AMBA deployment records.

Deleting a deployment record removes deployment history only. The
resources it deployed are left untouched.
"""

from __future__ import annotations

from amba_cleaner.cleaners.base_cleaner import BaseCleaner
from amba_cleaner.core.targets import DeploymentTarget


class DeploymentCleaner(BaseCleaner):
    """Deletes deployment records at management group scope."""

    resource_type = "deployment"
    display_name = "deployments"

    def delete_target(self, target: DeploymentTarget) -> None:
        client = self.azure_client.get_resource_client()
        poller = client.deployments.begin_delete_at_management_group_scope(
            group_id=target.management_group_id,
            deployment_name=target.name,
        )
        poller.result()
