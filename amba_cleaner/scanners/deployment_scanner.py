"""
Scanner for AMBA deployment records.

Deployment records are not indexed by Resource Graph. They are listed
directly, one call per management group, and filtered by name.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from azure.core.exceptions import AzureError

from amba_cleaner.core.base_scanner import BaseScanner
from amba_cleaner.core.exceptions import QueryError
from amba_cleaner.core.targets import DeploymentTarget

# Module logger
logger = logging.getLogger(__name__)

DEPLOYMENT_NAME_PREFIX = "amba-"


class DeploymentScanner(BaseScanner):
    """
    Finds deployment records named ``amba-*`` at management group scope.

    Each deployment belongs to exactly one management group, so no
    de-duplication is needed.
    """

    resource_type = "deployment"
    display_name = "deployments"

    def __init__(self, azure_client) -> None:
        super().__init__(azure_client)
        self._resource_client = None

    @property
    def resource_client(self):
        """Lazy load Resource Manager client."""
        if self._resource_client is None:
            self._resource_client = self.azure_client.get_resource_client()
        return self._resource_client

    def find_targets(self, scope: Sequence[str]) -> List[DeploymentTarget]:
        """List matching deployments in every management group, in scope order."""
        targets: List[DeploymentTarget] = []
        for group_id in scope:
            targets.extend(self.list_group_deployments(group_id))
        return targets

    def list_group_deployments(self, group_id: str) -> List[DeploymentTarget]:
        """
        List the AMBA deployments of a single management group.

        Raises
        ------
        QueryError
            If the deployment listing fails.
        """
        try:
            deployments = [
                DeploymentTarget(
                    management_group_id=group_id,
                    name=deployment.name,
                    id=deployment.id,
                )
                for deployment in self.resource_client.deployments.list_at_management_group_scope(group_id)
                if deployment.name.lower().startswith(DEPLOYMENT_NAME_PREFIX)
            ]
        except AzureError as e:
            raise QueryError(
                f"Failed to list deployments in management group '{group_id}': {e.message or e}",
                resource_type=self.resource_type,
                details={"status_code": getattr(e, "status_code", None)},
            )

        logger.debug(f"{group_id}: {len(deployments)} deployment(s)")
        return deployments
