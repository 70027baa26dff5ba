"""
Cleaners for AMBA resources deleted by resource ID.

Alert rules, alert processing rules and action groups have no dedicated
client in this tool; they are deleted through the generic Resource
Manager API, which needs an API version per resource type.
"""

from __future__ import annotations

import logging

from azure.mgmt.core.tools import parse_resource_id

from amba_cleaner.cleaners.base_cleaner import BaseCleaner

# Module logger
logger = logging.getLogger(__name__)

# API versions keyed by lowercase "<namespace>/<type>"
API_VERSIONS = {
    "microsoft.insights/metricalerts": "2018-03-01",
    "microsoft.insights/activitylogalerts": "2020-10-01",
    "microsoft.insights/scheduledqueryrules": "2023-03-15-preview",
    "microsoft.alertsmanagement/actionrules": "2021-08-08",
    "microsoft.insights/actiongroups": "2023-01-01",
}
DEFAULT_API_VERSION = "2021-04-01"


def api_version_for(resource_id: str) -> str:
    """
    Pick the API version used to delete a resource.

    Example
    -------
    >>> api_version_for(
    ...     "/subscriptions/s/resourceGroups/rg/providers/Microsoft.Insights/metricAlerts/cpu"
    ... )
    '2018-03-01'
    """
    parts = parse_resource_id(resource_id)
    resource_type = f"{parts.get('namespace', '')}/{parts.get('type', '')}".lower()
    return API_VERSIONS.get(resource_type, DEFAULT_API_VERSION)


class ResourceCleaner(BaseCleaner):
    """Deletes resources by ID through the generic Resource Manager API."""

    resource_type = "resource"
    display_name = "resources"

    def delete_target(self, target: str) -> None:
        subscription_id = parse_resource_id(target).get("subscription")
        client = self.azure_client.get_resource_client(subscription_id)
        api_version = api_version_for(target)

        logger.debug(f"Deleting {target} (api-version {api_version})")
        poller = client.resources.begin_delete_by_id(target, api_version=api_version)
        poller.result()


class AlertCleaner(ResourceCleaner):
    """Deletes metric, activity log and log search alert rules."""

    resource_type = "alert"
    display_name = "alerts"


class AlertProcessingRuleCleaner(ResourceCleaner):
    """Deletes alert processing rules."""

    resource_type = "alert_processing_rule"
    display_name = "alert processing rules"


class ActionGroupCleaner(ResourceCleaner):
    """Deletes action groups."""

    resource_type = "action_group"
    display_name = "action groups"
