"""
Scanners for AMBA alert rules and notification assets.

Covers metric, activity log and scheduled query alert rules, plus the
notification assets (alert processing rules and action groups) that
route their notifications.
"""

from __future__ import annotations

from amba_cleaner.core.base_scanner import GraphScanner

ALERTS_QUERY = (
    "resources "
    "| where type in~ ('Microsoft.Insights/metricAlerts', "
    "'Microsoft.Insights/activityLogAlerts', "
    "'Microsoft.Insights/scheduledQueryRules') "
    "and tags['_deployed_by_amba'] =~ 'True' "
    "| project id"
)

ALERT_PROCESSING_RULES_QUERY = (
    "resources "
    "| where type =~ 'Microsoft.AlertsManagement/actionRules' "
    "and name startswith 'apr-AMBA-' "
    "and properties.description startswith 'AMBA Notification Assets - ' "
    "and tags['_deployed_by_amba'] =~ 'True' "
    "| project id"
)

ACTION_GROUPS_QUERY = (
    "resources "
    "| where type =~ 'Microsoft.Insights/actionGroups' "
    "and tags['_deployed_by_amba'] =~ 'True' "
    "| project id"
)


class AlertScanner(GraphScanner):
    """Finds metric, activity log and log search alert rules tagged by AMBA."""

    resource_type = "alert"
    display_name = "metric, activity log and log search alerts"
    query = ALERTS_QUERY


class AlertProcessingRuleScanner(GraphScanner):
    """Finds the alert processing rules AMBA created for notification routing."""

    resource_type = "alert_processing_rule"
    display_name = "alert processing rules"
    query = ALERT_PROCESSING_RULES_QUERY


class ActionGroupScanner(GraphScanner):
    """Finds action groups tagged by AMBA."""

    resource_type = "action_group"
    display_name = "action groups"
    query = ACTION_GROUPS_QUERY
