"""
Scanners for AMBA policy items.

Policy assignments, initiatives (policy set definitions) and policy
definitions carry no tags. AMBA marks them through a
``_deployed_by_amba`` entry in their metadata, which is read from the
properties blob.
"""

from __future__ import annotations

from amba_cleaner.core.base_scanner import GraphScanner

POLICY_ASSIGNMENTS_QUERY = (
    "policyresources "
    "| where type =~ 'Microsoft.Authorization/policyAssignments' "
    "| extend metadata = parse_json(properties.metadata) "
    "| where tostring(metadata._deployed_by_amba) =~ 'True' "
    "| project id"
)

POLICY_SET_DEFINITIONS_QUERY = (
    "policyresources "
    "| where type =~ 'Microsoft.Authorization/policySetDefinitions' "
    "| extend metadata = parse_json(properties.metadata) "
    "| where tostring(metadata._deployed_by_amba) =~ 'True' "
    "| project id"
)

POLICY_DEFINITIONS_QUERY = (
    "policyresources "
    "| where type =~ 'Microsoft.Authorization/policyDefinitions' "
    "| extend metadata = parse_json(properties.metadata) "
    "| where tostring(metadata._deployed_by_amba) =~ 'True' "
    "| project id"
)


class PolicyAssignmentScanner(GraphScanner):
    """Finds policy assignments whose metadata marks them as AMBA's."""

    resource_type = "policy_assignment"
    display_name = "policy assignments"
    query = POLICY_ASSIGNMENTS_QUERY


class PolicySetDefinitionScanner(GraphScanner):
    """Finds policy initiatives whose metadata marks them as AMBA's."""

    resource_type = "policy_set_definition"
    display_name = "policy set definitions"
    query = POLICY_SET_DEFINITIONS_QUERY


class PolicyDefinitionScanner(GraphScanner):
    """Finds policy definitions whose metadata marks them as AMBA's."""

    resource_type = "policy_definition"
    display_name = "policy definitions"
    query = POLICY_DEFINITIONS_QUERY
