"""
Cleaners for AMBA policy assignments, initiatives and definitions.

Assignments must be gone before the definitions they reference can be
deleted, so the assignment cleaner always stops on its first failure.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from amba_cleaner.cleaners.base_cleaner import BaseCleaner
from amba_cleaner.core.exceptions import DeleteError

_DEFINITION_ID_RE = re.compile(
    r"^/(?:providers/Microsoft\.Management/managementGroups/(?P<group>[^/]+)"
    r"|subscriptions/(?P<subscription>[^/]+))"
    r"/providers/Microsoft\.Authorization/policy(?:Set)?Definitions/(?P<name>[^/]+)/?$",
    re.IGNORECASE,
)


def parse_definition_id(definition_id: str) -> Tuple[Optional[str], Optional[str], str]:
    """
    Split a policy (set) definition ID into its scope and name.

    Returns
    -------
    tuple
        ``(management_group_id, subscription_id, name)``; exactly one of
        the first two is set.

    Raises
    ------
    DeleteError
        If the ID is not a custom definition at management group or
        subscription scope.
    """
    match = _DEFINITION_ID_RE.match(definition_id)
    if not match:
        raise DeleteError(
            "Unsupported policy definition ID",
            resource_id=definition_id,
        )
    return match.group("group"), match.group("subscription"), match.group("name")


class PolicyAssignmentCleaner(BaseCleaner):
    """
    Deletes policy assignments.

    A failed assignment deletion always aborts the run, even with
    ``continue_on_error``, because definitions and initiatives cannot be
    removed while an assignment still references them.
    """

    resource_type = "policy_assignment"
    display_name = "policy assignments"
    always_stop_on_error = True

    def delete_target(self, target: str) -> None:
        self.azure_client.get_policy_client().policy_assignments.delete_by_id(target)


class PolicySetDefinitionCleaner(BaseCleaner):
    """Deletes policy initiatives (policy set definitions)."""

    resource_type = "policy_set_definition"
    display_name = "policy set definitions"

    def delete_target(self, target: str) -> None:
        group_id, subscription_id, name = parse_definition_id(target)
        if group_id:
            client = self.azure_client.get_policy_client()
            client.policy_set_definitions.delete_at_management_group(
                policy_set_definition_name=name,
                management_group_id=group_id,
            )
        else:
            client = self.azure_client.get_policy_client(subscription_id)
            client.policy_set_definitions.delete(policy_set_definition_name=name)


class PolicyDefinitionCleaner(BaseCleaner):
    """Deletes policy definitions."""

    resource_type = "policy_definition"
    display_name = "policy definitions"

    def delete_target(self, target: str) -> None:
        group_id, subscription_id, name = parse_definition_id(target)
        if group_id:
            client = self.azure_client.get_policy_client()
            client.policy_definitions.delete_at_management_group(
                policy_definition_name=name,
                management_group_id=group_id,
            )
        else:
            client = self.azure_client.get_policy_client(subscription_id)
            client.policy_definitions.delete(policy_definition_name=name)
