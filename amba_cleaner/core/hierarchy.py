"""
Management Group Hierarchy Module
=================================

Resolves the management group scope that every scanner queries: the
pseudo root management group plus all of its descendant groups.

Functions
---------
flatten_management_groups
    Pre-order flattening of a management group tree into group IDs.
get_management_group_scope
    Fetch the tree from Azure and flatten it.

Example
-------
>>> from amba_cleaner.core.azure_client import AzureClient
>>> from amba_cleaner.core.hierarchy import get_management_group_scope
>>>
>>> scope = get_management_group_scope(AzureClient(), "contoso")
>>> print(scope)
['contoso', 'contoso-platform', 'contoso-landingzones', 'contoso-corp']

Notes
-----
The tree is fetched in a single call with recursive expansion. Children
of other types (subscriptions) appear as leaves and are never added to
the scope.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from azure.core.exceptions import AzureError

from amba_cleaner.core.azure_client import AzureClient
from amba_cleaner.core.exceptions import HierarchyError

# Module logger
logger = logging.getLogger(__name__)

MANAGEMENT_GROUP_TYPE = "Microsoft.Management/managementGroups"


@dataclass(frozen=True)
class ManagementGroupNode:
    """
    Immutable snapshot of one node of the management group tree.

    Attributes:
        id: Management group name (its ID within the tenant)
        type: Azure entity type; subscriptions appear with their own type
        children: Child nodes in the order Azure returned them
        display_name: Friendly name, when known
    """

    id: str
    type: str = MANAGEMENT_GROUP_TYPE
    children: Tuple[ManagementGroupNode, ...] = ()
    display_name: Optional[str] = None

    @property
    def is_management_group(self) -> bool:
        """True for management groups, False for subscriptions."""
        return (self.type or "").rstrip("/").lower().endswith(
            MANAGEMENT_GROUP_TYPE.lower()
        )

    @classmethod
    def from_azure(cls, group: Any) -> ManagementGroupNode:
        """
        Build a node tree from an SDK ``ManagementGroup``.

        Works for both the root ``ManagementGroup`` and the nested
        ``ManagementGroupChildInfo`` objects, which share ``name``,
        ``type``, ``display_name`` and ``children``.
        """
        return cls(
            id=group.name,
            type=group.type or "",
            children=tuple(cls.from_azure(child) for child in group.children or []),
            display_name=getattr(group, "display_name", None),
        )


def flatten_management_groups(node: ManagementGroupNode) -> List[str]:
    """
    Flatten a management group tree into its group IDs, pre-order.

    Parameters
    ----------
    node : ManagementGroupNode
        Root of the tree.

    Returns
    -------
    list of str
        The root followed by every descendant management group. Nodes
        that are not management groups are skipped with their subtree.

    Example
    -------
    >>> tree = ManagementGroupNode("root", children=(
    ...     ManagementGroupNode("A"),
    ...     ManagementGroupNode("sub-1", type="/subscriptions"),
    ...     ManagementGroupNode("B", children=(ManagementGroupNode("C"),)),
    ... ))
    >>> flatten_management_groups(tree)
    ['root', 'A', 'B', 'C']
    """
    if not node.is_management_group:
        return []

    group_ids = [node.id]
    for child in node.children:
        group_ids.extend(flatten_management_groups(child))
    return group_ids


def get_management_group_scope(
    azure_client: AzureClient,
    pseudo_root_management_group: str,
) -> List[str]:
    """
    Fetch the management group tree and return the flattened scope.

    Parameters
    ----------
    azure_client : AzureClient
        Client used to reach the management groups API.
    pseudo_root_management_group : str
        ID of the management group at the top of the cleanup scope.

    Returns
    -------
    list of str
        Management group IDs, pre-order, without duplicates.

    Raises
    ------
    HierarchyError
        If the tree cannot be read or contains no management groups.
        Callers must abort the run; nothing else can be scoped.
    """
    mg_client = azure_client.get_management_groups_client()

    try:
        root = mg_client.management_groups.get(
            group_id=pseudo_root_management_group,
            expand="children",
            recurse=True,
        )
    except AzureError as e:
        raise HierarchyError(
            f"Unable to read management group hierarchy: {e.message or e}",
            management_group_id=pseudo_root_management_group,
            details={"status_code": getattr(e, "status_code", None)},
        )

    scope = list(dict.fromkeys(flatten_management_groups(ManagementGroupNode.from_azure(root))))

    if not scope:
        raise HierarchyError(
            "No management groups found. Make sure you have the proper "
            "permissions and the management group exists.",
            management_group_id=pseudo_root_management_group,
        )

    logger.info(
        f"Found {len(scope)} management group(s) under '{pseudo_root_management_group}'"
    )
    logger.debug(f"Management group scope: {', '.join(scope)}")
    return scope
