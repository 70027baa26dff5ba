"""
Deletion target models.

Most resources are deleted by their Azure resource ID, a plain ``str``.
Role assignments, managed identities and deployments need more than an
ID to be deleted, so they get a frozen dataclass each. Frozen dataclasses
compare and hash by value, which is what scanner de-duplication relies on.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Union


@dataclass(frozen=True)
class RoleAssignmentTarget:
    """
    Role assignment created for a policy assignment's identity.

    Attributes:
        role_definition_id: Full ID of the role definition
        object_id: Principal (object) ID the role is assigned to
        scope: Scope the assignment applies to
        id: Full ID of the role assignment
    """

    role_definition_id: str
    object_id: str
    scope: str
    id: str

    @property
    def name(self) -> str:
        """Role assignment name (last segment of the ID)."""
        return self.id.rstrip("/").rsplit("/", 1)[-1]

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> RoleAssignmentTarget:
        """Build a target from a Resource Graph row."""
        return cls(
            role_definition_id=str(record.get("roleDefinitionId", "")),
            object_id=str(record.get("objectId", "")),
            scope=str(record.get("scope", "")),
            id=str(record.get("id", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class ManagedIdentityTarget:
    """
    User assigned managed identity.

    Attributes:
        id: Full resource ID
        name: Identity name
        principal_id: Service principal object ID
        tenant_id: Tenant the identity lives in
        subscription_id: Subscription holding the identity
        resource_group: Resource group holding the identity
    """

    id: str
    name: str
    principal_id: str
    tenant_id: str
    subscription_id: str
    resource_group: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ManagedIdentityTarget:
        """Build a target from a Resource Graph row."""
        return cls(
            id=str(record.get("id", "")),
            name=str(record.get("name", "")),
            principal_id=str(record.get("principalId") or ""),
            tenant_id=str(record.get("tenantId") or ""),
            subscription_id=str(record.get("subscriptionId", "")),
            resource_group=str(record.get("resourceGroup", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class DeploymentTarget:
    """Deployment record at management group scope."""

    management_group_id: str
    name: str
    id: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


DeletionTarget = Union[str, RoleAssignmentTarget, ManagedIdentityTarget, DeploymentTarget]


def target_id(target: DeletionTarget) -> str:
    """Return the resource ID of any deletion target."""
    if isinstance(target, str):
        return target
    return target.id


def target_to_dict(target: DeletionTarget) -> Dict[str, Any]:
    """Serialize any deletion target for reports."""
    if isinstance(target, str):
        return {"id": target}
    return target.to_dict()
