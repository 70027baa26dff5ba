"""
Azure Client Module
===================

Provides a wrapper around the Azure SDK for managing credentials and
service clients with built-in retry settings and per-subscription caching.

This module implements the Azure client layer of the application
architecture, handling all direct construction of Azure SDK clients.

Classes
-------
AzureClient
    Main client class for Azure operations.

Example
-------
>>> from amba_cleaner.core.azure_client import AzureClient
>>>
>>> client = AzureClient(subscription_id="00000000-0000-0000-0000-000000000000")
>>> client.validate_credentials()
>>>
>>> graph = client.get_resource_graph_client()
>>> mg = client.get_management_groups_client()

Notes
-----
Service clients are created on first access and cached for subsequent
calls. Clients bound to a subscription are cached per subscription.

See Also
--------
azure.identity : Credential providers.
azure.mgmt.resourcegraph : Resource Graph client.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from azure.core.exceptions import AzureError, ClientAuthenticationError
from azure.identity import DefaultAzureCredential
from azure.mgmt.authorization import AuthorizationManagementClient
from azure.mgmt.managementgroups import ManagementGroupsAPI
from azure.mgmt.msi import ManagedServiceIdentityClient
from azure.mgmt.resource import (
    PolicyClient,
    ResourceManagementClient,
    SubscriptionClient,
)
from azure.mgmt.resourcegraph import ResourceGraphClient

from amba_cleaner.core.exceptions import (
    AzureClientError,
    CredentialsError,
    ServiceError,
)

# Module logger
logger = logging.getLogger(__name__)


class AzureClient:
    """
    Azure SDK wrapper with retry settings and credential management.

    Provides a high-level interface for Azure operations with built-in:
    - Transport retry and timeout settings shared by every SDK client
    - Credential validation
    - Lazy, cached client initialization

    Parameters
    ----------
    subscription_id : str, optional
        Subscription used by clients whose constructor needs one even
        though the calls they make are management group scoped. When
        omitted, the first subscription visible to the credential is used.
    credential : TokenCredential, optional
        Azure credential. Defaults to ``DefaultAzureCredential``.
    max_retries : int, default=3
        Maximum number of retries for failed API calls.
    timeout : int, default=30
        Connection and read timeout in seconds.

    Raises
    ------
    CredentialsError
        If Azure credentials are missing or rejected.
    ServiceError
        If unable to create an Azure service client.
    """

    # Supported Azure services and their display names
    SUPPORTED_SERVICES = {
        "authorization": "Azure Authorization",
        "managementgroups": "Azure Management Groups",
        "msi": "Managed Service Identity",
        "policy": "Azure Policy",
        "resource": "Azure Resource Manager",
        "resourcegraph": "Azure Resource Graph",
        "subscription": "Azure Subscriptions",
    }

    def __init__(
        self,
        subscription_id: Optional[str] = None,
        credential: Optional[Any] = None,
        max_retries: int = 3,
        timeout: int = 30,
    ) -> None:
        """Initialize Azure client with the specified configuration."""
        self.subscription_id = subscription_id
        self.max_retries = max_retries
        self.timeout = timeout

        # Lazy-loaded components
        self._credential = credential
        self._clients: Dict[Tuple[str, Optional[str]], Any] = {}

        logger.debug(
            "Initialized AzureClient",
            extra={"subscription_id": subscription_id},
        )

    def _client_kwargs(self) -> Dict[str, Any]:
        """
        Build the transport settings passed to every SDK client.

        Returns
        -------
        dict
            Keyword arguments understood by the azure-core pipeline.
        """
        return {
            "retry_total": self.max_retries,
            "connection_timeout": self.timeout,
            "read_timeout": self.timeout,
        }

    @property
    def credential(self) -> Any:
        """
        Get or create the Azure credential (lazy initialization).

        Returns
        -------
        TokenCredential
            The configured credential.
        """
        if self._credential is None:
            self._credential = DefaultAzureCredential(
                exclude_shared_token_cache_credential=True
            )
            logger.debug("Created DefaultAzureCredential")
        return self._credential

    def _get_client(
        self,
        service_name: str,
        factory: Any,
        subscription_id: Optional[str] = None,
    ) -> Any:
        """
        Get or create an SDK client for the specified service.

        Parameters
        ----------
        service_name : str
            Key from ``SUPPORTED_SERVICES``.
        factory : callable
            SDK client class.
        subscription_id : str, optional
            Subscription for subscription-bound clients.

        Returns
        -------
        object
            The SDK client.

        Raises
        ------
        CredentialsError
            If the credential cannot be created.
        ServiceError
            If unable to create the client.
        """
        key = (service_name, subscription_id)
        if key in self._clients:
            return self._clients[key]

        try:
            if subscription_id is None:
                client = factory(self.credential, **self._client_kwargs())
            else:
                client = factory(
                    self.credential, subscription_id, **self._client_kwargs()
                )
        except ClientAuthenticationError as e:
            raise CredentialsError(
                f"Azure authentication failed: {e.message}",
                service=service_name,
                details={"hint": "Sign in with 'az login' or set AZURE_* variables"},
            )
        except Exception as e:
            logger.exception(f"Failed to create {service_name} client")
            raise ServiceError(
                f"Failed to create {service_name} client: {e}",
                service=service_name,
                subscription_id=subscription_id,
            )

        self._clients[key] = client
        logger.debug(f"Created {service_name} client (subscription={subscription_id})")
        return client

    # =========================================================================
    # Service Client Accessors
    # =========================================================================

    def get_subscription_client(self) -> SubscriptionClient:
        """Get the subscription listing client."""
        return self._get_client("subscription", SubscriptionClient)

    def get_management_groups_client(self) -> ManagementGroupsAPI:
        """
        Get the management groups client.

        Example
        -------
        >>> mg = client.get_management_groups_client()
        >>> root = mg.management_groups.get("contoso", expand="children", recurse=True)
        """
        return self._get_client("managementgroups", ManagementGroupsAPI)

    def get_resource_graph_client(self) -> ResourceGraphClient:
        """
        Get the Resource Graph client.

        Example
        -------
        >>> graph = client.get_resource_graph_client()
        >>> response = graph.resources(request)
        """
        return self._get_client("resourcegraph", ResourceGraphClient)

    def get_resource_client(
        self, subscription_id: Optional[str] = None
    ) -> ResourceManagementClient:
        """
        Get the Resource Manager client.

        Parameters
        ----------
        subscription_id : str, optional
            Subscription of the resources to operate on. Defaults to the
            configured (or first visible) subscription.
        """
        return self._get_client(
            "resource",
            ResourceManagementClient,
            subscription_id or self.get_default_subscription_id(),
        )

    def get_policy_client(
        self, subscription_id: Optional[str] = None
    ) -> PolicyClient:
        """Get the Azure Policy client."""
        return self._get_client(
            "policy",
            PolicyClient,
            subscription_id or self.get_default_subscription_id(),
        )

    def get_authorization_client(
        self, subscription_id: Optional[str] = None
    ) -> AuthorizationManagementClient:
        """Get the authorization (role assignment) client."""
        return self._get_client(
            "authorization",
            AuthorizationManagementClient,
            subscription_id or self.get_default_subscription_id(),
        )

    def get_msi_client(self, subscription_id: str) -> ManagedServiceIdentityClient:
        """
        Get the managed identity client for a subscription.

        Parameters
        ----------
        subscription_id : str
            Subscription that holds the identities.
        """
        return self._get_client("msi", ManagedServiceIdentityClient, subscription_id)

    # =========================================================================
    # Credential and Subscription Operations
    # =========================================================================

    def list_subscription_ids(self) -> List[str]:
        """
        List the subscription IDs visible to the credential.

        Returns
        -------
        list of str
            Subscription IDs in the order returned by Azure.

        Raises
        ------
        CredentialsError
            If the credential is rejected.
        AzureClientError
            For other failures.
        """
        try:
            subscriptions = self.get_subscription_client().subscriptions.list()
            return [sub.subscription_id for sub in subscriptions]
        except ClientAuthenticationError as e:
            raise CredentialsError(
                "Invalid Azure credentials",
                details={
                    "error": e.message,
                    "hint": "Sign in with 'az login' or check the service principal",
                },
            )
        except AzureError as e:
            raise AzureClientError(
                f"Failed to list subscriptions: {e.message or e}",
                service="subscription",
                details={"status_code": getattr(e, "status_code", None)},
            )

    def validate_credentials(self) -> bool:
        """
        Validate Azure credentials by listing visible subscriptions.

        Returns
        -------
        bool
            True if credentials are valid.

        Raises
        ------
        CredentialsError
            If credentials are invalid, expired, or missing.
        """
        subscription_ids = self.list_subscription_ids()
        logger.info(
            "Credentials validated",
            extra={"subscription_count": len(subscription_ids)},
        )
        return True

    def get_default_subscription_id(self) -> str:
        """
        Get the subscription used for management group scoped clients.

        Returns
        -------
        str
            The configured subscription, or the first visible one.

        Raises
        ------
        CredentialsError
            If no subscription is configured and none is visible.
        """
        if self.subscription_id:
            return self.subscription_id

        subscription_ids = self.list_subscription_ids()
        if not subscription_ids:
            raise CredentialsError(
                "No subscriptions are visible to the current credential",
                details={"hint": "Pass --subscription-id or grant Reader on a subscription"},
            )
        self.subscription_id = subscription_ids[0]
        logger.debug(f"Using subscription {self.subscription_id} for management group calls")
        return self.subscription_id

    # =========================================================================
    # Context Manager Support
    # =========================================================================

    def close(self) -> None:
        """Close every cached SDK client."""
        for client in self._clients.values():
            close = getattr(client, "close", None)
            if callable(close):
                close()
        self._clients.clear()

    def __enter__(self) -> AzureClient:
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager and cleanup resources."""
        self.close()

    def __repr__(self) -> str:
        """Return string representation of the client."""
        return (
            f"AzureClient(subscription_id={self.subscription_id!r}, "
            f"max_retries={self.max_retries})"
        )


__all__ = ["AzureClient", "AzureClientError"]
