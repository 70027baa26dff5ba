"""
Custom Exceptions for AMBA Cleaner
==================================

This module defines a hierarchy of custom exceptions used throughout
the application for consistent error handling and reporting.

Exception Hierarchy
-------------------
::

    AmbaCleanerError (base)
    ├── AzureClientError
    │   ├── CredentialsError
    │   └── ServiceError
    ├── HierarchyError
    ├── ScannerError
    │   └── QueryError
    └── CleanerError
        └── DeleteError

Example
-------
>>> from amba_cleaner.core.exceptions import AzureClientError, CredentialsError
>>>
>>> try:
...     client.validate_credentials()
... except CredentialsError as e:
...     print(f"Invalid credentials: {e}")
... except AzureClientError as e:
...     print(f"Azure error: {e}")
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AmbaCleanerError(Exception):
    """
    Base exception for all AMBA Cleaner errors.

    All custom exceptions in the application inherit from this class,
    allowing the command line to report any of them in one place.

    Parameters
    ----------
    message : str
        Human-readable error message.
    details : dict, optional
        Additional context about the error.

    Attributes
    ----------
    message : str
        The error message.
    details : dict
        Additional error details.

    Example
    -------
    >>> raise AmbaCleanerError("Something went wrong", details={"status_code": 500})
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns
        -------
        dict
            Dictionary representation of the error.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Azure Client Exceptions
# =============================================================================


class AzureClientError(AmbaCleanerError):
    """
    Base exception for Azure client-related errors.

    Raised when there's an issue with Azure connectivity, authentication,
    or SDK client creation.

    Parameters
    ----------
    message : str
        Human-readable error message.
    service : str, optional
        The Azure service that caused the error.
    subscription_id : str, optional
        The subscription the client was bound to.
    details : dict, optional
        Additional context about the error.
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        subscription_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.service = service
        self.subscription_id = subscription_id
        full_details = details or {}
        if service:
            full_details["service"] = service
        if subscription_id:
            full_details["subscription_id"] = subscription_id
        super().__init__(message, full_details)


class CredentialsError(AzureClientError):
    """
    Raised when Azure credentials are invalid, missing, or expired.

    Example
    -------
    >>> raise CredentialsError(
    ...     "Azure credentials not found",
    ...     details={"hint": "Run 'az login' to sign in"}
    ... )
    """

    pass


class ServiceError(AzureClientError):
    """
    Raised when there's an error creating or reaching an Azure service client.

    Example
    -------
    >>> raise ServiceError(
    ...     "Failed to create resourcegraph client",
    ...     service="resourcegraph",
    ... )
    """

    pass


# =============================================================================
# Hierarchy Exceptions
# =============================================================================


class HierarchyError(AmbaCleanerError):
    """
    Raised when the management group hierarchy cannot be resolved.

    An empty hierarchy means the caller lacks permission to see the
    management groups, which makes every later query meaningless.

    Parameters
    ----------
    message : str
        Human-readable error message.
    management_group_id : str, optional
        The pseudo root management group that was requested.
    details : dict, optional
        Additional context about the error.
    """

    def __init__(
        self,
        message: str,
        management_group_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.management_group_id = management_group_id
        full_details = details or {}
        if management_group_id:
            full_details["management_group_id"] = management_group_id
        super().__init__(message, full_details)


# =============================================================================
# Scanner Exceptions
# =============================================================================


class ScannerError(AmbaCleanerError):
    """
    Base exception for scanner-related errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    resource_type : str, optional
        The kind of resource being searched for.
    details : dict, optional
        Additional context about the error.
    """

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.resource_type = resource_type
        full_details = details or {}
        if resource_type:
            full_details["resource_type"] = resource_type
        super().__init__(message, full_details)


class QueryError(ScannerError):
    """
    Raised when the Resource Graph or a deployment listing call fails.

    Example
    -------
    >>> raise QueryError(
    ...     "Resource Graph query failed",
    ...     resource_type="alerts",
    ...     details={"status_code": 429}
    ... )
    """

    pass


# =============================================================================
# Cleaner Exceptions
# =============================================================================


class CleanerError(AmbaCleanerError):
    """
    Base exception for cleaner-related errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    resource_id : str, optional
        The ID of the resource being deleted.
    resource_type : str, optional
        The kind of resource being deleted.
    details : dict, optional
        Additional context about the error.
    """

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        resource_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.resource_id = resource_id
        self.resource_type = resource_type
        full_details = details or {}
        if resource_id:
            full_details["resource_id"] = resource_id
        if resource_type:
            full_details["resource_type"] = resource_type
        super().__init__(message, full_details)


class DeleteError(CleanerError):
    """
    Raised when unable to delete a resource.

    Example
    -------
    >>> raise DeleteError(
    ...     "Failed to delete policy assignment",
    ...     resource_id="/providers/Microsoft.Management/managementGroups/contoso/...",
    ...     resource_type="policy_assignment"
    ... )
    """

    pass
