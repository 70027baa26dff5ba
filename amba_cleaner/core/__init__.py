"""
Core Infrastructure Components
==============================

This module provides the foundational components for AMBA Cleaner:

- :class:`AzureClient` - Manages the Azure credential and SDK clients
- :func:`get_management_group_scope` - Flattens the management group tree
- :class:`BatchedQueryExecutor` - Runs Resource Graph queries in batches
- :class:`BaseScanner` - Abstract base class for resource scanners
- Exception hierarchy for error handling

Classes
-------
AzureClient
    Azure SDK wrapper with retry settings and credential management.
ManagementGroupNode
    Immutable node of the management group tree.
BatchedQueryExecutor
    Chunking and paging Resource Graph query runner.
BaseScanner
    Abstract base class defining the scanner interface.
GraphScanner
    Base class for Resource Graph backed scanners.
ScanResult
    Data class containing scan results.

Exceptions
----------
AmbaCleanerError
    Base exception for all AMBA Cleaner errors.
AzureClientError
    Base exception for Azure client errors.
CredentialsError
    Raised when credentials are invalid or missing.
ServiceError
    Raised when an Azure SDK client cannot be created.
HierarchyError
    Raised when the management group scope is empty or unreadable.
ScannerError
    Base exception for scanner errors.
QueryError
    Raised when a Resource Graph or deployment listing call fails.
CleanerError
    Base exception for cleaner errors.
DeleteError
    Raised when a deletion fails and the run must stop.

Example
-------
>>> from amba_cleaner.core import AzureClient, get_management_group_scope
>>>
>>> client = AzureClient()
>>> scope = get_management_group_scope(client, "contoso")

See Also
--------
amba_cleaner.scanners : Resource scanner implementations.
amba_cleaner.cleaners : Resource cleaner implementations.
"""

from amba_cleaner.core.azure_client import AzureClient
from amba_cleaner.core.base_scanner import BaseScanner, GraphScanner, ScanResult
from amba_cleaner.core.exceptions import (
    AmbaCleanerError,
    AzureClientError,
    CleanerError,
    CredentialsError,
    DeleteError,
    HierarchyError,
    QueryError,
    ScannerError,
    ServiceError,
)
from amba_cleaner.core.hierarchy import (
    ManagementGroupNode,
    flatten_management_groups,
    get_management_group_scope,
)
from amba_cleaner.core.query_executor import BatchedQueryExecutor

__all__ = [
    # Client
    "AzureClient",
    # Hierarchy
    "ManagementGroupNode",
    "flatten_management_groups",
    "get_management_group_scope",
    # Query
    "BatchedQueryExecutor",
    # Scanner base
    "BaseScanner",
    "GraphScanner",
    "ScanResult",
    # Exceptions - Base
    "AmbaCleanerError",
    # Exceptions - Azure Client
    "AzureClientError",
    "CredentialsError",
    "ServiceError",
    # Exceptions - Hierarchy
    "HierarchyError",
    # Exceptions - Scanner
    "ScannerError",
    "QueryError",
    # Exceptions - Cleaner
    "CleanerError",
    "DeleteError",
]
