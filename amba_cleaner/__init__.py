"""
AMBA Cleaner: Azure Monitor Baseline Alerts cleanup tool
========================================================

Finds and deletes the resources deployed by the Azure Monitor Baseline
Alerts (AMBA) pattern across a management group hierarchy.

Modules
-------
core
    Core infrastructure components (Azure client, hierarchy, queries)
scanners
    Resource-specific scanners that find AMBA resources
cleaners
    Resource-specific cleaners that delete them
reporters
    Output formatters (CLI, JSON)
orchestrator
    Scan, confirm and delete sequence per cleanup scope

Example
-------
>>> from amba_cleaner import AzureClient, CleanupOrchestrator, CleanupScope
>>>
>>> orchestrator = CleanupOrchestrator(AzureClient(), dry_run=True)
>>> report = orchestrator.run("contoso", CleanupScope.ALL)
>>> print(f"Found {report.total_found} AMBA resources")

Notes
-----
Requires Azure credentials resolvable by ``DefaultAzureCredential``:
- Environment variables (AZURE_CLIENT_ID, AZURE_TENANT_ID, ...)
- Azure CLI sign-in (``az login``)
- Managed identity (when running on Azure)

See Also
--------
azure-identity : Azure credential providers
"""

__version__ = "0.1.0"
__author__ = "AMBA Cleaner Team"
__license__ = "MIT"

# Public API
from amba_cleaner.core.azure_client import AzureClient
from amba_cleaner.core.base_scanner import BaseScanner, ScanResult
from amba_cleaner.core.exceptions import AmbaCleanerError
from amba_cleaner.orchestrator import (
    CleanupOrchestrator,
    CleanupReport,
    CleanupScope,
    ConfirmDecision,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Core classes
    "AzureClient",
    "AmbaCleanerError",
    "BaseScanner",
    "ScanResult",
    # Orchestration
    "CleanupOrchestrator",
    "CleanupReport",
    "CleanupScope",
    "ConfirmDecision",
]
