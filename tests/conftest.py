"""
Pytest configuration and shared fixtures for testing.

Azure has no local emulator, so the SDK clients are MagicMock fakes
handed out by a fake AzureClient.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from amba_cleaner.core.azure_client import AzureClient
from amba_cleaner.core.hierarchy import MANAGEMENT_GROUP_TYPE

SUBSCRIPTION_TYPE = "/subscriptions"


def make_page(items, skip_token=None):
    """Build an object shaped like a Resource Graph QueryResponse."""
    return SimpleNamespace(data=list(items), skip_token=skip_token)


def make_group(name, children=(), type=MANAGEMENT_GROUP_TYPE, display_name=None):
    """Build an object shaped like an SDK ManagementGroup."""
    return SimpleNamespace(
        name=name,
        type=type,
        children=list(children),
        display_name=display_name or name,
    )


def alert_id(name, subscription="sub-1", kind="metricAlerts"):
    """Resource ID of an alert rule in the AMBA monitoring resource group."""
    return (
        f"/subscriptions/{subscription}/resourceGroups/rg-amba-monitoring-001"
        f"/providers/Microsoft.Insights/{kind}/{name}"
    )


@pytest.fixture
def graph_rows():
    """Rows returned by the fake Resource Graph, keyed by query text."""
    return {}


@pytest.fixture
def graph_client(graph_rows):
    """Fake Resource Graph client answering every query with one page."""
    client = MagicMock()
    client.resources.side_effect = lambda request: make_page(
        graph_rows.get(request.query, [])
    )
    return client


@pytest.fixture
def contoso_tree():
    """Contoso with three descendant management groups and one subscription."""
    return make_group(
        "contoso",
        children=[
            make_group("contoso-platform"),
            make_group("sub-1", type=SUBSCRIPTION_TYPE),
            make_group(
                "contoso-landingzones",
                children=[make_group("contoso-corp")],
            ),
        ],
    )


@pytest.fixture
def management_groups_client(contoso_tree):
    """Fake management groups client returning the Contoso tree."""
    client = MagicMock()
    client.management_groups.get.return_value = contoso_tree
    return client


@pytest.fixture
def resource_client():
    """Fake Resource Manager client."""
    client = MagicMock()
    client.deployments.list_at_management_group_scope.return_value = []
    return client


@pytest.fixture
def policy_client():
    """Fake Azure Policy client."""
    return MagicMock()


@pytest.fixture
def authorization_client():
    """Fake authorization client."""
    return MagicMock()


@pytest.fixture
def msi_client():
    """Fake managed identity client."""
    return MagicMock()


@pytest.fixture
def azure_client(
    graph_client,
    management_groups_client,
    resource_client,
    policy_client,
    authorization_client,
    msi_client,
):
    """Fake AzureClient wired to the fake SDK clients."""
    client = MagicMock(spec=AzureClient)
    client.get_resource_graph_client.return_value = graph_client
    client.get_management_groups_client.return_value = management_groups_client
    client.get_resource_client.return_value = resource_client
    client.get_policy_client.return_value = policy_client
    client.get_authorization_client.return_value = authorization_client
    client.get_msi_client.return_value = msi_client
    client.list_subscription_ids.return_value = ["sub-1"]
    client.get_default_subscription_id.return_value = "sub-1"
    return client


@pytest.fixture
def deletion_clients(resource_client, policy_client, authorization_client, msi_client):
    """Every fake client a cleaner may call."""
    return [resource_client, policy_client, authorization_client, msi_client]
