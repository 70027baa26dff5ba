"""
Tests for the AMBA resource scanners.
"""

from types import SimpleNamespace

import pytest
from azure.core.exceptions import HttpResponseError, ServiceRequestError

from amba_cleaner.core.base_scanner import ScanResult, unique_targets
from amba_cleaner.core.exceptions import QueryError
from amba_cleaner.core.query_executor import BatchedQueryExecutor
from amba_cleaner.core.targets import (
    DeploymentTarget,
    ManagedIdentityTarget,
    RoleAssignmentTarget,
)
from amba_cleaner.scanners import (
    ActionGroupScanner,
    AlertProcessingRuleScanner,
    AlertScanner,
    DeploymentScanner,
    ManagedIdentityScanner,
    PolicyAssignmentScanner,
    PolicyDefinitionScanner,
    PolicySetDefinitionScanner,
    ResourceGroupScanner,
    RoleAssignmentScanner,
)
from conftest import alert_id, make_page

SCOPE = ["contoso", "contoso-platform", "contoso-landingzones", "contoso-corp"]

GRAPH_SCANNERS = [
    AlertScanner,
    AlertProcessingRuleScanner,
    ActionGroupScanner,
    ResourceGroupScanner,
    PolicyAssignmentScanner,
    PolicySetDefinitionScanner,
    PolicyDefinitionScanner,
    ManagedIdentityScanner,
    RoleAssignmentScanner,
]


class TestUniqueTargets:
    """Tests for unique_targets."""

    def test_keeps_first_seen_order(self):
        """Test duplicates are dropped in place."""
        assert unique_targets(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_records_compare_by_value(self):
        """Test equal target records are de-duplicated."""
        first = DeploymentTarget("mg", "amba-1", "/id/1")
        assert unique_targets([first, DeploymentTarget("mg", "amba-1", "/id/1")]) == [first]


class TestScanResult:
    """Tests for ScanResult."""

    def test_counts(self):
        """Test count and has_targets."""
        result = ScanResult(resource_type="alert", targets=["a", "b"], scope_size=4)
        assert result.count == 2
        assert result.has_targets

    def test_empty(self):
        """Test an empty result."""
        assert not ScanResult(resource_type="alert", targets=[], scope_size=1).has_targets

    def test_to_dict(self):
        """Test serialization of plain IDs and records."""
        target = RoleAssignmentTarget("/rd/1", "obj-1", "/scope", "/ra/1")
        data = ScanResult(
            resource_type="role_assignment",
            targets=[target],
            scope_size=2,
        ).to_dict()

        assert data["count"] == 1
        assert data["targets"][0]["object_id"] == "obj-1"
        assert "scan_time" in data


class TestGraphScanners:
    """Tests shared by every Resource Graph scanner."""

    @pytest.mark.parametrize("scanner_class", GRAPH_SCANNERS)
    def test_query_is_defined(self, scanner_class):
        """Test each scanner has a query and a resource type."""
        assert scanner_class.query
        assert scanner_class.resource_type
        assert scanner_class.display_name

    @pytest.mark.parametrize("scanner_class", GRAPH_SCANNERS)
    def test_nothing_found(self, azure_client, scanner_class):
        """Test an empty index gives an empty result."""
        result = scanner_class(azure_client).scan(SCOPE)

        assert result.count == 0
        assert result.scope_size == 4
        assert result.resource_type == scanner_class.resource_type

    def test_shared_executor(self, azure_client, graph_client):
        """Test scanners can share one executor."""
        executor = BatchedQueryExecutor(azure_client)
        AlertScanner(azure_client, executor=executor).scan(SCOPE)
        ActionGroupScanner(azure_client, executor=executor).scan(SCOPE)

        assert executor.request_count == 2


class TestAlertScanner:
    """Tests for AlertScanner."""

    def test_query_covers_alert_types(self):
        """Test the three alert rule types are queried by tag."""
        query = AlertScanner.query
        assert "Microsoft.Insights/metricAlerts" in query
        assert "Microsoft.Insights/activityLogAlerts" in query
        assert "Microsoft.Insights/scheduledQueryRules" in query
        assert "_deployed_by_amba" in query

    def test_finds_alerts(self, azure_client, graph_rows):
        """Test alert IDs are returned in the order received."""
        ids = [alert_id("cpu"), alert_id("memory"), alert_id("activity", kind="activityLogAlerts")]
        graph_rows[AlertScanner.query] = [{"id": i} for i in ids]

        result = AlertScanner(azure_client).scan(SCOPE)

        assert result.targets == ids

    def test_deduplicates_across_chunks(self, azure_client, graph_client):
        """Test an ID returned by two chunks appears once."""
        graph_client.resources.side_effect = [
            make_page([{"id": alert_id("a")}, {"id": alert_id("b")}]),
            make_page([{"id": alert_id("b")}, {"id": alert_id("c")}]),
        ]
        scope = [f"mg-{i}" for i in range(12)]

        result = AlertScanner(azure_client).scan(scope)

        assert result.targets == [alert_id("a"), alert_id("b"), alert_id("c")]
        assert graph_client.resources.call_count == 2

    def test_logs_count(self, azure_client, graph_rows, caplog):
        """Test the count found is logged."""
        graph_rows[AlertScanner.query] = [{"id": alert_id("a")}, {"id": alert_id("b")}]

        with caplog.at_level("INFO"):
            AlertScanner(azure_client).scan(SCOPE)

        assert "- Found 2 metric, activity log and log search alerts" in caplog.text

    def test_query_failure_propagates(self, azure_client, graph_client):
        """Test a failed query stops the scan."""
        graph_client.resources.side_effect = HttpResponseError(message="Throttled")

        with pytest.raises(QueryError):
            AlertScanner(azure_client).scan(SCOPE)

    def test_transport_failure_propagates(self, azure_client, graph_client):
        """Test a dropped connection stops the scan with QueryError."""
        graph_client.resources.side_effect = ServiceRequestError("Connection reset")

        with pytest.raises(QueryError) as exc_info:
            AlertScanner(azure_client).scan(SCOPE)

        assert "Connection reset" in exc_info.value.message


class TestNotificationAssetScanners:
    """Tests for alert processing rule and action group scanners."""

    def test_alert_processing_rule_query(self):
        """Test rules are matched by name prefix and description."""
        query = AlertProcessingRuleScanner.query
        assert "Microsoft.AlertsManagement/actionRules" in query
        assert "apr-AMBA-" in query
        assert "AMBA Notification Assets - " in query

    def test_action_group_query(self):
        """Test action groups are matched by tag."""
        assert "Microsoft.Insights/actionGroups" in ActionGroupScanner.query


class TestResourceGroupScanner:
    """Tests for ResourceGroupScanner."""

    def test_queries_resource_containers(self):
        """Test resource groups come from the resourcecontainers table."""
        assert ResourceGroupScanner.query.startswith("resourcecontainers")


class TestPolicyScanners:
    """Tests for the policy scanners."""

    @pytest.mark.parametrize(
        "scanner_class,policy_type",
        [
            (PolicyAssignmentScanner, "policyAssignments"),
            (PolicySetDefinitionScanner, "policySetDefinitions"),
            (PolicyDefinitionScanner, "policyDefinitions"),
        ],
    )
    def test_query_matches_metadata(self, scanner_class, policy_type):
        """Test policies are matched by their metadata marker."""
        query = scanner_class.query
        assert query.startswith("policyresources")
        assert f"Microsoft.Authorization/{policy_type}'" in query
        assert "metadata._deployed_by_amba" in query

    def test_finds_assignments(self, azure_client, graph_rows):
        """Test assignment IDs are returned."""
        assignment = (
            "/providers/Microsoft.Management/managementGroups/contoso"
            "/providers/Microsoft.Authorization/policyAssignments/Deploy-AMBA-Notification"
        )
        graph_rows[PolicyAssignmentScanner.query] = [{"id": assignment}]

        assert PolicyAssignmentScanner(azure_client).scan(SCOPE).targets == [assignment]


class TestIdentityScanners:
    """Tests for managed identity and role assignment scanners."""

    def test_role_assignment_targets(self, azure_client, graph_rows):
        """Test rows become role assignment records."""
        row = {
            "roleDefinitionId": "/providers/Microsoft.Authorization/roleDefinitions/rd-1",
            "objectId": "principal-1",
            "scope": "/providers/Microsoft.Management/managementGroups/contoso",
            "id": "/providers/Microsoft.Management/managementGroups/contoso"
                  "/providers/Microsoft.Authorization/roleAssignments/ra-1",
        }
        graph_rows[RoleAssignmentScanner.query] = [row, dict(row)]

        result = RoleAssignmentScanner(azure_client).scan(SCOPE)

        assert result.count == 1
        target = result.targets[0]
        assert isinstance(target, RoleAssignmentTarget)
        assert target.object_id == "principal-1"
        assert target.name == "ra-1"

    def test_role_assignment_query(self):
        """Test role assignments are matched by exact description."""
        query = RoleAssignmentScanner.query
        assert query.startswith("authorizationresources")
        assert "== '_deployed_by_amba'" in query

    def test_managed_identity_targets(self, azure_client, graph_rows):
        """Test rows become managed identity records."""
        graph_rows[ManagedIdentityScanner.query] = [
            {
                "id": "/subscriptions/sub-2/resourceGroups/rg-amba/providers"
                      "/Microsoft.ManagedIdentity/userAssignedIdentities/id-amba-prod",
                "name": "id-amba-prod",
                "principalId": "principal-2",
                "tenantId": "tenant-1",
                "subscriptionId": "sub-2",
                "resourceGroup": "rg-amba",
            }
        ]

        target = ManagedIdentityScanner(azure_client).scan(SCOPE).targets[0]

        assert isinstance(target, ManagedIdentityTarget)
        assert target.subscription_id == "sub-2"
        assert target.resource_group == "rg-amba"
        assert target.name == "id-amba-prod"


class TestDeploymentScanner:
    """Tests for DeploymentScanner."""

    @staticmethod
    def deployment(group_id, name):
        return SimpleNamespace(
            name=name,
            id=f"/providers/Microsoft.Management/managementGroups/{group_id}"
               f"/providers/Microsoft.Resources/deployments/{name}",
        )

    def test_filters_by_prefix(self, azure_client, resource_client):
        """Test only amba-* deployments are returned, in scope order."""
        by_group = {
            "contoso": [
                self.deployment("contoso", "amba-alerts-1"),
                self.deployment("contoso", "alz-core"),
            ],
            "contoso-platform": [self.deployment("contoso-platform", "AMBA-Policy")],
            "contoso-landingzones": [],
            "contoso-corp": [self.deployment("contoso-corp", "notamba-x")],
        }
        resource_client.deployments.list_at_management_group_scope.side_effect = (
            lambda group_id: by_group[group_id]
        )

        result = DeploymentScanner(azure_client).scan(SCOPE)

        assert [(t.management_group_id, t.name) for t in result.targets] == [
            ("contoso", "amba-alerts-1"),
            ("contoso-platform", "AMBA-Policy"),
        ]
        assert resource_client.deployments.list_at_management_group_scope.call_count == 4

    def test_listing_failure_raises(self, azure_client, resource_client):
        """Test listing failures become QueryError."""
        resource_client.deployments.list_at_management_group_scope.side_effect = (
            HttpResponseError(message="Forbidden")
        )

        with pytest.raises(QueryError) as exc_info:
            DeploymentScanner(azure_client).scan(SCOPE)

        assert "contoso" in exc_info.value.message

    def test_listing_transport_failure_raises(self, azure_client, resource_client):
        """Test connection failures while listing become QueryError."""
        resource_client.deployments.list_at_management_group_scope.side_effect = (
            ServiceRequestError("Connection reset")
        )

        with pytest.raises(QueryError) as exc_info:
            DeploymentScanner(azure_client).scan(SCOPE)

        assert "Connection reset" in exc_info.value.message
        assert exc_info.value.details["status_code"] is None

    def test_does_not_use_resource_graph(self, azure_client, graph_client):
        """Test deployments are listed directly."""
        DeploymentScanner(azure_client).scan(SCOPE)
        graph_client.resources.assert_not_called()
