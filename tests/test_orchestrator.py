"""
Tests for the cleanup orchestrator.

Real scanners and cleaners run against the fake Azure clients, so these
tests cover the whole scope, scan, confirm and delete sequence.
"""

from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import HttpResponseError

from amba_cleaner.core.exceptions import HierarchyError, QueryError
from amba_cleaner.orchestrator import (
    CLEANUP_PLANS,
    CLEANER_CLASSES,
    SCANNER_CLASSES,
    CleanupOrchestrator,
    CleanupScope,
    CleanupStatus,
    ConfirmDecision,
)
from amba_cleaner.scanners import (
    ActionGroupScanner,
    AlertProcessingRuleScanner,
    AlertScanner,
    PolicyAssignmentScanner,
    ResourceGroupScanner,
)
from conftest import SUBSCRIPTION_TYPE, alert_id, make_group

MG_PREFIX = "/providers/Microsoft.Management/managementGroups/contoso"
ASSIGNMENT_ID = f"{MG_PREFIX}/providers/Microsoft.Authorization/policyAssignments/Deploy-AMBA-Notification"

CONTOSO_ALERTS = [
    alert_id("vm-cpu", subscription="sub-platform"),
    alert_id("vm-memory", subscription="sub-platform"),
    alert_id("svc-health", subscription="sub-corp", kind="activityLogAlerts"),
    alert_id("kv-availability", subscription="sub-corp"),
    alert_id("law-ingestion", subscription="sub-identity", kind="scheduledQueryRules"),
]


def confirm_with(decision):
    return MagicMock(return_value=decision)


def deleted_ids(resource_client):
    return [c.args[0] for c in resource_client.resources.begin_delete_by_id.call_args_list]


class TestCleanupScope:
    """Tests for CleanupScope."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("All", CleanupScope.ALL),
            ("alerts", CleanupScope.ALERTS),
            ("NOTIFICATIONASSETS", CleanupScope.NOTIFICATION_ASSETS),
            (" policyitems ", CleanupScope.POLICY_ITEMS),
            ("Deployments", CleanupScope.DEPLOYMENTS),
        ],
    )
    def test_parse_ignores_case(self, value, expected):
        """Test scope names are case-insensitive."""
        assert CleanupScope.parse(value) is expected

    def test_parse_unknown(self):
        """Test unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown cleanup scope"):
            CleanupScope.parse("Everything")


class TestCleanupPlans:
    """Tests for the plan table."""

    def test_every_scope_has_a_plan(self):
        """Test all five scopes are planned."""
        assert set(CLEANUP_PLANS) == set(CleanupScope)

    @pytest.mark.parametrize("scope", list(CleanupScope))
    def test_plan_types_are_registered(self, scope):
        """Test every planned type has a scanner, and a cleaner if deleted."""
        plan = CLEANUP_PLANS[scope]
        assert all(rt in SCANNER_CLASSES for rt in plan.scan_order)
        assert all(rt in CLEANER_CLASSES for rt in plan.delete_order)
        assert set(plan.delete_order) <= set(plan.scan_order)

    def test_resource_groups_never_deleted(self):
        """Test resource groups are reported only."""
        assert "resource_group" in CLEANUP_PLANS[CleanupScope.ALL].scan_order
        assert "resource_group" not in CLEANER_CLASSES

    def test_dependency_order(self):
        """Test referencing resources go before the ones they reference."""
        order = CLEANUP_PLANS[CleanupScope.ALL].delete_order
        assert order.index("policy_assignment") < order.index("policy_set_definition")
        assert order.index("policy_set_definition") < order.index("policy_definition")
        assert order.index("role_assignment") < order.index("user_assigned_managed_identity")
        assert order.index("alert_processing_rule") < order.index("action_group")


class TestCleanupOrchestrator:
    """Tests for CleanupOrchestrator.run."""

    def test_only_policy_assignments_found(
        self, azure_client, graph_rows, policy_client, resource_client,
        authorization_client, msi_client,
    ):
        """Test one confirmation and only the assignment deletion."""
        graph_rows[PolicyAssignmentScanner.query] = [{"id": ASSIGNMENT_ID}]
        confirm = confirm_with(ConfirmDecision.ACCEPT)

        report = CleanupOrchestrator(azure_client, confirm=confirm).run("contoso", CleanupScope.ALL)

        assert confirm.call_count == 1
        policy_client.policy_assignments.delete_by_id.assert_called_once_with(ASSIGNMENT_ID)
        policy_client.policy_set_definitions.delete_at_management_group.assert_not_called()
        policy_client.policy_definitions.delete_at_management_group.assert_not_called()
        resource_client.resources.begin_delete_by_id.assert_not_called()
        authorization_client.role_assignments.delete.assert_not_called()
        msi_client.user_assigned_identities.delete.assert_not_called()
        assert report.status == CleanupStatus.COMPLETED
        assert report.total_deleted == 1
        assert [s.resource_type for s in report.delete_summaries] == list(
            CLEANUP_PLANS[CleanupScope.ALL].delete_order
        )

    def test_confirm_receives_deletable_results(self, azure_client, graph_rows):
        """Test the prompt sees the plan description and results in delete order."""
        graph_rows[ActionGroupScanner.query] = [{"id": "/ag/1"}]
        graph_rows[AlertProcessingRuleScanner.query] = [{"id": "/apr/1"}]
        confirm = confirm_with(ConfirmDecision.DECLINE)

        CleanupOrchestrator(azure_client, confirm=confirm).run(
            "contoso", CleanupScope.NOTIFICATION_ASSETS
        )

        description, results = confirm.call_args.args
        assert description == CLEANUP_PLANS[CleanupScope.NOTIFICATION_ASSETS].description
        assert [r.resource_type for r in results] == ["alert_processing_rule", "action_group"]

    def test_notification_assets_order(self, azure_client, graph_rows, resource_client):
        """Test alert processing rules are deleted before action groups."""
        rule = "/subscriptions/s/resourceGroups/rg/providers/Microsoft.AlertsManagement/actionRules/apr-AMBA-1"
        group = "/subscriptions/s/resourceGroups/rg/providers/Microsoft.Insights/actionGroups/ag-AMBA-1"
        graph_rows[ActionGroupScanner.query] = [{"id": group}]
        graph_rows[AlertProcessingRuleScanner.query] = [{"id": rule}]

        CleanupOrchestrator(azure_client).run("contoso", CleanupScope.NOTIFICATION_ASSETS)

        assert deleted_ids(resource_client) == [rule, group]

    def test_nothing_found(self, azure_client, deletion_clients):
        """Test no prompt and no deletion when nothing is found."""
        confirm = confirm_with(ConfirmDecision.ACCEPT)

        report = CleanupOrchestrator(azure_client, confirm=confirm).run("contoso", CleanupScope.ALL)

        assert report.status == CleanupStatus.NOTHING_FOUND
        assert report.delete_summaries == []
        confirm.assert_not_called()
        for client in deletion_clients:
            assert client.method_calls == []

    def test_resource_groups_alone_are_nothing_to_delete(self, azure_client, graph_rows):
        """Test resource groups do not trigger the prompt."""
        graph_rows[ResourceGroupScanner.query] = [{"id": "/subscriptions/s/resourceGroups/rg-amba"}]
        confirm = confirm_with(ConfirmDecision.ACCEPT)

        report = CleanupOrchestrator(azure_client, confirm=confirm).run("contoso", CleanupScope.ALL)

        assert report.status == CleanupStatus.NOTHING_FOUND
        assert report.get_scan_result("resource_group").count == 1
        confirm.assert_not_called()

    def test_declined(self, azure_client, graph_rows, resource_client):
        """Test declining deletes nothing."""
        graph_rows[AlertScanner.query] = [{"id": i} for i in CONTOSO_ALERTS]

        report = CleanupOrchestrator(
            azure_client, confirm=confirm_with(ConfirmDecision.DECLINE)
        ).run("contoso", CleanupScope.ALERTS)

        assert report.status == CleanupStatus.DECLINED
        assert report.total_found == 5
        resource_client.resources.begin_delete_by_id.assert_not_called()

    def test_preview(self, azure_client, graph_rows, resource_client):
        """Test preview runs the cleaners as a dry run."""
        graph_rows[AlertScanner.query] = [{"id": i} for i in CONTOSO_ALERTS]

        report = CleanupOrchestrator(
            azure_client, confirm=confirm_with(ConfirmDecision.PREVIEW)
        ).run("contoso", CleanupScope.ALERTS)

        assert report.status == CleanupStatus.DRY_RUN
        assert report.dry_run
        assert report.delete_summaries[0].dry_run == 5
        resource_client.resources.begin_delete_by_id.assert_not_called()

    def test_contoso_alerts_end_to_end(self, azure_client, graph_rows, graph_client, resource_client):
        """Test Contoso with three descendants and five alerts."""
        graph_rows[AlertScanner.query] = [{"id": i} for i in CONTOSO_ALERTS]
        confirm = confirm_with(ConfirmDecision.ACCEPT)

        report = CleanupOrchestrator(azure_client, confirm=confirm).run("contoso", CleanupScope.ALERTS)

        assert report.management_groups == [
            "contoso",
            "contoso-platform",
            "contoso-landingzones",
            "contoso-corp",
        ]
        assert graph_client.resources.call_count == 1
        assert deleted_ids(resource_client) == CONTOSO_ALERTS
        assert confirm.call_count == 1
        assert report.status == CleanupStatus.COMPLETED
        assert report.total_deleted == 5
        assert not report.failed

    def test_dry_run_matches_real_discovery(self, azure_client, graph_rows, resource_client, caplog):
        """Test dry run logs the same discovery and deletes nothing."""
        graph_rows[AlertScanner.query] = [{"id": i} for i in CONTOSO_ALERTS]

        def discovery_lines():
            return [
                r.getMessage() for r in caplog.records
                if r.name in ("amba_cleaner.core.base_scanner", "amba_cleaner.core.hierarchy")
                and r.levelname == "INFO"
            ]

        with caplog.at_level("INFO"):
            confirm = confirm_with(ConfirmDecision.ACCEPT)
            dry = CleanupOrchestrator(azure_client, confirm=confirm, dry_run=True).run(
                "contoso", CleanupScope.ALERTS
            )
            dry_lines = discovery_lines()
            assert resource_client.resources.begin_delete_by_id.call_count == 0
            confirm.assert_not_called()

            caplog.clear()
            CleanupOrchestrator(azure_client).run("contoso", CleanupScope.ALERTS)
            real_lines = discovery_lines()

        assert dry.status == CleanupStatus.DRY_RUN
        assert dry.delete_summaries[0].dry_run == 5
        assert dry_lines == real_lines
        assert "- Found 5 metric, activity log and log search alerts" in dry_lines

    def test_failed_deletion_stops_run(self, azure_client, graph_rows, resource_client, policy_client):
        """Test a failure is recorded and later cleaners do not run."""
        graph_rows[AlertScanner.query] = [{"id": i} for i in CONTOSO_ALERTS[:3]]
        graph_rows[PolicyAssignmentScanner.query] = [{"id": ASSIGNMENT_ID}]
        resource_client.resources.begin_delete_by_id.side_effect = [
            MagicMock(),
            HttpResponseError(message="Conflict"),
            MagicMock(),
        ]

        report = CleanupOrchestrator(azure_client).run("contoso", CleanupScope.ALL)

        assert report.status == CleanupStatus.FAILED
        assert report.failed
        assert report.error["error_type"] == "DeleteError"
        assert report.delete_summaries[-1].resource_type == "alert"
        assert report.delete_summaries[-1].deleted == 1
        assert report.delete_summaries[-1].failed == 1
        policy_client.policy_assignments.delete_by_id.assert_not_called()

    def test_continue_on_error(self, azure_client, graph_rows, resource_client):
        """Test continue_on_error finishes the batch and records the failure."""
        graph_rows[AlertScanner.query] = [{"id": i} for i in CONTOSO_ALERTS[:3]]
        resource_client.resources.begin_delete_by_id.side_effect = [
            MagicMock(),
            HttpResponseError(message="Conflict"),
            MagicMock(),
        ]

        report = CleanupOrchestrator(azure_client, continue_on_error=True).run(
            "contoso", CleanupScope.ALERTS
        )

        assert report.status == CleanupStatus.COMPLETED
        assert report.total_deleted == 2
        assert report.total_failed == 1
        assert report.failed

    def test_empty_hierarchy_aborts(self, azure_client, management_groups_client, graph_client):
        """Test nothing is queried when the scope is empty."""
        management_groups_client.management_groups.get.return_value = make_group(
            "contoso", type=SUBSCRIPTION_TYPE
        )

        with pytest.raises(HierarchyError):
            CleanupOrchestrator(azure_client).run("contoso", CleanupScope.ALL)

        graph_client.resources.assert_not_called()

    def test_query_failure_aborts(self, azure_client, graph_client, deletion_clients):
        """Test a failed scan deletes nothing."""
        graph_client.resources.side_effect = HttpResponseError(message="Throttled")

        with pytest.raises(QueryError):
            CleanupOrchestrator(azure_client).run("contoso", CleanupScope.ALL)

        for client in deletion_clients:
            assert client.method_calls == []

    def test_deployments_scope(self, azure_client, resource_client):
        """Test the deployments scope lists and deletes deployment records."""
        deployment = MagicMock(id="/deployments/amba-1")
        deployment.name = "amba-1"
        resource_client.deployments.list_at_management_group_scope.side_effect = (
            lambda group_id: [deployment] if group_id == "contoso-corp" else []
        )

        report = CleanupOrchestrator(azure_client).run("contoso", CleanupScope.DEPLOYMENTS)

        resource_client.deployments.begin_delete_at_management_group_scope.assert_called_once_with(
            group_id="contoso-corp",
            deployment_name="amba-1",
        )
        assert report.total_deleted == 1

    def test_shared_executor(self, azure_client):
        """Test every Resource Graph scanner shares one executor."""
        orchestrator = CleanupOrchestrator(azure_client)
        first = orchestrator.create_scanner("alert")
        second = orchestrator.create_scanner("action_group")

        assert first.executor is second.executor

    def test_report_to_dict(self, azure_client, graph_rows):
        """Test the report serializes."""
        graph_rows[AlertScanner.query] = [{"id": CONTOSO_ALERTS[0]}]

        data = CleanupOrchestrator(azure_client).run("contoso", CleanupScope.ALERTS).to_dict()

        assert data["cleanup_scope"] == "Alerts"
        assert data["status"] == "completed"
        assert data["total_found"] == 1
        assert data["scan_results"][0]["targets"] == [{"id": CONTOSO_ALERTS[0]}]
        assert data["end_time"] is not None
