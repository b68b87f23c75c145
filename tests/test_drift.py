"""Tests for EKS drift cleanup."""

import pytest

from fakes import FakeEC2Client, network_interface, security_group
from network_reconcilers.network.drift import DriftCleaner
from network_reconcilers.network.ec2 import EC2NetworkService
from network_reconcilers.network.results import OutcomeStatus

CLUSTER_SG = "eks-cluster-sg-prod-123456"
OTHER_CLUSTER_SG = "eks-cluster-sg-staging-654321"


@pytest.fixture
def drift_ec2():
    """Two VPCs, two clusters, and unrelated resources."""
    return FakeEC2Client(
        network_interfaces=[
            network_interface("eni-1", group_names=(CLUSTER_SG,)),
            network_interface("eni-2", group_names=("default", CLUSTER_SG)),
            network_interface("eni-3", group_names=(OTHER_CLUSTER_SG,)),
            network_interface("eni-4", vpc_id="vpc-2", group_names=(CLUSTER_SG,)),
            network_interface("eni-5", group_names=("default",)),
        ],
        security_groups=[
            security_group("sg-1", CLUSTER_SG),
            security_group("sg-2", OTHER_CLUSTER_SG),
            security_group("sg-3", CLUSTER_SG, vpc_id="vpc-2"),
            security_group("sg-4", "default"),
            security_group("sg-5", "prefix-" + CLUSTER_SG),
        ],
        page_size=2,
    )


@pytest.fixture
def cleaner(drift_ec2, no_retry):
    return DriftCleaner(EC2NetworkService(drift_ec2, no_retry))


class TestFindDrifted:
    """Tests for drift detection."""

    def test_network_interfaces(self, cleaner):
        found = cleaner.find_drifted_network_interfaces("vpc-1", "prod")
        assert [eni.network_interface_id for eni in found] == ["eni-1", "eni-2"]

    def test_security_groups(self, cleaner):
        found = cleaner.find_drifted_security_groups("vpc-1", "prod")
        assert [sg.group_id for sg in found] == ["sg-1"]

    def test_other_cluster(self, cleaner):
        enis = cleaner.find_drifted_network_interfaces("vpc-1", "staging")
        groups = cleaner.find_drifted_security_groups("vpc-1", "staging")
        assert [eni.network_interface_id for eni in enis] == ["eni-3"]
        assert [sg.group_id for sg in groups] == ["sg-2"]

    def test_interface_scan_is_unfiltered_and_paginated(self, cleaner, drift_ec2):
        cleaner.find_drifted_network_interfaces("vpc-1", "prod")

        calls = drift_ec2.calls_to("describe_network_interfaces")
        assert [c["NextToken"] for c in calls] == [None, "2", "4"]
        assert all(c["Filters"] is None for c in calls)

    def test_security_group_scan_filters_by_vpc(self, cleaner, drift_ec2):
        cleaner.find_drifted_security_groups("vpc-1", "prod")

        calls = drift_ec2.calls_to("describe_security_groups")
        assert calls[0]["Filters"] == [{"Name": "vpc-id", "Values": ["vpc-1"]}]


class TestClean:
    """Tests for deletion of drifted resources."""

    def test_deletes_interfaces_then_groups(self, cleaner, drift_ec2):
        summary = cleaner.clean("vpc-1", "prod")

        deleted = [o.resource_id for o in summary.succeeded]
        assert deleted == ["eni-1", "eni-2", "sg-1"]
        assert set(drift_ec2.network_interfaces) == {"eni-3", "eni-4", "eni-5"}
        assert set(drift_ec2.security_groups) == {"sg-2", "sg-3", "sg-4", "sg-5"}

    def test_failure_does_not_block_others(self, no_retry):
        client = FakeEC2Client(
            network_interfaces=[
                network_interface("eni-1", group_names=(CLUSTER_SG,)),
                network_interface("eni-2", group_names=(CLUSTER_SG,)),
                network_interface("eni-3", group_names=(CLUSTER_SG,)),
            ]
        )
        client.fail("delete_network_interface", "eni-2", "InvalidNetworkInterface.InUse")
        cleaner = DriftCleaner(EC2NetworkService(client, no_retry))

        summary = cleaner.delete_drifted_network_interfaces("vpc-1", "prod")

        assert [o.status for o in summary.outcomes] == [
            OutcomeStatus.DELETED,
            OutcomeStatus.FAILED,
            OutcomeStatus.DELETED,
        ]
        assert set(client.network_interfaces) == {"eni-2"}

    def test_group_in_use_is_reported_failed(self, cleaner, drift_ec2):
        drift_ec2.fail("delete_security_group", "sg-1", "DependencyViolation")

        summary = cleaner.clean("vpc-1", "prod")

        assert [o.resource_id for o in summary.failed] == ["sg-1"]
        assert "dependent objects" in summary.failed[0].message

    def test_already_deleted_is_skipped(self, cleaner, drift_ec2):
        drift_ec2.fail("delete_network_interface", "eni-1", "InvalidNetworkInterfaceID.NotFound")

        summary = cleaner.clean("vpc-1", "prod")

        assert [o.resource_id for o in summary.skipped] == ["eni-1"]
        assert not summary.has_failures()

    def test_nothing_drifted(self, cleaner, drift_ec2):
        summary = cleaner.clean("vpc-1", "dev")

        assert summary.outcomes == []
        assert drift_ec2.calls_to("delete_network_interface") == []
        assert drift_ec2.calls_to("delete_security_group") == []

    def test_plan_is_logged(self, cleaner, caplog):
        with caplog.at_level("INFO", logger="network_reconcilers.network.drift"):
            cleaner.clean("vpc-1", "prod")

        assert 'Plan is to delete the following enis: ["eni-1", "eni-2"]' in caplog.text
        assert "Plan is to delete the following security groups" in caplog.text

    def test_summary_dict(self, cleaner):
        summary = cleaner.clean("vpc-1", "prod").to_dict()
        assert summary["total"] == 3
        assert summary["succeeded"] == 3
        assert summary["failed"] == 0
