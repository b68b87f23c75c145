"""Cleanup of network resources leaked by an EKS cluster's control plane."""

import json
from typing import Callable, List

from network_reconcilers.config.models import drift_prefix
from network_reconcilers.network.ec2 import EC2NetworkService
from network_reconcilers.network.models import NetworkInterface, SecurityGroup
from network_reconcilers.network.results import OutcomeStatus, ReconcileSummary, ResourceOutcome
from network_reconcilers.utils.errors import ErrorContext, error_handler, is_not_found
from network_reconcilers.utils.logging import get_logger

logger = get_logger(__name__)

ENI_RESOURCE_TYPE = 'AWS::EC2::NetworkInterface'
SECURITY_GROUP_RESOURCE_TYPE = 'AWS::EC2::SecurityGroup'


class DriftCleaner:
    """Finds and deletes interfaces and security groups left behind by a cluster.

    A resource is drifted when it lives in the target VPC and carries a
    security group named with the cluster's prefix. Deletion is best effort:
    every candidate is attempted and individual failures are only logged.
    """

    def __init__(self, service: EC2NetworkService):
        self.service = service

    def find_drifted_network_interfaces(self, vpc_id: str, cluster_name: str) -> List[NetworkInterface]:
        """Scan all interfaces and keep the cluster's leftovers in the VPC."""
        prefix = drift_prefix(cluster_name)
        return [
            eni for eni in self.service.list_network_interfaces()
            if eni.vpc_id == vpc_id and eni.has_group_prefixed(prefix)
        ]

    def find_drifted_security_groups(self, vpc_id: str, cluster_name: str) -> List[SecurityGroup]:
        """Scan the VPC's security groups and keep the cluster's leftovers."""
        prefix = drift_prefix(cluster_name)
        return [
            group for group in self.service.list_security_groups(vpc_id)
            if group.vpc_id == vpc_id and group.group_name.startswith(prefix)
        ]

    def delete_drifted_network_interfaces(self, vpc_id: str, cluster_name: str) -> ReconcileSummary:
        """Delete every drifted network interface.

        Returns:
            One outcome per interface
        """
        enis = self.find_drifted_network_interfaces(vpc_id, cluster_name)
        logger.info(
            "Plan is to delete the following enis: "
            + json.dumps([eni.network_interface_id for eni in enis])
        )
        summary = ReconcileSummary(operation='delete_drifted_network_interfaces')
        for eni in enis:
            summary.add(self._delete(
                eni.network_interface_id,
                ENI_RESOURCE_TYPE,
                self.service.delete_network_interface
            ))
        return summary

    def delete_drifted_security_groups(self, vpc_id: str, cluster_name: str) -> ReconcileSummary:
        """Delete every drifted security group.

        Returns:
            One outcome per security group
        """
        groups = self.find_drifted_security_groups(vpc_id, cluster_name)
        logger.info(
            "Plan is to delete the following security groups: "
            + json.dumps([{'GroupId': g.group_id, 'GroupName': g.group_name} for g in groups])
        )
        summary = ReconcileSummary(operation='delete_drifted_security_groups')
        for group in groups:
            summary.add(self._delete(
                group.group_id,
                SECURITY_GROUP_RESOURCE_TYPE,
                self.service.delete_security_group
            ))
        return summary

    def clean(self, vpc_id: str, cluster_name: str) -> ReconcileSummary:
        """Delete drifted interfaces, then drifted security groups.

        Interfaces go first since they keep their groups in use.
        """
        summary = ReconcileSummary(operation='clean')
        summary.extend(self.delete_drifted_network_interfaces(vpc_id, cluster_name))
        summary.extend(self.delete_drifted_security_groups(vpc_id, cluster_name))
        logger.info(
            f"Drift cleanup of {cluster_name} in {vpc_id}: {len(summary.succeeded)} deleted, "
            f"{len(summary.skipped)} already gone, {len(summary.failed)} failed"
        )
        return summary

    def _delete(
        self,
        resource_id: str,
        resource_type: str,
        delete: Callable[[str], None]
    ) -> ResourceOutcome:
        try:
            delete(resource_id)
        except Exception as e:
            if is_not_found(e):
                logger.info(f"{resource_type} {resource_id} is already deleted")
                return ResourceOutcome(resource_id, resource_type, OutcomeStatus.SKIPPED, message="already deleted")

            logger.error(f"Failed to delete {resource_type}: {resource_id}")
            error = error_handler.handle_exception(
                e, ErrorContext(resource_id=resource_id, resource_type=resource_type, operation='delete')
            )
            error_handler.log_error(error)
            return ResourceOutcome(resource_id, resource_type, OutcomeStatus.FAILED, message=error.message, error=e)

        logger.info(f"Deleted {resource_type} {resource_id}")
        return ResourceOutcome(resource_id, resource_type, OutcomeStatus.DELETED)
